"""Quote response model."""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from govflow.db.base import BaseModel


class ResponseStatus(str, Enum):
    """Quote response status enumeration."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    COMPLETED = "completed"


class RfqResponse(BaseModel):
    """Vendor quote prepared against an RFQ document."""

    __tablename__ = "rfq_responses"

    rfq_document_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("rfq_documents.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    response_data: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
        comment="Quote fields, line-item pricing and the noBid flag",
    )
    generated_pdf_key: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )
    generated_pdf_url: Mapped[Optional[str]] = mapped_column(
        String(1000),
        nullable=True,
    )

    status: Mapped[ResponseStatus] = mapped_column(
        String(20),
        nullable=False,
        default=ResponseStatus.DRAFT,
        index=True,
    )
    submitted_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<RfqResponse(id={self.id}, rfq_document_id={self.rfq_document_id}, status={self.status})>"

    @property
    def is_no_bid(self) -> bool:
        """Check the application-level no-bid flag inside response data."""
        data = self.response_data if isinstance(self.response_data, dict) else {}
        if data.get("noBid") is True:
            return True
        reason = data.get("noBidReason")
        return isinstance(reason, str) and bool(reason.strip())
