"""RFQ document model."""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from govflow.db.base import BaseModel


class RfqDocumentStatus(str, Enum):
    """RFQ document processing status enumeration."""

    PROCESSING = "processing"
    PROCESSED = "processed"
    EXTRACTION_FAILED = "extraction_failed"
    FAILED = "failed"


class RfqDocument(BaseModel):
    """Uploaded or mailbox-ingested Request for Quote."""

    __tablename__ = "rfq_documents"

    # File information
    file_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    file_size: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="File size in bytes",
    )
    mime_type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default="application/pdf",
    )
    s3_key: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
        comment="Object storage key of the original PDF",
    )

    # Extraction
    extracted_text: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    extracted_fields: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
        comment="Open-ended structure returned by the extraction adapter",
    )
    rfq_number: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        index=True,
    )
    due_date: Mapped[Optional[datetime]] = mapped_column(
        nullable=True,
        index=True,
    )
    contracting_office: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    # Processing status
    status: Mapped[RfqDocumentStatus] = mapped_column(
        String(20),
        nullable=False,
        default=RfqDocumentStatus.PROCESSING,
        index=True,
    )
    processing_error: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<RfqDocument(id={self.id}, rfq_number={self.rfq_number}, status={self.status})>"
