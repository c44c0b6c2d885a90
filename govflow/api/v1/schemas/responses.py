"""Schemas for saving quote responses."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from govflow.models.rfq_response import ResponseStatus
from govflow.schemas.workflow import StatusStr


class QuoteResponseRequest(BaseModel):
    """Quote contents for an RFQ."""

    response_data: dict[str, Any] = Field(description="Quote fields and line-item pricing")
    status: ResponseStatus = Field(
        default=ResponseStatus.DRAFT,
        description="draft while editing, submitted once sent to the buyer",
    )


class NoBidRequest(BaseModel):
    """Decision not to quote."""

    reason: str = Field(min_length=1, max_length=500)


class QuoteResponse(BaseModel):
    """Stored quote response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    rfq_document_id: Optional[int] = None
    status: StatusStr
    response_data: Optional[dict[str, Any]] = None
    is_no_bid: bool = False
    submitted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
