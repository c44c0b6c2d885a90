"""Schemas for order endpoints: link repair and fulfillment writes."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from govflow.models.government_order import OrderStage
from govflow.schemas.workflow import LabelSummary, OrderSummary, QualitySheetSummary


class LinkResultResponse(BaseModel):
    """Outcome for one order."""

    model_config = ConfigDict(from_attributes=True)

    order_id: int
    po_number: str
    rfq_number: Optional[str] = None
    outcome: str = Field(description="linked, backfilled or not_found")
    rfq_document_id: Optional[int] = None


class LinkReportResponse(BaseModel):
    """Summary of a link repair run."""

    model_config = ConfigDict(from_attributes=True)

    linked: int
    not_found: int
    backfilled: int
    dry_run: bool
    results: list[LinkResultResponse] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class UnlinkedOrdersResponse(BaseModel):
    """Orders waiting for the link repair job."""

    unlinked: int = Field(description="Orders with an RFQ number but no link")
    po_numbers: list[str] = Field(default_factory=list)


class OrderUpdateRequest(BaseModel):
    """Stage change and shipment details for an order."""

    stage: Optional[OrderStage] = Field(default=None, description="New fulfillment stage")
    tracking_number: Optional[str] = Field(default=None, min_length=1, max_length=100)


class QualitySheetRequest(BaseModel):
    """Quality sheet fields; omitted fields keep their stored value."""

    lot_number: Optional[str] = Field(default=None, max_length=100)
    checks: Optional[dict[str, Any]] = None
    verified_by: Optional[str] = Field(default=None, max_length=255, description="Inspector signature")
    verified_at: Optional[datetime] = None


class LabelRequest(BaseModel):
    """A label rendered for an order."""

    label_type: str = Field(min_length=1, max_length=50, description="e.g. box, bottle, shipping")
    file_key: Optional[str] = Field(default=None, max_length=500)
    verified_by: Optional[str] = Field(default=None, max_length=255)
    verified_at: Optional[datetime] = None


class OrderDetailResponse(BaseModel):
    """An order with its quality sheet and labels."""

    model_config = ConfigDict(from_attributes=True)

    order: OrderSummary
    quality_sheet: Optional[QualitySheetSummary] = None
    labels: list[LabelSummary] = Field(default_factory=list)
