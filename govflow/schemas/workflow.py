"""Workflow record schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

# Enum members read off in-memory ORM rows serialize as their value
StatusStr = Annotated[str, BeforeValidator(lambda v: getattr(v, "value", v))]


class RfqSummary(BaseModel):
    """RFQ document as shown in a workflow."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    file_name: str
    rfq_number: Optional[str] = None
    due_date: Optional[datetime] = None
    contracting_office: Optional[str] = None
    status: StatusStr
    extracted_fields: Optional[Any] = None
    created_at: Optional[datetime] = None


class LinkedRfqSummary(BaseModel):
    """Short form of an RFQ linked to an order."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    rfq_number: Optional[str] = None
    file_name: str
    due_date: Optional[datetime] = None
    status: StatusStr
    created_at: Optional[datetime] = None


class ResponseSummary(BaseModel):
    """Quote response as shown in a workflow."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    status: StatusStr
    generated_pdf_url: Optional[str] = None
    submitted_at: Optional[datetime] = None
    response_data: Optional[Any] = None
    created_at: Optional[datetime] = None


class OrderSummary(BaseModel):
    """Purchase order as shown in a workflow."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    po_number: str
    rfq_number: Optional[str] = None
    product_name: Optional[str] = None
    nsn: Optional[str] = None
    quantity: Optional[int] = None
    unit_price: Optional[Decimal] = None
    total_price: Optional[Decimal] = None
    status: StatusStr
    stage: Optional[StatusStr] = None
    tracking_number: Optional[str] = None
    shipped_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class QualitySheetSummary(BaseModel):
    """Quality sheet as shown in a workflow."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    lot_number: Optional[str] = None
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class LabelSummary(BaseModel):
    """Generated label as shown in a workflow."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    label_type: str
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class TimelineEntry(BaseModel):
    """One main-line step of a workflow."""

    model_config = ConfigDict(from_attributes=True)

    status: StatusStr
    label: str
    reached: bool
    at: Optional[datetime] = None


class WorkflowRecord(BaseModel):
    """Everything known about one RFQ-to-shipment cycle."""

    rfq_number: Optional[str] = Field(default=None, description="RFQ number of the primary RFQ")
    po_number: Optional[str] = Field(default=None, description="PO number of the primary order")
    status: StatusStr = Field(description="Derived workflow status")
    status_label: str = Field(description="Human readable status")

    rfq: Optional[RfqSummary] = None
    response: Optional[ResponseSummary] = None
    po: Optional[OrderSummary] = None
    quality_sheet: Optional[QualitySheetSummary] = None
    labels: list[LabelSummary] = Field(default_factory=list)

    linked_pos: list[OrderSummary] = Field(default_factory=list)
    linked_rfqs: list[LinkedRfqSummary] = Field(default_factory=list)
    timeline: list[TimelineEntry] = Field(default_factory=list)

    rfq_received_at: Optional[datetime] = None
    response_submitted_at: Optional[datetime] = None
    po_received_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None


class WorkflowStats(BaseModel):
    """Workflow counts per status."""

    total: int
    by_status: dict[str, int]
