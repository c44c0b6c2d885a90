"""Derive a single pipeline status from the records of one workflow.

A workflow is an RFQ and everything linked to it: its active response, its
orders (junction table and legacy column, deduplicated) and each order's
quality sheet and labels. Derivation is pure: no I/O, no writes.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from govflow.models.fulfillment import GeneratedLabel, QualitySheet
from govflow.models.government_order import GovernmentOrder, OrderStage, OrderStatus
from govflow.models.rfq_document import RfqDocument
from govflow.models.rfq_response import ResponseStatus, RfqResponse
from govflow.schemas.extracted_fields import RfqExtractedFields
from govflow.utils.datetime_utils import ensure_timezone_aware, utc_now

DEFAULT_LOST_GRACE_DAYS = 30


class WorkflowStatus(str, Enum):
    """Pipeline status of a workflow."""

    RFQ_RECEIVED = "rfq_received"
    RESPONSE_DRAFT = "response_draft"
    RESPONSE_SUBMITTED = "response_submitted"
    NO_BID = "no_bid"
    EXPIRED = "expired"
    LOST = "lost"
    PO_RECEIVED = "po_received"
    IN_FULFILLMENT = "in_fulfillment"
    VERIFIED = "verified"
    SHIPPED = "shipped"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


STATUS_LABELS = {
    WorkflowStatus.RFQ_RECEIVED: "Awaiting Response",
    WorkflowStatus.RESPONSE_DRAFT: "Response In Progress",
    WorkflowStatus.RESPONSE_SUBMITTED: "Awaiting PO",
    WorkflowStatus.NO_BID: "No Bid",
    WorkflowStatus.EXPIRED: "Expired",
    WorkflowStatus.LOST: "Lost",
    WorkflowStatus.PO_RECEIVED: "PO Received",
    WorkflowStatus.IN_FULFILLMENT: "In Fulfillment",
    WorkflowStatus.VERIFIED: "Verified",
    WorkflowStatus.SHIPPED: "Shipped",
}

# Order-driven statuses, least advanced first
ORDER_PROGRESSION = [
    WorkflowStatus.PO_RECEIVED,
    WorkflowStatus.IN_FULFILLMENT,
    WorkflowStatus.VERIFIED,
    WorkflowStatus.SHIPPED,
]

_FULFILLMENT_STAGES = {OrderStage.SOURCING.value, OrderStage.FULFILLING.value, OrderStage.QC.value}
_FULFILLMENT_STATUSES = {
    OrderStatus.QUALITY_SHEET_CREATED.value,
    OrderStatus.LABELS_GENERATED.value,
}
_SUBMITTED_RESPONSE_STATUSES = {ResponseStatus.SUBMITTED.value, ResponseStatus.COMPLETED.value}


@dataclass
class OrderSnapshot:
    """One order with its fulfillment artifacts."""

    order: GovernmentOrder
    quality_sheet: Optional[QualitySheet] = None
    labels: list[GeneratedLabel] = field(default_factory=list)

    @property
    def has_artifacts(self) -> bool:
        return self.quality_sheet is not None or bool(self.labels)

    @property
    def has_verification_signature(self) -> bool:
        if self.quality_sheet is not None and self.quality_sheet.is_verified:
            return True
        return any(label.is_verified for label in self.labels)


@dataclass
class WorkflowSnapshot:
    """Every record reachable from one workflow key."""

    rfq: Optional[RfqDocument] = None
    response: Optional[RfqResponse] = None
    orders: list[OrderSnapshot] = field(default_factory=list)


@dataclass
class TimelineStep:
    """One step of the main pipeline with its completion time when known."""

    status: WorkflowStatus
    label: str
    reached: bool
    at: Optional[datetime] = None


def _value(enum_or_str) -> Optional[str]:
    if enum_or_str is None:
        return None
    return getattr(enum_or_str, "value", enum_or_str)


def rfq_due_date(rfq: Optional[RfqDocument]) -> Optional[datetime]:
    """Due date from the column, falling back to the extracted fields."""
    if rfq is None:
        return None
    if rfq.due_date is not None:
        return ensure_timezone_aware(rfq.due_date)
    return RfqExtractedFields.from_raw(rfq.extracted_fields).due_date


def response_is_submitted(response: Optional[RfqResponse]) -> bool:
    return response is not None and _value(response.status) in _SUBMITTED_RESPONSE_STATUSES


def order_status(snapshot: OrderSnapshot) -> WorkflowStatus:
    """
    Status contributed by a single order, checked from most advanced down.

    Both the fulfillment ``stage`` and the coarser legacy ``status`` are read so
    rows written before stages existed still classify correctly.
    """
    order = snapshot.order
    stage = _value(order.stage)
    legacy = _value(order.status)

    if (
        stage == OrderStage.CLOSED.value
        or (stage == OrderStage.SHIP.value and order.has_shipped_marker)
        or legacy == OrderStatus.SHIPPED.value
    ):
        return WorkflowStatus.SHIPPED

    if (
        stage in (OrderStage.VERIFIED.value, OrderStage.SHIP.value)
        or legacy == OrderStatus.VERIFIED.value
        or snapshot.has_verification_signature
    ):
        return WorkflowStatus.VERIFIED

    if (
        snapshot.has_artifacts
        or stage in _FULFILLMENT_STAGES
        or legacy in _FULFILLMENT_STATUSES
    ):
        return WorkflowStatus.IN_FULFILLMENT

    return WorkflowStatus.PO_RECEIVED


def derive_status(
    snapshot: WorkflowSnapshot,
    now: Optional[datetime] = None,
    lost_grace_days: int = DEFAULT_LOST_GRACE_DAYS,
) -> WorkflowStatus:
    """
    Compute the current status of a workflow.

    Any linked order puts the workflow on the order track, which overrides
    no-bid, expired and lost. With several orders the least advanced one
    decides. Without orders: no-bid, then expired (due date passed and nothing
    submitted), then lost (submitted longer ago than the grace period), then
    the response state, with ``rfq_received`` as the floor.

    Args:
        snapshot: Records of one workflow
        now: Evaluation time (defaults to the current UTC time)
        lost_grace_days: Days after submission before a quote counts as lost

    Returns:
        One of the ``WorkflowStatus`` values, never None
    """
    now = ensure_timezone_aware(now) if now is not None else utc_now()

    if snapshot.orders:
        statuses = [order_status(order) for order in snapshot.orders]
        return min(statuses, key=ORDER_PROGRESSION.index)

    response = snapshot.response
    if response is not None and response.is_no_bid:
        return WorkflowStatus.NO_BID

    submitted = response_is_submitted(response)

    due_date = rfq_due_date(snapshot.rfq)
    if due_date is not None and due_date < now and not submitted:
        return WorkflowStatus.EXPIRED

    if submitted:
        submitted_at = ensure_timezone_aware(response.submitted_at)
        if submitted_at is not None and now - submitted_at > timedelta(days=lost_grace_days):
            return WorkflowStatus.LOST
        return WorkflowStatus.RESPONSE_SUBMITTED

    if response is not None:
        return WorkflowStatus.RESPONSE_DRAFT

    return WorkflowStatus.RFQ_RECEIVED


def _earliest(*values: Optional[datetime]) -> Optional[datetime]:
    present = [ensure_timezone_aware(v) for v in values if v is not None]
    return min(present) if present else None


def build_timeline(snapshot: WorkflowSnapshot, status: WorkflowStatus) -> list[TimelineStep]:
    """
    Main-line steps with whether each was reached and when.

    Side states (no-bid, expired, lost) are reported by ``status``; the timeline
    still shows how far the main line got before it.
    """
    rfq = snapshot.rfq
    response = snapshot.response
    order_rows = [o.order for o in snapshot.orders]
    sheets = [o.quality_sheet for o in snapshot.orders if o.quality_sheet is not None]
    labels = [label for o in snapshot.orders for label in o.labels]

    order_level = (
        ORDER_PROGRESSION.index(status) if status in ORDER_PROGRESSION else -1
    )

    steps = [
        TimelineStep(
            status=WorkflowStatus.RFQ_RECEIVED,
            label="RFQ Received",
            reached=rfq is not None,
            at=ensure_timezone_aware(rfq.created_at) if rfq is not None else None,
        ),
        TimelineStep(
            status=WorkflowStatus.RESPONSE_DRAFT,
            label="Response Drafted",
            reached=response is not None,
            at=ensure_timezone_aware(response.created_at) if response is not None else None,
        ),
        TimelineStep(
            status=WorkflowStatus.RESPONSE_SUBMITTED,
            label="Quote Submitted",
            reached=response_is_submitted(response),
            at=ensure_timezone_aware(response.submitted_at) if response is not None else None,
        ),
        TimelineStep(
            status=WorkflowStatus.PO_RECEIVED,
            label="PO Received",
            reached=bool(order_rows),
            at=_earliest(*(o.created_at for o in order_rows)),
        ),
        TimelineStep(
            status=WorkflowStatus.IN_FULFILLMENT,
            label="In Fulfillment",
            reached=order_level >= 1,
            at=_earliest(*(s.created_at for s in sheets), *(lb.created_at for lb in labels)),
        ),
        TimelineStep(
            status=WorkflowStatus.VERIFIED,
            label="Verified",
            reached=order_level >= 2,
            at=_earliest(*(s.verified_at for s in sheets), *(lb.verified_at for lb in labels)),
        ),
        TimelineStep(
            status=WorkflowStatus.SHIPPED,
            label="Shipped",
            reached=order_level >= 3,
            at=_earliest(*(o.shipped_at for o in order_rows)),
        ),
    ]
    for step in steps:
        if not step.reached:
            step.at = None
    return steps
