"""Group RFQs and orders into workflows and aggregate their statuses."""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from govflow.models.fulfillment import GeneratedLabel, QualitySheet
from govflow.models.government_order import GovernmentOrder, GovernmentOrderRfqLink
from govflow.models.rfq_document import RfqDocument
from govflow.models.rfq_response import RfqResponse
from govflow.services.workflow.rfq_numbers import RfqNumberResolver
from govflow.services.workflow.status import (
    DEFAULT_LOST_GRACE_DAYS,
    OrderSnapshot,
    WorkflowSnapshot,
    WorkflowStatus,
    derive_status,
)
from govflow.utils.datetime_utils import ensure_timezone_aware


def order_rfq_number(order: GovernmentOrder) -> Optional[Any]:
    """RFQ number printed on an order, from the column or the extracted data."""
    if order.rfq_number:
        return order.rfq_number
    data = order.extracted_data if isinstance(order.extracted_data, dict) else {}
    return data.get("rfqNumber")


@dataclass
class WorkflowGroup:
    """A workflow snapshot plus the RFQs its orders point at."""

    snapshot: WorkflowSnapshot
    linked_rfqs: list[RfqDocument] = field(default_factory=list)

    @property
    def rfq(self) -> Optional[RfqDocument]:
        return self.snapshot.rfq

    @property
    def orders(self) -> list[GovernmentOrder]:
        return [o.order for o in self.snapshot.orders]

    @property
    def last_activity(self) -> Optional[datetime]:
        candidates = [o.created_at for o in self.orders]
        if self.snapshot.response is not None:
            candidates.append(self.snapshot.response.submitted_at)
        if self.rfq is not None:
            candidates.append(self.rfq.created_at)
        present = [ensure_timezone_aware(c) for c in candidates if c is not None]
        return max(present) if present else None


def group_workflows(
    rfqs: Iterable[RfqDocument],
    orders: Iterable[GovernmentOrder],
    links: Iterable[GovernmentOrderRfqLink],
    responses_by_rfq: Mapping[int, RfqResponse],
    sheets_by_order: Mapping[int, QualitySheet],
    labels_by_order: Mapping[int, list[GeneratedLabel]],
) -> list[WorkflowGroup]:
    """
    Build one group per RFQ plus one per order that reaches no RFQ.

    An order joins the groups of every RFQ it is linked to through the junction
    table or the legacy column. An order with neither joins the RFQ its printed
    RFQ number resolves to; this is read-only and writes no link.

    Returns:
        RFQ-rooted groups in RFQ id order, then orphan order groups
    """
    rfq_list = sorted(rfqs, key=lambda r: r.id)
    rfq_by_id = {rfq.id: rfq for rfq in rfq_list}
    resolver = RfqNumberResolver(rfq_list)

    rfq_ids_by_order: dict[int, list[int]] = defaultdict(list)
    for link in links:
        if link.rfq_document_id in rfq_by_id:
            ids = rfq_ids_by_order[link.government_order_id]
            if link.rfq_document_id not in ids:
                ids.append(link.rfq_document_id)

    orders_by_rfq: dict[int, list[GovernmentOrder]] = defaultdict(list)
    orphans: list[GovernmentOrder] = []
    resolved_rfq_ids: dict[int, list[int]] = {}

    for order in sorted(orders, key=lambda o: o.id):
        rfq_ids = list(rfq_ids_by_order.get(order.id, []))
        if order.rfq_document_id in rfq_by_id and order.rfq_document_id not in rfq_ids:
            rfq_ids.append(order.rfq_document_id)

        if not rfq_ids:
            resolved = resolver.resolve(order_rfq_number(order))
            if resolved is not None:
                rfq_ids = [resolved.id]

        if not rfq_ids:
            orphans.append(order)
            continue
        resolved_rfq_ids[order.id] = rfq_ids
        for rfq_id in rfq_ids:
            orders_by_rfq[rfq_id].append(order)

    def snapshot_orders(group_orders: list[GovernmentOrder]) -> list[OrderSnapshot]:
        return [
            OrderSnapshot(
                order=order,
                quality_sheet=sheets_by_order.get(order.id),
                labels=list(labels_by_order.get(order.id, [])),
            )
            for order in group_orders
        ]

    def linked_rfqs(rfq: RfqDocument, group_orders: list[GovernmentOrder]) -> list[RfqDocument]:
        # RFQs of the most recent order, e.g. a consolidated PO
        if not group_orders:
            return [rfq]
        return [rfq_by_id[i] for i in resolved_rfq_ids[group_orders[-1].id]]

    groups = [
        WorkflowGroup(
            snapshot=WorkflowSnapshot(
                rfq=rfq,
                response=responses_by_rfq.get(rfq.id),
                orders=snapshot_orders(orders_by_rfq.get(rfq.id, [])),
            ),
            linked_rfqs=linked_rfqs(rfq, orders_by_rfq.get(rfq.id, [])),
        )
        for rfq in rfq_list
    ]
    groups.extend(
        WorkflowGroup(snapshot=WorkflowSnapshot(orders=snapshot_orders([order])))
        for order in orphans
    )
    return groups


def count_by_status(
    groups: Iterable[WorkflowGroup],
    now: Optional[datetime] = None,
    lost_grace_days: int = DEFAULT_LOST_GRACE_DAYS,
) -> dict[str, Any]:
    """
    Dashboard counts for a full scan of workflows.

    Returns:
        ``{"total": n, "by_status": {status: count}}`` with every status present
    """
    by_status = {status.value: 0 for status in WorkflowStatus}
    total = 0
    for group in groups:
        status = derive_status(group.snapshot, now=now, lost_grace_days=lost_grace_days)
        by_status[status.value] += 1
        total += 1
    return {"total": total, "by_status": by_status}
