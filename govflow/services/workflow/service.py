"""Workflow lookup, listing and dashboard statistics."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from govflow.core.config import Settings, get_settings
from govflow.core.exceptions import NotFoundError
from govflow.repositories.order_repository import FulfillmentRepository, OrderRepository
from govflow.repositories.rfq_repository import RfqRepository, RfqResponseRepository
from govflow.schemas.workflow import (
    LabelSummary,
    LinkedRfqSummary,
    OrderSummary,
    QualitySheetSummary,
    ResponseSummary,
    RfqSummary,
    TimelineEntry,
    WorkflowRecord,
)
from govflow.services.workflow.grouping import (
    WorkflowGroup,
    count_by_status,
    group_workflows,
    order_rfq_number,
)
from govflow.services.workflow.rfq_numbers import normalize_rfq_number
from govflow.services.workflow.status import WorkflowStatus, build_timeline, derive_status
from govflow.utils.datetime_utils import ensure_timezone_aware

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class _Evaluated:
    group: WorkflowGroup
    status: WorkflowStatus


class WorkflowService:
    """
    Read-side service over RFQ, response, order and fulfillment rows.

    Every call loads the rows once, groups them in memory and derives each
    workflow's status. Nothing is written back.
    """

    def __init__(self, db: AsyncSession, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or get_settings()
        self.rfq_repo = RfqRepository(db)
        self.response_repo = RfqResponseRepository(db)
        self.order_repo = OrderRepository(db)
        self.fulfillment_repo = FulfillmentRepository(db)

    async def _load_groups(self) -> list[WorkflowGroup]:
        limit = self.settings.workflow_list_limit
        rfqs = await self.rfq_repo.get_multi(limit=limit)
        orders = await self.order_repo.list_all(limit=limit)
        links = await self.order_repo.all_links()

        order_ids = [order.id for order in orders]
        responses = await self.response_repo.active_by_rfq([rfq.id for rfq in rfqs])
        sheets = await self.fulfillment_repo.quality_sheets_by_order(order_ids)
        labels = await self.fulfillment_repo.labels_by_order(order_ids)

        return group_workflows(rfqs, orders, links, responses, sheets, labels)

    def _evaluate(self, group: WorkflowGroup, now: Optional[datetime] = None) -> _Evaluated:
        status = derive_status(
            group.snapshot,
            now=now,
            lost_grace_days=self.settings.workflow_lost_grace_days,
        )
        return _Evaluated(group=group, status=status)

    def _find_group(self, groups: list[WorkflowGroup], identifier: str) -> Optional[WorkflowGroup]:
        candidate = identifier.strip()
        if not candidate:
            return None

        # 1. RFQ number, exact then normalized
        for group in groups:
            if group.rfq is not None and group.rfq.rfq_number == candidate:
                return group
        normalized = normalize_rfq_number(candidate)
        if normalized is not None:
            for group in groups:
                if group.rfq is not None and normalize_rfq_number(group.rfq.rfq_number) == normalized:
                    return group

        # 2. PO number; a PO spanning several RFQs opens the most recent one
        po_groups = [
            group
            for group in groups
            if any(order.po_number == candidate for order in group.orders)
        ]
        if po_groups:
            rfq_rooted = [group for group in po_groups if group.rfq is not None]
            if rfq_rooted:
                return max(rfq_rooted, key=lambda g: g.rfq.id)
            return po_groups[0]

        # 3. RFQ document id
        if candidate.isdigit():
            document_id = int(candidate)
            for group in groups:
                if group.rfq is not None and group.rfq.id == document_id:
                    return group
        return None

    def _to_record(self, evaluated: _Evaluated) -> WorkflowRecord:
        group = evaluated.group
        snapshot = group.snapshot
        rfq = snapshot.rfq
        response = snapshot.response

        orders_desc = sorted(snapshot.orders, key=lambda o: o.order.id, reverse=True)
        primary = orders_desc[0] if orders_desc else None
        po = primary.order if primary is not None else None
        quality_sheet = primary.quality_sheet if primary is not None else None

        verified_at = None
        if quality_sheet is not None:
            verified_at = quality_sheet.verified_at

        timeline = build_timeline(snapshot, evaluated.status)

        rfq_number = None
        if rfq is not None and rfq.rfq_number:
            rfq_number = rfq.rfq_number
        elif po is not None:
            raw_number = order_rfq_number(po)
            rfq_number = raw_number if isinstance(raw_number, str) else None

        return WorkflowRecord(
            rfq_number=rfq_number,
            po_number=po.po_number if po is not None else None,
            status=evaluated.status.value,
            status_label=evaluated.status.label,
            rfq=RfqSummary.model_validate(rfq) if rfq is not None else None,
            response=ResponseSummary.model_validate(response) if response is not None else None,
            po=OrderSummary.model_validate(po) if po is not None else None,
            quality_sheet=(
                QualitySheetSummary.model_validate(quality_sheet)
                if quality_sheet is not None
                else None
            ),
            labels=[LabelSummary.model_validate(label) for label in (primary.labels if primary else [])],
            linked_pos=[OrderSummary.model_validate(o.order) for o in orders_desc],
            linked_rfqs=[LinkedRfqSummary.model_validate(r) for r in group.linked_rfqs],
            timeline=[
                TimelineEntry(status=step.status.value, label=step.label, reached=step.reached, at=step.at)
                for step in timeline
            ],
            rfq_received_at=rfq.created_at if rfq is not None else None,
            response_submitted_at=response.submitted_at if response is not None else None,
            po_received_at=po.created_at if po is not None else None,
            verified_at=verified_at,
        )

    async def get_workflow(self, identifier: str) -> WorkflowRecord:
        """
        Look up one workflow.

        Args:
            identifier: RFQ number, PO number or RFQ document id, tried in that order

        Returns:
            The workflow record

        Raises:
            NotFoundError: If nothing matches the identifier
        """
        groups = await self._load_groups()
        group = self._find_group(groups, identifier)
        if group is None:
            raise NotFoundError(f"Workflow not found: {identifier}")
        return self._to_record(self._evaluate(group))

    async def list_workflows(
        self,
        status: Optional[WorkflowStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[WorkflowRecord]:
        """
        List workflows, most recent activity first.

        Args:
            status: Only return workflows in this status
            limit: Page size
            offset: Page start

        Returns:
            Workflow records
        """
        groups = await self._load_groups()
        evaluated = [self._evaluate(group) for group in groups]
        if status is not None:
            evaluated = [e for e in evaluated if e.status == status]

        evaluated.sort(
            key=lambda e: ensure_timezone_aware(e.group.last_activity) or _EPOCH,
            reverse=True,
        )
        page = evaluated[offset : offset + limit]
        return [self._to_record(e) for e in page]

    async def get_stats(self) -> dict[str, Any]:
        """Counts per status over every workflow."""
        groups = await self._load_groups()
        stats = count_by_status(
            groups,
            lost_grace_days=self.settings.workflow_lost_grace_days,
        )
        logger.debug("Workflow stats computed over %d workflows", stats["total"])
        return stats
