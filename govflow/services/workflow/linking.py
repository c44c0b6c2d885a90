"""Reconciliation job linking purchase orders to the RFQs they award."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from govflow.core.logging import LogContext
from govflow.models.government_order import GovernmentOrder
from govflow.repositories.order_repository import OrderRepository
from govflow.repositories.rfq_repository import RfqRepository
from govflow.services.workflow.grouping import order_rfq_number
from govflow.services.workflow.rfq_numbers import RfqNumberResolver, normalize_rfq_number

logger = logging.getLogger(__name__)


@dataclass
class LinkResult:
    """Outcome for one order."""

    order_id: int
    po_number: str
    rfq_number: Optional[str]
    outcome: str
    rfq_document_id: Optional[int] = None


@dataclass
class LinkReport:
    """Summary of one run of the link repair job."""

    linked: int = 0
    not_found: int = 0
    backfilled: int = 0
    dry_run: bool = False
    results: list[LinkResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class OrderLinkingService:
    """
    Link orders to RFQs by the RFQ number printed on the order.

    Orders that already have a junction row are left alone, so running the job
    again links nothing new.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.order_repo = OrderRepository(db)
        self.rfq_repo = RfqRepository(db)

    async def find_unlinked(self) -> list[GovernmentOrder]:
        """Orders with an RFQ number but no junction row."""
        linked_ids = await self.order_repo.linked_order_ids()
        orders = await self.order_repo.get_multi(limit=100000)
        return [
            order
            for order in orders
            if order.id not in linked_ids
            and normalize_rfq_number(order_rfq_number(order)) is not None
        ]

    async def _legacy_only(self) -> list[GovernmentOrder]:
        linked_ids = await self.order_repo.linked_order_ids()
        orders = await self.order_repo.get_multi(limit=100000)
        return [
            order
            for order in orders
            if order.id not in linked_ids and order.rfq_document_id is not None
        ]

    async def _plan(self) -> tuple[list[LinkResult], list[LinkResult]]:
        """Decide every link up front as plain values."""
        rfqs = await self.rfq_repo.list_with_numbers()
        resolver = RfqNumberResolver(rfqs)
        existing_rfq_ids = {rfq.id for rfq in await self.rfq_repo.get_multi(limit=100000)}

        backfills = [
            LinkResult(
                order_id=order.id,
                po_number=order.po_number,
                rfq_number=order.rfq_number,
                outcome="backfilled",
                rfq_document_id=order.rfq_document_id,
            )
            for order in await self._legacy_only()
            if order.rfq_document_id in existing_rfq_ids
        ]
        backfilled_ids = {result.order_id for result in backfills}

        matches = []
        for order in await self.find_unlinked():
            if order.id in backfilled_ids:
                continue
            rfq_number = normalize_rfq_number(order_rfq_number(order))
            target = resolver.resolve(rfq_number)
            matches.append(
                LinkResult(
                    order_id=order.id,
                    po_number=order.po_number,
                    rfq_number=rfq_number,
                    outcome="linked" if target is not None else "not_found",
                    rfq_document_id=target.id if target is not None else None,
                )
            )
        return backfills, matches

    async def _apply(self, result: LinkResult, report: LinkReport) -> bool:
        order = await self.order_repo.get_by_id(result.order_id)
        if order is None:
            report.errors.append(f"{result.po_number}: order disappeared")
            return False
        try:
            await self.order_repo.link_order_to_rfq(order, result.rfq_document_id)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to link order %s: %s", result.po_number, e)
            report.errors.append(f"{result.po_number}: linking failed")
            return False
        return True

    async def link_unlinked_orders(self, dry_run: bool = False) -> LinkReport:
        """
        Run the repair job.

        Orders carrying only the legacy ``rfq_document_id`` get the matching
        junction row. Remaining unlinked orders are resolved by RFQ number,
        exact match first, then by numeric suffix. A failure on one order is
        recorded in ``errors`` and the job moves on.

        Args:
            dry_run: Report what would be linked without writing

        Returns:
            Counts and per-order outcomes
        """
        report = LinkReport(dry_run=dry_run)

        with LogContext(job="link_orders", dry_run=dry_run):
            backfills, matches = await self._plan()

            for result in backfills:
                if dry_run or await self._apply(result, report):
                    report.backfilled += 1
                    report.results.append(result)

            for result in matches:
                if result.outcome == "not_found":
                    report.not_found += 1
                    report.results.append(result)
                    continue
                if dry_run or await self._apply(result, report):
                    logger.info(
                        "Linked PO %s to RFQ document %s",
                        result.po_number,
                        result.rfq_document_id,
                    )
                    report.linked += 1
                    report.results.append(result)

        logger.info(
            "Link repair finished: %d linked, %d backfilled, %d not found",
            report.linked,
            report.backfilled,
            report.not_found,
        )
        return report
