"""Repositories for purchase orders, RFQ links and fulfillment artifacts."""

from collections import defaultdict
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from govflow.models.fulfillment import GeneratedLabel, QualitySheet
from govflow.models.government_order import GovernmentOrder, GovernmentOrderRfqLink
from govflow.repositories.base import BaseRepository
from govflow.utils.datetime_utils import utc_now


class OrderRepository(BaseRepository[GovernmentOrder]):
    """
    Repository for GovernmentOrder and its RFQ links.

    The junction table is the source of truth for order/RFQ links. The
    ``rfq_document_id`` column on the order is a cached projection that is only
    ever written by ``link_order_to_rfq`` in the same transaction.
    """

    def __init__(self, db_session: AsyncSession):
        """Initialize order repository."""
        super().__init__(GovernmentOrder, db_session)

    async def list_all(self, limit: int) -> list[GovernmentOrder]:
        """Live orders in insertion order."""
        return await self.get_multi(skip=0, limit=limit)

    async def all_links(self) -> list[GovernmentOrderRfqLink]:
        """Every junction row, in insertion order."""
        result = await self.db.execute(
            select(GovernmentOrderRfqLink).order_by(GovernmentOrderRfqLink.id.asc())
        )
        return list(result.scalars().all())

    async def linked_order_ids(self) -> set[int]:
        """Ids of orders that have at least one junction row."""
        result = await self.db.execute(
            select(GovernmentOrderRfqLink.government_order_id).distinct()
        )
        return set(result.scalars().all())

    async def has_link(self, order_id: int, rfq_document_id: int) -> bool:
        result = await self.db.execute(
            select(func.count(GovernmentOrderRfqLink.id))
            .where(GovernmentOrderRfqLink.government_order_id == order_id)
            .where(GovernmentOrderRfqLink.rfq_document_id == rfq_document_id)
        )
        return result.scalar_one() > 0

    async def link_order_to_rfq(
        self,
        order: GovernmentOrder,
        rfq_document_id: int,
        commit: bool = True,
    ) -> bool:
        """
        Link an order to an RFQ.

        Inserts the junction row when missing and fills the legacy
        ``rfq_document_id`` column when it is still empty, both in one
        transaction.

        Args:
            order: Order to link
            rfq_document_id: Target RFQ document id
            commit: Commit at the end (False lets a caller batch several links)

        Returns:
            True if a junction row was written, False if it already existed
        """
        created = False
        if not await self.has_link(order.id, rfq_document_id):
            self.db.add(
                GovernmentOrderRfqLink(
                    government_order_id=order.id,
                    rfq_document_id=rfq_document_id,
                )
            )
            created = True

        if order.rfq_document_id is None:
            order.rfq_document_id = rfq_document_id
            order.updated_at = utc_now()

        if commit:
            await self.db.commit()
        else:
            await self.db.flush()
        return created


class FulfillmentRepository:
    """Quality sheets and labels, keyed by order id."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def quality_sheets_by_order(self, order_ids: list[int]) -> dict[int, QualitySheet]:
        if not order_ids:
            return {}
        result = await self.db.execute(
            select(QualitySheet)
            .where(QualitySheet.deleted_at.is_(None))
            .where(QualitySheet.order_id.in_(order_ids))
            .order_by(QualitySheet.id.asc())
        )
        return {sheet.order_id: sheet for sheet in result.scalars().all()}

    async def labels_by_order(self, order_ids: list[int]) -> dict[int, list[GeneratedLabel]]:
        if not order_ids:
            return {}
        result = await self.db.execute(
            select(GeneratedLabel)
            .where(GeneratedLabel.deleted_at.is_(None))
            .where(GeneratedLabel.order_id.in_(order_ids))
            .order_by(GeneratedLabel.id.asc())
        )
        labels: dict[int, list[GeneratedLabel]] = defaultdict(list)
        for label in result.scalars().all():
            labels[label.order_id].append(label)
        return dict(labels)

    async def get_quality_sheet(self, order_id: int) -> Optional[QualitySheet]:
        return (await self.quality_sheets_by_order([order_id])).get(order_id)

    async def get_labels(self, order_id: int) -> list[GeneratedLabel]:
        return (await self.labels_by_order([order_id])).get(order_id, [])
