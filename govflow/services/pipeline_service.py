"""Dashboard counters for the RFQ and order pipeline."""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from govflow.models.government_order import GovernmentOrder, OrderStage
from govflow.models.rfq_document import RfqDocument, RfqDocumentStatus
from govflow.repositories.rfq_repository import RfqResponseRepository


class PipelineService:
    """Counts of work waiting on the operator."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.response_repo = RfqResponseRepository(db)

    async def get_stats(self) -> dict[str, Any]:
        """
        Pipeline counters.

        ``action_required`` adds processed RFQs without a submitted or
        completed response to orders whose stage is not ``closed``.
        """
        answered = await self.response_repo.rfq_ids_with_submission()

        processed = await self.db.execute(
            select(RfqDocument.id)
            .where(RfqDocument.deleted_at.is_(None))
            .where(RfqDocument.status == RfqDocumentStatus.PROCESSED.value)
        )
        rfqs_needing_response = sum(1 for rfq_id in processed.scalars() if rfq_id not in answered)

        total_rfqs = await self.db.execute(
            select(func.count(RfqDocument.id)).where(RfqDocument.deleted_at.is_(None))
        )

        stage_rows = await self.db.execute(
            select(GovernmentOrder.stage, func.count(GovernmentOrder.id))
            .where(GovernmentOrder.deleted_at.is_(None))
            .group_by(GovernmentOrder.stage)
        )
        orders_by_stage: dict[str, int] = {}
        for stage, count in stage_rows.all():
            key = stage or OrderStage.RECEIVED.value
            orders_by_stage[key] = orders_by_stage.get(key, 0) + int(count)

        total_orders = sum(orders_by_stage.values())
        open_orders = total_orders - orders_by_stage.get(OrderStage.CLOSED.value, 0)

        return {
            "action_required": rfqs_needing_response + open_orders,
            "rfqs_needing_response": rfqs_needing_response,
            "open_orders": open_orders,
            "rfqs": int(total_rfqs.scalar_one()),
            "orders": total_orders,
            "orders_by_stage": orders_by_stage,
        }
