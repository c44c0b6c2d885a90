"""Repositories for RFQ documents and quote responses."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from govflow.models.rfq_document import RfqDocument
from govflow.models.rfq_response import ResponseStatus, RfqResponse
from govflow.repositories.base import BaseRepository


class RfqRepository(BaseRepository[RfqDocument]):
    """Repository for RfqDocument with RFQ-number lookups."""

    def __init__(self, db_session: AsyncSession):
        """Initialize RFQ repository."""
        super().__init__(RfqDocument, db_session)

    async def list_with_numbers(self) -> list[RfqDocument]:
        """All live RFQs that have an RFQ number, in insertion order."""
        query = (
            select(RfqDocument)
            .where(RfqDocument.deleted_at.is_(None))
            .where(RfqDocument.rfq_number.is_not(None))
            .order_by(RfqDocument.id.asc())
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_recent(self, limit: int) -> list[RfqDocument]:
        """Most recently created RFQs first."""
        query = (
            select(RfqDocument)
            .where(RfqDocument.deleted_at.is_(None))
            .order_by(RfqDocument.id.desc())
            .limit(limit)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())


class RfqResponseRepository(BaseRepository[RfqResponse]):
    """Repository for RfqResponse."""

    def __init__(self, db_session: AsyncSession):
        """Initialize response repository."""
        super().__init__(RfqResponse, db_session)

    async def get_active_for_rfq(self, rfq_document_id: int) -> Optional[RfqResponse]:
        """The most recent response for an RFQ."""
        query = (
            select(RfqResponse)
            .where(RfqResponse.deleted_at.is_(None))
            .where(RfqResponse.rfq_document_id == rfq_document_id)
            .order_by(RfqResponse.id.desc())
            .limit(1)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def active_by_rfq(self, rfq_document_ids: list[int]) -> dict[int, RfqResponse]:
        """Map each RFQ id to its most recent response."""
        if not rfq_document_ids:
            return {}
        query = (
            select(RfqResponse)
            .where(RfqResponse.deleted_at.is_(None))
            .where(RfqResponse.rfq_document_id.in_(rfq_document_ids))
            .order_by(RfqResponse.id.asc())
        )
        result = await self.db.execute(query)
        responses: dict[int, RfqResponse] = {}
        for response in result.scalars().all():
            # Later ids overwrite earlier ones
            responses[response.rfq_document_id] = response
        return responses

    async def rfq_ids_with_submission(self) -> set[int]:
        """RFQ ids that have a submitted or completed response."""
        query = (
            select(RfqResponse.rfq_document_id)
            .where(RfqResponse.deleted_at.is_(None))
            .where(RfqResponse.rfq_document_id.is_not(None))
            .where(
                RfqResponse.status.in_(
                    [ResponseStatus.SUBMITTED.value, ResponseStatus.COMPLETED.value]
                )
            )
        )
        result = await self.db.execute(query)
        return {row for row in result.scalars().all()}
