"""Save quote responses against RFQ documents."""

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from govflow.core.exceptions import NotFoundError
from govflow.models.rfq_document import RfqDocument
from govflow.models.rfq_response import ResponseStatus, RfqResponse
from govflow.repositories.rfq_repository import RfqRepository, RfqResponseRepository
from govflow.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)


class QuoteResponseService:
    """
    Write side of the quote stage.

    Each RFQ has one active response (the most recent row). Saving updates it
    in place; the first save creates it.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.rfq_repo = RfqRepository(db)
        self.response_repo = RfqResponseRepository(db)

    async def _get_rfq(self, rfq_id: int) -> RfqDocument:
        rfq = await self.rfq_repo.get_by_id(rfq_id)
        if rfq is None:
            raise NotFoundError(f"RFQ document {rfq_id} not found")
        return rfq

    async def get_response(self, rfq_id: int) -> Optional[RfqResponse]:
        """
        Active response for an RFQ, or None when nothing was saved yet.

        Raises:
            NotFoundError: If the RFQ does not exist
        """
        await self._get_rfq(rfq_id)
        return await self.response_repo.get_active_for_rfq(rfq_id)

    async def save_response(
        self,
        rfq_id: int,
        response_data: dict[str, Any],
        status: ResponseStatus = ResponseStatus.DRAFT,
    ) -> RfqResponse:
        """
        Create or replace the quote for an RFQ.

        ``submitted_at`` is stamped the first time the response leaves draft
        and cleared when it goes back to draft.

        Args:
            rfq_id: RFQ document id
            response_data: Quote fields, pricing and the optional no-bid flag
            status: draft, submitted or completed

        Returns:
            The stored response

        Raises:
            NotFoundError: If the RFQ does not exist
        """
        await self._get_rfq(rfq_id)
        response = await self.response_repo.get_active_for_rfq(rfq_id)

        if status == ResponseStatus.DRAFT:
            submitted_at = None
        elif response is not None and response.submitted_at is not None:
            submitted_at = response.submitted_at
        else:
            submitted_at = utc_now()

        if response is None:
            logger.info("Creating %s response for RFQ %s", status.value, rfq_id)
            return await self.response_repo.create(
                rfq_document_id=rfq_id,
                response_data=response_data,
                status=status.value,
                submitted_at=submitted_at,
            )

        logger.info("Updating response %s for RFQ %s to %s", response.id, rfq_id, status.value)
        return await self.response_repo.update(
            response.id,
            {
                "response_data": response_data,
                "status": status.value,
                "submitted_at": submitted_at,
            },
        )

    async def mark_no_bid(self, rfq_id: int, reason: str) -> RfqResponse:
        """
        Record the decision not to quote.

        The flag lives in ``response_data`` next to whatever quote fields were
        already saved; the response status is left unchanged.

        Raises:
            NotFoundError: If the RFQ does not exist
        """
        await self._get_rfq(rfq_id)
        response = await self.response_repo.get_active_for_rfq(rfq_id)
        existing = response.response_data if response is not None else None
        data = dict(existing) if isinstance(existing, dict) else {}
        data.update({"noBid": True, "noBidReason": reason})

        logger.info("Marking RFQ %s as no bid", rfq_id)
        if response is None:
            return await self.response_repo.create(
                rfq_document_id=rfq_id,
                response_data=data,
                status=ResponseStatus.DRAFT.value,
            )
        return await self.response_repo.update(response.id, {"response_data": data})
