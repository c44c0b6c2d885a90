"""Quote response endpoints for RFQ documents."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from govflow.api.v1.schemas.responses import NoBidRequest, QuoteResponse, QuoteResponseRequest
from govflow.core.exceptions import NotFoundError
from govflow.db.session import get_async_db
from govflow.services.response_service import QuoteResponseService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rfqs", tags=["Quote Responses"])


@router.get(
    "/{rfq_id}/response",
    response_model=Optional[QuoteResponse],
    summary="Get quote response",
    description="The active quote for an RFQ, or null when none was saved",
    responses={404: {"description": "RFQ not found"}},
)
async def get_quote_response(
    rfq_id: int,
    db: AsyncSession = Depends(get_async_db),
) -> Optional[QuoteResponse]:
    try:
        response = await QuoteResponseService(db).get_response(rfq_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="RFQ not found")
    except Exception:
        logger.exception("Failed to fetch response for RFQ %s", rfq_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch response",
        )
    return QuoteResponse.model_validate(response) if response is not None else None


@router.post(
    "/{rfq_id}/response",
    response_model=QuoteResponse,
    summary="Save quote response",
    description="Create or replace the quote for an RFQ",
    responses={404: {"description": "RFQ not found"}, 422: {"description": "Validation error"}},
)
async def save_quote_response(
    rfq_id: int,
    request: QuoteResponseRequest,
    db: AsyncSession = Depends(get_async_db),
) -> QuoteResponse:
    """
    Save the quote.

    Send ``status: submitted`` once the quote has gone to the buyer; the
    workflow then waits for a purchase order.
    """
    try:
        response = await QuoteResponseService(db).save_response(
            rfq_id, request.response_data, status=request.status
        )
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="RFQ not found")
    except Exception:
        logger.exception("Failed to save response for RFQ %s", rfq_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save response",
        )
    return QuoteResponse.model_validate(response)


@router.post(
    "/{rfq_id}/no-bid",
    response_model=QuoteResponse,
    summary="Decline to quote",
    description="Mark the RFQ as no bid with a reason",
    responses={404: {"description": "RFQ not found"}},
)
async def mark_no_bid(
    rfq_id: int,
    request: NoBidRequest,
    db: AsyncSession = Depends(get_async_db),
) -> QuoteResponse:
    try:
        response = await QuoteResponseService(db).mark_no_bid(rfq_id, request.reason)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="RFQ not found")
    except Exception:
        logger.exception("Failed to mark RFQ %s as no bid", rfq_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save no-bid decision",
        )
    return QuoteResponse.model_validate(response)
