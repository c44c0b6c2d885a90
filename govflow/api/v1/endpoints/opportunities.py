"""SAM.gov opportunity endpoints: triage list, sync and status changes."""

import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from govflow.api.v1.schemas.opportunities import (
    OpportunityListResponse,
    OpportunityResponse,
    OpportunityStats,
    OpportunityStatusUpdate,
    SyncResponse,
)
from govflow.core.exceptions import ConfigurationError
from govflow.db.session import get_async_db
from govflow.repositories.opportunity_repository import OpportunityRepository
from govflow.services.opportunities.sam_gov_client import SamGovClient
from govflow.services.opportunities.sync_service import OpportunitySyncService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/opportunities", tags=["Opportunities"])


async def get_sam_gov_client() -> AsyncGenerator[SamGovClient, None]:
    """SAM.gov client for the duration of one request."""
    try:
        client = SamGovClient()
    except ConfigurationError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="SAM.gov API key is not configured",
        )
    async with client:
        yield client


@router.get(
    "",
    response_model=OpportunityListResponse,
    summary="List opportunities",
    description="Solicitations ordered by relevance score, then response deadline",
)
async def list_opportunities(
    min_score: int = Query(default=0, ge=0, le=100, alias="minScore"),
    show_expired: bool = Query(default=False, alias="showExpired"),
    nsn_only: bool = Query(default=False, alias="nsnOnly"),
    fsc_only: bool = Query(default=False, alias="fscOnly"),
    db: AsyncSession = Depends(get_async_db),
) -> OpportunityListResponse:
    """
    List stored solicitations for triage.

    Expired solicitations are hidden unless ``showExpired`` is set. The
    counters always cover every non-expired solicitation, whatever the filters.
    """
    try:
        repo = OpportunityRepository(db)
        rows = await repo.list_filtered(
            min_score=min_score,
            show_expired=show_expired,
            nsn_only=nsn_only,
            fsc_only=fsc_only,
        )
        stats = await repo.opportunity_stats()
        return OpportunityListResponse(
            opportunities=[OpportunityResponse.model_validate(row) for row in rows],
            stats=OpportunityStats(**stats),
        )
    except Exception:
        logger.exception("Failed to list opportunities")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load opportunities",
        )


@router.post(
    "/sync",
    response_model=SyncResponse,
    summary="Sync from SAM.gov",
    description="Search SAM.gov for recent solicitations, score them against the NSN catalog and store them",
    responses={503: {"description": "SAM.gov API key is not configured"}},
)
async def sync_opportunities(
    db: AsyncSession = Depends(get_async_db),
    client: SamGovClient = Depends(get_sam_gov_client),
) -> SyncResponse:
    """
    Run an opportunity sync.

    Failed searches and description fetches are listed in ``errors``; the
    run still stores everything else it found.
    """
    try:
        result = await OpportunitySyncService(db, client).sync()
        return SyncResponse.model_validate(result)
    except Exception:
        logger.exception("Opportunity sync failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Opportunity sync failed",
        )


@router.patch(
    "/{opportunity_id}",
    response_model=OpportunityResponse,
    summary="Update opportunity status",
    description="Mark a solicitation reviewed, imported or dismissed",
    responses={404: {"description": "Opportunity not found"}},
)
async def update_opportunity_status(
    opportunity_id: int,
    update: OpportunityStatusUpdate,
    db: AsyncSession = Depends(get_async_db),
) -> OpportunityResponse:
    try:
        opportunity = await OpportunityRepository(db).update_status(
            opportunity_id,
            update.status,
            dismiss_reason=update.dismiss_reason,
        )
    except Exception:
        logger.exception("Failed to update opportunity %s", opportunity_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update opportunity",
        )

    if opportunity is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Opportunity not found",
        )
    return OpportunityResponse.model_validate(opportunity)
