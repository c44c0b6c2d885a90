"""Workflow endpoints: one RFQ-to-shipment cycle per record."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from govflow.core.exceptions import NotFoundError
from govflow.db.session import get_async_db
from govflow.schemas.workflow import WorkflowRecord, WorkflowStats
from govflow.services.workflow.service import WorkflowService
from govflow.services.workflow.status import WorkflowStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workflow", tags=["Workflow"])


@router.get(
    "",
    response_model=list[WorkflowRecord],
    summary="List workflows",
    description="List workflows ordered by most recent activity, optionally filtered by derived status",
)
async def list_workflows(
    status_filter: Optional[WorkflowStatus] = Query(
        default=None, alias="status", description="Only workflows in this status"
    ),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_async_db),
) -> list[WorkflowRecord]:
    """List workflows."""
    try:
        service = WorkflowService(db)
        return await service.list_workflows(status=status_filter, limit=limit, offset=offset)
    except Exception:
        logger.exception("Failed to list workflows")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load workflows",
        )


@router.get(
    "/stats",
    response_model=WorkflowStats,
    summary="Workflow counts per status",
    description="Count of workflows in every status; statuses with no workflow report zero",
)
async def get_workflow_stats(db: AsyncSession = Depends(get_async_db)) -> WorkflowStats:
    """Dashboard counters."""
    try:
        service = WorkflowService(db)
        return WorkflowStats(**await service.get_stats())
    except Exception:
        logger.exception("Failed to compute workflow stats")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load workflow stats",
        )


@router.get(
    "/{identifier}",
    response_model=WorkflowRecord,
    summary="Get a workflow",
    description="Look up a workflow by RFQ number, PO number or RFQ document id",
    responses={404: {"description": "No workflow matches the identifier"}},
)
async def get_workflow(
    identifier: str,
    db: AsyncSession = Depends(get_async_db),
) -> WorkflowRecord:
    """
    Retrieve one workflow.

    The identifier is tried as an RFQ number first (exact, then normalized),
    then as a PO number, then as a numeric RFQ document id.
    """
    try:
        service = WorkflowService(db)
        return await service.get_workflow(identifier)
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Workflow not found",
        )
    except Exception:
        logger.exception("Failed to load workflow %s", identifier)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load workflow",
        )
