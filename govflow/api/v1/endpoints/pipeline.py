"""Pipeline dashboard endpoint."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from govflow.db.session import get_async_db
from govflow.services.pipeline_service import PipelineService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pipeline", tags=["Pipeline"])


@router.get(
    "/stats",
    summary="Pipeline counters",
    description="Work waiting on the operator: RFQs without a submitted response and open orders",
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "action_required": 5,
                        "rfqs_needing_response": 3,
                        "open_orders": 2,
                        "rfqs": 12,
                        "orders": 4,
                        "orders_by_stage": {"received": 1, "qc": 1, "closed": 2},
                    }
                }
            }
        }
    },
)
async def get_pipeline_stats(db: AsyncSession = Depends(get_async_db)) -> dict[str, Any]:
    try:
        return await PipelineService(db).get_stats()
    except Exception:
        logger.exception("Failed to compute pipeline stats")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load pipeline stats",
        )
