"""NSN catalog import endpoint."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from govflow.api.v1.schemas.opportunities import NsnCatalogImportRequest, NsnCatalogImportResponse
from govflow.db.session import get_async_db
from govflow.repositories.opportunity_repository import NsnCatalogRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/nsn-catalog", tags=["NSN Catalog"])


@router.post(
    "/import",
    response_model=NsnCatalogImportResponse,
    summary="Import NSN catalog entries",
    description="Insert or update catalog entries keyed by NSN; the FSC defaults to the first four NSN digits",
)
async def import_nsn_catalog(
    payload: NsnCatalogImportRequest,
    db: AsyncSession = Depends(get_async_db),
) -> NsnCatalogImportResponse:
    # Last entry wins when a payload repeats an NSN
    entries = {entry.nsn: entry.to_entry() for entry in payload.entries}
    try:
        repo = NsnCatalogRepository(db)
        counts = await repo.upsert_entries(entries.values())
        catalog_size = await repo.count_active()
    except Exception:
        logger.exception("NSN catalog import failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to import NSN catalog",
        )

    logger.info(
        "NSN catalog import: %d created, %d updated", counts["created"], counts["updated"]
    )
    return NsnCatalogImportResponse(
        created=counts["created"],
        updated=counts["updated"],
        catalog_size=catalog_size,
    )
