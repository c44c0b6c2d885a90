"""Company profile endpoints for managing company information."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from govflow.api.v1.schemas.company import CompanyProfileResponse, CompanyProfileUpdateRequest
from govflow.core.exceptions import ConfigurationError, ValidationError
from govflow.db.session import get_async_db
from govflow.services.company_service import CompanyProfileService

logger = logging.getLogger(__name__)

# Create router for company endpoints
router = APIRouter(prefix="/company-profile", tags=["Company Profile"])


@router.get(
    "",
    response_model=CompanyProfileResponse,
    summary="Get company profile",
    description="Retrieve the company profile used on quotes",
    responses={
        200: {"description": "Company profile information", "model": CompanyProfileResponse},
        404: {"description": "Company profile is not configured"},
    },
)
async def get_company_profile(db: AsyncSession = Depends(get_async_db)) -> CompanyProfileResponse:
    """
    Retrieve the company profile.

    There is one profile per deployment; it must be set up with
    ``PUT /company-profile`` before quotes can be generated.
    """
    try:
        profile = await CompanyProfileService(db).get_active_profile()
        return CompanyProfileResponse.model_validate(profile)
    except ConfigurationError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        )
    except Exception:
        logger.exception("Failed to retrieve company profile")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve company profile",
        )


@router.put(
    "",
    response_model=CompanyProfileResponse,
    summary="Save company profile",
    description="Create the company profile on first use, update it afterwards",
    responses={
        200: {"description": "Company profile saved", "model": CompanyProfileResponse},
        400: {
            "description": "Company profile could not be created",
            "content": {"application/json": {"example": {"detail": "Company name is required"}}},
        },
        422: {"description": "Validation error"},
    },
)
async def save_company_profile(
    profile_data: CompanyProfileUpdateRequest,
    db: AsyncSession = Depends(get_async_db),
) -> CompanyProfileResponse:
    """
    Create or update the company profile.

    Only fields present in the request are changed.
    """
    try:
        data = profile_data.model_dump(exclude_unset=True)
        profile = await CompanyProfileService(db).upsert_profile(data)
        return CompanyProfileResponse.model_validate(profile)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )
    except Exception:
        logger.exception("Failed to save company profile")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save company profile",
        )
