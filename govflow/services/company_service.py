"""Access to the single company profile used for quoting."""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from govflow.core.exceptions import ConfigurationError, ValidationError
from govflow.models.company import CompanyProfile
from govflow.repositories.company_repository import CompanyRepository

logger = logging.getLogger(__name__)


class CompanyProfileService:
    """
    The bidding company's profile.

    Exactly one profile is in use: the lowest-id row that is not soft deleted.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = CompanyRepository(db)

    async def get_active_profile(self) -> CompanyProfile:
        """
        Return the profile.

        Raises:
            ConfigurationError: If no profile has been set up yet
        """
        profile = await self.repository.get_first_active()
        if profile is None:
            raise ConfigurationError("Company profile is not configured")
        return profile

    async def upsert_profile(self, data: dict[str, Any]) -> CompanyProfile:
        """
        Update the profile, creating it on first use.

        Args:
            data: Profile fields; ``company_name`` is required when creating

        Returns:
            The stored profile
        """
        profile = await self.repository.get_first_active()
        if profile is None:
            if not data.get("company_name"):
                raise ValidationError("Company name is required")
            logger.info("Creating company profile %s", data["company_name"])
            return await self.repository.create(**data)

        logger.info("Updating company profile %s", profile.id)
        updated = await self.repository.update(profile.id, data)
        return updated
