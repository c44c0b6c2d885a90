"""Company repository for company profile operations."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from govflow.models.company import CompanyProfile
from govflow.repositories.base import BaseRepository


class CompanyRepository(BaseRepository[CompanyProfile]):
    """Repository for CompanyProfile."""

    def __init__(self, db_session: AsyncSession):
        """Initialize company repository."""
        super().__init__(CompanyProfile, db_session)

    async def get_first_active(self) -> Optional[CompanyProfile]:
        """The lowest-id profile that is not soft deleted."""
        query = (
            select(CompanyProfile)
            .where(CompanyProfile.deleted_at.is_(None))
            .order_by(CompanyProfile.id.asc())
            .limit(1)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()
