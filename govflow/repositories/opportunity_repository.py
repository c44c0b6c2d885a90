"""Repositories for SAM.gov opportunities and the NSN catalog."""

from typing import Any, Iterable, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from govflow.models.opportunity import NsnCatalogEntry, OpportunityStatus, SamGovOpportunity
from govflow.repositories.base import BaseRepository
from govflow.utils.datetime_utils import utc_now

HIGH_RELEVANCE_THRESHOLD = 50


class OpportunityRepository(BaseRepository[SamGovOpportunity]):
    """Repository for SamGovOpportunity keyed by solicitation number."""

    def __init__(self, db_session: AsyncSession):
        """Initialize opportunity repository."""
        super().__init__(SamGovOpportunity, db_session)

    async def get_by_solicitation_number(self, solicitation_number: str) -> Optional[SamGovOpportunity]:
        return await self.get_by_field("solicitation_number", solicitation_number, include_deleted=True)

    def _not_expired(self, query, now):
        return query.where(
            or_(
                SamGovOpportunity.response_deadline.is_(None),
                SamGovOpportunity.response_deadline >= now,
            )
        )

    async def list_filtered(
        self,
        min_score: int = 0,
        show_expired: bool = False,
        nsn_only: bool = False,
        fsc_only: bool = False,
        limit: int = 500,
    ) -> list[SamGovOpportunity]:
        """
        List opportunities for the triage view.

        Args:
            min_score: Minimum relevance score
            show_expired: Include opportunities past their response deadline
            nsn_only: Only opportunities with at least one matched NSN
            fsc_only: Only opportunities with a matched FSC code
            limit: Maximum rows

        Returns:
            Opportunities ordered by relevance, then deadline
        """
        query = (
            select(SamGovOpportunity)
            .where(SamGovOpportunity.deleted_at.is_(None))
            .where(SamGovOpportunity.relevance_score >= min_score)
        )
        if not show_expired:
            query = self._not_expired(query, utc_now())
        if fsc_only:
            query = query.where(SamGovOpportunity.matched_fsc.is_not(None))

        query = query.order_by(
            SamGovOpportunity.relevance_score.desc(),
            SamGovOpportunity.response_deadline.asc(),
            SamGovOpportunity.id.asc(),
        )
        # JSON list emptiness is not portable across dialects, so the NSN
        # filter runs here and the limit is applied after it
        if not nsn_only:
            result = await self.db.execute(query.limit(limit))
            return list(result.scalars().all())

        result = await self.db.execute(query)
        rows = [row for row in result.scalars().all() if row.matched_nsns]
        return rows[:limit]

    async def opportunity_stats(self) -> dict[str, int]:
        """Counts over non-expired opportunities."""
        now = utc_now()
        query = self._not_expired(
            select(SamGovOpportunity).where(SamGovOpportunity.deleted_at.is_(None)),
            now,
        )
        result = await self.db.execute(query)
        rows = list(result.scalars().all())
        return {
            "total": len(rows),
            "high": sum(1 for row in rows if row.relevance_score >= HIGH_RELEVANCE_THRESHOLD),
            "nsn_match": sum(1 for row in rows if row.matched_nsns),
            "fsc_match": sum(1 for row in rows if row.matched_fsc),
        }

    async def update_status(
        self,
        opportunity_id: int,
        status: OpportunityStatus,
        dismiss_reason: Optional[str] = None,
    ) -> Optional[SamGovOpportunity]:
        """Move an opportunity through triage."""
        update_data: dict[str, Any] = {"status": status.value}
        if status == OpportunityStatus.DISMISSED:
            update_data["dismiss_reason"] = dismiss_reason
        return await self.update(opportunity_id, update_data)


class NsnCatalogRepository(BaseRepository[NsnCatalogEntry]):
    """Repository for the internal NSN catalog."""

    def __init__(self, db_session: AsyncSession):
        """Initialize catalog repository."""
        super().__init__(NsnCatalogEntry, db_session)

    async def active_pairs(self) -> list[tuple[str, str]]:
        """(nsn, fsc) pairs of active catalog entries."""
        result = await self.db.execute(
            select(NsnCatalogEntry.nsn, NsnCatalogEntry.fsc)
            .where(NsnCatalogEntry.deleted_at.is_(None))
            .where(NsnCatalogEntry.active.is_(True))
            .order_by(NsnCatalogEntry.id.asc())
        )
        return [(row.nsn, row.fsc) for row in result.all()]

    async def upsert_entries(self, entries: Iterable[dict[str, Any]]) -> dict[str, int]:
        """
        Insert or update catalog entries keyed by NSN.

        Args:
            entries: Dicts with ``nsn``, ``fsc`` and optional ``name``

        Returns:
            ``{"created": n, "updated": m}``
        """
        created = updated = 0
        for entry in entries:
            existing = await self.get_by_field("nsn", entry["nsn"], include_deleted=True)
            if existing is None:
                self.db.add(NsnCatalogEntry(active=True, **entry))
                created += 1
            else:
                existing.fsc = entry["fsc"]
                if entry.get("name"):
                    existing.name = entry["name"]
                existing.active = True
                existing.deleted_at = None
                existing.updated_at = utc_now()
                updated += 1
            await self.db.flush()
        await self.db.commit()
        return {"created": created, "updated": updated}

    async def count_active(self) -> int:
        result = await self.db.execute(
            select(func.count(NsnCatalogEntry.id))
            .where(NsnCatalogEntry.deleted_at.is_(None))
            .where(NsnCatalogEntry.active.is_(True))
        )
        return int(result.scalar_one())
