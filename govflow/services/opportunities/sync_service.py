"""Discover SAM.gov solicitations, score them and upsert by solicitation number."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from govflow.core.config import Settings, get_settings
from govflow.core.exceptions import GovFlowBaseException
from govflow.core.logging import LogContext
from govflow.models.opportunity import OpportunityStatus, SamGovOpportunity
from govflow.repositories.opportunity_repository import (
    NsnCatalogRepository,
    OpportunityRepository,
)
from govflow.services.opportunities.matcher import (
    PRODUCT_KEYWORDS,
    RELEVANT_NAICS,
    CatalogIndex,
    OpportunityMatch,
    match_opportunity,
    parse_line_items_from_text,
    parse_quantity_from_title,
)
from govflow.services.opportunities.sam_gov_client import Opportunity, SamGovClient
from govflow.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)

FALLBACK_FSC_CODES = ["6810", "9150", "6850"]
FSC_SEARCH_LIMIT = 50
KEYWORD_SEARCH_LIMIT = 30
NAICS_SEARCH_LIMIT = 30

_FETCH_ERRORS = (GovFlowBaseException, httpx.HTTPError)


@dataclass
class SyncResult:
    """Summary of one sync run."""

    synced: int = 0
    saved: int = 0
    updated: int = 0
    nsn_matches: int = 0
    catalog_size: int = 0
    fsc_codes: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class Candidate:
    """A discovered solicitation and the search that first found it."""

    opportunity: Opportunity
    search_source: str
    search_fsc: Optional[str] = None
    search_keyword: Optional[str] = None


class OpportunitySyncService:
    """
    Pull recent solicitations from SAM.gov and keep the local mirror scored.

    Discovery runs sequential searches (catalog FSC codes, product keywords,
    relevant NAICS codes) with a fixed delay between calls. A failed search or
    a failed description fetch is recorded and the run continues.
    """

    def __init__(
        self,
        db: AsyncSession,
        client: SamGovClient,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.db = db
        self.client = client
        self.settings = settings or get_settings()
        self.opportunity_repo = OpportunityRepository(db)
        self.catalog_repo = NsnCatalogRepository(db)
        self._sleep = sleep

    async def _pause(self) -> None:
        await self._sleep(self.settings.sam_gov_request_delay_ms / 1000)

    async def load_catalog(self) -> CatalogIndex:
        return CatalogIndex.from_pairs(await self.catalog_repo.active_pairs())

    async def _search(self, label: str, result: SyncResult, **params: Any) -> list[Opportunity]:
        try:
            page = await self.client.search_opportunities(**params)
        except _FETCH_ERRORS as e:
            logger.error("SAM.gov search %s failed: %s", label, e)
            result.errors.append(f"Search {label} failed")
            return []
        finally:
            await self._pause()
        logger.info("SAM.gov search %s: %d opportunities", label, len(page.opportunities))
        return page.opportunities

    async def discover(self, catalog: CatalogIndex, result: SyncResult) -> dict[str, Candidate]:
        """
        Run the discovery searches.

        Returns:
            Candidates keyed by solicitation number; the first search to find a
            solicitation is kept as its source
        """
        posted_from, posted_to = SamGovClient.get_date_range(self.settings.sam_gov_lookback_days)
        window = {"posted_from": posted_from, "posted_to": posted_to, "ptype": "o"}
        candidates: dict[str, Candidate] = {}

        def collect(opportunities: list[Opportunity], **source: Any) -> None:
            for opportunity in opportunities:
                candidates.setdefault(
                    opportunity.solicitation_number,
                    Candidate(opportunity=opportunity, **source),
                )

        for fsc in catalog.fsc_codes or FALLBACK_FSC_CODES:
            found = await self._search(
                f"FSC:{fsc}", result, keywords=fsc, limit=FSC_SEARCH_LIMIT, **window
            )
            collect(found, search_source=f"FSC:{fsc}", search_fsc=fsc)

        for keyword, fsc in PRODUCT_KEYWORDS:
            found = await self._search(
                f"Keyword:{keyword}", result, keywords=keyword, limit=KEYWORD_SEARCH_LIMIT, **window
            )
            collect(
                found,
                search_source=f"Keyword:{keyword}",
                search_fsc=fsc,
                search_keyword=keyword,
            )

        for naics in RELEVANT_NAICS:
            found = await self._search(
                f"NAICS:{naics}", result, naics_codes=[naics], limit=NAICS_SEARCH_LIMIT, **window
            )
            collect(found, search_source=f"NAICS:{naics}")

        return candidates

    async def _fetch_description(self, opportunity: Opportunity, result: SyncResult) -> Optional[str]:
        url = opportunity.description_url
        if url is None:
            return None
        try:
            return await self.client.fetch_description(url)
        except Exception as e:
            # Malformed links raise outside httpx.HTTPError; only the enrichment is lost
            logger.warning(
                "Description fetch failed for %s: %s", opportunity.solicitation_number, e
            )
            result.errors.append(f"{opportunity.solicitation_number}: description fetch failed")
            return None
        finally:
            await self._pause()

    def _match(
        self,
        candidate: Candidate,
        catalog: CatalogIndex,
        full_description: Optional[str],
    ) -> OpportunityMatch:
        return match_opportunity(
            candidate.opportunity,
            catalog,
            full_description=full_description,
            search_source=candidate.search_source,
            search_fsc=candidate.search_fsc,
            search_keyword=candidate.search_keyword,
        )

    @staticmethod
    def _apply_match(row: SamGovOpportunity, match: OpportunityMatch) -> None:
        row.relevance_score = match.relevance_score
        row.matched_keyword = match.matched_keyword
        row.matched_fsc = match.matched_fsc
        row.matched_nsns = list(match.matched_nsns) if match.matched_nsns else None

    async def _insert(self, candidate: Candidate, catalog: CatalogIndex, result: SyncResult) -> OpportunityMatch:
        opportunity = candidate.opportunity
        full_description = await self._fetch_description(opportunity, result)
        line_items = parse_line_items_from_text(full_description)
        quantity = parse_quantity_from_title(opportunity.title)
        match = self._match(candidate, catalog, full_description)

        row = SamGovOpportunity(
            solicitation_number=opportunity.solicitation_number,
            title=opportunity.title,
            description=opportunity.description,
            full_description=full_description,
            agency=opportunity.agency,
            office=opportunity.office,
            posted_date=opportunity.posted_date,
            response_deadline=opportunity.response_deadline,
            naics_code=opportunity.naics_code,
            set_aside_type=opportunity.set_aside_type,
            ui_link=opportunity.ui_link,
            resource_links=list(opportunity.resource_links) or None,
            point_of_contact=dict(opportunity.point_of_contact) if opportunity.point_of_contact else None,
            quantity=quantity[0] if quantity else None,
            unit=quantity[1] if quantity else None,
            line_items=line_items or None,
            status=OpportunityStatus.NEW.value,
        )
        self._apply_match(row, match)
        self.db.add(row)
        await self.db.commit()
        return match

    async def _update(
        self,
        row: SamGovOpportunity,
        candidate: Candidate,
        catalog: CatalogIndex,
        result: SyncResult,
    ) -> OpportunityMatch:
        opportunity = candidate.opportunity

        # Records whose first description fetch failed get another chance
        if not row.full_description and self.settings.sam_gov_retry_missing_descriptions:
            fetched = await self._fetch_description(opportunity, result)
            if fetched:
                row.full_description = fetched
                row.line_items = parse_line_items_from_text(fetched) or None

        match = self._match(candidate, catalog, row.full_description)
        quantity = parse_quantity_from_title(opportunity.title)

        self._apply_match(row, match)
        row.title = opportunity.title
        row.response_deadline = opportunity.response_deadline or row.response_deadline
        if quantity:
            row.quantity, row.unit = quantity
        row.updated_at = utc_now()
        await self.db.commit()
        return match

    async def upsert(self, candidate: Candidate, catalog: CatalogIndex, result: SyncResult) -> None:
        """Insert a new solicitation or rescore the stored one."""
        solicitation_number = candidate.opportunity.solicitation_number
        existing = await self.opportunity_repo.get_by_solicitation_number(solicitation_number)

        if existing is None:
            try:
                match = await self._insert(candidate, catalog, result)
                result.saved += 1
            except IntegrityError:
                # Another sync inserted it first
                await self.db.rollback()
                existing = await self.opportunity_repo.get_by_solicitation_number(solicitation_number)
                if existing is None:
                    raise
                match = await self._update(existing, candidate, catalog, result)
                result.updated += 1
        else:
            match = await self._update(existing, candidate, catalog, result)
            result.updated += 1

        if match.matched_nsns:
            result.nsn_matches += 1

    async def sync(self) -> SyncResult:
        """
        Run a full sync.

        Returns:
            Counts of discovered, inserted and updated solicitations plus
            per-item errors
        """
        result = SyncResult()

        with LogContext(job="opportunity_sync"):
            catalog = await self.load_catalog()
            result.catalog_size = len(catalog)
            result.fsc_codes = list(catalog.fsc_codes)
            if not catalog.nsns:
                logger.info("NSN catalog is empty, NSN matching disabled for this run")

            candidates = await self.discover(catalog, result)
            result.synced = len(candidates)

            for candidate in candidates.values():
                try:
                    await self.upsert(candidate, catalog, result)
                except Exception as e:
                    await self.db.rollback()
                    logger.exception(
                        "Failed to store opportunity %s", candidate.opportunity.solicitation_number
                    )
                    result.errors.append(
                        f"{candidate.opportunity.solicitation_number}: save failed ({type(e).__name__})"
                    )

        logger.info(
            "Opportunity sync complete: %d found, %d saved, %d updated, %d NSN matches",
            result.synced,
            result.saved,
            result.updated,
            result.nsn_matches,
        )
        return result
