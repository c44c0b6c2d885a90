"""Async client for the SAM.gov Opportunities API."""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Optional

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from govflow.core.config import Settings, get_settings
from govflow.core.exceptions import ConfigurationError, ExternalServiceError, RateLimitError
from govflow.utils.datetime_utils import parse_datetime

logger = logging.getLogger(__name__)

SERVICE_NAME = "sam.gov"
SEARCH_PATH = "/opportunities/v2/search"


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    return isinstance(exc, ExternalServiceError) and exc.is_retryable


@dataclass
class Opportunity:
    """One solicitation as returned by the search API."""

    solicitation_number: str
    title: str
    notice_id: Optional[str] = None
    description: Optional[str] = None
    agency: Optional[str] = None
    office: Optional[str] = None
    posted_date: Optional[datetime] = None
    response_deadline: Optional[datetime] = None
    naics_code: Optional[str] = None
    set_aside_type: Optional[str] = None
    ui_link: Optional[str] = None
    resource_links: list[str] = field(default_factory=list)
    point_of_contact: Optional[dict[str, Any]] = None

    @property
    def description_url(self) -> Optional[str]:
        """The search API returns a link to the long description, not the text."""
        if self.description and self.description.startswith("https://"):
            return self.description
        return None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Optional["Opportunity"]:
        """Map one ``opportunitiesData`` entry; entries without a solicitation number are dropped."""
        solicitation_number = (data.get("solicitationNumber") or "").strip()
        if not solicitation_number:
            return None

        department = data.get("department")
        if isinstance(department, dict):
            department = department.get("name")
        office = data.get("office") or data.get("subtier")
        if isinstance(office, dict):
            office = office.get("name")

        contacts = data.get("pointOfContact") or []
        poc = None
        if isinstance(contacts, list) and contacts and isinstance(contacts[0], dict):
            first = contacts[0]
            poc = {
                "name": first.get("fullName"),
                "email": first.get("email"),
                "phone": first.get("phone"),
            }

        links = data.get("resourceLinks") or []
        return cls(
            solicitation_number=solicitation_number,
            title=(data.get("title") or "Untitled").strip(),
            notice_id=data.get("noticeId"),
            description=data.get("description"),
            agency=department or data.get("fullParentPathName"),
            office=office,
            posted_date=parse_datetime(data.get("postedDate")),
            response_deadline=parse_datetime(data.get("responseDeadLine") or data.get("archiveDate")),
            naics_code=data.get("naicsCode"),
            set_aside_type=data.get("typeOfSetAside") or data.get("typeOfSetAsideDescription"),
            ui_link=data.get("uiLink"),
            resource_links=[link for link in links if isinstance(link, str)],
            point_of_contact=poc,
        )


@dataclass
class SearchResult:
    """One page of search results."""

    total_records: int
    opportunities: list[Opportunity]


class SamGovClient:
    """
    Thin async wrapper over the SAM.gov Opportunities API.

    Transport errors and 5xx responses are retried with exponential backoff;
    4xx responses fail immediately.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self.api_key = api_key or self.settings.sam_gov_api_key
        if not self.api_key:
            raise ConfigurationError("SAM.gov API key is not configured")

        self.base_url = self.settings.sam_gov_base_url.rstrip("/")
        self.max_description_chars = self.settings.sam_gov_description_max_chars
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=self.settings.sam_gov_timeout)

    async def __aenter__(self) -> "SamGovClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @staticmethod
    def get_date_range(days: int, today: Optional[date] = None) -> tuple[str, str]:
        """
        Posted-date window in the MM/dd/yyyy format the API expects.

        Args:
            days: Number of days back from today
            today: Override for the end date

        Returns:
            ``(posted_from, posted_to)``
        """
        end = today or datetime.now().date()
        start = end - timedelta(days=days)
        return start.strftime("%m/%d/%Y"), end.strftime("%m/%d/%Y")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception(_is_retryable),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _get_json(self, url: str, params: dict[str, Any]) -> dict[str, Any]:
        response = await self._client.get(url, params=params)

        if response.status_code == 429:
            raise RateLimitError("SAM.gov rate limit exceeded")
        if response.status_code >= 400:
            raise ExternalServiceError(
                f"SAM.gov returned HTTP {response.status_code}",
                service=SERVICE_NAME,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ExternalServiceError(
                "SAM.gov returned a non-JSON body",
                service=SERVICE_NAME,
                status_code=response.status_code,
            ) from e
        if not isinstance(payload, dict):
            raise ExternalServiceError(
                "SAM.gov returned an unexpected payload",
                service=SERVICE_NAME,
                status_code=response.status_code,
            )
        return payload

    async def search_opportunities(
        self,
        posted_from: str,
        posted_to: str,
        keywords: Optional[str] = None,
        naics_codes: Optional[list[str]] = None,
        ptype: str = "o",
        limit: int = 50,
        offset: int = 0,
    ) -> SearchResult:
        """
        Search solicitations posted in a date window.

        Args:
            posted_from: Start date, MM/dd/yyyy
            posted_to: End date, MM/dd/yyyy
            keywords: Title search
            naics_codes: NAICS filter (the API accepts one code per call)
            ptype: Procurement type, "o" for solicitations
            limit: Page size
            offset: Page start

        Returns:
            Total record count and mapped opportunities
        """
        params: dict[str, Any] = {
            "api_key": self.api_key,
            "postedFrom": posted_from,
            "postedTo": posted_to,
            "limit": limit,
            "offset": offset,
            "ptype": ptype,
        }
        if keywords:
            params["title"] = keywords
        if naics_codes:
            params["ncode"] = ",".join(naics_codes)

        payload = await self._get_json(f"{self.base_url}{SEARCH_PATH}", params)

        opportunities = []
        for item in payload.get("opportunitiesData") or []:
            if not isinstance(item, dict):
                continue
            opportunity = Opportunity.from_api(item)
            if opportunity is not None:
                opportunities.append(opportunity)

        total = payload.get("totalRecords")
        return SearchResult(
            total_records=total if isinstance(total, int) else len(opportunities),
            opportunities=opportunities,
        )

    async def fetch_description(self, url: Optional[str]) -> Optional[str]:
        """
        Fetch the long description behind a description link.

        Returns:
            Description text truncated to the configured maximum, or None when
            the link is not an https URL or the body has no description

        Raises:
            ExternalServiceError: If the request fails
        """
        if not url or not url.startswith("https://"):
            return None

        payload = await self._get_json(url, {"api_key": self.api_key})
        description = payload.get("description")
        if not isinstance(description, str) or not description.strip():
            return None
        return description[: self.max_description_chars]
