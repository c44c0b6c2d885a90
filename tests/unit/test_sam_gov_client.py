"""Unit tests for the SAM.gov client."""

from datetime import date, datetime, timezone

import httpx
import pytest
from tenacity import wait_none

from govflow.core.config import Settings
from govflow.core.exceptions import ConfigurationError, ExternalServiceError, RateLimitError
from govflow.services.opportunities.sam_gov_client import Opportunity, SamGovClient

pytestmark = pytest.mark.unit

SEARCH_URL = "https://sam.test/opportunities/v2/search"


def make_settings(**overrides) -> Settings:
    values = {
        "sam_gov_api_key": "test-key",
        "sam_gov_base_url": "https://sam.test/",
        "sam_gov_description_max_chars": 20,
    }
    values.update(overrides)
    return Settings(**values)


class Recorder:
    """MockTransport handler that replays canned responses and records requests."""

    def __init__(self, *responses: httpx.Response):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]


def make_client(handler: Recorder, **overrides) -> SamGovClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SamGovClient(settings=make_settings(**overrides), http_client=http_client)


@pytest.fixture
def no_backoff(monkeypatch):
    monkeypatch.setattr(SamGovClient._get_json.retry, "wait", wait_none())


class TestOpportunityMapping:
    def test_from_api(self):
        opportunity = Opportunity.from_api(
            {
                "noticeId": "abc123",
                "solicitationNumber": " SPE4A6-26-Q-0042 ",
                "title": "ACETONE, TECHNICAL",
                "department": {"name": "DEPT OF DEFENSE"},
                "office": "DLA TROOP SUPPORT",
                "postedDate": "2026-03-02",
                "responseDeadLine": "2026-03-20T16:00:00-04:00",
                "naicsCode": "325998",
                "typeOfSetAside": "SBA",
                "description": "https://api.sam.gov/prod/opportunities/v1/noticedesc?noticeid=abc123",
                "uiLink": "https://sam.gov/opp/abc123/view",
                "resourceLinks": ["https://sam.gov/file.pdf", None],
                "pointOfContact": [{"fullName": "Pat Buyer", "email": "pat@dla.mil"}],
            }
        )

        assert opportunity.solicitation_number == "SPE4A6-26-Q-0042"
        assert opportunity.agency == "DEPT OF DEFENSE"
        assert opportunity.office == "DLA TROOP SUPPORT"
        assert opportunity.posted_date == datetime(2026, 3, 2, tzinfo=timezone.utc)
        assert opportunity.response_deadline.utcoffset() is not None
        assert opportunity.set_aside_type == "SBA"
        assert opportunity.resource_links == ["https://sam.gov/file.pdf"]
        assert opportunity.point_of_contact["name"] == "Pat Buyer"
        assert opportunity.description_url.startswith("https://api.sam.gov/")

    def test_entries_without_solicitation_number_are_dropped(self):
        assert Opportunity.from_api({"title": "No number"}) is None
        assert Opportunity.from_api({"solicitationNumber": "   "}) is None

    def test_inline_description_is_not_a_url(self):
        opportunity = Opportunity.from_api({"solicitationNumber": "X-1", "description": "Plain text"})
        assert opportunity.title == "Untitled"
        assert opportunity.description_url is None


def test_missing_api_key_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        SamGovClient(settings=make_settings(sam_gov_api_key=None))


def test_get_date_range():
    assert SamGovClient.get_date_range(30, today=date(2026, 3, 31)) == ("03/01/2026", "03/31/2026")


@pytest.mark.asyncio
async def test_search_sends_expected_params():
    handler = Recorder(
        httpx.Response(
            200,
            json={
                "totalRecords": 2,
                "opportunitiesData": [
                    {"solicitationNumber": "SPE-1", "title": "Grease"},
                    {"title": "missing number"},
                    "not a dict",
                ],
            },
        )
    )

    async with make_client(handler) as client:
        result = await client.search_opportunities(
            "03/01/2026", "03/31/2026", keywords="grease", naics_codes=["325998"]
        )

    request = handler.requests[0]
    assert str(request.url).startswith(SEARCH_URL)
    assert request.url.params["api_key"] == "test-key"
    assert request.url.params["title"] == "grease"
    assert request.url.params["ncode"] == "325998"
    assert request.url.params["ptype"] == "o"
    assert result.total_records == 2
    assert [o.solicitation_number for o in result.opportunities] == ["SPE-1"]


@pytest.mark.asyncio
async def test_client_errors_are_not_retried():
    handler = Recorder(httpx.Response(400, json={"error": "bad date"}))

    async with make_client(handler) as client:
        with pytest.raises(ExternalServiceError) as exc_info:
            await client.search_opportunities("03/01/2026", "03/31/2026")

    assert exc_info.value.status_code == 400
    assert len(handler.requests) == 1


@pytest.mark.asyncio
async def test_rate_limit_raises_immediately():
    handler = Recorder(httpx.Response(429))

    async with make_client(handler) as client:
        with pytest.raises(RateLimitError):
            await client.search_opportunities("03/01/2026", "03/31/2026")

    assert len(handler.requests) == 1


@pytest.mark.asyncio
async def test_server_errors_are_retried(no_backoff):
    handler = Recorder(
        httpx.Response(503),
        httpx.Response(502),
        httpx.Response(200, json={"totalRecords": 0, "opportunitiesData": []}),
    )

    async with make_client(handler) as client:
        result = await client.search_opportunities("03/01/2026", "03/31/2026")

    assert len(handler.requests) == 3
    assert result.opportunities == []


@pytest.mark.asyncio
async def test_server_errors_give_up_after_three_attempts(no_backoff):
    handler = Recorder(httpx.Response(500))

    async with make_client(handler) as client:
        with pytest.raises(ExternalServiceError):
            await client.search_opportunities("03/01/2026", "03/31/2026")

    assert len(handler.requests) == 3


class TestFetchDescription:
    @pytest.mark.asyncio
    async def test_truncates_to_configured_maximum(self):
        handler = Recorder(httpx.Response(200, json={"description": "x" * 50}))

        async with make_client(handler) as client:
            text = await client.fetch_description("https://sam.test/desc?noticeid=1")

        assert text == "x" * 20
        assert handler.requests[0].url.params["api_key"] == "test-key"

    @pytest.mark.asyncio
    async def test_non_https_link_is_not_fetched(self):
        handler = Recorder(httpx.Response(200, json={}))

        async with make_client(handler) as client:
            assert await client.fetch_description("http://sam.test/desc") is None
            assert await client.fetch_description(None) is None

        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_empty_description_is_none(self):
        handler = Recorder(httpx.Response(200, json={"description": "   "}))

        async with make_client(handler) as client:
            assert await client.fetch_description("https://sam.test/desc") is None

    @pytest.mark.asyncio
    async def test_non_json_body_is_an_error(self):
        handler = Recorder(httpx.Response(200, text="<html>maintenance</html>"))

        async with make_client(handler) as client:
            with pytest.raises(ExternalServiceError):
                await client.fetch_description("https://sam.test/desc")
