"""Contract tests for opportunity and NSN catalog endpoints."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from govflow.api.v1.app import app
from govflow.api.v1.endpoints.opportunities import get_sam_gov_client
from govflow.services.opportunities.sam_gov_client import Opportunity, SearchResult

pytestmark = [pytest.mark.contract, pytest.mark.asyncio]

ACETONE = "6810-00-286-5435"


class TestNsnCatalogImport:
    async def test_import_creates_then_updates(self, client):
        first = await client.post(
            "/api/v1/nsn-catalog/import",
            json={
                "entries": [
                    {"nsn": "6810002865435"},
                    {"nsn": "9150-00-555-6666", "fsc": "9150", "name": "Grease"},
                    {"nsn": ACETONE, "name": "Acetone"},
                ]
            },
        )
        assert first.status_code == 200
        assert first.json() == {"created": 2, "updated": 0, "catalog_size": 2}

        second = await client.post(
            "/api/v1/nsn-catalog/import",
            json={"entries": [{"nsn": ACETONE, "name": "Acetone, technical"}]},
        )
        assert second.json() == {"created": 0, "updated": 1, "catalog_size": 2}

    @pytest.mark.parametrize(
        "entries",
        [[], [{"nsn": "6810-00-286"}], [{"nsn": ACETONE, "fsc": "68A0"}], [{"name": "no nsn"}]],
    )
    async def test_invalid_entries(self, client, entries):
        response = await client.post("/api/v1/nsn-catalog/import", json={"entries": entries})
        assert response.status_code == 422


class TestListOpportunities:
    @pytest_asyncio.fixture
    async def opportunities(self, seed, now, days_ago):
        future = now + timedelta(days=7)
        return {
            "nsn": await seed.opportunity(
                "SPE-A",
                relevance_score=90,
                matched_keyword=f"NSN:{ACETONE}",
                matched_nsns=[ACETONE],
                matched_fsc="6810",
                response_deadline=future,
            ),
            "fsc": await seed.opportunity(
                "SPE-B", relevance_score=40, matched_fsc="9150", response_deadline=future
            ),
            "open": await seed.opportunity("SPE-C", relevance_score=10),
            "expired": await seed.opportunity(
                "SPE-D", relevance_score=95, matched_fsc="6810", response_deadline=days_ago(1)
            ),
        }

    async def test_default_list_hides_expired(self, client, opportunities):
        response = await client.get("/api/v1/opportunities")

        assert response.status_code == 200
        data = response.json()
        assert [o["solicitationNumber"] for o in data["opportunities"]] == ["SPE-A", "SPE-B", "SPE-C"]
        assert data["stats"] == {"total": 3, "high": 1, "nsnMatch": 1, "fscMatch": 2}

        first = data["opportunities"][0]
        assert first["relevanceScore"] == 90
        assert first["matchedKeyword"] == f"NSN:{ACETONE}"
        assert first["matchedNsns"] == [ACETONE]
        assert first["status"] == "new"

    @pytest.mark.parametrize(
        "params,expected",
        [
            ({"minScore": 40}, ["SPE-A", "SPE-B"]),
            ({"nsnOnly": "true"}, ["SPE-A"]),
            ({"fscOnly": "true"}, ["SPE-A", "SPE-B"]),
            ({"showExpired": "true"}, ["SPE-D", "SPE-A", "SPE-B", "SPE-C"]),
        ],
    )
    async def test_filters(self, client, opportunities, params, expected):
        response = await client.get("/api/v1/opportunities", params=params)

        assert response.status_code == 200
        data = response.json()
        assert [o["solicitationNumber"] for o in data["opportunities"]] == expected
        # Counters ignore the filters
        assert data["stats"]["total"] == 3

    async def test_min_score_out_of_range(self, client):
        response = await client.get("/api/v1/opportunities", params={"minScore": 101})
        assert response.status_code == 422


class TestUpdateStatus:
    async def test_dismiss(self, client, seed):
        opportunity = await seed.opportunity("SPE-A")

        response = await client.patch(
            f"/api/v1/opportunities/{opportunity.id}",
            json={"status": "dismissed", "dismissReason": "Not a product we carry"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "dismissed"
        assert data["dismissReason"] == "Not a product we carry"

    async def test_review(self, client, seed):
        opportunity = await seed.opportunity("SPE-A")

        response = await client.patch(
            f"/api/v1/opportunities/{opportunity.id}", json={"status": "reviewed"}
        )

        assert response.status_code == 200
        assert response.json()["status"] == "reviewed"
        assert response.json()["dismissReason"] is None

    async def test_unknown_opportunity(self, client):
        response = await client.patch("/api/v1/opportunities/999", json={"status": "reviewed"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Opportunity not found"

    async def test_invalid_status(self, client, seed):
        opportunity = await seed.opportunity("SPE-A")

        response = await client.patch(
            f"/api/v1/opportunities/{opportunity.id}", json={"status": "archived"}
        )

        assert response.status_code == 422


class TestSync:
    async def test_sync_without_api_key(self, client):
        response = await client.post("/api/v1/opportunities/sync")

        assert response.status_code == 503
        assert response.json()["detail"] == "SAM.gov API key is not configured"

    async def test_sync_with_client(self, client, seed):
        await seed.catalog(ACETONE, "6810", "Acetone")

        async def search(**params):
            if params.get("keywords") == "6810":
                found = [
                    Opportunity(
                        solicitation_number="SPE-SYNC-1",
                        title="ACETONE, TECHNICAL",
                        description=f"Supply NSN {ACETONE}",
                    )
                ]
            else:
                found = []
            return SearchResult(total_records=len(found), opportunities=found)

        sam_gov = AsyncMock()
        sam_gov.search_opportunities.side_effect = search
        app.dependency_overrides[get_sam_gov_client] = lambda: sam_gov

        response = await client.post("/api/v1/opportunities/sync")

        assert response.status_code == 200
        assert response.json() == {
            "synced": 1,
            "saved": 1,
            "updated": 0,
            "nsnMatches": 1,
            "catalogSize": 1,
            "fscCodes": ["6810"],
            "errors": [],
        }

        listed = await client.get("/api/v1/opportunities")
        assert listed.json()["opportunities"][0]["relevanceScore"] == 100
