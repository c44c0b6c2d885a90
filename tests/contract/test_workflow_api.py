"""Contract tests for workflow endpoints."""

from datetime import timedelta

import pytest

from govflow.services.workflow.status import WorkflowStatus

pytestmark = [pytest.mark.contract, pytest.mark.asyncio]


async def test_list_is_empty_without_data(client):
    response = await client.get("/api/v1/workflow")

    assert response.status_code == 200
    assert response.json() == []


async def test_get_workflow_by_rfq_number(client, seed, now):
    rfq = await seed.rfq("SPE4A6-26-Q-0100", due_date=now + timedelta(days=5))
    await seed.response(rfq, status="draft")

    response = await client.get("/api/v1/workflow/SPE4A6-26-Q-0100")

    assert response.status_code == 200
    data = response.json()
    assert data["rfq_number"] == "SPE4A6-26-Q-0100"
    assert data["status"] == "response_draft"
    assert data["status_label"] == WorkflowStatus.RESPONSE_DRAFT.label
    assert data["rfq"]["id"] == rfq.id
    assert data["response"]["status"] == "draft"
    assert data["po"] is None
    assert data["linked_pos"] == []
    assert len(data["timeline"]) == 7
    assert data["timeline"][0]["reached"] is True


async def test_get_workflow_by_po_number(client, seed):
    rfq = await seed.rfq("SPE4A6-26-Q-0300")
    order = await seed.order("SPE4A6-26-P-0001", stage="ship", tracking_number="1Z999")
    await seed.link(order, rfq)

    response = await client.get("/api/v1/workflow/SPE4A6-26-P-0001")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "shipped"
    assert data["po"]["po_number"] == "SPE4A6-26-P-0001"
    assert data["po"]["stage"] == "ship"
    assert [r["id"] for r in data["linked_rfqs"]] == [rfq.id]


async def test_unknown_workflow_is_404(client):
    response = await client.get("/api/v1/workflow/does-not-exist")

    assert response.status_code == 404
    assert response.json()["detail"] == "Workflow not found"


async def test_list_filtered_by_status(client, seed, days_ago):
    await seed.rfq("SPE-0001", due_date=days_ago(2))
    await seed.rfq("SPE-0002")

    response = await client.get("/api/v1/workflow", params={"status": "expired"})

    assert response.status_code == 200
    assert [w["rfq_number"] for w in response.json()] == ["SPE-0001"]


@pytest.mark.parametrize(
    "params",
    [{"status": "archived"}, {"limit": 0}, {"limit": 501}, {"offset": -1}],
)
async def test_invalid_list_parameters(client, params):
    response = await client.get("/api/v1/workflow", params=params)
    assert response.status_code == 422


async def test_stats_cover_every_status(client, seed, days_ago):
    await seed.rfq("SPE-0001", due_date=days_ago(2))
    rfq = await seed.rfq("SPE-0002")
    await seed.response(rfq, status="submitted", submitted_at=days_ago(45))

    response = await client.get("/api/v1/workflow/stats")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert set(data["by_status"]) == {status.value for status in WorkflowStatus}
    assert data["by_status"]["expired"] == 1
    assert data["by_status"]["lost"] == 1
    assert data["by_status"]["shipped"] == 0
