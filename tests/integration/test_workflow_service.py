"""Integration tests for workflow lookup, listing and statistics."""

from datetime import timedelta

import pytest
import pytest_asyncio

from govflow.core.exceptions import NotFoundError
from govflow.services.workflow.service import WorkflowService
from govflow.services.workflow.status import WorkflowStatus

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]


@pytest_asyncio.fixture
async def workflows(seed, now, days_ago):
    quoted = await seed.rfq("SPE4A6-26-Q-0100", due_date=now + timedelta(days=5))
    await seed.response(quoted, status="submitted", submitted_at=days_ago(2))

    expired = await seed.rfq("SPE4A6-26-Q-0200", due_date=days_ago(1))

    awarded = await seed.rfq("821 - 36208263")
    order = await seed.order("PO-100", rfq_number="36208263")
    await seed.quality_sheet(order, lot_number="LOT-7", verified_by="QA Lead", verified_at=days_ago(1))

    orphan = await seed.order("PO-ORPHAN", rfq_number="ZZ-999")
    return {"quoted": quoted, "expired": expired, "awarded": awarded, "order": order, "orphan": orphan}


async def test_get_by_rfq_number(async_db, workflows):
    record = await WorkflowService(async_db).get_workflow("SPE4A6-26-Q-0100")

    assert record.status == WorkflowStatus.RESPONSE_SUBMITTED.value
    assert record.status_label == WorkflowStatus.RESPONSE_SUBMITTED.label
    assert record.rfq.id == workflows["quoted"].id
    assert record.response.status == "submitted"
    assert record.po is None
    assert [step.reached for step in record.timeline[:3]] == [True, True, True]


async def test_get_by_normalized_rfq_number(async_db, workflows):
    record = await WorkflowService(async_db).get_workflow("  spe4a6-26-q-0200 ")
    assert record.status == "expired"


async def test_get_by_po_number(async_db, workflows):
    record = await WorkflowService(async_db).get_workflow("PO-100")

    assert record.rfq_number == "821 - 36208263"
    assert record.po_number == "PO-100"
    assert record.status == "verified"
    assert record.quality_sheet.lot_number == "LOT-7"
    assert record.verified_at is not None
    assert [po.po_number for po in record.linked_pos] == ["PO-100"]


async def test_get_by_document_id(async_db, workflows):
    record = await WorkflowService(async_db).get_workflow(str(workflows["quoted"].id))
    assert record.rfq_number == "SPE4A6-26-Q-0100"


async def test_orphan_order_is_its_own_workflow(async_db, workflows):
    record = await WorkflowService(async_db).get_workflow("PO-ORPHAN")

    assert record.rfq is None
    assert record.rfq_number == "ZZ-999"
    assert record.status == "po_received"


async def test_unknown_identifier(async_db, workflows):
    with pytest.raises(NotFoundError):
        await WorkflowService(async_db).get_workflow("nothing-here")


async def test_lookup_does_not_write_links(async_db, workflows):
    await WorkflowService(async_db).get_workflow("PO-100")
    await async_db.refresh(workflows["order"])
    assert workflows["order"].rfq_document_id is None


async def test_list_filters_by_status(async_db, workflows):
    records = await WorkflowService(async_db).list_workflows(status=WorkflowStatus.EXPIRED)
    assert [r.rfq_number for r in records] == ["SPE4A6-26-Q-0200"]


async def test_list_pagination(async_db, workflows):
    service = WorkflowService(async_db)

    everything = await service.list_workflows(limit=50)
    first_page = await service.list_workflows(limit=2)
    second_page = await service.list_workflows(limit=2, offset=2)

    assert len(everything) == 4
    assert [r.status for r in first_page + second_page] == [r.status for r in everything]


async def test_stats(async_db, workflows):
    stats = await WorkflowService(async_db).get_stats()

    assert stats["total"] == 4
    assert stats["by_status"]["response_submitted"] == 1
    assert stats["by_status"]["expired"] == 1
    assert stats["by_status"]["verified"] == 1
    assert stats["by_status"]["po_received"] == 1
    assert stats["by_status"]["lost"] == 0


async def test_stats_on_empty_database(async_db):
    stats = await WorkflowService(async_db).get_stats()
    assert stats["total"] == 0
    assert set(stats["by_status"].values()) == {0}
