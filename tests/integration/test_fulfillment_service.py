"""Integration tests for recording order fulfillment progress."""

import pytest

from govflow.core.exceptions import NotFoundError
from govflow.models.government_order import OrderStage
from govflow.services.fulfillment_service import OrderFulfillmentService

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]


async def test_missing_order_is_not_found(async_db):
    service = OrderFulfillmentService(async_db)

    with pytest.raises(NotFoundError):
        await service.get_order(404)
    with pytest.raises(NotFoundError):
        await service.update_order(404, stage=OrderStage.QC)
    with pytest.raises(NotFoundError):
        await service.save_quality_sheet(404, {})
    with pytest.raises(NotFoundError):
        await service.add_label(404, "box")


async def test_stage_change_is_stamped(async_db, seed):
    order = await seed.order("PO-1", stage="sourcing")

    updated = await OrderFulfillmentService(async_db).update_order(order.id, stage=OrderStage.QC)

    assert updated.stage == "qc"
    assert updated.stage_changed_at is not None
    assert updated.shipped_at is None


async def test_same_stage_keeps_the_change_time(async_db, seed, days_ago):
    changed = days_ago(2)
    order = await seed.order("PO-2", stage="qc", stage_changed_at=changed)

    updated = await OrderFulfillmentService(async_db).update_order(order.id, stage=OrderStage.QC)

    assert updated.stage_changed_at == changed


async def test_shipped_at_is_stamped_once(async_db, seed):
    order = await seed.order("PO-3", stage="ship")
    service = OrderFulfillmentService(async_db)

    first = await service.update_order(order.id, tracking_number="1Z1")
    shipped_at = first.shipped_at
    second = await service.update_order(order.id, stage=OrderStage.CLOSED, tracking_number="1Z2")

    assert shipped_at is not None
    assert second.shipped_at == shipped_at
    assert second.tracking_number == "1Z2"


async def test_quality_sheet_upsert_and_legacy_status(async_db, seed):
    order = await seed.order("PO-4")
    service = OrderFulfillmentService(async_db)

    created = await service.save_quality_sheet(order.id, {"lot_number": "LOT-1"})
    updated = await service.save_quality_sheet(order.id, {"verified_by": "Inspector"})
    detail = await service.get_order(order.id)

    assert updated.id == created.id
    assert updated.po_number == "PO-4"
    assert updated.lot_number == "LOT-1"
    assert updated.verified_at is not None
    assert detail.order.status == "quality_sheet_created"
    assert detail.quality_sheet.id == created.id


async def test_label_advances_legacy_status(async_db, seed):
    order = await seed.order("PO-5", status="quality_sheet_created")
    service = OrderFulfillmentService(async_db)

    label = await service.add_label(order.id, "shipping", verified_by="Inspector")
    detail = await service.get_order(order.id)

    assert label.verified_at is not None
    assert detail.order.status == "labels_generated"
    assert [row.id for row in detail.labels] == [label.id]


async def test_label_does_not_move_a_shipped_order_back(async_db, seed):
    order = await seed.order("PO-6", status="shipped")

    await OrderFulfillmentService(async_db).add_label(order.id, "box")
    detail = await OrderFulfillmentService(async_db).get_order(order.id)

    assert detail.order.status == "shipped"
