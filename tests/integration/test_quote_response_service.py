"""Integration tests for saving quote responses."""

import pytest

from govflow.core.exceptions import NotFoundError
from govflow.models.rfq_response import ResponseStatus
from govflow.services.response_service import QuoteResponseService

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]


async def test_missing_rfq_is_not_found(async_db):
    service = QuoteResponseService(async_db)

    with pytest.raises(NotFoundError):
        await service.get_response(404)
    with pytest.raises(NotFoundError):
        await service.save_response(404, {})
    with pytest.raises(NotFoundError):
        await service.mark_no_bid(404, "No supplier")


async def test_first_save_creates_a_draft(async_db, seed):
    rfq = await seed.rfq("SPE1-26-Q-0001")

    response = await QuoteResponseService(async_db).save_response(rfq.id, {"pricePerUnit": 4})

    assert response.rfq_document_id == rfq.id
    assert response.status == "draft"
    assert response.submitted_at is None


async def test_submission_time_is_kept_on_resubmit(async_db, seed, days_ago):
    rfq = await seed.rfq("SPE1-26-Q-0002")
    first_sent = days_ago(3)
    existing = await seed.response(rfq, status="submitted", submitted_at=first_sent)

    response = await QuoteResponseService(async_db).save_response(
        rfq.id, {"pricePerUnit": 5}, status=ResponseStatus.SUBMITTED
    )

    assert response.id == existing.id
    assert response.submitted_at.replace(tzinfo=None) == first_sent.replace(tzinfo=None)
    assert response.response_data == {"pricePerUnit": 5}


async def test_back_to_draft_clears_submission_time(async_db, seed, now):
    rfq = await seed.rfq("SPE1-26-Q-0003")
    await seed.response(rfq, status="submitted", submitted_at=now)

    response = await QuoteResponseService(async_db).save_response(rfq.id, {})

    assert response.status == "draft"
    assert response.submitted_at is None


async def test_no_bid_leaves_status_alone(async_db, seed, now):
    rfq = await seed.rfq("SPE1-26-Q-0004")
    await seed.response(rfq, status="submitted", submitted_at=now, response_data={"pricePerUnit": 9})

    response = await QuoteResponseService(async_db).mark_no_bid(rfq.id, "Price too low")

    assert response.status == "submitted"
    assert response.is_no_bid is True
    assert response.response_data["pricePerUnit"] == 9
    assert response.response_data["noBidReason"] == "Price too low"
