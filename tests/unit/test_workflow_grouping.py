"""Unit tests for grouping RFQs and orders into workflows."""

from datetime import datetime, timedelta, timezone

import pytest

from govflow.models import (
    GovernmentOrder,
    GovernmentOrderRfqLink,
    QualitySheet,
    RfqDocument,
    RfqResponse,
)
from govflow.services.workflow.grouping import count_by_status, group_workflows, order_rfq_number
from govflow.services.workflow.status import WorkflowStatus

pytestmark = pytest.mark.unit

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def rfq(doc_id, number, **kwargs):
    kwargs.setdefault("created_at", NOW - timedelta(days=30 - doc_id))
    return RfqDocument(id=doc_id, file_name=f"{doc_id}.pdf", rfq_number=number, status="processed", **kwargs)


def order(order_id, **kwargs):
    kwargs.setdefault("created_at", NOW - timedelta(days=10 - order_id))
    kwargs.setdefault("status", "pending")
    return GovernmentOrder(id=order_id, po_number=f"PO-{order_id}", **kwargs)


def link(order_id, rfq_id):
    return GovernmentOrderRfqLink(government_order_id=order_id, rfq_document_id=rfq_id)


def by_rfq_id(groups):
    return {group.rfq.id: group for group in groups if group.rfq is not None}


def test_order_rfq_number_prefers_column():
    assert order_rfq_number(order(1, rfq_number="RFQ-1", extracted_data={"rfqNumber": "RFQ-2"})) == "RFQ-1"
    assert order_rfq_number(order(2, extracted_data={"rfqNumber": "RFQ-2"})) == "RFQ-2"
    assert order_rfq_number(order(3, extracted_data="garbage")) is None


def test_one_group_per_rfq_in_id_order():
    groups = group_workflows([rfq(2, "B-2"), rfq(1, "A-1")], [], [], {}, {}, {})

    assert [group.rfq.id for group in groups] == [1, 2]
    assert all(group.orders == [] for group in groups)
    assert [r.id for r in groups[0].linked_rfqs] == [1]


def test_junction_links_join_every_rfq():
    rfqs = [rfq(1, "A-1"), rfq(2, "B-2")]
    consolidated = order(1)

    groups = by_rfq_id(group_workflows(rfqs, [consolidated], [link(1, 1), link(1, 2)], {}, {}, {}))

    assert groups[1].orders == [consolidated]
    assert groups[2].orders == [consolidated]
    assert [r.id for r in groups[1].linked_rfqs] == [1, 2]


def test_legacy_column_and_junction_are_deduplicated():
    groups = by_rfq_id(
        group_workflows([rfq(1, "A-1")], [order(1, rfq_document_id=1)], [link(1, 1)], {}, {}, {})
    )
    assert len(groups[1].orders) == 1


def test_legacy_column_alone_links():
    groups = by_rfq_id(group_workflows([rfq(1, "A-1")], [order(1, rfq_document_id=1)], [], {}, {}, {}))
    assert [o.id for o in groups[1].orders] == [1]


def test_unlinked_order_joins_by_rfq_number():
    rfqs = [rfq(1, "821 - 36208263")]
    unlinked = order(1, rfq_number="36208263")

    groups = group_workflows(rfqs, [unlinked], [], {}, {}, {})

    assert len(groups) == 1
    assert groups[0].orders == [unlinked]
    # Read-only: nothing is written back to the order
    assert unlinked.rfq_document_id is None


def test_unresolvable_order_becomes_its_own_workflow():
    groups = group_workflows([rfq(1, "A-1")], [order(1, rfq_number="ZZ-999")], [], {}, {}, {})

    assert len(groups) == 2
    orphan = groups[1]
    assert orphan.rfq is None
    assert [o.id for o in orphan.orders] == [1]


def test_links_to_missing_rfqs_are_ignored():
    groups = group_workflows([], [order(1, rfq_document_id=42)], [link(1, 43)], {}, {}, {})
    assert len(groups) == 1
    assert groups[0].rfq is None


def test_artifacts_and_responses_attach_to_snapshot():
    sheet = QualitySheet(id=1, order_id=1, verified_by="QA")
    response = RfqResponse(id=5, rfq_document_id=1, status="submitted", submitted_at=NOW)

    groups = group_workflows([rfq(1, "A-1")], [order(1, rfq_document_id=1)], [], {1: response}, {1: sheet}, {})

    snapshot = groups[0].snapshot
    assert snapshot.response is response
    assert snapshot.orders[0].quality_sheet is sheet
    assert snapshot.orders[0].labels == []


def test_last_activity_is_latest_timestamp():
    response = RfqResponse(id=1, rfq_document_id=1, status="submitted", submitted_at=NOW - timedelta(days=1))
    groups = group_workflows([rfq(1, "A-1")], [], [], {1: response}, {}, {})

    assert groups[0].last_activity == NOW - timedelta(days=1)


def test_count_by_status_is_zero_filled():
    groups = group_workflows(
        [rfq(1, "A-1"), rfq(2, "B-2", due_date=NOW - timedelta(days=1))],
        [order(1, rfq_document_id=1)],
        [],
        {},
        {},
        {},
    )

    stats = count_by_status(groups, now=NOW)

    assert stats["total"] == 2
    assert set(stats["by_status"]) == {status.value for status in WorkflowStatus}
    assert stats["by_status"]["po_received"] == 1
    assert stats["by_status"]["expired"] == 1
    assert sum(stats["by_status"].values()) == 2
