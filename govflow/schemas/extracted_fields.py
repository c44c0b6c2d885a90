"""Typed views over the open-ended JSON produced by extraction adapters.

Adapter output drifts between documents and model versions. Every field here is
optional and ``None`` means "unknown"; ``from_raw`` never raises.
"""

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from govflow.utils.datetime_utils import parse_datetime

_NSN_PATTERN = re.compile(r"^(\d{4})-?(\d{2})-?(\d{3})-?(\d{4})$")


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _text(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _integer(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        digits = value.replace(",", "").strip()
        if re.fullmatch(r"\d+(\.0+)?", digits):
            return int(float(digits))
    return None


def _money(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool) or value is None:
        return None
    text = str(value).replace("$", "").replace(",", "").strip()
    if not text:
        return None
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


def normalize_nsn(value: Any) -> Optional[str]:
    """Canonical dashed NSN (XXXX-XX-XXX-XXXX), or None when it is not one."""
    text = _text(value)
    if text is None:
        return None
    match = _NSN_PATTERN.match(text.replace(" ", "-").replace("--", "-"))
    if not match:
        return None
    return "-".join(match.groups())


def _first(*values: Any) -> Any:
    for value in values:
        if value is not None and value != "":
            return value
    return None


class LineItem(BaseModel):
    """One requested item on an RFQ."""

    item_number: Optional[str] = None
    nsn: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[int] = None
    unit: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "LineItem":
        data = _as_dict(raw)
        return cls(
            item_number=_text(_first(data.get("itemNumber"), data.get("lineNumber"))),
            nsn=normalize_nsn(data.get("nsn")),
            description=_text(_first(data.get("description"), data.get("shortDescription"))),
            quantity=_integer(_first(data.get("quantity"), data.get("quantityRequested"))),
            unit=_text(_first(data.get("unit"), data.get("unitOfMeasure"), data.get("unitOfIssue"))),
        )


class BuyerContact(BaseModel):
    """Contracting officer or point of contact."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class EmailProvenance(BaseModel):
    """Where a mailbox-ingested RFQ came from."""

    sender: Optional[str] = None
    subject: Optional[str] = None
    received_at: Optional[datetime] = None
    message_id: Optional[str] = None


class RfqExtractedFields(BaseModel):
    """Structured fields extracted from an RFQ document."""

    rfq_number: Optional[str] = None
    rfq_date: Optional[datetime] = None
    due_date: Optional[datetime] = Field(default=None, description="Requested reply date")
    delivery_before: Optional[datetime] = None
    contracting_office: Optional[str] = None
    buyer: BuyerContact = Field(default_factory=BuyerContact)
    line_items: List[LineItem] = Field(default_factory=list)
    email_source: Optional[EmailProvenance] = None

    @classmethod
    def from_raw(cls, blob: Any) -> "RfqExtractedFields":
        """
        Build from the stored blob.

        Accepts both the nested ``rfqSummary.{header,buyer,items}`` layout and
        a flat layout with the same keys at the top level.
        """
        raw = _as_dict(blob)
        summary = _as_dict(raw.get("rfqSummary"))
        header = _as_dict(summary.get("header")) or raw
        buyer = _as_dict(summary.get("buyer")) or _as_dict(raw.get("buyer")) or raw

        items = summary.get("items")
        if not isinstance(items, list):
            items = raw.get("items") if isinstance(raw.get("items"), list) else []

        email = _as_dict(raw.get("emailSource"))
        email_source = None
        if email:
            email_source = EmailProvenance(
                sender=_text(_first(email.get("from"), email.get("sender"))),
                subject=_text(email.get("subject")),
                received_at=parse_datetime(email.get("receivedAt")),
                message_id=_text(email.get("messageId")),
            )

        return cls(
            rfq_number=_text(_first(header.get("rfqNumber"), raw.get("rfqNumber"))),
            rfq_date=parse_datetime(header.get("rfqDate")),
            due_date=parse_datetime(
                _first(
                    header.get("requestedReplyDate"),
                    header.get("quoteFirmUntil"),
                    header.get("dueDate"),
                    raw.get("dueDate"),
                )
            ),
            delivery_before=parse_datetime(header.get("deliveryBeforeDate")),
            contracting_office=_text(
                _first(buyer.get("contractingOffice"), raw.get("contractingOffice"))
            ),
            buyer=BuyerContact(
                name=_text(buyer.get("pocName")),
                email=_text(buyer.get("pocEmail")),
                phone=_text(buyer.get("pocPhone")),
            ),
            line_items=[LineItem.from_raw(item) for item in items if isinstance(item, dict)],
            email_source=email_source,
        )

    @property
    def nsns(self) -> list[str]:
        return [item.nsn for item in self.line_items if item.nsn]


class PoExtractedFields(BaseModel):
    """Structured fields extracted from a purchase order."""

    po_number: Optional[str] = None
    rfq_number: Optional[str] = None
    product_name: Optional[str] = None
    nsn: Optional[str] = None
    quantity: Optional[int] = None
    unit_of_measure: Optional[str] = None
    unit_price: Optional[Decimal] = None
    total_price: Optional[Decimal] = None
    ship_to_name: Optional[str] = None
    ship_to_address: Optional[str] = None
    delivery_date: Optional[datetime] = None

    @classmethod
    def from_raw(cls, blob: Any) -> "PoExtractedFields":
        """Build from the stored blob; unusable values become None."""
        raw = _as_dict(blob)
        return cls(
            po_number=_text(raw.get("poNumber")),
            rfq_number=_text(raw.get("rfqNumber")),
            product_name=_text(raw.get("productName")),
            nsn=normalize_nsn(raw.get("nsn")),
            quantity=_integer(raw.get("quantity")),
            unit_of_measure=_text(raw.get("unitOfMeasure")),
            unit_price=_money(raw.get("unitPrice")),
            total_price=_money(raw.get("totalPrice")),
            ship_to_name=_text(raw.get("shipToName")),
            ship_to_address=_text(raw.get("shipToAddress")),
            delivery_date=parse_datetime(raw.get("deliveryDate")),
        )
