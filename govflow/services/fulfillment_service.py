"""Record fulfillment progress on purchase orders."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from govflow.core.exceptions import NotFoundError
from govflow.models.fulfillment import GeneratedLabel, QualitySheet
from govflow.models.government_order import GovernmentOrder, OrderStage, OrderStatus
from govflow.repositories.order_repository import FulfillmentRepository, OrderRepository
from govflow.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)

# Legacy statuses an artifact write may move an order out of
_ADVANCE_TO_QUALITY_SHEET = {OrderStatus.PENDING.value}
_ADVANCE_TO_LABELS = {OrderStatus.PENDING.value, OrderStatus.QUALITY_SHEET_CREATED.value}


def _value(enum_or_str) -> Optional[str]:
    return getattr(enum_or_str, "value", enum_or_str)


@dataclass
class OrderDetail:
    """An order with its fulfillment artifacts."""

    order: GovernmentOrder
    quality_sheet: Optional[QualitySheet] = None
    labels: list[GeneratedLabel] = field(default_factory=list)


class OrderFulfillmentService:
    """
    Write side of the order track: stage changes, quality sheets, labels.

    The legacy ``status`` column only moves forward when artifacts are
    written, so older readers keep classifying the order correctly.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.order_repo = OrderRepository(db)
        self.fulfillment_repo = FulfillmentRepository(db)

    async def _get_order(self, order_id: int) -> GovernmentOrder:
        order = await self.order_repo.get_by_id(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")
        return order

    async def get_order(self, order_id: int) -> OrderDetail:
        """
        Raises:
            NotFoundError: If the order does not exist
        """
        order = await self._get_order(order_id)
        return OrderDetail(
            order=order,
            quality_sheet=await self.fulfillment_repo.get_quality_sheet(order_id),
            labels=await self.fulfillment_repo.get_labels(order_id),
        )

    async def update_order(
        self,
        order_id: int,
        stage: Optional[OrderStage] = None,
        tracking_number: Optional[str] = None,
    ) -> GovernmentOrder:
        """
        Move an order to another stage and record shipment details.

        ``stage_changed_at`` is stamped when the stage actually changes.
        ``shipped_at`` is stamped once, the first time the order is at the
        ``ship`` or ``closed`` stage with a tracking number.

        Raises:
            NotFoundError: If the order does not exist
        """
        order = await self._get_order(order_id)
        now = utc_now()

        if stage is not None and _value(order.stage) != stage.value:
            logger.info("Order %s stage %s -> %s", order_id, _value(order.stage), stage.value)
            order.stage = stage.value
            order.stage_changed_at = now

        if tracking_number is not None:
            order.tracking_number = tracking_number

        shipping = _value(order.stage) in (OrderStage.SHIP.value, OrderStage.CLOSED.value)
        if shipping and order.tracking_number and order.shipped_at is None:
            order.shipped_at = now

        order.updated_at = now
        await self.db.commit()
        return order

    async def save_quality_sheet(self, order_id: int, data: dict[str, Any]) -> QualitySheet:
        """
        Create or update the order's quality sheet.

        An inspector name without a ``verified_at`` time is stamped with the
        current time.

        Args:
            order_id: Order id
            data: lot_number, checks, verified_by, verified_at

        Raises:
            NotFoundError: If the order does not exist
        """
        order = await self._get_order(order_id)
        sheet = await self.fulfillment_repo.get_quality_sheet(order_id)
        now = utc_now()

        if sheet is None:
            sheet = QualitySheet(order_id=order_id, po_number=order.po_number)
            self.db.add(sheet)
            logger.info("Creating quality sheet for order %s", order_id)

        for key in ("lot_number", "checks", "verified_by", "verified_at"):
            if key in data:
                setattr(sheet, key, data[key])
        if sheet.verified_by and sheet.verified_at is None:
            sheet.verified_at = now
        sheet.updated_at = now

        if _value(order.status) in _ADVANCE_TO_QUALITY_SHEET:
            order.status = OrderStatus.QUALITY_SHEET_CREATED.value
            order.updated_at = now

        await self.db.commit()
        await self.db.refresh(sheet)
        return sheet

    async def add_label(
        self,
        order_id: int,
        label_type: str,
        file_key: Optional[str] = None,
        verified_by: Optional[str] = None,
        verified_at: Optional[datetime] = None,
    ) -> GeneratedLabel:
        """
        Record a generated label for an order.

        Raises:
            NotFoundError: If the order does not exist
        """
        order = await self._get_order(order_id)
        if verified_by and verified_at is None:
            verified_at = utc_now()

        label = GeneratedLabel(
            order_id=order_id,
            label_type=label_type,
            file_key=file_key,
            verified_by=verified_by,
            verified_at=verified_at,
        )
        self.db.add(label)

        if _value(order.status) in _ADVANCE_TO_LABELS:
            order.status = OrderStatus.LABELS_GENERATED.value
            order.updated_at = utc_now()

        await self.db.commit()
        await self.db.refresh(label)
        logger.info("Recorded %s label %s for order %s", label_type, label.id, order_id)
        return label
