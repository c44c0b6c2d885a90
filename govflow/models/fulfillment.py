"""Fulfillment artifacts attached to a purchase order."""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from govflow.db.base import BaseModel


class QualitySheet(BaseModel):
    """Quality control sheet, one per order."""

    __tablename__ = "quality_sheets"

    order_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("government_orders.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    lot_number: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    po_number: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    checks: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
    )
    verified_by: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Inspector signature",
    )
    verified_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True,
    )

    @property
    def is_verified(self) -> bool:
        return bool(self.verified_by) or self.verified_at is not None


class GeneratedLabel(BaseModel):
    """Shipping or product label rendered for an order."""

    __tablename__ = "generated_labels"

    order_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("government_orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    label_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="e.g. box, bottle, shipping",
    )
    file_key: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )
    verified_by: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    verified_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True,
    )

    @property
    def is_verified(self) -> bool:
        return bool(self.verified_by) or self.verified_at is not None
