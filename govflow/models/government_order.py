"""Government purchase order models."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from govflow.db.base import Base, BaseModel
from govflow.utils.datetime_utils import utc_now


class OrderStatus(str, Enum):
    """Coarse legacy order status."""

    PENDING = "pending"
    QUALITY_SHEET_CREATED = "quality_sheet_created"
    LABELS_GENERATED = "labels_generated"
    VERIFIED = "verified"
    SHIPPED = "shipped"


class OrderStage(str, Enum):
    """Fulfillment stage. A null stage means the order was just received."""

    RECEIVED = "received"
    VERIFIED = "verified"
    SOURCING = "sourcing"
    FULFILLING = "fulfilling"
    QC = "qc"
    SHIP = "ship"
    CLOSED = "closed"


class GovernmentOrder(BaseModel):
    """Awarded purchase order."""

    __tablename__ = "government_orders"

    po_number: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )
    rfq_number: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        index=True,
        comment="RFQ number as printed on the PO, used for link repair",
    )

    # Product
    product_name: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )
    nsn: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        index=True,
    )
    quantity: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    unit_of_measure: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
    )
    unit_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2),
        nullable=True,
    )
    total_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(14, 2),
        nullable=True,
    )
    delivery_date: Mapped[Optional[datetime]] = mapped_column(
        nullable=True,
    )
    ship_to_address: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    extracted_data: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
    )
    extracted_text: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    # Cached projection of the junction table, written together with it
    rfq_document_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("rfq_documents.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    status: Mapped[OrderStatus] = mapped_column(
        String(30),
        nullable=False,
        default=OrderStatus.PENDING,
        index=True,
    )
    stage: Mapped[Optional[OrderStage]] = mapped_column(
        String(20),
        nullable=True,
        index=True,
    )
    stage_changed_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True,
    )

    # Shipment
    tracking_number: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    shipped_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True,
    )

    processing_error: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<GovernmentOrder(id={self.id}, po_number={self.po_number}, stage={self.stage})>"

    @property
    def has_shipped_marker(self) -> bool:
        return self.shipped_at is not None or bool(self.tracking_number)


class GovernmentOrderRfqLink(Base):
    """Many-to-many link between orders and RFQ documents."""

    __tablename__ = "government_order_rfq_links"
    __table_args__ = (
        UniqueConstraint(
            "government_order_id",
            "rfq_document_id",
            name="uq_government_order_rfq_link",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    government_order_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("government_orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rfq_document_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("rfq_documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=utc_now,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<GovernmentOrderRfqLink(order={self.government_order_id}, "
            f"rfq={self.rfq_document_id})>"
        )
