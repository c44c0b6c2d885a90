"""Base configuration for SQLAlchemy models."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from govflow.utils.datetime_utils import utc_now


class Base(DeclarativeBase):
    """Base class for all database models."""

    type_annotation_map = {
        str: String,
        datetime: DateTime(timezone=True),
    }


class BaseModel(Base):
    """
    Abstract base model with common fields.

    All models inherit from this to get standard fields:
    - id: integer primary key, also the insertion order used for tie-breaks
    - created_at: Timestamp when record was created
    - updated_at: Timestamp when record was last updated
    - deleted_at: Soft delete timestamp
    """

    __abstract__ = True

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        onupdate=utc_now,
        nullable=False,
    )

    # Soft delete support
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        index=True,
        comment="Soft delete timestamp",
    )

    def __repr__(self) -> str:
        """String representation of model."""
        return f"<{self.__class__.__name__}(id={self.id})>"

    def soft_delete(self) -> None:
        """Mark record as deleted."""
        self.deleted_at = utc_now()
