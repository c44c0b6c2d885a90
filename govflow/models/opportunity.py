"""External solicitation mirror and internal NSN catalog."""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from govflow.db.base import BaseModel


class OpportunityStatus(str, Enum):
    """Triage status of a solicitation."""

    NEW = "new"
    REVIEWED = "reviewed"
    IMPORTED = "imported"
    DISMISSED = "dismissed"


class SamGovOpportunity(BaseModel):
    """Solicitation mirrored from SAM.gov, scored against the catalog."""

    __tablename__ = "sam_gov_opportunities"

    solicitation_number: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        index=True,
    )
    title: Mapped[str] = mapped_column(
        String(1000),
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Short description or description URL from the search API",
    )
    full_description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Long description fetched separately",
    )

    # Solicitation metadata
    agency: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    office: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    posted_date: Mapped[Optional[datetime]] = mapped_column(nullable=True)
    response_deadline: Mapped[Optional[datetime]] = mapped_column(
        nullable=True,
        index=True,
    )
    naics_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    set_aside_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    ui_link: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    resource_links: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    point_of_contact: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    # Parsed quantity hints
    quantity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    unit: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    line_items: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    # Match provenance
    relevance_score: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        index=True,
    )
    matched_keyword: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    matched_fsc: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    matched_nsns: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    # Triage
    status: Mapped[OpportunityStatus] = mapped_column(
        String(20),
        nullable=False,
        default=OpportunityStatus.NEW,
        index=True,
    )
    dismiss_reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<SamGovOpportunity(id={self.id}, solicitation={self.solicitation_number}, "
            f"score={self.relevance_score})>"
        )

    @property
    def has_nsn_match(self) -> bool:
        return bool(self.matched_nsns)


class NsnCatalogEntry(BaseModel):
    """National Stock Number the company can supply."""

    __tablename__ = "nsn_catalog"

    nsn: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        unique=True,
        index=True,
    )
    fsc: Mapped[str] = mapped_column(
        String(4),
        nullable=False,
        index=True,
    )
    name: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<NsnCatalogEntry(nsn={self.nsn}, fsc={self.fsc})>"
