"""Company profile model."""

from typing import Optional

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from govflow.db.base import BaseModel


class CompanyProfile(BaseModel):
    """Bidding company identity and response defaults."""

    __tablename__ = "company_profiles"

    company_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    cage_code: Mapped[Optional[str]] = mapped_column(
        String(10),
        nullable=True,
        comment="Commercial and Government Entity code",
    )
    uei: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        comment="Unique Entity Identifier",
    )
    naics_code: Mapped[Optional[str]] = mapped_column(
        String(10),
        nullable=True,
    )
    business_size: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )
    certifications: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="e.g. small business, veteran-owned",
    )

    # Contact
    contact_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Response defaults
    default_payment_terms: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    default_fob: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    default_delivery_days: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    default_notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Boilerplate appended to generated quotes",
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<CompanyProfile(id={self.id}, name={self.company_name}, cage={self.cage_code})>"

    @property
    def has_certifications(self) -> bool:
        """Check if company has certifications."""
        return bool(self.certifications)
