"""Company profile schemas for API requests/responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CompanyProfileResponse(BaseModel):
    """Response schema for the company profile."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "company_name": "Acme Supply LLC",
                "cage_code": "1ABC2",
                "uei": "ABCDEF123456",
                "naics_code": "325998",
                "business_size": "small",
                "certifications": ["SDVOSB"],
                "contact_name": "Jane Doe",
                "contact_email": "bids@acme.example",
                "contact_phone": "555-0100",
                "address": "1 Depot Rd, Columbus, OH",
                "default_payment_terms": "Net 30",
                "default_fob": "Destination",
                "default_delivery_days": "30",
                "default_notes": None,
                "created_at": "2026-01-15T10:30:00Z",
                "updated_at": "2026-01-15T10:30:00Z",
            }
        },
    )

    id: int = Field(description="Company profile identifier")
    company_name: str = Field(description="Company name")
    cage_code: Optional[str] = Field(default=None, description="CAGE code")
    uei: Optional[str] = Field(default=None, description="Unique Entity Identifier")
    naics_code: Optional[str] = Field(default=None, description="Primary NAICS code")
    business_size: Optional[str] = Field(default=None, description="Business size")
    certifications: list[str] = Field(default_factory=list, description="Certifications")

    contact_name: Optional[str] = Field(default=None, description="Contact name")
    contact_email: Optional[str] = Field(default=None, description="Contact email")
    contact_phone: Optional[str] = Field(default=None, description="Contact phone number")
    address: Optional[str] = Field(default=None, description="Company address")

    default_payment_terms: Optional[str] = Field(default=None, description="Default payment terms")
    default_fob: Optional[str] = Field(default=None, description="Default FOB point")
    default_delivery_days: Optional[str] = Field(default=None, description="Default delivery time")
    default_notes: Optional[str] = Field(default=None, description="Default quote notes")

    created_at: datetime = Field(description="Profile creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")


class CompanyProfileUpdateRequest(BaseModel):
    """
    Request schema for creating or updating the company profile.

    Only fields present in the request body are written.
    ``company_name`` is required the first time the profile is saved.
    """

    company_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    cage_code: Optional[str] = Field(default=None, max_length=10)
    uei: Optional[str] = Field(default=None, max_length=20)
    naics_code: Optional[str] = Field(default=None, max_length=10)
    business_size: Optional[str] = Field(default=None, max_length=50)
    certifications: Optional[list[str]] = None

    contact_name: Optional[str] = Field(default=None, max_length=255)
    contact_email: Optional[str] = Field(default=None, max_length=255)
    contact_phone: Optional[str] = Field(default=None, max_length=30)
    address: Optional[str] = None

    default_payment_terms: Optional[str] = Field(default=None, max_length=100)
    default_fob: Optional[str] = Field(default=None, max_length=50)
    default_delivery_days: Optional[str] = Field(default=None, max_length=50)
    default_notes: Optional[str] = None
