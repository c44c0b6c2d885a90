"""SAM.gov opportunity and NSN catalog schemas for API requests/responses."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from govflow.models.opportunity import OpportunityStatus
from govflow.schemas.workflow import StatusStr
from govflow.services.opportunities.matcher import canonical_nsn


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class OpportunityResponse(_CamelModel):
    """Stored solicitation with its match provenance."""

    id: int
    solicitation_number: str
    title: str
    agency: Optional[str] = None
    office: Optional[str] = None
    posted_date: Optional[datetime] = None
    response_deadline: Optional[datetime] = None
    naics_code: Optional[str] = None
    set_aside_type: Optional[str] = None
    ui_link: Optional[str] = None
    resource_links: Optional[list[str]] = None
    point_of_contact: Optional[dict[str, Any]] = None
    quantity: Optional[int] = None
    unit: Optional[str] = None
    line_items: Optional[list[dict[str, Any]]] = None

    relevance_score: int = Field(ge=0, le=100)
    matched_keyword: Optional[str] = None
    matched_fsc: Optional[str] = None
    matched_nsns: Optional[list[str]] = None

    status: StatusStr
    dismiss_reason: Optional[str] = None
    created_at: Optional[datetime] = None


class OpportunityStats(_CamelModel):
    """Counts over solicitations that have not expired."""

    total: int
    high: int = Field(description="Relevance score of 50 or more")
    nsn_match: int
    fsc_match: int


class OpportunityListResponse(_CamelModel):
    """Triage list plus counters."""

    opportunities: list[OpportunityResponse]
    stats: OpportunityStats


class OpportunityStatusUpdate(_CamelModel):
    """Triage status change."""

    status: OpportunityStatus
    dismiss_reason: Optional[str] = Field(default=None, max_length=500)


class SyncResponse(_CamelModel):
    """Summary of a sync run."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        json_schema_extra={
            "example": {
                "synced": 42,
                "saved": 10,
                "updated": 32,
                "nsnMatches": 2,
                "catalogSize": 120,
                "fscCodes": ["6810", "9150"],
                "errors": [],
            }
        },
    )

    synced: int = Field(description="Distinct solicitations discovered")
    saved: int = Field(description="New rows stored")
    updated: int = Field(description="Existing rows rescored")
    nsn_matches: int
    catalog_size: int
    fsc_codes: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class NsnCatalogEntryIn(BaseModel):
    """One catalog row to import."""

    nsn: str = Field(description="13-digit NSN, dashed or not")
    fsc: Optional[str] = Field(default=None, description="FSC code; defaults to the NSN prefix")
    name: Optional[str] = Field(default=None, max_length=500)

    @field_validator("nsn")
    @classmethod
    def validate_nsn(cls, v: str) -> str:
        canonical = canonical_nsn(v)
        if canonical is None:
            raise ValueError(f"Invalid NSN: {v}")
        return canonical

    @field_validator("fsc")
    @classmethod
    def validate_fsc(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        v = v.strip()
        if len(v) != 4 or not v.isdigit():
            raise ValueError(f"Invalid FSC code: {v}")
        return v

    def to_entry(self) -> dict[str, Any]:
        return {"nsn": self.nsn, "fsc": self.fsc or self.nsn[:4], "name": self.name}


class NsnCatalogImportRequest(BaseModel):
    """Catalog import payload."""

    entries: list[NsnCatalogEntryIn] = Field(min_length=1)


class NsnCatalogImportResponse(BaseModel):
    """Catalog import outcome."""

    created: int
    updated: int
    catalog_size: int
