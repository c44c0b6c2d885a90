"""Database models package."""

from govflow.models.company import CompanyProfile
from govflow.models.fulfillment import GeneratedLabel, QualitySheet
from govflow.models.government_order import (
    GovernmentOrder,
    GovernmentOrderRfqLink,
    OrderStage,
    OrderStatus,
)
from govflow.models.opportunity import (
    NsnCatalogEntry,
    OpportunityStatus,
    SamGovOpportunity,
)
from govflow.models.rfq_document import RfqDocument, RfqDocumentStatus
from govflow.models.rfq_response import ResponseStatus, RfqResponse

__all__ = [
    # RFQ
    "RfqDocument",
    "RfqDocumentStatus",
    "RfqResponse",
    "ResponseStatus",
    # Orders
    "GovernmentOrder",
    "GovernmentOrderRfqLink",
    "OrderStatus",
    "OrderStage",
    # Fulfillment
    "QualitySheet",
    "GeneratedLabel",
    # Company
    "CompanyProfile",
    # Opportunities
    "SamGovOpportunity",
    "NsnCatalogEntry",
    "OpportunityStatus",
]
