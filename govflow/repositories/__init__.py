"""Repository layer for data access patterns."""

from govflow.repositories.base import BaseRepository
from govflow.repositories.company_repository import CompanyRepository
from govflow.repositories.opportunity_repository import (
    NsnCatalogRepository,
    OpportunityRepository,
)
from govflow.repositories.order_repository import FulfillmentRepository, OrderRepository
from govflow.repositories.rfq_repository import RfqRepository, RfqResponseRepository

__all__ = [
    "BaseRepository",
    "RfqRepository",
    "RfqResponseRepository",
    "OrderRepository",
    "FulfillmentRepository",
    "CompanyRepository",
    "OpportunityRepository",
    "NsnCatalogRepository",
]
