"""API v1 router configuration."""

from fastapi import APIRouter

from govflow.api.v1.endpoints import (
    company,
    health,
    nsn_catalog,
    opportunities,
    orders,
    pipeline,
    responses,
    workflow,
)

# Create main v1 router
api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(health.router)
api_router.include_router(workflow.router)
api_router.include_router(orders.router)
api_router.include_router(responses.router)
api_router.include_router(pipeline.router)
api_router.include_router(opportunities.router)
api_router.include_router(company.router)
api_router.include_router(nsn_catalog.router)
