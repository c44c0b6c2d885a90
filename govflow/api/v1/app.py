"""FastAPI application initialization and configuration."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware

from govflow import __version__
from govflow.api.v1.router import api_router
from govflow.core.config import get_settings
from govflow.core.logging import setup_logging
from govflow.db.session import async_engine


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Configures logging on startup and disposes of the connection pool on
    shutdown. Schema changes go through Alembic, never through startup.
    """
    settings = get_settings()

    setup_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
    )

    yield

    await async_engine.dispose()


def create_application() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()

    app = FastAPI(
        title="GovFlow API",
        description="""
        **Government RFQ and Order Workflow**

        Tracks government Requests for Quote from receipt through quoting,
        award, fulfillment and shipment, and mirrors SAM.gov solicitations
        scored against the company's NSN catalog.

        ## Features

        * **Workflows**: One record per RFQ-to-shipment cycle with a derived status
        * **Link repair**: Attach purchase orders to the RFQs they award
        * **Opportunities**: SAM.gov sync, relevance scoring and triage
        * **Company Profile**: Identity and defaults used on quotes
        """,
        version=__version__,
        openapi_url=f"/api/{settings.api_version}/openapi.json",
        docs_url=f"/api/{settings.api_version}/docs",
        redoc_url=f"/api/{settings.api_version}/redoc",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Workflow", "description": "RFQ-to-shipment workflows and status counts"},
            {"name": "Orders", "description": "Purchase order to RFQ link repair"},
            {"name": "Pipeline", "description": "Work waiting on the operator"},
            {"name": "Opportunities", "description": "SAM.gov solicitations and triage"},
            {"name": "Company Profile", "description": "Company information used on quotes"},
            {"name": "NSN Catalog", "description": "Stock numbers the company supplies"},
            {"name": "Health", "description": "System health monitoring"},
        ],
    )

    if settings.is_production:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=["*"],
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=3600,
    )

    app.include_router(
        api_router,
        prefix=f"/api/{settings.api_version}"
    )

    @app.get("/", include_in_schema=False)
    async def root():
        """Root endpoint with API information."""
        return {
            "name": "GovFlow API",
            "version": __version__,
            "docs_url": f"/api/{settings.api_version}/docs",
            "openapi_url": f"/api/{settings.api_version}/openapi.json",
            "health_check": f"/api/{settings.api_version}/health",
        }

    # Health check at root level (for load balancers)
    @app.get("/health", include_in_schema=False)
    async def health():
        """Simple health check for load balancers."""
        return {"status": "ok"}

    return app


# Create application instance
app = create_application()
