"""Global test configuration and fixtures."""

import os
import tempfile
from datetime import datetime, timedelta
from typing import Any, AsyncGenerator, Optional

# Override settings for testing before anything reads them
_TEST_DB_DIR = tempfile.mkdtemp(prefix="govflow-tests-")
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DB_DIR}/govflow.db"
os.environ["SAM_GOV_REQUEST_DELAY_MS"] = "0"
os.environ.pop("SAM_GOV_API_KEY", None)

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from govflow.core.config import Settings, get_settings
from govflow.db.base import Base
from govflow.db.session import get_async_db
from govflow.models import (
    CompanyProfile,
    GeneratedLabel,
    GovernmentOrder,
    GovernmentOrderRfqLink,
    NsnCatalogEntry,
    QualitySheet,
    RfqDocument,
    RfqResponse,
    SamGovOpportunity,
)
from govflow.utils.datetime_utils import utc_now


@pytest.fixture
def settings() -> Settings:
    """Get test settings."""
    return get_settings()


@pytest_asyncio.fixture
async def engine(tmp_path):
    """File-backed SQLite engine with every table created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def async_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create async database session for testing."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client bound to the test database."""
    # Import here so the environment above is in place first
    from govflow.api.v1.app import app

    async def override_get_async_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_async_db] = override_get_async_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


class Seeder:
    """Insert rows for a test and return them."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _save(self, instance):
        self.session.add(instance)
        await self.session.commit()
        return instance

    async def rfq(
        self,
        rfq_number: Optional[str] = None,
        due_date: Optional[datetime] = None,
        status: str = "processed",
        **kwargs: Any,
    ) -> RfqDocument:
        return await self._save(
            RfqDocument(
                file_name=kwargs.pop("file_name", f"{rfq_number or 'rfq'}.pdf"),
                rfq_number=rfq_number,
                due_date=due_date,
                status=status,
                **kwargs,
            )
        )

    async def response(
        self,
        rfq: RfqDocument,
        status: str = "draft",
        submitted_at: Optional[datetime] = None,
        response_data: Optional[dict] = None,
    ) -> RfqResponse:
        return await self._save(
            RfqResponse(
                rfq_document_id=rfq.id,
                status=status,
                submitted_at=submitted_at,
                response_data=response_data or {},
            )
        )

    async def order(self, po_number: str, **kwargs: Any) -> GovernmentOrder:
        kwargs.setdefault("status", "pending")
        return await self._save(GovernmentOrder(po_number=po_number, **kwargs))

    async def link(self, order: GovernmentOrder, rfq: RfqDocument) -> GovernmentOrderRfqLink:
        return await self._save(
            GovernmentOrderRfqLink(government_order_id=order.id, rfq_document_id=rfq.id)
        )

    async def quality_sheet(self, order: GovernmentOrder, **kwargs: Any) -> QualitySheet:
        return await self._save(QualitySheet(order_id=order.id, po_number=order.po_number, **kwargs))

    async def label(self, order: GovernmentOrder, **kwargs: Any) -> GeneratedLabel:
        kwargs.setdefault("label_type", "shipping")
        return await self._save(GeneratedLabel(order_id=order.id, **kwargs))

    async def catalog(self, nsn: str, fsc: Optional[str] = None, name: Optional[str] = None) -> NsnCatalogEntry:
        return await self._save(NsnCatalogEntry(nsn=nsn, fsc=fsc or nsn[:4], name=name, active=True))

    async def opportunity(self, solicitation_number: str, **kwargs: Any) -> SamGovOpportunity:
        kwargs.setdefault("title", f"Solicitation {solicitation_number}")
        kwargs.setdefault("relevance_score", 0)
        kwargs.setdefault("status", "new")
        return await self._save(SamGovOpportunity(solicitation_number=solicitation_number, **kwargs))

    async def company(self, company_name: str = "Acme Supply LLC", **kwargs: Any) -> CompanyProfile:
        kwargs.setdefault("certifications", [])
        return await self._save(CompanyProfile(company_name=company_name, **kwargs))


@pytest.fixture
def seed(async_db) -> Seeder:
    """Row factory bound to the test session."""
    return Seeder(async_db)


@pytest.fixture
def now() -> datetime:
    return utc_now()


@pytest.fixture
def days_ago(now):
    def _days_ago(days: float) -> datetime:
        return now - timedelta(days=days)

    return _days_ago
