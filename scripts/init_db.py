#!/usr/bin/env python3
"""Create database tables directly from model metadata.

Development and test databases only; production schemas go through Alembic.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import inspect

from govflow.core.config import get_settings
from govflow.db.base import Base
from govflow.db.session import async_engine

# Import all models to register them with Base.metadata
import govflow.models  # noqa: F401


async def init_database(drop_existing: bool = False) -> list[str]:
    """Create every table; optionally drop them first."""
    settings = get_settings()
    print(f"Initializing database for environment '{settings.app_env}'...")

    async with async_engine.begin() as conn:
        if drop_existing:
            print("Dropping existing tables...")
            await conn.run_sync(Base.metadata.drop_all)
        print("Creating tables...")
        await conn.run_sync(Base.metadata.create_all)

    async with async_engine.connect() as conn:
        tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

    print(f"✅ {len(tables)} tables present:")
    for table in sorted(tables):
        print(f"  - {table}")

    await async_engine.dispose()
    return tables


if __name__ == "__main__":
    asyncio.run(init_database(drop_existing="--drop" in sys.argv))
