"""Fixtures for PostGIS integration tests."""

import os

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    async_sessionmaker,
    create_async_engine,
)

from courier_registry.infrastructure.persistence.tables import metadata


def _get_pg_url() -> str:
    url = os.environ.get("REGISTRY_DATABASE__URL", "")
    if "postgresql" not in url:
        pytest.skip("REGISTRY_DATABASE__URL not set to PostgreSQL")
    return url


@pytest_asyncio.fixture
async def pg_engine():
    """Per-test async engine with the PostGIS schema in place."""
    url = _get_pg_url()
    engine = create_async_engine(url, pool_pre_ping=True)
    async with engine.begin() as conn:
        await conn.execute(text("CREATE EXTENSION IF NOT EXISTS postgis"))
        await conn.run_sync(metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def pg_session(pg_engine: AsyncEngine):
    """Per-test session with TRUNCATE cleanup."""
    factory = async_sessionmaker(pg_engine, expire_on_commit=False)
    async with factory() as session:
        yield session
        await session.rollback()

    async with pg_engine.begin() as conn:
        await conn.execute(text("TRUNCATE TABLE instances"))
