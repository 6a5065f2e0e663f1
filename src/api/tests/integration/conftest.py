"""Integration test fixtures for database tests.

These fixtures require a running PostgreSQL instance. Use
docker-compose for testing; connection details come from the same
FOLIO_DB_* variables the application reads.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from pydantic import SecretStr
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from iam.domain.aggregates import Tenant
from iam.infrastructure.tenant_repository import TenantRepository
from infrastructure.database.engines import build_listen_dsn, create_engine
from infrastructure.database.schema import create_schema
from infrastructure.database.tenant_scoping import (
    create_tenant_sessionmaker,
    open_tenant_session,
)
from infrastructure.settings import DatabaseSettings
from shared_kernel.middleware.tenant_context import TenantContext

TABLES = ("ingestion_jobs", "portfolio_sections", "portfolios", "users", "tenants")


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires database)",
    )


@pytest.fixture(scope="session")
def integration_db_settings() -> DatabaseSettings:
    """Database settings for integration tests.

    Override with environment variables:
        FOLIO_DB_HOST, FOLIO_DB_PORT, etc.
    """
    return DatabaseSettings(
        host=os.getenv("FOLIO_DB_HOST", "localhost"),
        port=int(os.getenv("FOLIO_DB_PORT", "5432")),
        database=os.getenv("FOLIO_DB_DATABASE", "folio"),
        username=os.getenv("FOLIO_DB_USERNAME", "folio"),
        password=SecretStr(os.getenv("FOLIO_DB_PASSWORD", "folio_dev_password")),
        pool_max_connections=5,
    )


@pytest.fixture
def listen_dsn(integration_db_settings: DatabaseSettings) -> str:
    return build_listen_dsn(integration_db_settings)


@pytest_asyncio.fixture
async def pg_engine(
    integration_db_settings: DatabaseSettings,
) -> AsyncGenerator[AsyncEngine, None]:
    """Provide an engine on a schema emptied before and after each test."""
    engine = create_engine(integration_db_settings)
    await create_schema(engine)

    async def truncate() -> None:
        async with engine.begin() as conn:
            await conn.execute(text(f"TRUNCATE {', '.join(TABLES)} CASCADE"))

    await truncate()
    yield engine
    await truncate()
    await engine.dispose()


@pytest.fixture
def pg_session_factory(pg_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Provide the tenant-scoped session factory on PostgreSQL."""
    return create_tenant_sessionmaker(pg_engine)


@pytest.fixture
def pg_create_tenant(
    pg_session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[str], Awaitable[Tenant]]:
    """Provide a helper that persists an active tenant."""

    async def _create(slug: str) -> Tenant:
        tenant = Tenant.create(name=slug.title(), slug=slug)
        async with open_tenant_session(pg_session_factory, TenantContext()) as session:
            async with session.begin():
                await TenantRepository(session).save(tenant)
        return tenant

    return _create
