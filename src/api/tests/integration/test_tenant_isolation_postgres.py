"""Integration tests for tenant isolation on PostgreSQL.

These tests require PostgreSQL to be running. They run the portfolio
repository and section store through the tenant-scoped session factory
the API uses.
"""

from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio
from sqlalchemy import select

from iam.domain.value_objects import UserId
from infrastructure.database.tenant_scoping import open_tenant_session
from portfolios.domain.aggregates import Portfolio, Section
from portfolios.infrastructure.models import PortfolioModel
from portfolios.infrastructure.portfolio_repository import PortfolioRepository
from portfolios.infrastructure.section_store import SectionStore
from shared_kernel.middleware.tenant_context import (
    CrossTenantWriteError,
    TenantContext,
    TenantUnresolvedError,
)

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def tenants(pg_create_tenant):
    return await pg_create_tenant("acme"), await pg_create_tenant("globex")


async def _add_portfolio(factory, tenant, slug: str) -> Portfolio:
    portfolio = Portfolio.create(UserId.generate(), slug.title(), slug)
    context = TenantContext.for_tenant(tenant.id.value, source="header")
    async with open_tenant_session(factory, context) as session:
        async with session.begin():
            await PortfolioRepository(session).add(portfolio)
    return portfolio


class TestReadIsolation:
    """Tests that reads only see the resolved tenant's rows."""

    @pytest.mark.asyncio
    async def test_same_slug_in_two_tenants(self, pg_session_factory, tenants):
        """Slugs are unique per tenant and each tenant sees its own."""
        acme, globex = tenants
        acme_portfolio = await _add_portfolio(pg_session_factory, acme, "work")
        globex_portfolio = await _add_portfolio(pg_session_factory, globex, "work")

        for tenant, expected in ((acme, acme_portfolio), (globex, globex_portfolio)):
            context = TenantContext.for_tenant(tenant.id.value, source="header")
            async with open_tenant_session(pg_session_factory, context) as session:
                repository = PortfolioRepository(session)
                found = await repository.get_by_slug("work")
                listed = await repository.list_all()

            assert found.id == expected.id
            assert [p.id for p in listed] == [expected.id]

    @pytest.mark.asyncio
    async def test_other_tenant_rows_are_invisible_by_id(
        self, pg_session_factory, tenants
    ):
        """Looking up another tenant's portfolio by id finds nothing."""
        acme, globex = tenants
        portfolio = await _add_portfolio(pg_session_factory, acme, "work")

        context = TenantContext.for_tenant(globex.id.value, source="header")
        async with open_tenant_session(pg_session_factory, context) as session:
            assert await PortfolioRepository(session).get_by_id(portfolio.id) is None

    @pytest.mark.asyncio
    async def test_unresolved_context_cannot_query(self, pg_session_factory, tenants):
        """Tenant-owned tables are unreachable without a tenant."""
        async with open_tenant_session(pg_session_factory, TenantContext()) as session:
            with pytest.raises(TenantUnresolvedError):
                await session.execute(select(PortfolioModel))


class TestWriteIsolation:
    """Tests that writes cannot cross tenants."""

    @pytest.mark.asyncio
    async def test_cross_tenant_insert_is_refused(self, pg_session_factory, tenants):
        """A row stamped for another tenant is rejected at flush."""
        acme, globex = tenants
        portfolio = Portfolio.create(
            UserId.generate(), "Work", "work", tenant_id=globex.id
        )

        context = TenantContext.for_tenant(acme.id.value, source="header")
        async with open_tenant_session(pg_session_factory, context) as session:
            with pytest.raises(CrossTenantWriteError):
                async with session.begin():
                    await PortfolioRepository(session).add(portfolio)

    @pytest.mark.asyncio
    async def test_concurrent_replacements_keep_one_generation(
        self, pg_session_factory, tenants
    ):
        """Racing replacements leave exactly one complete set of sections."""
        acme, _ = tenants
        portfolio = await _add_portfolio(pg_session_factory, acme, "work")
        context = TenantContext.for_tenant(acme.id.value, source="job")

        async def replace(label: str) -> int:
            sections = [
                Section.create("About", 1, {"content": label}),
                Section.create("Skills", 2, {"items": [label]}),
            ]
            async with open_tenant_session(pg_session_factory, context) as session:
                return await SectionStore(session).replace(portfolio.id, sections)

        generations = await asyncio.gather(replace("first"), replace("second"))

        async with open_tenant_session(pg_session_factory, context) as session:
            stored = await PortfolioRepository(session).get_by_id(portfolio.id)

        assert sorted(generations) == [1, 2]
        assert stored.section_generation == 2
        about, skills = stored.sections
        assert [about.content["content"]] == skills.content["items"]
