"""Unit tests for UserRepository and TenantRepository against SQLite."""

from __future__ import annotations

import pytest
import pytest_asyncio

from iam.domain.aggregates import Tenant, User
from iam.domain.value_objects import TenantId
from iam.infrastructure.tenant_repository import TenantRepository
from iam.infrastructure.user_repository import UserRepository
from iam.ports.exceptions import DuplicateTenantSlugError, GlobalEmailConflictError
from infrastructure.database.tenant_scoping import open_tenant_session
from shared_kernel.middleware.tenant_context import (
    CrossTenantWriteError,
    TenantContext,
    TenantUnresolvedError,
)


@pytest_asyncio.fixture
async def acme(create_tenant) -> Tenant:
    return await create_tenant("acme")


@pytest_asyncio.fixture
async def globex(create_tenant) -> Tenant:
    return await create_tenant("globex")


async def _save_user(session_factory, tenant: Tenant, email: str) -> User:
    context = TenantContext.for_tenant(tenant.id.value, tenant.slug, source="header")
    user = User.create(tenant.id, email, "Someone", "hash")
    async with open_tenant_session(session_factory, context) as session:
        async with session.begin():
            await UserRepository(session).save(user)
    return user


class TestTenantRepository:
    """Tests for tenant persistence."""

    @pytest.mark.asyncio
    async def test_get_by_slug_and_id(self, session_factory, acme):
        """Saved tenants can be read back by slug and by id."""
        async with open_tenant_session(session_factory, TenantContext()) as session:
            repo = TenantRepository(session)
            by_slug = await repo.get_by_slug("acme")
            by_id = await repo.get_by_id(acme.id)

        assert by_slug is not None and by_slug.id == acme.id
        assert by_id is not None and by_id.slug == "acme"

    @pytest.mark.asyncio
    async def test_missing_tenant_returns_none(self, session_factory):
        """Unknown ids and slugs return None."""
        async with open_tenant_session(session_factory, TenantContext()) as session:
            repo = TenantRepository(session)
            assert await repo.get_by_slug("nobody") is None
            assert await repo.get_by_id(TenantId.generate()) is None

    @pytest.mark.asyncio
    async def test_duplicate_slug_is_rejected(self, session_factory, acme):
        """Slugs are globally unique."""
        async with open_tenant_session(session_factory, TenantContext()) as session:
            with pytest.raises(DuplicateTenantSlugError):
                async with session.begin():
                    await TenantRepository(session).save(
                        Tenant.create(name="Other Acme", slug="acme")
                    )

    @pytest.mark.asyncio
    async def test_save_updates_existing_tenant(self, session_factory, acme):
        """Saving a known tenant updates its status."""
        acme.deactivate()
        async with open_tenant_session(session_factory, TenantContext()) as session:
            async with session.begin():
                await TenantRepository(session).save(acme)

        async with open_tenant_session(session_factory, TenantContext()) as session:
            stored = await TenantRepository(session).get_by_id(acme.id)

        assert stored is not None
        assert stored.is_active is False


class TestUserRepository:
    """Tests for tenant-owned user persistence."""

    @pytest.mark.asyncio
    async def test_get_by_id_within_tenant(self, session_factory, acme):
        """A user is readable inside its own tenant."""
        user = await _save_user(session_factory, acme, "ada@acme.io")
        context = TenantContext.for_tenant(acme.id.value, source="header")

        async with open_tenant_session(session_factory, context) as session:
            found = await UserRepository(session).get_by_id(user.id)

        assert found == user
        assert found.tenant_id == acme.id

    @pytest.mark.asyncio
    async def test_get_by_id_hidden_from_other_tenant(
        self, session_factory, acme, globex
    ):
        """Another tenant cannot read the user."""
        user = await _save_user(session_factory, acme, "ada@acme.io")
        context = TenantContext.for_tenant(globex.id.value, source="header")

        async with open_tenant_session(session_factory, context) as session:
            assert await UserRepository(session).get_by_id(user.id) is None

    @pytest.mark.asyncio
    async def test_email_exists_globally_spans_tenants(
        self, session_factory, acme, globex
    ):
        """The global email check sees users of every tenant."""
        await _save_user(session_factory, acme, "ada@acme.io")
        context = TenantContext.for_tenant(globex.id.value, source="header")

        async with open_tenant_session(session_factory, context) as session:
            repo = UserRepository(session)
            assert await repo.email_exists_globally("ADA@acme.io") is True
            assert await repo.email_exists_globally("grace@globex.io") is False

    @pytest.mark.asyncio
    async def test_get_by_email_across_tenants_without_context(
        self, session_factory, acme
    ):
        """Login lookup works before any tenant is resolved."""
        user = await _save_user(session_factory, acme, "ada@acme.io")

        async with open_tenant_session(session_factory, TenantContext()) as session:
            found = await UserRepository(session).get_by_email_across_tenants(
                "ada@acme.io"
            )

        assert found == user

    @pytest.mark.asyncio
    async def test_duplicate_email_in_other_tenant_conflicts(
        self, session_factory, acme, globex
    ):
        """Emails are unique across all tenants."""
        await _save_user(session_factory, acme, "ada@acme.io")

        with pytest.raises(GlobalEmailConflictError):
            await _save_user(session_factory, globex, "ada@acme.io")

    @pytest.mark.asyncio
    async def test_save_for_other_tenant_is_rejected(
        self, session_factory, acme, globex
    ):
        """A user naming a tenant other than the resolved one is not written."""
        context = TenantContext.for_tenant(acme.id.value, source="header")
        user = User.create(globex.id, "grace@globex.io", "Grace", "hash")

        async with open_tenant_session(session_factory, context) as session:
            with pytest.raises(CrossTenantWriteError):
                async with session.begin():
                    await UserRepository(session).save(user)

    @pytest.mark.asyncio
    async def test_get_by_id_requires_resolved_tenant(self, session_factory, acme):
        """Tenant-restricted reads fail without a tenant."""
        user = await _save_user(session_factory, acme, "ada@acme.io")

        async with open_tenant_session(session_factory, TenantContext()) as session:
            with pytest.raises(TenantUnresolvedError):
                await UserRepository(session).get_by_id(user.id)
