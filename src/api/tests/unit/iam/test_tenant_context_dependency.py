"""Unit tests for request tenant resolution.

Covers the resolver's precedence rules (token claim, then header) against
a mocked repository, and the middleware end to end against SQLite.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from fastapi import Depends, FastAPI
from httpx import ASGITransport, AsyncClient

from iam.dependencies.tenant_context import (
    TENANT_HEADER,
    TenantResolutionMiddleware,
    TenantResolver,
    tenant_error_response,
)
from iam.domain.aggregates import Tenant
from iam.ports.repositories import ITenantRepository
from infrastructure.dependencies import get_request_tenant_context
from shared_kernel.middleware.observability import TenantContextProbe
from shared_kernel.middleware.tenant_context import (
    TenantAlreadyResolvedError,
    TenantContext,
    TenantInactiveError,
    TenantNotFoundError,
    TenantUnresolvedError,
)


@pytest.fixture
def acme() -> Tenant:
    return Tenant.create(name="Acme", slug="acme")


@pytest.fixture
def globex() -> Tenant:
    return Tenant.create(name="Globex", slug="globex")


@pytest.fixture
def mock_probe() -> MagicMock:
    return MagicMock(spec=TenantContextProbe)


@pytest.fixture
def mock_tenant_repo(acme: Tenant, globex: Tenant) -> MagicMock:
    """Repository knowing the acme and globex tenants."""
    tenants = {acme.id: acme, globex.id: globex}
    repo = MagicMock(spec=ITenantRepository)
    repo.get_by_id = AsyncMock(side_effect=lambda tenant_id: tenants.get(tenant_id))
    repo.get_by_slug = AsyncMock(
        side_effect=lambda slug: next(
            (t for t in tenants.values() if t.slug == slug), None
        )
    )
    return repo


@pytest.fixture
def resolver(mock_tenant_repo, token_service, mock_probe) -> TenantResolver:
    return TenantResolver(
        tenant_repository=mock_tenant_repo,
        token_service=token_service,
        probe=mock_probe,
    )


def _bearer(token_service, tenant: Tenant | None) -> str:
    issued = token_service.issue(
        user_id="01ARZ3NDEKTSV4RRFFQ69G5FAV",
        email="ada@acme.io",
        full_name="Ada",
        tenant_id=tenant.id.value if tenant else None,
    )
    return f"Bearer {issued.token}"


class TestTokenResolution:
    """A valid token's tenant claim decides the tenant."""

    @pytest.mark.asyncio
    async def test_token_claim_resolves_tenant(
        self, resolver, token_service, acme, mock_probe
    ):
        """The claimed tenant is resolved with source 'token'."""
        resolved = await resolver.resolve(_bearer(token_service, acme), None)

        assert resolved.tenant_id == acme.id.value
        assert resolved.slug == "acme"
        assert resolved.source == "token"
        mock_probe.tenant_resolved.assert_called_once_with(
            tenant_id=acme.id.value, source="token"
        )

    @pytest.mark.asyncio
    async def test_token_claim_wins_over_header(
        self, resolver, token_service, acme, mock_tenant_repo
    ):
        """A conflicting header is ignored when the token carries a claim."""
        resolved = await resolver.resolve(_bearer(token_service, acme), "globex")

        assert resolved.tenant_id == acme.id.value
        mock_tenant_repo.get_by_slug.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_claim_naming_unknown_tenant(self, resolver, token_service):
        """A claim for a tenant that does not exist is not found."""
        ghost = Tenant.create(name="Ghost", slug="ghost")

        with pytest.raises(TenantNotFoundError):
            await resolver.resolve(_bearer(token_service, ghost), "acme")

    @pytest.mark.asyncio
    async def test_claim_naming_inactive_tenant(self, resolver, token_service, acme):
        """A claim for a deactivated tenant is rejected."""
        acme.deactivate()

        with pytest.raises(TenantInactiveError):
            await resolver.resolve(_bearer(token_service, acme), None)

    @pytest.mark.asyncio
    async def test_invalid_token_falls_back_to_header(
        self, resolver, globex, mock_probe
    ):
        """Garbage tokens are reported and ignored."""
        resolved = await resolver.resolve("Bearer not.a.jwt", "globex")

        assert resolved.tenant_id == globex.id.value
        assert resolved.source == "header"
        mock_probe.token_rejected.assert_called_once()

    @pytest.mark.asyncio
    async def test_token_without_claim_falls_back_to_header(
        self, resolver, token_service, globex
    ):
        """A valid token with no tenant claim does not decide the tenant."""
        resolved = await resolver.resolve(_bearer(token_service, None), "globex")

        assert resolved.tenant_id == globex.id.value

    @pytest.mark.asyncio
    async def test_non_bearer_scheme_is_ignored(self, resolver, globex):
        """Only bearer credentials are inspected."""
        resolved = await resolver.resolve("Basic dXNlcjpwYXNz", "globex")

        assert resolved.source == "header"


class TestHeaderResolution:
    """The X-Tenant-Id header is used when no token claim applies."""

    @pytest.mark.asyncio
    async def test_header_is_trimmed_and_lower_cased(self, resolver, acme):
        """Header slugs are case-insensitive."""
        resolved = await resolver.resolve(None, "  ACME ")

        assert resolved.tenant_id == acme.id.value
        assert resolved.source == "header"

    @pytest.mark.asyncio
    async def test_unknown_slug_is_not_found(self, resolver, mock_probe):
        """Unknown slugs raise TenantNotFoundError."""
        with pytest.raises(TenantNotFoundError):
            await resolver.resolve(None, "initech")

        mock_probe.tenant_not_found.assert_called_once_with(
            identifier="initech", source="header"
        )

    @pytest.mark.asyncio
    async def test_malformed_slug_is_not_found(self, resolver, mock_tenant_repo):
        """Values that cannot be slugs never reach the repository."""
        with pytest.raises(TenantNotFoundError):
            await resolver.resolve(None, "not a slug")

        mock_tenant_repo.get_by_slug.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_inactive_tenant_by_header(self, resolver, globex):
        """Deactivated tenants cannot be selected by header."""
        globex.deactivate()

        with pytest.raises(TenantInactiveError):
            await resolver.resolve(None, "globex")

    @pytest.mark.parametrize("header", [None, "", "   "])
    @pytest.mark.asyncio
    async def test_nothing_to_resolve(self, resolver, mock_probe, header):
        """Without a claim or a header the request is unresolved."""
        with pytest.raises(TenantUnresolvedError):
            await resolver.resolve(None, header, path="/api/portfolios")

        mock_probe.tenant_unresolved.assert_called_once_with(path="/api/portfolios")


class TestTenantErrorResponse:
    """Tests for tenant_error_response status mapping."""

    @pytest.mark.parametrize(
        ("error", "status_code"),
        [
            (TenantUnresolvedError(), 400),
            (TenantNotFoundError(), 404),
            (TenantInactiveError(), 403),
            (TenantAlreadyResolvedError(), 500),
        ],
    )
    def test_status_and_body(self, error, status_code):
        """Each error maps to its status with a structured body."""
        response = tenant_error_response(error)

        assert response.status_code == status_code
        assert error.code.encode() in response.body


@pytest_asyncio.fixture
async def middleware_client(session_factory, token_service):
    """Client for a small app echoing the resolved tenant context."""
    app = FastAPI()
    app.add_middleware(
        TenantResolutionMiddleware,
        session_factory=session_factory,
        token_service=token_service,
    )

    @app.get("/api/whoami")
    async def whoami(context: TenantContext = Depends(get_request_tenant_context)):
        return {"tenantId": context.tenant_id, "source": context.source}

    @app.get("/api/tenants/open")
    async def open_route(context: TenantContext = Depends(get_request_tenant_context)):
        return {"resolved": context.is_resolved}

    @app.get("/api/tenantsx")
    @app.get("/healthz")
    async def lookalike_route(
        context: TenantContext = Depends(get_request_tenant_context),
    ):
        return {"resolved": context.is_resolved}

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client


class TestTenantResolutionMiddleware:
    """End-to-end resolution through the middleware."""

    @pytest.mark.asyncio
    async def test_header_resolves_context(self, middleware_client, create_tenant):
        """Routes see the tenant named by the header."""
        acme = await create_tenant("acme")

        response = await middleware_client.get(
            "/api/whoami", headers={TENANT_HEADER: "acme"}
        )

        assert response.status_code == 200
        assert response.json() == {"tenantId": acme.id.value, "source": "header"}

    @pytest.mark.asyncio
    async def test_token_resolves_context(
        self, middleware_client, create_tenant, token_service
    ):
        """Routes see the tenant claimed by the token."""
        acme = await create_tenant("acme")

        response = await middleware_client.get(
            "/api/whoami", headers={"Authorization": _bearer(token_service, acme)}
        )

        assert response.json() == {"tenantId": acme.id.value, "source": "token"}

    @pytest.mark.asyncio
    async def test_missing_credentials_is_400(self, middleware_client):
        """Unresolved requests never reach the route."""
        response = await middleware_client.get("/api/whoami")

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "TENANT_UNRESOLVED"

    @pytest.mark.asyncio
    async def test_unknown_tenant_is_404(self, middleware_client):
        """Unknown tenants are rejected."""
        response = await middleware_client.get(
            "/api/whoami", headers={TENANT_HEADER: "initech"}
        )

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "TENANT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_inactive_tenant_is_403(self, middleware_client, create_tenant):
        """Deactivated tenants are rejected."""
        await create_tenant("dormant", active=False)

        response = await middleware_client.get(
            "/api/whoami", headers={TENANT_HEADER: "dormant"}
        )

        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "TENANT_INACTIVE"

    @pytest.mark.asyncio
    async def test_exempt_path_skips_resolution(self, middleware_client):
        """Exempt paths run with an unresolved context."""
        response = await middleware_client.get("/api/tenants/open")

        assert response.status_code == 200
        assert response.json() == {"resolved": False}

    @pytest.mark.parametrize("path", ["/api/tenantsx", "/healthz"])
    @pytest.mark.asyncio
    async def test_lookalike_of_exempt_path_needs_tenant(
        self, middleware_client, path
    ):
        """Only exact exempt paths and their sub-paths skip resolution."""
        response = await middleware_client.get(path)

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "TENANT_UNRESOLVED"
