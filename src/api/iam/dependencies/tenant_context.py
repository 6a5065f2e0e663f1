"""Tenant resolution for incoming requests.

Every request outside the exempt paths is resolved to exactly one tenant
before any route runs:

1. ``Authorization: Bearer <token>`` with a valid signature and a
   ``tenantId`` claim. A validly signed claim is authoritative and the
   header is not consulted.
2. ``X-Tenant-Id: <slug>``, trimmed and lower-cased.
3. Otherwise the request is rejected as unresolved.

Malformed, expired or badly signed tokens are ignored and resolution
falls through to the header.

The resolved tenant is written into the request's TenantContext, which
the session dependency hands to every tenant-scoped query.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from fastapi import Request, status
from fastapi.responses import JSONResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from iam.domain.aggregates import Tenant
from iam.domain.value_objects import TenantId, normalize_slug
from iam.infrastructure.tenant_repository import TenantRepository
from iam.ports.repositories import ITenantRepository
from infrastructure.database.dependencies import get_session_factory
from infrastructure.database.tenant_scoping import open_tenant_session
from infrastructure.dependencies import get_token_service
from shared_kernel.auth import InvalidTokenError, TokenService
from shared_kernel.middleware.observability import (
    DefaultTenantContextProbe,
    TenantContextProbe,
)
from shared_kernel.middleware.tenant_context import (
    TenantContext,
    TenantContextError,
    TenantInactiveError,
    TenantNotFoundError,
    TenantUnresolvedError,
)

TENANT_HEADER = "X-Tenant-Id"

EXEMPT_PATH_PREFIXES: tuple[str, ...] = (
    "/api/tenants",
    "/api/auth",
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
)

_STATUS_BY_ERROR: dict[type[TenantContextError], int] = {
    TenantUnresolvedError: status.HTTP_400_BAD_REQUEST,
    TenantNotFoundError: status.HTTP_404_NOT_FOUND,
    TenantInactiveError: status.HTTP_403_FORBIDDEN,
}


@dataclass(frozen=True)
class ResolvedTenant:
    """Outcome of a successful resolution."""

    tenant_id: str
    slug: str
    source: str


class TenantResolver:
    """Determines the tenant of a request from its credentials."""

    def __init__(
        self,
        tenant_repository: ITenantRepository,
        token_service: TokenService,
        probe: TenantContextProbe | None = None,
    ):
        self._tenant_repository = tenant_repository
        self._token_service = token_service
        self._probe = probe or DefaultTenantContextProbe()

    async def resolve(
        self,
        authorization: str | None,
        tenant_header: str | None,
        path: str = "",
    ) -> ResolvedTenant:
        """Resolve the tenant for a request.

        Args:
            authorization: Raw Authorization header value, if any
            tenant_header: Raw X-Tenant-Id header value, if any
            path: Request path, for observability

        Returns:
            ResolvedTenant for an existing, active tenant

        Raises:
            TenantNotFoundError: The claimed or requested tenant does not exist
            TenantInactiveError: The tenant exists but is deactivated
            TenantUnresolvedError: Neither a usable claim nor a header was sent
        """
        claimed_tenant_id = self._tenant_from_token(authorization)
        if claimed_tenant_id is not None:
            tenant = await self._tenant_repository.get_by_id(
                TenantId(value=claimed_tenant_id)
            )
            return self._accept(tenant, claimed_tenant_id, source="token")

        if tenant_header is not None and tenant_header.strip():
            raw = tenant_header.strip().lower()
            try:
                slug = normalize_slug(raw)
            except ValueError:
                self._probe.tenant_not_found(identifier=raw, source="header")
                raise TenantNotFoundError(f"Tenant '{raw}' not found")
            tenant = await self._tenant_repository.get_by_slug(slug)
            return self._accept(tenant, slug, source="header")

        self._probe.tenant_unresolved(path=path)
        raise TenantUnresolvedError(
            f"A bearer token with a tenant claim or the {TENANT_HEADER} header is required"
        )

    def _tenant_from_token(self, authorization: str | None) -> str | None:
        if not authorization:
            return None
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return None
        try:
            claims = self._token_service.validate(token.strip())
        except InvalidTokenError as e:
            self._probe.token_rejected(reason=str(e))
            return None
        return claims.tenant_id or None

    def _accept(
        self, tenant: Tenant | None, identifier: str, source: str
    ) -> ResolvedTenant:
        if tenant is None:
            self._probe.tenant_not_found(identifier=identifier, source=source)
            raise TenantNotFoundError(f"Tenant '{identifier}' not found")
        if not tenant.is_active:
            self._probe.tenant_inactive(tenant_id=tenant.id.value, source=source)
            raise TenantInactiveError(f"Tenant '{tenant.slug}' is inactive")

        self._probe.tenant_resolved(tenant_id=tenant.id.value, source=source)
        return ResolvedTenant(tenant_id=tenant.id.value, slug=tenant.slug, source=source)


def tenant_error_response(error: TenantContextError) -> JSONResponse:
    """Render a tenant error as a structured JSON response."""
    return JSONResponse(
        status_code=_STATUS_BY_ERROR.get(
            type(error), status.HTTP_500_INTERNAL_SERVER_ERROR
        ),
        content={"detail": {"code": error.code, "message": str(error)}},
    )


class TenantResolutionMiddleware(BaseHTTPMiddleware):
    """Creates the request TenantContext and resolves it.

    Resolution failures end the request with a 4xx response; they are never
    retried.
    """

    def __init__(
        self,
        app: ASGIApp,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        token_service: TokenService | None = None,
        exempt_prefixes: tuple[str, ...] = EXEMPT_PATH_PREFIXES,
        probe: TenantContextProbe | None = None,
    ) -> None:
        super().__init__(app)
        self._session_factory = session_factory
        self._token_service = token_service
        self._exempt_prefixes = exempt_prefixes
        self._probe = probe or DefaultTenantContextProbe()

    def _is_exempt(self, path: str) -> bool:
        return any(
            path == prefix or path.startswith(prefix + "/")
            for prefix in self._exempt_prefixes
        )

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        context = TenantContext()
        request.state.tenant_context = context

        if self._is_exempt(request.url.path):
            return await call_next(request)

        session_factory = self._session_factory or get_session_factory()
        token_service = self._token_service or get_token_service()

        try:
            async with open_tenant_session(session_factory, context) as session:
                resolver = TenantResolver(
                    tenant_repository=TenantRepository(session),
                    token_service=token_service,
                    probe=self._probe,
                )
                resolved = await resolver.resolve(
                    authorization=request.headers.get("Authorization"),
                    tenant_header=request.headers.get(TENANT_HEADER),
                    path=request.url.path,
                )
        except TenantContextError as e:
            return tenant_error_response(e)

        context.set_tenant(resolved.tenant_id, resolved.slug, source=resolved.source)
        return await call_next(request)
