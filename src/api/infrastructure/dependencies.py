"""Shared infrastructure dependencies.

Provides request-level primitives shared by every bounded context: the
request's tenant context and the bearer token service.
Does NOT import from bounded contexts to maintain DDD boundaries.
"""

from functools import lru_cache

from fastapi import Request

from infrastructure.settings import get_auth_settings
from shared_kernel.auth import TokenService
from shared_kernel.middleware.tenant_context import TenantContext


def get_request_tenant_context(request: Request) -> TenantContext:
    """Get the TenantContext of the current request.

    The tenant resolution middleware places a context on ``request.state``.
    Requests on exempt paths, or apps mounted without the middleware, get a
    fresh unresolved context so tenant-owned data stays unreachable.
    """
    context = getattr(request.state, "tenant_context", None)
    if context is None:
        context = TenantContext()
        request.state.tenant_context = context
    return context


@lru_cache
def get_token_service() -> TokenService:
    """Get application-scoped TokenService (singleton)."""
    settings = get_auth_settings()
    return TokenService(
        secret=settings.jwt_secret.get_secret_value(),
        issuer=settings.issuer,
        audience=settings.audience,
        expiration=settings.expiration,
    )
