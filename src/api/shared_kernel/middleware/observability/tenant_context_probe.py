"""Domain probe for tenant context resolution.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to resolving the tenant of a request
from a bearer token claim or the X-Tenant-Id header.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantContextProbe(Protocol):
    """Domain probe for tenant context resolution operations."""

    def tenant_resolved(self, tenant_id: str, source: str) -> None:
        """Record that the request tenant was resolved."""
        ...

    def token_rejected(self, reason: str) -> None:
        """Record that a bearer token was ignored during resolution."""
        ...

    def tenant_not_found(self, identifier: str, source: str) -> None:
        """Record that the requested tenant does not exist."""
        ...

    def tenant_inactive(self, tenant_id: str, source: str) -> None:
        """Record that the requested tenant is deactivated."""
        ...

    def tenant_unresolved(self, path: str) -> None:
        """Record that no tenant could be determined for a request."""
        ...

    def with_context(self, context: ObservationContext) -> TenantContextProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantContextProbe:
    """Default implementation of TenantContextProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultTenantContextProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantContextProbe(logger=self._logger, context=context)

    def tenant_resolved(self, tenant_id: str, source: str) -> None:
        """Record that the request tenant was resolved."""
        self._logger.debug(
            "tenant_context_resolved",
            tenant_id=tenant_id,
            source=source,
            **self._get_context_kwargs(),
        )

    def token_rejected(self, reason: str) -> None:
        """Record that a bearer token was ignored during resolution."""
        self._logger.info(
            "tenant_context_token_rejected",
            reason=reason,
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, identifier: str, source: str) -> None:
        """Record that the requested tenant does not exist."""
        self._logger.warning(
            "tenant_context_tenant_not_found",
            identifier=identifier,
            source=source,
            **self._get_context_kwargs(),
        )

    def tenant_inactive(self, tenant_id: str, source: str) -> None:
        """Record that the requested tenant is deactivated."""
        self._logger.warning(
            "tenant_context_tenant_inactive",
            tenant_id=tenant_id,
            source=source,
            **self._get_context_kwargs(),
        )

    def tenant_unresolved(self, path: str) -> None:
        """Record that no tenant could be determined for a request."""
        self._logger.warning(
            "tenant_context_unresolved",
            path=path,
            message="Request carried neither a tenant claim nor an X-Tenant-Id header",
            **self._get_context_kwargs(),
        )
