"""Per-request tenant context.

The tenant context is the single holder of "which tenant is this unit of
work acting for". One instance is created per HTTP request (by the tenant
resolution middleware) and one per ingestion job (by the worker). It is
handed explicitly to whatever needs it and is never stored in a global,
a thread-local or a context variable.

The resolution logic itself (token and header inspection, tenant lookup)
lives in the IAM bounded context's dependency layer.
"""

from __future__ import annotations


class TenantContextError(Exception):
    """Base class for tenant resolution and scoping failures.

    Every subclass carries a stable machine-readable ``code`` that the
    presentation layer surfaces to clients.
    """

    code: str = "TENANT_ERROR"
    default_message: str = "Tenant error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class TenantUnresolvedError(TenantContextError):
    """Raised when tenant-owned data is touched without a resolved tenant.

    Also raised by the resolver when a request carries neither a usable
    token claim nor an ``X-Tenant-Id`` header.
    """

    code = "TENANT_UNRESOLVED"
    default_message = "Tenant could not be resolved for this request"


class TenantNotFoundError(TenantContextError):
    """Raised when the requested tenant does not exist."""

    code = "TENANT_NOT_FOUND"
    default_message = "Tenant not found"


class TenantInactiveError(TenantContextError):
    """Raised when the requested tenant exists but has been deactivated."""

    code = "TENANT_INACTIVE"
    default_message = "Tenant is inactive"


class TenantAlreadyResolvedError(TenantContextError):
    """Raised when a tenant context is resolved a second time."""

    code = "TENANT_ALREADY_RESOLVED"
    default_message = "Tenant context is already resolved"


class CrossTenantWriteError(TenantContextError):
    """Raised when a record is written for a tenant other than the resolved one."""

    code = "CROSS_TENANT_WRITE"
    default_message = "Record belongs to a different tenant"


class TenantImmutableError(TenantContextError):
    """Raised when the owning tenant of a persisted record is changed."""

    code = "TENANT_IMMUTABLE"
    default_message = "The owning tenant of a record cannot be changed"


class TenantContext:
    """Mutable, single-assignment holder of the current tenant.

    Starts unresolved. ``set_tenant`` may be called exactly once; reading
    ``tenant_id`` before that raises ``TenantUnresolvedError``.

    Attributes:
        source: How the tenant was resolved ('token', 'header', 'job' or
            'registration'), or None while unresolved.
    """

    __slots__ = ("_tenant_id", "_tenant_slug", "source")

    def __init__(self) -> None:
        self._tenant_id: str | None = None
        self._tenant_slug: str | None = None
        self.source: str | None = None

    @classmethod
    def for_tenant(
        cls, tenant_id: str, slug: str | None = None, source: str = "job"
    ) -> TenantContext:
        """Create an already-resolved context (used by background jobs)."""
        context = cls()
        context.set_tenant(tenant_id, slug, source=source)
        return context

    @property
    def is_resolved(self) -> bool:
        return self._tenant_id is not None

    @property
    def tenant_id(self) -> str:
        """The resolved tenant id.

        Raises:
            TenantUnresolvedError: If the context has not been resolved yet.
        """
        if self._tenant_id is None:
            raise TenantUnresolvedError()
        return self._tenant_id

    @property
    def tenant_slug(self) -> str | None:
        return self._tenant_slug

    def set_tenant(
        self, tenant_id: str, slug: str | None = None, source: str = "header"
    ) -> None:
        """Resolve this context to a tenant.

        Args:
            tenant_id: Id of the tenant the unit of work acts for
            slug: Tenant slug, when known
            source: How the tenant was resolved

        Raises:
            TenantAlreadyResolvedError: If the context was already resolved
        """
        if self._tenant_id is not None:
            raise TenantAlreadyResolvedError()
        self._tenant_id = tenant_id
        self._tenant_slug = slug
        self.source = source

    def __repr__(self) -> str:
        return (
            f"<TenantContext(tenant_id={self._tenant_id}, "
            f"slug={self._tenant_slug}, source={self.source})>"
        )
