"""Repository ports for the IAM bounded context."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from iam.domain.aggregates import Tenant, User
from iam.domain.value_objects import TenantId, UserId


@runtime_checkable
class ITenantRepository(Protocol):
    """Repository for Tenant aggregates. Tenants are not tenant-owned."""

    async def save(self, tenant: Tenant) -> None:
        """Insert or update a tenant.

        Raises:
            DuplicateTenantSlugError: If another tenant already uses the slug
        """
        ...

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        ...

    async def get_by_slug(self, slug: str) -> Tenant | None:
        ...


@runtime_checkable
class IUserRepository(Protocol):
    """Repository for User aggregates.

    Users are tenant-owned, so every lookup is restricted to the resolved
    tenant except the two global email operations named below.
    """

    async def save(self, user: User) -> None:
        """Insert a user into the resolved tenant.

        Raises:
            GlobalEmailConflictError: If any tenant already uses the email
        """
        ...

    async def get_by_id(self, user_id: UserId) -> User | None:
        ...

    async def email_exists_globally(self, email: str) -> bool:
        """Check email existence across every tenant."""
        ...

    async def get_by_email_across_tenants(self, email: str) -> User | None:
        """Locate a user by email regardless of tenant (login)."""
        ...
