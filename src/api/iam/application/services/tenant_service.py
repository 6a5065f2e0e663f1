"""Tenant application service for IAM bounded context.

Handles tenant management operations (create, read, activate, deactivate).
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.observability import DefaultTenantServiceProbe, TenantServiceProbe
from iam.domain.aggregates import Tenant
from iam.domain.value_objects import TenantId
from iam.ports.exceptions import DuplicateTenantSlugError
from iam.ports.repositories import ITenantRepository


class TenantService:
    """Application service for tenant management."""

    def __init__(
        self,
        tenant_repository: ITenantRepository,
        session: AsyncSession,
        probe: TenantServiceProbe | None = None,
    ):
        """Initialize TenantService with dependencies.

        Args:
            tenant_repository: Repository for tenant persistence
            session: Database session for transaction management
            probe: Optional domain probe for observability
        """
        self._tenant_repository = tenant_repository
        self._session = session
        self._probe = probe or DefaultTenantServiceProbe()

    async def create_tenant(self, name: str, slug: str) -> Tenant:
        """Create a new, active tenant.

        Args:
            name: Display name of the tenant
            slug: Public identifier used in the X-Tenant-Id header

        Returns:
            The created Tenant aggregate

        Raises:
            ValueError: If the slug is malformed
            DuplicateTenantSlugError: If a tenant with this slug already exists
        """
        tenant = Tenant.create(name=name, slug=slug)

        async with self._session.begin():
            try:
                await self._tenant_repository.save(tenant)
            except DuplicateTenantSlugError:
                self._probe.duplicate_tenant_slug(slug=tenant.slug)
                raise

        self._probe.tenant_created(tenant_id=tenant.id.value, slug=tenant.slug)
        return tenant

    async def get_tenant(self, tenant_id: TenantId) -> Tenant | None:
        """Retrieve a tenant by ID.

        Returns:
            The Tenant aggregate, or None if not found
        """
        tenant = await self._tenant_repository.get_by_id(tenant_id)
        if tenant is None:
            self._probe.tenant_not_found(tenant_id=tenant_id.value)
        return tenant

    async def set_active(self, tenant_id: TenantId, active: bool) -> Tenant | None:
        """Activate or deactivate a tenant.

        Deactivated tenants stop resolving for requests and their users
        can no longer log in; their data is kept.

        Returns:
            The updated Tenant aggregate, or None if not found
        """
        async with self._session.begin():
            tenant = await self._tenant_repository.get_by_id(tenant_id)
            if tenant is None:
                self._probe.tenant_not_found(tenant_id=tenant_id.value)
                return None

            if active:
                tenant.activate()
            else:
                tenant.deactivate()
            await self._tenant_repository.save(tenant)

        self._probe.tenant_status_changed(tenant_id.value, tenant.is_active)
        return tenant
