"""PostgreSQL implementation of ITenantRepository.

Tenants are the isolation boundary itself, so this repository reads and
writes without any tenant restriction.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from iam.domain.aggregates import Tenant
from iam.domain.value_objects import TenantId
from iam.infrastructure.models import TenantModel
from iam.infrastructure.observability import (
    DefaultTenantRepositoryProbe,
    TenantRepositoryProbe,
)
from iam.ports.exceptions import DuplicateTenantSlugError
from iam.ports.repositories import ITenantRepository


class TenantRepository(ITenantRepository):
    """Repository managing PostgreSQL storage for Tenant aggregates."""

    def __init__(
        self,
        session: AsyncSession,
        probe: TenantRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession from FastAPI dependency injection
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultTenantRepositoryProbe()

    async def save(self, tenant: Tenant) -> None:
        """Persist tenant metadata.

        Args:
            tenant: The Tenant aggregate to persist

        Raises:
            DuplicateTenantSlugError: If the slug is used by another tenant
        """
        existing = await self.get_by_slug(tenant.slug)
        if existing and existing.id.value != tenant.id.value:
            self._probe.duplicate_tenant_slug(tenant.slug)
            raise DuplicateTenantSlugError(f"Tenant '{tenant.slug}' already exists")

        try:
            stmt = select(TenantModel).where(TenantModel.id == tenant.id.value)
            result = await self._session.execute(stmt)
            model = result.scalar_one_or_none()

            if model:
                model.name = tenant.name
                model.slug = tenant.slug
                model.is_active = tenant.is_active
            else:
                model = TenantModel(
                    id=tenant.id.value,
                    name=tenant.name,
                    slug=tenant.slug,
                    is_active=tenant.is_active,
                )
                self._session.add(model)

            # Flush to surface unique violations from concurrent creators
            await self._session.flush()
            self._probe.tenant_saved(tenant.id.value)

        except IntegrityError as e:
            if "slug" in str(e.orig):
                self._probe.duplicate_tenant_slug(tenant.slug)
                raise DuplicateTenantSlugError(
                    f"Tenant '{tenant.slug}' already exists"
                ) from e
            raise

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Fetch a tenant by id.

        Returns:
            The Tenant aggregate, or None if not found
        """
        stmt = select(TenantModel).where(TenantModel.id == tenant_id.value)
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalar_one_or_none())

    async def get_by_slug(self, slug: str) -> Tenant | None:
        """Fetch a tenant by its (already normalized) slug.

        Returns:
            The Tenant aggregate, or None if not found
        """
        stmt = select(TenantModel).where(TenantModel.slug == slug)
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalar_one_or_none())

    def _to_domain(self, model: TenantModel | None) -> Tenant | None:
        if model is None:
            return None

        tenant = Tenant(
            id=TenantId(value=model.id),
            name=model.name,
            slug=model.slug,
            is_active=model.is_active,
        )
        self._probe.tenant_retrieved(tenant.id.value)
        return tenant
