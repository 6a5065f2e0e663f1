"""Tenant aggregate for IAM context."""

from __future__ import annotations

from dataclasses import dataclass

from iam.domain.value_objects import TenantId, normalize_slug


@dataclass
class Tenant:
    """Tenant aggregate representing an organization in the system.

    Tenants are the top-level isolation boundary in the system. Every
    tenant-owned record (users, portfolios) belongs to exactly one tenant.

    Business rules:
    - Tenant slugs are globally unique, lower-case and URL safe
    - A deactivated tenant cannot be resolved for requests
    """

    id: TenantId
    name: str
    slug: str
    is_active: bool = True

    @classmethod
    def create(cls, name: str, slug: str) -> "Tenant":
        """Factory method for creating a new, active tenant.

        Args:
            name: Display name of the tenant
            slug: Public identifier, normalized to lower case

        Returns:
            A new Tenant aggregate

        Raises:
            ValueError: If the name is blank or the slug is malformed
        """
        if not name.strip():
            raise ValueError("Tenant name must not be blank")
        return cls(
            id=TenantId.generate(),
            name=name.strip(),
            slug=normalize_slug(slug),
        )

    def activate(self) -> None:
        self.is_active = True

    def deactivate(self) -> None:
        self.is_active = False
