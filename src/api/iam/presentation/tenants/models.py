"""Pydantic models for tenant API requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from iam.domain.aggregates import Tenant


class CreateTenantRequest(BaseModel):
    """Request model for creating a tenant."""

    name: str = Field(..., description="Tenant name", min_length=1, max_length=100)
    identifier: str = Field(
        ...,
        description="Tenant slug used in the X-Tenant-Id header",
        min_length=1,
        max_length=50,
    )


class TenantResponse(BaseModel):
    """Response model for tenant."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Tenant ID (ULID format)")
    name: str = Field(..., description="Tenant name")
    identifier: str = Field(..., description="Tenant slug")
    is_active: bool = Field(..., alias="isActive", description="Whether the tenant resolves")

    @classmethod
    def from_domain(cls, tenant: Tenant) -> TenantResponse:
        """Convert domain Tenant aggregate to API response.

        Args:
            tenant: Tenant domain aggregate

        Returns:
            TenantResponse
        """
        return cls(
            id=tenant.id.value,
            name=tenant.name,
            identifier=tenant.slug,
            is_active=tenant.is_active,
        )
