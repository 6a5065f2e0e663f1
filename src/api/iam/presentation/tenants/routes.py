"""HTTP routes for tenant management.

These routes are exempt from tenant resolution: tenants have to exist
before any request can be resolved to one.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from iam.application.services import TenantService
from iam.dependencies.tenant import get_tenant_service
from iam.domain.value_objects import TenantId
from iam.ports.exceptions import DuplicateTenantSlugError
from iam.presentation.tenants.models import CreateTenantRequest, TenantResponse

router = APIRouter(
    prefix="/tenants",
    tags=["tenants"],
)


def _parse_tenant_id(tenant_id: str) -> TenantId:
    try:
        return TenantId.from_string(tenant_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "INVALID_TENANT_ID", "message": str(e)},
        ) from e


def _not_found(tenant_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"code": "TENANT_NOT_FOUND", "message": f"Tenant {tenant_id} not found"},
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
)
async def create_tenant(
    request: CreateTenantRequest,
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Create a new tenant.

    Raises:
        HTTPException: 400 if the identifier is not a valid slug
        HTTPException: 409 if the identifier is already taken
    """
    try:
        tenant = await service.create_tenant(
            name=request.name,
            slug=request.identifier,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "INVALID_TENANT", "message": str(e)},
        ) from e
    except DuplicateTenantSlugError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "code": DuplicateTenantSlugError.code,
                "message": "A tenant with this identifier already exists",
            },
        ) from e

    return TenantResponse.from_domain(tenant)


@router.get("/{tenant_id}")
async def get_tenant(
    tenant_id: str,
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Get tenant by ID."""
    tenant = await service.get_tenant(_parse_tenant_id(tenant_id))
    if tenant is None:
        raise _not_found(tenant_id)
    return TenantResponse.from_domain(tenant)


@router.post("/{tenant_id}/deactivate")
async def deactivate_tenant(
    tenant_id: str,
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Deactivate a tenant. Its requests and logins are refused afterwards."""
    tenant = await service.set_active(_parse_tenant_id(tenant_id), active=False)
    if tenant is None:
        raise _not_found(tenant_id)
    return TenantResponse.from_domain(tenant)


@router.post("/{tenant_id}/activate")
async def activate_tenant(
    tenant_id: str,
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Re-activate a tenant."""
    tenant = await service.set_active(_parse_tenant_id(tenant_id), active=True)
    if tenant is None:
        raise _not_found(tenant_id)
    return TenantResponse.from_domain(tenant)
