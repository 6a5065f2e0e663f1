"""IAM presentation layer - aggregate-based organization.

Organizes presentation concerns by aggregate (tenants, auth) following
vertical slicing. Each package contains its own routes and models.
"""

from __future__ import annotations

from fastapi import APIRouter

from iam.presentation import auth, tenants

router = APIRouter(prefix="/api")

router.include_router(tenants.router)
router.include_router(auth.router)

__all__ = ["router"]
