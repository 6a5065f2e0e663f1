"""HTTP routes for registration and login.

Exempt from tenant resolution: registration names its tenant in the body
and login discovers it from the user record.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from iam.application.services import AccountService
from iam.application.value_objects import CurrentUser
from iam.dependencies.user import get_account_service, get_current_user
from iam.ports.exceptions import (
    GlobalEmailConflictError,
    InvalidCredentialsError,
    RegistrationTenantError,
)
from iam.presentation.auth.models import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    RegisterRequest,
)

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


@router.post("/register")
async def register(
    request: RegisterRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> AuthResponse:
    """Register a user into an existing, active tenant.

    Raises:
        HTTPException: 400 if the tenant is unknown/inactive or the email is malformed
        HTTPException: 409 if the email is registered in any tenant
    """
    try:
        result = await service.register(
            email=request.email,
            full_name=request.full_name,
            password=request.password,
            tenant_identifier=request.tenant_identifier,
        )
    except RegistrationTenantError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": RegistrationTenantError.code, "message": str(e)},
        ) from e
    except GlobalEmailConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "code": GlobalEmailConflictError.code,
                "message": "User with this email already exists",
            },
        ) from e
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "INVALID_REGISTRATION", "message": str(e)},
        ) from e

    return AuthResponse.from_result(result)


@router.post("/login")
async def login(
    request: LoginRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> AuthResponse:
    """Exchange email and password for a bearer token.

    Raises:
        HTTPException: 401 on any authentication failure
    """
    try:
        result = await service.login(email=request.email, password=request.password)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "code": InvalidCredentialsError.code,
                "message": "Invalid credentials",
            },
        ) from e

    return AuthResponse.from_result(result)


@router.get("/me")
async def me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> MeResponse:
    """Return the identity carried by the bearer token."""
    return MeResponse.from_current_user(current_user)
