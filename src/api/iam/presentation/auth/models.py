"""Pydantic models for registration and login."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from iam.application.value_objects import AuthResult, CurrentUser


class RegisterRequest(BaseModel):
    """Request model for registering into an existing tenant."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., min_length=3, max_length=255)
    full_name: str = Field(..., alias="fullName", min_length=1, max_length=200)
    password: str = Field(..., min_length=8, max_length=128)
    tenant_identifier: str = Field(
        ..., alias="tenantIdentifier", min_length=1, max_length=50
    )


class LoginRequest(BaseModel):
    """Request model for logging in."""

    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class AuthResponse(BaseModel):
    """Bearer token issued after registration or login."""

    model_config = ConfigDict(populate_by_name=True)

    token: str
    expires_at: datetime = Field(..., alias="expiresAt")
    user_id: str = Field(..., alias="userId")
    email: str
    full_name: str = Field(..., alias="fullName")
    tenant_id: str = Field(..., alias="tenantId")

    @classmethod
    def from_result(cls, result: AuthResult) -> AuthResponse:
        return cls(
            token=result.token,
            expires_at=result.expires_at,
            user_id=result.user_id,
            email=result.email,
            full_name=result.full_name,
            tenant_id=result.tenant_id,
        )


class MeResponse(BaseModel):
    """Identity of the authenticated caller."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    email: str
    full_name: str = Field(..., alias="fullName")
    tenant_id: str = Field(..., alias="tenantId")

    @classmethod
    def from_current_user(cls, user: CurrentUser) -> MeResponse:
        return cls(
            user_id=user.user_id.value,
            email=user.email,
            full_name=user.full_name,
            tenant_id=user.tenant_id.value,
        )
