"""Unit tests for the get_current_user dependency."""

from __future__ import annotations

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from iam.dependencies.user import get_current_user
from iam.domain.value_objects import TenantId
from shared_kernel.middleware.tenant_context import TenantContext

USER_ID = "01ARZ3NDEKTSV4RRFFQ69G5FAV"


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def _token(token_service, tenant_id: str | None) -> str:
    return token_service.issue(
        user_id=USER_ID,
        email="ada@acme.io",
        full_name="Ada Lovelace",
        tenant_id=tenant_id,
    ).token


class TestGetCurrentUser:
    """Tests for bearer-token authentication of the caller."""

    def test_valid_token_for_request_tenant(self, token_service):
        """The caller's identity comes from the token claims."""
        tenant_id = TenantId.generate().value
        context = TenantContext.for_tenant(tenant_id, source="token")

        user = get_current_user(
            token_service, context, _credentials(_token(token_service, tenant_id))
        )

        assert user.user_id.value == USER_ID
        assert user.email == "ada@acme.io"
        assert user.full_name == "Ada Lovelace"
        assert user.tenant_id.value == tenant_id

    def test_unresolved_context_accepts_token(self, token_service):
        """On exempt paths the token alone identifies the caller."""
        tenant_id = TenantId.generate().value

        user = get_current_user(
            token_service,
            TenantContext(),
            _credentials(_token(token_service, tenant_id)),
        )

        assert user.tenant_id.value == tenant_id

    def test_missing_credentials_is_401(self, token_service):
        """No bearer token means unauthenticated."""
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(token_service, TenantContext(), None)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["code"] == "UNAUTHENTICATED"
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}

    def test_invalid_token_is_401(self, token_service):
        """Malformed tokens are rejected."""
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(token_service, TenantContext(), _credentials("garbage"))

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["code"] == "INVALID_TOKEN"

    def test_token_without_tenant_claim_is_401(self, token_service):
        """Every user belongs to a tenant, so the claim is required."""
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(
                token_service, TenantContext(), _credentials(_token(token_service, None))
            )

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["code"] == "INVALID_TOKEN"

    def test_token_for_other_tenant_is_403(self, token_service):
        """A token from another tenant cannot act in the request tenant."""
        context = TenantContext.for_tenant(TenantId.generate().value, source="header")
        token = _token(token_service, TenantId.generate().value)

        with pytest.raises(HTTPException) as exc_info:
            get_current_user(token_service, context, _credentials(token))

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail["code"] == "TENANT_MISMATCH"
