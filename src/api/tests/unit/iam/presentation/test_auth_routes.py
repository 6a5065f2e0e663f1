"""Unit tests for registration, login and /me routes."""

from __future__ import annotations

import pytest

PASSWORD = "s3cure-passw0rd"


def _register_body(email: str, tenant: str, password: str = PASSWORD) -> dict:
    return {
        "email": email,
        "fullName": "Ada Lovelace",
        "password": password,
        "tenantIdentifier": tenant,
    }


class TestRegisterRoute:
    """Tests for POST /api/auth/register."""

    @pytest.mark.asyncio
    async def test_register_returns_token(self, api_client, create_tenant):
        """Registration returns a bearer token bound to the tenant."""
        acme = await create_tenant("acme")

        response = await api_client.post(
            "/api/auth/register", json=_register_body("Ada@Acme.io", "acme")
        )

        assert response.status_code == 200
        body = response.json()
        assert body["token"]
        assert body["email"] == "ada@acme.io"
        assert body["fullName"] == "Ada Lovelace"
        assert body["tenantId"] == acme.id.value
        assert "expiresAt" in body

    @pytest.mark.asyncio
    async def test_unknown_tenant_is_400(self, api_client):
        """The tenant named in the body must exist."""
        response = await api_client.post(
            "/api/auth/register", json=_register_body("ada@acme.io", "nobody")
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_REGISTRATION_TENANT"

    @pytest.mark.asyncio
    async def test_inactive_tenant_is_400(self, api_client, create_tenant):
        """Deactivated tenants accept no registrations."""
        await create_tenant("dormant", active=False)

        response = await api_client.post(
            "/api/auth/register", json=_register_body("ada@acme.io", "dormant")
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_duplicate_email_is_409(self, api_client, create_tenant):
        """Emails are unique across tenants."""
        await create_tenant("acme")
        await create_tenant("globex")
        await api_client.post(
            "/api/auth/register", json=_register_body("ada@acme.io", "acme")
        )

        response = await api_client.post(
            "/api/auth/register", json=_register_body("ada@acme.io", "globex")
        )

        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "GLOBAL_EMAIL_CONFLICT"

    @pytest.mark.asyncio
    async def test_malformed_email_is_400(self, api_client, create_tenant):
        """Emails without an @ are rejected."""
        await create_tenant("acme")

        response = await api_client.post(
            "/api/auth/register", json=_register_body("ada.acme.io", "acme")
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_REGISTRATION"

    @pytest.mark.asyncio
    async def test_short_password_is_422(self, api_client, create_tenant):
        """Passwords shorter than eight characters fail validation."""
        await create_tenant("acme")

        response = await api_client.post(
            "/api/auth/register",
            json=_register_body("ada@acme.io", "acme", password="short"),
        )

        assert response.status_code == 422


class TestLoginRoute:
    """Tests for POST /api/auth/login."""

    @pytest.mark.asyncio
    async def test_login_returns_token(self, api_client, create_tenant, register_user):
        """Valid credentials return a token for the user's tenant."""
        acme = await create_tenant("acme")
        await register_user("acme", "ada@acme.io")

        response = await api_client.post(
            "/api/auth/login", json={"email": "ada@acme.io", "password": PASSWORD}
        )

        assert response.status_code == 200
        assert response.json()["tenantId"] == acme.id.value

    @pytest.mark.asyncio
    async def test_wrong_password_is_401(self, api_client, create_tenant, register_user):
        """Wrong passwords are rejected."""
        await create_tenant("acme")
        await register_user("acme", "ada@acme.io")

        response = await api_client.post(
            "/api/auth/login", json={"email": "ada@acme.io", "password": "nope-nope"}
        )

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "INVALID_CREDENTIALS"

    @pytest.mark.asyncio
    async def test_unknown_email_is_401(self, api_client):
        """Unknown users get the same answer as wrong passwords."""
        response = await api_client.post(
            "/api/auth/login", json={"email": "who@acme.io", "password": PASSWORD}
        )

        assert response.status_code == 401
        assert response.json()["detail"]["message"] == "Invalid credentials"


class TestMeRoute:
    """Tests for GET /api/auth/me."""

    @pytest.mark.asyncio
    async def test_me_returns_identity(self, api_client, create_tenant, register_user):
        """The token's claims are echoed back."""
        acme = await create_tenant("acme")
        auth = await register_user("acme", "ada@acme.io")

        response = await api_client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {auth['token']}"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "userId": auth["userId"],
            "email": "ada@acme.io",
            "fullName": "Test User",
            "tenantId": acme.id.value,
        }

    @pytest.mark.asyncio
    async def test_me_without_token_is_401(self, api_client):
        """Anonymous callers are unauthenticated."""
        response = await api_client.get("/api/auth/me")

        assert response.status_code == 401
