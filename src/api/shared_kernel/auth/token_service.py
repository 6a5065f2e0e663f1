"""Bearer token issuance and validation.

Tokens are HS256-signed JWTs carrying the user identity and the id of the
tenant the user belongs to. The ``tenantId`` claim is what the tenant
resolver trusts ahead of the X-Tenant-Id header.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError
from ulid import ULID

from shared_kernel.auth.observability import DefaultTokenServiceProbe

if TYPE_CHECKING:
    from shared_kernel.auth.observability import TokenServiceProbe

ALGORITHM = "HS256"
TENANT_CLAIM = "tenantId"


@dataclass(frozen=True)
class TokenClaims:
    """Validated token claims."""

    sub: str
    email: str
    full_name: str
    tenant_id: str | None
    jti: str
    expires_at: datetime


@dataclass(frozen=True)
class IssuedToken:
    """A freshly signed token and its expiry."""

    token: str
    expires_at: datetime


class InvalidTokenError(Exception):
    """Raised when token validation fails."""

    pass


class TokenService:
    """Issues and validates HS256 bearer tokens.

    Validates token signature, expiry, issuer, and audience.
    """

    def __init__(
        self,
        secret: str,
        issuer: str,
        audience: str,
        expiration: timedelta = timedelta(minutes=1440),
        probe: TokenServiceProbe | None = None,
    ):
        """Initialize the token service.

        Args:
            secret: Shared HMAC signing secret.
            issuer: Value of the ``iss`` claim issued and expected.
            audience: Value of the ``aud`` claim issued and expected.
            expiration: Lifetime of issued tokens.
            probe: Observability probe for logging events.
        """
        self._secret = secret
        self._issuer = issuer
        self._audience = audience
        self._expiration = expiration
        self._probe = probe or DefaultTokenServiceProbe()

    def issue(
        self,
        user_id: str,
        email: str,
        full_name: str,
        tenant_id: str,
    ) -> IssuedToken:
        """Sign a token for an authenticated user.

        Args:
            user_id: Subject of the token.
            email: User email address.
            full_name: User display name.
            tenant_id: Tenant the user belongs to.

        Returns:
            IssuedToken with the encoded JWT and its expiry.
        """
        now = datetime.now(UTC)
        expires_at = now + self._expiration
        claims: dict[str, Any] = {
            "sub": user_id,
            "email": email,
            "fullName": full_name,
            TENANT_CLAIM: tenant_id,
            "jti": str(ULID()),
            "iss": self._issuer,
            "aud": self._audience,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(claims, self._secret, algorithm=ALGORITHM)
        self._probe.token_issued(user_id=user_id, tenant_id=tenant_id)
        return IssuedToken(token=token, expires_at=expires_at)

    def validate(self, token: str) -> TokenClaims:
        """Validate a token and return its claims.

        Args:
            token: The JWT token string.

        Returns:
            TokenClaims containing the validated claims.

        Raises:
            InvalidTokenError: If token is invalid, expired, or verification fails.
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                audience=self._audience,
                issuer=self._issuer,
            )
        except ExpiredSignatureError as e:
            self._probe.token_validation_failed(reason="Token expired")
            raise InvalidTokenError("Token has expired") from e
        except JWTClaimsError as e:
            self._probe.token_validation_failed(reason=f"Invalid claims: {e}")
            raise InvalidTokenError(f"Invalid token claims: {e}") from e
        except JWTError as e:
            self._probe.token_validation_failed(reason=f"Malformed token: {e}")
            raise InvalidTokenError(f"Invalid token: {e}") from e

        sub = claims.get("sub")
        if not sub:
            self._probe.token_validation_failed(reason="Missing sub claim")
            raise InvalidTokenError("Invalid token: missing subject")

        self._probe.token_validated(user_id=sub)
        return TokenClaims(
            sub=sub,
            email=claims.get("email", ""),
            full_name=claims.get("fullName", ""),
            tenant_id=claims.get(TENANT_CLAIM),
            jti=claims.get("jti", ""),
            expires_at=datetime.fromtimestamp(claims["exp"], UTC),
        )
