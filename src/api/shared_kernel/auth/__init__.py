"""Authentication shared kernel module."""

from shared_kernel.auth.observability import (
    DefaultTokenServiceProbe,
    TokenServiceProbe,
)
from shared_kernel.auth.token_service import (
    InvalidTokenError,
    IssuedToken,
    TokenClaims,
    TokenService,
)

__all__ = [
    "DefaultTokenServiceProbe",
    "InvalidTokenError",
    "IssuedToken",
    "TokenClaims",
    "TokenService",
    "TokenServiceProbe",
]
