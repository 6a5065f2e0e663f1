"""Application-layer value objects for IAM bounded context.

These are value objects specific to the application layer, representing
cross-cutting concerns like authentication context.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from iam.domain.value_objects import TenantId, UserId


@dataclass(frozen=True)
class CurrentUser:
    """The authenticated caller of a request.

    Built from a validated bearer token; tenant_id is the tenant the user
    belongs to, which is also the tenant the request resolved to.
    """

    user_id: UserId
    email: str
    full_name: str
    tenant_id: TenantId


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful registration or login."""

    token: str
    expires_at: datetime
    user_id: str
    email: str
    full_name: str
    tenant_id: str
