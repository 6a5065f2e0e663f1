"""Ports (interfaces) for IAM bounded context.

Ports define the contracts for repositories and domain services without
specifying implementation details. This allows for dependency inversion
and makes the domain layer independent of infrastructure.
"""

from iam.ports.exceptions import (
    DuplicateTenantSlugError,
    GlobalEmailConflictError,
    InvalidCredentialsError,
    RegistrationTenantError,
)
from iam.ports.repositories import ITenantRepository, IUserRepository

__all__ = [
    "DuplicateTenantSlugError",
    "GlobalEmailConflictError",
    "ITenantRepository",
    "IUserRepository",
    "InvalidCredentialsError",
    "RegistrationTenantError",
]
