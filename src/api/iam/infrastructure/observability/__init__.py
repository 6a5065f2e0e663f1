"""Domain-Oriented Observability for IAM infrastructure.

Probes for repository operations following Domain-Oriented Observability patterns.
"""

from iam.infrastructure.observability.repository_probe import (
    DefaultTenantRepositoryProbe,
    DefaultUserRepositoryProbe,
    TenantRepositoryProbe,
    UserRepositoryProbe,
)

__all__ = [
    "UserRepositoryProbe",
    "DefaultUserRepositoryProbe",
    "TenantRepositoryProbe",
    "DefaultTenantRepositoryProbe",
]
