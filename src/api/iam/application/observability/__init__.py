"""Domain-Oriented Observability for IAM application layer.

Probes for application service operations following Domain-Oriented Observability patterns.
"""

from iam.application.observability.account_service_probe import (
    AccountServiceProbe,
    DefaultAccountServiceProbe,
)
from iam.application.observability.tenant_service_probe import (
    DefaultTenantServiceProbe,
    TenantServiceProbe,
)

__all__ = [
    "AccountServiceProbe",
    "DefaultAccountServiceProbe",
    "TenantServiceProbe",
    "DefaultTenantServiceProbe",
]
