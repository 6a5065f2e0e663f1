"""Application services for IAM bounded context.

Application services orchestrate domain aggregates, repositories, and
other infrastructure to fulfill use cases. They are the "front door" to
the IAM context.
"""

from iam.application.services.account_service import AccountService
from iam.application.services.tenant_service import TenantService

__all__ = [
    "AccountService",
    "TenantService",
]
