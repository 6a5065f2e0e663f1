"""Database infrastructure - engine, declarative base and tenant scoping."""

from infrastructure.database.tenant_scoping import (
    INCLUDE_ALL_TENANTS,
    TENANT_CONTEXT_KEY,
    TenantOwned,
    TenantScopedSession,
    create_tenant_sessionmaker,
    open_tenant_session,
)

__all__ = [
    "INCLUDE_ALL_TENANTS",
    "TENANT_CONTEXT_KEY",
    "TenantOwned",
    "TenantScopedSession",
    "create_tenant_sessionmaker",
    "open_tenant_session",
]
