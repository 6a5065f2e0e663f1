"""Database dependency injection for FastAPI.

Provides the engine, the tenant-scoped session factory and the request
session dependency. Every session handed to a request carries that
request's TenantContext.
"""

from __future__ import annotations

import threading
from typing import Annotated, AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from infrastructure.database.engines import create_engine
from infrastructure.database.tenant_scoping import (
    create_tenant_sessionmaker,
    open_tenant_session,
)
from infrastructure.dependencies import get_request_tenant_context
from infrastructure.observability import DefaultConnectionProbe
from infrastructure.settings import get_database_settings
from shared_kernel.middleware.tenant_context import TenantContext

# Module-level probe for observability
_probe = DefaultConnectionProbe()

# Module-level engine instance (created on first use)
_engine: AsyncEngine | None = None

# Module-level sessionmaker instance (created with the engine)
_sessionmaker: async_sessionmaker[AsyncSession] | None = None

# Thread lock for safe engine initialization
_engine_lock = threading.Lock()


def get_engine() -> AsyncEngine:
    """Get the database engine (singleton).

    Creates engine on first call and caches for subsequent calls.
    Uses double-check locking for thread-safe initialization.
    Also creates and caches the sessionmaker for efficient session creation.

    Returns:
        Configured async engine
    """
    global _engine, _sessionmaker
    if _engine is None:
        with _engine_lock:
            # Double-check after acquiring lock
            if _engine is None:
                settings = get_database_settings()
                _engine = create_engine(settings)
                _sessionmaker = create_tenant_sessionmaker(_engine)
                _probe.engine_created(target=settings.connection_string)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the tenant-scoped sessionmaker (singleton)."""
    get_engine()
    assert _sessionmaker is not None
    return _sessionmaker


async def get_write_session(
    tenant_context: Annotated[TenantContext, Depends(get_request_tenant_context)],
) -> AsyncGenerator[AsyncSession, None]:
    """Provide a tenant-scoped session (FastAPI dependency).

    The session is configured to NOT auto-commit. Callers must explicitly
    manage transactions using `async with session.begin()`.

    Yields:
        AsyncSession whose tenant-owned queries are restricted to the
        request's tenant
    """
    async with open_tenant_session(get_session_factory(), tenant_context) as session:
        yield session


async def close_database_connections() -> None:
    """Close the database engine connections.

    Should be called on application shutdown to properly cleanup connections.
    Also resets the sessionmaker to allow reinitialization.
    """
    global _engine, _sessionmaker

    if _engine is not None:
        await _engine.dispose()
        _probe.pool_closed()
        _engine = None
        _sessionmaker = None
