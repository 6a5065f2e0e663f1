"""Table creation for development and test databases.

Imports every bounded context's models so their tables are registered on
``Base.metadata`` before ``create_all`` runs.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

import iam.infrastructure.models  # noqa: F401
import ingestion.infrastructure.models  # noqa: F401
import portfolios.infrastructure.models  # noqa: F401
from infrastructure.database.models import Base


async def create_schema(engine: AsyncEngine) -> int:
    """Create all missing tables.

    Existing tables are left untouched.

    Returns:
        Number of tables known to the metadata
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return len(Base.metadata.tables)


async def drop_schema(engine: AsyncEngine) -> None:
    """Drop all tables known to the metadata."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
