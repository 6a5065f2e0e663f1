"""Ports (interfaces) for the portfolios bounded context."""

from portfolios.ports.exceptions import (
    DuplicateSlugInTenantError,
    PortfolioNotFoundError,
    ReplacePersistenceError,
)
from portfolios.ports.repositories import IPortfolioRepository, ISectionStore

__all__ = [
    "DuplicateSlugInTenantError",
    "IPortfolioRepository",
    "ISectionStore",
    "PortfolioNotFoundError",
    "ReplacePersistenceError",
]
