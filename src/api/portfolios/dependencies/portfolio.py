"""FastAPI dependencies for portfolio management."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.dependencies import get_write_session
from portfolios.application.observability import (
    DefaultPortfolioServiceProbe,
    PortfolioServiceProbe,
)
from portfolios.application.services import PortfolioService
from portfolios.infrastructure.portfolio_repository import PortfolioRepository


def get_portfolio_service_probe() -> PortfolioServiceProbe:
    """Get PortfolioServiceProbe instance."""
    return DefaultPortfolioServiceProbe()


def get_portfolio_repository(
    session: Annotated[AsyncSession, Depends(get_write_session)],
) -> PortfolioRepository:
    """Get PortfolioRepository instance bound to the request session."""
    return PortfolioRepository(session=session)


def get_portfolio_service(
    portfolio_repository: Annotated[
        PortfolioRepository, Depends(get_portfolio_repository)
    ],
    session: Annotated[AsyncSession, Depends(get_write_session)],
    probe: Annotated[PortfolioServiceProbe, Depends(get_portfolio_service_probe)],
) -> PortfolioService:
    """Get PortfolioService instance.

    Args:
        portfolio_repository: Portfolio repository
        session: Tenant-scoped session for transaction management
        probe: Portfolio service probe for observability

    Returns:
        PortfolioService instance
    """
    return PortfolioService(
        portfolio_repository=portfolio_repository,
        session=session,
        probe=probe,
    )
