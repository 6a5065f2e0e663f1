"""Application services for the portfolios bounded context."""

from portfolios.application.services.portfolio_service import PortfolioService

__all__ = ["PortfolioService"]
