"""Domain-Oriented Observability for the portfolios application layer."""

from portfolios.application.observability.portfolio_service_probe import (
    DefaultPortfolioServiceProbe,
    PortfolioServiceProbe,
)

__all__ = [
    "PortfolioServiceProbe",
    "DefaultPortfolioServiceProbe",
]
