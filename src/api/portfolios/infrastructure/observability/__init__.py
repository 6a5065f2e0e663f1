"""Domain-Oriented Observability for portfolios infrastructure."""

from portfolios.infrastructure.observability.store_probe import (
    DefaultPortfolioRepositoryProbe,
    DefaultSectionStoreProbe,
    PortfolioRepositoryProbe,
    SectionStoreProbe,
)

__all__ = [
    "PortfolioRepositoryProbe",
    "DefaultPortfolioRepositoryProbe",
    "SectionStoreProbe",
    "DefaultSectionStoreProbe",
]
