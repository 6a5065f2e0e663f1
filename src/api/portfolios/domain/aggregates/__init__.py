"""Portfolio aggregates."""

from portfolios.domain.aggregates.portfolio import Portfolio, Section

__all__ = ["Portfolio", "Section"]
