"""Domain probes for portfolio persistence.

Following Domain-Oriented Observability patterns, these probes capture
domain-significant events at the persistence boundary.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class PortfolioRepositoryProbe(Protocol):
    """Domain probe for portfolio repository operations."""

    def portfolio_saved(self, portfolio_id: str, tenant_id: str) -> None:
        """Record that a portfolio was inserted."""
        ...

    def duplicate_slug(self, slug: str) -> None:
        """Record that the tenant already uses a slug."""
        ...

    def with_context(self, context: ObservationContext) -> PortfolioRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class SectionStoreProbe(Protocol):
    """Domain probe for section replacement."""

    def sections_replaced(
        self, portfolio_id: str, generation: int, section_count: int
    ) -> None:
        """Record that a new section generation went live."""
        ...

    def replace_failed(self, portfolio_id: str, error: str) -> None:
        """Record that a replace was rolled back."""
        ...

    def with_context(self, context: ObservationContext) -> SectionStoreProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultPortfolioRepositoryProbe:
    """Default implementation of PortfolioRepositoryProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(
        self, context: ObservationContext
    ) -> DefaultPortfolioRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultPortfolioRepositoryProbe(logger=self._logger, context=context)

    def portfolio_saved(self, portfolio_id: str, tenant_id: str) -> None:
        """Record that a portfolio was inserted."""
        self._logger.info(
            "portfolio_saved",
            portfolio_id=portfolio_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def duplicate_slug(self, slug: str) -> None:
        """Record that the tenant already uses a slug."""
        self._logger.warning(
            "duplicate_portfolio_slug",
            slug=slug,
            **self._get_context_kwargs(),
        )


class DefaultSectionStoreProbe:
    """Default implementation of SectionStoreProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultSectionStoreProbe:
        """Create a new probe with observation context bound."""
        return DefaultSectionStoreProbe(logger=self._logger, context=context)

    def sections_replaced(
        self, portfolio_id: str, generation: int, section_count: int
    ) -> None:
        """Record that a new section generation went live."""
        self._logger.info(
            "portfolio_sections_replaced",
            portfolio_id=portfolio_id,
            generation=generation,
            section_count=section_count,
            **self._get_context_kwargs(),
        )

    def replace_failed(self, portfolio_id: str, error: str) -> None:
        """Record that a replace was rolled back."""
        self._logger.error(
            "portfolio_sections_replace_failed",
            portfolio_id=portfolio_id,
            error=error,
            **self._get_context_kwargs(),
        )
