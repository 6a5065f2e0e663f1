"""Protocol for portfolio application service observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class PortfolioServiceProbe(Protocol):
    """Domain probe for portfolio application service operations."""

    def portfolio_created(self, portfolio_id: str, slug: str, user_id: str) -> None:
        """Record that a portfolio was created."""
        ...

    def portfolio_not_found(self, identifier: str) -> None:
        """Record that a portfolio lookup found nothing in the tenant."""
        ...

    def duplicate_slug(self, slug: str) -> None:
        """Record that a slug was already used in the tenant."""
        ...

    def with_context(self, context: ObservationContext) -> PortfolioServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultPortfolioServiceProbe:
    """Default implementation of PortfolioServiceProbe using structlog."""

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
    ) -> DefaultPortfolioServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultPortfolioServiceProbe(logger=self._logger, context=context)

    def portfolio_created(self, portfolio_id: str, slug: str, user_id: str) -> None:
        """Record that a portfolio was created."""
        self._logger.info(
            "portfolio_created",
            portfolio_id=portfolio_id,
            slug=slug,
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def portfolio_not_found(self, identifier: str) -> None:
        """Record that a portfolio lookup found nothing in the tenant."""
        self._logger.debug(
            "portfolio_not_found",
            identifier=identifier,
            **self._get_context_kwargs(),
        )

    def duplicate_slug(self, slug: str) -> None:
        """Record that a slug was already used in the tenant."""
        self._logger.warning(
            "portfolio_slug_conflict",
            slug=slug,
            **self._get_context_kwargs(),
        )
