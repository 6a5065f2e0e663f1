"""Repository ports for the portfolios bounded context."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from portfolios.domain.aggregates import Portfolio, Section
from portfolios.domain.value_objects import PortfolioId


@runtime_checkable
class IPortfolioRepository(Protocol):
    """Repository for Portfolio aggregates.

    Portfolios are tenant-owned: every method only sees the resolved tenant.
    """

    async def add(self, portfolio: Portfolio) -> None:
        """Insert a new portfolio together with its initial sections.

        Raises:
            DuplicateSlugInTenantError: If the tenant already uses the slug
        """
        ...

    async def get_by_id(self, portfolio_id: PortfolioId) -> Portfolio | None:
        ...

    async def get_by_slug(self, slug: str) -> Portfolio | None:
        ...

    async def list_all(self) -> list[Portfolio]:
        ...

    async def exists(self, portfolio_id: PortfolioId) -> bool:
        ...


@runtime_checkable
class ISectionStore(Protocol):
    """Atomic replacement of a portfolio's section set."""

    async def replace(self, portfolio_id: PortfolioId, sections: list[Section]) -> int:
        """Swap in ``sections`` as the portfolio's new generation.

        Either every new section becomes visible together and all older
        ones are gone, or nothing changes.

        Returns:
            The new section generation

        Raises:
            PortfolioNotFoundError: If the portfolio is not in the resolved tenant
            ReplacePersistenceError: If the swap could not be committed
        """
        ...
