"""Portfolio application service.

Handles creating portfolios and reading them back within the resolved
tenant. Section content changes only through ingestion.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from iam.domain.value_objects import UserId, normalize_slug
from portfolios.application.observability import (
    DefaultPortfolioServiceProbe,
    PortfolioServiceProbe,
)
from portfolios.domain.aggregates import Portfolio
from portfolios.domain.value_objects import PortfolioId
from portfolios.ports.exceptions import DuplicateSlugInTenantError
from portfolios.ports.repositories import IPortfolioRepository


class PortfolioService:
    """Application service for portfolio management."""

    def __init__(
        self,
        portfolio_repository: IPortfolioRepository,
        session: AsyncSession,
        probe: PortfolioServiceProbe | None = None,
    ):
        """Initialize PortfolioService with dependencies.

        Args:
            portfolio_repository: Repository for portfolio persistence
            session: Tenant-scoped session for transaction management
            probe: Optional domain probe for observability
        """
        self._portfolio_repository = portfolio_repository
        self._session = session
        self._probe = probe or DefaultPortfolioServiceProbe()

    async def create_portfolio(
        self, user_id: UserId, title: str, slug: str
    ) -> Portfolio:
        """Create a portfolio for ``user_id`` in the resolved tenant.

        Returns:
            The created Portfolio with its default welcome section

        Raises:
            ValueError: If the title or slug is malformed
            DuplicateSlugInTenantError: If the tenant already uses the slug
            TenantUnresolvedError: If the request has no resolved tenant
        """
        portfolio = Portfolio.create(user_id=user_id, title=title, slug=slug)

        async with self._session.begin():
            try:
                await self._portfolio_repository.add(portfolio)
            except DuplicateSlugInTenantError:
                self._probe.duplicate_slug(portfolio.slug)
                raise

        self._probe.portfolio_created(
            portfolio_id=portfolio.id.value,
            slug=portfolio.slug,
            user_id=user_id.value,
        )
        return portfolio

    async def get_portfolio(self, portfolio_id: PortfolioId) -> Portfolio | None:
        """Retrieve a portfolio of the resolved tenant by ID."""
        portfolio = await self._portfolio_repository.get_by_id(portfolio_id)
        if portfolio is None:
            self._probe.portfolio_not_found(portfolio_id.value)
        return portfolio

    async def get_portfolio_by_slug(self, slug: str) -> Portfolio | None:
        """Retrieve a portfolio of the resolved tenant by slug.

        Malformed slugs cannot exist, so they are reported as not found.
        """
        try:
            normalized = normalize_slug(slug)
        except ValueError:
            self._probe.portfolio_not_found(slug)
            return None

        portfolio = await self._portfolio_repository.get_by_slug(normalized)
        if portfolio is None:
            self._probe.portfolio_not_found(normalized)
        return portfolio

    async def list_portfolios(self) -> list[Portfolio]:
        """List portfolios of the resolved tenant."""
        return await self._portfolio_repository.list_all()
