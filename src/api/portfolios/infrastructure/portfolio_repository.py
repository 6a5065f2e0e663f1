"""PostgreSQL implementation of IPortfolioRepository.

Portfolios are tenant-owned, so every statement here is restricted to the
session's resolved tenant. Sections are read only after their portfolio
has been found through that restricted path.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from iam.domain.value_objects import TenantId, UserId
from portfolios.domain.aggregates import Portfolio, Section
from portfolios.domain.value_objects import PortfolioId, SectionId, Theme
from portfolios.infrastructure.models import PortfolioModel, PortfolioSectionModel
from portfolios.infrastructure.observability import (
    DefaultPortfolioRepositoryProbe,
    PortfolioRepositoryProbe,
)
from portfolios.ports.exceptions import DuplicateSlugInTenantError
from portfolios.ports.repositories import IPortfolioRepository


class PortfolioRepository(IPortfolioRepository):
    """Repository managing storage for Portfolio aggregates."""

    def __init__(
        self,
        session: AsyncSession,
        probe: PortfolioRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: Tenant-scoped AsyncSession
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultPortfolioRepositoryProbe()

    async def add(self, portfolio: Portfolio) -> None:
        """Insert a new portfolio and its initial sections.

        The tenant id is stamped from the session's context when the
        aggregate does not carry one, and written back onto the aggregate.

        Raises:
            DuplicateSlugInTenantError: If the tenant already uses the slug
        """
        if await self.get_by_slug(portfolio.slug) is not None:
            self._probe.duplicate_slug(portfolio.slug)
            raise DuplicateSlugInTenantError(
                f"Portfolio slug '{portfolio.slug}' is already in use"
            )

        model = PortfolioModel(
            id=portfolio.id.value,
            tenant_id=portfolio.tenant_id.value if portfolio.tenant_id else None,
            user_id=portfolio.user_id.value,
            slug=portfolio.slug,
            title=portfolio.title,
            is_published=portfolio.is_published,
            theme_name=portfolio.theme.name,
            theme_primary_color=portfolio.theme.primary_color,
            theme_font_body=portfolio.theme.font_body,
            section_generation=portfolio.section_generation,
        )
        self._session.add(model)

        try:
            # Flush the parent first so section rows can reference it
            await self._session.flush()
        except IntegrityError as e:
            if "slug" in str(e.orig):
                self._probe.duplicate_slug(portfolio.slug)
                raise DuplicateSlugInTenantError(
                    f"Portfolio slug '{portfolio.slug}' is already in use"
                ) from e
            raise

        for section in portfolio.sections:
            self._session.add(
                PortfolioSectionModel.from_domain(
                    section, portfolio.id, portfolio.section_generation
                )
            )
        await self._session.flush()

        portfolio.tenant_id = TenantId(value=model.tenant_id)
        self._probe.portfolio_saved(portfolio.id.value, model.tenant_id)

    async def get_by_id(self, portfolio_id: PortfolioId) -> Portfolio | None:
        """Fetch a portfolio of the resolved tenant with its live sections."""
        stmt = select(PortfolioModel).where(PortfolioModel.id == portfolio_id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return self._to_domain(model, await self._load_sections(model))

    async def get_by_slug(self, slug: str) -> Portfolio | None:
        """Fetch a portfolio of the resolved tenant by its slug."""
        stmt = select(PortfolioModel).where(PortfolioModel.slug == slug)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return self._to_domain(model, await self._load_sections(model))

    async def list_all(self) -> list[Portfolio]:
        """List the resolved tenant's portfolios, without their sections."""
        stmt = select(PortfolioModel).order_by(PortfolioModel.created_at)
        result = await self._session.execute(stmt)
        return [self._to_domain(model, []) for model in result.scalars().all()]

    async def exists(self, portfolio_id: PortfolioId) -> bool:
        """Check whether the resolved tenant owns the portfolio."""
        # Selecting the mapped column keeps the tenant restriction in force
        stmt = select(PortfolioModel.id).where(PortfolioModel.id == portfolio_id.value)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def _load_sections(self, model: PortfolioModel) -> list[PortfolioSectionModel]:
        stmt = (
            select(PortfolioSectionModel)
            .where(PortfolioSectionModel.portfolio_id == model.id)
            .where(PortfolioSectionModel.generation == model.section_generation)
            .order_by(PortfolioSectionModel.sort_order)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    def _to_domain(
        model: PortfolioModel, sections: list[PortfolioSectionModel]
    ) -> Portfolio:
        return Portfolio(
            id=PortfolioId(value=model.id),
            tenant_id=TenantId(value=model.tenant_id),
            user_id=UserId(value=model.user_id),
            title=model.title,
            slug=model.slug,
            theme=Theme(
                name=model.theme_name,
                primary_color=model.theme_primary_color,
                font_body=model.theme_font_body,
            ),
            is_published=model.is_published,
            section_generation=model.section_generation,
            sections=[
                Section(
                    id=SectionId(value=s.id),
                    section_type=s.section_type,
                    sort_order=s.sort_order,
                    content=s.content,
                    is_visible=s.is_visible,
                )
                for s in sections
            ],
        )

