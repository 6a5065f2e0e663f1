"""Generation-based replacement of a portfolio's sections.

A replace runs in a single transaction:

1. Lock the portfolio row (``SELECT ... FOR UPDATE``) through the
   tenant-restricted path.
2. Insert the new sections tagged with ``section_generation + 1``.
3. Flip ``portfolio.section_generation`` to the new generation.
4. Delete every section of any other generation.

Readers only ever see rows of the committed ``section_generation``, so a
failure at any step leaves the previous set fully intact and concurrent
replaces of one portfolio serialize on the row lock.
"""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from portfolios.domain.aggregates import Section
from portfolios.domain.value_objects import PortfolioId
from portfolios.infrastructure.models import PortfolioModel, PortfolioSectionModel
from portfolios.infrastructure.observability import (
    DefaultSectionStoreProbe,
    SectionStoreProbe,
)
from portfolios.ports.exceptions import PortfolioNotFoundError, ReplacePersistenceError
from portfolios.ports.repositories import ISectionStore


class SectionStore(ISectionStore):
    """Atomically swaps a portfolio's section set.

    The store owns its transaction: the session must not have one open
    when ``replace`` is called.
    """

    def __init__(
        self,
        session: AsyncSession,
        probe: SectionStoreProbe | None = None,
    ) -> None:
        self._session = session
        self._probe = probe or DefaultSectionStoreProbe()

    async def replace(self, portfolio_id: PortfolioId, sections: list[Section]) -> int:
        """Replace all sections of a portfolio with ``sections``.

        Args:
            portfolio_id: Portfolio of the resolved tenant
            sections: The complete new section set

        Returns:
            The generation now live

        Raises:
            PortfolioNotFoundError: If the resolved tenant has no such portfolio
            ReplacePersistenceError: If the database rejected the swap
        """
        try:
            async with self._session.begin():
                stmt = (
                    select(PortfolioModel)
                    .where(PortfolioModel.id == portfolio_id.value)
                    .with_for_update()
                    .execution_options(populate_existing=True)
                )
                result = await self._session.execute(stmt)
                portfolio = result.scalar_one_or_none()
                if portfolio is None:
                    raise PortfolioNotFoundError(
                        f"Portfolio {portfolio_id.value} not found"
                    )

                generation = portfolio.section_generation + 1
                for section in sections:
                    self._session.add(
                        PortfolioSectionModel.from_domain(
                            section, portfolio_id, generation
                        )
                    )
                await self._session.flush()

                portfolio.section_generation = generation

                await self._session.execute(
                    delete(PortfolioSectionModel)
                    .where(PortfolioSectionModel.portfolio_id == portfolio_id.value)
                    .where(PortfolioSectionModel.generation != generation)
                )
        except SQLAlchemyError as e:
            self._probe.replace_failed(portfolio_id.value, str(e))
            raise ReplacePersistenceError(
                f"Could not replace sections of portfolio {portfolio_id.value}"
            ) from e

        self._probe.sections_replaced(portfolio_id.value, generation, len(sections))
        return generation
