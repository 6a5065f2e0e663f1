"""SQLAlchemy ORM models for portfolios and their sections."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin
from infrastructure.database.tenant_scoping import TenantOwned

if TYPE_CHECKING:
    from portfolios.domain.aggregates import Section
    from portfolios.domain.value_objects import PortfolioId


class PortfolioModel(Base, TenantOwned, TimestampMixin):
    """ORM model for portfolios table.

    ``section_generation`` names the generation of ``portfolio_sections``
    rows that is currently live. Replacing sections writes a new
    generation and flips this column in the same transaction.
    """

    __tablename__ = "portfolios"
    __table_args__ = (UniqueConstraint("tenant_id", "slug"),)

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    slug: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    is_published: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    theme_name: Mapped[str] = mapped_column(
        String(50), nullable=False, default="default"
    )
    theme_primary_color: Mapped[str] = mapped_column(
        String(20), nullable=False, default="#000000"
    )
    theme_font_body: Mapped[str] = mapped_column(
        String(50), nullable=False, default="Inter"
    )
    section_generation: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<PortfolioModel(id={self.id}, slug={self.slug})>"


class PortfolioSectionModel(Base, TimestampMixin):
    """ORM model for portfolio_sections table.

    Sections carry no tenant id of their own. They are only ever reached
    through a portfolio that was loaded via the tenant-restricted path.
    """

    __tablename__ = "portfolio_sections"
    __table_args__ = (
        Index(
            "ix_portfolio_sections_portfolio_id_generation",
            "portfolio_id",
            "generation",
        ),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    portfolio_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("portfolios.id", ondelete="CASCADE"),
        nullable=False,
    )
    section_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False)
    is_visible: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    content: Mapped[dict[str, Any]] = mapped_column(nullable=False)
    generation: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<PortfolioSectionModel(id={self.id}, type={self.section_type}, "
            f"generation={self.generation})>"
        )

    @classmethod
    def from_domain(
        cls, section: Section, portfolio_id: PortfolioId, generation: int
    ) -> PortfolioSectionModel:
        """Build the row for ``section`` within the given generation."""
        return cls(
            id=section.id.value,
            portfolio_id=portfolio_id.value,
            section_type=str(section.section_type),
            sort_order=section.sort_order,
            is_visible=section.is_visible,
            content=section.content,
            generation=generation,
        )
