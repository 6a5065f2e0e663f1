"""Portfolio aggregate and its sections."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from iam.domain.value_objects import TenantId, UserId, normalize_slug
from portfolios.domain.value_objects import PortfolioId, SectionId, SectionType, Theme

TITLE_MAX_LENGTH = 100
DEFAULT_WELCOME_TEXT = "Welcome to my portfolio! I am a software engineer..."


@dataclass(frozen=True)
class Section:
    """One content block of a portfolio.

    Sections have no lifecycle of their own: they are created with the
    portfolio or by replacing the whole set, and destroyed the same way.
    """

    id: SectionId
    section_type: str
    sort_order: int
    content: dict[str, Any]
    is_visible: bool = True

    @classmethod
    def create(
        cls,
        section_type: str,
        sort_order: int,
        content: dict[str, Any],
        is_visible: bool = True,
    ) -> Section:
        return cls(
            id=SectionId.generate(),
            section_type=section_type,
            sort_order=sort_order,
            content=content,
            is_visible=is_visible,
        )


@dataclass
class Portfolio:
    """Portfolio aggregate owned by one user of one tenant.

    Business rules:
    - The slug is unique within the owning tenant only
    - A new portfolio starts with a single Markdown welcome section
    - ``sections`` holds the current generation, ordered by sort order
    """

    id: PortfolioId
    tenant_id: TenantId | None
    user_id: UserId
    title: str
    slug: str
    theme: Theme = field(default_factory=Theme)
    is_published: bool = True
    section_generation: int = 0
    sections: list[Section] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        user_id: UserId,
        title: str,
        slug: str,
        tenant_id: TenantId | None = None,
    ) -> Portfolio:
        """Factory method for creating a portfolio with its default section.

        Args:
            user_id: Owner of the portfolio
            title: Display title
            slug: Public identifier, unique within the tenant
            tenant_id: Owning tenant; left unset it is stamped from the
                resolved tenant when persisted

        Raises:
            ValueError: If the title is blank or too long, or the slug is malformed
        """
        title = title.strip()
        if not title or len(title) > TITLE_MAX_LENGTH:
            raise ValueError("Portfolio title must be 1-100 characters")

        return cls(
            id=PortfolioId.generate(),
            tenant_id=tenant_id,
            user_id=user_id,
            title=title,
            slug=normalize_slug(slug),
            sections=[
                Section.create(
                    SectionType.MARKDOWN, 0, {"text": DEFAULT_WELCOME_TEXT}
                )
            ],
        )

    @property
    def visible_sections(self) -> list[Section]:
        """Visible sections of the current generation in display order."""
        return sorted(
            (s for s in self.sections if s.is_visible), key=lambda s: s.sort_order
        )
