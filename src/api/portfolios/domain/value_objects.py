"""Value objects for the portfolios domain."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from ulid import ULID


@dataclass(frozen=True)
class PortfolioId:
    """Identifier for a Portfolio aggregate."""

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> PortfolioId:
        """Generate a new PortfolioId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> PortfolioId:
        """Create PortfolioId from string value.

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            ULID.from_str(value)
        except ValueError as e:
            raise ValueError(f"Invalid PortfolioId: {value}") from e

        return cls(value=value)


@dataclass(frozen=True)
class SectionId:
    """Identifier for a section within a portfolio."""

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> SectionId:
        """Generate a new SectionId using ULID."""
        return cls(value=str(ULID()))


class SectionType(StrEnum):
    """Widget kinds a portfolio section can render as."""

    MARKDOWN = "Markdown"
    ABOUT = "About"
    SKILLS = "Skills"
    TIMELINE = "Timeline"
    PROJECTS = "Projects"


@dataclass(frozen=True)
class Theme:
    """Presentation settings embedded in a portfolio."""

    name: str = "default"
    primary_color: str = "#000000"
    font_body: str = "Inter"
