"""Pydantic request and response models for portfolio endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from portfolios.domain.aggregates import Portfolio, Section
from portfolios.domain.value_objects import Theme


class CreatePortfolioRequest(BaseModel):
    """Request model for creating a portfolio."""

    title: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=50)


class CreatePortfolioResponse(BaseModel):
    """Identifier of a newly created portfolio."""

    id: str


class ThemeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    primary_color: str = Field(..., alias="primaryColor")
    font_body: str = Field(..., alias="fontBody")

    @classmethod
    def from_domain(cls, theme: Theme) -> ThemeResponse:
        return cls(
            name=theme.name,
            primary_color=theme.primary_color,
            font_body=theme.font_body,
        )


class SectionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    section_type: str = Field(..., alias="sectionType")
    sort_order: int = Field(..., alias="sortOrder")
    content: dict[str, Any]

    @classmethod
    def from_domain(cls, section: Section) -> SectionResponse:
        return cls(
            id=section.id.value,
            section_type=section.section_type,
            sort_order=section.sort_order,
            content=section.content,
        )


class PortfolioSummaryResponse(BaseModel):
    """Portfolio without its sections, as listed per tenant."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    slug: str
    is_published: bool = Field(..., alias="isPublished")

    @classmethod
    def from_domain(cls, portfolio: Portfolio) -> PortfolioSummaryResponse:
        return cls(
            id=portfolio.id.value,
            title=portfolio.title,
            slug=portfolio.slug,
            is_published=portfolio.is_published,
        )


class PortfolioResponse(BaseModel):
    """Portfolio with its visible sections in display order."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    slug: str
    theme: ThemeResponse
    is_published: bool = Field(..., alias="isPublished")
    sections: list[SectionResponse]

    @classmethod
    def from_domain(cls, portfolio: Portfolio) -> PortfolioResponse:
        return cls(
            id=portfolio.id.value,
            title=portfolio.title,
            slug=portfolio.slug,
            theme=ThemeResponse.from_domain(portfolio.theme),
            is_published=portfolio.is_published,
            sections=[
                SectionResponse.from_domain(s) for s in portfolio.visible_sections
            ],
        )
