"""HTTP routes for portfolios.

All routes run on tenant-resolved requests. Portfolios of other tenants
are indistinguishable from missing ones.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from iam.application.value_objects import CurrentUser
from iam.dependencies.user import get_current_user
from portfolios.application.services import PortfolioService
from portfolios.dependencies.portfolio import get_portfolio_service
from portfolios.domain.value_objects import PortfolioId
from portfolios.ports.exceptions import (
    DuplicateSlugInTenantError,
    PortfolioNotFoundError,
)
from portfolios.presentation.models import (
    CreatePortfolioRequest,
    CreatePortfolioResponse,
    PortfolioResponse,
    PortfolioSummaryResponse,
)

router = APIRouter(
    prefix="/portfolios",
    tags=["portfolios"],
)


def parse_portfolio_id(portfolio_id: str) -> PortfolioId:
    """Parse a path parameter into a PortfolioId.

    Raises:
        HTTPException: 400 if the value is not a ULID
    """
    try:
        return PortfolioId.from_string(portfolio_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "INVALID_PORTFOLIO_ID", "message": str(e)},
        ) from e


def portfolio_not_found(identifier: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "code": PortfolioNotFoundError.code,
            "message": f"Portfolio {identifier} not found",
        },
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
)
async def create_portfolio(
    request: CreatePortfolioRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[PortfolioService, Depends(get_portfolio_service)],
) -> CreatePortfolioResponse:
    """Create a portfolio owned by the authenticated user.

    Raises:
        HTTPException: 400 if the title or slug is malformed
        HTTPException: 409 if the tenant already has a portfolio with the slug
    """
    try:
        portfolio = await service.create_portfolio(
            user_id=current_user.user_id,
            title=request.title,
            slug=request.slug,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "INVALID_PORTFOLIO", "message": str(e)},
        ) from e
    except DuplicateSlugInTenantError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "code": DuplicateSlugInTenantError.code,
                "message": "A portfolio with this slug already exists",
            },
        ) from e

    return CreatePortfolioResponse(id=portfolio.id.value)


@router.get("")
async def list_portfolios(
    service: Annotated[PortfolioService, Depends(get_portfolio_service)],
) -> list[PortfolioSummaryResponse]:
    """List portfolios of the request tenant."""
    portfolios = await service.list_portfolios()
    return [PortfolioSummaryResponse.from_domain(p) for p in portfolios]


@router.get("/by-slug/{slug}")
async def get_portfolio_by_slug(
    slug: str,
    service: Annotated[PortfolioService, Depends(get_portfolio_service)],
) -> PortfolioResponse:
    """Get a portfolio of the request tenant by slug."""
    portfolio = await service.get_portfolio_by_slug(slug)
    if portfolio is None:
        raise portfolio_not_found(slug)
    return PortfolioResponse.from_domain(portfolio)


@router.get("/{portfolio_id}")
async def get_portfolio(
    portfolio_id: str,
    service: Annotated[PortfolioService, Depends(get_portfolio_service)],
) -> PortfolioResponse:
    """Get a portfolio with its visible sections in display order."""
    portfolio = await service.get_portfolio(parse_portfolio_id(portfolio_id))
    if portfolio is None:
        raise portfolio_not_found(portfolio_id)
    return PortfolioResponse.from_domain(portfolio)
