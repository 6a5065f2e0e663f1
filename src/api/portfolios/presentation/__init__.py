"""Portfolios presentation layer."""

from __future__ import annotations

from fastapi import APIRouter

from portfolios.presentation import routes

router = APIRouter(prefix="/api")

router.include_router(routes.router)

__all__ = ["router"]
