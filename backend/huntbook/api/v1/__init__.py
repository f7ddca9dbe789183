"""Versioned API router."""

from fastapi import APIRouter

from . import (
    availability,
    health,
    orders,
    quotes,
    seasons,
)

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(quotes.router, tags=["quotes"])
router.include_router(availability.router, tags=["availability"])
router.include_router(orders.router, prefix="/orders", tags=["orders"])
router.include_router(seasons.router, prefix="/seasons", tags=["seasons"])

__all__ = ["router"]
