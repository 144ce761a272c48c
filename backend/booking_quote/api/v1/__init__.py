"""Versioned API router."""

from fastapi import APIRouter

from . import bookings, health

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(bookings.router)
