"""Health check endpoints."""

import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from booking_quote.api import deps
from booking_quote.core.config import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", summary="Service health status")
async def healthcheck(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> dict[str, str]:
    """Report configuration and whether the quote database answers."""
    settings = get_settings()
    try:
        await session.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError:
        logger.warning("Health check could not reach the database", exc_info=True)
        database = "unavailable"
    return {
        "status": "ok" if database == "ok" else "degraded",
        "service": settings.app_name,
        "timestamp": datetime.now(UTC).isoformat(),
        "environment": settings.app_env,
        "database": database,
        "service_fee": str(settings.booking_service_fee),
    }
