"""Booking quote API endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from booking_quote.api import deps
from booking_quote.schemas.booking_quote import BookingQuoteCreate, BookingQuoteRead
from booking_quote.services import booking_quote_service

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post(
    "/calculate",
    response_model=BookingQuoteRead,
    summary="Calculate a booking quote",
)
async def calculate_booking_quote(
    payload: BookingQuoteCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    currency: Annotated[str | None, Query(max_length=8)] = None,
) -> BookingQuoteRead:
    """Quote a chain of services.

    A rejected quote is still a 200 response with ``status`` set to false.
    """
    result = await booking_quote_service.calculate_booking(
        session,
        request=payload.to_request(),
        currency=currency,
    )
    return BookingQuoteRead.model_validate(result)
