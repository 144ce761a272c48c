"""Schema exports."""

from booking_quote.schemas.booking_quote import (
    BookingItemCreate,
    BookingItemRead,
    BookingQuoteCreate,
    BookingQuoteRead,
    ItemErrorRead,
    ServiceExtraRead,
)

__all__ = [
    "BookingItemCreate",
    "BookingItemRead",
    "BookingQuoteCreate",
    "BookingQuoteRead",
    "ItemErrorRead",
    "ServiceExtraRead",
]
