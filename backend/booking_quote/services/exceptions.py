"""Errors raised while computing a booking quote."""

from __future__ import annotations


class QuoteError(ValueError):
    """Base class for failures that turn a whole quote into ``status=False``."""


class ScheduleError(QuoteError):
    """Requested start is in the past or the requested end precedes it."""


class CatalogLookupError(QuoteError):
    """A requested service master, price tier or extra could not be resolved."""


class GiftCardUnavailableError(QuoteError):
    """The requested gift card is unknown, expired or empty."""


__all__ = [
    "CatalogLookupError",
    "GiftCardUnavailableError",
    "QuoteError",
    "ScheduleError",
]
