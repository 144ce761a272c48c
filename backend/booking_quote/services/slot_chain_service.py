"""Chain requested services into back-to-back time slots."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Iterable

from booking_quote.services.exceptions import ScheduleError
from booking_quote.services.quote_types import Slot


def ensure_aware(moment: datetime) -> datetime:
    """Attach UTC to naive values; aware values keep their own offset."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


def normalize_datetime(moment: datetime) -> datetime:
    """Return the same instant in UTC, for comparisons and storage only."""
    return ensure_aware(moment).astimezone(UTC)


def validate_schedule(
    start_at: datetime,
    end_at: datetime | None,
    *,
    now: datetime,
) -> None:
    """Reject a start in the past or an end before the start.

    Runs once against the raw request bounds, before any chaining.
    """
    start = normalize_datetime(start_at)
    if start < normalize_datetime(now):
        raise ScheduleError("Booking start date must not be in the past")
    if end_at is not None and normalize_datetime(end_at) < start:
        raise ScheduleError("Booking end date must not precede the start date")


def chain_slots(start_at: datetime, durations: Iterable[int]) -> list[Slot]:
    """Return one slot per duration, each starting where the previous ended.

    Slots stay in the offset of ``start_at`` so their time of day and
    calendar day are the wall clock the customer asked for.
    """
    slots: list[Slot] = []
    cursor = ensure_aware(start_at)
    for minutes in durations:
        if minutes < 0:
            raise ScheduleError("Service duration must not be negative")
        end_at = cursor + timedelta(minutes=minutes)
        slots.append(Slot(start_at=cursor, end_at=end_at))
        cursor = end_at
    return slots
