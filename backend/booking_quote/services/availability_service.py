"""Master availability lookups and per-slot conflict detection."""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Mapping

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from booking_quote.models import (
    Booking,
    BookingStatus,
    MasterClosedDate,
    MasterDisabledTime,
)
from booking_quote.services.quote_types import (
    DayAvailability,
    ItemError,
    QuoteErrorCode,
    Slot,
)
from booking_quote.services.slot_chain_service import normalize_datetime

_BLOCKING_STATUSES: set[BookingStatus] = {
    BookingStatus.NEW,
    BookingStatus.BOOKED,
    BookingStatus.PROGRESS,
}

_END_OF_DAY = time(23, 59, 59)


class AvailabilityOracle(ABC):
    @abstractmethod
    async def times(
        self,
        master_id: uuid.UUID,
        start_day: date,
        end_day: date,
        tz: tzinfo = UTC,
    ) -> dict[date, DayAvailability]:
        """Return availability per calendar day; absent days are unrestricted.

        Days and times are wall clock in ``tz``, the offset of the request.
        """
        raise NotImplementedError


def validate_slot(
    slot: Slot, times: Mapping[date, DayAvailability]
) -> list[ItemError]:
    """Collect closed-master and already-booked conflicts for one slot.

    Only the start day's disabled times are consulted, even when the slot
    runs past midnight.
    """
    errors: list[ItemError] = []
    start_day = times.get(slot.start_at.date(), DayAvailability())
    end_day = times.get(slot.end_at.date(), DayAvailability())

    if start_day.closed or end_day.closed:
        errors.append(
            ItemError(
                code=QuoteErrorCode.MASTER_CLOSED,
                message="Master is closed on the selected date",
            )
        )

    disabled = start_day.disabled_times
    if disabled:
        earliest = min(disabled)
        latest = max(disabled)
        if earliest <= slot.start_time and slot.end_time <= latest:
            errors.append(
                ItemError(
                    code=QuoteErrorCode.ALREADY_BOOKED,
                    message=(
                        "Master is already booked between "
                        f"{earliest:%H:%M} and {latest:%H:%M}"
                    ),
                )
            )
    return errors


def _days_between(start_day: date, end_day: date) -> list[date]:
    days: list[date] = []
    current = start_day
    while current <= end_day:
        days.append(current)
        current += timedelta(days=1)
    return days


class SqlAvailabilityOracle(AvailabilityOracle):
    """Derive day availability from closures, disabled windows and bookings."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def times(
        self,
        master_id: uuid.UUID,
        start_day: date,
        end_day: date,
        tz: tzinfo = UTC,
    ) -> dict[date, DayAvailability]:
        if end_day < start_day:
            start_day, end_day = end_day, start_day

        closed_days = await self._load_closed_days(master_id, start_day, end_day)
        disabled: dict[date, list[time]] = {}

        for window in await self._load_disabled_windows(master_id, start_day, end_day):
            disabled.setdefault(window.day, []).extend(
                (window.from_time, window.to_time)
            )

        for booked_start, booked_end in await self._load_bookings(
            master_id, start_day, end_day, tz
        ):
            for day in _days_between(
                max(booked_start.date(), start_day), min(booked_end.date(), end_day)
            ):
                day_start = (
                    booked_start.time() if booked_start.date() == day else time.min
                )
                day_end = (
                    booked_end.time() if booked_end.date() == day else _END_OF_DAY
                )
                disabled.setdefault(day, []).extend((day_start, day_end))

        availability: dict[date, DayAvailability] = {}
        for day in set(closed_days) | set(disabled):
            availability[day] = DayAvailability(
                closed=day in closed_days,
                disabled_times=tuple(sorted(disabled.get(day, []))),
            )
        return availability

    async def _load_closed_days(
        self, master_id: uuid.UUID, start_day: date, end_day: date
    ) -> set[date]:
        stmt = select(MasterClosedDate.day).where(
            MasterClosedDate.master_id == master_id,
            MasterClosedDate.day >= start_day,
            MasterClosedDate.day <= end_day,
        )
        result = await self._session.execute(stmt)
        return set(result.scalars().all())

    async def _load_disabled_windows(
        self, master_id: uuid.UUID, start_day: date, end_day: date
    ) -> list[MasterDisabledTime]:
        stmt: Select[tuple[MasterDisabledTime]] = select(MasterDisabledTime).where(
            MasterDisabledTime.master_id == master_id,
            MasterDisabledTime.day >= start_day,
            MasterDisabledTime.day <= end_day,
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def _load_bookings(
        self, master_id: uuid.UUID, start_day: date, end_day: date, tz: tzinfo
    ) -> list[tuple[datetime, datetime]]:
        """Return blocking bookings as wall-clock intervals in ``tz``."""
        # Bounds are bound in UTC; stored values carry no offset on SQLite.
        range_start = datetime.combine(start_day, time.min, tzinfo=tz).astimezone(UTC)
        range_end = datetime.combine(end_day, time.max, tzinfo=tz).astimezone(UTC)
        stmt: Select[tuple[Booking]] = select(Booking).where(
            Booking.master_id == master_id,
            Booking.status.in_(_BLOCKING_STATUSES),
            Booking.end_date >= range_start,
            Booking.start_date <= range_end,
        )
        result = await self._session.execute(stmt)
        return [
            (
                normalize_datetime(booking.start_date).astimezone(tz),
                normalize_datetime(booking.end_date).astimezone(tz),
            )
            for booking in result.scalars().all()
        ]
