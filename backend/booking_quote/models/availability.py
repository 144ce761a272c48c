"""Master availability: closed days, disabled windows and existing bookings."""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime, time

from sqlalchemy import Date, DateTime, Enum, String, Time
from sqlalchemy.orm import Mapped, mapped_column

from booking_quote.db.base import Base
from booking_quote.models.mixins import TimestampMixin


class BookingStatus(str, enum.Enum):
    """Lifecycle states of a committed booking."""

    NEW = "new"
    BOOKED = "booked"
    PROGRESS = "progress"
    CANCELED = "canceled"
    ENDED = "ended"


class MasterClosedDate(TimestampMixin, Base):
    """Calendar day on which a master does not accept bookings."""

    __tablename__ = "master_closed_dates"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    master_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    day: Mapped[date] = mapped_column(Date, nullable=False)
    reason: Mapped[str | None] = mapped_column(String(255))


class MasterDisabledTime(TimestampMixin, Base):
    """Blocked time-of-day window on a given day."""

    __tablename__ = "master_disabled_times"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    master_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    day: Mapped[date] = mapped_column(Date, nullable=False)
    from_time: Mapped[time] = mapped_column(Time(), nullable=False)
    to_time: Mapped[time] = mapped_column(Time(), nullable=False)


class Booking(TimestampMixin, Base):
    """Committed booking, read only to derive a master's disabled times."""

    __tablename__ = "bookings"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    master_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    service_master_id: Mapped[uuid.UUID | None] = mapped_column(nullable=True)
    user_id: Mapped[uuid.UUID | None] = mapped_column(nullable=True)
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus), nullable=False, default=BookingStatus.NEW
    )
