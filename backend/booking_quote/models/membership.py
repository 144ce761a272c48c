"""Membership allotments purchased by users."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from booking_quote.db.base import Base
from booking_quote.models.mixins import TimestampMixin


class MemberShipSessions(str, enum.Enum):
    """How many sessions a membership grants."""

    LIMITED = "limited"
    UNLIMITED = "unlimited"


class UserMemberShip(TimestampMixin, Base):
    """A user's prepaid membership with its remaining sessions."""

    __tablename__ = "user_member_ships"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    name: Mapped[str | None] = mapped_column(String(255))
    sessions: Mapped[MemberShipSessions] = mapped_column(
        Enum(MemberShipSessions), nullable=False
    )
    remainder: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    expired_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    services: Mapped[list["UserMemberShipService"]] = relationship(
        "UserMemberShipService",
        back_populates="user_member_ship",
        cascade="all, delete-orphan",
    )


class UserMemberShipService(Base):
    """Service covered by a membership."""

    __tablename__ = "user_member_ship_services"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_member_ship_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("user_member_ships.id", ondelete="CASCADE"), nullable=False
    )
    service_id: Mapped[uuid.UUID] = mapped_column(nullable=False)

    user_member_ship: Mapped["UserMemberShip"] = relationship(
        "UserMemberShip", back_populates="services"
    )
