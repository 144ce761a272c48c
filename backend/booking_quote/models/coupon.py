"""Coupon definitions."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Enum, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from booking_quote.db.base import Base
from booking_quote.models.mixins import ActiveMixin, TimestampMixin


class CouponType(str, enum.Enum):
    """Kinds of coupon discounts."""

    FIX = "fix"
    PERCENT = "percent"


class Coupon(ActiveMixin, TimestampMixin, Base):
    """Coupon code redeemable against a booking total."""

    __tablename__ = "coupons"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    type: Mapped[CouponType] = mapped_column(Enum(CouponType), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    qty: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    expired_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))