"""Coupon pricing against a booking total."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from decimal import Decimal
from typing import Callable

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from booking_quote.models import Coupon, CouponType
from booking_quote.services.quote_types import ZERO, to_money


class CouponPricer(ABC):
    @abstractmethod
    async def price(self, coupon: str, amount: Decimal, rate: Decimal) -> Decimal:
        """Return the discount a coupon grants on ``amount``; no side effects."""
        raise NotImplementedError


def coupon_discount(coupon: Coupon, amount: Decimal, rate: Decimal) -> Decimal:
    if amount <= ZERO:
        return ZERO
    if coupon.type is CouponType.FIX:
        discount = Decimal(coupon.price) * rate
    else:
        discount = amount / Decimal("100") * Decimal(coupon.price)
    return to_money(min(max(discount, ZERO), amount))


class SqlCouponPricer(CouponPricer):
    def __init__(
        self,
        session: AsyncSession,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._session = session
        self._clock = clock or (lambda: datetime.now(UTC))

    async def price(self, coupon: str, amount: Decimal, rate: Decimal) -> Decimal:
        stmt = select(Coupon).where(
            Coupon.name == coupon,
            Coupon.active.is_(True),
            Coupon.qty > 0,
            or_(Coupon.expired_at.is_(None), Coupon.expired_at >= self._clock()),
        )
        record = await self._session.scalar(stmt)
        if record is None:
            return ZERO
        return coupon_discount(record, amount, rate)
