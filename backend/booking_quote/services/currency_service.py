"""Exchange-rate resolution for the requested currency."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Final

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from booking_quote.models import Currency

DEFAULT_RATE: Final = Decimal("1")


class CurrencyStore(ABC):
    @abstractmethod
    async def rate_for(self, code: str) -> Decimal | None:
        """Return the active rate for a currency code, if known."""
        raise NotImplementedError


async def resolve_rate(store: CurrencyStore, code: str | None) -> Decimal:
    """Return the multiplicative rate for ``code``; unresolved codes yield 1."""
    if not code:
        return DEFAULT_RATE
    rate = await store.rate_for(code.strip().upper())
    if rate is None or rate <= Decimal("0"):
        return DEFAULT_RATE
    return Decimal(rate)


class SqlCurrencyStore(CurrencyStore):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def rate_for(self, code: str) -> Decimal | None:
        return await self._session.scalar(
            select(Currency.rate).where(
                Currency.code == code,
                Currency.active.is_(True),
            )
        )
