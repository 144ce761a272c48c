"""Gift card credit resolution for quotes."""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from booking_quote.models import UserGiftCart
from booking_quote.services.exceptions import GiftCardUnavailableError
from booking_quote.services.quote_types import GiftCreditLedger, ZERO, to_money


class GiftCardStore(ABC):
    @abstractmethod
    async def find_balance(
        self,
        *,
        gift_cart_id: uuid.UUID,
        user_id: uuid.UUID | None,
        at: datetime,
    ) -> Decimal | None:
        """Return the raw balance of an unexpired gift card, if any."""
        raise NotImplementedError


async def load_gift_ledger(
    store: GiftCardStore,
    *,
    gift_cart_id: uuid.UUID | None,
    user_id: uuid.UUID | None,
    rate: Decimal,
    at: datetime,
) -> GiftCreditLedger | None:
    """Return the gift ledger converted with ``rate``, or None when not requested."""
    if gift_cart_id is None:
        return None
    balance = await store.find_balance(
        gift_cart_id=gift_cart_id, user_id=user_id, at=at
    )
    if balance is None or balance <= ZERO:
        raise GiftCardUnavailableError("Gift card is not available")
    return GiftCreditLedger(
        gift_cart_id=gift_cart_id, total_amount=to_money(Decimal(balance) * rate)
    )


class SqlGiftCardStore(GiftCardStore):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_balance(
        self,
        *,
        gift_cart_id: uuid.UUID,
        user_id: uuid.UUID | None,
        at: datetime,
    ) -> Decimal | None:
        stmt = select(UserGiftCart.price).where(
            UserGiftCart.id == gift_cart_id,
            UserGiftCart.expired_at >= at,
            UserGiftCart.active.is_(True),
        )
        if user_id is not None:
            stmt = stmt.where(UserGiftCart.user_id == user_id)
        return await self._session.scalar(stmt)
