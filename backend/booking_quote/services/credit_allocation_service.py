"""Settlement of gift card credit and coupons across a priced chain."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from functools import reduce
from typing import Sequence

from booking_quote.services.coupon_service import CouponPricer
from booking_quote.services.quote_types import (
    BookingItem,
    GiftCreditLedger,
    ZERO,
    to_money,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class WaterfallState:
    """State carried from one item to the next while distributing gift credit."""

    base_share: Decimal
    carry: Decimal
    remaining_ledger: Decimal
    remaining_aggregate: Decimal
    consumed: Decimal = ZERO


@dataclass(slots=True, frozen=True)
class CreditSettlement:
    gift_cart_price: Decimal
    coupon_price: Decimal
    total_price: Decimal


def _consume(item: BookingItem, amount: Decimal) -> Decimal:
    """Move ``amount`` of the item's total into its gift credit; return what moved."""
    remaining = item.total_price - amount
    if remaining < ZERO:
        logger.warning(
            "Credit ledger inconsistency for service master %s: total would be %s, "
            "clamping to zero",
            item.service_master_id,
            remaining,
        )
        amount = item.total_price
        remaining = ZERO
    item.gift_cart_price = to_money((item.gift_cart_price or ZERO) + amount)
    item.total_price = to_money(remaining)
    return amount


def _gift_step(state: WaterfallState, item: BookingItem) -> WaterfallState:
    if item.total_price <= ZERO:
        # Nothing to pay here (e.g. membership coverage); pass the share along.
        return replace(state, carry=state.carry + state.base_share)

    if state.remaining_aggregate <= state.remaining_ledger:
        spent = _consume(item, item.total_price)
        return replace(
            state,
            remaining_ledger=state.remaining_ledger - spent,
            remaining_aggregate=state.remaining_aggregate - spent,
            consumed=state.consumed + spent,
        )

    share = state.base_share + state.carry
    decrement = max(min(share, item.total_price, state.remaining_ledger), ZERO)
    spent = _consume(item, decrement)
    return WaterfallState(
        base_share=state.base_share,
        carry=share - spent,
        remaining_ledger=state.remaining_ledger - spent,
        remaining_aggregate=state.remaining_aggregate - spent,
        consumed=state.consumed + spent,
    )


def allocate_gift_credit(
    items: Sequence[BookingItem], ledger: GiftCreditLedger | None
) -> Decimal:
    """Distribute gift credit over ``items`` and return the amount consumed.

    Every item starts with an equal share of the ledger. Items are visited
    cheapest first; whatever an item cannot absorb flows into the next
    item's share. Once the remaining credit covers everything still owed,
    the rest of the chain is settled in full. ``items`` keeps its order.
    """
    if ledger is None or not items or ledger.total_amount <= ZERO:
        return ZERO
    aggregate = sum((item.total_price for item in items), ZERO)
    if aggregate <= ZERO:
        return ZERO

    base_share = to_money(ledger.total_amount / len(items))
    initial = WaterfallState(
        base_share=base_share,
        carry=ledger.total_amount - base_share * len(items),
        remaining_ledger=ledger.total_amount,
        remaining_aggregate=aggregate,
    )
    ordered = sorted(items, key=lambda item: item.total_price)
    final = reduce(_gift_step, ordered, initial)
    return to_money(final.consumed)


async def settle_credits(
    items: Sequence[BookingItem],
    *,
    ledger: GiftCreditLedger | None,
    coupon: str | None,
    pricer: CouponPricer,
    rate: Decimal,
) -> CreditSettlement:
    """Apply gift credit per item, then a coupon on the remaining aggregate."""
    gift_cart_price = allocate_gift_credit(items, ledger)
    aggregate = sum((item.total_price for item in items), ZERO)

    coupon_price = ZERO
    if coupon and aggregate > ZERO:
        coupon_price = to_money(await pricer.price(coupon, aggregate, rate))
        aggregate -= coupon_price

    return CreditSettlement(
        gift_cart_price=gift_cart_price,
        coupon_price=coupon_price,
        total_price=to_money(max(aggregate, ZERO)),
    )
