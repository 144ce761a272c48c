"""Per-slot price resolution: tiers, smart rules, extras and service fee."""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Sequence

from booking_quote.services.exceptions import CatalogLookupError
from booking_quote.services.quote_types import (
    ItemPrice,
    ServiceExtraEntry,
    ServiceMasterCatalogEntry,
    Slot,
    SmartDirection,
    SmartPriceRule,
    SmartValueType,
    ZERO,
    to_money,
)


def service_fee_for_rate(configured_fee: Decimal, rate: Decimal) -> Decimal:
    """Convert the global per-item booking fee into the request currency."""
    fee = configured_fee if configured_fee > ZERO else ZERO
    return to_money(fee * rate)


def select_smart_rule(
    rules: Sequence[SmartPriceRule], slot: Slot
) -> SmartPriceRule | None:
    """Return the first rule in stored order whose window contains the slot."""
    for rule in rules:
        if rule.contains(slot.start_time, slot.end_time):
            return rule
    return None


def apply_smart_rule(price: Decimal, rule: SmartPriceRule | None) -> Decimal:
    if rule is None:
        return max(price, ZERO)
    adjustment = rule.value
    if rule.value_type is SmartValueType.PERCENT:
        adjustment = max(price / Decimal("100") * rule.value, ZERO)
    if rule.direction is SmartDirection.INCREASE:
        adjusted = price + adjustment
    else:
        adjusted = price - adjustment
    return max(adjusted, ZERO)


def resolve_item_price(
    entry: ServiceMasterCatalogEntry,
    slot: Slot,
    *,
    rate: Decimal,
    service_fee: Decimal,
    extras: Sequence[ServiceExtraEntry] = (),
    price_tier_id: uuid.UUID | None = None,
) -> ItemPrice:
    """Price one slot.

    ``service_fee`` is expected already converted with
    :func:`service_fee_for_rate`. Catalog values are multiplied by ``rate``
    here, exactly once.
    """
    extra_price = to_money(sum((extra.price for extra in extras), ZERO) * rate)

    base_price = to_money(entry.total_price * rate)
    if price_tier_id is not None:
        tier = entry.find_tier(price_tier_id)
        if tier is None:
            raise CatalogLookupError(
                f"Price tier {price_tier_id} not found for service master {entry.id}"
            )
        rule = select_smart_rule(tier.smart_rules, slot)
        base_price = to_money(apply_smart_rule(tier.price, rule) * rate)

    return ItemPrice(
        price=to_money(entry.price * rate),
        discount=to_money(entry.discount * rate),
        service_fee=service_fee,
        commission_fee=to_money(entry.commission_fee * rate),
        extra_price=extra_price,
        total_price=to_money(base_price + service_fee + extra_price),
    )
