"""Tests for per-slot price resolution."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, time
from decimal import Decimal

import pytest

from booking_quote.services.exceptions import CatalogLookupError
from booking_quote.services.price_resolver import (
    apply_smart_rule,
    resolve_item_price,
    select_smart_rule,
    service_fee_for_rate,
)
from booking_quote.services.quote_types import (
    PriceTier,
    ServiceExtraEntry,
    Slot,
    SmartDirection,
    SmartPriceRule,
    SmartValueType,
)

MORNING = Slot(
    start_at=datetime(2024, 1, 1, 9, 0, tzinfo=UTC),
    end_at=datetime(2024, 1, 1, 10, 0, tzinfo=UTC),
)


def _rule(
    starts: str,
    ends: str,
    value: str,
    *,
    value_type: SmartValueType = SmartValueType.PERCENT,
    direction: SmartDirection = SmartDirection.INCREASE,
) -> SmartPriceRule:
    return SmartPriceRule(
        starts=time.fromisoformat(starts),
        ends=time.fromisoformat(ends),
        value=Decimal(value),
        value_type=value_type,
        direction=direction,
    )


def test_base_price_plus_service_fee(make_entry) -> None:
    entry = make_entry(interval=60, price="100.00")
    fee = Decimal("5.00")

    item_price = resolve_item_price(
        entry, MORNING, rate=Decimal("1"), service_fee=fee
    )

    assert item_price.total_price == Decimal("100.00") + fee
    assert item_price.price == Decimal("100.00")
    assert item_price.service_fee == fee
    assert item_price.extra_price == Decimal("0.00")


def test_catalog_values_are_converted_once(make_entry) -> None:
    entry = make_entry(
        price="100.00", discount="10.00", commission_fee="7.50", total_price="90.00"
    )
    rate = Decimal("2")
    extras = [
        ServiceExtraEntry(id=uuid.uuid4(), price=Decimal("3.00")),
        ServiceExtraEntry(id=uuid.uuid4(), price=Decimal("2.00")),
    ]

    item_price = resolve_item_price(
        entry,
        MORNING,
        rate=rate,
        service_fee=service_fee_for_rate(Decimal("4.00"), rate),
        extras=extras,
    )

    assert item_price.price == Decimal("200.00")
    assert item_price.discount == Decimal("20.00")
    assert item_price.commission_fee == Decimal("15.00")
    assert item_price.extra_price == Decimal("10.00")
    assert item_price.service_fee == Decimal("8.00")
    assert item_price.total_price == Decimal("198.00")


def test_negative_service_fee_is_treated_as_zero() -> None:
    assert service_fee_for_rate(Decimal("-3"), Decimal("2")) == Decimal("0.00")


def test_tier_without_matching_rule_uses_tier_price(make_entry) -> None:
    tier = PriceTier(
        id=uuid.uuid4(),
        price=Decimal("80.00"),
        smart_rules=(_rule("18:00", "22:00", "50"),),
    )
    entry = make_entry(price="100.00", price_tiers=[tier])

    item_price = resolve_item_price(
        entry,
        MORNING,
        rate=Decimal("1"),
        service_fee=Decimal("0"),
        price_tier_id=tier.id,
    )

    assert item_price.total_price == Decimal("80.00")


def test_first_matching_smart_rule_wins(make_entry) -> None:
    first = _rule("08:00", "12:00", "10")
    second = _rule("09:00", "11:00", "50", direction=SmartDirection.DECREASE)
    tier = PriceTier(
        id=uuid.uuid4(), price=Decimal("100.00"), smart_rules=(first, second)
    )
    entry = make_entry(price_tiers=[tier])

    assert select_smart_rule(tier.smart_rules, MORNING) is first
    item_price = resolve_item_price(
        entry,
        MORNING,
        rate=Decimal("1"),
        service_fee=Decimal("0"),
        price_tier_id=tier.id,
    )
    assert item_price.total_price == Decimal("110.00")


def test_rule_must_contain_the_whole_slot() -> None:
    partial = _rule("09:30", "12:00", "10")
    overrun = _rule("08:00", "09:59", "10")

    assert select_smart_rule((partial, overrun), MORNING) is None


def test_rule_window_bounds_are_inclusive_for_containment() -> None:
    exact = _rule("09:00", "10:00", "10")

    assert select_smart_rule((exact,), MORNING) is exact


@pytest.mark.parametrize(
    ("value_type", "direction", "value", "expected"),
    [
        (SmartValueType.PERCENT, SmartDirection.INCREASE, "25", "125"),
        (SmartValueType.PERCENT, SmartDirection.DECREASE, "25", "75"),
        (SmartValueType.ABSOLUTE, SmartDirection.INCREASE, "15", "115"),
        (SmartValueType.ABSOLUTE, SmartDirection.DECREASE, "15", "85"),
        (SmartValueType.ABSOLUTE, SmartDirection.DECREASE, "150", "0"),
        (SmartValueType.PERCENT, SmartDirection.DECREASE, "-10", "100"),
    ],
)
def test_apply_smart_rule(value_type, direction, value, expected) -> None:
    rule = _rule("00:00", "23:59", value, value_type=value_type, direction=direction)

    assert apply_smart_rule(Decimal("100"), rule) == Decimal(expected)


def test_tier_adjustment_is_floored_before_rate(make_entry) -> None:
    rule = _rule(
        "00:00",
        "23:59",
        "500",
        value_type=SmartValueType.ABSOLUTE,
        direction=SmartDirection.DECREASE,
    )
    tier = PriceTier(id=uuid.uuid4(), price=Decimal("100.00"), smart_rules=(rule,))
    entry = make_entry(price_tiers=[tier])

    item_price = resolve_item_price(
        entry,
        MORNING,
        rate=Decimal("3"),
        service_fee=Decimal("1.00"),
        price_tier_id=tier.id,
    )

    assert item_price.total_price == Decimal("1.00")


def test_unknown_tier_is_a_lookup_error(make_entry) -> None:
    entry = make_entry()

    with pytest.raises(CatalogLookupError):
        resolve_item_price(
            entry,
            MORNING,
            rate=Decimal("1"),
            service_fee=Decimal("0"),
            price_tier_id=uuid.uuid4(),
        )
