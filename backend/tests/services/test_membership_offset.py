from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from booking_quote.models import MemberShipSessions
from booking_quote.services.membership_service import apply_membership, qualifies
from booking_quote.services.quote_types import BookingItem, MembershipAllotment


def _item(service_id: uuid.UUID) -> BookingItem:
    return BookingItem(
        service_master_id=uuid.uuid4(),
        master_id=uuid.uuid4(),
        service_id=service_id,
        start_date=datetime(2024, 1, 1, 9, 0, tzinfo=UTC),
        end_date=datetime(2024, 1, 1, 10, 0, tzinfo=UTC),
        price=Decimal("100.00"),
        discount=Decimal("10.00"),
        service_fee=Decimal("5.00"),
        commission_fee=Decimal("2.00"),
        extra_price=Decimal("3.00"),
        total_price=Decimal("98.00"),
    )


def _allotment(
    service_id: uuid.UUID,
    *,
    sessions: MemberShipSessions = MemberShipSessions.LIMITED,
    remainder: int = 3,
) -> MembershipAllotment:
    return MembershipAllotment(
        id=uuid.uuid4(),
        sessions=sessions,
        remainder=remainder,
        service_ids=frozenset({service_id}),
    )


def test_covered_item_is_zeroed_and_tagged() -> None:
    service_id = uuid.uuid4()
    item = _item(service_id)
    allotment = _allotment(service_id)

    assert apply_membership(item, allotment) is True

    assert item.user_member_ship_id == allotment.id
    for field in (
        "price",
        "discount",
        "service_fee",
        "commission_fee",
        "extra_price",
        "total_price",
    ):
        assert getattr(item, field) == Decimal("0"), field


def test_remainder_is_not_consumed() -> None:
    service_id = uuid.uuid4()
    allotment = _allotment(service_id, remainder=1)

    apply_membership(_item(service_id), allotment)
    apply_membership(_item(service_id), allotment)

    assert allotment.remainder == 1


@pytest.mark.parametrize(
    ("sessions", "remainder", "expected"),
    [
        (MemberShipSessions.LIMITED, 0, False),
        (MemberShipSessions.LIMITED, 1, True),
        (MemberShipSessions.UNLIMITED, 0, True),
    ],
)
def test_session_rules(sessions, remainder, expected) -> None:
    service_id = uuid.uuid4()
    allotment = _allotment(service_id, sessions=sessions, remainder=remainder)

    assert qualifies(allotment, service_id) is expected
    item = _item(service_id)
    assert apply_membership(item, allotment) is expected
    if not expected:
        assert item.total_price == Decimal("98.00")
        assert item.user_member_ship_id is None


def test_uncovered_service_keeps_its_price() -> None:
    allotment = _allotment(uuid.uuid4(), sessions=MemberShipSessions.UNLIMITED)
    item = _item(uuid.uuid4())

    assert apply_membership(item, allotment) is False
    assert item.total_price == Decimal("98.00")


def test_missing_allotment_is_a_no_op() -> None:
    item = _item(uuid.uuid4())

    assert apply_membership(item, None) is False
    assert qualifies(None, item.service_id) is False
