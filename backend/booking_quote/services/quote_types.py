"""Value objects shared by the booking quote components."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, time
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Final

from booking_quote.models.membership import MemberShipSessions

MONEY_PLACES: Final = Decimal("0.01")
ZERO: Final = Decimal("0.00")


def to_money(value: Decimal | float | str | int) -> Decimal:
    return Decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


class SmartValueType(str, enum.Enum):
    """How a smart rule's ``value`` is interpreted."""

    PERCENT = "percent"
    ABSOLUTE = "absolute"


class SmartDirection(str, enum.Enum):
    """Whether a smart rule raises or lowers the tier price."""

    INCREASE = "up"
    DECREASE = "down"


class QuoteErrorCode(str, enum.Enum):
    """Per-item validation failures."""

    MASTER_CLOSED = "master_closed"
    ALREADY_BOOKED = "already_booked"


@dataclass(slots=True, frozen=True)
class SmartPriceRule:
    """Time-of-day price adjustment attached to a price tier."""

    starts: time
    ends: time
    value: Decimal
    value_type: SmartValueType
    direction: SmartDirection

    def contains(self, start: time, end: time) -> bool:
        """Return True when ``[start, end]`` sits entirely inside the window."""
        return self.starts <= start and end <= self.ends


@dataclass(slots=True, frozen=True)
class PriceTier:
    id: uuid.UUID
    price: Decimal
    smart_rules: tuple[SmartPriceRule, ...] = ()


@dataclass(slots=True, frozen=True)
class ServiceMasterCatalogEntry:
    """Read-only snapshot of a service master used for one quote."""

    id: uuid.UUID
    master_id: uuid.UUID
    service_id: uuid.UUID
    interval: int
    pause: int
    price: Decimal
    discount: Decimal
    commission_fee: Decimal
    total_price: Decimal
    price_tiers: tuple[PriceTier, ...] = ()

    @property
    def duration_minutes(self) -> int:
        return self.interval + self.pause

    def find_tier(self, tier_id: uuid.UUID) -> PriceTier | None:
        return next((tier for tier in self.price_tiers if tier.id == tier_id), None)


@dataclass(slots=True, frozen=True)
class ServiceExtraEntry:
    id: uuid.UUID
    price: Decimal
    name: str = ""


@dataclass(slots=True, frozen=True)
class DayAvailability:
    """Availability of a master on one calendar day."""

    closed: bool = False
    disabled_times: tuple[time, ...] = ()


@dataclass(slots=True, frozen=True)
class MembershipAllotment:
    id: uuid.UUID
    sessions: MemberShipSessions
    remainder: int
    service_ids: frozenset[uuid.UUID]
    expired_at: datetime | None = None

    def covers(self, service_id: uuid.UUID) -> bool:
        return service_id in self.service_ids

    @property
    def has_sessions(self) -> bool:
        if self.sessions is MemberShipSessions.UNLIMITED:
            return True
        return self.remainder > 0


@dataclass(slots=True, frozen=True)
class GiftCreditLedger:
    """Gift card credit already converted into the request currency."""

    gift_cart_id: uuid.UUID
    total_amount: Decimal


@dataclass(slots=True, frozen=True)
class Slot:
    """Contiguous ``[start_at, end_at)`` interval assigned to one service.

    ``start_time`` and ``end_time`` are wall-clock times in the slot's own
    offset.
    """

    start_at: datetime
    end_at: datetime

    @property
    def start_time(self) -> time:
        return self.start_at.time()

    @property
    def end_time(self) -> time:
        return self.end_at.time()


@dataclass(slots=True)
class ItemRequest:
    service_master_id: uuid.UUID
    price_tier_id: uuid.UUID | None = None
    extra_ids: list[uuid.UUID] = field(default_factory=list)
    note: str | None = None
    gender: str | None = None
    custom_data: dict[str, Any] = field(default_factory=dict)
    notes: list[str] = field(default_factory=list)


@dataclass(slots=True)
class BookingQuoteRequest:
    start_date: datetime
    items: list[ItemRequest]
    end_date: datetime | None = None
    gift_cart_id: uuid.UUID | None = None
    coupon: str | None = None
    user_id: uuid.UUID | None = None
    member_ship_id: uuid.UUID | None = None


@dataclass(slots=True, frozen=True)
class ItemPrice:
    """Resolved price breakdown for a single slot."""

    price: Decimal
    discount: Decimal
    service_fee: Decimal
    commission_fee: Decimal
    extra_price: Decimal
    total_price: Decimal


@dataclass(slots=True, frozen=True)
class ItemError:
    code: QuoteErrorCode
    message: str


@dataclass(slots=True)
class BookingItem:
    """One computed slot of the chain with its price and validation errors."""

    service_master_id: uuid.UUID
    master_id: uuid.UUID
    service_id: uuid.UUID
    start_date: datetime
    end_date: datetime
    price: Decimal = ZERO
    discount: Decimal = ZERO
    service_fee: Decimal = ZERO
    commission_fee: Decimal = ZERO
    extra_price: Decimal = ZERO
    total_price: Decimal = ZERO
    gift_cart_price: Decimal | None = None
    user_member_ship_id: uuid.UUID | None = None
    price_tier_id: uuid.UUID | None = None
    extras: list[ServiceExtraEntry] = field(default_factory=list)
    note: str = ""
    gender: str = ""
    data: dict[str, Any] = field(default_factory=dict)
    notes: list[str] = field(default_factory=list)
    errors: list[ItemError] = field(default_factory=list)

    def apply_price(self, item_price: ItemPrice) -> None:
        self.price = item_price.price
        self.discount = item_price.discount
        self.service_fee = item_price.service_fee
        self.commission_fee = item_price.commission_fee
        self.extra_price = item_price.extra_price
        self.total_price = item_price.total_price

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(slots=True)
class BookingQuoteResult:
    """Aggregate quote handed back to the caller; never persisted."""

    status: bool
    start_date: datetime | None
    end_date: datetime | None = None
    message: str | None = None
    rate: Decimal = Decimal("1")
    price: Decimal = ZERO
    discount: Decimal = ZERO
    service_fee: Decimal = ZERO
    commission_fee: Decimal = ZERO
    gift_cart_id: uuid.UUID | None = None
    gift_cart_total: Decimal = ZERO
    gift_cart_price: Decimal = ZERO
    coupon_price: Decimal = ZERO
    total_price: Decimal = ZERO
    items: list[BookingItem] = field(default_factory=list)

    @classmethod
    def failure(
        cls, message: str, *, start_date: datetime | None = None
    ) -> "BookingQuoteResult":
        return cls(status=False, start_date=start_date, message=message)
