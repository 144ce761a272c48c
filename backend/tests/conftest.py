"""Test fixtures for the booking quote backend."""
from __future__ import annotations

import os
import uuid
from collections.abc import AsyncIterator, Callable
from datetime import UTC, date, datetime, tzinfo
from decimal import Decimal
from types import SimpleNamespace
from typing import Any, Sequence

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("BOOKING_SERVICE_FEE", "5.00")

from booking_quote.core.config import get_settings
from booking_quote.db.session import create_schema, dispose_engine
from booking_quote.main import app
from booking_quote.services.availability_service import AvailabilityOracle
from booking_quote.services.booking_quote_service import BookingQuoteEngine
from booking_quote.services.catalog_service import CatalogLookup
from booking_quote.services.coupon_service import CouponPricer
from booking_quote.services.currency_service import CurrencyStore
from booking_quote.services.gift_card_service import GiftCardStore
from booking_quote.services.membership_service import MembershipStore
from booking_quote.services.quote_types import (
    DayAvailability,
    MembershipAllotment,
    PriceTier,
    ServiceExtraEntry,
    ServiceMasterCatalogEntry,
)

FIXED_NOW = datetime(2023, 12, 31, 12, 0, tzinfo=UTC)


class FakeCatalog(CatalogLookup):
    """In-memory catalog that answers bulk lookups in reverse order."""

    def __init__(
        self,
        entries: Sequence[ServiceMasterCatalogEntry] = (),
        extras: Sequence[ServiceExtraEntry] = (),
    ) -> None:
        self.entries = {entry.id: entry for entry in entries}
        self.extras = {extra.id: extra for extra in extras}
        self.requested: list[list[uuid.UUID]] = []

    async def fetch_service_masters(
        self, service_master_ids: Sequence[uuid.UUID]
    ) -> list[ServiceMasterCatalogEntry]:
        self.requested.append(list(service_master_ids))
        found = [
            self.entries[sm_id] for sm_id in service_master_ids if sm_id in self.entries
        ]
        return list(reversed(found))

    async def fetch_extras(
        self, extra_ids: Sequence[uuid.UUID]
    ) -> list[ServiceExtraEntry]:
        return [
            self.extras[extra_id] for extra_id in extra_ids if extra_id in self.extras
        ]


class FakeAvailability(AvailabilityOracle):
    def __init__(self, days: dict[date, DayAvailability] | None = None) -> None:
        self.days = days or {}
        self.calls: list[tuple[uuid.UUID, date, date]] = []
        self.zones: list[tzinfo] = []

    async def times(
        self,
        master_id: uuid.UUID,
        start_day: date,
        end_day: date,
        tz: tzinfo = UTC,
    ) -> dict[date, DayAvailability]:
        self.calls.append((master_id, start_day, end_day))
        self.zones.append(tz)
        return {
            day: value
            for day, value in self.days.items()
            if start_day <= day <= end_day
        }


class FakeMemberships(MembershipStore):
    def __init__(self, allotment: MembershipAllotment | None = None) -> None:
        self.allotment = allotment
        self.calls: list[dict[str, Any]] = []

    async def find_active(
        self,
        *,
        user_id: uuid.UUID,
        service_id: uuid.UUID,
        membership_id: uuid.UUID | None,
        at: datetime,
    ) -> MembershipAllotment | None:
        self.calls.append(
            {
                "user_id": user_id,
                "service_id": service_id,
                "membership_id": membership_id,
                "at": at,
            }
        )
        return self.allotment


class FakeGiftCards(GiftCardStore):
    def __init__(self, balances: dict[uuid.UUID, Decimal] | None = None) -> None:
        self.balances = balances or {}

    async def find_balance(
        self,
        *,
        gift_cart_id: uuid.UUID,
        user_id: uuid.UUID | None,
        at: datetime,
    ) -> Decimal | None:
        return self.balances.get(gift_cart_id)


class FakeCoupons(CouponPricer):
    def __init__(self, discounts: dict[str, Decimal] | None = None) -> None:
        self.discounts = discounts or {}
        self.calls: list[tuple[str, Decimal, Decimal]] = []

    async def price(self, coupon: str, amount: Decimal, rate: Decimal) -> Decimal:
        self.calls.append((coupon, amount, rate))
        return self.discounts.get(coupon, Decimal("0"))


class FakeCurrencies(CurrencyStore):
    def __init__(self, rates: dict[str, Decimal] | None = None) -> None:
        self.rates = rates or {}

    async def rate_for(self, code: str) -> Decimal | None:
        return self.rates.get(code)


@pytest.fixture()
def make_entry() -> Callable[..., ServiceMasterCatalogEntry]:
    """Build catalog entries with sensible defaults."""

    def _make(
        *,
        interval: int = 60,
        pause: int = 0,
        price: str = "100.00",
        discount: str = "0",
        commission_fee: str = "0",
        total_price: str | None = None,
        master_id: uuid.UUID | None = None,
        service_id: uuid.UUID | None = None,
        price_tiers: Sequence[PriceTier] = (),
    ) -> ServiceMasterCatalogEntry:
        return ServiceMasterCatalogEntry(
            id=uuid.uuid4(),
            master_id=master_id or uuid.uuid4(),
            service_id=service_id or uuid.uuid4(),
            interval=interval,
            pause=pause,
            price=Decimal(price),
            discount=Decimal(discount),
            commission_fee=Decimal(commission_fee),
            total_price=Decimal(total_price if total_price is not None else price),
            price_tiers=tuple(price_tiers),
        )

    return _make


@pytest.fixture()
def quote_engine() -> Callable[..., tuple[BookingQuoteEngine, SimpleNamespace]]:
    """Return a factory wiring an engine to in-memory collaborators."""

    def _build(
        *,
        entries: Sequence[ServiceMasterCatalogEntry] = (),
        extras: Sequence[ServiceExtraEntry] = (),
        days: dict[date, DayAvailability] | None = None,
        allotment: MembershipAllotment | None = None,
        gift_balances: dict[uuid.UUID, Decimal] | None = None,
        coupons: dict[str, Decimal] | None = None,
        rates: dict[str, Decimal] | None = None,
        service_fee: Decimal = Decimal("0"),
        now: datetime = FIXED_NOW,
    ) -> tuple[BookingQuoteEngine, SimpleNamespace]:
        ports = SimpleNamespace(
            catalog=FakeCatalog(entries, extras),
            availability=FakeAvailability(days),
            memberships=FakeMemberships(allotment),
            gift_cards=FakeGiftCards(gift_balances),
            coupons=FakeCoupons(coupons),
            currencies=FakeCurrencies(rates),
        )
        engine = BookingQuoteEngine(
            catalog=ports.catalog,
            availability=ports.availability,
            memberships=ports.memberships,
            gift_cards=ports.gift_cards,
            coupons=ports.coupons,
            currencies=ports.currencies,
            service_fee=service_fee,
            clock=lambda: now,
        )
        return engine, ports

    return _build


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    await create_schema(db_url, drop=True)
    yield
    await dispose_engine(db_url)


@pytest_asyncio.fixture()
async def client(reset_database: None) -> AsyncIterator[AsyncClient]:
    """Yield an async client bound to the ASGI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
