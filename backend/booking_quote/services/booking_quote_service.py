"""Booking quote engine: chain, price, validate and settle a service request."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from decimal import Decimal
from typing import Callable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from booking_quote.core.config import Settings, get_settings
from booking_quote.services.availability_service import (
    AvailabilityOracle,
    SqlAvailabilityOracle,
    validate_slot,
)
from booking_quote.services.catalog_service import (
    CatalogLookup,
    SqlCatalogLookup,
    index_catalog,
    pick_extras,
)
from booking_quote.services.coupon_service import CouponPricer, SqlCouponPricer
from booking_quote.services.credit_allocation_service import settle_credits
from booking_quote.services.currency_service import (
    CurrencyStore,
    SqlCurrencyStore,
    resolve_rate,
)
from booking_quote.services.exceptions import CatalogLookupError, QuoteError
from booking_quote.services.gift_card_service import (
    GiftCardStore,
    SqlGiftCardStore,
    load_gift_ledger,
)
from booking_quote.services.membership_service import (
    MembershipStore,
    SqlMembershipStore,
    apply_membership,
)
from booking_quote.services.price_resolver import (
    resolve_item_price,
    service_fee_for_rate,
)
from booking_quote.services.quote_types import (
    BookingItem,
    BookingQuoteRequest,
    BookingQuoteResult,
    ServiceMasterCatalogEntry,
    Slot,
    ZERO,
    to_money,
)
from booking_quote.services.slot_chain_service import (
    chain_slots,
    ensure_aware,
    normalize_datetime,
    validate_schedule,
)

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Unable to calculate booking"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _sum(items: Sequence[BookingItem], attribute: str) -> Decimal:
    return to_money(sum((getattr(item, attribute) for item in items), ZERO))


class BookingQuoteEngine:
    """Compose the quote components into one :class:`BookingQuoteResult`.

    The engine keeps no state between calls. Its only I/O goes through the
    collaborator ports handed to the constructor.
    """

    def __init__(
        self,
        *,
        catalog: CatalogLookup,
        availability: AvailabilityOracle,
        memberships: MembershipStore,
        gift_cards: GiftCardStore,
        coupons: CouponPricer,
        currencies: CurrencyStore,
        service_fee: Decimal = ZERO,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._catalog = catalog
        self._availability = availability
        self._memberships = memberships
        self._gift_cards = gift_cards
        self._coupons = coupons
        self._currencies = currencies
        self._service_fee = service_fee
        self._clock = clock or _utcnow

    async def quote(
        self,
        request: BookingQuoteRequest,
        *,
        currency: str | None = None,
    ) -> BookingQuoteResult:
        """Return a quote; failures come back as ``status=False``, never raised."""
        try:
            return await self._quote(request, currency)
        except QuoteError as exc:
            logger.info("Booking quote rejected: %s", exc)
            return BookingQuoteResult.failure(str(exc), start_date=request.start_date)
        except Exception:
            logger.exception("Booking quote failed")
            return BookingQuoteResult.failure(
                GENERIC_FAILURE_MESSAGE, start_date=request.start_date
            )

    async def _quote(
        self, request: BookingQuoteRequest, currency: str | None
    ) -> BookingQuoteResult:
        now = normalize_datetime(self._clock())
        validate_schedule(request.start_date, request.end_date, now=now)
        if not request.items:
            raise CatalogLookupError("At least one service is required")

        rate = await resolve_rate(self._currencies, currency)
        service_fee = service_fee_for_rate(self._service_fee, rate)
        ledger = await load_gift_ledger(
            self._gift_cards,
            gift_cart_id=request.gift_cart_id,
            user_id=request.user_id,
            rate=rate,
            at=now,
        )

        requested_ids = [item.service_master_id for item in request.items]
        fetched = await self._catalog.fetch_service_masters(
            list(dict.fromkeys(requested_ids))
        )
        catalog = index_catalog(fetched, requested_ids)
        extra_ids = list(
            dict.fromkeys(
                extra_id for item in request.items for extra_id in item.extra_ids
            )
        )
        extras_by_id = {
            extra.id: extra for extra in await self._catalog.fetch_extras(extra_ids)
        }

        entries = [catalog[sm_id] for sm_id in requested_ids]
        slots = chain_slots(
            request.start_date, (entry.duration_minutes for entry in entries)
        )

        items: list[BookingItem] = []
        for item_request, entry, slot in zip(request.items, entries, slots):
            item = BookingItem(
                service_master_id=entry.id,
                master_id=entry.master_id,
                service_id=entry.service_id,
                start_date=slot.start_at,
                end_date=slot.end_at,
                price_tier_id=item_request.price_tier_id,
                extras=pick_extras(extras_by_id, item_request.extra_ids),
                note=item_request.note or "",
                gender=item_request.gender or "",
                data=dict(item_request.custom_data),
                notes=list(item_request.notes),
            )
            item.apply_price(
                resolve_item_price(
                    entry,
                    slot,
                    rate=rate,
                    service_fee=service_fee,
                    extras=item.extras,
                    price_tier_id=item_request.price_tier_id,
                )
            )
            await self._offset_membership(item, request, now)
            await self._validate_availability(item, entry, slot)
            items.append(item)

        settlement = await settle_credits(
            items,
            ledger=ledger,
            coupon=request.coupon,
            pricer=self._coupons,
            rate=rate,
        )

        result = BookingQuoteResult(
            status=all(item.is_valid for item in items),
            start_date=ensure_aware(request.start_date),
            end_date=slots[-1].end_at,
            rate=rate,
            price=_sum(items, "price"),
            discount=_sum(items, "discount"),
            service_fee=_sum(items, "service_fee"),
            commission_fee=_sum(items, "commission_fee"),
            gift_cart_id=request.gift_cart_id,
            gift_cart_total=ledger.total_amount if ledger is not None else ZERO,
            gift_cart_price=settlement.gift_cart_price,
            coupon_price=settlement.coupon_price,
            total_price=settlement.total_price,
            items=items,
        )
        logger.debug(
            "Quoted %d item(s) ending %s for %s (status=%s)",
            len(items),
            result.end_date,
            result.total_price,
            result.status,
        )
        return result

    async def _offset_membership(
        self, item: BookingItem, request: BookingQuoteRequest, now: datetime
    ) -> None:
        if request.user_id is None:
            return
        allotment = await self._memberships.find_active(
            user_id=request.user_id,
            service_id=item.service_id,
            membership_id=request.member_ship_id,
            at=now,
        )
        apply_membership(item, allotment)

    async def _validate_availability(
        self, item: BookingItem, entry: ServiceMasterCatalogEntry, slot: Slot
    ) -> None:
        times = await self._availability.times(
            entry.master_id,
            slot.start_at.date(),
            slot.end_at.date(),
            tz=slot.start_at.tzinfo or UTC,
        )
        item.errors.extend(validate_slot(slot, times))


def build_sql_engine(
    session: AsyncSession,
    *,
    settings: Settings | None = None,
    clock: Callable[[], datetime] | None = None,
) -> BookingQuoteEngine:
    """Wire an engine whose collaborators read from ``session``."""
    settings = settings or get_settings()
    return BookingQuoteEngine(
        catalog=SqlCatalogLookup(session),
        availability=SqlAvailabilityOracle(session),
        memberships=SqlMembershipStore(session),
        gift_cards=SqlGiftCardStore(session),
        coupons=SqlCouponPricer(session, clock=clock),
        currencies=SqlCurrencyStore(session),
        service_fee=settings.booking_service_fee,
        clock=clock,
    )


async def calculate_booking(
    session: AsyncSession,
    *,
    request: BookingQuoteRequest,
    currency: str | None = None,
    settings: Settings | None = None,
) -> BookingQuoteResult:
    """Quote a booking request against the database behind ``session``."""
    settings = settings or get_settings()
    engine = build_sql_engine(session, settings=settings)
    return await engine.quote(request, currency=currency or settings.default_currency)


__all__ = [
    "BookingQuoteEngine",
    "build_sql_engine",
    "calculate_booking",
    "GENERIC_FAILURE_MESSAGE",
]
