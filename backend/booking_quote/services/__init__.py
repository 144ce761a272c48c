"""Service layer exports."""
from booking_quote.services import (
    availability_service,
    booking_quote_service,
    catalog_service,
    coupon_service,
    credit_allocation_service,
    currency_service,
    gift_card_service,
    membership_service,
    price_resolver,
    slot_chain_service,
)

__all__ = [
    "availability_service",
    "booking_quote_service",
    "catalog_service",
    "coupon_service",
    "credit_allocation_service",
    "currency_service",
    "gift_card_service",
    "membership_service",
    "price_resolver",
    "slot_chain_service",
]
