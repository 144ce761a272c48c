"""Pydantic schemas for booking quote endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from booking_quote.services.quote_types import (
    BookingQuoteRequest,
    ItemRequest,
    QuoteErrorCode,
)


class BookingItemCreate(BaseModel):
    """One requested service in the chain."""

    service_master_id: uuid.UUID
    price_tier_id: uuid.UUID | None = None
    extra_ids: list[uuid.UUID] = Field(default_factory=list)
    note: str | None = Field(default=None, max_length=1024)
    gender: str | None = Field(default=None, max_length=32)
    custom_data: dict[str, Any] = Field(default_factory=dict)
    notes: list[str] = Field(default_factory=list)


class BookingQuoteCreate(BaseModel):
    """Input payload for calculating a booking quote."""

    start_date: datetime
    end_date: datetime | None = None
    items: list[BookingItemCreate] = Field(min_length=1)
    gift_cart_id: uuid.UUID | None = None
    coupon: str | None = Field(default=None, max_length=64)
    user_id: uuid.UUID | None = None
    member_ship_id: uuid.UUID | None = None

    def to_request(self) -> BookingQuoteRequest:
        return BookingQuoteRequest(
            start_date=self.start_date,
            end_date=self.end_date,
            items=[
                ItemRequest(
                    service_master_id=item.service_master_id,
                    price_tier_id=item.price_tier_id,
                    extra_ids=list(item.extra_ids),
                    note=item.note,
                    gender=item.gender,
                    custom_data=dict(item.custom_data),
                    notes=list(item.notes),
                )
                for item in self.items
            ],
            gift_cart_id=self.gift_cart_id,
            coupon=self.coupon,
            user_id=self.user_id,
            member_ship_id=self.member_ship_id,
        )


class ItemErrorRead(BaseModel):
    code: QuoteErrorCode
    message: str

    model_config = ConfigDict(from_attributes=True)


class ServiceExtraRead(BaseModel):
    id: uuid.UUID
    name: str
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class BookingItemRead(BaseModel):
    """Computed slot within a booking quote."""

    service_master_id: uuid.UUID
    master_id: uuid.UUID
    service_id: uuid.UUID
    start_date: datetime
    end_date: datetime
    price: Decimal
    discount: Decimal
    service_fee: Decimal
    commission_fee: Decimal
    extra_price: Decimal
    total_price: Decimal
    gift_cart_price: Decimal | None = None
    user_member_ship_id: uuid.UUID | None = None
    price_tier_id: uuid.UUID | None = None
    extras: list[ServiceExtraRead]
    note: str
    gender: str
    data: dict[str, Any]
    notes: list[str]
    errors: list[ItemErrorRead]

    model_config = ConfigDict(from_attributes=True)


class BookingQuoteRead(BaseModel):
    """Aggregated booking quote response."""

    status: bool
    message: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    rate: Decimal
    price: Decimal
    discount: Decimal
    service_fee: Decimal
    commission_fee: Decimal
    gift_cart_id: uuid.UUID | None = None
    gift_cart_total: Decimal
    gift_cart_price: Decimal
    coupon_price: Decimal
    total_price: Decimal
    items: list[BookingItemRead]

    model_config = ConfigDict(from_attributes=True)
