"""ORM models package export."""

from booking_quote.models.availability import (
    Booking,
    BookingStatus,
    MasterClosedDate,
    MasterDisabledTime,
)
from booking_quote.models.catalog import ServiceExtra, ServiceMaster, ServiceMasterPrice
from booking_quote.models.coupon import Coupon, CouponType
from booking_quote.models.currency import Currency
from booking_quote.models.gift_card import UserGiftCart
from booking_quote.models.membership import (
    MemberShipSessions,
    UserMemberShip,
    UserMemberShipService,
)

__all__ = [
    "Booking",
    "BookingStatus",
    "Coupon",
    "CouponType",
    "Currency",
    "MasterClosedDate",
    "MasterDisabledTime",
    "MemberShipSessions",
    "ServiceExtra",
    "ServiceMaster",
    "ServiceMasterPrice",
    "UserGiftCart",
    "UserMemberShip",
    "UserMemberShipService",
]
