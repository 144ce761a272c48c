"""Service catalog models: service masters, price tiers and extras."""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any

from sqlalchemy import ForeignKey, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import JSON

from booking_quote.db.base import Base
from booking_quote.models.mixins import ActiveMixin, TimestampMixin

JSONB_TYPE = JSONB().with_variant(JSON(), "sqlite")


class ServiceMaster(ActiveMixin, TimestampMixin, Base):
    """A service as offered by one master, with its duration and pricing."""

    __tablename__ = "service_masters"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    master_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    service_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    interval: Mapped[int] = mapped_column(Integer, nullable=False)
    pause: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    discount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    commission_fee: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    prices: Mapped[list["ServiceMasterPrice"]] = relationship(
        "ServiceMasterPrice",
        back_populates="service_master",
        cascade="all, delete-orphan",
        order_by="ServiceMasterPrice.position",
    )


class ServiceMasterPrice(TimestampMixin, Base):
    """Alternative price tier with optional time-of-day smart rules.

    ``smart`` holds an ordered list of objects shaped like
    ``{"from": "09:00", "to": "12:00", "value": "10", "value_type": "percent",
    "type": "up"}``.
    """

    __tablename__ = "service_master_prices"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    service_master_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("service_masters.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    smart: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB_TYPE, default=list, nullable=False
    )

    service_master: Mapped["ServiceMaster"] = relationship(
        "ServiceMaster", back_populates="prices"
    )


class ServiceExtra(ActiveMixin, TimestampMixin, Base):
    """Optional paid extra that can be attached to a booked service."""

    __tablename__ = "service_extras"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    service_id: Mapped[uuid.UUID | None] = mapped_column(nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)