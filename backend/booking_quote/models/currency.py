"""Currency exchange rates."""

from __future__ import annotations

import uuid
from decimal import Decimal

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from booking_quote.db.base import Base
from booking_quote.models.mixins import ActiveMixin, TimestampMixin


class Currency(ActiveMixin, TimestampMixin, Base):
    """Currency with a multiplicative rate relative to the catalog currency."""

    __tablename__ = "currencies"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(8), unique=True, nullable=False)
    rate: Mapped[Decimal] = mapped_column(Numeric(14, 6), nullable=False)