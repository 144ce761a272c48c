"""Gift cards attached to users."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from booking_quote.db.base import Base
from booking_quote.models.mixins import ActiveMixin, TimestampMixin


class UserGiftCart(ActiveMixin, TimestampMixin, Base):
    """Gift card balance owned by a user until ``expired_at``."""

    __tablename__ = "user_gift_carts"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    code: Mapped[str | None] = mapped_column(String(64), unique=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    expired_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )