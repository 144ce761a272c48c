"""Membership coverage of booked services."""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from booking_quote.models import UserMemberShip, UserMemberShipService
from booking_quote.services.quote_types import BookingItem, MembershipAllotment, ZERO


class MembershipStore(ABC):
    @abstractmethod
    async def find_active(
        self,
        *,
        user_id: uuid.UUID,
        service_id: uuid.UUID,
        membership_id: uuid.UUID | None,
        at: datetime,
    ) -> MembershipAllotment | None:
        """Return an unexpired allotment of the user, optionally by id."""
        raise NotImplementedError


def qualifies(allotment: MembershipAllotment | None, service_id: uuid.UUID) -> bool:
    """Limited memberships need sessions left; unlimited ones always qualify."""
    if allotment is None:
        return False
    return allotment.covers(service_id) and allotment.has_sessions


def apply_membership(
    item: BookingItem, allotment: MembershipAllotment | None
) -> bool:
    """Zero every price field of a covered item and tag it with the membership.

    The allotment's remainder is left untouched; sessions are only consumed
    when the booking is committed.
    """
    if allotment is None or not qualifies(allotment, item.service_id):
        return False
    item.user_member_ship_id = allotment.id
    item.price = ZERO
    item.discount = ZERO
    item.service_fee = ZERO
    item.commission_fee = ZERO
    item.extra_price = ZERO
    item.total_price = ZERO
    return True


class SqlMembershipStore(MembershipStore):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_active(
        self,
        *,
        user_id: uuid.UUID,
        service_id: uuid.UUID,
        membership_id: uuid.UUID | None,
        at: datetime,
    ) -> MembershipAllotment | None:
        stmt: Select[tuple[UserMemberShip]] = (
            select(UserMemberShip)
            .options(selectinload(UserMemberShip.services))
            .where(
                UserMemberShip.user_id == user_id,
                UserMemberShip.expired_at > at,
            )
            .order_by(UserMemberShip.expired_at.asc())
        )
        if membership_id is not None:
            stmt = stmt.where(UserMemberShip.id == membership_id)
        else:
            stmt = stmt.where(
                UserMemberShip.services.any(
                    UserMemberShipService.service_id == service_id
                )
            )
        result = await self._session.execute(stmt)
        allotments = [
            MembershipAllotment(
                id=membership.id,
                sessions=membership.sessions,
                remainder=membership.remainder,
                service_ids=frozenset(
                    covered.service_id for covered in membership.services
                ),
                expired_at=membership.expired_at,
            )
            for membership in result.scalars().unique().all()
        ]
        if not allotments:
            return None
        return next(
            (item for item in allotments if qualifies(item, service_id)),
            allotments[0],
        )
