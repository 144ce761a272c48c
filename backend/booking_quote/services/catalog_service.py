"""Service master catalog lookups."""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import time
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Sequence

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from booking_quote.models import ServiceExtra, ServiceMaster, ServiceMasterPrice
from booking_quote.services.exceptions import CatalogLookupError
from booking_quote.services.quote_types import (
    PriceTier,
    ServiceExtraEntry,
    ServiceMasterCatalogEntry,
    SmartDirection,
    SmartPriceRule,
    SmartValueType,
)

logger = logging.getLogger(__name__)

_VALUE_TYPE_ALIASES: dict[str, SmartValueType] = {
    "percent": SmartValueType.PERCENT,
    "absolute": SmartValueType.ABSOLUTE,
    "fix": SmartValueType.ABSOLUTE,
}
_DIRECTION_ALIASES: dict[str, SmartDirection] = {
    "up": SmartDirection.INCREASE,
    "increase": SmartDirection.INCREASE,
    "down": SmartDirection.DECREASE,
    "decrease": SmartDirection.DECREASE,
}


class CatalogLookup(ABC):
    @abstractmethod
    async def fetch_service_masters(
        self, service_master_ids: Sequence[uuid.UUID]
    ) -> list[ServiceMasterCatalogEntry]:
        """Return catalog entries for the ids, in any order."""
        raise NotImplementedError

    @abstractmethod
    async def fetch_extras(
        self, extra_ids: Sequence[uuid.UUID]
    ) -> list[ServiceExtraEntry]:
        """Return active extras for the ids, in any order."""
        raise NotImplementedError


def index_catalog(
    entries: Iterable[ServiceMasterCatalogEntry],
    requested_ids: Iterable[uuid.UUID],
) -> dict[uuid.UUID, ServiceMasterCatalogEntry]:
    """Key a bulk lookup by id and make sure every requested id came back."""
    by_id = {entry.id: entry for entry in entries}
    missing = [
        str(sm_id) for sm_id in dict.fromkeys(requested_ids) if sm_id not in by_id
    ]
    if missing:
        raise CatalogLookupError(f"Service master not found: {', '.join(missing)}")
    return by_id


def pick_extras(
    extras_by_id: Mapping[uuid.UUID, ServiceExtraEntry],
    extra_ids: Sequence[uuid.UUID],
) -> list[ServiceExtraEntry]:
    picked: list[ServiceExtraEntry] = []
    for extra_id in extra_ids:
        extra = extras_by_id.get(extra_id)
        if extra is None:
            raise CatalogLookupError(f"Service extra not available: {extra_id}")
        picked.append(extra)
    return picked


def parse_smart_rule(raw: Mapping[str, Any]) -> SmartPriceRule | None:
    """Convert a stored smart-rule object, skipping malformed entries."""
    try:
        value_type = _VALUE_TYPE_ALIASES[str(raw["value_type"]).lower()]
        raw_direction = raw.get("type", raw.get("direction"))
        direction = _DIRECTION_ALIASES[str(raw_direction).lower()]
        return SmartPriceRule(
            starts=time.fromisoformat(str(raw["from"])),
            ends=time.fromisoformat(str(raw["to"])),
            value=Decimal(str(raw["value"])),
            value_type=value_type,
            direction=direction,
        )
    except (KeyError, ValueError, InvalidOperation):
        logger.warning("Skipping malformed smart price rule: %s", raw)
        return None


def _tier_from_model(model: ServiceMasterPrice) -> PriceTier:
    rules = (parse_smart_rule(raw) for raw in (model.smart or []))
    return PriceTier(
        id=model.id,
        price=Decimal(model.price),
        smart_rules=tuple(rule for rule in rules if rule is not None),
    )


def entry_from_model(model: ServiceMaster) -> ServiceMasterCatalogEntry:
    return ServiceMasterCatalogEntry(
        id=model.id,
        master_id=model.master_id,
        service_id=model.service_id,
        interval=model.interval,
        pause=model.pause or 0,
        price=Decimal(model.price),
        discount=Decimal(model.discount or 0),
        commission_fee=Decimal(model.commission_fee or 0),
        total_price=Decimal(model.total_price),
        price_tiers=tuple(_tier_from_model(tier) for tier in model.prices),
    )


class SqlCatalogLookup(CatalogLookup):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def fetch_service_masters(
        self, service_master_ids: Sequence[uuid.UUID]
    ) -> list[ServiceMasterCatalogEntry]:
        if not service_master_ids:
            return []
        stmt: Select[tuple[ServiceMaster]] = (
            select(ServiceMaster)
            .options(selectinload(ServiceMaster.prices))
            .where(
                ServiceMaster.id.in_(set(service_master_ids)),
                ServiceMaster.active.is_(True),
            )
        )
        result = await self._session.execute(stmt)
        return [entry_from_model(model) for model in result.scalars().unique().all()]

    async def fetch_extras(
        self, extra_ids: Sequence[uuid.UUID]
    ) -> list[ServiceExtraEntry]:
        if not extra_ids:
            return []
        stmt: Select[tuple[ServiceExtra]] = select(ServiceExtra).where(
            ServiceExtra.id.in_(set(extra_ids)),
            ServiceExtra.active.is_(True),
        )
        result = await self._session.execute(stmt)
        return [
            ServiceExtraEntry(id=extra.id, price=Decimal(extra.price), name=extra.name)
            for extra in result.scalars().all()
        ]
