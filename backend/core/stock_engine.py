"""
Scan-driven stock mutation.

Given a scanned barcode and a mode (IN / OUT / STATUS) the engine resolves the
item, picks a location (from a hint or automatically) and moves the amount there
by exactly one. Expected outcomes such as an unknown barcode or an empty shelf
are returned as values, never raised.

The OUT decrement is a single conditional UPDATE (``amount > 0``), so
concurrent OUT scans cannot push an amount below zero; a scan that loses the
race sees no affected row and reports ``no_stock_available``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import query, query_one
from db.item import whole_number
from db.models import Item, ItemIdentifier, ItemStock, Location

logger = logging.getLogger(__name__)

UNKNOWN_LOCATION_NAME = "Unknown location"


class ScanMode(str, Enum):
    IN = "IN"
    OUT = "OUT"
    STATUS = "STATUS"


class ScanWarning(str, Enum):
    NO_STOCK_AVAILABLE = "no_stock_available"
    NO_LOCATION_SELECTED_FOR_IN = "no_location_selected_for_in"
    NO_STOCK_IN_SELECTED_LOCATION = "no_stock_in_selected_location"


@dataclass(frozen=True)
class SnapshotRow:
    """One identifier -> item -> stock -> location join row"""
    identifier: str
    item_id: int
    item_name: str
    item_threshold: Optional[float]
    location_id: Optional[int]
    location_name: Optional[str]
    location_amount: Optional[int]


@dataclass(frozen=True)
class ItemInfo:
    id: int
    name: str
    threshold: Optional[Union[int, float]]

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "threshold": self.threshold}


@dataclass(frozen=True)
class LocationAmount:
    location_id: int
    location_name: str
    amount: int

    def to_dict(self) -> Dict[str, Any]:
        return {"locationId": self.location_id, "locationName": self.location_name, "amount": self.amount}


@dataclass(frozen=True)
class StockChange:
    action: ScanMode
    location_id: int
    location_name: str
    previous_amount: int
    new_amount: int
    quantity: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action.value,
            "quantity": self.quantity,
            "locationId": self.location_id,
            "locationName": self.location_name,
            "previousAmount": self.previous_amount,
            "newAmount": self.new_amount,
        }


@dataclass(frozen=True)
class UnknownIdentifier:
    mode: ScanMode
    barcode: str

    def to_response(self) -> Dict[str, Any]:
        return {"status": "unknown_identifier", "mode": self.mode.value, "barcode": self.barcode}


@dataclass(frozen=True)
class KnownIdentifier:
    """A resolved scan.

    ``outcome`` is a StockChange when stock moved, a ScanWarning when the
    mutation was skipped, and None for STATUS, so a result can never carry
    both a change and a warning.
    """
    mode: ScanMode
    barcode: str
    item: ItemInfo
    locations: List[LocationAmount]
    outcome: Union[StockChange, ScanWarning, None] = None

    @property
    def change(self) -> Optional[StockChange]:
        return self.outcome if isinstance(self.outcome, StockChange) else None

    @property
    def warning(self) -> Optional[ScanWarning]:
        return self.outcome if isinstance(self.outcome, ScanWarning) else None

    def to_response(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "status": "known",
            "mode": self.mode.value,
            "barcode": self.barcode,
            "item": self.item.to_dict(),
            "locations": [loc.to_dict() for loc in self.locations],
        }
        if self.change is not None:
            out["change"] = self.change.to_dict()
        elif self.warning is not None:
            out["change"] = None
            out["warning"] = self.warning.value
        return out


ScanResult = Union[UnknownIdentifier, KnownIdentifier]


def build_locations(rows: List[SnapshotRow]) -> List[LocationAmount]:
    return [
        LocationAmount(
            location_id=r.location_id,
            location_name=r.location_name or UNKNOWN_LOCATION_NAME,
            amount=r.location_amount or 0,
        )
        for r in rows
        if r.location_id is not None
    ]


def pick_out_candidate(rows: List[SnapshotRow]) -> Optional[SnapshotRow]:
    """Largest amount wins; equal amounts go to the smallest location id."""
    candidates = [r for r in rows if r.location_id is not None and (r.location_amount or 0) > 0]
    if not candidates:
        return None
    return min(candidates, key=lambda r: (-(r.location_amount or 0), r.location_id))


class StockEngine:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def load_snapshot(self, barcode: str) -> List[SnapshotRow]:
        stmt = (
            select(
                ItemIdentifier.identifier,
                Item.id.label("item_id"),
                Item.name.label("item_name"),
                Item.threshold.label("item_threshold"),
                ItemStock.location_id,
                Location.name.label("location_name"),
                ItemStock.amount.label("location_amount"),
            )
            .select_from(ItemIdentifier)
            .join(Item, Item.id == ItemIdentifier.item_id)
            .outerjoin(ItemStock, ItemStock.item_id == Item.id)
            .outerjoin(Location, Location.id == ItemStock.location_id)
            .where(ItemIdentifier.identifier == barcode)
            .order_by(ItemStock.location_id)
        )
        rows = await query(self.session, stmt)
        return [SnapshotRow(**row._mapping) for row in rows]

    async def scan(
        self,
        barcode: str,
        mode: Union[ScanMode, str],
        preferred_location_id: Optional[int] = None,
    ) -> ScanResult:
        mode = ScanMode(mode)
        trimmed = barcode.strip()

        rows = await self.load_snapshot(trimmed)
        if not rows:
            return UnknownIdentifier(mode=mode, barcode=trimmed)

        first = rows[0]
        item = ItemInfo(id=first.item_id, name=first.item_name, threshold=whole_number(first.item_threshold))

        if mode is ScanMode.STATUS:
            return self._known(mode, first, item, rows)
        if mode is ScanMode.IN:
            return await self._scan_in(first, item, rows, preferred_location_id)
        return await self._scan_out(first, item, rows, preferred_location_id)

    @staticmethod
    def _known(mode: ScanMode, first: SnapshotRow, item: ItemInfo, rows: List[SnapshotRow], outcome=None) -> KnownIdentifier:
        return KnownIdentifier(
            mode=mode,
            barcode=first.identifier,
            item=item,
            locations=build_locations(rows),
            outcome=outcome,
        )

    async def _scan_in(
        self,
        first: SnapshotRow,
        item: ItemInfo,
        rows: List[SnapshotRow],
        preferred_location_id: Optional[int],
    ) -> KnownIdentifier:
        mode = ScanMode.IN
        stocked = {r.location_id: r for r in rows if r.location_id is not None}

        if preferred_location_id is not None:
            if preferred_location_id in stocked:
                row = stocked[preferred_location_id]
                location_id = preferred_location_id
                location_name = row.location_name or UNKNOWN_LOCATION_NAME
                previous_amount = row.location_amount or 0
            else:
                location = await query_one(
                    self.session,
                    select(Location.id, Location.name).where(Location.id == preferred_location_id),
                )
                if location is None:
                    return self._known(mode, first, item, rows, ScanWarning.NO_LOCATION_SELECTED_FOR_IN)
                location_id = location.id
                location_name = location.name or UNKNOWN_LOCATION_NAME
                previous_amount = 0
        else:
            # Exactly one stocked location is the only unambiguous choice
            if len(stocked) != 1:
                return self._known(mode, first, item, rows, ScanWarning.NO_LOCATION_SELECTED_FOR_IN)
            only = next(iter(stocked.values()))
            location_id = only.location_id
            location_name = only.location_name or UNKNOWN_LOCATION_NAME
            previous_amount = only.location_amount or 0

        if location_id in stocked:
            new_amount = await self._increment(item.id, location_id)
        else:
            new_amount = await self._insert(item.id, location_id)
        await self.session.commit()

        logger.info(
            "Scan IN item=%s location=%s amount %s -> %s", item.id, location_id, previous_amount, new_amount
        )
        change = StockChange(
            action=mode,
            location_id=location_id,
            location_name=location_name,
            previous_amount=previous_amount,
            new_amount=new_amount,
        )
        return self._known(mode, first, item, await self.load_snapshot(first.identifier), change)

    async def _scan_out(
        self,
        first: SnapshotRow,
        item: ItemInfo,
        rows: List[SnapshotRow],
        preferred_location_id: Optional[int],
    ) -> KnownIdentifier:
        mode = ScanMode.OUT
        chosen: Optional[SnapshotRow] = None

        if preferred_location_id is not None:
            preferred = next((r for r in rows if r.location_id == preferred_location_id), None)
            if preferred is not None:
                if (preferred.location_amount or 0) <= 0:
                    return self._known(mode, first, item, rows, ScanWarning.NO_STOCK_IN_SELECTED_LOCATION)
                chosen = preferred
            # A preferred location that never held this item falls back to auto-selection

        if chosen is None:
            chosen = pick_out_candidate(rows)
            if chosen is None:
                return self._known(mode, first, item, rows, ScanWarning.NO_STOCK_AVAILABLE)

        previous_amount = chosen.location_amount or 0
        new_amount = await self._decrement(item.id, chosen.location_id)
        if new_amount is None:
            # Lost a race with another OUT; nothing was changed
            logger.info("Scan OUT item=%s location=%s found no stock to take", item.id, chosen.location_id)
            return self._known(mode, first, item, rows, ScanWarning.NO_STOCK_AVAILABLE)
        await self.session.commit()

        logger.info(
            "Scan OUT item=%s location=%s amount %s -> %s", item.id, chosen.location_id, previous_amount, new_amount
        )
        change = StockChange(
            action=mode,
            location_id=chosen.location_id,
            location_name=chosen.location_name or UNKNOWN_LOCATION_NAME,
            previous_amount=previous_amount,
            new_amount=new_amount,
        )
        return self._known(mode, first, item, await self.load_snapshot(first.identifier), change)

    async def _increment(self, item_id: int, location_id: int) -> int:
        stock_tbl = ItemStock.__table__
        stmt = (
            update(stock_tbl)
            .where(stock_tbl.c.item_id == item_id, stock_tbl.c.location_id == location_id)
            .values(amount=stock_tbl.c.amount + 1)
            .returning(stock_tbl.c.amount)
        )
        row = await query_one(self.session, stmt)
        return int(row.amount)

    async def _insert(self, item_id: int, location_id: int) -> int:
        stock_tbl = ItemStock.__table__
        stmt = (
            insert(stock_tbl)
            .values(item_id=item_id, location_id=location_id, amount=1)
            .returning(stock_tbl.c.amount)
        )
        row = await query_one(self.session, stmt)
        return int(row.amount)

    async def _decrement(self, item_id: int, location_id: int) -> Optional[int]:
        stock_tbl = ItemStock.__table__
        stmt = (
            update(stock_tbl)
            .where(
                stock_tbl.c.item_id == item_id,
                stock_tbl.c.location_id == location_id,
                stock_tbl.c.amount > 0,
            )
            .values(amount=stock_tbl.c.amount - 1)
            .returning(stock_tbl.c.amount)
        )
        row = await query_one(self.session, stmt)
        return int(row.amount) if row is not None else None
