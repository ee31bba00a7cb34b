# tests/factories.py
"""Seed helpers. Each call uses its own short session and commits."""
from __future__ import annotations

from typing import Optional

from sqlalchemy import select

from db.database import Database
from db.models import Item, ItemIdentifier, ItemIdentifierType, ItemStock, Location


async def make_identifier_type(database: Database, name: str = "EAN13") -> int:
    async with database.session_maker() as s:
        m = ItemIdentifierType(name=name)
        s.add(m)
        await s.commit()
        return m.id


async def make_item(database: Database, name: str = "Rice 5kg", threshold: Optional[float] = None) -> int:
    async with database.session_maker() as s:
        m = Item(name=name, threshold=threshold)
        s.add(m)
        await s.commit()
        return m.id


async def make_location(database: Database, name: str, id: Optional[int] = None) -> int:
    async with database.session_maker() as s:
        m = Location(id=id, name=name) if id is not None else Location(name=name)
        s.add(m)
        await s.commit()
        return m.id


async def link_identifier(database: Database, item_id: int, identifier: str) -> None:
    async with database.session_maker() as s:
        res = await s.execute(select(ItemIdentifierType.id).where(ItemIdentifierType.name == "EAN13"))
        type_id = res.scalar_one_or_none()
        if type_id is None:
            t = ItemIdentifierType(name="EAN13")
            s.add(t)
            await s.flush()
            type_id = t.id
        s.add(ItemIdentifier(item_id=item_id, identifier=identifier, item_identifier_type=type_id))
        await s.commit()


async def set_stock(database: Database, item_id: int, location_id: int, amount: int) -> None:
    async with database.session_maker() as s:
        res = await s.execute(
            select(ItemStock).where(ItemStock.item_id == item_id, ItemStock.location_id == location_id)
        )
        row = res.scalar_one_or_none()
        if row is None:
            s.add(ItemStock(item_id=item_id, location_id=location_id, amount=amount))
        else:
            row.amount = amount
        await s.commit()


async def stock_amount(database: Database, item_id: int, location_id: int) -> Optional[int]:
    async with database.session_maker() as s:
        res = await s.execute(
            select(ItemStock.amount).where(ItemStock.item_id == item_id, ItemStock.location_id == location_id)
        )
        return res.scalar_one_or_none()


async def stock_row_count(database: Database, item_id: int) -> int:
    async with database.session_maker() as s:
        res = await s.execute(select(ItemStock.id).where(ItemStock.item_id == item_id))
        return len(res.scalars().all())
