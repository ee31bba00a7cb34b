import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import case, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.stock_engine import UNKNOWN_LOCATION_NAME
from db.database import get_async_session, query
from db.models import Item as ItemModel, ItemStock as ItemStockModel, Location as LocationModel
from schemas.items import ItemRead
from schemas.stock import LocationStockRead, StockAdjustRequest, StockAdjustResponse

logger = logging.getLogger(__name__)

router = APIRouter()


async def _load_item_locations(db: AsyncSession, item_id: int) -> list[LocationStockRead]:
    rows = await query(
        db,
        select(
            ItemStockModel.location_id,
            LocationModel.name.label("location_name"),
            ItemStockModel.amount,
        )
        .join(LocationModel, LocationModel.id == ItemStockModel.location_id)
        .where(ItemStockModel.item_id == item_id)
        .order_by(ItemStockModel.location_id),
    )
    return [
        LocationStockRead(
            location_id=r.location_id,
            location_name=r.location_name or UNKNOWN_LOCATION_NAME,
            amount=r.amount or 0,
        )
        for r in rows
    ]


@router.post("/stock/adjust", response_model=StockAdjustResponse)
async def adjust_stock(payload: StockAdjustRequest, db: AsyncSession = Depends(get_async_session)):
    """Apply an arbitrary delta at an explicit location, never going below zero"""
    res = await db.execute(select(ItemModel).where(ItemModel.id == payload.item_id))
    item = res.scalar_one_or_none()
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")

    res = await db.execute(select(LocationModel.id).where(LocationModel.id == payload.location_id))
    if res.scalar_one_or_none() is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")

    stock_tbl = ItemStockModel.__table__
    res = await db.execute(
        select(stock_tbl.c.id).where(
            stock_tbl.c.item_id == payload.item_id,
            stock_tbl.c.location_id == payload.location_id,
        )
    )
    stock_id = res.scalar_one_or_none()

    if stock_id is not None:
        adjusted = stock_tbl.c.amount + payload.delta
        await db.execute(
            update(stock_tbl)
            .where(stock_tbl.c.id == stock_id)
            .values(amount=case((adjusted < 0, 0), else_=adjusted))
        )
    elif payload.delta > 0:
        await db.execute(
            insert(stock_tbl).values(
                item_id=payload.item_id,
                location_id=payload.location_id,
                amount=payload.delta,
            )
        )
    await db.commit()

    logger.info(
        "Stock adjust item=%s location=%s delta=%s", payload.item_id, payload.location_id, payload.delta
    )
    return StockAdjustResponse(
        item=ItemRead(**item.to_schema),
        locations=await _load_item_locations(db, payload.item_id),
    )
