import time

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import get_async_session, query_one

router = APIRouter()

_started = time.monotonic()


@router.get("/health")
async def health():
    return {"status": "ok", "uptime": time.monotonic() - _started}


@router.get("/db-health")
async def db_health(db: AsyncSession = Depends(get_async_session)):
    """Simple sanity check that the store is reachable"""
    row = await query_one(db, select(func.current_timestamp().label("now")))
    return {"status": "ok", "now": row.now if row else None}
