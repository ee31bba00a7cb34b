from typing import Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.stock_engine import StockEngine
from db.database import get_async_session
from schemas.scan import ScanRequest

router = APIRouter()


@router.post("/scan", response_model=Dict)
async def scan(payload: ScanRequest, db: AsyncSession = Depends(get_async_session)):
    """Resolve a scanned barcode and move stock by one (IN/OUT) or just report it (STATUS)"""
    result = await StockEngine(db).scan(
        payload.barcode,
        payload.mode,
        preferred_location_id=payload.preferred_location_id,
    )
    return result.to_response()
