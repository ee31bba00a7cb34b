from typing import List

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from schemas.items import ItemRead


class StockAdjustRequest(BaseModel):
    """Administrative correction; delta may be negative, result is clamped at zero"""
    model_config = ConfigDict(populate_by_name=True)

    item_id: StrictInt = Field(alias="itemId")
    location_id: StrictInt = Field(alias="locationId")
    delta: StrictInt


class LocationStockRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    location_id: int = Field(alias="locationId")
    location_name: str = Field(alias="locationName")
    amount: int


class StockAdjustResponse(BaseModel):
    item: ItemRead
    locations: List[LocationStockRead]
