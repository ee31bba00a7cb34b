from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator

from core.stock_engine import ScanMode


class ScanRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    barcode: StrictStr
    mode: ScanMode
    preferred_location_id: Optional[StrictInt] = Field(default=None, alias="preferredLocationId")

    @field_validator("barcode")
    @classmethod
    def _barcode_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Barcode is required")
        return v
