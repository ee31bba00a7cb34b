from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator


class ItemRead(BaseModel):
    id: int
    name: str
    threshold: Optional[Union[int, float]] = None

    class Config:
        from_attributes = True


class ItemList(BaseModel):
    items: List[ItemRead]


class ItemCreate(BaseModel):
    name: StrictStr
    threshold: Optional[float] = Field(default=None, strict=True, allow_inf_nan=False)

    @field_validator("name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must be a non-empty string")
        return v


class ItemIdentifierCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    item_id: StrictInt = Field(alias="itemId")
    identifier: StrictStr

    @field_validator("identifier")
    @classmethod
    def _strip_identifier(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("identifier must be a non-empty string")
        return v
