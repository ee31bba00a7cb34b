from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import get_async_session
from db.models import Item as ItemModel, ItemIdentifier as ItemIdentifierModel, ItemIdentifierType
from schemas.items import ItemCreate, ItemIdentifierCreate, ItemList, ItemRead

router = APIRouter()

IDENTIFIER_TYPE_NAME = "EAN13"


@router.get("/items", response_model=ItemList)
async def list_items(db: AsyncSession = Depends(get_async_session)):
    """List all items, alphabetically"""
    res = await db.execute(select(ItemModel).order_by(ItemModel.name.asc(), ItemModel.id.asc()))
    return ItemList(items=[ItemRead(**i.to_schema) for i in res.scalars().all()])


@router.post("/items", response_model=ItemRead, status_code=status.HTTP_201_CREATED)
async def create_item(payload: ItemCreate, db: AsyncSession = Depends(get_async_session)):
    """Create a new item"""
    m = ItemModel(name=payload.name, threshold=payload.threshold)
    db.add(m)
    await db.commit()
    await db.refresh(m)
    return ItemRead(**m.to_schema)


@router.post("/item-identifiers")
async def link_identifier(payload: ItemIdentifierCreate, db: AsyncSession = Depends(get_async_session)):
    """Bind a scannable identifier to an existing item"""
    res = await db.execute(select(ItemModel).where(ItemModel.id == payload.item_id))
    if not res.scalar_one_or_none():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")

    res = await db.execute(
        select(ItemIdentifierType.id).where(ItemIdentifierType.name == IDENTIFIER_TYPE_NAME).limit(1)
    )
    identifier_type_id = res.scalar_one_or_none()
    if identifier_type_id is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"{IDENTIFIER_TYPE_NAME} identifier type not configured",
        )

    existing = await db.execute(
        select(ItemIdentifierModel).where(ItemIdentifierModel.identifier == payload.identifier)
    )
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Identifier already linked")

    db.add(
        ItemIdentifierModel(
            item_id=payload.item_id,
            identifier=payload.identifier,
            item_identifier_type=identifier_type_id,
        )
    )
    await db.commit()
    return {"success": True}
