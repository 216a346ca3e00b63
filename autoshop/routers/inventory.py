"""
Inventory routes: parts, stock movements and stock reports.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.auth import require_any_admin
from autoshop.billing import money
from autoshop.database import get_db, update_values
from autoshop.errors import BusinessRuleError
from autoshop.models.inventory import InventoryCategory, InventoryItem, InventoryTransaction, TransactionType
from autoshop.models.user import User
from autoshop.schemas.inventory import (
    InventoryItem as InventoryItemSchema,
    InventoryItemCreate,
    InventoryItemUpdate,
    InventoryStats,
    InventoryTransaction as InventoryTransactionSchema,
    StockAdjustment,
    StockMovement,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inventory", tags=["inventory"])


def move_stock(
    item: InventoryItem,
    type: TransactionType,
    new_stock: int,
    quantity: int,
    user: User,
    unit_price: Optional[float] = None,
    reference: Optional[str] = None,
    notes: Optional[str] = None,
) -> InventoryTransaction:
    """Set the item's stock and write the matching transaction."""
    previous = item.current_stock
    item.current_stock = new_stock
    price = unit_price if unit_price is not None else item.cost_price
    transaction = InventoryTransaction(
        item_id=item.id,
        type=type,
        quantity=quantity,
        previous_stock=previous,
        new_stock=new_stock,
        unit_price=price,
        total_value=money(quantity * price),
        reference=reference,
        notes=notes,
        created_by=user.id,
    )
    logger.info("Stock %s for %s: %d -> %d", type.value, item.part_number, previous, new_stock)
    return transaction


async def get_item_or_404(db: AsyncSession, item_id: int) -> InventoryItem:
    item = await db.get(InventoryItem, item_id)
    if not item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Inventory item not found"
        )
    return item


async def ensure_part_number_available(db: AsyncSession, part_number: str, item_id: Optional[int] = None) -> None:
    query = select(InventoryItem.id).where(InventoryItem.part_number == part_number)
    if item_id is not None:
        query = query.where(InventoryItem.id != item_id)
    result = await db.execute(query)
    if result.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Part number already exists"
        )


@router.get("/categories", response_model=List[str])
async def get_categories(current_user: User = Depends(require_any_admin)):
    return [category.value for category in InventoryCategory]


@router.get("/items", response_model=List[InventoryItemSchema])
async def get_items(
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    category: Optional[InventoryCategory] = None,
    low_stock: bool = False,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Get inventory items with optional search, category and low-stock filters.
    """
    query = select(InventoryItem).order_by(InventoryItem.name, InventoryItem.id)

    if search:
        pattern = f"%{search}%"
        query = query.where(or_(
            InventoryItem.name.ilike(pattern),
            InventoryItem.part_number.ilike(pattern),
            InventoryItem.brand.ilike(pattern),
        ))
    if category:
        query = query.where(InventoryItem.category == category)
    if low_stock:
        query = query.where(InventoryItem.current_stock <= InventoryItem.minimum_stock)

    result = await db.execute(query.offset(skip).limit(limit))
    return result.scalars().all()


@router.get("/items/low-stock", response_model=List[InventoryItemSchema])
async def get_low_stock_items(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    result = await db.execute(
        select(InventoryItem)
        .where(InventoryItem.current_stock > 0, InventoryItem.current_stock <= InventoryItem.minimum_stock)
        .order_by(InventoryItem.current_stock, InventoryItem.name)
    )
    return result.scalars().all()


@router.get("/items/out-of-stock", response_model=List[InventoryItemSchema])
async def get_out_of_stock_items(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    result = await db.execute(
        select(InventoryItem).where(InventoryItem.current_stock <= 0).order_by(InventoryItem.name)
    )
    return result.scalars().all()


@router.get("/items/stats/overview", response_model=InventoryStats)
async def get_inventory_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    result = await db.execute(select(InventoryItem))
    items = result.scalars().all()

    by_category = {}
    for item in items:
        by_category[item.category.value] = by_category.get(item.category.value, 0) + 1

    return InventoryStats(
        total_items=len(items),
        total_stock_value=money(sum(item.stock_value for item in items)),
        low_stock=sum(1 for item in items if 0 < item.current_stock <= item.minimum_stock),
        out_of_stock=sum(1 for item in items if item.current_stock <= 0),
        by_category=by_category,
    )


@router.get("/items/{item_id}", response_model=InventoryItemSchema)
async def get_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    return await get_item_or_404(db, item_id)


@router.post("/items", response_model=InventoryItemSchema, status_code=status.HTTP_201_CREATED)
async def create_item(
    item: InventoryItemCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    await ensure_part_number_available(db, item.part_number)

    db_item = InventoryItem(**item.model_dump())
    db.add(db_item)
    await db.commit()
    await db.refresh(db_item)

    return db_item


@router.put("/items/{item_id}", response_model=InventoryItemSchema)
async def update_item(
    item_id: int,
    item_update: InventoryItemUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    db_item = await get_item_or_404(db, item_id)

    update_data = update_values(InventoryItem, item_update)
    if update_data.get("part_number"):
        await ensure_part_number_available(db, update_data["part_number"], item_id)

    for field, value in update_data.items():
        setattr(db_item, field, value)

    await db.commit()
    await db.refresh(db_item)

    return db_item


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    db_item = await get_item_or_404(db, item_id)

    await db.delete(db_item)
    await db.commit()

    return None


@router.post("/items/{item_id}/stock", response_model=InventoryItemSchema)
async def add_stock(
    item_id: int,
    movement: StockMovement,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Receive stock.
    """
    db_item = await get_item_or_404(db, item_id)
    db.add(move_stock(
        db_item, TransactionType.IN, db_item.current_stock + movement.quantity, movement.quantity,
        current_user, movement.unit_price, movement.reference, movement.notes,
    ))
    await db.commit()
    await db.refresh(db_item)

    return db_item


@router.post("/items/{item_id}/remove-stock", response_model=InventoryItemSchema)
async def remove_stock(
    item_id: int,
    movement: StockMovement,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Take stock out, e.g. for a repair.
    """
    db_item = await get_item_or_404(db, item_id)
    if movement.quantity > db_item.current_stock:
        raise BusinessRuleError(
            f"Insufficient stock: {db_item.current_stock} available, {movement.quantity} requested"
        )

    db.add(move_stock(
        db_item, TransactionType.OUT, db_item.current_stock - movement.quantity, movement.quantity,
        current_user, movement.unit_price, movement.reference, movement.notes,
    ))
    await db.commit()
    await db.refresh(db_item)

    return db_item


@router.post("/items/{item_id}/adjust-stock", response_model=InventoryItemSchema)
async def adjust_stock(
    item_id: int,
    adjustment: StockAdjustment,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Set the stock level after a count.
    """
    db_item = await get_item_or_404(db, item_id)
    difference = abs(adjustment.new_quantity - db_item.current_stock)

    db.add(move_stock(
        db_item, TransactionType.ADJUSTMENT, adjustment.new_quantity, difference,
        current_user, notes=adjustment.reason or "Stock adjustment",
    ))
    await db.commit()
    await db.refresh(db_item)

    return db_item


@router.get("/transactions", response_model=List[InventoryTransactionSchema])
async def get_transactions(
    skip: int = 0,
    limit: int = 100,
    item_id: Optional[int] = None,
    type: Optional[TransactionType] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    query = select(InventoryTransaction).order_by(InventoryTransaction.id.desc())
    if item_id is not None:
        query = query.where(InventoryTransaction.item_id == item_id)
    if type:
        query = query.where(InventoryTransaction.type == type)

    result = await db.execute(query.offset(skip).limit(limit))
    return result.scalars().all()
