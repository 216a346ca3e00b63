"""
Pydantic schemas for inventory.
"""
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional
from autoshop.models.inventory import InventoryCategory, StockUnit, StockStatus, TransactionType


class InventoryItemBase(BaseModel):
    name: str
    part_number: str
    category: InventoryCategory
    description: Optional[str] = None
    brand: Optional[str] = None
    unit: StockUnit = StockUnit.PIECE
    cost_price: float = Field(ge=0)
    selling_price: float = Field(ge=0)
    current_stock: int = Field(default=0, ge=0)
    minimum_stock: int = Field(default=0, ge=0)
    maximum_stock: Optional[int] = Field(default=None, ge=0)
    location: Optional[str] = None
    supplier: Optional[str] = None
    is_active: bool = True


class InventoryItemCreate(InventoryItemBase):
    pass


class InventoryItemUpdate(BaseModel):
    """Stock levels change only through stock movements."""
    name: Optional[str] = None
    part_number: Optional[str] = None
    category: Optional[InventoryCategory] = None
    description: Optional[str] = None
    brand: Optional[str] = None
    unit: Optional[StockUnit] = None
    cost_price: Optional[float] = Field(default=None, ge=0)
    selling_price: Optional[float] = Field(default=None, ge=0)
    minimum_stock: Optional[int] = Field(default=None, ge=0)
    maximum_stock: Optional[int] = Field(default=None, ge=0)
    location: Optional[str] = None
    supplier: Optional[str] = None
    is_active: Optional[bool] = None


class InventoryItem(InventoryItemBase):
    id: int
    stock_status: StockStatus
    stock_value: float
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class StockMovement(BaseModel):
    quantity: int = Field(gt=0)
    unit_price: Optional[float] = Field(default=None, ge=0)
    reference: Optional[str] = None
    notes: Optional[str] = None


class StockAdjustment(BaseModel):
    new_quantity: int = Field(ge=0)
    reason: Optional[str] = None


class InventoryTransaction(BaseModel):
    id: int
    item_id: int
    type: TransactionType
    quantity: int
    previous_stock: int
    new_stock: int
    unit_price: Optional[float] = None
    total_value: Optional[float] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InventoryStats(BaseModel):
    total_items: int
    total_stock_value: float
    low_stock: int
    out_of_stock: int
    by_category: dict[str, int]
