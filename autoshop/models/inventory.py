"""
Inventory item and stock transaction models for database.
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Text, Boolean, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from autoshop.database import Base
import enum


class InventoryCategory(str, enum.Enum):
    """Part categories."""
    ENGINE_PARTS = "engine_parts"
    BRAKE_SYSTEM = "brake_system"
    ELECTRICAL = "electrical"
    SUSPENSION = "suspension"
    TRANSMISSION = "transmission"
    COOLING_SYSTEM = "cooling_system"
    FUEL_SYSTEM = "fuel_system"
    EXHAUST_SYSTEM = "exhaust_system"
    INTERIOR = "interior"
    EXTERIOR = "exterior"
    TOOLS = "tools"
    SUPPLIES = "supplies"
    FLUIDS = "fluids"
    OTHER = "other"


class StockUnit(str, enum.Enum):
    PIECE = "piece"
    BOX = "box"
    SET = "set"
    KIT = "kit"
    LITER = "liter"
    GALLON = "gallon"
    FOOT = "foot"
    METER = "meter"
    OTHER = "other"


class StockStatus(str, enum.Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"
    OVERSTOCKED = "overstocked"


class TransactionType(str, enum.Enum):
    IN = "in"
    OUT = "out"
    ADJUSTMENT = "adjustment"


class InventoryItem(Base):
    """Inventory item database model."""

    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    part_number = Column(String, unique=True, nullable=False, index=True)
    category = Column(SQLEnum(InventoryCategory), nullable=False)
    description = Column(Text, nullable=True)
    brand = Column(String, nullable=True)
    unit = Column(SQLEnum(StockUnit), default=StockUnit.PIECE, nullable=False)
    cost_price = Column(Float, nullable=False, default=0.0)
    selling_price = Column(Float, nullable=False, default=0.0)
    current_stock = Column(Integer, nullable=False, default=0)
    minimum_stock = Column(Integer, nullable=False, default=0)
    maximum_stock = Column(Integer, nullable=True)
    location = Column(String, nullable=True)
    supplier = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    transactions = relationship("InventoryTransaction", back_populates="item", cascade="all, delete")

    @property
    def stock_status(self) -> StockStatus:
        if self.current_stock <= 0:
            return StockStatus.OUT_OF_STOCK
        if self.current_stock <= self.minimum_stock:
            return StockStatus.LOW_STOCK
        if self.maximum_stock and self.current_stock >= self.maximum_stock:
            return StockStatus.OVERSTOCKED
        return StockStatus.IN_STOCK

    @property
    def stock_value(self) -> float:
        return round(self.current_stock * self.cost_price, 2)


class InventoryTransaction(Base):
    """Stock movement audit trail."""

    __tablename__ = "inventory_transactions"

    id = Column(Integer, primary_key=True, index=True)
    item_id = Column(Integer, ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(SQLEnum(TransactionType), nullable=False)
    quantity = Column(Integer, nullable=False)
    previous_stock = Column(Integer, nullable=False)
    new_stock = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=True)
    total_value = Column(Float, nullable=True)
    reference = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    item = relationship("InventoryItem", back_populates="transactions")
