"""
Service catalog, work order and service history models for database.
"""
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Text, Boolean, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from autoshop.database import Base
import enum


class ServiceCategory(str, enum.Enum):
    """Service catalog categories."""
    MAINTENANCE = "maintenance"
    REPAIR = "repair"
    DIAGNOSTIC = "diagnostic"
    INSPECTION = "inspection"
    BODYWORK = "bodywork"
    TIRES = "tires"
    ELECTRICAL = "electrical"
    OTHER = "other"


class WorkOrderStatus(str, enum.Enum):
    """Work order status enumeration."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ServiceCatalogItem(Base):
    """A service the shop offers, shown on the public website."""

    __tablename__ = "service_catalog"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=True)
    category = Column(SQLEnum(ServiceCategory), default=ServiceCategory.MAINTENANCE, nullable=False)
    base_price = Column(Float, nullable=False, default=0.0)
    estimated_duration = Column(Integer, nullable=False, default=60)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class WorkOrder(Base):
    """Work order database model."""

    __tablename__ = "work_orders"

    id = Column(Integer, primary_key=True, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False)
    service_type = Column(String, nullable=False)
    description = Column(String, nullable=True)
    cost = Column(Float, nullable=False)
    status = Column(SQLEnum(WorkOrderStatus), default=WorkOrderStatus.PENDING, nullable=False)
    technician = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    mileage = Column(Integer, nullable=True)
    service_date = Column(DateTime(timezone=True), server_default=func.now())
    completed_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    vehicle = relationship("Vehicle", back_populates="work_orders")


class ServiceRecord(Base):
    """Completed service in a customer's history."""

    __tablename__ = "service_records"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="SET NULL"), nullable=True)
    work_order_id = Column(Integer, ForeignKey("work_orders.id", ondelete="SET NULL"), nullable=True, unique=True)
    service_type = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    service_date = Column(Date, nullable=False)
    mileage = Column(Integer, nullable=True)
    labor_hours = Column(Float, nullable=True)
    labor_rate = Column(Float, nullable=True)
    total_cost = Column(Float, nullable=False, default=0.0)
    technician = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    next_service_due = Column(Date, nullable=True)
    next_service_mileage = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    customer = relationship("Customer", back_populates="service_records")
    vehicle = relationship("Vehicle", lazy="joined")

    @property
    def vehicle_make(self):
        return self.vehicle.make if self.vehicle else None

    @property
    def vehicle_model(self):
        return self.vehicle.model if self.vehicle else None
