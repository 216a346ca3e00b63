"""
Vehicle model for database.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from autoshop.database import Base
import enum


class Transmission(str, enum.Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"
    CVT = "cvt"
    OTHER = "other"


class FuelType(str, enum.Enum):
    GASOLINE = "gasoline"
    DIESEL = "diesel"
    HYBRID = "hybrid"
    ELECTRIC = "electric"
    OTHER = "other"


class VehicleStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"


class Vehicle(Base):
    """Vehicle database model."""

    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    make = Column(String, nullable=False)
    model = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    license_plate = Column(String, unique=True, nullable=False, index=True)
    vin = Column(String, unique=True, nullable=True)
    color = Column(String, nullable=True)
    mileage = Column(Integer, nullable=True)
    transmission = Column(SQLEnum(Transmission), nullable=True)
    fuel_type = Column(SQLEnum(FuelType), nullable=True)
    status = Column(SQLEnum(VehicleStatus), default=VehicleStatus.ACTIVE, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    customer = relationship("Customer", back_populates="vehicles")
    work_orders = relationship("WorkOrder", back_populates="vehicle", cascade="all, delete")

    @property
    def full_name(self) -> str:
        return f"{self.year} {self.make} {self.model}"
