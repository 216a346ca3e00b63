"""
Warranty model for database.
"""
from datetime import date

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Text, JSON, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from autoshop.database import Base
import enum


class WarrantyType(str, enum.Enum):
    MANUFACTURER = "manufacturer"
    EXTENDED = "extended"
    POWERTRAIN = "powertrain"
    BUMPER_TO_BUMPER = "bumper_to_bumper"
    CUSTOM = "custom"


class WarrantyStatus(str, enum.Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"
    SUSPENDED = "suspended"


COVERAGE_COMPONENTS = (
    "engine", "transmission", "electrical", "suspension", "brakes",
    "cooling", "fuel", "exhaust", "interior", "exterior",
)


class Warranty(Base):
    """Warranty database model."""

    __tablename__ = "warranties"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True)
    warranty_type = Column(SQLEnum(WarrantyType), nullable=False)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False, index=True)
    mileage_limit = Column(Integer, nullable=True)
    current_mileage = Column(Integer, nullable=False, default=0)
    coverage = Column(JSON, nullable=False, default=dict)
    deductible = Column(Float, nullable=False, default=0.0)
    max_claim_amount = Column(Float, nullable=True)
    total_claims = Column(Integer, nullable=False, default=0)
    total_claim_amount = Column(Float, nullable=False, default=0.0)
    status = Column(SQLEnum(WarrantyStatus), default=WarrantyStatus.ACTIVE, nullable=False)
    provider = Column(String, nullable=True)
    terms = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    customer = relationship("Customer", back_populates="warranties")
    vehicle = relationship("Vehicle")

    @property
    def is_expired(self) -> bool:
        return self.end_date < date.today()

    @property
    def days_until_expiration(self) -> int:
        return (self.end_date - date.today()).days

    @property
    def mileage_remaining(self):
        if not self.mileage_limit:
            return None
        return max(0, self.mileage_limit - self.current_mileage)
