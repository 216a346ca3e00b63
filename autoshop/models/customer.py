"""
Customer model for database.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from autoshop.database import Base
import enum


class CustomerStatus(str, enum.Enum):
    """Customer status enumeration."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    PROSPECT = "prospect"


class Customer(Base):
    """Customer database model."""

    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    phone = Column(String, nullable=False)
    business_name = Column(String, nullable=True)
    street = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    zip_code = Column(String, nullable=True)
    status = Column(SQLEnum(CustomerStatus), default=CustomerStatus.ACTIVE, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="customer", uselist=False)
    vehicles = relationship("Vehicle", back_populates="customer", cascade="all, delete")
    appointments = relationship("Appointment", back_populates="customer", cascade="all, delete")
    service_records = relationship("ServiceRecord", back_populates="customer", cascade="all, delete")
    invoices = relationship("Invoice", back_populates="customer", cascade="all, delete")
    warranties = relationship("Warranty", back_populates="customer", cascade="all, delete")
    memberships = relationship("CustomerMembership", back_populates="customer", cascade="all, delete")
    notifications = relationship("Notification", back_populates="customer", cascade="all, delete")

    @property
    def full_address(self) -> str:
        parts = [self.street, self.city, self.state, self.zip_code]
        return ", ".join(part for part in parts if part)
