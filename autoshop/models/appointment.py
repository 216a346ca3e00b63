"""
Appointment model for database.
"""
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from autoshop.database import Base
import enum


class AppointmentStatus(str, enum.Enum):
    """Appointment status enumeration."""
    SCHEDULED = "scheduled"
    PENDING_APPROVAL = "pending_approval"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


TERMINAL_STATUSES = (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW)


class Priority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class BookingSource(str, enum.Enum):
    CUSTOMER_PORTAL = "customer_portal"
    PHONE_CALL = "phone_call"
    WALK_IN = "walk_in"
    ADMIN_CREATED = "admin_created"


class Appointment(Base):
    """Appointment database model."""

    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False)
    service_type = Column(String, nullable=False)
    service_description = Column(Text, nullable=True)
    scheduled_date = Column(Date, nullable=False, index=True)
    scheduled_time = Column(String(5), nullable=False)
    estimated_duration = Column(Integer, nullable=False, default=60)
    status = Column(SQLEnum(AppointmentStatus), default=AppointmentStatus.SCHEDULED, nullable=False)
    priority = Column(SQLEnum(Priority), default=Priority.MEDIUM, nullable=False)
    technician = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    customer_notes = Column(Text, nullable=True)
    booking_source = Column(SQLEnum(BookingSource), default=BookingSource.ADMIN_CREATED, nullable=False)
    estimated_cost = Column(Float, nullable=True)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    customer = relationship("Customer", back_populates="appointments")
    vehicle = relationship("Vehicle")
