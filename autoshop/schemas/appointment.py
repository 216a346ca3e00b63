"""
Pydantic schemas for Appointment.
"""
from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Optional
from autoshop.models.appointment import AppointmentStatus, Priority, BookingSource

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class AppointmentFields(BaseModel):
    vehicle_id: int
    service_type: str
    service_description: Optional[str] = None
    scheduled_date: date
    scheduled_time: str = Field(pattern=TIME_PATTERN)
    estimated_duration: int = Field(default=60, gt=0)
    priority: Priority = Priority.MEDIUM
    technician: Optional[str] = None
    notes: Optional[str] = None


class AppointmentCreate(AppointmentFields):
    """Schema for creating an appointment from the admin dashboard."""
    customer_id: int
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    booking_source: BookingSource = BookingSource.ADMIN_CREATED
    estimated_cost: Optional[float] = Field(default=None, ge=0)


class AppointmentBooking(AppointmentFields):
    """Schema for a customer booking through the portal."""
    customer_notes: Optional[str] = None


class AppointmentUpdate(BaseModel):
    vehicle_id: Optional[int] = None
    service_type: Optional[str] = None
    service_description: Optional[str] = None
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    estimated_duration: Optional[int] = Field(default=None, gt=0)
    priority: Optional[Priority] = None
    technician: Optional[str] = None
    notes: Optional[str] = None
    customer_notes: Optional[str] = None
    estimated_cost: Optional[float] = Field(default=None, ge=0)


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus
    notes: Optional[str] = None


class Appointment(AppointmentFields):
    id: int
    customer_id: int
    status: AppointmentStatus
    booking_source: BookingSource
    customer_notes: Optional[str] = None
    estimated_cost: Optional[float] = None
    confirmed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AppointmentStats(BaseModel):
    total: int
    by_status: dict[str, int]
    today: int
    upcoming: int
