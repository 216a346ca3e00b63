"""
Pydantic schemas for Vehicle.
"""
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional
from autoshop.models.vehicle import Transmission, FuelType, VehicleStatus


class VehicleFields(BaseModel):
    """Vehicle fields shared by admin and portal forms."""
    make: str
    model: str
    year: int = Field(ge=1900, le=2100)
    license_plate: str
    vin: Optional[str] = None
    color: Optional[str] = None
    mileage: Optional[int] = Field(default=None, ge=0)
    transmission: Optional[Transmission] = None
    fuel_type: Optional[FuelType] = None
    status: VehicleStatus = VehicleStatus.ACTIVE
    notes: Optional[str] = None


class VehicleBase(VehicleFields):
    """Base vehicle schema with common fields."""
    customer_id: int


class VehicleCreate(VehicleBase):
    """Schema for creating a vehicle."""
    pass


class VehicleUpdate(BaseModel):
    """Schema for updating a vehicle."""
    customer_id: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = Field(default=None, ge=1900, le=2100)
    license_plate: Optional[str] = None
    vin: Optional[str] = None
    color: Optional[str] = None
    mileage: Optional[int] = Field(default=None, ge=0)
    transmission: Optional[Transmission] = None
    fuel_type: Optional[FuelType] = None
    status: Optional[VehicleStatus] = None
    notes: Optional[str] = None


class Vehicle(VehicleBase):
    """Schema for vehicle responses."""
    id: int
    full_name: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
