"""
Pydantic schemas for Warranty.
"""
from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Optional
from autoshop.models.warranty import WarrantyType, WarrantyStatus


class Coverage(BaseModel):
    engine: bool = False
    transmission: bool = False
    electrical: bool = False
    suspension: bool = False
    brakes: bool = False
    cooling: bool = False
    fuel: bool = False
    exhaust: bool = False
    interior: bool = False
    exterior: bool = False


class WarrantyBase(BaseModel):
    customer_id: int
    vehicle_id: int
    warranty_type: WarrantyType
    name: str
    description: Optional[str] = None
    start_date: date
    end_date: date
    mileage_limit: Optional[int] = Field(default=None, gt=0)
    current_mileage: int = Field(default=0, ge=0)
    coverage: Coverage = Coverage()
    deductible: float = Field(default=0.0, ge=0)
    max_claim_amount: Optional[float] = Field(default=None, gt=0)
    status: WarrantyStatus = WarrantyStatus.ACTIVE
    provider: Optional[str] = None
    terms: Optional[str] = None


class WarrantyCreate(WarrantyBase):
    pass


class WarrantyUpdate(BaseModel):
    warranty_type: Optional[WarrantyType] = None
    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    mileage_limit: Optional[int] = Field(default=None, gt=0)
    coverage: Optional[Coverage] = None
    deductible: Optional[float] = Field(default=None, ge=0)
    max_claim_amount: Optional[float] = Field(default=None, gt=0)
    status: Optional[WarrantyStatus] = None
    provider: Optional[str] = None
    terms: Optional[str] = None


class MileageUpdate(BaseModel):
    current_mileage: int = Field(ge=0)


class WarrantyClaim(BaseModel):
    claim_amount: float = Field(gt=0)
    claim_description: Optional[str] = None


class Warranty(WarrantyBase):
    id: int
    total_claims: int
    total_claim_amount: float
    is_expired: bool
    days_until_expiration: int
    mileage_remaining: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WarrantyStatusBreakdown(BaseModel):
    status: WarrantyStatus
    count: int
    total_claims: int
    total_claim_amount: float


class WarrantyStats(BaseModel):
    total_warranties: int
    active_warranties: int
    expiring_soon: int
    mileage_expiring: int
    status_breakdown: list[WarrantyStatusBreakdown]


class WarrantyTypeStats(BaseModel):
    warranty_type: WarrantyType
    count: int
    active_count: int
    total_claims: int
    total_claim_amount: float
