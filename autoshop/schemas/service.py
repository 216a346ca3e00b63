"""
Pydantic schemas for the service catalog, work orders and service history.
"""
from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Optional
from autoshop.models.service import ServiceCategory, WorkOrderStatus


class CatalogItemBase(BaseModel):
    name: str
    description: Optional[str] = None
    category: ServiceCategory = ServiceCategory.MAINTENANCE
    base_price: float = Field(ge=0)
    estimated_duration: int = Field(default=60, gt=0)
    is_active: bool = True


class CatalogItemCreate(CatalogItemBase):
    pass


class CatalogItemUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[ServiceCategory] = None
    base_price: Optional[float] = Field(default=None, ge=0)
    estimated_duration: Optional[int] = Field(default=None, gt=0)
    is_active: Optional[bool] = None


class CatalogItem(CatalogItemBase):
    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WorkOrderBase(BaseModel):
    """Base work order schema with common fields."""
    vehicle_id: int
    service_type: str
    description: Optional[str] = None
    cost: float = Field(ge=0)
    status: WorkOrderStatus = WorkOrderStatus.PENDING
    technician: Optional[str] = None
    notes: Optional[str] = None
    mileage: Optional[int] = Field(default=None, ge=0)


class WorkOrderCreate(WorkOrderBase):
    """Schema for creating a work order."""
    pass


class WorkOrderUpdate(BaseModel):
    """Schema for updating a work order."""
    vehicle_id: Optional[int] = None
    service_type: Optional[str] = None
    description: Optional[str] = None
    cost: Optional[float] = Field(default=None, ge=0)
    status: Optional[WorkOrderStatus] = None
    technician: Optional[str] = None
    notes: Optional[str] = None
    mileage: Optional[int] = Field(default=None, ge=0)
    completed_date: Optional[datetime] = None


class WorkOrder(WorkOrderBase):
    """Schema for work order responses."""
    id: int
    service_date: datetime
    completed_date: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WorkOrderStats(BaseModel):
    total: int
    by_status: dict[str, int]
    completed_revenue: float


class ServiceRecordBase(BaseModel):
    vehicle_id: Optional[int] = None
    service_type: str
    description: Optional[str] = None
    service_date: date
    mileage: Optional[int] = Field(default=None, ge=0)
    labor_hours: Optional[float] = Field(default=None, ge=0)
    labor_rate: Optional[float] = Field(default=None, ge=0)
    total_cost: float = Field(default=0.0, ge=0)
    technician: Optional[str] = None
    notes: Optional[str] = None
    next_service_due: Optional[date] = None
    next_service_mileage: Optional[int] = None


class ServiceRecordCreate(ServiceRecordBase):
    pass


class ServiceRecord(ServiceRecordBase):
    id: int
    customer_id: int
    work_order_id: Optional[int] = None
    vehicle_make: Optional[str] = None
    vehicle_model: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ServiceHistorySummary(BaseModel):
    total_services: int = 0
    total_spent: float = 0.0
    average_cost: float = 0.0
    last_service_date: Optional[date] = None
    most_common_service: str = ""


class ServiceHistory(BaseModel):
    records: list[ServiceRecord]
    summary: ServiceHistorySummary
    years: list[int]
    service_types: list[str]
