"""
Pydantic schemas for request/response validation.
"""
from autoshop.schemas.customer import CustomerBase, CustomerCreate, CustomerUpdate, Customer
from autoshop.schemas.vehicle import VehicleBase, VehicleCreate, VehicleUpdate, Vehicle
from autoshop.schemas.service import WorkOrderBase, WorkOrderCreate, WorkOrderUpdate, WorkOrder
from autoshop.schemas.user import UserBase, User, RegisterRequest, LoginRequest, AuthResponse

__all__ = [
    "CustomerBase", "CustomerCreate", "CustomerUpdate", "Customer",
    "VehicleBase", "VehicleCreate", "VehicleUpdate", "Vehicle",
    "WorkOrderBase", "WorkOrderCreate", "WorkOrderUpdate", "WorkOrder",
    "UserBase", "User", "RegisterRequest", "LoginRequest", "AuthResponse",
]
