"""
Pydantic schemas for the admin dashboard and the customer portal dashboard.
"""
from pydantic import BaseModel
from typing import Optional
from autoshop.schemas.appointment import Appointment
from autoshop.schemas.invoice import Invoice
from autoshop.schemas.service import ServiceRecord


class TopService(BaseModel):
    service_type: str
    count: int
    revenue: float


class DashboardStats(BaseModel):
    date_range: Optional[str] = None
    total_customers: int
    total_vehicles: int
    total_appointments: int
    appointments_today: int
    completed_services: int
    total_revenue: float
    outstanding_balance: float
    low_stock_items: int
    active_warranties: int
    active_memberships: int
    top_services: list[TopService]
    recent_appointments: list[Appointment]


class PortalCounts(BaseModel):
    vehicles: int = 0
    appointments: int = 0
    services: int = 0
    invoices: int = 0
    outstanding_amount: float = 0.0


class PortalDashboard(BaseModel):
    stats: PortalCounts
    recent_appointments: list[Appointment] = []
    upcoming_appointments: list[Appointment] = []
    recent_services: list[ServiceRecord] = []
    outstanding_invoices: list[Invoice] = []
