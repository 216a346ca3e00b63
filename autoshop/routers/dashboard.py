"""
Admin dashboard statistics.
"""
from datetime import date, datetime, time, timedelta, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.auth import require_any_admin
from autoshop.billing import money
from autoshop.database import get_db
from autoshop.models.appointment import Appointment
from autoshop.models.customer import Customer
from autoshop.models.inventory import InventoryItem
from autoshop.models.invoice import Invoice, InvoiceStatus
from autoshop.models.membership import CustomerMembership, MembershipStatus
from autoshop.models.service import WorkOrder, WorkOrderStatus
from autoshop.models.user import User
from autoshop.models.vehicle import Vehicle
from autoshop.models.warranty import Warranty, WarrantyStatus
from autoshop.schemas.dashboard import DashboardStats, TopService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

RANGE_DAYS = {"1d": 1, "7d": 7, "30d": 30, "90d": 90, "1y": 365}
TOP_SERVICES = 5
RECENT_APPOINTMENTS = 5


async def count(db: AsyncSession, column, *criteria) -> int:
    return await db.scalar(select(func.count(column)).where(*criteria)) or 0


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    date_range: str = Query("30d", pattern="^(1d|7d|30d|90d|1y)$"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Headline figures for the selected period.
    """
    today = date.today()
    start_date = today - timedelta(days=RANGE_DAYS[date_range])
    start = datetime.combine(start_date, time.min, tzinfo=timezone.utc)

    revenue = await db.scalar(
        select(func.coalesce(func.sum(Invoice.total), 0.0)).where(
            Invoice.status == InvoiceStatus.PAID, Invoice.paid_date >= start
        )
    )
    outstanding = await db.scalar(
        select(func.coalesce(func.sum(Invoice.total - Invoice.total_paid), 0.0)).where(
            Invoice.status.not_in((InvoiceStatus.PAID, InvoiceStatus.CANCELLED))
        )
    )

    top = await db.execute(
        select(WorkOrder.service_type, func.count(WorkOrder.id), func.coalesce(func.sum(WorkOrder.cost), 0.0))
        .where(WorkOrder.status == WorkOrderStatus.COMPLETED, WorkOrder.completed_date >= start)
        .group_by(WorkOrder.service_type)
        .order_by(func.count(WorkOrder.id).desc(), WorkOrder.service_type)
        .limit(TOP_SERVICES)
    )

    recent = await db.execute(
        select(Appointment).order_by(Appointment.created_at.desc(), Appointment.id.desc()).limit(RECENT_APPOINTMENTS)
    )

    return DashboardStats(
        date_range=date_range,
        total_customers=await count(db, Customer.id),
        total_vehicles=await count(db, Vehicle.id),
        total_appointments=await count(db, Appointment.id, Appointment.scheduled_date >= start_date),
        appointments_today=await count(db, Appointment.id, Appointment.scheduled_date == today),
        completed_services=await count(
            db, WorkOrder.id, WorkOrder.status == WorkOrderStatus.COMPLETED, WorkOrder.completed_date >= start
        ),
        total_revenue=money(revenue or 0.0),
        outstanding_balance=money(outstanding or 0.0),
        low_stock_items=await count(db, InventoryItem.id, InventoryItem.current_stock <= InventoryItem.minimum_stock),
        active_warranties=await count(db, Warranty.id, Warranty.status == WarrantyStatus.ACTIVE),
        active_memberships=await count(
            db, CustomerMembership.id, CustomerMembership.status == MembershipStatus.ACTIVE
        ),
        top_services=[
            TopService(service_type=service_type, count=n, revenue=money(total))
            for service_type, n, total in top.all()
        ],
        recent_appointments=recent.scalars().all(),
    )
