"""
Appointment routes for the admin dashboard.
"""
import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.auth import require_any_admin
from autoshop.database import get_db, update_values
from autoshop.models.appointment import Appointment, AppointmentStatus, TERMINAL_STATUSES
from autoshop.models.customer import Customer
from autoshop.models.notification import NotificationType
from autoshop.models.user import User
from autoshop.models.vehicle import Vehicle
from autoshop.routers.notifications import build_notification
from autoshop.schemas.appointment import (
    Appointment as AppointmentSchema,
    AppointmentCreate,
    AppointmentStats,
    AppointmentStatusUpdate,
    AppointmentUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["appointments"])

SCHEDULE_ORDER = (Appointment.scheduled_date, Appointment.scheduled_time, Appointment.id)


async def ensure_vehicle_belongs(db: AsyncSession, vehicle_id: int, customer_id: int, detail: str) -> Vehicle:
    result = await db.execute(
        select(Vehicle).where(Vehicle.id == vehicle_id, Vehicle.customer_id == customer_id)
    )
    vehicle = result.scalar_one_or_none()
    if not vehicle:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
    return vehicle


def confirmation_notice(appointment: Appointment):
    return build_notification(
        customer_id=appointment.customer_id,
        type=NotificationType.APPOINTMENT_CONFIRMATION,
        title="Appointment Scheduled",
        message=(
            f"Your {appointment.service_type} appointment is scheduled for "
            f"{appointment.scheduled_date:%Y-%m-%d} at {appointment.scheduled_time}."
        ),
    )


def apply_status(appointment: Appointment, new_status: AppointmentStatus) -> None:
    """Move an appointment to ``new_status``; terminal states are final."""
    if appointment.status in TERMINAL_STATUSES and new_status != appointment.status:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot change status of a {appointment.status.value} appointment"
        )
    if new_status == AppointmentStatus.CONFIRMED and appointment.confirmed_at is None:
        appointment.confirmed_at = datetime.now(timezone.utc)
    appointment.status = new_status


async def get_appointment_or_404(db: AsyncSession, appointment_id: int) -> Appointment:
    appointment = await db.get(Appointment, appointment_id)
    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appointment not found"
        )
    return appointment


@router.get("/", response_model=List[AppointmentSchema])
async def get_appointments(
    skip: int = 0,
    limit: int = 100,
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    customer_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Get appointments in schedule order with optional filters.
    """
    query = select(Appointment).order_by(*SCHEDULE_ORDER)

    if status_filter:
        query = query.where(Appointment.status == status_filter)
    if customer_id is not None:
        query = query.where(Appointment.customer_id == customer_id)
    if date_from:
        query = query.where(Appointment.scheduled_date >= date_from)
    if date_to:
        query = query.where(Appointment.scheduled_date <= date_to)

    result = await db.execute(query.offset(skip).limit(limit))
    return result.scalars().all()


@router.get("/stats/overview", response_model=AppointmentStats)
async def get_appointment_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    result = await db.execute(
        select(Appointment.status, func.count(Appointment.id)).group_by(Appointment.status)
    )
    by_status = {appointment_status.value: 0 for appointment_status in AppointmentStatus}
    for appointment_status, count in result.all():
        by_status[appointment_status.value] = count

    today = date.today()
    today_count = await db.scalar(
        select(func.count(Appointment.id)).where(Appointment.scheduled_date == today)
    )
    upcoming = await db.scalar(
        select(func.count(Appointment.id)).where(
            Appointment.scheduled_date > today,
            Appointment.status.not_in(TERMINAL_STATUSES),
        )
    )

    return AppointmentStats(
        total=sum(by_status.values()),
        by_status=by_status,
        today=today_count or 0,
        upcoming=upcoming or 0,
    )


@router.get("/calendar/{day}", response_model=List[AppointmentSchema])
async def get_calendar_day(
    day: date,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    All appointments on one day, by time.
    """
    result = await db.execute(
        select(Appointment).where(Appointment.scheduled_date == day).order_by(*SCHEDULE_ORDER)
    )
    return result.scalars().all()


@router.get("/{appointment_id}", response_model=AppointmentSchema)
async def get_appointment(
    appointment_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    return await get_appointment_or_404(db, appointment_id)


@router.post("/", response_model=AppointmentSchema, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    appointment: AppointmentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Schedule an appointment and notify the customer.
    """
    if await db.get(Customer, appointment.customer_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )
    await ensure_vehicle_belongs(
        db, appointment.vehicle_id, appointment.customer_id, "Vehicle does not belong to this customer"
    )

    db_appointment = Appointment(**appointment.model_dump())
    if db_appointment.status == AppointmentStatus.CONFIRMED:
        db_appointment.confirmed_at = datetime.now(timezone.utc)
    db.add(db_appointment)
    db.add(confirmation_notice(db_appointment))
    await db.commit()
    await db.refresh(db_appointment)

    logger.info("Appointment %s scheduled for %s", db_appointment.id, db_appointment.scheduled_date)
    return db_appointment


@router.put("/{appointment_id}", response_model=AppointmentSchema)
async def update_appointment(
    appointment_id: int,
    appointment_update: AppointmentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    db_appointment = await get_appointment_or_404(db, appointment_id)

    update_data = update_values(Appointment, appointment_update)
    if update_data.get("vehicle_id") is not None:
        await ensure_vehicle_belongs(
            db, update_data["vehicle_id"], db_appointment.customer_id, "Vehicle does not belong to this customer"
        )

    for field, value in update_data.items():
        setattr(db_appointment, field, value)

    await db.commit()
    await db.refresh(db_appointment)

    return db_appointment


@router.put("/{appointment_id}/status", response_model=AppointmentSchema)
async def update_appointment_status(
    appointment_id: int,
    body: AppointmentStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Change the status of an appointment.
    """
    db_appointment = await get_appointment_or_404(db, appointment_id)
    previous = db_appointment.status

    apply_status(db_appointment, body.status)
    if body.notes:
        db_appointment.notes = body.notes

    await db.commit()
    await db.refresh(db_appointment)

    logger.info("Appointment %s: %s -> %s", appointment_id, previous.value, body.status.value)
    return db_appointment


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_appointment(
    appointment_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    db_appointment = await get_appointment_or_404(db, appointment_id)

    await db.delete(db_appointment)
    await db.commit()

    return None
