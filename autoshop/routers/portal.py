"""
Customer self-service portal routes.

Every route acts on the CRM customer linked to the logged-in user. Reads
return empty collections when no customer record is linked; writes 404.
"""
import logging
import time
from datetime import date, datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop import summaries
from autoshop.auth import get_current_customer, require_customer
from autoshop.database import get_db, reload, update_values
from autoshop.models.appointment import Appointment, AppointmentStatus, BookingSource, TERMINAL_STATUSES
from autoshop.models.customer import Customer
from autoshop.models.invoice import Invoice, InvoiceStatus
from autoshop.models.membership import CustomerMembership, MembershipPlan
from autoshop.models.notification import Notification, NotificationStatus, NotificationType, UNREAD_STATUSES
from autoshop.models.service import ServiceRecord
from autoshop.models.user import User
from autoshop.models.vehicle import Vehicle
from autoshop.models.warranty import Warranty
from autoshop.pagination import page_count
from autoshop.routers.appointments import apply_status, confirmation_notice, ensure_vehicle_belongs
from autoshop.routers.invoices import apply_payment
from autoshop.routers.vehicles import ensure_plate_available
from autoshop.schemas.appointment import Appointment as AppointmentSchema, AppointmentBooking, AppointmentUpdate
from autoshop.schemas.customer import Customer as CustomerSchema, ProfileUpdate
from autoshop.schemas.dashboard import PortalCounts, PortalDashboard
from autoshop.schemas.invoice import Invoice as InvoiceSchema, PaymentOverview, PaymentSummary, PortalPayment
from autoshop.schemas.membership import Membership as MembershipSchema, Plan as PlanSchema, Rewards, RewardsSummary
from autoshop.schemas.notification import Notification as NotificationSchema, NotificationPage
from autoshop.schemas.service import ServiceHistory, ServiceHistorySummary
from autoshop.schemas.user import MessageResponse
from autoshop.schemas.vehicle import Vehicle as VehicleSchema, VehicleFields, VehicleUpdate
from autoshop.schemas.warranty import Warranty as WarrantySchema

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/portal", tags=["portal"], dependencies=[Depends(require_customer)])

OUTSTANDING_STATUSES = (InvoiceStatus.PENDING, InvoiceStatus.OVERDUE)
DASHBOARD_LIST_SIZE = 5


def require_profile(customer: Optional[Customer]) -> Customer:
    if customer is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer profile not found"
        )
    return customer


async def own_rows(db: AsyncSession, customer: Optional[Customer], model, *order_by) -> list:
    if customer is None:
        return []
    result = await db.execute(select(model).where(model.customer_id == customer.id).order_by(*order_by))
    return result.scalars().all()


async def get_own_or_404(db: AsyncSession, customer: Optional[Customer], model, ident: int, detail: str):
    customer = require_profile(customer)
    row = await db.get(model, ident)
    if row is None or row.customer_id != customer.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    return row


# Profile

@router.get("/profile", response_model=CustomerSchema)
async def get_profile(customer: Optional[Customer] = Depends(get_current_customer)):
    return require_profile(customer)


@router.put("/profile", response_model=CustomerSchema)
async def update_profile(
    profile: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
    current_user: User = Depends(require_customer),
):
    customer = require_profile(customer)
    update_data = update_values(Customer, profile)

    if update_data.get("email"):
        update_data["email"] = update_data["email"].lower()
        result = await db.execute(
            select(Customer.id).where(Customer.email == update_data["email"], Customer.id != customer.id)
        )
        if result.scalar_one_or_none() is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already in use"
            )

    for field, value in update_data.items():
        setattr(customer, field, value)
    if update_data.get("name"):
        current_user.name = update_data["name"]
    if update_data.get("phone"):
        current_user.phone = update_data["phone"]

    await db.commit()
    await db.refresh(customer)

    return customer


# Vehicles

@router.get("/vehicles", response_model=List[VehicleSchema])
async def get_my_vehicles(
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
):
    return await own_rows(db, customer, Vehicle, Vehicle.id)


@router.post("/vehicles", response_model=VehicleSchema, status_code=status.HTTP_201_CREATED)
async def add_my_vehicle(
    vehicle: VehicleFields,
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
):
    customer = require_profile(customer)
    await ensure_plate_available(db, vehicle.license_plate)

    db_vehicle = Vehicle(**vehicle.model_dump(), customer_id=customer.id)
    db.add(db_vehicle)
    await db.commit()
    await db.refresh(db_vehicle)

    return db_vehicle


@router.put("/vehicles/{vehicle_id}", response_model=VehicleSchema)
async def update_my_vehicle(
    vehicle_id: int,
    vehicle_update: VehicleUpdate,
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
):
    db_vehicle = await get_own_or_404(db, customer, Vehicle, vehicle_id, "Vehicle not found")

    update_data = update_values(Vehicle, vehicle_update, exclude={"customer_id"})
    if update_data.get("license_plate"):
        await ensure_plate_available(db, update_data["license_plate"], vehicle_id)

    for field, value in update_data.items():
        setattr(db_vehicle, field, value)

    await db.commit()
    await db.refresh(db_vehicle)

    return db_vehicle


@router.delete("/vehicles/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_my_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
):
    db_vehicle = await get_own_or_404(db, customer, Vehicle, vehicle_id, "Vehicle not found")

    await db.delete(db_vehicle)
    await db.commit()

    return None


# Appointments

@router.get("/appointments", response_model=List[AppointmentSchema])
async def get_my_appointments(
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
):
    appointments = await own_rows(
        db, customer, Appointment, Appointment.scheduled_date.desc(), Appointment.scheduled_time.desc()
    )
    if status_filter:
        appointments = [a for a in appointments if a.status == status_filter]
    return appointments


@router.post("/appointments", response_model=AppointmentSchema, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    booking: AppointmentBooking,
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
):
    """
    Book an appointment for one of the customer's own vehicles.
    """
    customer = require_profile(customer)
    await ensure_vehicle_belongs(db, booking.vehicle_id, customer.id, "Invalid vehicle")

    db_appointment = Appointment(
        **booking.model_dump(),
        customer_id=customer.id,
        status=AppointmentStatus.SCHEDULED,
        booking_source=BookingSource.CUSTOMER_PORTAL,
    )
    db.add(db_appointment)
    db.add(confirmation_notice(db_appointment))
    await db.commit()
    await db.refresh(db_appointment)

    logger.info("Customer %s booked appointment %s", customer.id, db_appointment.id)
    return db_appointment


@router.put("/appointments/{appointment_id}", response_model=AppointmentSchema)
async def update_my_appointment(
    appointment_id: int,
    appointment_update: AppointmentUpdate,
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
):
    db_appointment = await get_own_or_404(db, customer, Appointment, appointment_id, "Appointment not found")
    if db_appointment.status == AppointmentStatus.COMPLETED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Completed appointments cannot be updated"
        )

    update_data = update_values(Appointment, appointment_update)
    if update_data.get("vehicle_id") is not None:
        await ensure_vehicle_belongs(db, update_data["vehicle_id"], db_appointment.customer_id, "Invalid vehicle")

    for field, value in update_data.items():
        setattr(db_appointment, field, value)

    await db.commit()
    await db.refresh(db_appointment)

    return db_appointment


@router.put("/appointments/{appointment_id}/confirm", response_model=AppointmentSchema)
async def confirm_my_appointment(
    appointment_id: int,
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
):
    customer = require_profile(customer)
    result = await db.execute(
        select(Appointment).where(
            Appointment.id == appointment_id,
            Appointment.customer_id == customer.id,
            Appointment.status == AppointmentStatus.SCHEDULED,
        )
    )
    db_appointment = result.scalar_one_or_none()
    if not db_appointment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appointment not found or already confirmed"
        )

    apply_status(db_appointment, AppointmentStatus.CONFIRMED)
    await db.commit()
    await db.refresh(db_appointment)

    return db_appointment


@router.put("/appointments/{appointment_id}/cancel", response_model=AppointmentSchema)
async def cancel_my_appointment(
    appointment_id: int,
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
):
    db_appointment = await get_own_or_404(db, customer, Appointment, appointment_id, "Appointment not found")

    apply_status(db_appointment, AppointmentStatus.CANCELLED)
    await db.commit()
    await db.refresh(db_appointment)

    logger.info("Customer cancelled appointment %s", appointment_id)
    return db_appointment


# Service history

@router.get("/service-history", response_model=ServiceHistory)
async def get_my_service_history(
    search: Optional[str] = None,
    year: Optional[int] = None,
    service_type: Optional[str] = None,
    sort_by: str = "date",
    sort_order: str = "desc",
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
):
    """
    Service records with a summary of the full history.
    """
    records = await own_rows(db, customer, ServiceRecord, ServiceRecord.service_date.desc(), ServiceRecord.id.desc())

    shown = summaries.filter_service_records(records, search=search, year=year, service_type=service_type)
    shown = summaries.sort_service_records(shown, sort_by, sort_order)

    return ServiceHistory(
        records=shown,
        summary=ServiceHistorySummary(**summaries.service_history_summary(records)),
        years=summaries.service_years(records),
        service_types=summaries.service_types(records),
    )


# Invoices and payments

@router.get("/invoices", response_model=List[InvoiceSchema])
async def get_my_invoices(
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
):
    return await own_rows(db, customer, Invoice, Invoice.issue_date.desc(), Invoice.id.desc())


@router.get("/payments", response_model=PaymentOverview)
async def get_my_payments(
    search: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    year: Optional[int] = None,
    sort_by: str = "date",
    sort_order: str = "desc",
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
):
    """
    Invoices with payment figures computed over all of them.
    """
    invoices = await own_rows(db, customer, Invoice, Invoice.issue_date.desc(), Invoice.id.desc())

    shown = summaries.filter_invoices(invoices, search=search, status=status_filter, year=year)
    shown = summaries.sort_invoices(shown, sort_by, sort_order)

    return PaymentOverview(
        invoices=shown,
        summary=PaymentSummary(**summaries.payment_summary(invoices)),
        years=summaries.invoice_years(invoices),
    )


@router.post("/invoices/{invoice_id}/pay", response_model=InvoiceSchema)
async def pay_my_invoice(
    invoice_id: int,
    payment: PortalPayment,
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
    current_user: User = Depends(require_customer),
):
    """
    Pay the remaining balance of an invoice.
    """
    db_invoice = await get_own_or_404(db, customer, Invoice, invoice_id, "Invoice not found")

    reference = payment.payment_reference or f"PAY-{int(time.time() * 1000)}"
    apply_payment(
        db_invoice,
        db_invoice.balance_due,
        payment.payment_method,
        reference=reference,
        processed_by=current_user.id,
    )
    await db.commit()

    return await reload(db, Invoice, invoice_id)


# Warranties, memberships and rewards

@router.get("/warranties", response_model=List[WarrantySchema])
async def get_my_warranties(
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
):
    return await own_rows(db, customer, Warranty, Warranty.end_date, Warranty.id)


@router.get("/memberships", response_model=List[MembershipSchema])
async def get_my_memberships(
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
):
    return await own_rows(db, customer, CustomerMembership, CustomerMembership.start_date.desc())


@router.get("/rewards", response_model=Rewards)
async def get_my_rewards(
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
):
    memberships = await own_rows(db, customer, CustomerMembership, CustomerMembership.start_date.desc())
    plans = await db.execute(
        select(MembershipPlan).where(MembershipPlan.is_active.is_(True)).order_by(MembershipPlan.price)
    )

    return Rewards(
        memberships=memberships,
        summary=RewardsSummary(**summaries.rewards_summary(memberships)),
        available_plans=[PlanSchema.model_validate(plan) for plan in plans.scalars().all()],
    )


# Notifications

async def unread_count(db: AsyncSession, customer_id: int) -> int:
    return await db.scalar(
        select(func.count(Notification.id)).where(
            Notification.customer_id == customer_id, Notification.status.in_(UNREAD_STATUSES)
        )
    ) or 0


@router.get("/notifications", response_model=NotificationPage)
async def get_my_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    type: Optional[NotificationType] = None,
    status_filter: Optional[NotificationStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
):
    if customer is None:
        return NotificationPage(items=[], unread_count=0, total=0, page=page, limit=limit, pages=0)

    criteria = [Notification.customer_id == customer.id]
    if type:
        criteria.append(Notification.type == type)
    if status_filter:
        criteria.append(Notification.status == status_filter)

    total = await db.scalar(select(func.count(Notification.id)).where(*criteria)) or 0
    result = await db.execute(
        select(Notification)
        .where(*criteria)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )

    return NotificationPage(
        items=result.scalars().all(),
        unread_count=await unread_count(db, customer.id),
        total=total,
        page=page,
        limit=limit,
        pages=page_count(total, limit),
    )


@router.get("/notifications/unread-count")
async def get_my_unread_count(
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
):
    return {"unread_count": await unread_count(db, customer.id) if customer else 0}


@router.put("/notifications/read-all", response_model=MessageResponse)
async def mark_all_read(
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
):
    customer = require_profile(customer)
    result = await db.execute(
        update(Notification)
        .where(Notification.customer_id == customer.id, Notification.status.in_(UNREAD_STATUSES))
        .values(status=NotificationStatus.READ, read_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    return MessageResponse(message=f"{result.rowcount} notification(s) marked as read")


@router.put("/notifications/{notification_id}/read", response_model=NotificationSchema)
async def mark_read(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
):
    notification = await get_own_or_404(db, customer, Notification, notification_id, "Notification not found")

    notification.status = NotificationStatus.READ
    notification.read_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(notification)

    return notification


# Dashboard

@router.get("/dashboard", response_model=PortalDashboard)
async def get_my_dashboard(
    db: AsyncSession = Depends(get_db),
    customer: Optional[Customer] = Depends(get_current_customer),
):
    """
    Counts and short lists for the portal home page.
    """
    if customer is None:
        return PortalDashboard(stats=PortalCounts())

    today = date.today()
    vehicles = await own_rows(db, customer, Vehicle, Vehicle.id)
    appointments = await own_rows(
        db, customer, Appointment, Appointment.scheduled_date.desc(), Appointment.scheduled_time.desc()
    )
    services = await own_rows(db, customer, ServiceRecord, ServiceRecord.service_date.desc(), ServiceRecord.id.desc())
    invoices = await own_rows(db, customer, Invoice, Invoice.issue_date.desc(), Invoice.id.desc())

    outstanding = [inv for inv in invoices if inv.status in OUTSTANDING_STATUSES]
    upcoming = sorted(
        (a for a in appointments if a.scheduled_date >= today and a.status not in TERMINAL_STATUSES),
        key=lambda a: (a.scheduled_date, a.scheduled_time),
    )

    return PortalDashboard(
        stats=PortalCounts(
            vehicles=len(vehicles),
            appointments=len(appointments),
            services=len(services),
            invoices=len(invoices),
            outstanding_amount=round(sum(inv.balance_due for inv in outstanding), 2),
        ),
        recent_appointments=appointments[:DASHBOARD_LIST_SIZE],
        upcoming_appointments=upcoming[:DASHBOARD_LIST_SIZE],
        recent_services=services[:DASHBOARD_LIST_SIZE],
        outstanding_invoices=outstanding,
    )
