"""
Invoice routes for the admin dashboard.
"""
import logging
from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.auth import require_any_admin
from autoshop.billing import add_months, default_due_date, invoice_number_candidate, invoice_totals, line_total, money
from autoshop.config import get_settings
from autoshop.database import get_db, reload, update_values
from autoshop.errors import BusinessRuleError, ConflictError
from autoshop.models.customer import Customer
from autoshop.models.invoice import Invoice, InvoiceItem, InvoicePayment, InvoiceStatus, PaymentMethod
from autoshop.models.user import User
from autoshop.models.vehicle import Vehicle
from autoshop.pagination import paginate
from autoshop.schemas.common import Page
from autoshop.schemas.invoice import (
    Invoice as InvoiceSchema,
    InvoiceCreate,
    InvoiceMonthly,
    InvoiceOverview,
    InvoiceStats,
    InvoiceStatusBreakdown,
    InvoiceUpdate,
    OverdueResult,
    PaymentCreate,
)

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/invoices", tags=["invoices"])

MAX_NUMBER_ATTEMPTS = 50
OVERDUE_CANDIDATES = (InvoiceStatus.SENT, InvoiceStatus.PENDING)


async def generate_invoice_number(db: AsyncSession, issue_date: date) -> str:
    for _ in range(MAX_NUMBER_ATTEMPTS):
        candidate = invoice_number_candidate(issue_date)
        result = await db.execute(select(Invoice.id).where(Invoice.invoice_number == candidate))
        if result.scalar_one_or_none() is None:
            return candidate
    raise ConflictError("Could not allocate an invoice number for this day")


def build_items(items) -> list[InvoiceItem]:
    return [
        InvoiceItem(
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total=line_total(item.quantity, item.unit_price),
        )
        for item in items
    ]


def apply_payment(
    invoice: Invoice,
    amount: float,
    method: PaymentMethod,
    reference: Optional[str] = None,
    notes: Optional[str] = None,
    processed_by: Optional[int] = None,
) -> InvoicePayment:
    """Record a payment and move the invoice to paid or overdue as needed."""
    if invoice.status == InvoiceStatus.PAID:
        raise BusinessRuleError("Invoice is already paid")
    if invoice.status == InvoiceStatus.CANCELLED:
        raise BusinessRuleError("Cannot record a payment on a cancelled invoice")

    payment = InvoicePayment(
        amount=money(amount),
        payment_method=method,
        reference=reference,
        notes=notes,
        paid_at=datetime.now(timezone.utc),
        processed_by=processed_by,
    )
    invoice.payments.append(payment)
    invoice.total_paid = money(invoice.total_paid + amount)

    if invoice.total_paid >= invoice.total:
        invoice.status = InvoiceStatus.PAID
        invoice.paid_date = datetime.now(timezone.utc)
        invoice.payment_method = method
        invoice.payment_reference = reference
    elif invoice.due_date < date.today():
        invoice.status = InvoiceStatus.OVERDUE

    logger.info(
        "Payment of %.2f recorded on invoice %s (%s)",
        amount, invoice.invoice_number, invoice.status.value,
    )
    return payment


async def get_invoice_or_404(db: AsyncSession, invoice_id: int) -> Invoice:
    invoice = await db.get(Invoice, invoice_id)
    if not invoice:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invoice not found"
        )
    return invoice


async def ensure_invoice_vehicle(db: AsyncSession, vehicle_id: int, customer_id: int) -> None:
    result = await db.execute(
        select(Vehicle.id).where(Vehicle.id == vehicle_id, Vehicle.customer_id == customer_id)
    )
    if result.scalar_one_or_none() is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Vehicle does not belong to this customer"
        )


@router.get("/", response_model=Page[InvoiceSchema])
async def get_invoices(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[InvoiceStatus] = Query(None, alias="status"),
    customer_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Get invoices, newest first.
    """
    query = select(Invoice)

    if search:
        pattern = f"%{search}%"
        query = query.join(Customer, Invoice.customer_id == Customer.id).where(
            or_(Invoice.invoice_number.ilike(pattern), Customer.name.ilike(pattern))
        )
    if status_filter:
        query = query.where(Invoice.status == status_filter)
    if customer_id is not None:
        query = query.where(Invoice.customer_id == customer_id)
    if date_from:
        query = query.where(Invoice.issue_date >= date_from)
    if date_to:
        query = query.where(Invoice.issue_date <= date_to)

    query = query.order_by(Invoice.issue_date.desc(), Invoice.id.desc())
    return await paginate(db, query, page, limit)


@router.get("/stats/overview", response_model=InvoiceStats)
async def get_invoice_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Totals, per-status figures and the last twelve months.
    """
    result = await db.execute(select(Invoice))
    invoices = result.scalars().all()

    total_amount = sum(inv.total for inv in invoices)
    outstanding = sum(
        inv.balance_due for inv in invoices
        if inv.status not in (InvoiceStatus.PAID, InvoiceStatus.CANCELLED)
    )
    overview = InvoiceOverview(
        total_invoices=len(invoices),
        total_amount=money(total_amount),
        total_paid=money(sum(inv.total_paid for inv in invoices)),
        total_outstanding=money(outstanding),
        avg_invoice_value=money(total_amount / len(invoices)) if invoices else 0.0,
    )

    by_status = []
    for invoice_status in InvoiceStatus:
        matching = [inv for inv in invoices if inv.status == invoice_status]
        if matching:
            by_status.append(InvoiceStatusBreakdown(
                status=invoice_status,
                count=len(matching),
                total_amount=money(sum(inv.total for inv in matching)),
            ))

    window_start = add_months(date.today().replace(day=1), -11)
    months = defaultdict(list)
    for inv in invoices:
        if inv.issue_date >= window_start:
            months[(inv.issue_date.year, inv.issue_date.month)].append(inv)
    monthly = [
        InvoiceMonthly(
            year=year,
            month=month,
            count=len(group),
            total_amount=money(sum(inv.total for inv in group)),
            total_paid=money(sum(inv.total_paid for inv in group)),
        )
        for (year, month), group in sorted(months.items())
    ]

    return InvoiceStats(overview=overview, by_status=by_status, monthly=monthly)


@router.post("/mark-overdue", response_model=OverdueResult)
async def mark_overdue_invoices(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Mark every sent or pending invoice past its due date as overdue.
    """
    result = await db.execute(
        select(Invoice).where(Invoice.status.in_(OVERDUE_CANDIDATES), Invoice.due_date < date.today())
    )
    invoices = result.scalars().all()
    for invoice in invoices:
        invoice.status = InvoiceStatus.OVERDUE
    await db.commit()

    logger.info("Marked %d invoices overdue", len(invoices))
    return OverdueResult(marked=len(invoices), message=f"{len(invoices)} invoice(s) marked as overdue")


@router.get("/{invoice_id}", response_model=InvoiceSchema)
async def get_invoice(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    return await get_invoice_or_404(db, invoice_id)


@router.post("/", response_model=InvoiceSchema, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    invoice: InvoiceCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Create an invoice; totals are computed from the line items.
    """
    if await db.get(Customer, invoice.customer_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )
    if invoice.vehicle_id is not None:
        await ensure_invoice_vehicle(db, invoice.vehicle_id, invoice.customer_id)

    issue_date = invoice.issue_date or date.today()
    due_date = invoice.due_date or default_due_date(issue_date, settings.invoice_due_days)
    if due_date < issue_date:
        raise BusinessRuleError("Due date cannot be before the issue date")

    totals = invoice_totals(
        ((item.quantity, item.unit_price) for item in invoice.items),
        tax=invoice.tax,
        discount=invoice.discount,
        tax_rate=settings.default_tax_rate,
    )

    db_invoice = Invoice(
        invoice_number=await generate_invoice_number(db, issue_date),
        customer_id=invoice.customer_id,
        vehicle_id=invoice.vehicle_id,
        appointment_id=invoice.appointment_id,
        service_type=invoice.service_type,
        issue_date=issue_date,
        due_date=due_date,
        status=invoice.status,
        notes=invoice.notes,
        items=build_items(invoice.items),
        payments=[],
        total_paid=0.0,
        **totals,
    )
    if invoice.terms:
        db_invoice.terms = invoice.terms
    db.add(db_invoice)
    await db.commit()

    logger.info("Invoice %s created for customer %s", db_invoice.invoice_number, invoice.customer_id)
    return await reload(db, Invoice, db_invoice.id)


@router.put("/{invoice_id}", response_model=InvoiceSchema)
async def update_invoice(
    invoice_id: int,
    invoice_update: InvoiceUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Update an invoice; totals are recomputed when items, tax or discount change.
    """
    db_invoice = await get_invoice_or_404(db, invoice_id)
    if db_invoice.status == InvoiceStatus.PAID:
        raise BusinessRuleError("Paid invoices cannot be edited")

    update_data = update_values(Invoice, invoice_update)
    items = update_data.pop("items", None)
    tax = update_data.pop("tax", None)
    discount = update_data.pop("discount", None)

    if update_data.get("vehicle_id") is not None:
        await ensure_invoice_vehicle(db, update_data["vehicle_id"], db_invoice.customer_id)

    for field, value in update_data.items():
        setattr(db_invoice, field, value)

    if db_invoice.due_date < db_invoice.issue_date:
        raise BusinessRuleError("Due date cannot be before the issue date")

    if items is not None or tax is not None or discount is not None:
        if items is not None:
            db_invoice.items = build_items(invoice_update.items)
        totals = invoice_totals(
            ((item.quantity, item.unit_price) for item in db_invoice.items),
            tax=tax if tax is not None else db_invoice.tax,
            discount=discount if discount is not None else db_invoice.discount,
        )
        for field, value in totals.items():
            setattr(db_invoice, field, value)

    await db.commit()

    return await reload(db, Invoice, invoice_id)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    db_invoice = await get_invoice_or_404(db, invoice_id)
    if db_invoice.status == InvoiceStatus.PAID:
        raise BusinessRuleError("Paid invoices cannot be deleted")

    await db.delete(db_invoice)
    await db.commit()

    return None


@router.post("/{invoice_id}/payments", response_model=InvoiceSchema)
async def record_payment(
    invoice_id: int,
    payment: PaymentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Record a payment against an invoice.
    """
    db_invoice = await get_invoice_or_404(db, invoice_id)
    apply_payment(
        db_invoice,
        payment.amount,
        payment.payment_method,
        reference=payment.reference,
        notes=payment.notes,
        processed_by=current_user.id,
    )
    await db.commit()

    return await reload(db, Invoice, invoice_id)


@router.post("/{invoice_id}/send", response_model=InvoiceSchema)
async def send_invoice(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Mark a draft invoice as sent to the customer.
    """
    db_invoice = await get_invoice_or_404(db, invoice_id)
    if db_invoice.status != InvoiceStatus.DRAFT:
        raise BusinessRuleError("Only draft invoices can be sent")

    db_invoice.status = InvoiceStatus.SENT
    await db.commit()

    logger.info("Invoice %s sent", db_invoice.invoice_number)
    return await reload(db, Invoice, invoice_id)
