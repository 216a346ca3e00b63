"""
Pydantic schemas for Invoice.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import date, datetime
from typing import Optional
from autoshop.models.invoice import InvoiceStatus, PaymentMethod


def reject_paid(value: Optional[InvoiceStatus]) -> Optional[InvoiceStatus]:
    """Paid is reached by recording payments, never set directly."""
    if value == InvoiceStatus.PAID:
        raise ValueError("Invoices are marked paid by recording payments")
    return value


class InvoiceItemIn(BaseModel):
    description: str
    quantity: float = Field(gt=0)
    unit_price: float = Field(ge=0)


class InvoiceItem(InvoiceItemIn):
    id: int
    total: float

    model_config = ConfigDict(from_attributes=True)


class InvoiceCreate(BaseModel):
    customer_id: int
    vehicle_id: Optional[int] = None
    appointment_id: Optional[int] = None
    service_type: str
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    items: list[InvoiceItemIn] = Field(min_length=1)
    tax: Optional[float] = Field(default=None, ge=0)
    discount: float = Field(default=0.0, ge=0)
    status: InvoiceStatus = InvoiceStatus.DRAFT
    terms: Optional[str] = None
    notes: Optional[str] = None

    status_not_paid = field_validator("status")(reject_paid)


class InvoiceUpdate(BaseModel):
    vehicle_id: Optional[int] = None
    service_type: Optional[str] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    items: Optional[list[InvoiceItemIn]] = Field(default=None, min_length=1)
    tax: Optional[float] = Field(default=None, ge=0)
    discount: Optional[float] = Field(default=None, ge=0)
    status: Optional[InvoiceStatus] = None
    terms: Optional[str] = None
    notes: Optional[str] = None

    status_not_paid = field_validator("status")(reject_paid)


class PaymentCreate(BaseModel):
    amount: float = Field(gt=0)
    payment_method: PaymentMethod
    reference: Optional[str] = None
    notes: Optional[str] = None


class PortalPayment(BaseModel):
    """Customer pays the outstanding balance of an invoice."""
    payment_method: PaymentMethod = PaymentMethod.ONLINE
    payment_reference: Optional[str] = None


class Payment(BaseModel):
    id: int
    amount: float
    payment_method: PaymentMethod
    reference: Optional[str] = None
    notes: Optional[str] = None
    paid_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Invoice(BaseModel):
    id: int
    invoice_number: str
    customer_id: int
    vehicle_id: Optional[int] = None
    appointment_id: Optional[int] = None
    service_type: str
    issue_date: date
    due_date: date
    items: list[InvoiceItem]
    payments: list[Payment] = []
    subtotal: float
    tax: float
    discount: float
    total: float
    total_paid: float
    balance_due: float
    days_overdue: int
    status: InvoiceStatus
    payment_method: Optional[PaymentMethod] = None
    payment_reference: Optional[str] = None
    paid_date: Optional[datetime] = None
    terms: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PaymentSummary(BaseModel):
    total_invoices: int = 0
    total_paid: float = 0.0
    total_outstanding: float = 0.0
    overdue_amount: float = 0.0
    average_invoice_amount: float = 0.0
    last_payment_date: Optional[datetime] = None
    next_payment_due: Optional[date] = None


class PaymentOverview(BaseModel):
    invoices: list[Invoice]
    summary: PaymentSummary
    years: list[int]


class InvoiceStatusBreakdown(BaseModel):
    status: InvoiceStatus
    count: int
    total_amount: float


class InvoiceMonthly(BaseModel):
    year: int
    month: int
    count: int
    total_amount: float
    total_paid: float


class InvoiceOverview(BaseModel):
    total_invoices: int
    total_amount: float
    total_paid: float
    total_outstanding: float
    avg_invoice_value: float


class InvoiceStats(BaseModel):
    overview: InvoiceOverview
    by_status: list[InvoiceStatusBreakdown]
    monthly: list[InvoiceMonthly]


class OverdueResult(BaseModel):
    marked: int
    message: str
