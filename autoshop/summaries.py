"""
Filtering, sorting and summary figures for the customer portal list views.

The functions work on plain objects (ORM rows in practice) so the same
rules apply whatever the data source.
"""
from collections import Counter
from datetime import date, datetime
from typing import Optional, Sequence

from autoshop.models.invoice import InvoiceStatus
from autoshop.models.membership import MembershipStatus

SORT_ASC = "asc"
SORT_DESC = "desc"

OPEN_INVOICE_EXCLUDED = (InvoiceStatus.PAID, InvoiceStatus.CANCELLED)


def _matches(term: str, *values: Optional[str]) -> bool:
    term = term.lower()
    return any(term in (value or "").lower() for value in values)


def _as_date(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    return value


# Invoices / payments

INVOICE_SORT_KEYS = {
    "date": lambda inv: inv.issue_date,
    "amount": lambda inv: inv.total,
    "status": lambda inv: inv.status.value.lower(),
    "due_date": lambda inv: inv.due_date,
}


def filter_invoices(
    invoices: Sequence,
    search: Optional[str] = None,
    status: Optional[str] = None,
    year: Optional[int] = None,
) -> list:
    result = []
    for invoice in invoices:
        if search and not _matches(search, invoice.invoice_number, invoice.service_type):
            continue
        if status and status != "all" and invoice.status.value != status:
            continue
        if year and invoice.issue_date.year != year:
            continue
        result.append(invoice)
    return result


def sort_invoices(invoices: Sequence, sort_by: str = "date", sort_order: str = SORT_DESC) -> list:
    key = INVOICE_SORT_KEYS.get(sort_by, INVOICE_SORT_KEYS["date"])
    return sorted(invoices, key=key, reverse=sort_order != SORT_ASC)


def payment_summary(invoices: Sequence) -> dict:
    """Totals shown at the top of the payments page."""
    if not invoices:
        return {
            "total_invoices": 0,
            "total_paid": 0.0,
            "total_outstanding": 0.0,
            "overdue_amount": 0.0,
            "average_invoice_amount": 0.0,
            "last_payment_date": None,
            "next_payment_due": None,
        }

    paid = [inv for inv in invoices if inv.status == InvoiceStatus.PAID]
    open_invoices = [inv for inv in invoices if inv.status not in OPEN_INVOICE_EXCLUDED]
    overdue = [inv for inv in invoices if inv.status == InvoiceStatus.OVERDUE]

    paid_dates = [inv.paid_date for inv in paid if inv.paid_date]
    due_dates = [inv.due_date for inv in open_invoices]

    return {
        "total_invoices": len(invoices),
        "total_paid": round(sum(inv.total for inv in paid), 2),
        "total_outstanding": round(sum(inv.total for inv in open_invoices), 2),
        "overdue_amount": round(sum(inv.total for inv in overdue), 2),
        "average_invoice_amount": round(sum(inv.total for inv in invoices) / len(invoices), 2),
        "last_payment_date": max(paid_dates) if paid_dates else None,
        "next_payment_due": min(due_dates) if due_dates else None,
    }


def invoice_years(invoices: Sequence) -> list[int]:
    return sorted({inv.issue_date.year for inv in invoices}, reverse=True)


# Service history

SERVICE_SORT_KEYS = {
    "date": lambda rec: rec.service_date,
    "cost": lambda rec: rec.total_cost,
    "service_type": lambda rec: rec.service_type.lower(),
}


def filter_service_records(
    records: Sequence,
    search: Optional[str] = None,
    year: Optional[int] = None,
    service_type: Optional[str] = None,
) -> list:
    result = []
    for record in records:
        if search and not _matches(
            search, record.service_type, record.description, record.vehicle_make, record.vehicle_model
        ):
            continue
        if year and record.service_date.year != year:
            continue
        if service_type and service_type != "all" and record.service_type != service_type:
            continue
        result.append(record)
    return result


def sort_service_records(records: Sequence, sort_by: str = "date", sort_order: str = SORT_DESC) -> list:
    key = SERVICE_SORT_KEYS.get(sort_by, SERVICE_SORT_KEYS["date"])
    return sorted(records, key=key, reverse=sort_order != SORT_ASC)


def service_history_summary(records: Sequence) -> dict:
    if not records:
        return {
            "total_services": 0,
            "total_spent": 0.0,
            "average_cost": 0.0,
            "last_service_date": None,
            "most_common_service": "",
        }

    total_spent = sum(rec.total_cost for rec in records)
    # most_common keeps first-seen order on ties
    most_common = Counter(rec.service_type for rec in records).most_common(1)[0][0]

    return {
        "total_services": len(records),
        "total_spent": round(total_spent, 2),
        "average_cost": round(total_spent / len(records), 2),
        "last_service_date": max(rec.service_date for rec in records),
        "most_common_service": most_common,
    }


def service_years(records: Sequence) -> list[int]:
    return sorted({rec.service_date.year for rec in records}, reverse=True)


def service_types(records: Sequence) -> list[str]:
    return sorted({rec.service_type for rec in records})


# Memberships / rewards

def rewards_summary(memberships: Sequence) -> dict:
    """Savings and benefit figures for the rewards page."""
    active = [m for m in memberships if m.status == MembershipStatus.ACTIVE]

    total_savings = 0.0
    total_benefits_used = 0
    for membership in memberships:
        discount = (membership.plan.benefits or {}).get("discount_percentage", 0)
        total_savings += membership.total_paid * discount / 100
        used = membership.benefits_used or {}
        total_benefits_used += (
            used.get("inspections", 0)
            + used.get("roadside_assistance", 0)
            + used.get("priority_bookings", 0)
        )

    renewal_dates = [m.next_billing_date for m in active]
    available_discounts = sum((m.plan.benefits or {}).get("discount_percentage", 0) for m in active)

    return {
        "total_memberships": len(memberships),
        "active_memberships": len(active),
        "total_savings": round(total_savings, 2),
        "total_benefits_used": total_benefits_used,
        "next_renewal_date": _as_date(min(renewal_dates)) if renewal_dates else None,
        "available_discounts": available_discounts,
    }
