"""
Invoice arithmetic and billing-cycle date rules.
"""
import calendar
import random
from datetime import date, timedelta
from typing import Iterable, Optional

from autoshop.models.membership import BillingCycle

CYCLE_MONTHS = {
    BillingCycle.MONTHLY: 1,
    BillingCycle.QUARTERLY: 3,
    BillingCycle.YEARLY: 12,
}


def money(value: float) -> float:
    return round(value, 2)


def line_total(quantity: float, unit_price: float) -> float:
    return money(quantity * unit_price)


def invoice_totals(
    items: Iterable[tuple[float, float]],
    tax: Optional[float] = None,
    discount: float = 0.0,
    tax_rate: float = 0.0,
) -> dict:
    """Compute subtotal, tax and total from (quantity, unit_price) pairs.

    When ``tax`` is not given it is derived from ``tax_rate``. The total
    never drops below zero.
    """
    subtotal = money(sum(line_total(q, p) for q, p in items))
    if tax is None:
        tax = money(subtotal * tax_rate)
    total = money(max(0.0, subtotal + tax - discount))
    return {"subtotal": subtotal, "tax": money(tax), "discount": money(discount), "total": total}


def default_due_date(issue_date: date, days: int = 30) -> date:
    return issue_date + timedelta(days=days)


def invoice_number_candidate(today: Optional[date] = None) -> str:
    """INV-YYYYMMDD-NNN; callers retry until the number is unused."""
    today = today or date.today()
    return f"INV-{today:%Y%m%d}-{random.randint(0, 999):03d}"


def add_months(start: date, months: int) -> date:
    """Add calendar months, clamping the day to the end of the target month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def next_billing_date(start: date, cycle: BillingCycle) -> date:
    return add_months(start, CYCLE_MONTHS[cycle])
