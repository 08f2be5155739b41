"""Monetary calculations for sales invoices: line totals, GST split, due dates.

Every function here trusts its input. Out-of-range values (negative
quantities, an amount discount larger than the line) are the validator's
concern and flow through the arithmetic untouched.
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional, Union

from .schemas import (
    DiscountType,
    GstBreakdown,
    Invoice,
    InvoiceStatus,
    LineItem,
    LineItemCalculation,
    TaxCalculation,
)
from .utils import CGST_SGST_SPLIT, parse_date, round_half_up, round_to_two

_CLOSED_STATUSES = {InvoiceStatus.PAID.value, InvoiceStatus.CANCELLED.value}


def calculate_discount(base_amount: float, discount: float, discount_type: DiscountType) -> float:
    if discount_type == DiscountType.PERCENTAGE:
        return base_amount * discount / 100
    return discount


def calculate_line_item(item: LineItem) -> LineItemCalculation:
    """Per-line figures; ``amount`` is the pre-discount base amount."""
    base_amount = item.quantity * item.unit_price
    discount_amount = calculate_discount(base_amount, item.discount, item.discount_type)
    taxable_amount = base_amount - discount_amount
    tax_amount = taxable_amount * item.tax_rate / 100
    return LineItemCalculation(
        amount=base_amount,
        discount_amount=discount_amount,
        taxable_amount=taxable_amount,
        tax_amount=tax_amount,
        total_amount=taxable_amount + tax_amount,
    )


def update_line_item_amount(item: LineItem) -> LineItem:
    """Copy of ``item`` with its cached ``amount`` refreshed."""
    calc = calculate_line_item(item)
    return item.model_copy(update={"amount": round_to_two(calc.total_amount)})


def calculate_invoice_totals(line_items: Iterable[LineItem], is_inter_state: bool = False) -> TaxCalculation:
    subtotal = 0.0
    total_discount = 0.0
    taxable_amount = 0.0
    total_tax = 0.0

    for item in line_items:
        calc = calculate_line_item(item)
        subtotal += calc.amount
        total_discount += calc.discount_amount
        taxable_amount += calc.taxable_amount
        total_tax += calc.tax_amount

    cgst = sgst = igst = 0.0
    if is_inter_state:
        igst = total_tax
    else:
        # no cent reconciliation between the halves
        cgst = total_tax * CGST_SGST_SPLIT
        sgst = total_tax * CGST_SGST_SPLIT

    total_amount = taxable_amount + total_tax
    # round_off must come from the unrounded total
    round_off = round_half_up(total_amount) - total_amount

    return TaxCalculation(
        subtotal=round_to_two(subtotal),
        total_discount=round_to_two(total_discount),
        taxable_amount=round_to_two(taxable_amount),
        cgst=round_to_two(cgst),
        sgst=round_to_two(sgst),
        igst=round_to_two(igst),
        total_tax=round_to_two(total_tax),
        total_amount=round_to_two(total_amount),
        round_off=round_to_two(round_off),
    )


def calculate_gst_breakdown(amount: float, tax_rate: float, is_inter_state: bool = False) -> GstBreakdown:
    """GST split for a single ad-hoc amount (previews and summaries)."""
    tax_amount = amount * tax_rate / 100
    if is_inter_state:
        return GstBreakdown(cgst=0, sgst=0, igst=round_to_two(tax_amount), total_tax=round_to_two(tax_amount))
    return GstBreakdown(
        cgst=round_to_two(tax_amount * CGST_SGST_SPLIT),
        sgst=round_to_two(tax_amount * CGST_SGST_SPLIT),
        igst=0,
        total_tax=round_to_two(tax_amount),
    )


def is_inter_state(place_of_supply: Optional[str], company_state: Optional[str]) -> bool:
    """Plain state-name comparison; blank on either side counts as intra-state."""
    if not place_of_supply or not place_of_supply.strip() or not company_state:
        return False
    return place_of_supply.strip() != company_state


def recompute_invoice(invoice: Invoice, company_state: str) -> Invoice:
    """Fresh aggregates for ``invoice`` from its line items and place of supply."""
    items = [update_line_item_amount(item) for item in invoice.line_items]
    totals = calculate_invoice_totals(items, is_inter_state(invoice.place_of_supply, company_state))
    return invoice.with_totals(totals).model_copy(update={"line_items": items})


def calculate_due_date(invoice_date: date, payment_days: int) -> date:
    return invoice_date + timedelta(days=payment_days)


def is_invoice_overdue(
    due_date: Union[str, date, None], status: Union[InvoiceStatus, str], today: Optional[date] = None
) -> bool:
    """True when an open invoice's due date is strictly before today."""
    if getattr(status, "value", status) in _CLOSED_STATUSES:
        return False
    due = parse_date(due_date)
    if due is None:
        return False
    return due < (today or date.today())


def days_overdue(
    due_date: Union[str, date, None], status: Union[InvoiceStatus, str], today: Optional[date] = None
) -> int:
    if not is_invoice_overdue(due_date, status, today):
        return 0
    return ((today or date.today()) - parse_date(due_date)).days  # type: ignore[operator]


def calculate_percentage(value: float, total: float) -> float:
    if total == 0:
        return 0
    return round_to_two(value / total * 100)
