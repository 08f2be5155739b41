"""Constants and small helpers shared across the sales invoice toolkit."""
from __future__ import annotations

import math
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, List, Optional, Union

from dateutil import parser

# Tax
TAX_RATES = (0, 5, 12, 18, 28)
CGST_SGST_SPLIT = 0.5
DEFAULT_TAX_RATE = 18

# Payment terms -> days
PAYMENT_TERMS_OPTIONS: List[Dict[str, object]] = [
    {"label": "Due on Receipt", "value": "due_on_receipt", "days": 0},
    {"label": "Net 15 Days", "value": "net_15", "days": 15},
    {"label": "Net 30 Days", "value": "net_30", "days": 30},
    {"label": "Net 60 Days", "value": "net_60", "days": 60},
]
DEFAULT_PAYMENT_TERMS = "net_30"
DEFAULT_INVOICE_PREFIX = "INV"

STATUS_OPTIONS: List[Dict[str, str]] = [
    {"label": "Draft", "value": "draft", "severity": "secondary", "icon": "pi pi-file-edit"},
    {"label": "Sent", "value": "sent", "severity": "info", "icon": "pi pi-send"},
    {"label": "Paid", "value": "paid", "severity": "success", "icon": "pi pi-check-circle"},
    {"label": "Overdue", "value": "overdue", "severity": "warning", "icon": "pi pi-exclamation-triangle"},
    {"label": "Cancelled", "value": "cancelled", "severity": "danger", "icon": "pi pi-times-circle"},
]

# Patterns
INVOICE_NUMBER_PATTERN = re.compile(r"^INV-\d{4,}$")
GSTIN_PATTERN = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[6-9]\d{9}$")

# Limits and messages
CUSTOMER_NAME_LENGTH = (2, 100)
PRODUCT_NAME_LENGTH = (2, 200)
QUANTITY_RANGE = (0.01, 999999)
UNIT_PRICE_RANGE = (0, 9999999)
DISCOUNT_PERCENT_RANGE = (0, 100)

MESSAGES = {
    "invoice_number": "Invoice number must be in format INV-XXXX",
    "customer_name": "Customer name is required (2-100 characters)",
    "email": "Invalid email format",
    "phone": "Phone number must be 10 digits starting with 6-9",
    "gstin": "Invalid GSTIN format",
    "date": "Date is required",
    "date_range": "Due date must be after invoice date",
    "place_of_supply": "Place of supply is required",
    "line_items": "At least one line item is required",
    "line_item_errors": "Please fix errors in line items",
    "product_name": "Product name is required (2-200 characters)",
    "quantity": "Quantity must be between 0.01 and 999999",
    "unit_price": "Unit price must be between 0 and 9999999",
    "discount": "Discount must be between 0 and 100",
    "discount_negative": "Discount cannot be negative",
    "discount_exceeds_base": "Discount amount cannot exceed base amount",
    "tax_rate": "Invalid tax rate",
}

CURRENCY_CONFIG = {"symbol": "₹", "code": "INR", "locale": "en-IN", "decimal_places": 2}

INDIAN_STATES: List[Dict[str, str]] = [
    {"name": "Andhra Pradesh", "code": "37"},
    {"name": "Arunachal Pradesh", "code": "12"},
    {"name": "Assam", "code": "18"},
    {"name": "Bihar", "code": "10"},
    {"name": "Chhattisgarh", "code": "22"},
    {"name": "Goa", "code": "30"},
    {"name": "Gujarat", "code": "24"},
    {"name": "Haryana", "code": "06"},
    {"name": "Himachal Pradesh", "code": "02"},
    {"name": "Jharkhand", "code": "20"},
    {"name": "Karnataka", "code": "29"},
    {"name": "Kerala", "code": "32"},
    {"name": "Madhya Pradesh", "code": "23"},
    {"name": "Maharashtra", "code": "27"},
    {"name": "Manipur", "code": "14"},
    {"name": "Meghalaya", "code": "17"},
    {"name": "Mizoram", "code": "15"},
    {"name": "Nagaland", "code": "13"},
    {"name": "Odisha", "code": "21"},
    {"name": "Punjab", "code": "03"},
    {"name": "Rajasthan", "code": "08"},
    {"name": "Sikkim", "code": "11"},
    {"name": "Tamil Nadu", "code": "33"},
    {"name": "Telangana", "code": "36"},
    {"name": "Tripura", "code": "16"},
    {"name": "Uttar Pradesh", "code": "09"},
    {"name": "Uttarakhand", "code": "05"},
    {"name": "West Bengal", "code": "19"},
    {"name": "Andaman and Nicobar Islands", "code": "35"},
    {"name": "Chandigarh", "code": "04"},
    {"name": "Dadra and Nagar Haveli and Daman and Diu", "code": "26"},
    {"name": "Delhi", "code": "07"},
    {"name": "Jammu and Kashmir", "code": "01"},
    {"name": "Ladakh", "code": "38"},
    {"name": "Lakshadweep", "code": "31"},
    {"name": "Puducherry", "code": "34"},
]

_TWO_PLACES = Decimal("0.01")


def payment_terms_days(terms: object) -> int:
    """Number of days granted by a payment-terms value; 0 when unknown."""
    value = getattr(terms, "value", terms)
    for option in PAYMENT_TERMS_OPTIONS:
        if option["value"] == value:
            return int(option["days"])  # type: ignore[arg-type]
    return 0


def get_status_option(status: object) -> Optional[Dict[str, str]]:
    value = getattr(status, "value", status)
    for option in STATUS_OPTIONS:
        if option["value"] == value:
            return option
    return None


def state_code_for(state_name: str) -> Optional[str]:
    """GST state code for a state or union territory name."""
    wanted = (state_name or "").strip().lower()
    for state in INDIAN_STATES:
        if state["name"].lower() == wanted:
            return state["code"]
    return None


def parse_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """Parse a date string into a date object; returns None on failure.

    ISO strings are read year-first; anything else (e.g. 15/01/2025) is read
    day-first, matching how invoices are written in India.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return parser.isoparse(value).date()
    except (ValueError, TypeError, OverflowError):
        try:
            return parser.parse(value, dayfirst=True).date()
        except (ValueError, TypeError, OverflowError):
            return None


def round_to_two(value: float) -> float:
    """Round a money value to 2 decimals, halves away from zero."""
    try:
        return float(Decimal(repr(float(value))).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))
    except (InvalidOperation, ValueError):
        return float(value)


def round_half_up(value: float) -> int:
    """Round to a whole number with halves going towards +infinity."""
    return int(math.floor(value + 0.5))
