"""Display formatting for amounts, dates, identifiers, and status."""
from __future__ import annotations

import math
from datetime import date, datetime
from typing import Optional, Union

from dateutil import parser

from .schemas import InvoiceStatus
from .utils import CURRENCY_CONFIG, get_status_option, parse_date, round_to_two

DateLike = Union[str, date, datetime, None]


def _group_indian(digits: str) -> str:
    """Lakh/crore grouping: last three digits, then pairs."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_number(value: float, decimals: int = 2) -> str:
    """1234567.5 -> '12,34,567.50'."""
    rounded = round_to_two(value) if decimals == 2 else round(value, decimals)
    sign = "-" if rounded < 0 else ""
    fixed = f"{abs(rounded):.{decimals}f}"
    whole, _, fraction = fixed.partition(".")
    grouped = _group_indian(whole)
    if fraction:
        return f"{sign}{grouped}.{fraction}"
    return f"{sign}{grouped}"


def format_currency(amount: float) -> str:
    formatted = format_number(amount, CURRENCY_CONFIG["decimal_places"])  # type: ignore[arg-type]
    if formatted.startswith("-"):
        return f"-{CURRENCY_CONFIG['symbol']}{formatted[1:]}"
    return f"{CURRENCY_CONFIG['symbol']}{formatted}"


def _as_datetime(value: DateLike) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    parsed = parse_date(value)
    if parsed is None:
        return None
    try:
        return parser.isoparse(value)
    except (ValueError, TypeError, OverflowError):
        return datetime(parsed.year, parsed.month, parsed.day)


def format_date(value: DateLike) -> str:
    """DD/MM/YYYY."""
    moment = _as_datetime(value)
    return moment.strftime("%d/%m/%Y") if moment else ""


def format_date_for_input(value: DateLike) -> str:
    moment = _as_datetime(value)
    return moment.strftime("%Y-%m-%d") if moment else ""


def format_date_time(value: DateLike) -> str:
    moment = _as_datetime(value)
    return moment.strftime("%d/%m/%Y %H:%M") if moment else ""


def format_relative_date(value: DateLike, today: Optional[date] = None) -> str:
    moment = _as_datetime(value)
    if moment is None:
        return ""
    diff = (moment.date() - (today or date.today())).days
    if diff == 0:
        return "Today"
    if diff == 1:
        return "Tomorrow"
    if diff == -1:
        return "Yesterday"
    if diff > 1:
        return f"in {diff} days"
    return f"{abs(diff)} days ago"


def format_days_remaining(due_date: DateLike, today: Optional[date] = None) -> str:
    due = parse_date(due_date)  # type: ignore[arg-type]
    if due is None:
        return ""
    diff = (due - (today or date.today())).days
    if diff < 0:
        return f"Overdue by {abs(diff)} days"
    if diff == 0:
        return "Due today"
    if diff == 1:
        return "Due tomorrow"
    return f"Due in {diff} days"


def parse_display_date(text: str) -> Optional[date]:
    """Inverse of :func:`format_date`."""
    if not text:
        return None
    parts = text.split("/")
    if len(parts) != 3:
        return None
    try:
        day, month, year = (int(part) for part in parts)
        return date(year, month, day)
    except ValueError:
        return None


def format_status(status: Union[InvoiceStatus, str]) -> str:
    option = get_status_option(status)
    return option["label"] if option else str(getattr(status, "value", status))


def get_status_severity(status: Union[InvoiceStatus, str]) -> str:
    option = get_status_option(status)
    return option["severity"] if option else "secondary"


def get_status_icon(status: Union[InvoiceStatus, str]) -> str:
    option = get_status_option(status)
    return option["icon"] if option else "pi pi-file"


def format_percentage(value: float, decimals: int = 2) -> str:
    return f"{value:.{decimals}f}%"


def format_tax_rate(rate: float) -> str:
    return f"{rate:g}%"


def format_phone_number(phone: Optional[str]) -> Optional[str]:
    if not phone or len(phone) != 10:
        return phone
    return f"+91 {phone[:5]} {phone[5:]}"


def format_gstin(gstin: Optional[str]) -> Optional[str]:
    """27AAAAA0000A1Z5 -> 27-AAAAA-0000-A-1-Z-5."""
    if not gstin or len(gstin) != 15:
        return gstin
    parts = [gstin[0:2], gstin[2:7], gstin[7:11], gstin[11], gstin[12], gstin[13], gstin[14]]
    return "-".join(parts)


def truncate_text(text: Optional[str], max_length: int) -> Optional[str]:
    if not text or len(text) <= max_length:
        return text
    return f"{text[:max_length]}..."


def capitalize_first(text: Optional[str]) -> str:
    if not text:
        return ""
    return text[0].upper() + text[1:].lower()


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    index = min(int(math.floor(math.log(size, 1024))), len(units) - 1)
    return f"{round_to_two(size / 1024 ** index):g} {units[index]}"


def get_initials(name: Optional[str]) -> str:
    if not name or not name.strip():
        return ""
    parts = name.split()
    if len(parts) == 1:
        return parts[0][:2].upper()
    return (parts[0][0] + parts[-1][0]).upper()


def format_address(address: Optional[str]) -> str:
    if not address:
        return "N/A"
    return address.replace("\n", ", ")


def format_compact_number(value: float) -> str:
    if value < 1000:
        return f"{value:g}"
    if value < 1_000_000:
        return f"{value / 1000:.1f}K"
    return f"{value / 1_000_000:.1f}M"
