"""Tests for display formatting."""

from datetime import date, datetime

import pytest

from sales_invoice.formatters import (
    capitalize_first,
    format_address,
    format_compact_number,
    format_currency,
    format_date,
    format_date_for_input,
    format_date_time,
    format_days_remaining,
    format_file_size,
    format_gstin,
    format_number,
    format_percentage,
    format_phone_number,
    format_relative_date,
    format_status,
    format_tax_rate,
    get_initials,
    get_status_icon,
    get_status_severity,
    parse_display_date,
    truncate_text,
)
from sales_invoice.schemas import InvoiceStatus


class TestAmounts:
    @pytest.mark.parametrize(
        "value,expected",
        [(0, "₹0.00"), (999.5, "₹999.50"), (123456.78, "₹1,23,456.78"), (12345678.9, "₹1,23,45,678.90")],
    )
    def test_currency_uses_lakh_grouping(self, value, expected):
        assert format_currency(value) == expected

    def test_negative_currency(self):
        assert format_currency(-0.4) == "-₹0.40"
        assert format_currency(-1500) == "-₹1,500.00"

    def test_tiny_negative_rounds_to_unsigned_zero(self):
        assert format_currency(-0.001) == "₹0.00"

    def test_number(self):
        assert format_number(1234567.5) == "12,34,567.50"
        assert format_number(1234.567, 0) == "1,235"

    def test_percentages(self):
        assert format_percentage(12.5) == "12.50%"
        assert format_tax_rate(18) == "18%"
        assert format_tax_rate(0) == "0%"

    def test_compact_and_size(self):
        assert format_compact_number(950) == "950"
        assert format_compact_number(1500) == "1.5K"
        assert format_compact_number(2_500_000) == "2.5M"
        assert format_file_size(0) == "0 Bytes"
        assert format_file_size(1536) == "1.5 KB"


class TestDates:
    def test_display_formats(self):
        assert format_date(date(2025, 1, 5)) == "05/01/2025"
        assert format_date("2025-01-05") == "05/01/2025"
        assert format_date(None) == ""
        assert format_date_for_input(datetime(2025, 1, 5, 13, 30)) == "2025-01-05"
        assert format_date_time("2025-01-05T13:30:00") == "05/01/2025 13:30"

    def test_parse_display_date(self):
        assert parse_display_date("05/01/2025") == date(2025, 1, 5)
        assert parse_display_date("31/02/2025") is None
        assert parse_display_date("2025-01-05") is None

    @pytest.mark.parametrize(
        "value,expected",
        [
            (date(2025, 3, 10), "Today"),
            (date(2025, 3, 11), "Tomorrow"),
            (date(2025, 3, 9), "Yesterday"),
            (date(2025, 3, 15), "in 5 days"),
            (date(2025, 3, 1), "9 days ago"),
        ],
    )
    def test_relative_date(self, value, expected):
        assert format_relative_date(value, today=date(2025, 3, 10)) == expected

    @pytest.mark.parametrize(
        "due,expected",
        [
            ("2025-03-07", "Overdue by 3 days"),
            ("2025-03-10", "Due today"),
            ("2025-03-11", "Due tomorrow"),
            ("2025-03-20", "Due in 10 days"),
            ("", ""),
        ],
    )
    def test_days_remaining(self, due, expected):
        assert format_days_remaining(due, today=date(2025, 3, 10)) == expected


class TestIdentifiersAndStatus:
    def test_phone_number(self):
        assert format_phone_number("9876543210") == "+91 98765 43210"
        assert format_phone_number("12345") == "12345"

    def test_gstin(self):
        assert format_gstin("27AAAAA0000A1Z5") == "27-AAAAA-0000-A-1-Z-5"
        assert format_gstin("SHORT") == "SHORT"

    def test_status(self):
        assert format_status(InvoiceStatus.OVERDUE) == "Overdue"
        assert format_status("paid") == "Paid"
        assert format_status("archived") == "archived"
        assert get_status_severity("paid") == "success"
        assert get_status_severity("archived") == "secondary"
        assert get_status_icon(InvoiceStatus.SENT) == "pi pi-send"

    def test_text_helpers(self):
        assert truncate_text("Steel bracket", 5) == "Steel..."
        assert truncate_text("Bolt", 5) == "Bolt"
        assert capitalize_first("hELLO") == "Hello"
        assert get_initials("Acme Trading Company") == "AC"
        assert get_initials("acme") == "AC"
        assert format_address(None) == "N/A"
        assert format_address("12 MG Road\nPune") == "12 MG Road, Pune"
