"""Validation engine: field rules, per-row and whole-form error records, batch reports."""
from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Any, Iterable, List, Optional, Union

from .schemas import (
    DiscountType,
    InvoiceFormData,
    InvoiceFormErrors,
    InvoiceValidationResult,
    LineItem,
    LineItemErrors,
    ValidationResponse,
    ValidationSummary,
)
from .utils import (
    CUSTOMER_NAME_LENGTH,
    DISCOUNT_PERCENT_RANGE,
    EMAIL_PATTERN,
    GSTIN_PATTERN,
    INVOICE_NUMBER_PATTERN,
    MESSAGES,
    PHONE_PATTERN,
    PRODUCT_NAME_LENGTH,
    QUANTITY_RANGE,
    TAX_RATES,
    UNIT_PRICE_RANGE,
    parse_date,
)


def _blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def validate_invoice_number(invoice_number: Optional[str]) -> Optional[str]:
    if _blank(invoice_number) or not INVOICE_NUMBER_PATTERN.fullmatch(invoice_number):  # type: ignore[arg-type]
        return MESSAGES["invoice_number"]
    return None


def validate_customer_name(name: Optional[str]) -> Optional[str]:
    low, high = CUSTOMER_NAME_LENGTH
    if _blank(name) or not low <= len(name) <= high:  # type: ignore[arg-type]
        return MESSAGES["customer_name"]
    return None


def validate_email(email: Optional[str]) -> Optional[str]:
    if _blank(email):
        return None
    if not EMAIL_PATTERN.fullmatch(email):  # type: ignore[arg-type]
        return MESSAGES["email"]
    return None


def validate_phone(phone: Optional[str]) -> Optional[str]:
    if _blank(phone):
        return None
    if not PHONE_PATTERN.fullmatch(phone):  # type: ignore[arg-type]
        return MESSAGES["phone"]
    return None


def validate_gstin(gstin: Optional[str]) -> Optional[str]:
    if _blank(gstin):
        return None
    if not GSTIN_PATTERN.fullmatch(gstin):  # type: ignore[arg-type]
        return MESSAGES["gstin"]
    return None


def validate_date(value: Union[str, date, None]) -> Optional[str]:
    if value is None or value == "":
        return MESSAGES["date"]
    return None


def validate_date_range(invoice_date: Union[str, date], due_date: Union[str, date]) -> Optional[str]:
    invoice_day = parse_date(invoice_date)
    due_day = parse_date(due_date)
    if invoice_day and due_day and due_day < invoice_day:
        return MESSAGES["date_range"]
    return None


def validate_place_of_supply(place_of_supply: Optional[str]) -> Optional[str]:
    if _blank(place_of_supply):
        return MESSAGES["place_of_supply"]
    return None


def validate_product_name(name: Optional[str]) -> Optional[str]:
    low, high = PRODUCT_NAME_LENGTH
    if _blank(name) or not low <= len(name) <= high:  # type: ignore[arg-type]
        return MESSAGES["product_name"]
    return None


def validate_quantity(quantity: float) -> Optional[str]:
    low, high = QUANTITY_RANGE
    if not low <= quantity <= high:
        return MESSAGES["quantity"]
    return None


def validate_unit_price(price: float) -> Optional[str]:
    low, high = UNIT_PRICE_RANGE
    if not low <= price <= high:
        return MESSAGES["unit_price"]
    return None


def validate_discount(discount: float, discount_type: DiscountType, base_amount: float) -> Optional[str]:
    if discount < 0:
        return MESSAGES["discount_negative"]
    if discount_type == DiscountType.PERCENTAGE and discount > DISCOUNT_PERCENT_RANGE[1]:
        return MESSAGES["discount"]
    if discount_type == DiscountType.AMOUNT and discount > base_amount:
        return MESSAGES["discount_exceeds_base"]
    return None


def validate_tax_rate(tax_rate: float) -> Optional[str]:
    if tax_rate not in TAX_RATES:
        return MESSAGES["tax_rate"]
    return None


def validate_line_item(item: LineItem) -> LineItemErrors:
    return LineItemErrors(
        product_name=validate_product_name(item.product_name),
        quantity=validate_quantity(item.quantity),
        unit_price=validate_unit_price(item.unit_price),
        discount=validate_discount(item.discount, item.discount_type, item.quantity * item.unit_price),
        tax_rate=validate_tax_rate(item.tax_rate),
    )


def validate_line_items(items: Optional[List[LineItem]]) -> Optional[str]:
    if not items:
        return MESSAGES["line_items"]
    for item in items:
        if not validate_line_item(item).is_empty():
            return MESSAGES["line_item_errors"]
    return None


def validate_invoice_form(data: InvoiceFormData) -> InvoiceFormErrors:
    """Every form-level rule in one record; a field left as None is valid.

    The invoice number is optional on create (the server issues one), so it is
    only checked once the form carries a value.
    """
    errors = InvoiceFormErrors()

    if data.invoice_number is not None:
        errors.invoice_number = validate_invoice_number(data.invoice_number)

    errors.invoice_date = validate_date(data.invoice_date)
    errors.due_date = validate_date(data.due_date)
    if errors.invoice_date is None and errors.due_date is None:
        errors.due_date = validate_date_range(data.invoice_date, data.due_date)  # type: ignore[arg-type]

    errors.customer_name = validate_customer_name(data.customer_name)
    errors.customer_email = validate_email(data.customer_email)
    errors.customer_phone = validate_phone(data.customer_phone)
    errors.customer_gstin = validate_gstin(data.customer_gstin)
    errors.place_of_supply = validate_place_of_supply(data.place_of_supply)
    errors.line_items = validate_line_items(data.line_items)
    return errors


def can_submit(data: InvoiceFormData) -> bool:
    """Submission is allowed only when the form and every row are clean."""
    if not validate_invoice_form(data).is_empty():
        return False
    return all(validate_line_item(item).is_empty() for item in data.line_items)


def has_form_errors(errors: InvoiceFormErrors) -> bool:
    return not errors.is_empty()


def get_error_messages(errors: InvoiceFormErrors) -> List[str]:
    return errors.messages()


def validate_required(value: Any, field_name: str) -> Optional[str]:
    if value is None or value == "":
        return f"{field_name} is required"
    return None


def validate_length(value: str, low: int, high: int, field_name: str) -> Optional[str]:
    if not low <= len(value) <= high:
        return f"{field_name} must be between {low} and {high} characters"
    return None


def validate_range(value: float, low: float, high: float, field_name: str) -> Optional[str]:
    if not low <= value <= high:
        return f"{field_name} must be between {low} and {high}"
    return None


class InvoiceValidator:
    """Validate many invoice drafts at once and summarise the outcome."""

    def validate_invoices(self, forms: Iterable[InvoiceFormData]) -> ValidationResponse:
        seen_numbers: set[str] = set()
        results: List[InvoiceValidationResult] = []
        error_counter: Counter[str] = Counter()

        for position, form in enumerate(forms, start=1):
            errors: list[str] = []
            warnings: list[str] = []

            if form.invoice_number:
                if form.invoice_number in seen_numbers:
                    errors.append("invoice_number: duplicate in batch")
                else:
                    seen_numbers.add(form.invoice_number)
            else:
                warnings.append("invoice_number: will be generated by the server")

            errors.extend(f"{field}: {message}" for field, message in validate_invoice_form(form).items())
            for row, item in enumerate(form.line_items, start=1):
                errors.extend(
                    f"line_items[{row}].{field}: {message}" for field, message in validate_line_item(item).items()
                )

            result = InvoiceValidationResult(
                invoice_id=form.invoice_number or f"<draft {position}>",
                is_valid=len(errors) == 0,
                errors=errors,
                warnings=warnings,
            )
            results.append(result)
            error_counter.update(errors)

        summary = ValidationSummary(
            total_invoices=len(results),
            valid_invoices=sum(1 for r in results if r.is_valid),
            invalid_invoices=sum(1 for r in results if not r.is_valid),
            error_counts=dict(error_counter),
        )
        return ValidationResponse(summary=summary, results=results)
