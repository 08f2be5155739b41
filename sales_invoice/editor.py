"""Live editing helpers binding the calculation and validation engines to a form."""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from .calculations import (
    calculate_due_date,
    calculate_invoice_totals,
    calculate_line_item,
    is_inter_state,
    update_line_item_amount,
)
from .schemas import (
    Invoice,
    InvoiceFormData,
    InvoiceFormErrors,
    LineItem,
    LineItemCalculation,
    LineItemErrors,
    TaxCalculation,
    UpdateInvoiceData,
)
from .store import SalesInvoiceStore
from .utils import MESSAGES, payment_terms_days
from .validator import (
    validate_customer_name,
    validate_date,
    validate_date_range,
    validate_email,
    validate_gstin,
    validate_invoice_form,
    validate_invoice_number,
    validate_line_item,
    validate_line_items,
    validate_phone,
    validate_place_of_supply,
)

logger = logging.getLogger(__name__)


def _field_name(record: type, field: str) -> Optional[str]:
    """Attribute name for ``field`` given as attribute name or wire alias."""
    if field in record.model_fields:  # type: ignore[attr-defined]
        return field
    for name, info in record.model_fields.items():  # type: ignore[attr-defined]
        if info.alias == field:
            return name
    return None


class InvoiceCalculator:
    """Keeps each row's ``amount`` and the invoice totals in step with edits."""

    def __init__(
        self,
        line_items: Optional[List[LineItem]] = None,
        place_of_supply: str = "",
        company_state: str = "",
    ) -> None:
        self.line_items: List[LineItem] = [update_line_item_amount(item) for item in line_items or []]
        self.place_of_supply = place_of_supply
        self.company_state = company_state
        self.totals = TaxCalculation.zero()
        self.calculate_totals()

    @property
    def is_inter_state(self) -> bool:
        return is_inter_state(self.place_of_supply, self.company_state)

    @property
    def grand_total(self) -> int:
        return self.totals.grand_total

    @property
    def amount_to_pay(self) -> int:
        return self.grand_total

    def calculate_totals(self) -> TaxCalculation:
        self.totals = calculate_invoice_totals(self.line_items, self.is_inter_state)
        return self.totals

    def _in_range(self, index: int) -> bool:
        return 0 <= index < len(self.line_items)

    def add_line_item(self, item: Optional[LineItem] = None) -> LineItem:
        row = update_line_item_amount(item or LineItem.blank())
        self.line_items.append(row)
        self.calculate_totals()
        return row

    def remove_line_item(self, index: int) -> None:
        if self._in_range(index):
            del self.line_items[index]
            self.calculate_totals()

    def update_line_item(self, index: int, **changes: Any) -> Optional[LineItem]:
        """Apply field changes to a row, then recompute the row and the totals."""
        if not self._in_range(index):
            return None
        edited = LineItem.model_validate({**self.line_items[index].model_dump(), **changes})
        self.line_items[index] = update_line_item_amount(edited)
        self.calculate_totals()
        return self.line_items[index]

    def set_line_items(self, line_items: List[LineItem]) -> None:
        self.line_items = [update_line_item_amount(item) for item in line_items]
        self.calculate_totals()

    def set_place_of_supply(self, place_of_supply: str) -> None:
        self.place_of_supply = place_of_supply
        self.calculate_totals()

    def get_line_item_details(self, index: int) -> Optional[LineItemCalculation]:
        if not self._in_range(index):
            return None
        return calculate_line_item(self.line_items[index])


class InvoiceValidationState:
    """Form-level and per-row error records with lookup by field name."""

    def __init__(self) -> None:
        self.errors = InvoiceFormErrors()
        self.line_item_errors: Dict[int, LineItemErrors] = {}

    @property
    def has_errors(self) -> bool:
        return not self.errors.is_empty()

    @property
    def has_line_item_errors(self) -> bool:
        return any(not errs.is_empty() for errs in self.line_item_errors.values())

    @property
    def error_messages(self) -> List[str]:
        return self.errors.messages()

    def validate_form(self, data: InvoiceFormData) -> bool:
        self.errors = validate_invoice_form(data)
        self.line_item_errors = {}
        for index, item in enumerate(data.line_items):
            item_errors = validate_line_item(item)
            if not item_errors.is_empty():
                self.line_item_errors[index] = item_errors
        return not self.has_errors and not self.has_line_item_errors

    def validate_field(self, field: str, value: Any, extra: Optional[Dict[str, Any]] = None) -> Optional[str]:
        """Check one form field and record the outcome.

        ``date_range`` is a pseudo-field: ``extra`` must carry both dates and
        the result lands on ``due_date``.
        """
        if field == "date_range":
            error = None
            if extra and extra.get("invoice_date") and extra.get("due_date"):
                error = validate_date_range(extra["invoice_date"], extra["due_date"])
            self._record("due_date", error)
            return error

        name = _field_name(InvoiceFormErrors, field)
        checks = {
            "invoice_number": validate_invoice_number,
            "customer_name": validate_customer_name,
            "customer_email": validate_email,
            "customer_phone": validate_phone,
            "customer_gstin": validate_gstin,
            "invoice_date": validate_date,
            "due_date": validate_date,
            "place_of_supply": validate_place_of_supply,
            "line_items": validate_line_items,
        }
        check = checks.get(name or "")
        error = check(value) if check else None
        if name:
            self._record(name, error)
        return error

    def _record(self, name: str, error: Optional[str]) -> None:
        setattr(self.errors, name, error)

    def validate_line_item_at(self, index: int, item: LineItem) -> bool:
        item_errors = validate_line_item(item)
        if item_errors.is_empty():
            self.line_item_errors.pop(index, None)
            return True
        self.line_item_errors[index] = item_errors
        return False

    def get_field_error(self, field: str) -> Optional[str]:
        return self.errors.get(field)

    def get_line_item_error(self, index: int, field: str) -> Optional[str]:
        row = self.line_item_errors.get(index)
        return row.get(field) if row else None

    def has_field_error(self, field: str) -> bool:
        return bool(self.get_field_error(field))

    def has_line_item_error(self, index: int, field: Optional[str] = None) -> bool:
        if field:
            return bool(self.get_line_item_error(index, field))
        row = self.line_item_errors.get(index)
        return row is not None and not row.is_empty()

    def set_error(self, field: str, message: str) -> None:
        name = _field_name(InvoiceFormErrors, field)
        if name:
            self._record(name, message)

    def set_line_item_error(self, index: int, field: str, message: str) -> None:
        name = _field_name(LineItemErrors, field)
        if name:
            row = self.line_item_errors.setdefault(index, LineItemErrors())
            setattr(row, name, message)

    def clear_field_error(self, field: str) -> None:
        name = _field_name(InvoiceFormErrors, field)
        if name:
            self._record(name, None)

    def clear_line_item_error(self, index: int, field: Optional[str] = None) -> None:
        row = self.line_item_errors.get(index)
        if row is None:
            return
        name = _field_name(LineItemErrors, field) if field else None
        if name:
            setattr(row, name, None)
        if not name or row.is_empty():
            del self.line_item_errors[index]

    def remove_line_item_errors(self, index: int) -> None:
        """Drop a removed row's errors and move later rows up one place."""
        self.line_item_errors = {
            (key - 1 if key > index else key): errs
            for key, errs in self.line_item_errors.items()
            if key != index
        }

    def clear_errors(self) -> None:
        self.errors = InvoiceFormErrors()
        self.line_item_errors = {}


class InvoiceEditor:
    """Working copy of one invoice during editing.

    Edits stay local until :meth:`save`, which validates and then writes back
    through the store (create for a new invoice, update for an existing one).
    """

    def __init__(
        self,
        store: SalesInvoiceStore,
        company_state: str,
        invoice: Optional[Invoice] = None,
        form: Optional[InvoiceFormData] = None,
    ) -> None:
        self.store = store
        self.invoice_id = invoice.id if invoice else None
        self.form = form or (invoice.to_form() if invoice else InvoiceFormData())
        self.calculator = InvoiceCalculator(self.form.line_items, self.form.place_of_supply, company_state)
        self.validation = InvoiceValidationState()
        self._sync_items()

    @property
    def totals(self) -> TaxCalculation:
        return self.calculator.totals

    @property
    def is_new(self) -> bool:
        return self.invoice_id is None

    def _sync_items(self) -> None:
        self.form.line_items = list(self.calculator.line_items)

    def add_line_item(self, item: Optional[LineItem] = None) -> LineItem:
        row = self.calculator.add_line_item(item)
        self._sync_items()
        return row

    def remove_line_item(self, index: int) -> None:
        if not 0 <= index < len(self.calculator.line_items):
            return
        self.calculator.remove_line_item(index)
        self.validation.remove_line_item_errors(index)
        self._sync_items()

    def update_line_item(self, index: int, **changes: Any) -> Optional[LineItem]:
        row = self.calculator.update_line_item(index, **changes)
        self._sync_items()
        if row is not None:
            self.validation.validate_line_item_at(index, row)
        return row

    def set_field(self, field: str, value: Any) -> Optional[str]:
        """Set a form field and validate it on the spot."""
        name = _field_name(InvoiceFormData, field)
        if name is None:
            raise AttributeError(f"Unknown invoice field: {field}")
        self.form = InvoiceFormData.model_validate({**self.form.model_dump(), name: value})
        if name == "place_of_supply":
            self.calculator.set_place_of_supply(self.form.place_of_supply)
        if name == "line_items":
            self.calculator.set_line_items(self.form.line_items)
            self._sync_items()
            self.validation.line_item_errors = {}
        if name in ("invoice_date", "payment_terms") and self.form.invoice_date:
            self.form.due_date = self.due_date_for_terms()
        return self.validation.validate_field(name, getattr(self.form, name))

    def due_date_for_terms(self) -> Optional[date]:
        if self.form.invoice_date is None:
            return None
        return calculate_due_date(self.form.invoice_date, payment_terms_days(self.form.payment_terms))

    def validate(self) -> bool:
        return self.validation.validate_form(self.form)

    async def save(self) -> Optional[Invoice]:
        """Validate and persist; returns None when the form has errors."""
        if not self.validate():
            logger.info("Invoice form rejected: %s", "; ".join(self.validation.error_messages) or MESSAGES["line_item_errors"])
            return None
        if self.is_new:
            saved = await self.store.create_invoice(self.form)
        else:
            payload = UpdateInvoiceData.model_validate(self.form.model_dump())
            saved = await self.store.update_invoice(self.invoice_id, payload)  # type: ignore[arg-type]
        self.invoice_id = saved.id
        return saved
