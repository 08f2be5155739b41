"""FastAPI application exposing invoice calculation and validation previews."""
from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import Field

from .calculations import calculate_invoice_totals, calculate_line_item, is_inter_state
from .config import get_settings
from .schemas import (
    InvoiceFormData,
    InvoiceFormErrors,
    LineItem,
    LineItemCalculation,
    LineItemErrors,
    TaxCalculation,
    ValidationResponse,
    WireModel,
)
from .validator import InvoiceValidator, validate_invoice_form, validate_line_item

app = FastAPI(title="Sales Invoice Preview Service", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class TotalsRequest(WireModel):
    line_items: List[LineItem] = Field(default_factory=list)
    place_of_supply: str = ""
    company_state: Optional[str] = None


class FormValidationResponse(WireModel):
    is_valid: bool
    errors: InvoiceFormErrors
    line_item_errors: Dict[int, LineItemErrors] = Field(default_factory=dict)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/calculate-totals", response_model=TaxCalculation, response_model_by_alias=True)
def calculate_totals(request: TotalsRequest):
    company_state = request.company_state or get_settings().COMPANY_STATE
    return calculate_invoice_totals(request.line_items, is_inter_state(request.place_of_supply, company_state))


@app.post("/calculate-line-item", response_model=LineItemCalculation, response_model_by_alias=True)
def calculate_single_line(item: LineItem):
    return calculate_line_item(item)


@app.post("/validate-invoice", response_model=FormValidationResponse, response_model_exclude_none=True)
def validate_invoice(form: InvoiceFormData):
    errors = validate_invoice_form(form)
    rows = {index: validate_line_item(item) for index, item in enumerate(form.line_items)}
    rows = {index: row for index, row in rows.items() if not row.is_empty()}
    return FormValidationResponse(is_valid=errors.is_empty() and not rows, errors=errors, line_item_errors=rows)


@app.post("/validate-json", response_model=ValidationResponse)
def validate_json(forms: List[InvoiceFormData]):
    validator = InvoiceValidator()
    return validator.validate_invoices(forms)
