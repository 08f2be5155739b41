"""Data models used across calculations, validation, client, store, CLI, and API."""
from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .utils import round_half_up, parse_date


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class PaymentTerms(str, Enum):
    DUE_ON_RECEIPT = "due_on_receipt"
    NET_15 = "net_15"
    NET_30 = "net_30"
    NET_60 = "net_60"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    AMOUNT = "amount"


class TaxType(str, Enum):
    CGST_SGST = "cgst_sgst"  # intra-state
    IGST = "igst"  # inter-state


class ExportFormat(str, Enum):
    PDF = "pdf"
    EXCEL = "excel"


class WireModel(BaseModel):
    """Base for records exchanged with the invoicing API (camelCase on the wire)."""

    model_config = ConfigDict(extra="ignore", alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _coerce_date(value: Any) -> Any:
    if isinstance(value, (str, date)):
        return parse_date(value)
    return value


FlexibleDate = Annotated[Optional[date], BeforeValidator(_coerce_date)]


class LineItem(WireModel):
    id: Optional[int] = None
    product_id: Optional[int] = None
    product_name: str = ""
    description: Optional[str] = None
    hsn_code: Optional[str] = None
    quantity: float = 1
    unit: Optional[str] = None
    unit_price: float = 0
    discount: float = 0
    discount_type: DiscountType = DiscountType.PERCENTAGE
    tax_rate: float = 18
    amount: float = 0

    @classmethod
    def blank(cls) -> "LineItem":
        """Default row added by the editor."""
        return cls()


class CustomerAddress(WireModel):
    id: Optional[int] = None
    customer_id: int
    address_type: str = "billing"
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: str
    postal_code: str
    country: str = "India"
    is_default: bool = False


class Customer(WireModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    gstin: Optional[str] = None
    trn_number: Optional[str] = None
    customer_type: str = "business"
    addresses: List[CustomerAddress] = Field(default_factory=list)


class InvoiceFormData(WireModel):
    """Create payload, also used as the editable form state."""

    invoice_number: Optional[str] = None
    invoice_date: FlexibleDate = None
    due_date: FlexibleDate = None
    reference: Optional[str] = None
    branding_theme: Optional[str] = None
    customer_id: Optional[int] = None
    customer_name: str = ""
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_gstin: Optional[str] = Field(default=None, alias="customerGSTIN")
    customer_address: Optional[str] = None
    billing_address: Optional[str] = None
    shipping_address: Optional[str] = None
    payment_terms: PaymentTerms = PaymentTerms.NET_30
    place_of_supply: str = ""
    line_items: List[LineItem] = Field(default_factory=list)
    notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None


CreateInvoiceData = InvoiceFormData


class UpdateInvoiceData(WireModel):
    invoice_number: Optional[str] = None
    invoice_date: FlexibleDate = None
    due_date: FlexibleDate = None
    reference: Optional[str] = None
    branding_theme: Optional[str] = None
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_gstin: Optional[str] = Field(default=None, alias="customerGSTIN")
    customer_address: Optional[str] = None
    billing_address: Optional[str] = None
    shipping_address: Optional[str] = None
    payment_terms: Optional[PaymentTerms] = None
    place_of_supply: Optional[str] = None
    line_items: Optional[List[LineItem]] = None
    notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    status: Optional[InvoiceStatus] = None


class TaxCalculation(WireModel):
    subtotal: float = 0
    total_discount: float = 0
    taxable_amount: float = 0
    cgst: float = 0
    sgst: float = 0
    igst: float = 0
    total_tax: float = 0
    total_amount: float = 0
    round_off: float = 0

    @classmethod
    def zero(cls) -> "TaxCalculation":
        return cls()

    @property
    def tax_type(self) -> TaxType:
        return TaxType.IGST if self.igst > 0 else TaxType.CGST_SGST

    @property
    def grand_total(self) -> int:
        """Whole-currency amount payable."""
        return round_half_up(self.total_amount + self.round_off)


class LineItemCalculation(WireModel):
    amount: float
    discount_amount: float
    taxable_amount: float
    tax_amount: float
    total_amount: float


class GstBreakdown(WireModel):
    cgst: float = 0
    sgst: float = 0
    igst: float = 0
    total_tax: float = 0


class Invoice(WireModel):
    id: int
    invoice_number: str
    invoice_date: FlexibleDate = None
    due_date: FlexibleDate = None

    customer_id: Optional[int] = None
    customer_name: str = ""
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_gstin: Optional[str] = Field(default=None, alias="customerGSTIN")
    customer_address: Optional[str] = None
    billing_address: Optional[str] = None
    shipping_address: Optional[str] = None

    status: InvoiceStatus = InvoiceStatus.DRAFT
    payment_terms: PaymentTerms = PaymentTerms.NET_30
    place_of_supply: str = ""
    line_items: List[LineItem] = Field(default_factory=list)

    subtotal: float = 0
    total_discount: float = 0
    taxable_amount: float = 0
    cgst: float = 0
    sgst: float = 0
    igst: float = 0
    total_tax: float = 0
    total_amount: float = 0
    round_off: float = 0

    notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    @property
    def totals(self) -> TaxCalculation:
        return TaxCalculation(**{name: getattr(self, name) for name in TaxCalculation.model_fields})

    def with_totals(self, totals: TaxCalculation) -> "Invoice":
        """Copy of this invoice carrying the given aggregates."""
        return self.model_copy(update=totals.model_dump())

    def to_form(self) -> InvoiceFormData:
        """Editable form state seeded from this invoice."""
        fields = {name: getattr(self, name) for name in InvoiceFormData.model_fields if hasattr(self, name)}
        fields["line_items"] = [item.model_copy() for item in self.line_items]
        return InvoiceFormData(**fields)


class InvoiceFilters(WireModel):
    status: Optional[Union[InvoiceStatus, List[InvoiceStatus]]] = None
    customer_id: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    search: Optional[str] = None
    payment_terms: Optional[PaymentTerms] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None

    def to_params(self) -> Dict[str, Any]:
        """Query parameters for list/export endpoints."""
        return self.to_wire()


class InvoiceStats(WireModel):
    total_invoices: int = 0
    draft_count: int = 0
    sent_count: int = 0
    paid_count: int = 0
    overdue_count: int = 0
    total_revenue: float = 0
    outstanding_amount: float = 0


class PaginatedInvoices(WireModel):
    data: List[Invoice] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 10
    total_pages: int = 0


class _FieldErrors(WireModel):
    """One optional message per known field; absent means valid."""

    def get(self, field: str) -> Optional[str]:
        """Look up by attribute name or camelCase wire alias."""
        if field in type(self).model_fields:
            return getattr(self, field)
        for name, info in type(self).model_fields.items():
            if info.alias == field:
                return getattr(self, name)
        return None

    def is_empty(self) -> bool:
        return not self.messages()

    def messages(self) -> List[str]:
        return [msg for msg in (getattr(self, name) for name in type(self).model_fields) if msg]

    def items(self) -> List[tuple]:
        """(field name, message) for every failing field."""
        return [(name, getattr(self, name)) for name in type(self).model_fields if getattr(self, name)]


class InvoiceFormErrors(_FieldErrors):
    invoice_number: Optional[str] = None
    invoice_date: Optional[str] = None
    due_date: Optional[str] = None
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_gstin: Optional[str] = Field(default=None, alias="customerGSTIN")
    place_of_supply: Optional[str] = None
    line_items: Optional[str] = None


class LineItemErrors(_FieldErrors):
    product_name: Optional[str] = None
    quantity: Optional[str] = None
    unit_price: Optional[str] = None
    discount: Optional[str] = None
    tax_rate: Optional[str] = None


class InvoiceValidationResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    invoice_id: str
    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class ValidationSummary(BaseModel):
    model_config = ConfigDict(extra="ignore")

    total_invoices: int
    valid_invoices: int
    invalid_invoices: int
    error_counts: Dict[str, int] = Field(default_factory=dict)


class ValidationResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    summary: ValidationSummary
    results: List[InvoiceValidationResult]
