"""Shared test fixtures for the sales invoice test suite."""

import json
from typing import Any, Callable, Dict, List, Tuple

import httpx
import pytest

from sales_invoice.client import SalesInvoiceClient
from sales_invoice.schemas import InvoiceFormData, LineItem


class FakeInvoiceApi:
    """Routes requests by (method, path) to canned responses and records them."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def on(self, method: str, path: str, status: int = 200, body: Any = None, content: bytes = None) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            if content is not None:
                return httpx.Response(status, content=content)
            return httpx.Response(status, json=body)

        self.routes[(method, path)] = respond

    def fail(self, method: str, path: str, exc: Exception) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            raise exc

        self.routes[(method, path)] = respond

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.replace("/api", "", 1)
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"success": False, "message": f"No route {path}"})
        return route(request)

    def client(self) -> SalesInvoiceClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(self.handler), base_url="http://test/api")
        return SalesInvoiceClient(http)

    def last_json(self) -> Any:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def fake_api() -> FakeInvoiceApi:
    return FakeInvoiceApi()


@pytest.fixture
def sample_item() -> LineItem:
    """2 x 100 with 10% off at 18% GST."""
    return LineItem(
        product_name="Steel bracket",
        hsn_code="7326",
        quantity=2,
        unit_price=100,
        discount=10,
        discount_type="percentage",
        tax_rate=18,
    )


@pytest.fixture
def sample_form(sample_item) -> InvoiceFormData:
    return InvoiceFormData(
        invoice_number="INV-0001",
        invoice_date="2025-01-15",
        due_date="2025-02-14",
        customer_id=7,
        customer_name="Acme Traders",
        customer_email="accounts@acme.in",
        customer_phone="9876543210",
        customer_gstin="27AAAAA0000A1Z5",
        payment_terms="net_30",
        place_of_supply="Maharashtra",
        line_items=[sample_item],
    )


def invoice_payload(**overrides: Any) -> Dict[str, Any]:
    """Invoice as the API serves it (camelCase)."""
    payload = {
        "id": 1,
        "invoiceNumber": "INV-0001",
        "invoiceDate": "2025-01-15",
        "dueDate": "2025-02-14",
        "customerId": 7,
        "customerName": "Acme Traders",
        "customerGSTIN": "27AAAAA0000A1Z5",
        "status": "draft",
        "paymentTerms": "net_30",
        "placeOfSupply": "Maharashtra",
        "lineItems": [
            {
                "productName": "Steel bracket",
                "quantity": 2,
                "unitPrice": 100,
                "discount": 10,
                "discountType": "percentage",
                "taxRate": 18,
                "amount": 212.4,
            }
        ],
        "subtotal": 200,
        "totalDiscount": 20,
        "taxableAmount": 180,
        "cgst": 16.2,
        "sgst": 16.2,
        "igst": 0,
        "totalTax": 32.4,
        "totalAmount": 212.4,
        "roundOff": -0.4,
        "createdAt": "2025-01-15T10:00:00Z",
        "updatedAt": "2025-01-15T10:00:00Z",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_invoice_payload() -> Callable[..., Dict[str, Any]]:
    return invoice_payload
