"""Tests for the preview HTTP service."""

from fastapi.testclient import TestClient

from sales_invoice.api import app
from sales_invoice.utils import MESSAGES

client = TestClient(app)

ITEM = {"productName": "Steel bracket", "quantity": 2, "unitPrice": 100, "discount": 10,
        "discountType": "percentage", "taxRate": 18}


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_calculate_totals_intra_state():
    response = client.post("/calculate-totals", json={
        "lineItems": [ITEM], "placeOfSupply": "Maharashtra", "companyState": "Maharashtra",
    })
    assert response.status_code == 200
    body = response.json()
    assert body["subtotal"] == 200
    assert body["cgst"] == 16.2
    assert body["sgst"] == 16.2
    assert body["igst"] == 0
    assert body["totalAmount"] == 212.4
    assert body["roundOff"] == -0.4


def test_calculate_totals_defaults_company_state():
    response = client.post("/calculate-totals", json={"lineItems": [ITEM], "placeOfSupply": "Tamil Nadu"})
    assert response.json()["igst"] == 32.4


def test_calculate_line_item():
    response = client.post("/calculate-line-item", json=ITEM)
    assert response.status_code == 200
    body = response.json()
    assert body["discountAmount"] == 20
    assert body["taxableAmount"] == 180


def test_validate_invoice_reports_fields_and_rows():
    response = client.post("/validate-invoice", json={
        "invoiceDate": "2025-01-15",
        "dueDate": "2025-01-10",
        "customerName": "Acme Traders",
        "customerGSTIN": "bad",
        "placeOfSupply": "Maharashtra",
        "lineItems": [ITEM, {"productName": "", "quantity": 1, "unitPrice": 5, "taxRate": 3}],
    })
    assert response.status_code == 200
    body = response.json()
    assert body["isValid"] is False
    assert body["errors"]["dueDate"] == MESSAGES["date_range"]
    assert body["errors"]["customerGSTIN"] == MESSAGES["gstin"]
    assert "customerName" not in body["errors"]
    assert list(body["lineItemErrors"]) == ["1"]
    assert body["lineItemErrors"]["1"]["taxRate"] == MESSAGES["tax_rate"]


def test_validate_invoice_clean():
    response = client.post("/validate-invoice", json={
        "invoiceDate": "2025-01-15",
        "dueDate": "2025-02-14",
        "customerName": "Acme Traders",
        "placeOfSupply": "Maharashtra",
        "lineItems": [ITEM],
    })
    body = response.json()
    assert body["isValid"] is True
    assert body["errors"] == {}
    assert body["lineItemErrors"] == {}


def test_validate_json_batch():
    draft = {"invoiceNumber": "INV-0001", "invoiceDate": "2025-01-15", "dueDate": "2025-02-14",
             "customerName": "Acme Traders", "placeOfSupply": "Maharashtra", "lineItems": [ITEM]}
    response = client.post("/validate-json", json=[draft, draft])
    assert response.status_code == 200
    summary = response.json()["summary"]
    assert summary["total_invoices"] == 2
    assert summary["valid_invoices"] == 1
    assert summary["error_counts"] == {"invoice_number: duplicate in batch": 1}
