"""Async client for the sales invoice REST API.

Every endpoint answers with an envelope ``{success, data?, message?}``. The
client unwraps it into typed records and turns any failure (transport
error, non-2xx status, ``success: false``, unreadable body) into a single
:class:`ApiError`. Binary endpoints (PDF, export) return raw bytes.

The HTTP transport is injected; timeouts belong to it, and nothing here
retries.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from .config import Settings
from .schemas import (
    ExportFormat,
    Invoice,
    InvoiceFilters,
    InvoiceFormData,
    InvoiceStats,
    PaginatedInvoices,
    UpdateInvoiceData,
)

logger = logging.getLogger(__name__)

RESOURCE = "/sales-invoices"


class ApiError(Exception):
    """Normalized failure of any API call."""

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        code: str = "UNKNOWN_ERROR",
        status: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.details = details or {}

    @property
    def is_not_found(self) -> bool:
        return self.status == 404

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "code": self.code, "status": self.status, "details": self.details}


def _json_or_empty(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _parse(shape: Any, data: Any, code: str) -> Any:
    try:
        return TypeAdapter(shape).validate_python(data)
    except ValidationError as exc:
        logger.error("Malformed sales invoice payload (%s): %s", code, exc)
        raise ApiError(
            "Malformed response from invoice API", code=code, details={"errors": exc.errors(include_url=False)}
        ) from exc


class SalesInvoiceClient:
    def __init__(self, http: httpx.AsyncClient, base_url: str = "") -> None:
        self._http = http
        self.base_url = base_url.rstrip("/")

    async def __aenter__(self) -> "SalesInvoiceClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # Public API
    async def fetch_invoices(self, filters: Optional[InvoiceFilters] = None) -> List[Invoice]:
        data = await self._call(
            "GET", RESOURCE,
            params=filters.to_params() if filters else None,
            fallback="Failed to fetch invoices", code="FETCH_INVOICES_ERROR",
        )
        return _parse(List[Invoice], data, code="FETCH_INVOICES_ERROR")

    async def fetch_paginated_invoices(
        self, page: int = 1, page_size: int = 10, filters: Optional[InvoiceFilters] = None
    ) -> PaginatedInvoices:
        params: Dict[str, Any] = {"page": page, "pageSize": page_size}
        if filters:
            params.update(filters.to_params())
        data = await self._call(
            "GET", f"{RESOURCE}/paginated", params=params,
            fallback="Failed to fetch paginated invoices", code="FETCH_PAGINATED_INVOICES_ERROR",
        )
        return _parse(PaginatedInvoices, data, code="FETCH_PAGINATED_INVOICES_ERROR")

    async def get_invoice_by_id(self, invoice_id: int) -> Invoice:
        data = await self._call(
            "GET", f"{RESOURCE}/{invoice_id}",
            fallback="Invoice not found", code="GET_INVOICE_ERROR", default_status=404,
        )
        return _parse(Invoice, data, code="GET_INVOICE_ERROR")

    async def create_invoice(self, payload: InvoiceFormData) -> Invoice:
        data = await self._call(
            "POST", RESOURCE, json_body=payload.to_wire(),
            fallback="Failed to create invoice", code="CREATE_INVOICE_ERROR",
        )
        return _parse(Invoice, data, code="CREATE_INVOICE_ERROR")

    async def update_invoice(self, invoice_id: int, payload: UpdateInvoiceData) -> Invoice:
        data = await self._call(
            "PUT", f"{RESOURCE}/{invoice_id}", json_body=payload.to_wire(),
            fallback="Failed to update invoice", code="UPDATE_INVOICE_ERROR",
        )
        return _parse(Invoice, data, code="UPDATE_INVOICE_ERROR")

    async def delete_invoice(self, invoice_id: int) -> None:
        await self._call(
            "DELETE", f"{RESOURCE}/{invoice_id}",
            fallback="Failed to delete invoice", code="DELETE_INVOICE_ERROR", require_data=False,
        )

    async def search_invoices(self, query: str) -> List[Invoice]:
        data = await self._call(
            "GET", f"{RESOURCE}/search", params={"q": query},
            fallback="Failed to search invoices", code="SEARCH_INVOICES_ERROR",
        )
        return _parse(List[Invoice], data, code="SEARCH_INVOICES_ERROR")

    async def get_invoice_stats(self) -> InvoiceStats:
        data = await self._call(
            "GET", f"{RESOURCE}/stats",
            fallback="Failed to fetch statistics", code="GET_STATS_ERROR",
        )
        return _parse(InvoiceStats, data, code="GET_STATS_ERROR")

    async def send_invoice(self, invoice_id: int, email: Optional[str] = None) -> None:
        await self._call(
            "POST", f"{RESOURCE}/{invoice_id}/send", json_body={"email": email} if email else {},
            fallback="Failed to send invoice", code="SEND_INVOICE_ERROR", require_data=False,
        )

    async def generate_invoice_number(self) -> str:
        data = await self._call(
            "GET", f"{RESOURCE}/generate-number",
            fallback="Failed to generate invoice number", code="GENERATE_NUMBER_ERROR",
        )
        number = data.get("invoiceNumber") if isinstance(data, dict) else None
        if not number:
            raise ApiError("Failed to generate invoice number", code="GENERATE_NUMBER_ERROR")
        return number

    async def validate_invoice_number(self, invoice_number: str, exclude_id: Optional[int] = None) -> bool:
        """Server-side uniqueness check; any failure counts as 'not valid'."""
        params: Dict[str, Any] = {"invoiceNumber": invoice_number}
        if exclude_id is not None:
            params["excludeId"] = exclude_id
        try:
            data = await self._call(
                "GET", f"{RESOURCE}/validate-number", params=params,
                fallback="Failed to validate invoice number", code="VALIDATE_NUMBER_ERROR",
            )
        except ApiError as err:
            logger.error("Invoice number validation failed: %s", err.message)
            return False
        return bool(data.get("isValid")) if isinstance(data, dict) else False

    async def export_invoices(self, fmt: ExportFormat, filters: Optional[InvoiceFilters] = None) -> bytes:
        params: Dict[str, Any] = {"format": ExportFormat(fmt).value}
        if filters:
            params.update(filters.to_params())
        response = await self._send(
            "GET", f"{RESOURCE}/export", params=params,
            fallback="Failed to export invoices", code="EXPORT_INVOICES_ERROR",
        )
        return response.content

    async def download_invoice_pdf(self, invoice_id: int) -> bytes:
        response = await self._send(
            "GET", f"{RESOURCE}/{invoice_id}/pdf",
            fallback="Failed to download invoice PDF", code="DOWNLOAD_PDF_ERROR",
        )
        return response.content

    # Internals
    async def _send(
        self,
        method: str,
        path: str,
        *,
        fallback: str,
        code: str,
        default_status: int = 500,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        logger.info("Sales invoice API %s %s", method, path)
        try:
            response = await self._http.request(method, url, params=params, json=json_body)
        except httpx.RequestError as exc:
            logger.error("Sales invoice API transport error: %s %s -> %s", method, path, exc)
            raise ApiError(str(exc) or fallback, code=code, status=default_status) from exc

        if response.is_error:
            body = _json_or_empty(response)
            logger.error("Sales invoice API HTTP error: %s %s -> %d", method, path, response.status_code)
            raise ApiError(
                body.get("message") or fallback,
                code=body.get("code") or code,
                status=response.status_code,
                details=body.get("details") or {},
            )
        return response

    async def _call(
        self,
        method: str,
        path: str,
        *,
        fallback: str,
        code: str,
        default_status: int = 500,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        require_data: bool = True,
    ) -> Any:
        """Send a request and unwrap its envelope."""
        response = await self._send(
            method, path, fallback=fallback, code=code, default_status=default_status,
            params=params, json_body=json_body,
        )
        body = _json_or_empty(response)
        if not body.get("success"):
            logger.error("Sales invoice API rejected %s %s: %s", method, path, body.get("message"))
            raise ApiError(body.get("message") or fallback, code=code, status=default_status)
        data = body.get("data")
        if require_data and data is None:
            raise ApiError(body.get("message") or fallback, code=code, status=default_status)
        return data


def create_client(settings: Settings) -> SalesInvoiceClient:
    """Client bound to the configured API, for the application's composition root."""
    http = httpx.AsyncClient(base_url=settings.API_BASE_URL, timeout=settings.REQUEST_TIMEOUT)
    return SalesInvoiceClient(http)
