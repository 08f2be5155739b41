"""In-memory invoice state orchestrating the API client.

A :class:`SalesInvoiceStore` is built once by the application and passed to
whoever needs it. It owns the invoice list and the current invoice; callers
read them but only the store's methods change them.

Mutating operations share one contract: raise the loading flag and clear the
error, call the API, apply the server's answer locally, drop the loading
flag. On failure the error message is kept, loading is dropped, the local
list is left as it was and the :class:`ApiError` is raised again.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from .calculations import is_invoice_overdue
from .client import ApiError, SalesInvoiceClient
from .schemas import (
    ExportFormat,
    Invoice,
    InvoiceFilters,
    InvoiceFormData,
    InvoiceStats,
    InvoiceStatus,
    PaginatedInvoices,
    UpdateInvoiceData,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


class SalesInvoiceStore:
    def __init__(self, client: SalesInvoiceClient) -> None:
        self.client = client
        self.reset()

    def reset(self) -> None:
        self.invoices: List[Invoice] = []
        self.current_invoice: Optional[Invoice] = None
        self.is_loading = False
        self.loading_message = ""
        self.error: Optional[str] = None
        self.filters = InvoiceFilters()
        self.stats: Optional[InvoiceStats] = None
        self.current_page = 0
        self.page_size = DEFAULT_PAGE_SIZE
        self.total_records = 0

    # Derived views
    @property
    def has_error(self) -> bool:
        return bool(self.error)

    @property
    def has_invoices(self) -> bool:
        return len(self.invoices) > 0

    @property
    def total_invoices(self) -> int:
        return len(self.invoices)

    def _with_status(self, status: InvoiceStatus) -> List[Invoice]:
        return [inv for inv in self.invoices if inv.status == status]

    @property
    def draft_invoices(self) -> List[Invoice]:
        return self._with_status(InvoiceStatus.DRAFT)

    @property
    def sent_invoices(self) -> List[Invoice]:
        return self._with_status(InvoiceStatus.SENT)

    @property
    def paid_invoices(self) -> List[Invoice]:
        return self._with_status(InvoiceStatus.PAID)

    @property
    def overdue_invoices(self) -> List[Invoice]:
        return self._with_status(InvoiceStatus.OVERDUE)

    @property
    def past_due_invoices(self) -> List[Invoice]:
        """Open invoices whose due date has passed, whatever their stored status."""
        return [inv for inv in self.invoices if is_invoice_overdue(inv.due_date, inv.status)]

    @property
    def total_revenue(self) -> float:
        return sum(inv.total_amount for inv in self.invoices)

    @property
    def outstanding_amount(self) -> float:
        return sum(
            inv.total_amount
            for inv in self.invoices
            if inv.status in (InvoiceStatus.SENT, InvoiceStatus.OVERDUE)
        )

    # Loading and error flags
    def set_loading(self, loading: bool, message: str = "") -> None:
        self.is_loading = loading
        self.loading_message = message
        if loading:
            self.error = None

    def set_error(self, message: str) -> None:
        self.error = message
        self.is_loading = False
        self.loading_message = ""

    def clear_error(self) -> None:
        self.error = None

    def _fail(self, err: ApiError, fallback: str) -> None:
        self.set_error(err.message or fallback)

    # Invoice operations
    async def fetch_invoices(self, filters: Optional[InvoiceFilters] = None) -> List[Invoice]:
        self.set_loading(True, "Loading invoices...")
        wanted = filters if filters is not None else self.filters
        try:
            data = await self.client.fetch_invoices(wanted)
        except ApiError as err:
            self._fail(err, "Failed to fetch invoices")
            raise
        finally:
            self.set_loading(False)
        self.filters = wanted
        self.invoices = data
        self.total_records = len(data)
        return data

    async def fetch_paginated_invoices(
        self, page: Optional[int] = None, page_size: Optional[int] = None
    ) -> PaginatedInvoices:
        if page is not None or page_size is not None:
            self.set_pagination(page if page is not None else self.current_page, page_size or self.page_size)
        self.set_loading(True, "Loading invoices...")
        try:
            # pages are zero-based locally, one-based on the server
            result = await self.client.fetch_paginated_invoices(self.current_page + 1, self.page_size, self.filters)
        except ApiError as err:
            self._fail(err, "Failed to fetch invoices")
            raise
        finally:
            self.set_loading(False)
        self.invoices = result.data
        self.total_records = result.total
        return result

    async def fetch_invoice_by_id(self, invoice_id: int) -> Invoice:
        self.set_loading(True, "Loading invoice...")
        try:
            invoice = await self.client.get_invoice_by_id(invoice_id)
        except ApiError as err:
            self._fail(err, "Failed to fetch invoice")
            raise
        finally:
            self.set_loading(False)
        self.current_invoice = invoice
        return invoice

    async def create_invoice(self, payload: InvoiceFormData) -> Invoice:
        self.set_loading(True, "Creating invoice...")
        try:
            invoice = await self.client.create_invoice(payload)
        except ApiError as err:
            self._fail(err, "Failed to create invoice")
            raise
        finally:
            self.set_loading(False)
        self.invoices.insert(0, invoice)
        self.current_invoice = invoice
        self.total_records += 1
        return invoice

    async def update_invoice(self, invoice_id: int, payload: UpdateInvoiceData) -> Invoice:
        self.set_loading(True, "Updating invoice...")
        try:
            invoice = await self.client.update_invoice(invoice_id, payload)
        except ApiError as err:
            self._fail(err, "Failed to update invoice")
            raise
        finally:
            self.set_loading(False)
        # last write wins
        for index, existing in enumerate(self.invoices):
            if existing.id == invoice_id:
                self.invoices[index] = invoice
                break
        if self.current_invoice is not None and self.current_invoice.id == invoice_id:
            self.current_invoice = invoice
        return invoice

    async def delete_invoice(self, invoice_id: int) -> None:
        self.set_loading(True, "Deleting invoice...")
        try:
            await self.client.delete_invoice(invoice_id)
        except ApiError as err:
            self._fail(err, "Failed to delete invoice")
            raise
        finally:
            self.set_loading(False)
        remaining = [inv for inv in self.invoices if inv.id != invoice_id]
        if len(remaining) != len(self.invoices):
            self.invoices = remaining
            self.total_records -= 1
        if self.current_invoice is not None and self.current_invoice.id == invoice_id:
            self.current_invoice = None

    async def search_invoices(self, query: str) -> List[Invoice]:
        self.set_loading(True, "Searching invoices...")
        try:
            results = await self.client.search_invoices(query)
        except ApiError as err:
            self._fail(err, "Failed to search invoices")
            raise
        finally:
            self.set_loading(False)
        self.invoices = results
        self.total_records = len(results)
        return results

    async def send_invoice(self, invoice_id: int, email: Optional[str] = None) -> None:
        self.set_loading(True, "Sending invoice...")
        try:
            await self.client.send_invoice(invoice_id, email)
        except ApiError as err:
            self._fail(err, "Failed to send invoice")
            raise
        finally:
            self.set_loading(False)
        sent = {"status": InvoiceStatus.SENT}
        self.invoices = [inv.model_copy(update=sent) if inv.id == invoice_id else inv for inv in self.invoices]
        if self.current_invoice is not None and self.current_invoice.id == invoice_id:
            self.current_invoice = self.current_invoice.model_copy(update=sent)

    async def export_invoices(self, fmt: ExportFormat, filters: Optional[InvoiceFilters] = None) -> bytes:
        self.set_loading(True, "Exporting invoices...")
        try:
            return await self.client.export_invoices(fmt, filters or self.filters)
        except ApiError as err:
            self._fail(err, "Failed to export invoices")
            raise
        finally:
            self.set_loading(False)

    async def download_invoice_pdf(self, invoice_id: int) -> bytes:
        self.set_loading(True, "Downloading invoice...")
        try:
            return await self.client.download_invoice_pdf(invoice_id)
        except ApiError as err:
            self._fail(err, "Failed to download invoice PDF")
            raise
        finally:
            self.set_loading(False)

    async def fetch_stats(self) -> Optional[InvoiceStats]:
        """Dashboard figures; a failure is logged and yields None."""
        try:
            self.stats = await self.client.get_invoice_stats()
        except ApiError as err:
            logger.warning("Failed to fetch invoice statistics: %s", err.message)
            return None
        return self.stats

    async def generate_invoice_number(self) -> str:
        try:
            return await self.client.generate_invoice_number()
        except ApiError as err:
            logger.error("Failed to generate invoice number: %s", err.message)
            raise

    async def validate_invoice_number(self, invoice_number: str, exclude_id: Optional[int] = None) -> bool:
        return await self.client.validate_invoice_number(invoice_number, exclude_id)

    async def refresh_invoices(self) -> List[Invoice]:
        return await self.fetch_invoices(self.filters)

    # Local state
    def set_current_invoice(self, invoice: Optional[Invoice]) -> None:
        self.current_invoice = invoice

    def set_filters(self, filters: InvoiceFilters) -> None:
        """Merge ``filters`` over the current ones."""
        self.filters = self.filters.model_copy(update=filters.model_dump(exclude_unset=True))

    def clear_filters(self) -> None:
        self.filters = InvoiceFilters()

    def set_pagination(self, page: int, page_size: int) -> None:
        self.current_page = page
        self.page_size = page_size

    def get_invoice_by_id(self, invoice_id: int) -> Optional[Invoice]:
        return next((inv for inv in self.invoices if inv.id == invoice_id), None)

    def get_invoice_by_number(self, invoice_number: str) -> Optional[Invoice]:
        return next((inv for inv in self.invoices if inv.invoice_number == invoice_number), None)
