"""Command-line entrypoints for invoice previews, validation, and API operations."""
from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, TypeVar

import typer
from rich import print
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .calculations import calculate_invoice_totals, is_inter_state, update_line_item_amount
from .client import ApiError, create_client
from .config import get_settings
from .formatters import format_currency, format_date, format_days_remaining, format_gstin, format_status
from .schemas import ExportFormat, Invoice, InvoiceFilters, InvoiceFormData, InvoiceStatus, TaxCalculation
from .store import SalesInvoiceStore
from .validator import InvoiceValidator

app = typer.Typer(add_completion=False, help="Sales invoice CLI")
console = Console()

# Swapped in tests to point the CLI at a fake transport
client_factory = create_client

T = TypeVar("T")


@app.callback()
def _configure_logging() -> None:
    logging.basicConfig(
        level=get_settings().LOG_LEVEL.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _load_forms(json_path: Path) -> List[InvoiceFormData]:
    data = json.loads(json_path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = [data]
    return [InvoiceFormData.model_validate(item) for item in data]


def _run(action: Callable[[SalesInvoiceStore], Awaitable[T]]) -> T:
    """Run one store action against the configured API and close the client."""

    async def runner() -> T:
        async with client_factory(get_settings()) as client:
            return await action(SalesInvoiceStore(client))

    try:
        return asyncio.run(runner())
    except ApiError as err:
        print(f"[red]Error:[/red] {err.message} ({err.code}, status {err.status})")
        raise typer.Exit(code=1)


def _print_totals(totals: TaxCalculation) -> None:
    table = Table(show_header=False, box=None)
    table.add_column(justify="left")
    table.add_column(justify="right")
    table.add_row("Subtotal", format_currency(totals.subtotal))
    table.add_row("Discount", format_currency(totals.total_discount))
    table.add_row("Taxable amount", format_currency(totals.taxable_amount))
    if totals.igst:
        table.add_row("IGST", format_currency(totals.igst))
    else:
        table.add_row("CGST", format_currency(totals.cgst))
        table.add_row("SGST", format_currency(totals.sgst))
    table.add_row("Total tax", format_currency(totals.total_tax))
    table.add_row("Total", format_currency(totals.total_amount))
    table.add_row("Round off", format_currency(totals.round_off))
    table.add_row("[bold]Amount payable[/bold]", f"[bold]{format_currency(totals.grand_total)}[/bold]")
    console.print(table)


def _print_invoices(invoices: List[Invoice]) -> None:
    table = Table(title=f"{len(invoices)} invoices")
    for header in ("ID", "Number", "Date", "Customer", "Status", "Due", "Total"):
        table.add_column(header)
    for inv in invoices:
        table.add_row(
            str(inv.id),
            inv.invoice_number,
            format_date(inv.invoice_date),
            inv.customer_name,
            format_status(inv.status),
            format_days_remaining(inv.due_date) if inv.status in (InvoiceStatus.SENT, InvoiceStatus.OVERDUE) else "",
            format_currency(inv.total_amount),
        )
    console.print(table)


@app.command()
def totals(
    input: Path = typer.Option(..., exists=True, dir_okay=False, help="JSON file with one invoice draft"),
    company_state: Optional[str] = typer.Option(None, help="Home state of the issuing company"),
) -> None:
    """Compute line amounts and GST totals for an invoice draft."""
    form = _load_forms(input)[0]
    state = company_state or get_settings().COMPANY_STATE
    items = [update_line_item_amount(item) for item in form.line_items]

    lines = Table(title=f"Place of supply: {form.place_of_supply or '-'}")
    for header in ("#", "Product", "HSN", "Qty", "Rate", "Tax %", "Amount"):
        lines.add_column(header)
    for index, item in enumerate(items, start=1):
        lines.add_row(
            str(index), item.product_name, item.hsn_code or "", f"{item.quantity:g}",
            format_currency(item.unit_price), f"{item.tax_rate:g}", format_currency(item.amount),
        )
    console.print(lines)
    _print_totals(calculate_invoice_totals(items, is_inter_state(form.place_of_supply, state)))


@app.command()
def validate(
    input: Path = typer.Option(..., exists=True, dir_okay=False, help="JSON file with invoice drafts"),
    report: Optional[Path] = typer.Option(None, help="Optional path to write validation report"),
) -> None:
    """Validate invoice drafts in a JSON file."""
    forms = _load_forms(input)
    response = InvoiceValidator().validate_invoices(forms)
    if report:
        report.parent.mkdir(parents=True, exist_ok=True)
        report.write_text(response.model_dump_json(indent=2), encoding="utf-8")
        print(f"Report written to {report}")

    summary = response.summary
    print(f"[bold]Total:[/bold] {summary.total_invoices}")
    print(f"[green]Valid:[/green] {summary.valid_invoices}  [red]Invalid:[/red] {summary.invalid_invoices}")
    for result in response.results:
        for err in result.errors:
            print(f"- {result.invoice_id}: {err}")
    if summary.invalid_invoices > 0:
        raise typer.Exit(code=1)


@app.command("list")
def list_invoices(
    status: Optional[InvoiceStatus] = typer.Option(None, help="Only invoices with this status"),
    search: Optional[str] = typer.Option(None, help="Free-text search"),
) -> None:
    """List invoices from the API."""
    if search:
        invoices = _run(lambda store: store.search_invoices(search))
    else:
        invoices = _run(lambda store: store.fetch_invoices(InvoiceFilters(status=status)))
    _print_invoices(invoices)


@app.command()
def show(invoice_id: int = typer.Argument(..., help="Invoice ID")) -> None:
    """Show one invoice with its totals."""
    inv = _run(lambda store: store.fetch_invoice_by_id(invoice_id))
    print(f"[bold]{inv.invoice_number}[/bold]  {format_status(inv.status)}")
    print(f"Customer: {inv.customer_name}  GSTIN: {format_gstin(inv.customer_gstin) or '-'}")
    print(f"Date: {format_date(inv.invoice_date)}  Due: {format_date(inv.due_date)}")
    _print_totals(inv.totals)


@app.command()
def stats() -> None:
    """Show invoice statistics."""
    result = _run(lambda store: store.fetch_stats())
    if result is None:
        print("[yellow]Statistics are unavailable[/yellow]")
        raise typer.Exit(code=1)
    print(f"Invoices: {result.total_invoices}  draft {result.draft_count}  sent {result.sent_count}  "
          f"paid {result.paid_count}  overdue {result.overdue_count}")
    print(f"Revenue: {format_currency(result.total_revenue)}  Outstanding: {format_currency(result.outstanding_amount)}")


@app.command()
def send(
    invoice_id: int = typer.Argument(..., help="Invoice ID"),
    email: Optional[str] = typer.Option(None, help="Send to this address instead of the customer's"),
) -> None:
    """Email an invoice to the customer."""
    _run(lambda store: store.send_invoice(invoice_id, email))
    print(f"Invoice {invoice_id} sent")


@app.command()
def pdf(
    invoice_id: int = typer.Argument(..., help="Invoice ID"),
    output: Optional[Path] = typer.Option(None, help="Where to write the PDF"),
) -> None:
    """Download the PDF rendition of an invoice."""
    content = _run(lambda store: store.download_invoice_pdf(invoice_id))
    target = output or Path(f"invoice-{invoice_id}.pdf")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)
    print(f"Wrote {target}")


@app.command()
def export(
    format: ExportFormat = typer.Option(ExportFormat.EXCEL, help="pdf or excel"),
    output: Path = typer.Option(..., help="Where to write the export"),
    status: Optional[InvoiceStatus] = typer.Option(None, help="Only invoices with this status"),
) -> None:
    """Export invoices as PDF or Excel."""
    content = _run(lambda store: store.export_invoices(format, InvoiceFilters(status=status)))
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(content)
    print(f"Wrote {output}")


def main():
    app()


if __name__ == "__main__":
    main()
