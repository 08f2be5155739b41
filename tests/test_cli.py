"""Tests for the command-line interface."""

import json

import pytest
from typer.testing import CliRunner

from sales_invoice import cli

runner = CliRunner()


@pytest.fixture
def api(fake_api, monkeypatch):
    monkeypatch.setattr(cli, "client_factory", lambda settings: fake_api.client())
    return fake_api


@pytest.fixture
def draft_file(tmp_path, sample_form):
    path = tmp_path / "draft.json"
    path.write_text(json.dumps(sample_form.to_wire()), encoding="utf-8")
    return path


def test_totals(draft_file):
    result = runner.invoke(cli.app, ["totals", "--input", str(draft_file)])
    assert result.exit_code == 0, result.output
    assert "₹212.40" in result.output
    assert "CGST" in result.output


def test_totals_inter_state(draft_file):
    result = runner.invoke(cli.app, ["totals", "--input", str(draft_file), "--company-state", "Goa"])
    assert result.exit_code == 0, result.output
    assert "IGST" in result.output


def test_validate_clean_batch(draft_file, tmp_path):
    report = tmp_path / "out" / "report.json"
    result = runner.invoke(cli.app, ["validate", "--input", str(draft_file), "--report", str(report)])
    assert result.exit_code == 0, result.output
    assert json.loads(report.read_text())["summary"]["valid_invoices"] == 1


def test_validate_reports_errors(tmp_path, sample_form):
    bad = sample_form.model_copy(update={"customer_email": "nope"})
    path = tmp_path / "drafts.json"
    path.write_text(json.dumps([sample_form.to_wire(), bad.to_wire()]), encoding="utf-8")

    result = runner.invoke(cli.app, ["validate", "--input", str(path)])

    assert result.exit_code == 1
    assert "duplicate in batch" in result.output
    assert "Invalid email format" in result.output


def test_list(api, make_invoice_payload):
    api.on("GET", "/sales-invoices", body={"success": True, "data": [make_invoice_payload()]})
    result = runner.invoke(cli.app, ["list", "--status", "draft"])
    assert result.exit_code == 0, result.output
    assert "INV-0001" in result.output
    assert api.requests[-1].url.params["status"] == "draft"


def test_list_search(api):
    api.on("GET", "/sales-invoices/search", body={"success": True, "data": []})
    result = runner.invoke(cli.app, ["list", "--search", "acme"])
    assert result.exit_code == 0, result.output
    assert api.requests[-1].url.params["q"] == "acme"


def test_show(api, make_invoice_payload):
    api.on("GET", "/sales-invoices/1", body={"success": True, "data": make_invoice_payload()})
    result = runner.invoke(cli.app, ["show", "1"])
    assert result.exit_code == 0, result.output
    assert "27-AAAAA-0000-A-1-Z-5" in result.output
    assert "15/01/2025" in result.output


def test_show_missing_invoice(api):
    result = runner.invoke(cli.app, ["show", "404"])
    assert result.exit_code == 1
    assert "status 404" in result.output


def test_stats_unavailable(api):
    api.on("GET", "/sales-invoices/stats", status=500, body={"success": False})
    result = runner.invoke(cli.app, ["stats"])
    assert result.exit_code == 1
    assert "unavailable" in result.output


def test_send(api):
    api.on("POST", "/sales-invoices/3/send", body={"success": True})
    result = runner.invoke(cli.app, ["send", "3", "--email", "ap@acme.in"])
    assert result.exit_code == 0, result.output
    assert api.last_json() == {"email": "ap@acme.in"}


def test_pdf(api, tmp_path):
    api.on("GET", "/sales-invoices/3/pdf", content=b"%PDF-1.7")
    target = tmp_path / "inv.pdf"
    result = runner.invoke(cli.app, ["pdf", "3", "--output", str(target)])
    assert result.exit_code == 0, result.output
    assert target.read_bytes() == b"%PDF-1.7"


def test_export(api, tmp_path):
    api.on("GET", "/sales-invoices/export", content=b"xlsx")
    target = tmp_path / "exports" / "paid.xlsx"
    result = runner.invoke(cli.app, ["export", "--format", "excel", "--output", str(target), "--status", "paid"])
    assert result.exit_code == 0, result.output
    assert target.read_bytes() == b"xlsx"
    params = api.requests[-1].url.params
    assert params["format"] == "excel"
    assert params["status"] == "paid"
