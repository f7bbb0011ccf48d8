from __future__ import annotations

from einvoice_excel.models.batch_result import BatchResult
from einvoice_excel.models.layout import SheetLayout
from einvoice_excel.models.validation_report import LogicalValidation, ValidationReport
from einvoice_excel.services.summary import RunTotals, render_summary_line


def _report(valid: bool) -> ValidationReport:
    return ValidationReport(
        total_rows=1,
        valid_rows=1 if valid else 0,
        invalid_rows=0 if valid else 1,
        summary={"INVOICE": 1 if valid else 0, "H": 0, "L": 0, "F": 0, "invalid": 0 if valid else 1},
        row_details=[],
        logical_validation=LogicalValidation(structure=SheetLayout.INVOICE_BASED, is_valid=valid),
        structure=SheetLayout.INVOICE_BASED,
    )


def test_render_basic():
    totals = RunTotals(files=1, success_files=1, invoices=3, processed_invoices=3, elapsed_seconds=2.0)
    assert render_summary_line(totals) == (
        "SUMMARY files=1 success=1 failed=0 invoices=3 processed=3 failed_invoices=0 elapsed_sec=2"
    )


def test_render_elapsed_formats():
    assert render_summary_line(RunTotals()).endswith("elapsed_sec=0")
    assert render_summary_line(RunTotals(elapsed_seconds=0.0012)).endswith("elapsed_sec=0.0012")
    assert render_summary_line(RunTotals(elapsed_seconds=1.23456)).endswith("elapsed_sec=1.235")


def test_totals_accumulate_batches():
    totals = RunTotals()
    totals.add(BatchResult(success=True, total_invoices=5, processed_invoices=4, failed_invoices=1))
    totals.add(BatchResult(success=False, error="Unable to determine Excel structure type"))
    totals.add(None)
    assert totals.files == 3
    assert totals.success_files == 1
    assert totals.failed_files == 2
    assert totals.invoices == 5
    assert totals.processed_invoices == 4
    assert totals.failed_invoices == 1


def test_totals_accumulate_reports():
    totals = RunTotals()
    totals.add_report(_report(True))
    totals.add_report(_report(False))
    assert (totals.files, totals.success_files, totals.failed_files) == (2, 1, 1)
