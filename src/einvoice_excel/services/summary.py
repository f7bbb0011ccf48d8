from __future__ import annotations

from dataclasses import dataclass

from ..models.batch_result import BatchResult
from ..models.validation_report import ValidationReport

"""SUMMARY line rendering for CLI runs.

Format:
SUMMARY files={files} success={success} failed={failed} invoices={total}
processed={processed} failed_invoices={failed_invoices} elapsed_sec={elapsed}
"""

__all__ = [
    "RunTotals",
    "render_summary_line",
]


@dataclass
class RunTotals:
    """Totals over every workbook handled by one CLI run.

    A workbook counts as ``success`` when its batch processed at least one
    invoice (or, with --validate-only, passed the logical check);
    unreadable workbooks and failed batches count as ``failed``.
    """
    files: int = 0
    success_files: int = 0
    failed_files: int = 0
    invoices: int = 0
    processed_invoices: int = 0
    failed_invoices: int = 0
    elapsed_seconds: float = 0.0

    def add(self, result: BatchResult | None) -> None:
        self.files += 1
        if result is None or not result.success:
            self.failed_files += 1
        else:
            self.success_files += 1
        if result is None:
            return
        self.invoices += result.total_invoices
        self.processed_invoices += result.processed_invoices
        self.failed_invoices += result.failed_invoices

    def add_report(self, report: ValidationReport) -> None:
        self.files += 1
        if report.logical_validation.is_valid:
            self.success_files += 1
        else:
            self.failed_files += 1


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # 指数表記を避ける
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(totals: RunTotals) -> str:
    """Render the SUMMARY line for a finished run.

    Examples:
        >>> render_summary_line(RunTotals(files=1, success_files=1, invoices=3, processed_invoices=3, elapsed_seconds=2.0))
        'SUMMARY files=1 success=1 failed=0 invoices=3 processed=3 failed_invoices=0 elapsed_sec=2'
    """
    return (
        f"SUMMARY files={totals.files} "
        f"success={totals.success_files} "
        f"failed={totals.failed_files} "
        f"invoices={totals.invoices} "
        f"processed={totals.processed_invoices} "
        f"failed_invoices={totals.failed_invoices} "
        f"elapsed_sec={_format_seconds(totals.elapsed_seconds)}"
    )
