from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .document import InvoiceDocument
from .layout import SheetLayout
from .validation_report import ValidationReport

"""Batch result models for multi-invoice processing.

BatchResult is the in-memory contract handed back to the upload handler: the
documents that could be built, the batch summary, the validation findings and
an audit trail of log entries.
"""

__all__ = [
    "LogEntry",
    "InvalidInvoice",
    "BatchValidation",
    "DateRange",
    "BatchSummary",
    "BatchSummaryAccumulator",
    "BatchResult",
]


@dataclass(frozen=True)
class LogEntry:
    timestamp: str  # ISO8601 UTC, 'Z' suffix
    level: str  # INFO / WARN / ERROR
    message: str
    data: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"timestamp": self.timestamp, "level": self.level, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


@dataclass(frozen=True)
class InvalidInvoice:
    index: int  # position among document starts
    invoice_no: str
    error: str
    row: int = -1

    def to_dict(self) -> dict[str, Any]:
        return {"index": self.index, "invoiceNo": self.invoice_no, "error": self.error, "row": self.row}


@dataclass
class BatchValidation:
    duplicate_invoices: list[str] = field(default_factory=list)
    invalid_invoices: list[InvalidInvoice] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    structure_validation: ValidationReport | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "duplicateInvoices": list(self.duplicate_invoices),
            "invalidInvoices": [i.to_dict() for i in self.invalid_invoices],
            "warnings": list(self.warnings),
            "structureValidation": (
                self.structure_validation.to_dict() if self.structure_validation is not None else None
            ),
        }


@dataclass(frozen=True)
class DateRange:
    earliest: str  # YYYY-MM-DD
    latest: str

    def to_dict(self) -> dict[str, Any]:
        return {"earliest": self.earliest, "latest": self.latest}


@dataclass(frozen=True)
class BatchSummary:
    total_amount: float = 0.0
    total_tax_amount: float = 0.0
    currencies: list[str] = field(default_factory=list)
    invoice_types: list[str] = field(default_factory=list)
    date_range: DateRange | None = None  # issue dates of accepted documents

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalAmount": self.total_amount,
            "totalTaxAmount": self.total_tax_amount,
            "currencies": list(self.currencies),
            "invoiceTypes": list(self.invoice_types),
            "dateRange": self.date_range.to_dict() if self.date_range is not None else None,
        }


class BatchSummaryAccumulator:
    """Folds accepted documents into batch totals.

    Currencies and invoice types are collected as sets while the batch runs and
    materialized as lists (first-seen order) by ``build()``.
    """

    def __init__(self) -> None:
        self.total_amount = 0.0
        self.total_tax_amount = 0.0
        self._currencies: dict[str, None] = {}  # ordered set
        self._invoice_types: dict[str, None] = {}
        self._earliest: str | None = None
        self._latest: str | None = None

    def add(self, *, amount: float, tax_amount: float, currency: str, invoice_type: str, issue_date: str) -> None:
        self.total_amount += amount
        self.total_tax_amount += tax_amount
        self._currencies.setdefault(currency, None)
        self._invoice_types.setdefault(invoice_type, None)
        if self._earliest is None or issue_date < self._earliest:
            self._earliest = issue_date
        if self._latest is None or issue_date > self._latest:
            self._latest = issue_date

    def build(self) -> BatchSummary:
        return BatchSummary(
            total_amount=round(self.total_amount, 2),
            total_tax_amount=round(self.total_tax_amount, 2),
            currencies=list(self._currencies),
            invoice_types=list(self._invoice_types),
            date_range=(
                DateRange(self._earliest, self._latest)
                if self._earliest is not None and self._latest is not None
                else None
            ),
        )


@dataclass
class BatchResult:
    """Outcome of one ``process_multiple_invoices`` call.

    ``success`` is True iff at least one document was processed.
    """
    success: bool = False
    layout: SheetLayout = SheetLayout.UNKNOWN
    total_invoices: int = 0
    processed_invoices: int = 0
    failed_invoices: int = 0
    invoices: list[InvoiceDocument] = field(default_factory=list)
    batch_summary: BatchSummary = field(default_factory=BatchSummary)
    validation: BatchValidation = field(default_factory=BatchValidation)
    logs: list[LogEntry] = field(default_factory=list)
    processing_time_ms: float = 0.0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "layout": self.layout.value,
            "totalInvoices": self.total_invoices,
            "processedInvoices": self.processed_invoices,
            "failedInvoices": self.failed_invoices,
            "invoices": [doc.to_dict() for doc in self.invoices],
            "batchSummary": self.batch_summary.to_dict(),
            "validation": self.validation.to_dict(),
            "processingTime": self.processing_time_ms,
            "logs": [entry.to_dict() for entry in self.logs],
        }
        if self.error is not None:
            data["error"] = self.error
        return data
