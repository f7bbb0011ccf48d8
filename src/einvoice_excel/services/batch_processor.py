from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any

from ..logging.error_log import AuditSink
from ..mapping.layout_detector import LayoutIndeterminateError, detect_layout
from ..mapping.schema import get_schema
from ..models.batch_result import BatchResult, BatchSummaryAccumulator, InvalidInvoice, LogEntry
from ..models.config_models import MapperConfig
from ..models.document import (
    DocumentAnalytics,
    DocumentMetadata,
    InvoiceDetails,
    InvoiceDocument,
    InvoiceValidation,
)
from ..models.error_record import (
    DOCUMENT_BUILD_FAILURE,
    DUPLICATE_INVOICE,
    FIELD_FORMAT_WARNING,
    LAYOUT_INDETERMINATE,
)
from ..models.validation_report import ValidationReport
from .extraction import data_rows, extract_documents
from .row_validator import validate_rows

"""Batch processing of a whole sheet into invoice documents.

Flow: validate rows (diagnostic) -> detect layout once -> build documents ->
augment each accepted document (metadata / analytics / validation) ->
duplicate check + batch summary as a sequential fold.

Only an indeterminate layout fails the batch (``success=False``); every
other problem is recorded in ``validation`` / ``logs`` and processing goes on.
"""

__all__ = [
    "BatchOptions",
    "process_multiple_invoices",
]

logger = logging.getLogger(__name__)

_PY_LEVELS = {"INFO": logging.INFO, "WARN": logging.WARNING, "ERROR": logging.ERROR}


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _iso(ts: datetime) -> str:
    return ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class BatchOptions:
    config: MapperConfig = field(default_factory=MapperConfig)
    source: str = "upload"  # workbook / upload name, copied into audit records
    audit_sink: AuditSink | None = None
    clock: Callable[[], datetime] = _utc_now


class _BatchRun:
    """State of one ``process_multiple_invoices`` call (never shared)."""

    def __init__(self, options: BatchOptions) -> None:
        self.options = options
        self.config = options.config
        self.result = BatchResult()
        self.summary = BatchSummaryAccumulator()
        self.seen: set[str] = set()

    def log(self, level: str, message: str, data: dict[str, Any] | None = None) -> None:
        entry = LogEntry(timestamp=_iso(self.options.clock()), level=level, message=message, data=data)
        self.result.logs.append(entry)
        logger.log(_PY_LEVELS[level], message)
        sink = self.options.audit_sink
        if sink is None:
            return
        try:
            sink.write(entry)
        except Exception as e:  # 監査出力の失敗で処理を止めない
            logger.warning("audit sink write failed: %s", e)

    def _record(self, error_type: str, row: int = -1, invoice_no: str = "") -> dict[str, Any]:
        return {"error_type": error_type, "row": row, "invoice_no": invoice_no, "source": self.options.source}

    # -- steps ------------------------------------------------------------
    def report_rows(self, report: ValidationReport) -> None:
        self.result.validation.structure_validation = report
        for detail in report.row_details:
            if detail.is_valid:
                continue
            self.log(
                "WARN",
                f"Row {detail.row_number}: {'; '.join(detail.errors)}",
                self._record(FIELD_FORMAT_WARNING, detail.row_number, detail.invoice_number or ""),
            )

    def fail_layout(self, error: LayoutIndeterminateError) -> None:
        self.result.success = False
        self.result.error = str(error)
        self.log("ERROR", f"Batch processing failed: {error}", self._record(LAYOUT_INDETERMINATE))

    def add_failure(self, index: int, row: int, invoice_no: str, error: str) -> None:
        self.result.failed_invoices += 1
        self.result.validation.invalid_invoices.append(
            InvalidInvoice(index=index, invoice_no=invoice_no or "Unknown", error=error, row=row)
        )
        self.log(
            "ERROR",
            f"Failed to process invoice at index {index} (row {row}): {error}",
            self._record(DOCUMENT_BUILD_FAILURE, row, invoice_no),
        )

    def accept(self, document: InvoiceDocument, position: int) -> None:
        defaults = self.config.defaults
        now = self.options.clock()
        invoice_no = document.invoice_no
        analytics = DocumentAnalytics(
            line_item_count=len(document.items),
            total_amount=document.summary.amounts.payable_amount,
            tax_amount=document.summary.tax.total_amount,
            currency=document.header.document_currency_code or defaults.currency,
            invoice_type=document.header.invoice_type or defaults.invoice_type,
        )
        validation = _validate_document(document, analytics)

        if invoice_no in self.seen:
            if invoice_no not in self.result.validation.duplicate_invoices:
                self.result.validation.duplicate_invoices.append(invoice_no)
            validation.warnings.append("Duplicate invoice number detected")
            self.log(
                "WARN",
                f"Duplicate invoice number {invoice_no}",
                self._record(DUPLICATE_INVOICE, document.source_row, invoice_no),
            )
        self.seen.add(invoice_no)

        augmented = replace(
            document,
            metadata=DocumentMetadata(
                processing_index=position,
                processing_timestamp=_iso(now),
                document_id=f"{invoice_no}_{int(now.timestamp() * 1000)}",
            ),
            analytics=analytics,
            invoice_details=_invoice_details(document, analytics),
            validation=validation,
        )
        self.summary.add(
            amount=analytics.total_amount,
            tax_amount=analytics.tax_amount,
            currency=analytics.currency,
            invoice_type=analytics.invoice_type,
            issue_date=document.header.issue_date,
        )
        self.result.invoices.append(augmented)
        self.result.processed_invoices += 1
        self.log("INFO", f"Processed invoice {invoice_no} successfully")

    def finish(self) -> None:
        result = self.result
        result.batch_summary = self.summary.build()
        warnings = result.validation.warnings
        if len(result.batch_summary.currencies) > 1:
            warnings.append(f"Mixed currencies detected: {', '.join(result.batch_summary.currencies)}")
        if len(result.batch_summary.invoice_types) > 1:
            warnings.append(f"Mixed invoice types detected: {', '.join(result.batch_summary.invoice_types)}")
        if result.total_invoices > 0:
            rate = result.processed_invoices / result.total_invoices * 100
            if rate < 100:
                warnings.append(f"Processing success rate: {rate:.1f}%")
        result.success = result.processed_invoices > 0
        self.log(
            "INFO",
            f"Batch processing completed: {result.processed_invoices}/{result.total_invoices} "
            "invoices processed successfully",
        )


def _invoice_details(document: InvoiceDocument, analytics: DocumentAnalytics) -> InvoiceDetails:
    return InvoiceDetails(
        invoice_number=document.invoice_no,
        supplier=document.supplier.name,
        buyer=document.buyer.name,
        total_amount=analytics.total_amount,
        tax_amount=analytics.tax_amount,
        currency=analytics.currency,
        invoice_type=analytics.invoice_type,
        issue_date=document.header.issue_date,
        line_item_count=analytics.line_item_count,
    )


def _validate_document(document: InvoiceDocument, analytics: DocumentAnalytics) -> InvoiceValidation:
    errors: list[str] = []
    warnings: list[str] = []
    if not document.invoice_no:
        errors.append("Missing invoice number")
    if not document.supplier.name:
        errors.append("Missing supplier name")
    if not document.buyer.name:
        errors.append("Missing buyer name")
    if analytics.total_amount <= 0:
        warnings.append("Invoice amount is zero or negative")
    if not document.items:
        warnings.append("No line items found")
    return InvoiceValidation(is_valid=not errors, errors=errors, warnings=warnings)


def process_multiple_invoices(
    raw_data: Sequence[Mapping[str, Any]],
    options: BatchOptions | None = None,
) -> BatchResult:
    """Process a whole sheet (metadata rows included) into a BatchResult.

    Each call keeps its own state; only the optional audit sink is shared
    with other calls.
    """
    options = options or BatchOptions()
    config = options.config
    started = time.perf_counter()
    run = _BatchRun(options)

    rows = data_rows(raw_data, config.metadata_rows)
    layout = detect_layout(rows)
    run.result.layout = layout
    report = validate_rows(
        rows,
        layout,
        metadata_rows=config.metadata_rows,
        schema=get_schema(config.schema_version).invoice_based,
    )
    run.report_rows(report)

    try:
        _, outcome = extract_documents(rows, config, layout=layout, clock=options.clock)
    except LayoutIndeterminateError as e:
        run.fail_layout(e)
        run.result.processing_time_ms = round((time.perf_counter() - started) * 1000, 3)
        return run.result

    run.result.total_invoices = outcome.document_starts
    run.log("INFO", f"Detected {outcome.document_starts} invoices for processing ({layout.value})")
    for message in outcome.warnings:
        run.log("WARN", message, run._record(FIELD_FORMAT_WARNING))

    for failure in outcome.failures:
        run.add_failure(failure.index, failure.row_number, failure.invoice_no, failure.error)
    for position, document in enumerate(outcome.documents):
        run.accept(document, position)

    run.finish()
    run.result.processing_time_ms = round((time.perf_counter() - started) * 1000, 3)
    return run.result
