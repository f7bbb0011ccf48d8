from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any

from ..mapping.conversions import invoice_number_text, to_text
from ..mapping.field_resolver import has_value, resolve
from ..mapping.layout_detector import (
    detect_layout,
    discriminator_value,
    is_invoice_row,
    legacy_row_type,
    row_type_tag,
)
from ..mapping.schema import InvoiceBasedSchema, PartyColumns, get_schema
from ..models.config_models import MapperConfig
from ..models.layout import SheetLayout
from ..models.row_data import sheet_row_number
from ..models.validation_report import LogicalValidation, RowValidation, ValidationReport

"""Row validation (diagnostic only).

Checks every data row against the detected layout and returns a
ValidationReport. Findings never stop document construction; the batch
processor attaches the report to its result as ``structure_validation``.
"""

__all__ = [
    "INVOICE_ROW",
    "PARTY_ID_PATTERNS",
    "validate_rows",
    "validate_excel_rows",
]

logger = logging.getLogger(__name__)

INVOICE_ROW = "INVOICE"

PARTY_ID_PATTERNS: dict[str, re.Pattern[str]] = {
    "TIN": re.compile(r"^[A-Z0-9]+$"),
    "BRN": re.compile(r"^[A-Z0-9]+$"),
    "SST": re.compile(r"^W\d{2}-\d{4}-\d{8}$"),
    "TTX": re.compile(r"^[A-Z0-9\-\s]+$"),
}


def _new_summary() -> dict[str, int]:
    return {INVOICE_ROW: 0, "H": 0, "L": 0, "F": 0, "invalid": 0}


def _check_party_ids(row: Mapping[str, Any], party: str, columns: PartyColumns, errors: list[str]) -> None:
    for scheme, column in (("TIN", columns.tin), ("BRN", columns.brn), ("SST", columns.sst), ("TTX", columns.ttx)):
        if column is None:
            continue
        value = to_text(resolve(row, column))
        if value is None:  # 空 / NA は検査しない
            continue
        if not PARTY_ID_PATTERNS[scheme].match(value):
            errors.append(f"Invalid {party} {scheme} format: {value}")


def _check_required(row: Mapping[str, Any], schema: InvoiceBasedSchema, errors: list[str]) -> None:
    required = (
        (schema.supplier.name, "Supplier Name"),
        (schema.buyer.name, "Buyer Name"),
        (schema.currency, "Currency"),
        (schema.total_line_extension, "Line Extension Amount"),
    )
    for column, label in required:
        if to_text(resolve(row, column)) is None:
            errors.append(f"Missing required field: {label}")


def _validate_invoice_row(row: Mapping[str, Any], schema: InvoiceBasedSchema, detail: RowValidation) -> None:
    if is_invoice_row(row):
        detail.row_type = INVOICE_ROW
        _check_party_ids(row, "Supplier", schema.supplier, detail.errors)
        _check_party_ids(row, "Buyer", schema.buyer, detail.errors)
        _check_required(row, schema, detail.errors)
        return
    tag = row_type_tag(row)
    if tag is not None:
        detail.row_type = tag
        detail.errors.append(f"Invalid row type: {tag}. Expected: INVOICE (valid invoice number)")
    elif has_value(resolve(row, schema.invoice)):
        detail.errors.append(f"Invalid invoice number: {detail.invoice_number}")
    else:
        detail.errors.append("Missing invoice identifier")


def _validate_legacy_row(row: Mapping[str, Any], detail: RowValidation) -> None:
    row_type = legacy_row_type(row)
    if row_type is not None:
        detail.row_type = row_type
        return
    raw = discriminator_value(row)
    if raw is None:
        detail.errors.append("Missing row identifier")
    else:
        shown = str(raw).strip().upper()[:1]
        detail.errors.append(f"Invalid row identifier: {shown}. Expected: H, L, or F")


def _logical_validation(layout: SheetLayout, summary: Mapping[str, int]) -> LogicalValidation:
    if layout is SheetLayout.INVOICE_BASED:
        count = summary[INVOICE_ROW]
        return LogicalValidation(structure=layout, is_valid=count > 0, invoice_count=count)
    if layout is SheetLayout.LEGACY_HEADER_LINE_FOOTER:
        return LogicalValidation(
            structure=layout,
            is_valid=summary["H"] > 0 and summary["F"] > 0,
            has_header=summary["H"] > 0,
            has_lines=summary["L"] > 0,
            has_footer=summary["F"] > 0,
        )
    return LogicalValidation(
        structure=SheetLayout.UNKNOWN,
        is_valid=False,
        error="Unable to determine Excel structure type",
    )


def validate_rows(
    rows: Sequence[Mapping[str, Any]],
    layout: SheetLayout,
    *,
    metadata_rows: int = 2,
    schema: InvoiceBasedSchema | None = None,
) -> ValidationReport:
    """Validate data rows against an already detected layout.

    Args:
        rows: data rows only (metadata rows already removed)
        layout: layout decided by ``detect_layout``
        metadata_rows: number of metadata rows preceding ``rows`` in the sheet,
            used to report 1-based sheet row numbers
        schema: positional table for invoice-based rows (default: v1)
    """
    schema = schema or get_schema().invoice_based
    summary = _new_summary()
    details: list[RowValidation] = []
    valid = 0

    for index, row in enumerate(rows):
        detail = RowValidation(
            row_number=sheet_row_number(index, metadata_rows),
            row_type=None,
            invoice_number=invoice_number_text(resolve(row, schema.invoice)),
        )
        if layout is SheetLayout.INVOICE_BASED:
            _validate_invoice_row(row, schema, detail)
        else:
            _validate_legacy_row(row, detail)

        if detail.is_valid and detail.row_type is not None:
            summary[detail.row_type] += 1
            valid += 1
        else:
            summary["invalid"] += 1
            logger.debug("row %d invalid: %s", detail.row_number, "; ".join(detail.errors))
        details.append(detail)

    return ValidationReport(
        total_rows=len(rows),
        valid_rows=valid,
        invalid_rows=len(rows) - valid,
        summary=summary,
        row_details=details,
        logical_validation=_logical_validation(layout, summary),
        structure=layout,
    )


def validate_excel_rows(raw_data: Sequence[Mapping[str, Any]], config: MapperConfig | None = None) -> ValidationReport:
    """Diagnostic pass over a whole sheet (metadata rows included)."""
    config = config or MapperConfig()
    rows = list(raw_data[config.metadata_rows:])
    layout = detect_layout(rows)
    return validate_rows(
        rows,
        layout,
        metadata_rows=config.metadata_rows,
        schema=get_schema(config.schema_version).invoice_based,
    )
