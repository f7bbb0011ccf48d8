from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .layout import SheetLayout

"""Row validation report models.

Produced by the row validator as a pure diagnostic pass; nothing here blocks
document construction.
"""

__all__ = [
    "RowValidation",
    "LogicalValidation",
    "ValidationReport",
]


@dataclass
class RowValidation:
    """Validation outcome for a single data row.

    Mutable while the validator collects errors for the row; treated as
    read-only once the report is returned.
    """
    row_number: int  # 1-based sheet row
    row_type: str | None  # INVOICE / H / L / F, None if undetermined
    invoice_number: str | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "rowNumber": self.row_number,
            "rowType": self.row_type,
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "invoiceNumber": self.invoice_number,
        }


@dataclass(frozen=True)
class LogicalValidation:
    """Batch-level coherence check.

    INVOICE_BASED: valid iff at least one INVOICE row.
    LEGACY_HEADER_LINE_FOOTER: valid iff at least one H row and one F row.
    """
    structure: SheetLayout
    is_valid: bool
    invoice_count: int = 0
    has_header: bool = False
    has_lines: bool = False
    has_footer: bool = False
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"structure": self.structure.value, "isValid": self.is_valid}
        if self.structure is SheetLayout.INVOICE_BASED:
            data.update(hasInvoices=self.invoice_count > 0, invoiceCount=self.invoice_count)
        elif self.structure is SheetLayout.LEGACY_HEADER_LINE_FOOTER:
            data.update(hasHeader=self.has_header, hasLines=self.has_lines, hasFooter=self.has_footer)
        if self.error:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class ValidationReport:
    total_rows: int
    valid_rows: int
    invalid_rows: int
    summary: dict[str, int]  # INVOICE/H/L/F/invalid counters
    row_details: list[RowValidation]
    logical_validation: LogicalValidation
    structure: SheetLayout

    @property
    def errors(self) -> list[str]:
        """Flattened ``Row N: message`` list across all rows."""
        return [f"Row {d.row_number}: {msg}" for d in self.row_details for msg in d.errors]

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalRows": self.total_rows,
            "validRows": self.valid_rows,
            "invalidRows": self.invalid_rows,
            "summary": dict(self.summary),
            "rowDetails": [d.to_dict() for d in self.row_details],
            "logicalValidation": self.logical_validation.to_dict(),
            "structure": self.structure.value,
        }
