from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

One record per recorded problem while mapping a sheet. ``row`` is the 1-based
sheet row; -1 marks sheet-level records where no single row is at fault
(e.g. an indeterminate layout).
"""

__all__ = [
    "ErrorRecord",
    "ERROR_TYPES",
    "LAYOUT_INDETERMINATE",
    "DOCUMENT_BUILD_FAILURE",
    "FIELD_FORMAT_WARNING",
    "DUPLICATE_INVOICE",
    "utc_timestamp",
]

LAYOUT_INDETERMINATE = "LAYOUT_INDETERMINATE"
DOCUMENT_BUILD_FAILURE = "DOCUMENT_BUILD_FAILURE"
FIELD_FORMAT_WARNING = "FIELD_FORMAT_WARNING"
DUPLICATE_INVOICE = "DUPLICATE_INVOICE"

ERROR_TYPES = frozenset({
    LAYOUT_INDETERMINATE,
    DOCUMENT_BUILD_FAILURE,
    FIELD_FORMAT_WARNING,
    DUPLICATE_INVOICE,
})


def utc_timestamp() -> str:
    """ISO8601 UTC timestamp with 'Z' suffix."""
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: workbook / upload name the rows came from
        row: 1-based sheet row. Use -1 for sheet-level records
        error_type: one of ERROR_TYPES (UPPER_SNAKE_CASE)
        message: human readable description
        invoice_no: invoice number involved, empty when unknown
    """
    timestamp: str
    source: str
    row: int
    error_type: str
    message: str
    invoice_no: str = ""

    @staticmethod
    def create(source: str, row: int, error_type: str, message: str, invoice_no: str = "") -> ErrorRecord:
        if error_type not in ERROR_TYPES:
            raise ValueError(f"unknown error_type: {error_type}")
        return ErrorRecord(
            timestamp=utc_timestamp(),
            source=source,
            row=row,
            error_type=error_type,
            message=message,
            invoice_no=invoice_no,
        )

    def to_json_line(self) -> str:
        # 追加キー阻止: dataclass -> dict して json.dumps
        return json.dumps(asdict(self), ensure_ascii=False)
