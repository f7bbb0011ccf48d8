from __future__ import annotations

from collections.abc import Mapping
from typing import Any

"""Raw spreadsheet row types.

A RawRow is one spreadsheet row as produced by the SpreadsheetReader: an ordered
mapping from column identity (``Invoice``, ``__EMPTY_15``, ``_15`` ...) to a scalar
cell value. Column identity is unstable across export tools, so callers go through
``einvoice_excel.mapping.field_resolver`` instead of indexing rows directly.
"""

__all__ = [
    "CellValue",
    "RawRow",
    "sheet_row_number",
]

CellValue = str | int | float | bool | None
RawRow = Mapping[str, Any]


def sheet_row_number(index: int, metadata_rows: int) -> int:
    """Return the 1-based sheet row number for a data row index.

    The reader consumes the column-header line, then ``metadata_rows`` rows
    (descriptions, field mappings) precede the first data row.
    """
    return index + metadata_rows + 2
