from __future__ import annotations

import math
import zipfile
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd
import pandas._libs.parsers as parsers

from ..models.row_data import RawRow

"""Workbook reader producing raw rows.

The first sheet row supplies the column names, following the naming a
spreadsheet-to-JSON export gives them:

- blank header cells become ``__EMPTY``, ``__EMPTY_1``, ``__EMPTY_2`` ...
- a repeated name gets ``_1``, ``_2`` ... appended

Every following non-empty row becomes one RawRow (column name -> cell). The
descriptions / field-mapping rows are returned like data rows; skipping them
is the mapper's job (``metadata_rows``).
"""

__all__ = [
    "SheetReadError",
    "EMPTY_HEADER",
    "column_names",
    "read_workbook_rows",
]

EMPTY_HEADER = "__EMPTY"

# "NA" はセルの値として残す (pandas 既定では NaN 扱い)
KEEP_NA_STRINGS = ("NA",)


class SheetReadError(Exception):
    """Raised when a workbook / sheet cannot be read."""


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value.strip() == ""


def column_names(header: Iterable[Any]) -> list[str]:
    """Column names for a header row (blank -> ``__EMPTY``, duplicates suffixed)."""
    names: list[str] = []
    used: set[str] = set()
    counters: dict[str, int] = {}
    for raw in header:
        if _is_blank(raw):
            base = EMPTY_HEADER
        elif isinstance(raw, float) and raw.is_integer():
            base = str(int(raw))
        else:
            base = str(raw).strip()
        name = base
        count = counters.get(base, 0)
        while name in used:
            count += 1
            name = f"{base}_{count}"
        counters[base] = count
        used.add(name)
        names.append(name)
    return names


def _cell(value: Any) -> Any:
    if value is pd.NaT or (_is_blank(value) and not isinstance(value, str)):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, datetime):
        return value
    if hasattr(value, "item"):  # numpy scalar -> python
        return _cell(value.item())
    return value


def read_workbook_rows(path: Path | str, sheet_name: str | int | None = None) -> list[RawRow]:
    """Read one sheet (first sheet by default) as a list of RawRow dicts.

    Raises:
        SheetReadError: file missing / not a workbook / sheet not found
    """
    path = Path(path)
    if not path.exists():
        raise SheetReadError(f"workbook not found: {path}")

    na_values = list(parsers.STR_NA_VALUES - set(KEEP_NA_STRINGS))
    try:
        df = pd.read_excel(
            path,
            sheet_name=0 if sheet_name is None else sheet_name,
            header=None,
            keep_default_na=False,
            na_values=na_values,
            engine="openpyxl",
        )
    except (OSError, ValueError, KeyError, zipfile.BadZipFile) as e:
        raise SheetReadError(f"cannot read {path.name}: {e}") from e

    if df.shape[0] == 0:
        return []

    columns = column_names(df.iloc[0].tolist())
    rows: list[RawRow] = []
    for _, raw in df.iloc[1:].iterrows():
        values = [_cell(v) for v in raw.tolist()]
        if all(v is None or (isinstance(v, str) and v.strip() == "") for v in values):
            continue
        rows.append(dict(zip(columns, values, strict=False)))
    return rows
