from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any

from ..models.layout import SheetLayout
from .conversions import NA_LITERAL, invoice_number_text
from .field_resolver import has_value, resolve

"""Sheet layout detection.

The layout is decided once per sheet by the first row that carries a
decisive signal, in this order:

1. an explicit row-type discriminator holding H / L / F -> legacy
2. a usable ``Invoice`` value -> invoice based
3. header-only / line-only / footer-only column names -> legacy

Rows that decide nothing are skipped. No decisive row at all -> UNKNOWN.
"""

__all__ = [
    "LayoutIndeterminateError",
    "ROW_TYPE_ALIASES",
    "INVOICE_LABELS",
    "detect_layout",
    "classify_row",
    "row_type_tag",
    "discriminator_value",
    "is_invoice_row",
    "legacy_row_type",
]

logger = logging.getLogger(__name__)


class LayoutIndeterminateError(Exception):
    """Raised when no row of the sheet carries a row-type signal."""


ROW_TYPE_ALIASES: tuple[str, ...] = (
    "",
    "__EMPTY",
    "_",
    "RowType",
    "Type",
    "Row_Type",
    "Row Type",
    "RowIdentifier",
    "Row Identifier",
)

# ラベル行 (列見出し / フィールド名) の Invoice 値
INVOICE_LABELS = frozenset({"Invoice", "Internal Document Reference Number", "Invoice_ID"})

# 判別列がない場合のフォールバック (レイアウト判定用)
_HEADER_ONLY = ("InvoiceNumber", "DocumentNumber")
_LINE_ONLY = ("LineNumber", "ItemNumber")
_FOOTER_ONLY = ("TotalAmount",)

# legacy と確定した後の行種別判定用
_ROW_TYPE_INDICATORS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("H", ("Invoice", "InvoiceNumber", "DocumentNumber")),
    ("L", ("InvoiceLine", "LineNumber", "ItemNumber")),
    ("F", ("LegalMonetaryTotal", "TotalAmount", "Invoice_TaxTotal")),
)

_DIGIT = re.compile(r"\d")
_ALNUM = re.compile(r"^[A-Za-z0-9]+$")


def discriminator_value(row: Mapping[str, Any]) -> Any:
    for alias in ROW_TYPE_ALIASES:
        value = row.get(alias)
        if has_value(value):
            return value
    return None


def row_type_tag(row: Mapping[str, Any]) -> str | None:
    """Return ``"H"``, ``"L"`` or ``"F"`` from an explicit discriminator.

    Case-insensitive; only the first character counts (``Hdr`` -> H, ``Line Item`` -> L).
    """
    value = discriminator_value(row)
    if value is None:
        return None
    text = str(value).strip().upper()
    if text[:1] in ("H", "L", "F"):
        return text[0]
    return None


def is_invoice_row(row: Mapping[str, Any]) -> bool:
    """True when the row's ``Invoice`` cell looks like a real invoice number."""
    raw = invoice_number_text(resolve(row, "Invoice"))
    if raw is None:
        return False
    text = raw.strip()
    if not text or text in INVOICE_LABELS or text == NA_LITERAL:
        return False
    return bool(_DIGIT.search(text) or _ALNUM.match(text))


def _has_any(row: Mapping[str, Any], names: Sequence[str]) -> bool:
    return any(has_value(row.get(name)) for name in names)


def classify_row(row: Mapping[str, Any]) -> SheetLayout | None:
    """Layout signalled by a single row, ``None`` when the row is not decisive."""
    if row_type_tag(row) is not None:
        return SheetLayout.LEGACY_HEADER_LINE_FOOTER
    if is_invoice_row(row):
        return SheetLayout.INVOICE_BASED
    if _has_any(row, _HEADER_ONLY) or _has_any(row, _LINE_ONLY) or _has_any(row, _FOOTER_ONLY):
        return SheetLayout.LEGACY_HEADER_LINE_FOOTER
    return None


def detect_layout(rows: Sequence[Mapping[str, Any]]) -> SheetLayout:
    for index, row in enumerate(rows):
        layout = classify_row(row)
        if layout is not None:
            logger.debug("layout %s decided by data row %d", layout.value, index)
            return layout
    return SheetLayout.UNKNOWN


def legacy_row_type(row: Mapping[str, Any]) -> str | None:
    """Row type of a row inside a legacy sheet.

    The explicit tag wins. Rows without a discriminator are typed from the
    columns they fill (``Invoice`` -> H, ``InvoiceLine`` -> L,
    ``LegalMonetaryTotal`` -> F ...).
    """
    tag = row_type_tag(row)
    if tag is not None:
        return tag
    if discriminator_value(row) is not None:
        # 判別列はあるが H/L/F ではない
        return None
    for row_type, identifiers in _ROW_TYPE_INDICATORS:
        if _has_any(row, identifiers):
            return row_type
    return None
