from __future__ import annotations

import math
import re
from collections.abc import Iterable
from datetime import date, datetime, timedelta
from typing import Any

"""Cell value conversions used while building documents.

All helpers are total: malformed input degrades to ``None`` (text) or ``0``
(numbers) rather than raising.
"""

__all__ = [
    "MALAYSIAN_STATES",
    "NA_LITERAL",
    "convert_excel_date",
    "map_state_code",
    "join_address_fragments",
    "to_number",
    "to_text",
    "to_flag",
    "invoice_number_text",
]

NA_LITERAL = "NA"

MALAYSIAN_STATES: dict[int, str] = {
    1: "Johor",
    2: "Kedah",
    3: "Kelantan",
    4: "Melaka",
    5: "Negeri Sembilan",
    6: "Pahang",
    7: "Perak",
    8: "Perlis",
    9: "Pulau Pinang",
    10: "Sabah",
    11: "Sarawak",
    12: "Selangor",
    13: "Terengganu",
    14: "Wilayah Persekutuan Kuala Lumpur",
    15: "Wilayah Persekutuan Labuan",
    16: "Wilayah Persekutuan Putrajaya",
    17: "Not Applicable",
}

_EXCEL_EPOCH = date(1900, 1, 1)
# Excel は 1900-02-29 (serial 60) を実在日として数える
_FAKE_LEAP_SERIAL = 60

_REPEATED_COMMAS = re.compile(r",(\s*,)+")
_COMMA_SPACING = re.compile(r"\s*,\s*")
_LEADING_COMMA = re.compile(r"^\s*,\s*")
_TRAILING_COMMA = re.compile(r",\s*$")
_REPEATED_SPACES = re.compile(r"\s{2,}")
_NULL_FRAGMENTS = {"NA", "NULL"}


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value.strip() == ""


def _plain_text(value: Any) -> str:
    # 1.0 -> "1" (pandas が整数列を float で返すことがある)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_text(value: Any) -> str | None:
    """Trimmed text, or ``None`` for blank cells and the literal ``NA``."""
    if _is_blank(value):
        return None
    text = _plain_text(value).strip()
    if text == NA_LITERAL:
        return None
    return text


def invoice_number_text(value: Any) -> str | None:
    """Invoice number as found in the cell. Strings are kept verbatim."""
    if _is_blank(value):
        return None
    if isinstance(value, str):
        return value
    return _plain_text(value)


def to_number(value: Any) -> float:
    """Numeric cell value, ``0.0`` when blank or not a number."""
    if _is_blank(value) or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip().replace(",", ""))
        except ValueError:
            return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def to_flag(value: Any) -> bool:
    """True for ``True``, ``"true"``, ``1`` and ``"1"``."""
    if value is True:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1")
    return False


def _as_serial(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        return None


def convert_excel_date(value: Any) -> str | None:
    """Convert an Excel serial date to ``YYYY-MM-DD``.

    Serial 1 is 1900-01-01. Excel's fictitious 1900-02-29 is skipped, so
    serial 59 is 1900-02-28 and serial 60 is 1900-03-01. Strings that already
    contain ``-`` pass through; other non-numeric values are returned as text.
    """
    if _is_blank(value):
        return None
    if isinstance(value, str) and "-" in value:
        return value
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    serial = _as_serial(value)
    if serial is None or not math.isfinite(serial) or serial < 1:
        return _plain_text(value)
    whole = int(serial)
    offset = whole - 1 if whole <= _FAKE_LEAP_SERIAL else whole - 2
    return (_EXCEL_EPOCH + timedelta(days=offset)).isoformat()


def map_state_code(value: Any) -> str | None:
    """Map a numeric Malaysian state code (1..17) to the state name.

    Unmapped and non-numeric values pass through as text.
    """
    if _is_blank(value):
        return None
    serial = _as_serial(value)
    if serial is not None and serial.is_integer():
        name = MALAYSIAN_STATES.get(int(serial))
        if name is not None:
            return name
    return _plain_text(value).strip()


def _normalize_fragment(value: Any) -> str | None:
    if _is_blank(value):
        return None
    text = _plain_text(value).strip()
    if text.upper() in _NULL_FRAGMENTS:
        return None
    text = _REPEATED_COMMAS.sub(",", text)
    text = _COMMA_SPACING.sub(", ", text)
    text = _LEADING_COMMA.sub("", text)
    text = _TRAILING_COMMA.sub("", text)
    text = _REPEATED_SPACES.sub(" ", text).strip()
    return text or None


def join_address_fragments(fragments: Iterable[Any]) -> str | None:
    """Join address cells with ``", "`` after dropping blank / NA fragments.

    >>> join_address_fragments(["No. 12, Jalan Besar", "", "Taman ABC"])
    'No. 12, Jalan Besar, Taman ABC'
    """
    parts = [p for p in (_normalize_fragment(f) for f in fragments) if p]
    if not parts:
        return None
    return ", ".join(parts)
