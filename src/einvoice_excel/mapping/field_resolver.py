from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

"""Logical field -> cell value resolution.

The same semantic column shows up under different literal header names
depending on the export tool (``__EMPTY_15``, ``_15``, ``Column15`` ...).
Every downstream reader goes through ``resolve`` so that instability stays in
one place.
"""

__all__ = [
    "FIELD_TEMPLATES",
    "MISSING",
    "resolve",
    "resolve_raw",
    "has_value",
]

# 優先順 (先勝ち)
FIELD_TEMPLATES: tuple[str, ...] = (
    "{field}",
    "__EMPTY_{field}",
    "_{field}",
    "EMPTY_{field}",
    "__{field}",
    "Column{field}",
    "Field{field}",
    "col{field}",
    "field{field}",
)

_POSITIONAL = re.compile(r"^_(\d+)$")


class _Missing:
    """Marker for "no matching key" (distinct from a present ``None`` cell)."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:  # pragma: no cover (trivial)
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def _candidates(field: str) -> list[str]:
    return [t.format(field=field) for t in FIELD_TEMPLATES]


def _lookup(row: Mapping[str, Any], field: str) -> Any:
    names = _candidates(field)
    for name in names:
        if name in row:
            return row[name]
    lowered: dict[str, str] = {}
    for key in row:
        lowered.setdefault(str(key).lower(), key)
    for name in names:
        key = lowered.get(name.lower())
        if key is not None:
            return row[key]
    return MISSING


def resolve_raw(row: Mapping[str, Any], field: str) -> Any:
    """Like ``resolve`` but returns ``MISSING`` when no key matched."""
    value = _lookup(row, field)
    if value is MISSING:
        m = _POSITIONAL.match(field)
        if m:
            value = _lookup(row, m.group(1))
    return value


def resolve(row: Mapping[str, Any], field: str) -> Any:
    """Resolve a logical field name to the raw cell value of ``row``.

    Templates are tried exact-case first, then case-insensitively. A field of
    the form ``_N`` is retried with the bare ``N``. A key that is present with
    an empty cell resolves to that empty value; ``None`` is returned when no
    key matches at all.
    """
    value = resolve_raw(row, field)
    return None if value is MISSING else value


def has_value(value: Any) -> bool:
    """True when a cell carries something (not None / blank string)."""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True
