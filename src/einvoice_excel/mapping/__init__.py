"""Row-level mapping primitives: field resolution, layout detection, schema tables."""

from .field_resolver import resolve
from .layout_detector import LayoutIndeterminateError, detect_layout
from .schema import LAYOUT_SCHEMA_V1, get_schema

__all__ = [
    "resolve",
    "detect_layout",
    "LayoutIndeterminateError",
    "LAYOUT_SCHEMA_V1",
    "get_schema",
]
