from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any

from ..mapping.layout_detector import LayoutIndeterminateError, detect_layout
from ..mapping.schema import get_schema
from ..models.config_models import MapperConfig
from ..models.document import InvoiceDocument
from ..models.layout import SheetLayout
from .document_builder import BuildOutcome, DocumentBuilder

"""Layout-aware single-pass document extraction (no batch aggregation)."""

__all__ = [
    "data_rows",
    "extract_documents",
    "process_manual_upload_excel_data",
]

logger = logging.getLogger(__name__)


def data_rows(raw_data: Sequence[Mapping[str, Any]], metadata_rows: int) -> list[Mapping[str, Any]]:
    """Drop the leading descriptions / field-mapping rows."""
    return list(raw_data[metadata_rows:])


def extract_documents(
    rows: Sequence[Mapping[str, Any]],
    config: MapperConfig,
    *,
    layout: SheetLayout | None = None,
    clock: Callable[[], datetime] | None = None,
) -> tuple[SheetLayout, BuildOutcome]:
    """Detect the layout (unless given) and build every document of ``rows``.

    Raises:
        LayoutIndeterminateError: no row carries a row-type signal
    """
    if layout is None:
        layout = detect_layout(rows)
    if not layout.is_known:
        raise LayoutIndeterminateError("Unable to determine Excel structure type")
    kwargs: dict[str, Any] = {}
    if clock is not None:
        kwargs["clock"] = clock
    builder = DocumentBuilder(
        layout,
        schema=get_schema(config.schema_version),
        defaults=config.defaults,
        metadata_rows=config.metadata_rows,
        **kwargs,
    )
    outcome = builder.build_all(rows)
    logger.info(
        "layout=%s documents=%d failed=%d",
        layout.value,
        len(outcome.documents),
        len(outcome.failures),
    )
    return layout, outcome


def process_manual_upload_excel_data(
    raw_data: Sequence[Mapping[str, Any]],
    config: MapperConfig | None = None,
) -> list[InvoiceDocument]:
    """Build the invoice documents of a whole sheet (metadata rows included).

    Rows that cannot yield a document are logged and skipped.
    """
    config = config or MapperConfig()
    _, outcome = extract_documents(data_rows(raw_data, config.metadata_rows), config)
    return outcome.documents
