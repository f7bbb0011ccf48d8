# Shared pytest fixtures
from __future__ import annotations

import tempfile
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from einvoice_excel.logging.init import reset_logging

FIXED_NOW = datetime(2024, 3, 15, 8, 30, 0, tzinfo=UTC)

# descriptions row + field-mapping row
METADATA_ROWS: list[dict[str, Any]] = [
    {"Invoice": "Internal Document Reference Number", "__EMPTY": "Row Type"},
    {"Invoice": "Invoice_ID", "__EMPTY": "RowType"},
]


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """metadata_rows: 2
schema_version: v1
error_log_dir: logs
defaults:
  currency: MYR
  country: MYS
  invoice_type: "01"
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "mapper.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def fixed_clock():
    return lambda: FIXED_NOW


def make_invoice_row(invoice: Any = "INV001", **overrides: Any) -> dict[str, Any]:
    """One complete invoice-based row (positional ``__EMPTY_N`` columns)."""
    row: dict[str, Any] = {
        "Invoice": invoice,
        "__EMPTY_4": "01",
        "__EMPTY_5": "MYR",
        "__EMPTY_15": "C12345678010",
        "__EMPTY_16": "202001234567",
        "__EMPTY_20": "W10-1808-32000059",
        "__EMPTY_22": "Kuala Lumpur",
        "__EMPTY_23": "50480",
        "__EMPTY_24": 14,
        "__EMPTY_25": "No. 1, Jalan Satu",
        "__EMPTY_26": "Taman Dua",
        "__EMPTY_28": "MYS",
        "__EMPTY_31": "Supplier Sdn Bhd",
        "__EMPTY_32": "+60312345678",
        "__EMPTY_34": "C98765432010",
        "Buyer": "201901000005",
        "__EMPTY_40": "Shah Alam",
        "__EMPTY_42": 12,
        "__EMPTY_43": "Lot 7",
        "__EMPTY_49": "Buyer Sdn Bhd",
        "InvoiceLine": "1",
        "__EMPTY_90": 2,
        "__EMPTY_91": "C62",
        "__EMPTY_92": 1000,
        "__EMPTY_99": 6,
        "__EMPTY_100": "01",
        "__EMPTY_108": 500,
        "__EMPTY_109": 1000,
        "LegalMonetaryTotal": 1000,
        "__EMPTY_84": 1000,
        "__EMPTY_85": 1060,
        "__EMPTY_89": 1060,
        "Invoice_TaxTotal": 60,
    }
    row.update(overrides)
    return row


def make_header_row(invoice: Any = "INV100", **overrides: Any) -> dict[str, Any]:
    row: dict[str, Any] = {
        "__EMPTY": "H",
        "Invoice": invoice,
        "__EMPTY_5": "01",
        "__EMPTY_6": "MYR",
        "__EMPTY_16": "C11111111010",
        "__EMPTY_18": "Penang",
        "__EMPTY_20": 9,
        "__EMPTY_21": "12 Lebuh Pantai",
        "__EMPTY_25": "Legacy Supplier Bhd",
        "Buyer": "C22222222010",
        "__EMPTY_32": "8 Jalan Dua",
        "__EMPTY_36": "Legacy Buyer Bhd",
    }
    row.update(overrides)
    return row


def make_line_row(line_id: Any = "1", quantity: Any = 1, amount: Any = 500, **overrides: Any) -> dict[str, Any]:
    row: dict[str, Any] = {
        "__EMPTY": "L",
        "InvoiceLine": line_id,
        "__EMPTY_70": quantity,
        "__EMPTY_72": amount,
        "__EMPTY_79": 6,
        "__EMPTY_80": "01",
    }
    row.update(overrides)
    return row


def make_footer_row(**overrides: Any) -> dict[str, Any]:
    row: dict[str, Any] = {
        "__EMPTY": "F",
        "LegalMonetaryTotal": 500,
        "__EMPTY_64": 500,
        "__EMPTY_65": 530,
        "__EMPTY_69": 530,
        "Invoice_TaxTotal": 30,
        "__EMPTY_79": 6,
    }
    row.update(overrides)
    return row


def with_metadata(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Prepend the two metadata rows (raw_data as uploaded)."""
    return [dict(r) for r in METADATA_ROWS] + list(rows)


def write_workbook(path: Path, rows: list[dict[str, Any]]) -> Path:
    """Write ``rows`` (metadata rows included) to a real .xlsx file.

    Column names go to the first sheet row. ``__EMPTY`` gets a blank header
    cell (read back as ``__EMPTY``) and ``__EMPTY_N`` is written as ``N``,
    which resolves to the same field.
    """
    columns: list[str] = []
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)
    header = ["" if c == "__EMPTY" else c.removeprefix("__EMPTY_") for c in columns]
    body = [[row.get(c) for c in columns] for row in rows]
    df = pd.DataFrame([header] + body)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Invoices", header=False, index=False)
    return path
