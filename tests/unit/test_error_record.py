from __future__ import annotations

import json

import pytest

from einvoice_excel.models.error_record import ERROR_TYPES, ErrorRecord, utc_timestamp


def test_create_and_json_line():
    rec = ErrorRecord.create("book.xlsx", 7, "FIELD_FORMAT_WARNING", "Invalid Supplier TIN format: x", "INV7")
    data = json.loads(rec.to_json_line())
    assert data["source"] == "book.xlsx"
    assert data["row"] == 7
    assert data["invoice_no"] == "INV7"
    assert data["timestamp"].endswith("Z")
    assert list(data.keys()) == ["timestamp", "source", "row", "error_type", "message", "invoice_no"]


def test_unknown_error_type_rejected():
    with pytest.raises(ValueError, match="unknown error_type"):
        ErrorRecord.create("book.xlsx", 1, "CONSTRAINT_VIOLATION", "nope")


def test_error_types():
    assert ERROR_TYPES == {
        "LAYOUT_INDETERMINATE",
        "DOCUMENT_BUILD_FAILURE",
        "FIELD_FORMAT_WARNING",
        "DUPLICATE_INVOICE",
    }


def test_non_ascii_message_kept():
    rec = ErrorRecord.create("請求書.xlsx", 1, "DUPLICATE_INVOICE", "重複")
    assert "請求書.xlsx" in rec.to_json_line()


def test_utc_timestamp_suffix():
    assert utc_timestamp().endswith("Z")
