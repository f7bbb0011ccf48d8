from __future__ import annotations

import math
from datetime import date, datetime

import pytest

from einvoice_excel.mapping.conversions import (
    convert_excel_date,
    invoice_number_text,
    join_address_fragments,
    map_state_code,
    to_flag,
    to_number,
    to_text,
)


@pytest.mark.parametrize(
    ("serial", "expected"),
    [
        (1, "1900-01-01"),
        (59, "1900-02-28"),
        (60, "1900-03-01"),
        (61, "1900-03-01"),
        (45000, "2023-03-15"),
        (45000.75, "2023-03-15"),
        ("45000", "2023-03-15"),
    ],
)
def test_convert_excel_date_serials(serial, expected):
    assert convert_excel_date(serial) == expected


def test_convert_excel_date_other_inputs():
    assert convert_excel_date(None) is None
    assert convert_excel_date("") is None
    assert convert_excel_date("2024-01-31") == "2024-01-31"
    assert convert_excel_date(datetime(2024, 2, 1, 10, 0)) == "2024-02-01"
    assert convert_excel_date(date(2024, 2, 2)) == "2024-02-02"
    assert convert_excel_date("soon") == "soon"
    assert convert_excel_date(0) == "0"


def test_map_state_code():
    assert map_state_code(10) == "Sabah"
    assert map_state_code("14") == "Wilayah Persekutuan Kuala Lumpur"
    assert map_state_code(12.0) == "Selangor"
    assert map_state_code(17) == "Not Applicable"
    assert map_state_code(99) == "99"
    assert map_state_code(" Johor ") == "Johor"
    assert map_state_code(None) is None


def test_join_address_fragments_skips_blank_and_na():
    assert join_address_fragments(["No. 12, Jalan Besar", "", "Taman ABC"]) == "No. 12, Jalan Besar, Taman ABC"
    assert join_address_fragments(["NA", None, "null", "Lot 1"]) == "Lot 1"
    assert join_address_fragments([None, "", "NA"]) is None


def test_join_address_fragments_normalizes_commas_and_spaces():
    assert join_address_fragments(["Lot 1 ,, ,Jalan  Dua ,"]) == "Lot 1, Jalan Dua"
    assert join_address_fragments(["No. 12, Jalan Besar", ",Taman ABC"]) == "No. 12, Jalan Besar, Taman ABC"
    assert join_address_fragments([", ,", "Lot 1"]) == "Lot 1"


def test_to_text():
    assert to_text("  abc ") == "abc"
    assert to_text("NA") is None
    assert to_text("") is None
    assert to_text(math.nan) is None
    assert to_text(50480.0) == "50480"
    assert to_text(0) == "0"


def test_invoice_number_text_keeps_strings_verbatim():
    assert invoice_number_text(" INV 1 ") == " INV 1 "
    assert invoice_number_text(1001.0) == "1001"
    assert invoice_number_text(None) is None


def test_to_number():
    assert to_number(12) == 12.0
    assert to_number("1,234.50") == 1234.5
    assert to_number("abc") == 0.0
    assert to_number(None) == 0.0
    assert to_number(True) == 0.0
    assert to_number(math.inf) == 0.0
    assert to_number(math.nan) == 0.0


@pytest.mark.parametrize("value", [True, "true", "TRUE", 1, "1", 1.0])
def test_to_flag_true(value):
    assert to_flag(value) is True


@pytest.mark.parametrize("value", [False, "false", 0, "0", "yes", None, 2])
def test_to_flag_false(value):
    assert to_flag(value) is False
