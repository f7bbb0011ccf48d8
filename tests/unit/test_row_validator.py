from __future__ import annotations

from conftest import make_footer_row, make_header_row, make_invoice_row, make_line_row, with_metadata

from einvoice_excel.mapping.layout_detector import detect_layout
from einvoice_excel.models.layout import SheetLayout
from einvoice_excel.services.row_validator import validate_excel_rows, validate_rows


def test_valid_invoice_rows():
    rows = [make_invoice_row("INV001"), make_invoice_row("INV002")]
    report = validate_rows(rows, SheetLayout.INVOICE_BASED)
    assert report.total_rows == 2
    assert report.valid_rows == 2
    assert report.invalid_rows == 0
    assert report.summary["INVOICE"] == 2
    assert report.logical_validation.is_valid
    assert report.logical_validation.invoice_count == 2
    assert [d.row_number for d in report.row_details] == [4, 5]
    assert report.row_details[0].invoice_number == "INV001"


def test_party_id_format_errors():
    row = make_invoice_row(__EMPTY_15="c-123", __EMPTY_20="W10-18-1", __EMPTY_34="NA")
    report = validate_rows([row], SheetLayout.INVOICE_BASED)
    errors = report.row_details[0].errors
    assert "Invalid Supplier TIN format: c-123" in errors
    assert "Invalid Supplier SST format: W10-18-1" in errors
    # NA / 空は検査しない
    assert not any("Buyer TIN" in e for e in errors)
    assert report.invalid_rows == 1
    assert report.summary["invalid"] == 1


def test_missing_required_fields():
    row = make_invoice_row(__EMPTY_31=None, __EMPTY_49="", __EMPTY_5="NA", LegalMonetaryTotal=None)
    errors = validate_rows([row], SheetLayout.INVOICE_BASED).row_details[0].errors
    assert errors == [
        "Missing required field: Supplier Name",
        "Missing required field: Buyer Name",
        "Missing required field: Currency",
        "Missing required field: Line Extension Amount",
    ]


def test_non_invoice_rows_in_invoice_based_sheet():
    rows = [
        {"__EMPTY": "H"},
        {"Invoice": "NA"},
        {"Other": 1},
    ]
    report = validate_rows(rows, SheetLayout.INVOICE_BASED)
    assert report.row_details[0].errors == ["Invalid row type: H. Expected: INVOICE (valid invoice number)"]
    assert report.row_details[1].errors == ["Invalid invoice number: NA"]
    assert report.row_details[2].errors == ["Missing invoice identifier"]
    assert not report.logical_validation.is_valid
    assert report.errors[0].startswith("Row 4: ")


def test_legacy_rows():
    rows = [make_header_row(), make_line_row(), make_footer_row(), {"__EMPTY": "X"}, {"Other": 1}]
    report = validate_rows(rows, SheetLayout.LEGACY_HEADER_LINE_FOOTER)
    assert report.summary == {"INVOICE": 0, "H": 1, "L": 1, "F": 1, "invalid": 2}
    assert report.row_details[3].errors == ["Invalid row identifier: X. Expected: H, L, or F"]
    assert report.row_details[4].errors == ["Missing row identifier"]
    logical = report.logical_validation
    assert logical.is_valid and logical.has_header and logical.has_lines and logical.has_footer


def test_legacy_without_footer_is_logically_invalid():
    report = validate_rows([make_header_row(), make_line_row()], SheetLayout.LEGACY_HEADER_LINE_FOOTER)
    assert report.valid_rows == 2
    assert not report.logical_validation.is_valid
    assert not report.logical_validation.has_footer


def test_unknown_layout():
    rows = [{"Foo": 1}]
    report = validate_rows(rows, detect_layout(rows))
    assert report.structure is SheetLayout.UNKNOWN
    assert not report.logical_validation.is_valid
    assert report.logical_validation.error == "Unable to determine Excel structure type"


def test_validate_excel_rows_skips_metadata_rows():
    report = validate_excel_rows(with_metadata([make_invoice_row("INV001")]))
    assert report.total_rows == 1
    assert report.structure is SheetLayout.INVOICE_BASED
    assert report.row_details[0].row_number == 4
    data = report.to_dict()
    assert data["structure"] == "NEW_INVOICE_BASED"
    assert data["logicalValidation"] == {
        "structure": "NEW_INVOICE_BASED",
        "isValid": True,
        "hasInvoices": True,
        "invoiceCount": 1,
    }
