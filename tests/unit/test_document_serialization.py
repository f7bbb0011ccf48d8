from __future__ import annotations

from conftest import make_invoice_row

from einvoice_excel.models.document import NOT_APPLICABLE, to_wire
from einvoice_excel.models.layout import SheetLayout
from einvoice_excel.services.document_builder import DocumentBuilder


def test_document_to_dict_camel_case_and_na(fixed_clock):
    doc = DocumentBuilder(SheetLayout.INVOICE_BASED, clock=fixed_clock).build(make_invoice_row())
    data = doc.to_dict()
    assert set(data) == {
        "header",
        "supplier",
        "buyer",
        "delivery",
        "items",
        "summary",
        "allowanceCharge",
        "payment",
        "sourceRow",
    }
    header = data["header"]
    assert header["documentCurrencyCode"] == "MYR"
    assert header["documentReference"]["uuid"] == NOT_APPLICABLE
    supplier = data["supplier"]
    assert supplier["identifications"][3] == {"id": "NA", "schemeType": "TTX"}
    assert supplier["address"]["countryListId"] == "NA"
    assert data["items"][0]["taxSubtotal"]["category"]["taxScheme"]["schemeAgencyId"] == "6"
    # 数値は NA にならない
    assert data["payment"]["prepaidPayment"]["amount"] == 0.0
    assert data["summary"]["amounts"]["payableAmount"] == 1060.0


def test_to_wire_plain_values():
    assert to_wire({"a": [1, None]}) == {"a": [1, None]}
    assert to_wire("x") == "x"
