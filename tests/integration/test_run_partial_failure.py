from __future__ import annotations

import json
from pathlib import Path

from conftest import make_invoice_row, with_metadata, write_workbook

from einvoice_excel.cli.__main__ import main as cli_main


def test_broken_workbook_does_not_stop_run(temp_workdir: Path, write_config: Path, capsys):
    good = write_workbook(temp_workdir / "data" / "good.xlsx", with_metadata([make_invoice_row("INV001")]))
    broken = temp_workdir / "data" / "broken.xlsx"
    broken.write_bytes(b"")
    odd = write_workbook(temp_workdir / "data" / "odd.xlsx", with_metadata([{"Foo": "bar"}]))

    code = cli_main([str(broken), str(good), str(odd), "--config", str(write_config), "--output-dir", "out"])
    assert code == 2

    out = capsys.readouterr().out
    assert "ERROR read: cannot read broken.xlsx" in out
    assert "ERROR odd.xlsx: Unable to determine Excel structure type" in out
    assert "SUMMARY files=3 success=1 failed=2" in out

    assert (temp_workdir / "out" / "good.result.json").exists()
    odd_result = json.loads((temp_workdir / "out" / "odd.result.json").read_text(encoding="utf-8"))
    assert odd_result["success"] is False
    assert odd_result["error"] == "Unable to determine Excel structure type"
    assert not (temp_workdir / "out" / "broken.result.json").exists()


def test_failed_invoices_inside_workbook(temp_workdir: Path, write_config: Path, capsys):
    rows = [make_invoice_row(f"INV00{i}") for i in range(1, 5)] + [make_invoice_row("NA")]
    book = write_workbook(temp_workdir / "data" / "five.xlsx", with_metadata(rows))
    code = cli_main([str(book), "--config", str(write_config), "--output-dir", "out"])
    # ワークブック自体は成功扱い
    assert code == 0
    result = json.loads((temp_workdir / "out" / "five.result.json").read_text(encoding="utf-8"))
    assert result["totalInvoices"] == 5
    assert result["processedInvoices"] == 4
    assert result["failedInvoices"] == 1
    assert "Processing success rate: 80.0%" in result["validation"]["warnings"]
