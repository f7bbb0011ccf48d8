from __future__ import annotations

import re
from pathlib import Path

from conftest import make_invoice_row, with_metadata, write_workbook

from einvoice_excel.cli.__main__ import main as cli_main

SUMMARY_RE = re.compile(
    r"^SUMMARY files=(\d+) success=(\d+) failed=(\d+) invoices=(\d+) processed=(\d+) "
    r"failed_invoices=(\d+) elapsed_sec=(\d+(?:\.\d+)?)$"
)


def _summary_line(out: str) -> str:
    lines = [line for line in out.splitlines() if line.startswith("SUMMARY ")]
    assert len(lines) == 1
    return lines[0]


def test_summary_line_format(temp_workdir: Path, write_config: Path, capsys):
    rows = [make_invoice_row("INV001"), make_invoice_row("NA"), make_invoice_row("INV003")]
    book = write_workbook(temp_workdir / "data" / "a.xlsx", with_metadata(rows))
    cli_main([str(book), "--config", str(write_config), "--output-dir", "out"])
    m = SUMMARY_RE.match(_summary_line(capsys.readouterr().out))
    assert m is not None
    assert m.groups()[:6] == ("1", "1", "0", "3", "2", "1")


def test_summary_line_validate_only(temp_workdir: Path, write_config: Path, capsys):
    book = write_workbook(temp_workdir / "data" / "a.xlsx", with_metadata([make_invoice_row("INV001")]))
    cli_main([str(book), "--config", str(write_config), "--validate-only", "--output-dir", "out"])
    m = SUMMARY_RE.match(_summary_line(capsys.readouterr().out))
    assert m is not None
    assert m.groups()[:6] == ("1", "1", "0", "0", "0", "0")
