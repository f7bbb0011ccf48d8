from __future__ import annotations

from pathlib import Path

from conftest import make_invoice_row, with_metadata, write_workbook

from einvoice_excel.cli.__main__ import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL, main as cli_main

"""Exit code contract: 0 all workbooks ok / 2 some failed / 1 fatal."""


def _book(temp_workdir: Path, name: str, rows) -> str:
    return str(write_workbook(temp_workdir / "data" / name, with_metadata(rows)))


def test_exit_code_fatal_bad_config(temp_workdir: Path, capsys):
    bad = temp_workdir / "config" / "bad.yml"
    bad.write_text("unknown_key: 1\n", encoding="utf-8")
    book = _book(temp_workdir, "a.xlsx", [make_invoice_row()])
    code = cli_main([book, "--config", str(bad), "--output-dir", "out"])
    assert code == EXIT_FATAL == 1
    assert "ERROR config:" in capsys.readouterr().out


def test_exit_code_fatal_no_input(temp_workdir: Path, capsys):
    code = cli_main([])
    assert code == EXIT_FATAL
    assert "ERROR no input workbooks given" in capsys.readouterr().out


def test_exit_code_all_success(temp_workdir: Path, write_config: Path):
    book = _book(temp_workdir, "a.xlsx", [make_invoice_row("INV001")])
    code = cli_main([book, "--config", str(write_config), "--output-dir", "out"])
    assert code == EXIT_SUCCESS_ALL == 0


def test_exit_code_partial_failure(temp_workdir: Path, write_config: Path):
    good = _book(temp_workdir, "good.xlsx", [make_invoice_row("INV001")])
    missing = str(temp_workdir / "data" / "missing.xlsx")
    code = cli_main([good, missing, "--config", str(write_config), "--output-dir", "out"])
    assert code == EXIT_PARTIAL_FAILURE == 2


def test_exit_code_unknown_layout_is_failure(temp_workdir: Path, write_config: Path):
    book = _book(temp_workdir, "odd.xlsx", [{"Foo": "bar"}])
    code = cli_main([book, "--config", str(write_config), "--output-dir", "out"])
    assert code == EXIT_PARTIAL_FAILURE
