from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from ..config.loader import ConfigError, load_config
from ..excel.reader import SheetReadError, read_workbook_rows
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, setup_logging
from ..models.config_models import MapperConfig
from ..services.batch_processor import BatchOptions, process_multiple_invoices
from ..services.progress import ProgressTracker
from ..services.row_validator import validate_excel_rows
from ..services.summary import RunTotals, render_summary_line

"""CLI entrypoint.

Flow per workbook:
- read the first sheet into raw rows
- batch process (or ``--validate-only``: row validation report only)
- write ``<stem>.result.json`` into ``--output-dir`` (stdout when omitted)

Then flush the JSON Lines error log and emit one SUMMARY line.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

CONFIG_ENV = "EINVOICE_CONFIG"


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv (EINVOICE_CONFIG etc.).

    失敗時は警告を出すのみで続行。
    """
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except OSError as e:  # pragma: no cover
        logging.getLogger(__name__).warning("failed to load .env via python-dotenv: %s", e)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="einvoice-excel",
        description="LHDN e-Invoice spreadsheet -> invoice documents",
    )
    p.add_argument("files", nargs="*", metavar="FILE", help="Workbook(s) to map (.xlsx)")
    p.add_argument("--config", type=Path, default=None, help=f"YAML config (default: ${CONFIG_ENV})")
    p.add_argument("--validate-only", action="store_true", help="Only run row validation")
    p.add_argument("--output-dir", type=Path, default=None, help="Directory for <stem>.result.json")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _config_path(args: argparse.Namespace) -> Path | None:
    if args.config is not None:
        return args.config
    env_value = os.getenv(CONFIG_ENV)
    return Path(env_value) if env_value else None


def _emit(payload: dict[str, Any], workbook: Path, output_dir: Path | None) -> None:
    text = json.dumps(payload, ensure_ascii=False, indent=2, default=str)
    if output_dir is None:
        print(text)
        return
    output_dir.mkdir(parents=True, exist_ok=True)
    (output_dir / f"{workbook.stem}.result.json").write_text(text + "\n", encoding="utf-8")


def _run_workbook(
    workbook: Path,
    cfg: MapperConfig,
    args: argparse.Namespace,
    error_log: ErrorLogBuffer,
    totals: RunTotals,
    logger: logging.Logger,
) -> tuple[int, int]:
    """Map one workbook; returns (invoices, failed) for the progress bar."""
    try:
        raw = read_workbook_rows(workbook)
    except SheetReadError as e:
        logger.error(f"read: {e}")
        totals.add(None)
        return 0, 0

    if args.validate_only:
        report = validate_excel_rows(raw, cfg)
        totals.add_report(report)
        logger.info(f"{workbook.name}: rows={report.total_rows} valid={report.valid_rows} invalid={report.invalid_rows}")
        _emit(report.to_dict(), workbook, args.output_dir)
        return 0, report.invalid_rows

    result = process_multiple_invoices(
        raw,
        BatchOptions(config=cfg, source=workbook.name, audit_sink=error_log),
    )
    totals.add(result)
    if result.error is not None:
        logger.error(f"{workbook.name}: {result.error}")
    else:
        logger.info(
            f"{workbook.name}: layout={result.layout.value} "
            f"processed={result.processed_invoices}/{result.total_invoices}"
        )
    _emit(result.to_dict(), workbook, args.output_dir)
    return result.total_invoices, result.failed_invoices


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む (テストで main([]) を呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        for h in logger.handlers:
            h.setLevel("DEBUG")
        logger.setLevel("DEBUG")
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(_config_path(args))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if not args.files:
        logger.error("no input workbooks given")
        return EXIT_FATAL

    workbooks = [Path(f) for f in args.files]
    error_log = ErrorLogBuffer(cfg.error_log_dir)
    totals = RunTotals()
    started = time.perf_counter()

    with ProgressTracker(len(workbooks)) as progress:
        for workbook in workbooks:
            progress.start_file(workbook)
            invoices, failed = _run_workbook(workbook, cfg, args, error_log, totals, logger)
            progress.finish_file(invoices=invoices, failed=failed)

    totals.elapsed_seconds = round(time.perf_counter() - started, 3)

    log_path = error_log.flush()
    if log_path is not None:
        logger.info(f"error log: {log_path}")

    # log_summary が "SUMMARY " を付けるので除く
    log_summary(render_summary_line(totals)[len("SUMMARY "):])

    if totals.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
