from __future__ import annotations

import logging
from io import StringIO

from einvoice_excel.logging import init as log_init
from einvoice_excel.logging.init import LabeledFormatter, SUMMARY_LEVEL, get_logger, log_summary, setup_logging


def test_setup_logging_configures_package_logger():
    logger = setup_logging()
    assert logger.name == "einvoice_excel"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_setup_logging_is_idempotent():
    first = setup_logging()
    second = setup_logging(debug=True)
    assert first is second
    assert len(second.handlers) == 1


def test_debug_level():
    logger = setup_logging(debug=True)
    assert logger.level == logging.DEBUG


def test_labeled_prefixes():
    stream = StringIO()
    logger = logging.getLogger("test_einvoice_labels")
    logger.setLevel(logging.INFO)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    handler = logging.StreamHandler(stream)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    logger.info("info message")
    logger.warning("warn message")
    logger.error("error message")
    logger.log(SUMMARY_LEVEL, "files=1")

    lines = stream.getvalue().splitlines()
    assert lines == ["INFO info message", "WARN warn message", "ERROR error message", "SUMMARY files=1"]


def test_module_loggers_reach_package_handler(capsys):
    setup_logging()
    logging.getLogger("einvoice_excel.services.batch_processor").warning("row skipped")
    log_summary("files=0")
    out = capsys.readouterr().out
    assert "WARN row skipped" in out
    assert "SUMMARY files=0" in out


def test_get_logger_sets_up_on_first_use():
    assert log_init._logger is None
    logger = get_logger()
    assert log_init._logger is logger
