"""
Tests for logging configuration.
"""

import logging

import pytest

from market_bias.logging_config import ColoredFormatter, get_logger, log_exception, setup_logging


@pytest.fixture
def named_logger():
    name = "market_bias.tests.logging"
    yield name
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


class TestSetupLogging:
    def test_console_handler_and_level(self, named_logger):
        logger = setup_logging(named_logger, level="debug")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_repeated_setup_does_not_duplicate_handlers(self, named_logger):
        setup_logging(named_logger)
        logger = setup_logging(named_logger)
        assert len(logger.handlers) == 1

    def test_unknown_level_falls_back_to_info(self, named_logger):
        assert setup_logging(named_logger, level="chatty").level == logging.INFO

    def test_file_output(self, named_logger, tmp_path):
        log_file = tmp_path / "logs" / "bias.log"
        logger = setup_logging(named_logger, log_file=str(log_file), console=False)
        logger.info("analysis complete")
        for handler in logger.handlers:
            handler.flush()
        assert "analysis complete" in log_file.read_text()

    def test_json_format(self, named_logger, tmp_path):
        log_file = tmp_path / "bias.jsonl"
        logger = setup_logging(named_logger, log_file=str(log_file), console=False, json_format=True, rotation=False)
        logger.warning("fallback used")
        for handler in logger.handlers:
            handler.flush()
        line = log_file.read_text().strip()
        assert line.startswith("{") and '"level": "WARNING"' in line

    def test_log_exception_includes_traceback(self, named_logger, tmp_path):
        log_file = tmp_path / "errors.log"
        logger = setup_logging(named_logger, log_file=str(log_file), console=False)
        try:
            raise ValueError("bad candle")
        except ValueError as e:
            log_exception(logger, e, "Parsing failed")
        for handler in logger.handlers:
            handler.flush()
        content = log_file.read_text()
        assert "Parsing failed: bad candle" in content
        assert "Traceback" in content


def test_colored_formatter_restores_levelname():
    record = logging.LogRecord("x", logging.ERROR, __file__, 1, "boom", None, None)
    output = ColoredFormatter("%(levelname)s %(message)s").format(record)
    assert "\033[31m" in output
    assert record.levelname == "ERROR"


def test_get_logger_returns_named_logger():
    assert get_logger("market_bias.engines").name == "market_bias.engines"
