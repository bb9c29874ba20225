"""
Tests for logging configuration.
"""

import logging

import pytest

from pylsa.logger import TRACE, ColoredFormatter, get_logger, setup_logger


@pytest.fixture
def clean_logger():
    """A throwaway logger removed from the manager afterwards."""
    name = "pylsa.tests.scratch"
    yield name
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


class TestSetupLogger:
    """Test cases for setup_logger."""

    def test_levels(self, clean_logger):
        logger = setup_logger(clean_logger, level="debug", console=True)
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.DEBUG

    def test_trace_level(self, clean_logger):
        logger = setup_logger(clean_logger, level="TRACE")
        assert logger.level == TRACE == 5
        assert logging.getLevelName(5) == "TRACE"
        assert hasattr(logger, "trace")

    def test_trace_records(self, clean_logger, caplog):
        logger = get_logger(clean_logger)
        with caplog.at_level(TRACE, logger=clean_logger):
            logger.trace("state %d", 3)
        assert [r.levelname for r in caplog.records] == ["TRACE"]
        assert caplog.records[0].getMessage() == "state 3"

    def test_trace_filtered_at_debug(self, clean_logger, caplog):
        logger = get_logger(clean_logger)
        with caplog.at_level(logging.DEBUG, logger=clean_logger):
            logger.trace("hidden")
        assert caplog.records == []

    def test_repeated_setup_replaces_handlers(self, clean_logger):
        setup_logger(clean_logger)
        logger = setup_logger(clean_logger)
        assert len(logger.handlers) == 1

    def test_file_logging(self, clean_logger, tmp_path):
        log_file = tmp_path / "run.log"
        logger = setup_logger(clean_logger, level="INFO", log_file=str(log_file), console=False)
        logger.info("epoch solved")
        logger.debug("hidden")
        for handler in logger.handlers:
            handler.flush()

        text = log_file.read_text()
        assert "epoch solved" in text
        assert "hidden" not in text
        assert "\033[" not in text

    def test_unknown_level(self, clean_logger):
        with pytest.raises(ValueError):
            setup_logger(clean_logger, level="LOUD")

    def test_get_logger(self):
        assert get_logger("pylsa.gnss.batch") is logging.getLogger("pylsa.gnss.batch")


class TestColoredFormatter:
    """Test cases for the console formatter."""

    def test_colors_do_not_leak_to_record(self):
        record = logging.LogRecord("pylsa", logging.WARNING, __file__, 1, "msg", None, None)
        text = ColoredFormatter("%(levelname)s %(message)s").format(record)
        assert ColoredFormatter.COLORS["WARNING"] in text
        assert record.levelname == "WARNING"
