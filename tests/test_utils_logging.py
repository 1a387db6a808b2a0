"""Tests for logging utilities."""

import logging

import pytest
from rich.logging import RichHandler

from exontype.utils.logging import Timer, get_logger, log_level, setup_logging


@pytest.fixture
def package_logger():
    """Yield the package logger and close its handlers afterwards."""
    logger = logging.getLogger("exontype")
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


# =============================================================================
# Verbosity
# =============================================================================


class TestLogLevel:
    """Tests for log_level."""

    @pytest.mark.parametrize(
        "verbosity,expected",
        [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG)],
    )
    def test_levels(self, verbosity, expected):
        assert log_level(verbosity) == expected

    def test_clamped(self):
        """Out-of-range verbosity maps to the nearest level."""
        assert log_level(-3) == logging.WARNING
        assert log_level(7) == logging.DEBUG


# =============================================================================
# setup_logging
# =============================================================================


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_rich_handler(self, package_logger):
        logger = setup_logging(verbosity=2)
        assert logger is package_logger
        assert logger.level == logging.DEBUG
        assert isinstance(logger.handlers[0], RichHandler)

    def test_plain_handler(self, package_logger):
        logger = setup_logging(verbosity=0, use_rich=False)
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert not isinstance(logger.handlers[0], RichHandler)

    def test_repeat_call_replaces_handlers(self, package_logger):
        """Handlers do not pile up across calls."""
        setup_logging(verbosity=1, use_rich=False)
        logger = setup_logging(verbosity=1, use_rich=False)
        assert len(logger.handlers) == 1

    def test_log_file_gets_debug(self, package_logger, tmp_path):
        """The file receives debug messages the console filters out."""
        log_file = tmp_path / "exontype.log"
        logger = setup_logging(verbosity=0, log_file=log_file, use_rich=False)
        assert logger.handlers[0].level == logging.WARNING

        get_logger("exontype.annotate.overlaps").debug("Found 12 overlaps")
        for handler in logger.handlers:
            handler.flush()

        text = log_file.read_text()
        assert "Found 12 overlaps" in text
        assert "exontype.annotate.overlaps" in text


# =============================================================================
# Timer
# =============================================================================


class TestTimer:
    """Tests for Timer."""

    def test_records_elapsed(self):
        with Timer("work") as timer:
            pass
        assert timer.elapsed >= 0

    def test_logs_duration(self, caplog):
        logger = logging.getLogger("exontype.timer_test")
        with caplog.at_level(logging.DEBUG, logger="exontype.timer_test"):
            with Timer("Overlap search", logger):
                pass
        assert "Overlap search took" in caplog.text
