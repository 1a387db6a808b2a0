"""Logging setup for exontype.

All exontype modules log through children of the "exontype" logger, so
one call to :func:`setup_logging` controls the whole package. Console
output goes through rich unless plain output is requested; a log file,
when given, always receives debug detail.

Example:
    >>> from exontype.utils.logging import setup_logging, get_logger
    >>> setup_logging(verbosity=2)
    >>> logger = get_logger(__name__)
    >>> logger.info("Indexed 1,204 annotation records")
"""

import logging
import time
from pathlib import Path
from typing import Any

from rich.logging import RichHandler

PACKAGE_LOGGER = "exontype"

FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
PLAIN_FORMAT = "%(levelname)s %(name)s: %(message)s"

# Index = verbosity; values past either end are clamped
_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def log_level(verbosity: int) -> int:
    """Map a verbosity count (0=warning, 1=info, 2+=debug) to a level."""
    return _LEVELS[min(max(verbosity, 0), len(_LEVELS) - 1)]


def _console_handler(use_rich: bool) -> logging.Handler:
    if use_rich:
        # rich renders level and message itself
        return RichHandler(rich_tracebacks=True, show_time=False, show_path=False)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    return handler


def setup_logging(
    verbosity: int = 1,
    log_file: Path | str | None = None,
    use_rich: bool = True,
) -> logging.Logger:
    """Configure the package logger.

    Calling this again replaces the handlers from the previous call.

    Args:
        verbosity: 0 for warnings only, 1 for progress, 2 or more for
            per-stage detail such as hit counts and timings.
        log_file: Optional file that receives every debug message.
        use_rich: Use rich for console output.

    Returns:
        The "exontype" logger.
    """
    level = log_level(verbosity)
    logger = logging.getLogger(PACKAGE_LOGGER)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = _console_handler(use_rich)
    console.setLevel(level)
    logger.addHandler(console)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)
        # The logger must pass debug records through for the file
        level = logging.DEBUG

    logger.setLevel(level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module, normally called with __name__."""
    return logging.getLogger(name)


class Timer:
    """Context manager that logs how long a pipeline stage took.

    Example:
        >>> with Timer("Overlap search", logger) as timer:
        ...     hits = find_overlaps(queries, annotations)
        >>> timer.elapsed  # seconds
    """

    def __init__(
        self,
        description: str,
        logger: logging.Logger | None = None,
        level: int = logging.DEBUG,
    ) -> None:
        self.description = description
        self.logger = logger
        self.level = level
        self.start_time: float = 0
        self.elapsed: float = 0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        self.elapsed = time.perf_counter() - self.start_time
        if self.logger is not None:
            self.logger.log(
                self.level, f"{self.description} took {self.elapsed:.2f}s"
            )
