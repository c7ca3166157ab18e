"""Logging configuration for lineqpp.

Two audiences read the ``lineqpp`` loggers: the CLI, which installs
structured handlers through ``setup_logging``, and library callers who
ask for a verbose run without configuring logging at all. The latter get
a temporary message-only handler from ``verbose_output``.
"""

import logging
import sys
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional, TextIO

ROOT_LOGGER = "lineqpp"
# Equation and form reports are INFO records on this logger
ENGINE_LOGGER = f"{ROOT_LOGGER}.engine"


class StructuredFormatter(logging.Formatter):
    """Formatter that outputs structured log entries with timestamp, module, level, and message."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).isoformat()
        return f"{timestamp} [{record.levelname}] {record.name}: {record.getMessage()}"


def setup_logging(
    level: str = "WARNING", log_file: Optional[str] = None
) -> logging.Logger:
    """Set up structured logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path to write logs (if None, logs to stderr)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    # Remove existing handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(StructuredFormatter())
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    return logger


@contextmanager
def verbose_output(stream: Optional[TextIO] = None) -> Iterator[None]:
    """Route engine reports to ``stream`` (default stderr) for one run.

    Does nothing when ``setup_logging`` already configured the package
    loggers, so CLI runs are not reported twice. Logger state is
    restored on exit.
    """
    if logging.getLogger(ROOT_LOGGER).handlers:
        yield
        return

    engine_logger = logging.getLogger(ENGINE_LOGGER)
    handler = logging.StreamHandler(sys.stderr if stream is None else stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    saved_level, saved_propagate = engine_logger.level, engine_logger.propagate
    engine_logger.addHandler(handler)
    engine_logger.setLevel(logging.INFO)
    engine_logger.propagate = False
    try:
        yield
    finally:
        engine_logger.removeHandler(handler)
        engine_logger.setLevel(saved_level)
        engine_logger.propagate = saved_propagate


def get_logger(name: str = "lineqpp") -> logging.Logger:
    """Get a logger instance for a module.

    Args:
        name: Logger name (typically module name)

    Returns:
        Logger instance
    """
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
