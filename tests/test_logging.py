"""Test the package logging configuration."""

import logging
from collections.abc import Iterator
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from kinfit import configure_logging


@pytest.fixture
def root_logger() -> Iterator[logging.Logger]:
    """Root logger restored to its handlers and level after the test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for h in root.handlers:
        if h not in handlers:
            h.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _console(root: logging.Logger) -> logging.Handler:
    return next(h for h in root.handlers if type(h) is logging.StreamHandler)


@pytest.mark.parametrize(
    ("verbose", "quiet", "level"),
    [
        (0, False, logging.WARNING),
        (1, False, logging.INFO),
        (2, False, logging.DEBUG),
        (5, False, logging.DEBUG),
        (0, True, logging.ERROR),
        (2, True, logging.ERROR),
    ],
)
def test_console_level(
    root_logger: logging.Logger, verbose: int, quiet: bool, level: int
) -> None:
    """The -v count and quiet flag map to the terminal level."""
    configure_logging(verbose=verbose, quiet=quiet, log_file="")
    assert _console(root_logger).level == level
    assert root_logger.level == logging.DEBUG


def test_log_file(root_logger: logging.Logger, tmp_path: Path) -> None:
    """DEBUG records reach the log file, and repeated calls add no handlers."""
    log_f = tmp_path / "kinfit.log"
    configure_logging(log_file=str(log_f))
    configure_logging(verbose=1, log_file=str(log_f))
    file_handlers = [
        h for h in root_logger.handlers if isinstance(h, RotatingFileHandler)
    ]
    assert len(file_handlers) == 1
    consoles = [h for h in root_logger.handlers if type(h) is logging.StreamHandler]
    assert len(consoles) == 1
    assert consoles[0].level == logging.INFO
    logging.getLogger("kinfit.fitting.core").debug("initial guesses ready")
    file_handlers[0].flush()
    assert "initial guesses ready" in log_f.read_text()
