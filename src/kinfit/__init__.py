"""Kinfit: Simulate and fit biosensor (BLI/SPR) binding kinetics."""

import logging
from importlib.metadata import PackageNotFoundError, version
from logging.handlers import RotatingFileHandler
from pathlib import Path

try:
    __version__ = version("kinfit")
except PackageNotFoundError:
    __version__ = "unknown"

#: Console level by number of ``-v`` flags; more flags stay at DEBUG.
CONSOLE_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)
FILE_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)-20s : %(message)s"
CONSOLE_FORMAT = "[%(levelname)-8s]  %(message)s"


def configure_logging(
    verbose: int = 0, quiet: bool = False, log_file: str = "kinfit.log"
) -> None:
    """Centralized logging configuration for both library and CLI.

    Parameters
    ----------
    verbose : int
        Number of ``-v`` flags: 0 shows WARNING (default), 1 INFO, 2 or more
        DEBUG on the terminal.
    quiet : bool
        Show only ERROR messages on the terminal; overrides `verbose`.
    log_file : str
        Rotating log file receiving every record at DEBUG. Default
        "kinfit.log". An empty string disables it.

    Notes
    -----
    Calling it again reuses the handlers already attached to the root logger
    and only updates the terminal level.
    """
    if quiet:
        console_level = logging.ERROR
    else:
        console_level = CONSOLE_LEVELS[min(max(verbose, 0), len(CONSOLE_LEVELS) - 1)]
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # handlers filter

    if log_file:
        log_path = str(Path(log_file).resolve())
        same_file = (
            isinstance(h, RotatingFileHandler) and h.baseFilename == log_path
            for h in root_logger.handlers
        )
        if not any(same_file):
            file_handler = RotatingFileHandler(log_path, maxBytes=10**6, backupCount=3)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(
                logging.Formatter(fmt=FILE_FORMAT, datefmt="%Y-%m-%d %H:%M")
            )
            root_logger.addHandler(file_handler)

    # subclasses (file and pytest capture handlers) are not the terminal
    console = next(
        (h for h in root_logger.handlers if type(h) is logging.StreamHandler), None
    )
    if console is None:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT))
        root_logger.addHandler(console)
    console.setLevel(console_level)

    for name in logging.Logger.manager.loggerDict:
        if name.startswith("kinfit."):
            logging.getLogger(name).propagate = True
    logging.captureWarnings(True)
