"""
Logging for analysis-trend.

Everything logs below the ``analysis_trend`` logger. ``setup_logging``
attaches a rich stderr handler (and optionally a plain file handler) to
that logger only, so embedding applications keep their own root
configuration. Calling it again replaces the handlers it installed
earlier instead of stacking them, which matters when the CLI runs
several times in one process.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "analysis_trend"

LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_INSTALLED = "_analysis_trend_handler"


def setup_logging(verbosity: str = "normal", log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        verbosity: One of ``quiet``, ``normal`` or ``verbose``
        log_file: Optional file path that receives every record at the chosen level

    Returns:
        The configured ``analysis_trend`` logger
    """
    if verbosity not in LEVELS:
        raise ValueError(f"Unknown verbosity {verbosity!r}, expected one of {', '.join(LEVELS)}")
    level = LEVELS[verbosity]
    verbose = verbosity == "verbose"

    logger = logging.getLogger(ROOT_LOGGER)
    for handler in [h for h in logger.handlers if getattr(h, _INSTALLED, False)]:
        logger.removeHandler(handler)
        handler.close()

    # Rich markup stays off: messages carry file paths and issue text verbatim.
    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,
            show_time=True,
            show_path=verbose,
        )
    ]
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)

    for handler in handlers:
        setattr(handler, _INSTALLED, True)
        handler.setLevel(level)
        logger.addHandler(handler)

    logger.setLevel(level)
    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the package logger, or a child of it for ``name``.

    Names outside the package (``"cli"``) are nested under it
    (``"analysis_trend.cli"``).
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER)
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
