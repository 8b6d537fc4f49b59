"""
Logging setup for easy-vibe.

The console handler writes to stderr so ``list --json`` output on stdout stays
parseable. A log file, when given, records every DEBUG line, including the
version flags and registry strategies that were skipped.
"""

import logging
import sys
from pathlib import Path
from typing import Optional


LOGGER_NAME = "easy_vibe"

CONSOLE_FORMAT = "%(level_tag)s %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_logger: Optional[logging.Logger] = None


def _console_level(level: str, verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return getattr(logging, level.upper())


def _file_handler(log_file: str) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    verbose: bool = False,
    quiet: bool = False,
    propagate: bool = False,
) -> logging.Logger:
    """
    Configure the ``easy_vibe`` logger, replacing any earlier handlers.

    ``verbose`` wins over ``quiet``; ``quiet`` drops the console handler.
    """
    global _logger

    console_level = _console_level(level, verbose, quiet)
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(console_level)

    if not quiet:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(console_level)
        handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, use_colors=sys.stderr.isatty()))
        logger.addHandler(handler)

    if log_file:
        logger.addHandler(_file_handler(log_file))
        logger.setLevel(logging.DEBUG)

    logger.propagate = propagate
    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """Return the configured logger, setting up defaults on first use."""
    global _logger
    if _logger is None:
        _logger = setup_logging()
    return _logger


class ColoredFormatter(logging.Formatter):
    """Adds a ``level_tag`` field: the level name, coloured on a terminal."""

    LEVEL_STYLES = {
        "DEBUG": ("\033[36m", "🔍"),
        "INFO": ("\033[32m", "✓"),
        "WARNING": ("\033[33m", "⚠️"),
        "ERROR": ("\033[31m", "✗"),
        "CRITICAL": ("\033[1;31m", "🚨"),
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str, use_colors: bool = True):
        super().__init__(fmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        name = record.levelname
        if self.use_colors and name in self.LEVEL_STYLES:
            color, symbol = self.LEVEL_STYLES[name]
            record.level_tag = f"{color}{symbol} {name}{self.RESET}"
        else:
            record.level_tag = name
        return super().format(record)
