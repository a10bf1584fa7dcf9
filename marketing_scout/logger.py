"""Project-wide logging configuration for **MarketingScout**.

Highlights
----------
* Unified format for console and optional file output (with rotation).
* Single, importable instance :data:`logger` - simply::

      from marketing_scout.logger import logger
      logger.info("Crawl started")
* Re-configurable at runtime via :func:`configure`.
* :func:`capture_logs` keeps a copy of every formatted line in memory, used to
  e-mail the crawl log once the run is over.

The handler builders and :func:`configure` are the generic console/file setup;
:class:`BufferHandler` and :func:`capture_logs` exist for the e-mailed crawl log.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Union

# --------------------------------------------------------------------------- #
# Constants & basic types                                                     #
# --------------------------------------------------------------------------- #

_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_LOGGER_NAME: Final[str] = "MarketingScout"

_LevelT = Union[int, str]


# --------------------------------------------------------------------------- #
# Helper builders                                                             #
# --------------------------------------------------------------------------- #


def _stdout_handler(fmt: str) -> logging.StreamHandler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _file_handler(file: Path | str, fmt: str) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=str(file),
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt))
    return handler


class BufferHandler(logging.Handler):
    """Keeps formatted log lines in memory."""

    def __init__(self, fmt: str = _DEFAULT_FORMAT) -> None:
        super().__init__()
        self.lines: List[str] = []
        self.setFormatter(logging.Formatter(fmt))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.lines.append(self.format(record))
        except Exception:
            self.handleError(record)

    def text(self) -> str:
        return "\n".join(self.lines)


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """(Re)configure the global project logger.

    Parameters
    ----------
    level
        Numeric or textual logging level (e.g. ``"DEBUG"``).
    log_file
        Path to a logfile. *None* - console-only output.
    log_format
        Format string for :class:`logging.Formatter`.
    replace_handlers
        *True* - remove existing handlers; *False* - just append new one(s).
    """
    lg = logging.getLogger(_LOGGER_NAME)
    lg.setLevel(level)

    if replace_handlers:
        lg.handlers.clear()

    lg.addHandler(_stdout_handler(log_format))

    if log_file is not None:
        lg.addHandler(_file_handler(log_file, log_format))

    lg.propagate = False
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    """Shortcut used by the CLI: replace handlers and configure in one call."""
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


def capture_logs(log_format: str = _DEFAULT_FORMAT) -> BufferHandler:
    """Attach a :class:`BufferHandler` to the project logger and return it."""
    handler = BufferHandler(log_format)
    logging.getLogger(_LOGGER_NAME).addHandler(handler)
    return handler


# --------------------------------------------------------------------------- #
# Ready-to-use instance                                                       #
# --------------------------------------------------------------------------- #

logger: logging.Logger = configure()

__all__ = ["logger", "configure", "init_logging", "capture_logs", "BufferHandler"]
