# === FILE: site_harvest/logger.py ===
"""Logging setup for **SiteHarvest**.

One project logger, ``SiteHarvest``, shared by every module::

    from site_harvest.logger import logger
    logger.info("Crawling: %s", url)

The CLI calls :func:`init_logging` once per run to pick the level, the format
and an optional rotating log file. Child loggers from :func:`get_logger`
inherit those handlers.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Sequence, Union

LOGGER_NAME: Final[str] = "SiteHarvest"
DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LEVELS: Final[Sequence[str]] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
_LOG_FILE_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]


def _build_handlers(log_format: str, log_file: str | Path | None) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(
                filename=str(log_file),
                maxBytes=_LOG_FILE_MAX_BYTES,
                backupCount=_LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    formatter = logging.Formatter(log_format)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """(Re)configure the project logger.

    Parameters
    ----------
    level
        Numeric or textual logging level (e.g. ``"DEBUG"``).
    log_file
        Path to a rotating logfile. *None* → console only.
    log_format
        Format string for :class:`logging.Formatter`.
    replace_handlers
        *True* – drop handlers installed earlier; *False* – add to them.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    if replace_handlers:
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()
    for handler in _build_handlers(log_format, log_file):
        lg.addHandler(handler)
    lg.propagate = False
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Entry used by the CLI: fresh handlers at *level*."""
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


def get_logger(suffix: str) -> logging.Logger:
    """Child of the project logger, e.g. ``get_logger("fetcher")`` → ``SiteHarvest.fetcher``."""
    return logging.getLogger(f"{LOGGER_NAME}.{suffix}")


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "get_logger", "LEVELS", "LOGGER_NAME"]
