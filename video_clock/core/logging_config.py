"""Root logging setup for the video clock process."""

from __future__ import annotations

import contextlib
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
LOG_MAX_BYTES = 500 * 1024
LOG_BACKUP_COUNT = 2

LOG_LEVELS: dict[str, int] = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def configure_logging(
    level: str = "info",
    *,
    console: bool = True,
    log_file: Optional[Union[str, Path]] = None,
    suppressed_loggers: Iterable[str] = (),
) -> None:
    """Replace the root handlers with a stderr and/or rotating file handler.

    Args:
        level: One of ``LOG_LEVELS``.
        console: Emit to stderr, where the service supervisor collects it.
        log_file: Also write to this file, rotated at ``LOG_MAX_BYTES``.
        suppressed_loggers: Loggers raised to ERROR regardless of ``level``.

    Raises:
        ValueError: neither ``console`` nor ``log_file`` is given.
    """
    if not console and not log_file:
        raise ValueError("logging needs the console or a log file")

    numeric_level = LOG_LEVELS[level.lower()]
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        with contextlib.suppress(Exception):
            handler.close()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
    handlers: list[logging.Handler] = []

    if console:
        handlers.append(logging.StreamHandler(sys.stderr))

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            log_path,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        ))

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in suppressed_loggers:
        logging.getLogger(name).setLevel(logging.ERROR)


__all__ = ["configure_logging", "LOG_FORMAT", "LOG_DATEFMT", "LOG_LEVELS"]
