"""Root logging setup for raspicam entry points."""

from __future__ import annotations

import contextlib
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
_DEFAULT_MAX_BYTES = 256 * 1024
_DEFAULT_BACKUP_COUNT = 2

_configured = False


def _coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        name = level.upper()
        numeric = logging.getLevelName(name)
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level '{level}'")
        return numeric
    return int(level)


def _drop_handlers(root: logging.Logger) -> None:
    for handler in list(root.handlers):
        root.removeHandler(handler)
        with contextlib.suppress(Exception):
            handler.close()


def configure_logging(
    level: Union[int, str] = logging.INFO,
    *,
    force: bool = False,
    console: bool = True,
    log_file: Optional[Union[str, Path]] = None,
    max_bytes: int = _DEFAULT_MAX_BYTES,
    backup_count: int = _DEFAULT_BACKUP_COUNT,
    quiet_loggers: Iterable[str] = ("asyncio",),
) -> None:
    """Install the console and file handlers on the root logger.

    Console output goes to stderr so stdout stays free for capture results.
    A second call only adjusts the level unless ``force`` is set.

    Args:
        level: Logging level as an int or a name such as "debug".
        force: Rebuild handlers even when logging is already configured.
        console: Attach a stderr stream handler.
        log_file: Optional path for a rotating file handler.
        max_bytes: Size at which the log file rotates.
        backup_count: Rotated files to keep.
        quiet_loggers: Loggers clamped to WARNING.
    """

    global _configured
    numeric_level = _coerce_level(level)
    root = logging.getLogger()

    if _configured and not force:
        root.setLevel(numeric_level)
        return

    _drop_handlers(root)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    if console:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(formatter)
        root.addHandler(stream_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    if not root.handlers:
        root.addHandler(logging.NullHandler())

    root.setLevel(numeric_level)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True


__all__ = ["configure_logging", "LOG_FORMAT", "LOG_DATEFMT"]
