"""Logger helpers shared by the raspicam modules."""

from __future__ import annotations

import logging
from typing import Optional, Union

LOGGER_NAMESPACE = "raspicam"
DEFAULT_COMPONENT = "Camera"


def _normalize_logger_name(name: Optional[str]) -> str:
    if not name:
        return LOGGER_NAMESPACE
    if name.startswith(LOGGER_NAMESPACE):
        return name
    return f"{LOGGER_NAMESPACE}.{name}"


def _derive_component(name: str) -> str:
    if not name:
        return DEFAULT_COMPONENT
    if name.startswith(LOGGER_NAMESPACE):
        suffix = name[len(LOGGER_NAMESPACE):].lstrip(".")
        return suffix.rsplit(".", 1)[-1] if suffix else DEFAULT_COMPONENT
    return name


class StructuredLogger:
    """Wraps a stdlib logger and tags every message with ``[Component]``."""

    __slots__ = ("_logger", "_component")

    def __init__(self, logger: logging.Logger, component: Optional[str] = None) -> None:
        self._logger = logger
        self._component = component or _derive_component(logger.name)

    def __getattr__(self, item):
        return getattr(self._logger, item)

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"StructuredLogger({self._logger!r}, component={self._component!r})"

    @property
    def name(self) -> str:
        return self._logger.name

    @property
    def component(self) -> str:
        return self._component

    def _compose(self, message: object, args: tuple) -> str:
        text = str(message)
        if args:
            try:
                text = text % args
            except (TypeError, ValueError):
                text = f"{text} | args={' '.join(str(arg) for arg in args)}"
        prefix = f"[{self._component}]"
        if not text.startswith(prefix):
            text = f"{prefix} {text}"
        return text

    def log(self, level: int, message: object, *args, **kwargs) -> None:
        self._logger.log(level, self._compose(message, args), **kwargs)

    def debug(self, message: object, *args, **kwargs) -> None:
        self.log(logging.DEBUG, message, *args, **kwargs)

    def info(self, message: object, *args, **kwargs) -> None:
        self.log(logging.INFO, message, *args, **kwargs)

    def warning(self, message: object, *args, **kwargs) -> None:
        self.log(logging.WARNING, message, *args, **kwargs)

    def error(self, message: object, *args, **kwargs) -> None:
        self.log(logging.ERROR, message, *args, **kwargs)


LoggerLike = Union[StructuredLogger, logging.Logger, logging.LoggerAdapter, None]


def ensure_structured_logger(
    logger: LoggerLike,
    *,
    component: Optional[str] = None,
    fallback_name: Optional[str] = None,
) -> StructuredLogger:
    """Return a StructuredLogger wrapping ``logger`` (or a new module logger)."""

    if isinstance(logger, StructuredLogger):
        return logger
    if isinstance(logger, logging.LoggerAdapter):
        return StructuredLogger(logger.logger, component=component)
    if isinstance(logger, logging.Logger):
        return StructuredLogger(logger, component=component)
    return get_module_logger(fallback_name)


def get_module_logger(name: Optional[str] = None) -> StructuredLogger:
    """Return a structured logger scoped to the raspicam namespace."""
    return StructuredLogger(logging.getLogger(_normalize_logger_name(name)))


__all__ = [
    "LoggerLike",
    "StructuredLogger",
    "ensure_structured_logger",
    "get_module_logger",
]
