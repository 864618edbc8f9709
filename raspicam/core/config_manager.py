"""Plain-text ``key = value`` configuration files."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

import aiofiles

from .logging_utils import get_module_logger

logger = get_module_logger("ConfigManager")

_TRUE_WORDS = ('true', '1', 'yes', 'on')
_SWITCH_WORDS = ('true', 'yes', 'on')


class ConfigManager:
    """Reads camera settings files.

    The format is one ``key = value`` pair per line. Blank lines and lines
    starting with ``#`` are skipped. A value in single or double quotes is
    taken up to its closing quote, ``#`` included; otherwise a trailing
    ``# comment`` is stripped.
    """

    def __init__(self):
        self.logger = logger

    @staticmethod
    def _parse_config_lines(lines: Iterable[str]) -> Dict[str, str]:
        config: Dict[str, str] = {}

        for raw_line in lines:
            line = raw_line.strip()
            if not line or line.startswith('#'):
                continue
            if '=' not in line:
                continue

            key, value = line.split('=', 1)
            key = key.strip()
            value = value.strip()

            quote = value[:1]
            closing = value.find(quote, 1) if quote in ('"', "'") else -1
            if closing > 0:
                # '#' inside the quotes is part of the value
                value = value[1:closing]
            elif '#' in value:
                value = value.split('#')[0].strip()

            config[key] = value

        return config

    def read_config(self, config_path: Union[str, Path]) -> Dict[str, str]:
        """Read ``config_path``; a missing or unreadable file yields ``{}``."""
        config_path = Path(config_path)
        if not config_path.exists():
            self.logger.debug("Config file not found: %s", config_path)
            return {}

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                return self._parse_config_lines(f)
        except (OSError, UnicodeDecodeError) as e:
            self.logger.error("Failed to read config %s: %s", config_path, e)
            return {}

    async def read_config_async(self, config_path: Union[str, Path]) -> Dict[str, str]:
        """Async version of :meth:`read_config` for use inside event loops."""
        config_path = Path(config_path)
        if not await asyncio.to_thread(config_path.exists):
            self.logger.debug("Config file not found: %s", config_path)
            return {}

        try:
            async with aiofiles.open(config_path, 'r', encoding='utf-8') as f:
                lines = await f.readlines()
        except (OSError, UnicodeDecodeError) as e:
            self.logger.error("Failed to read config %s: %s", config_path, e)
            return {}

        return self._parse_config_lines(lines)

    def get_bool(self, config: Dict[str, str], key: str, default: bool = False) -> bool:
        if key not in config:
            return default

        return config[key].lower() in _TRUE_WORDS

    def get_int(self, config: Dict[str, str], key: str, default: int = 0) -> int:
        if key not in config:
            return default

        try:
            return int(config[key])
        except ValueError:
            self.logger.warning("Invalid int value for %s: %s, using default %d", key, config[key], default)
            return default

    def get_float(self, config: Dict[str, str], key: str, default: float = 0.0) -> float:
        if key not in config:
            return default

        try:
            return float(config[key])
        except ValueError:
            self.logger.warning("Invalid float value for %s: %s, using default %f", key, config[key], default)
            return default

    def get_str(self, config: Dict[str, str], key: str, default: str = "") -> str:
        return config.get(key, default)


def to_camera_options(config: Dict[str, str]) -> Dict[str, Any]:
    """Turn raw config strings into values for ``Camera.options``.

    ``true``/``yes``/``on`` become ``True`` so switch setters can be enabled
    from a file. Everything else is passed through as text; the setters do
    their own parsing, and ``Camera.options`` leaves a switch set to
    ``off``/``no``/``false`` unset.
    """
    options: Dict[str, Any] = {}
    for key, value in config.items():
        options[key] = True if value.lower() in _SWITCH_WORDS else value
    return options


def load_camera_options(
    config_path: Union[str, Path],
    *,
    manager: Optional[ConfigManager] = None,
) -> Dict[str, Any]:
    manager = manager or get_config_manager()
    return to_camera_options(manager.read_config(config_path))


async def load_camera_options_async(
    config_path: Union[str, Path],
    *,
    manager: Optional[ConfigManager] = None,
) -> Dict[str, Any]:
    manager = manager or get_config_manager()
    return to_camera_options(await manager.read_config_async(config_path))


_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    return _config_manager


__all__ = [
    "ConfigManager",
    "get_config_manager",
    "load_camera_options",
    "load_camera_options_async",
    "to_camera_options",
]
