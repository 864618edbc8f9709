"""Centralized path constants for raspicam."""

from __future__ import annotations

import os
from pathlib import Path

# Package roots
PACKAGE_ROOT = Path(__file__).resolve().parents[1]
CAMERA_DIR = PACKAGE_ROOT / "camera"

# Default capture folders, used when no base folder has been set
DEFAULT_PICTURES_DIR = CAMERA_DIR / "pictures"
DEFAULT_VIDEOS_DIR = CAMERA_DIR / "videos"

# User-specific state (allows running from read-only install directories)
_USER_STATE_ENV = os.environ.get("RASPICAM_STATE_DIR")
USER_STATE_DIR = Path(_USER_STATE_ENV).expanduser() if _USER_STATE_ENV else (Path.home() / ".raspicam")
USER_CONFIG_PATH = USER_STATE_DIR / "camera.conf"


__all__ = [
    "PACKAGE_ROOT",
    "CAMERA_DIR",
    "DEFAULT_PICTURES_DIR",
    "DEFAULT_VIDEOS_DIR",
    "USER_STATE_DIR",
    "USER_CONFIG_PATH",
]
