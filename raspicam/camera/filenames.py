"""Output filename policy for captures."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional, Union

from raspicam.core.paths import DEFAULT_PICTURES_DIR, DEFAULT_VIDEOS_DIR

from .flags import STILL_BINARY, VIDEO_BINARY

Clock = Callable[[], datetime]


@dataclass(frozen=True, slots=True)
class CaptureKind:
    """What a capture produces and where it lands by default."""

    name: str
    binary: str
    extension: str
    default_folder: Path


STILL = CaptureKind("still", STILL_BINARY, "jpg", DEFAULT_PICTURES_DIR)
VIDEO = CaptureKind("video", VIDEO_BINARY, "h264", DEFAULT_VIDEOS_DIR)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def json_timestamp(moment: Optional[datetime] = None) -> str:
    """Format ``moment`` like ``2024-05-01T10:20:30.123Z`` (UTC, milliseconds)."""
    moment = moment or utc_now()
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment.isoformat(timespec="milliseconds") + "Z"


def default_folder(kind: CaptureKind) -> str:
    return str(kind.default_folder)


def resolve_filename(
    kind: CaptureKind,
    folder: Union[str, Path],
    file: Optional[Union[str, Path]] = None,
    *,
    clock: Clock = utc_now,
) -> str:
    """Return the path a capture should write to.

    Absolute ``file`` values (leading ``/``) are used as given, relative ones
    are placed under ``folder``. Without ``file`` a timestamped name with the
    kind's extension is generated.
    """
    if file:
        file = str(file)
        if file.startswith("/"):
            return file
        return f"{folder}/{file}"
    return f"{folder}/{json_timestamp(clock())}.{kind.extension}"


__all__ = [
    "CaptureKind",
    "Clock",
    "STILL",
    "VIDEO",
    "default_folder",
    "json_timestamp",
    "resolve_filename",
    "utc_now",
]
