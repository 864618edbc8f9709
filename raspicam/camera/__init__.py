"""Camera builder and capture helpers."""

from .builder import OPTION_SETTERS, Camera, CaptureCallback, CaptureHandle
from .filenames import STILL, VIDEO, CaptureKind, json_timestamp, resolve_filename
from .flags import (
    NAN,
    OUTPUT_FLAG,
    STILL_BINARY,
    STREAM_FLAG,
    VIDEO_BINARY,
    build_argv,
    build_command_line,
    parse_int,
)
from .runner import CaptureResult

__all__ = [
    "Camera",
    "CaptureCallback",
    "CaptureHandle",
    "CaptureKind",
    "CaptureResult",
    "NAN",
    "OPTION_SETTERS",
    "OUTPUT_FLAG",
    "STILL",
    "STILL_BINARY",
    "STREAM_FLAG",
    "VIDEO",
    "VIDEO_BINARY",
    "build_argv",
    "build_command_line",
    "json_timestamp",
    "parse_int",
    "resolve_filename",
]
