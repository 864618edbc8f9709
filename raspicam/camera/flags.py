"""Flag mapping values and their command-line rendering.

A flag mapping is a plain ``dict`` from flag name (``"-w"``) to a value. The
value ``True`` marks a switch that is emitted without an argument; anything
else is emitted as ``flag "value"``. Dict insertion order is the order the
flags appear on the command line.
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, List, Optional, Tuple, Union

FlagValue = Union[bool, int, float, str, None]
FlagMapping = Dict[str, FlagValue]

STILL_BINARY = "raspistill"
VIDEO_BINARY = "raspivid"

OUTPUT_FLAG = "-o"
# Shell redirection smuggled in as a flag name: ``-o - > "target"`` writes the
# encoder output to stdout and lets the shell send it to ``target``.
STREAM_FLAG = "-o - >"

NAN = float("nan")

_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")
_HEX_PREFIX = re.compile(r"\s*([+-]?)0[xX]")
_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")


def is_nan(value: Any) -> bool:
    return isinstance(value, float) and math.isnan(value)


def is_truthy(value: Any) -> bool:
    """Truthiness where NaN counts as false."""
    if is_nan(value):
        return False
    return bool(value)


def parse_int(value: Any, radix: Optional[int] = 10) -> Union[int, float]:
    """Parse a base-10 integer prefix, returning ``NAN`` when there is none.

    Leading whitespace and a sign are accepted and anything after the digits
    is ignored, so ``"12px"`` gives 12 and ``12.9`` gives 12. ``None``,
    booleans and text without a leading number give ``NAN``.

    With ``radix=None`` a ``0x`` prefix switches to hexadecimal, so
    ``"0x190"`` gives 400.
    """
    if isinstance(value, bool) or value is None:
        return NAN
    if isinstance(value, int):
        return value
    text = str(value)
    if radix is None:
        prefix = _HEX_PREFIX.match(text)
        if prefix is not None:
            digits = _HEX_DIGITS.match(text, prefix.end())
            if digits is None:
                return NAN
            return int(prefix.group(1) + digits.group(0), 16)
    match = _LEADING_INT.match(text)
    if match is None:
        return NAN
    return int(match.group(1))


def format_value(value: FlagValue) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_nan(value):
        return "NaN"
    return str(value)


def suppress_output_for_stream(parameters: FlagMapping) -> bool:
    """Drop the ``-o`` entry when a stream target is set.

    Returns True when the mapping was in streaming mode.
    """
    if not is_truthy(parameters.get(STREAM_FLAG)):
        return False
    parameters.pop(OUTPUT_FLAG, None)
    return True


def build_command_line(binary: str, parameters: FlagMapping) -> str:
    """Render ``parameters`` as a shell command line.

    UNSAFE for untrusted input: values are wrapped in double quotes verbatim.
    Embedded quotes are not escaped and ``$``, backticks and the like are
    interpreted by the shell that runs the result. Use :func:`build_argv`
    when values come from outside the program.
    """
    command = binary
    for key, value in parameters.items():
        if value is True:
            command += f" {key}"
        else:
            command += f' {key} "{format_value(value)}"'
    return command


def build_argv(binary: str, parameters: FlagMapping) -> Tuple[List[str], Optional[str]]:
    """Render ``parameters`` as an argument vector for direct execution.

    The streaming pseudo-flag becomes ``-o -`` and its target is returned
    separately so the caller can point stdout at it.
    """
    argv = [binary]
    stream_target: Optional[str] = None
    for key, value in parameters.items():
        if key == STREAM_FLAG:
            argv.extend([OUTPUT_FLAG, "-"])
            stream_target = format_value(value)
        elif value is True:
            argv.append(key)
        else:
            argv.extend([key, format_value(value)])
    return argv, stream_target


__all__ = [
    "FlagMapping",
    "FlagValue",
    "NAN",
    "OUTPUT_FLAG",
    "STILL_BINARY",
    "STREAM_FLAG",
    "VIDEO_BINARY",
    "build_argv",
    "build_command_line",
    "format_value",
    "is_nan",
    "is_truthy",
    "parse_int",
    "suppress_output_for_stream",
]
