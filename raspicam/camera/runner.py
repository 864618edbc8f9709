"""Launch the capture binaries and collect their stderr."""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass
from typing import IO, List, Optional

from raspicam.core.logging_utils import get_module_logger

logger = get_module_logger("CaptureRunner")


@dataclass(slots=True)
class CaptureResult:
    """Outcome of one capture.

    ``returncode`` is None when the process could not be started at all; the
    reason is then in ``stderr``.
    """

    filename: str
    stderr: str
    returncode: Optional[int]
    command: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


async def _communicate(process: asyncio.subprocess.Process) -> tuple[str, Optional[int]]:
    _, stderr = await process.communicate()
    return _decode(stderr), process.returncode


async def run_shell(command: str) -> tuple[str, Optional[int]]:
    """Run ``command`` through ``/bin/sh`` and wait for it to exit."""
    try:
        process = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        logger.warning("Failed to start shell for %r: %s", command, exc)
        return str(exc), None

    return await _communicate(process)


async def run_argv(argv: List[str], stream_target: Optional[str] = None) -> tuple[str, Optional[int]]:
    """Execute ``argv`` directly, sending stdout to ``stream_target`` if given."""
    with contextlib.ExitStack() as stack:
        stdout: int | IO[bytes] = asyncio.subprocess.DEVNULL
        try:
            if stream_target:
                stdout = stack.enter_context(open(stream_target, "wb"))
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=stdout,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            logger.warning("Failed to start %s: %s", argv[0], exc)
            return str(exc), None

        return await _communicate(process)


__all__ = ["CaptureResult", "run_argv", "run_shell"]
