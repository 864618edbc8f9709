"""Fluent builder for raspistill / raspivid invocations."""

from __future__ import annotations

import asyncio
import concurrent.futures
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Union

from raspicam.core.async_bridge import get_background_loop
from raspicam.core.asyncio_utils import create_logged_task
from raspicam.core.logging_utils import get_module_logger

from .filenames import STILL, VIDEO, CaptureKind, Clock, default_folder, resolve_filename, utc_now
from .flags import (
    OUTPUT_FLAG,
    STREAM_FLAG,
    FlagMapping,
    build_argv,
    build_command_line,
    is_truthy,
    parse_int,
    suppress_output_for_stream,
)
from .runner import CaptureResult, run_argv, run_shell

CaptureCallback = Callable[[str, str], Any]
CaptureHandle = Union[asyncio.Task, concurrent.futures.Future]

# option name -> method name, consulted by Camera.options()
OPTION_SETTERS: Dict[str, str] = {}

# switch setters, skipped by Camera.options() when the value is off
SWITCH_OPTIONS: Set[str] = set()

_OFF_WORDS = ("false", "no", "off", "0")


def _option(func):
    OPTION_SETTERS[func.__name__] = func.__name__
    return func


def _switch(func):
    SWITCH_OPTIONS.add(func.__name__)
    return _option(func)


def _switched_off(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _OFF_WORDS
    return value is False or (type(value) is int and value == 0)


@dataclass(slots=True)
class _PreparedCapture:
    kind: CaptureKind
    filename: str
    command: str
    argv: List[str]
    stream_target: Optional[str]


class Camera:
    """Accumulates camera flags and runs captures with them.

    Every setter stores one flag and returns the camera so calls chain::

        camera = Camera().width(640).height(480).quality(80)
        camera.take_picture("out.jpg", lambda filename, stderr: ...)

    Flags persist across captures until :meth:`reset`. One instance must not
    run overlapping captures; use one camera per concurrent capture.

    Args:
        shell: Run the serialized command line through the shell (the
            default). With ``shell=False`` the flags are passed as an argument
            vector and nothing is interpreted by a shell.
        clock: Source of the timestamp used for generated filenames.
    """

    def __init__(self, *, shell: bool = True, clock: Clock = utc_now) -> None:
        self.filename: Optional[str] = None
        self.folder: Optional[str] = None
        self.command: str = ""
        self.parameters: FlagMapping = {}
        self.shell = shell
        self._clock = clock
        self.logger = get_module_logger("Camera")

    # ------------------------------------------------------------------
    # Captures

    def take_picture(
        self,
        file: Union[str, CaptureCallback, None] = None,
        callback: Optional[CaptureCallback] = None,
    ) -> CaptureHandle:
        """Capture a still with ``raspistill``.

        Accepts ``(file, callback)`` or just ``(callback)``. Returns at once;
        ``callback(filename, stderr)`` runs after the process exits, whatever
        its exit status.
        """
        if callable(file):
            file, callback = None, file
        return self._launch(self._prepare(STILL, file), callback)

    def record_video(
        self,
        file: Union[str, CaptureCallback, None] = None,
        callback: Optional[CaptureCallback] = None,
    ) -> CaptureHandle:
        """Record video with ``raspivid``; same calling convention as :meth:`take_picture`."""
        if callable(file):
            file, callback = None, file
        return self._launch(self._prepare(VIDEO, file), callback)

    async def capture_still(self, file: Optional[str] = None) -> CaptureResult:
        return await self._execute(self._prepare(STILL, file))

    async def capture_video(self, file: Optional[str] = None) -> CaptureResult:
        return await self._execute(self._prepare(VIDEO, file))

    def still_command(self, file: Optional[str] = None) -> str:
        """Resolve the filename and serialize a still capture without running it."""
        return self._prepare(STILL, file).command

    def video_command(self, file: Optional[str] = None) -> str:
        return self._prepare(VIDEO, file).command

    def _prepare(self, kind: CaptureKind, file: Optional[str]) -> _PreparedCapture:
        if not self.folder:
            self.folder = default_folder(kind)

        self.output(resolve_filename(kind, self.folder, file, clock=self._clock))

        if kind is VIDEO and suppress_output_for_stream(self.parameters):
            self.logger.debug("Streaming to %s, dropping %s", self.parameters[STREAM_FLAG], OUTPUT_FLAG)

        self.command = build_command_line(kind.binary, self.parameters)
        argv, stream_target = build_argv(kind.binary, self.parameters)
        return _PreparedCapture(kind, self.filename, self.command, argv, stream_target)

    async def _execute(self, prepared: _PreparedCapture) -> CaptureResult:
        self.logger.info("Starting %s capture -> %s", prepared.kind.name, prepared.filename)
        self.logger.debug("Command: %s", prepared.command)

        if self.shell:
            stderr, returncode = await run_shell(prepared.command)
        else:
            stderr, returncode = await run_argv(prepared.argv, prepared.stream_target)

        if returncode is None:
            self.logger.warning("%s could not be started: %s", prepared.kind.binary, stderr.strip())
        elif returncode != 0:
            self.logger.warning("%s exited with status %d: %s", prepared.kind.binary, returncode, stderr.strip())
        else:
            self.logger.info("%s capture finished: %s", prepared.kind.name, prepared.filename)

        return CaptureResult(prepared.filename, stderr, returncode, prepared.command)

    async def _complete(self, prepared: _PreparedCapture, callback: Optional[CaptureCallback]) -> CaptureResult:
        result = await self._execute(prepared)
        if callable(callback):
            callback(result.filename, result.stderr)
        return result

    def _launch(self, prepared: _PreparedCapture, callback: Optional[CaptureCallback]) -> CaptureHandle:
        coro = self._complete(prepared, callback)
        context = f"{prepared.kind.name} capture {prepared.filename}"
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return get_background_loop().submit(coro, context=context)
        return create_logged_task(coro, logger=self.logger, context=context)

    # ------------------------------------------------------------------
    # Bulk configuration

    def options(self, options: Mapping[str, Any]) -> Camera:
        """Apply ``{setter_name: value}`` pairs; unknown names are skipped."""
        for key, value in options.items():
            method_name = OPTION_SETTERS.get(key)
            if method_name is None:
                self.logger.debug("Ignoring unknown option %r", key)
                continue
            if key in SWITCH_OPTIONS and _switched_off(value):
                self.logger.debug("Leaving switch %r off (value %r)", key, value)
                continue
            getattr(self, method_name)(value)
        return self

    def reset(self) -> Camera:
        """Forget every flag set so far. ``filename`` and ``folder`` are kept."""
        self.parameters = {}
        return self

    @_option
    def base_folder(self, directory) -> Camera:
        self.folder = None if directory is None else str(directory)
        return self

    # ------------------------------------------------------------------
    # Image size and preview

    @_option
    def quality(self, value) -> Camera:
        """JPEG quality, 1 to 100."""
        self.parameters['-q'] = parse_int(value)
        return self

    @_option
    def width(self, value) -> Camera:
        """Width in pixels."""
        self.parameters['-w'] = parse_int(value)
        return self

    @_option
    def height(self, value) -> Camera:
        """Height in pixels."""
        self.parameters['-h'] = parse_int(value)
        return self

    @_option
    def preview(self, value) -> Camera:
        """Preview window as ``'x,y,w,h'``."""
        self.parameters['-p'] = value
        return self

    @_switch
    def fullscreen(self, _value=None) -> Camera:
        self.parameters['-f'] = True
        return self

    @_switch
    def nopreview(self, _value=None) -> Camera:
        self.parameters['-n'] = True
        return self

    @_option
    def opacity(self, value) -> Camera:
        """Preview window opacity, 0 to 255."""
        self.parameters['-op'] = parse_int(value)
        return self

    @_option
    def fullpreview(self, value="") -> Camera:
        self.parameters['-fp'] = value
        return self

    # ------------------------------------------------------------------
    # Image processing

    @_option
    def sharpness(self, value) -> Camera:
        """-100 to 100."""
        self.parameters['-sh'] = value
        return self

    @_option
    def contrast(self, value) -> Camera:
        """-100 to 100."""
        self.parameters['-co'] = value
        return self

    @_option
    def brightness(self, value) -> Camera:
        """0 to 100."""
        self.parameters['-br'] = parse_int(value)
        return self

    @_option
    def saturation(self, value) -> Camera:
        """-100 to 100."""
        self.parameters['-sa'] = value
        return self

    @_option
    def iso(self, value) -> Camera:
        """Capture ISO. Zero or unparseable values leave the flags untouched."""
        value = parse_int(value, radix=None)
        if is_truthy(value):
            self.parameters['-ISO'] = value
        return self

    @_switch
    def vstab(self, _value=None) -> Camera:
        """Turn on video stabilisation."""
        self.parameters['-vs'] = True
        return self

    @_option
    def ev(self, value) -> Camera:
        """EV compensation in steps of 1/6 stop."""
        self.parameters['-ev'] = value
        return self

    @_option
    def exposure(self, value) -> Camera:
        """Exposure mode: off, auto, night, nightpreview, backlight, spotlight,
        sports, snow, beach, verylong, fixedfps, antishake or fireworks."""
        self.parameters['-ex'] = value
        return self

    @_option
    def awb(self, value) -> Camera:
        """White balance mode: off, auto, sun, cloud, shade, tungsten,
        fluorescent, incandescent, flash or horizon."""
        self.parameters['-awb'] = value
        return self

    @_option
    def awbgains(self, value=True) -> Camera:
        """AWB gains as ``'blue,red'``; only honoured with ``awb('off')``."""
        self.parameters['-awbg'] = value
        return self

    @_option
    def imxfx(self, value) -> Camera:
        """Image effect such as negative, sketch, emboss, cartoon."""
        self.parameters['-ifx'] = value
        return self

    @_option
    def colfx(self, value) -> Camera:
        """Colour effect as ``'U:V'``."""
        self.parameters['-cfx'] = value
        return self

    @_option
    def metering(self, value) -> Camera:
        """Metering mode: average, spot, backlit or matrix."""
        self.parameters['-mm'] = value
        return self

    @_option
    def rotation(self, value) -> Camera:
        """Rotation in degrees."""
        self.parameters['-rot'] = parse_int(value)
        return self

    @_switch
    def hflip(self, _value=None) -> Camera:
        self.parameters['-hf'] = True
        return self

    @_switch
    def vflip(self, _value=None) -> Camera:
        self.parameters['-vf'] = True
        return self

    @_option
    def roi(self, value) -> Camera:
        """Region of interest as normalised ``'x,y,w,h'``."""
        self.parameters['-roi'] = value
        return self

    @_option
    def shutter(self, value) -> Camera:
        """Shutter speed in microseconds."""
        self.parameters['-s'] = parse_int(value)
        return self

    @_option
    def drc(self, value) -> Camera:
        """Dynamic range compression level."""
        self.parameters['-drc'] = value
        return self

    @_switch
    def stats(self, _value=None) -> Camera:
        """Force recomputation of statistics on the stills capture pass."""
        self.parameters['-st'] = True
        return self

    @_option
    def annotate(self, value) -> Camera:
        self.parameters['-a'] = value
        return self

    @_option
    def annotateex(self, value) -> Camera:
        """Extra annotation parameters: text size, text and background colour."""
        self.parameters['-ae'] = value
        return self

    # ------------------------------------------------------------------
    # Stereoscopic

    @_switch
    def stereo(self, _value=None) -> Camera:
        self.parameters['-3d'] = True
        return self

    @_option
    def decimate(self, value=True) -> Camera:
        """Half width/height of a stereo image."""
        self.parameters['-dec'] = value
        return self

    @_switch
    def stereoswap(self, _value=None) -> Camera:
        self.parameters['-3dswap'] = True
        return self

    # ------------------------------------------------------------------
    # Output and timing

    @_option
    def raw(self, value="") -> Camera:
        self.parameters['-r'] = value
        return self

    @_option
    def output(self, value) -> Camera:
        """Output path; also becomes the camera's ``filename``."""
        self.filename = value
        self.parameters['-o'] = value
        return self

    @_option
    def latest(self, value) -> Camera:
        self.parameters['-l'] = value
        return self

    @_option
    def verbose(self, value) -> Camera:
        self.parameters['-v'] = value
        return self

    @_option
    def timeout(self, value) -> Camera:
        """Time before capture (or recording length) in milliseconds."""
        self.parameters['-t'] = value
        return self

    @_option
    def timelapse(self, value) -> Camera:
        self.parameters['-tl'] = value
        return self

    @_option
    def thumb(self, value) -> Camera:
        self.parameters['-th'] = value
        return self

    @_option
    def demo(self, value) -> Camera:
        self.parameters['-d'] = value
        return self

    @_option
    def encoding(self, value) -> Camera:
        """Still encoding (jpg, bmp, gif, png). Shares ``-e`` with :meth:`penc`."""
        self.parameters['-e'] = value
        return self

    @_option
    def exif(self, value) -> Camera:
        self.parameters['-x'] = value
        return self

    @_option
    def signal(self, value) -> Camera:
        # raspivid's -s (signal mode) is the same key shutter() writes.
        self.parameters['-s'] = value
        return self

    # ------------------------------------------------------------------
    # Video encoder

    @_option
    def bitrate(self, value) -> Camera:
        self.parameters['-b'] = value
        return self

    @_option
    def framerate(self, value) -> Camera:
        self.parameters['-fps'] = value
        return self

    @_option
    def penc(self, value="") -> Camera:
        """Encoder flag. Shares ``-e`` with :meth:`encoding`; the last call wins."""
        self.parameters['-e'] = value
        return self

    @_option
    def intra(self, value) -> Camera:
        """Intra refresh period (GoP)."""
        self.parameters['-g'] = value
        return self

    @_option
    def qp(self, value) -> Camera:
        self.parameters['-qp'] = value
        return self

    @_option
    def profile(self, value) -> Camera:
        """H264 profile: baseline, main or high."""
        self.parameters['-pf'] = value
        return self

    @_option
    def inline(self, value) -> Camera:
        self.parameters['-ih'] = value
        return self

    @_option
    def timed(self, value) -> Camera:
        """Toggle capture on and off as ``'on_ms,off_ms'``."""
        self.parameters['-td'] = value
        return self

    @_option
    def initial(self, value) -> Camera:
        """Initial state: record or pause."""
        self.parameters['-i'] = value
        return self

    @_option
    def segment(self, value) -> Camera:
        self.parameters['-sg'] = value
        return self

    @_option
    def wrap(self, value) -> Camera:
        self.parameters['-wr'] = value
        return self

    @_option
    def start(self, value) -> Camera:
        """First segment number."""
        self.parameters['-sn'] = value
        return self

    @_option
    def stream_video(self, value) -> Camera:
        """Send the video to ``value`` through a shell redirect instead of ``-o``."""
        self.parameters[STREAM_FLAG] = value
        return self


OPTION_SETTERS.update({
    "streamVideo": "stream_video",
    "baseFolder": "base_folder",
})


__all__ = ["Camera", "CaptureCallback", "CaptureHandle", "CaptureResult", "OPTION_SETTERS", "SWITCH_OPTIONS"]
