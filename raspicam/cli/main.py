from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Tuple

from raspicam.camera import Camera, CaptureResult
from raspicam.core.config_manager import get_config_manager, load_camera_options, to_camera_options
from raspicam.core.logging_config import configure_logging
from raspicam.core.logging_utils import get_module_logger
from raspicam.core.paths import USER_CONFIG_PATH

logger = get_module_logger("CLI")

LOG_LEVELS = ("critical", "error", "warning", "info", "debug")


def parse_assignment(value: str) -> Tuple[str, str]:
    key, sep, raw = value.partition("=")
    key = key.strip()
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got {value!r}")
    return key, raw.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="raspicam",
        description="Take stills with raspistill or record video with raspivid",
    )

    parser.add_argument(
        "kind",
        choices=["still", "video"],
        help="Capture a still image or record a video",
    )

    parser.add_argument(
        "file",
        nargs="?",
        default=None,
        help="Output file; relative names go under --folder (default: timestamped name)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Camera settings file with one 'option = value' per line (default: {USER_CONFIG_PATH} if present)",
    )

    parser.add_argument(
        "--folder",
        type=Path,
        default=None,
        help="Base folder for relative and generated filenames",
    )

    parser.add_argument(
        "--set",
        dest="settings",
        metavar="KEY=VALUE",
        type=parse_assignment,
        action="append",
        default=[],
        help="Camera option, e.g. --set width=640 --set hflip=true (repeatable)",
    )

    shell_group = parser.add_mutually_exclusive_group()
    shell_group.add_argument(
        "--shell",
        dest="shell",
        action="store_true",
        default=True,
        help="Run the command line through the shell (default)",
    )
    shell_group.add_argument(
        "--no-shell",
        dest="shell",
        action="store_false",
        help="Execute the binary directly without a shell",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Print the command line instead of running it",
    )

    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="warning",
        help="Logging verbosity (default: warning)",
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Optional path for a rotating log file",
    )

    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def build_camera(args: argparse.Namespace) -> Camera:
    """Create a camera from config file, ``--set`` entries and ``--folder``."""
    camera = Camera(shell=args.shell)

    config_path = args.config
    if config_path is None and USER_CONFIG_PATH.exists():
        config_path = USER_CONFIG_PATH

    if config_path is not None:
        logger.debug("Loading camera options from %s", config_path)
        camera.options(load_camera_options(config_path, manager=get_config_manager()))

    for key, value in args.settings:
        camera.options(to_camera_options({key: value}))

    if args.folder is not None:
        camera.base_folder(args.folder)

    return camera


def _report(result: CaptureResult) -> int:
    if result.stderr:
        sys.stderr.write(result.stderr if result.stderr.endswith("\n") else result.stderr + "\n")
    if not result.ok:
        return 1
    print(result.filename)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level, log_file=args.log_file, force=True)

    camera = build_camera(args)

    if args.dry_run:
        command = camera.still_command(args.file) if args.kind == "still" else camera.video_command(args.file)
        print(command)
        return 0

    if args.kind == "still":
        result = asyncio.run(camera.capture_still(args.file))
    else:
        result = asyncio.run(camera.capture_video(args.file))

    return _report(result)


if __name__ == "__main__":
    sys.exit(main())
