"""Unit tests for output filename resolution."""

from datetime import datetime, timedelta, timezone

import pytest

FIXED_MOMENT = datetime(2024, 5, 1, 10, 20, 30, 123000, tzinfo=timezone.utc)
FIXED_STAMP = "2024-05-01T10:20:30.123Z"


class TestJsonTimestamp:

    def test_utc_with_milliseconds(self):
        from raspicam.camera.filenames import json_timestamp

        assert json_timestamp(FIXED_MOMENT) == FIXED_STAMP

    def test_other_timezones_converted_to_utc(self):
        from raspicam.camera.filenames import json_timestamp

        moment = datetime(2024, 5, 1, 12, 20, 30, 123000, tzinfo=timezone(timedelta(hours=2)))

        assert json_timestamp(moment) == FIXED_STAMP

    def test_naive_datetime_treated_as_utc(self):
        from raspicam.camera.filenames import json_timestamp

        assert json_timestamp(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05.000Z"


class TestResolveFilename:

    def test_generated_still_name(self, fixed_clock):
        from raspicam.camera.filenames import STILL, resolve_filename

        assert resolve_filename(STILL, "/x", clock=fixed_clock) == f"/x/{FIXED_STAMP}.jpg"

    def test_generated_video_name(self, fixed_clock):
        from raspicam.camera.filenames import VIDEO, resolve_filename

        assert resolve_filename(VIDEO, "/x", clock=fixed_clock) == f"/x/{FIXED_STAMP}.h264"

    def test_absolute_file_used_verbatim(self):
        from raspicam.camera.filenames import STILL, resolve_filename

        assert resolve_filename(STILL, "/x", "/abs/path.jpg") == "/abs/path.jpg"

    def test_relative_file_joined_to_folder(self):
        from raspicam.camera.filenames import STILL, resolve_filename

        assert resolve_filename(STILL, "/x", "rel.jpg") == "/x/rel.jpg"

    @pytest.mark.parametrize("file", [None, ""])
    def test_empty_file_generates_name(self, fixed_clock, file):
        from raspicam.camera.filenames import STILL, resolve_filename

        assert resolve_filename(STILL, "/x", file, clock=fixed_clock).endswith(f"{FIXED_STAMP}.jpg")


class TestDefaultFolders:

    def test_kinds_point_next_to_camera_package(self):
        from pathlib import Path

        import raspicam.camera.filenames as filenames
        from raspicam.camera.filenames import STILL, VIDEO, default_folder

        camera_dir = Path(filenames.__file__).resolve().parent

        assert default_folder(STILL) == str(camera_dir / "pictures")
        assert default_folder(VIDEO) == str(camera_dir / "videos")
