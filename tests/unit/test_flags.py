"""Unit tests for flag parsing and command-line rendering."""

import math

import pytest


class TestParseInt:
    """parse_int follows JavaScript parseInt(value, 10)."""

    @pytest.mark.parametrize("value, expected", [
        ("640", 640),
        (640, 640),
        ("  42", 42),
        ("-15", -15),
        ("+7", 7),
        ("12px", 12),
        (12.9, 12),
        ("3.99", 3),
        ("0", 0),
    ])
    def test_leading_integer(self, value, expected):
        from raspicam.camera.flags import parse_int

        assert parse_int(value) == expected

    @pytest.mark.parametrize("value", ["", "abc", "px12", None, True, float("nan"), float("inf")])
    def test_unparseable_gives_nan(self, value):
        from raspicam.camera.flags import parse_int

        result = parse_int(value)

        assert isinstance(result, float)
        assert math.isnan(result)

    def test_hex_only_without_fixed_radix(self):
        from raspicam.camera.flags import parse_int

        assert parse_int("0x190") == 0
        assert parse_int("0x190", radix=None) == 400
        assert parse_int(" -0Xff", radix=None) == -255
        assert parse_int("0x1fz", radix=None) == 31
        assert parse_int("0640", radix=None) == 640
        assert parse_int(12.9, radix=None) == 12

    def test_hex_prefix_without_digits_gives_nan(self):
        from raspicam.camera.flags import parse_int

        assert math.isnan(parse_int("0x", radix=None))
        assert math.isnan(parse_int("0xg1", radix=None))


class TestFormatValue:

    def test_nan_renders_like_javascript(self):
        from raspicam.camera.flags import NAN, format_value

        assert format_value(NAN) == "NaN"

    def test_booleans_lowercase(self):
        from raspicam.camera.flags import format_value

        assert format_value(True) == "true"
        assert format_value(False) == "false"

    def test_none_is_empty(self):
        from raspicam.camera.flags import format_value

        assert format_value(None) == ""

    def test_scalars_use_str(self):
        from raspicam.camera.flags import format_value

        assert format_value(640) == "640"
        assert format_value("auto") == "auto"
        assert format_value(0.5) == "0.5"


class TestBuildCommandLine:

    def test_empty_mapping_is_binary_only(self):
        from raspicam.camera.flags import build_command_line

        assert build_command_line("raspistill", {}) == "raspistill"

    def test_switches_and_values_in_insertion_order(self):
        from raspicam.camera.flags import build_command_line

        parameters = {"-w": 640, "-n": True, "-ex": "night", "-o": "/tmp/a.jpg"}

        assert build_command_line("raspistill", parameters) == (
            'raspistill -w "640" -n -ex "night" -o "/tmp/a.jpg"'
        )

    def test_values_are_not_escaped(self):
        from raspicam.camera.flags import build_command_line

        command = build_command_line("raspistill", {"-a": 'say "hi"; rm x'})

        assert command == 'raspistill -a "say "hi"; rm x"'

    def test_false_is_a_value_not_a_switch(self):
        from raspicam.camera.flags import build_command_line

        assert build_command_line("raspivid", {"-ih": False}) == 'raspivid -ih "false"'


class TestBuildArgv:

    def test_argv_keeps_values_as_single_arguments(self):
        from raspicam.camera.flags import build_argv

        argv, target = build_argv("raspistill", {"-a": "two words", "-hf": True, "-q": 80})

        assert argv == ["raspistill", "-a", "two words", "-hf", "-q", "80"]
        assert target is None

    def test_stream_flag_becomes_stdout_output(self):
        from raspicam.camera.flags import STREAM_FLAG, build_argv

        argv, target = build_argv("raspivid", {"-t": 0, STREAM_FLAG: "/tmp/live.h264"})

        assert argv == ["raspivid", "-t", "0", "-o", "-"]
        assert target == "/tmp/live.h264"


class TestStreamSuppression:

    def test_output_removed_when_streaming(self):
        from raspicam.camera.flags import STREAM_FLAG, suppress_output_for_stream

        parameters = {"-o": "/tmp/a.h264", STREAM_FLAG: "target"}

        assert suppress_output_for_stream(parameters) is True
        assert parameters == {STREAM_FLAG: "target"}

    def test_output_kept_without_stream(self):
        from raspicam.camera.flags import suppress_output_for_stream

        parameters = {"-o": "/tmp/a.h264"}

        assert suppress_output_for_stream(parameters) is False
        assert parameters == {"-o": "/tmp/a.h264"}

    def test_empty_stream_target_does_not_suppress(self):
        from raspicam.camera.flags import STREAM_FLAG, suppress_output_for_stream

        parameters = {"-o": "/tmp/a.h264", STREAM_FLAG: ""}

        assert suppress_output_for_stream(parameters) is False
        assert "-o" in parameters
