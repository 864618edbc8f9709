"""Unit tests for logging setup and structured loggers."""

import logging

import pytest


class TestConfigureLogging:

    def test_unknown_level_rejected(self, restore_logging):
        from raspicam.core.logging_config import configure_logging

        with pytest.raises(ValueError):
            configure_logging("chatty", force=True)

    def test_file_handler_writes_formatted_lines(self, restore_logging, tmp_path):
        from raspicam.core.logging_config import configure_logging
        from raspicam.core.logging_utils import get_module_logger

        log_file = tmp_path / "logs" / "raspicam.log"
        configure_logging("debug", force=True, console=False, log_file=log_file)

        get_module_logger("Camera").info("Starting %s capture", "still")
        for handler in restore_logging.handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "| INFO     | raspicam.Camera | [Camera] Starting still capture" in text

    def test_second_call_only_changes_level(self, restore_logging):
        from raspicam.core.logging_config import configure_logging

        configure_logging("info", force=True, console=True)
        handlers = list(restore_logging.handlers)

        configure_logging("error")

        assert restore_logging.handlers == handlers
        assert restore_logging.level == logging.ERROR


class TestStructuredLogger:

    def test_names_are_namespaced(self):
        from raspicam.core.logging_utils import get_module_logger

        logger = get_module_logger("CaptureRunner")

        assert logger.name == "raspicam.CaptureRunner"
        assert logger.component == "CaptureRunner"

    def test_messages_prefixed_once(self, caplog):
        from raspicam.core.logging_utils import get_module_logger

        logger = get_module_logger("Camera")
        with caplog.at_level(logging.INFO, logger="raspicam"):
            logger.info("hello %d", 5)
            logger.info("[Camera] already tagged")

        assert [record.getMessage() for record in caplog.records] == [
            "[Camera] hello 5",
            "[Camera] already tagged",
        ]

    def test_ensure_structured_logger_wraps_plain_loggers(self):
        from raspicam.core.logging_utils import StructuredLogger, ensure_structured_logger

        wrapped = ensure_structured_logger(logging.getLogger("other"), component="Other")

        assert isinstance(wrapped, StructuredLogger)
        assert wrapped.component == "Other"
        assert ensure_structured_logger(wrapped) is wrapped
        assert ensure_structured_logger(None, fallback_name="x").name == "raspicam.x"
