"""Shared pytest configuration and fixtures for the raspicam test suite."""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


FIXED_MOMENT = datetime(2024, 5, 1, 10, 20, 30, 123000, tzinfo=timezone.utc)
FIXED_STAMP = "2024-05-01T10:20:30.123Z"


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--run-hardware",
        action="store_true",
        default=False,
        help="Run tests that call the real raspistill/raspivid binaries",
    )


def pytest_collection_modifyitems(config, items):
    """Skip hardware tests unless --run-hardware is specified."""
    if config.getoption("--run-hardware"):
        return

    skip_hardware = pytest.mark.skip(reason="Need --run-hardware option to run")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock that always returns FIXED_MOMENT."""
    return lambda: FIXED_MOMENT


@pytest.fixture
def camera(fixed_clock):
    from raspicam.camera import Camera

    return Camera(clock=fixed_clock)


@pytest.fixture
def process_factory() -> Callable[..., MagicMock]:
    """Factory for fake ``asyncio.subprocess.Process`` objects."""

    def factory(stderr: bytes = b"", returncode: Optional[int] = 0) -> MagicMock:
        process = MagicMock()
        process.returncode = returncode
        process.communicate = AsyncMock(return_value=(None, stderr))
        return process

    return factory


@pytest.fixture
def mock_shell(monkeypatch, process_factory) -> AsyncMock:
    """Replace ``asyncio.create_subprocess_shell`` with a successful fake."""
    mock = AsyncMock(return_value=process_factory())
    monkeypatch.setattr("asyncio.create_subprocess_shell", mock)
    return mock


@pytest.fixture
def mock_exec(monkeypatch, process_factory) -> AsyncMock:
    """Replace ``asyncio.create_subprocess_exec`` with a successful fake."""
    mock = AsyncMock(return_value=process_factory())
    monkeypatch.setattr("asyncio.create_subprocess_exec", mock)
    return mock


@pytest.fixture
def restore_logging():
    """Undo whatever configure_logging() does to the root logger."""
    import raspicam.core.logging_config as logging_config

    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level

    yield root

    for handler in list(root.handlers):
        if handler not in saved_handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in saved_handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(saved_level)
    logging_config._configured = False
