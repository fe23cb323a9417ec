"""Tests for event-snap package structure and imports."""

from __future__ import annotations

import re
import subprocess
import sys


def test_package_is_importable() -> None:
    """``import event_snap`` must succeed without errors."""
    import event_snap  # noqa: F401


def test_package_has_version() -> None:
    """``event_snap.__version__`` must be defined."""
    import event_snap

    assert event_snap.__version__ == "0.1.0"


def test_package_version_is_semver() -> None:
    """Version string must match semantic versioning format."""
    import event_snap

    assert re.match(r"^\d+\.\d+\.\d+$", event_snap.__version__)


def test_public_api_exports() -> None:
    """Every name in ``__all__`` must resolve on the package."""
    import event_snap

    for name in event_snap.__all__:
        assert hasattr(event_snap, name), name


def test_main_module_help() -> None:
    """``python -m event_snap --help`` must run and exit cleanly."""
    result = subprocess.run(
        [sys.executable, "-m", "event_snap", "--help"],
        capture_output=True,
        text=True,
        timeout=10,
    )
    assert result.returncode == 0
    assert "--multiple" in result.stdout
    assert "Traceback" not in result.stderr


def test_config_module_importable() -> None:
    """Core config exports must be importable."""
    from event_snap.config import ConfigError, load_settings  # noqa: F401


def test_logging_module_importable() -> None:
    """Core logging exports must be importable."""
    from event_snap.log import setup_logging  # noqa: F401
