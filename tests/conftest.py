"""
Pytest configuration and shared fixtures for layerconf tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from layerconf import ConfigManager
from layerconf.logging import get_global_logger, set_global_logger


class RecordingLogger:
    """Logger that keeps every message for assertions."""

    def __init__(self) -> None:
        self.warnings: list[str] = []
        self.messages: list[str] = []

    def warning(self, prefix: str, message: str) -> None:
        self.warnings.append(f"[{prefix}] {message}")

    def verbose(self, prefix: str, message: str) -> None:
        self.messages.append(f"[{prefix}] {message}")

    def debug(self, prefix: str, message: str) -> None:
        self.messages.append(f"[{prefix}] {message}")


@pytest.fixture(autouse=True)
def restore_global_logger():
    """Undo set_global_logger() calls made by a test (e.g., via the CLI)."""
    original = get_global_logger()
    yield
    set_global_logger(original)


@pytest.fixture
def environ() -> dict[str, str]:
    """
    Provide an injectable environment mapping.

    Tests add variables here instead of touching os.environ.
    """
    return {}


@pytest.fixture
def logger() -> RecordingLogger:
    """Provide a logger that records warnings."""
    return RecordingLogger()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Provide a config file path whose parent directory does not exist yet."""
    return tmp_path / "config" / "app.yaml"


@pytest.fixture
def manager(environ: dict[str, str], logger: RecordingLogger) -> ConfigManager:
    """Provide a ConfigManager with prefix APP reading the injected environ."""
    return ConfigManager(env_prefix="APP", environ=environ, logger=logger)


@pytest.fixture
def write_yaml():
    """
    Factory fixture for writing YAML files.

    Usage:
        write_yaml(path, {"server": {"port": 9000}})
        write_yaml(path, "raw: [text")
    """

    def _write(path: Path, data: dict[str, Any] | str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            with path.open("w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, sort_keys=False)
        return path

    return _write


@pytest.fixture
def read_yaml():
    """Factory fixture that parses a YAML file back into Python data."""

    def _read(path: Path) -> Any:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f)

    return _read
