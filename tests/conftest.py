"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest


@pytest.fixture
def snapshot_folder(tmp_path: Path) -> Path:
    """Temporary snapshot folder path. Not created until a test needs it."""
    return tmp_path / "snapshots"
