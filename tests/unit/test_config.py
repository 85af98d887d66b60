"""Unit tests for snapshot settings loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from modelsnap.config import SnapshotSettings, load_settings
from modelsnap.errors import SnapshotConfigError


@pytest.mark.unit
def test_missing_settings_file_returns_defaults(tmp_path: Path) -> None:
    """Absent settings file should yield defaults."""
    # Act - load missing file
    settings = load_settings(tmp_path / "modelsnap.yaml")

    # Assert - defaults
    assert settings == SnapshotSettings()
    assert settings.snapshot_folder == Path("tests/resources/snapshots")
    assert settings.seed is None
    assert settings.indent == 2


@pytest.mark.unit
def test_yaml_settings_are_loaded(tmp_path: Path) -> None:
    """YAML settings should populate the model."""
    # Arrange - yaml settings
    path = tmp_path / "modelsnap.yaml"
    path.write_text(
        "snapshot_folder: fixtures/snapshots\nseed: 9\nindent: 4\n",
        encoding="utf-8",
    )

    # Act - load
    settings = load_settings(path)

    # Assert - values applied
    assert settings.snapshot_folder == Path("fixtures/snapshots")
    assert settings.seed == 9
    assert settings.indent == 4


@pytest.mark.unit
def test_json_settings_are_loaded(tmp_path: Path) -> None:
    """JSON settings should be decoded by suffix."""
    # Arrange - json settings
    path = tmp_path / "modelsnap.json"
    path.write_text(json.dumps({"max_collection_size": 5}), encoding="utf-8")

    # Act - load
    settings = load_settings(path)

    # Assert - value applied
    assert settings.max_collection_size == 5


@pytest.mark.unit
def test_empty_yaml_returns_defaults(tmp_path: Path) -> None:
    """Empty YAML document should yield defaults."""
    # Arrange - empty file
    path = tmp_path / "modelsnap.yaml"
    path.write_text("", encoding="utf-8")

    # Act / Assert - defaults
    assert load_settings(path) == SnapshotSettings()


@pytest.mark.unit
@pytest.mark.parametrize(
    ("name", "content", "message"),
    [
        ("modelsnap.json", "{broken", "Invalid snapshot config JSON"),
        ("modelsnap.yaml", "seed: [unclosed", "Invalid snapshot config YAML"),
        ("modelsnap.yaml", "- a\n- b\n", "root must be an object"),
        ("modelsnap.yaml", "unknown_key: 1\n", "Invalid snapshot config payload"),
        ("modelsnap.yaml", "indent: 0\n", "Invalid snapshot config payload"),
    ],
)
def test_invalid_settings_raise(
    tmp_path: Path, name: str, content: str, message: str
) -> None:
    """Undecodable or invalid settings should raise a config error."""
    # Arrange - invalid settings file
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")

    # Act / Assert - config error
    with pytest.raises(SnapshotConfigError, match=message):
        load_settings(path)
