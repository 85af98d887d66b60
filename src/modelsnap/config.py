"""Snapshot settings model and loading helpers."""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from modelsnap.errors import SnapshotConfigError

DEFAULT_CONFIG_FILE = Path("modelsnap.yaml")
DEFAULT_SNAPSHOT_FOLDER = Path("tests/resources/snapshots")


class SnapshotSettings(BaseModel):
    """Root snapshot configuration model."""

    model_config = ConfigDict(extra="forbid")

    snapshot_folder: Path = DEFAULT_SNAPSHOT_FOLDER
    seed: int | None = None
    indent: int = Field(default=2, ge=1, le=8)
    max_collection_size: int = Field(default=3, ge=1, le=100)


def _decode_settings_payload(path: Path) -> dict[str, object]:
    """Decode settings payload from JSON or YAML.

    Args:
        path: Settings file path.

    Returns:
        Parsed mapping payload.

    Raises:
        SnapshotConfigError: If decode fails or payload is not an object.
    """
    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise SnapshotConfigError(f"Invalid snapshot config JSON: {exc}") from exc
    else:
        try:
            payload = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise SnapshotConfigError(f"Invalid snapshot config YAML: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise SnapshotConfigError(
            "Invalid snapshot config payload: root must be an object"
        )
    return payload


def load_settings(path: Path) -> SnapshotSettings:
    """Load snapshot settings from disk, defaulting when missing.

    Args:
        path: Settings file path.

    Returns:
        Parsed settings, or defaults when the file does not exist.

    Raises:
        SnapshotConfigError: If payload decode or validation fails.
    """
    if not path.exists():
        return SnapshotSettings()
    payload = _decode_settings_payload(path)
    try:
        return SnapshotSettings.model_validate(payload)
    except ValidationError as exc:
        raise SnapshotConfigError(f"Invalid snapshot config payload: {exc}") from exc
