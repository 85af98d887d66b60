"""Model snapshot fixture public surface."""

from modelsnap.config import SnapshotSettings, load_settings
from modelsnap.errors import (
    ModelLoadError,
    SnapshotCleanError,
    SnapshotConfigError,
    SnapshotError,
    SnapshotWriteError,
    UnsupportedFieldTypeError,
)
from modelsnap.loader import load_model
from modelsnap.populate import RandomPopulator
from modelsnap.results import Mismatch, MismatchKind, SnapshotCheck
from modelsnap.schema import (
    FieldKind,
    FieldSpec,
    ModelSchema,
    describe_model,
    relation_names,
)
from modelsnap.snapshot import SnapshotManager, clean_snapshot_folder

__all__ = [
    "FieldKind",
    "FieldSpec",
    "Mismatch",
    "MismatchKind",
    "ModelLoadError",
    "ModelSchema",
    "RandomPopulator",
    "SnapshotCheck",
    "SnapshotCleanError",
    "SnapshotConfigError",
    "SnapshotError",
    "SnapshotManager",
    "SnapshotSettings",
    "SnapshotWriteError",
    "UnsupportedFieldTypeError",
    "clean_snapshot_folder",
    "describe_model",
    "load_model",
    "load_settings",
    "relation_names",
]
