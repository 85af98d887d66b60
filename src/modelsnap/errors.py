"""Error hierarchy for snapshot generation and loading."""

from __future__ import annotations


class SnapshotError(RuntimeError):
    """Base error for fatal snapshot operations."""


class SnapshotCleanError(SnapshotError):
    """Raised when the snapshot folder cannot be cleaned."""


class SnapshotWriteError(SnapshotError):
    """Raised when a snapshot or relation-names file cannot be written."""


class UnsupportedFieldTypeError(SnapshotError):
    """Raised when no random value strategy exists for a field annotation."""


class ModelLoadError(SnapshotError):
    """Raised when a model reference cannot be resolved to a model type."""


class SnapshotConfigError(SnapshotError):
    """Raised when snapshot settings cannot be decoded or validated."""
