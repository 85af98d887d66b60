"""Structured outcomes for snapshot verification."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class MismatchKind(StrEnum):
    """Reason a snapshot failed verification."""

    NULL_PROPERTY = "null_property"
    UNKNOWN_PROPERTY = "unknown_property"
    RELATION_ONLY_IN_MODEL = "relation_only_in_model"
    RELATION_ONLY_IN_SNAPSHOT = "relation_only_in_snapshot"
    UNREADABLE = "unreadable"


class Mismatch(BaseModel):
    """One verification failure."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: MismatchKind
    name: str
    detail: str = ""


class SnapshotCheck(BaseModel):
    """Deterministic verification result for one model type."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    model_name: str
    mismatches: tuple[Mismatch, ...] = ()

    @property
    def ok(self) -> bool:
        """Return whether verification found no mismatches."""
        return not self.mismatches

    @classmethod
    def passed(cls, model_name: str) -> SnapshotCheck:
        """Construct a successful check.

        Args:
            model_name: Fully qualified model name.

        Returns:
            Check without mismatches.
        """
        return cls(model_name=model_name)

    @classmethod
    def failed(cls, model_name: str, *mismatches: Mismatch) -> SnapshotCheck:
        """Construct a failed check.

        Args:
            model_name: Fully qualified model name.
            *mismatches: Failures found during verification.

        Returns:
            Check carrying the given mismatches.
        """
        return cls(model_name=model_name, mismatches=mismatches)

    def names(self, kind: MismatchKind) -> tuple[str, ...]:
        """Return mismatch names of one kind, in report order.

        Args:
            kind: Mismatch kind to select.

        Returns:
            Names of matching mismatches.
        """
        return tuple(item.name for item in self.mismatches if item.kind == kind)

    def merge(self, other: SnapshotCheck) -> SnapshotCheck:
        """Combine two checks for the same model.

        Args:
            other: Check to append.

        Returns:
            Check holding mismatches from both.
        """
        return SnapshotCheck(
            model_name=self.model_name,
            mismatches=self.mismatches + other.mismatches,
        )
