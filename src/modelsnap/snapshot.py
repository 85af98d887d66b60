"""Snapshot fixture generation and verification for model types."""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError
from pydantic_core import to_jsonable_python

from modelsnap.config import DEFAULT_SNAPSHOT_FOLDER, SnapshotSettings
from modelsnap.errors import (
    SnapshotCleanError,
    SnapshotWriteError,
    UnsupportedFieldTypeError,
)
from modelsnap.populate import RandomPopulator
from modelsnap.results import Mismatch, MismatchKind, SnapshotCheck
from modelsnap.schema import (
    ModelSchema,
    describe_model,
    input_key,
    model_name,
    relation_names,
)

_LOGGER = logging.getLogger(__name__)


class SnapshotManager:
    """Create and verify the JSON snapshot pair of one model type.

    The pair lives in the snapshot folder as ``<module.QualName>.json`` (a
    random instance) and ``<module.QualName>-relation-names.json`` (the
    member names of the model's single nested class). Creation failures
    raise; verification failures are logged and returned as ``False``.
    """

    def __init__(
        self,
        model: type[BaseModel],
        snapshot_folder: Path | str = DEFAULT_SNAPSHOT_FOLDER,
        *,
        populator: RandomPopulator | None = None,
        indent: int = 2,
    ) -> None:
        """Derive snapshot file paths for ``model``.

        Args:
            model: Pydantic model type under test.
            snapshot_folder: Folder holding snapshot files.
            populator: Random instance generator; unseeded when omitted.
            indent: JSON indentation for written files.
        """
        self._model = model
        self._name = model_name(model)
        self._folder = Path(snapshot_folder)
        self._snapshot_file = self._folder / f"{self._name}.json"
        self._relation_names_file = self._folder / f"{self._name}-relation-names.json"
        self._populator = populator or RandomPopulator()
        self._indent = indent

    @classmethod
    def from_settings(
        cls, model: type[BaseModel], settings: SnapshotSettings
    ) -> SnapshotManager:
        """Build a manager from loaded settings.

        Args:
            model: Pydantic model type under test.
            settings: Snapshot settings.

        Returns:
            Configured snapshot manager.
        """
        return cls(
            model,
            settings.snapshot_folder,
            populator=RandomPopulator(
                settings.seed,
                max_collection_size=settings.max_collection_size,
            ),
            indent=settings.indent,
        )

    @property
    def model(self) -> type[BaseModel]:
        """Return the model type under test."""
        return self._model

    @property
    def model_name(self) -> str:
        """Return the fully qualified model name."""
        return self._name

    @property
    def snapshot_folder(self) -> Path:
        """Return the snapshot folder."""
        return self._folder

    @property
    def snapshot_file(self) -> Path:
        """Return the primary snapshot file path."""
        return self._snapshot_file

    @property
    def relation_names_file(self) -> Path:
        """Return the relation-names file path."""
        return self._relation_names_file

    def snapshot_folder_exists(self) -> bool:
        """Return whether the snapshot folder exists."""
        return self._folder.is_dir()

    def exists(self) -> bool:
        """Return whether the primary snapshot file exists."""
        return self._snapshot_file.is_file()

    def relation_names(self) -> tuple[str, ...]:
        """Return relation names declared by the live model type."""
        return relation_names(self._model)

    def describe(self) -> ModelSchema:
        """Return the schema description of the live model type."""
        return describe_model(self._model)

    def clean_snapshot_folder(self) -> None:
        """Delete everything inside the snapshot folder, keeping the folder.

        Raises:
            SnapshotCleanError: If any entry cannot be removed.
        """
        clean_snapshot_folder(self._folder)

    def create(self) -> bool:
        """Write a fresh random snapshot and its relation names.

        Returns:
            Always ``True``; failures raise instead.

        Raises:
            SnapshotWriteError: If the folder or either file cannot be written.
            UnsupportedFieldTypeError: If the model cannot be populated or
                written so that it reads back.
        """
        self._create_snapshot_folder()
        self._write_snapshot_json()
        self._write_relation_names_json()
        return True

    def check_snapshot(self) -> SnapshotCheck:
        """Read the snapshot back and report null or undeclared properties.

        Returns:
            Verification outcome; never raises for unreadable files.
        """
        try:
            payload = json.loads(self._snapshot_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            return self._unreadable(self._snapshot_file, str(exc))
        if not isinstance(payload, dict):
            return self._unreadable(self._snapshot_file, "expected a JSON object")
        computed = _computed_keys(self._model)
        try:
            instance = self._model.model_validate(
                {key: value for key, value in payload.items() if key not in computed}
            )
        except ValidationError as exc:
            return SnapshotCheck.failed(self._name, *_validation_mismatches(exc))
        mismatches = [
            Mismatch(kind=MismatchKind.UNKNOWN_PROPERTY, name=key)
            for key in _unknown_keys(self._model, payload)
        ]
        mismatches.extend(
            Mismatch(kind=MismatchKind.NULL_PROPERTY, name=name)
            for name, value in _readable_properties(instance).items()
            if value is None
        )
        return SnapshotCheck(model_name=self._name, mismatches=tuple(mismatches))

    def matches_snapshot(self) -> bool:
        """Return whether the stored snapshot still fits the model.

        Returns:
            ``True`` when the snapshot deserializes and no property is null.
        """
        check = self.check_snapshot()
        if not check.ok:
            self._log_snapshot_failure(check)
        return check.ok

    def check_relation_names(self) -> SnapshotCheck:
        """Compare live relation names against the stored ones.

        Returns:
            Verification outcome listing names found on one side only.
        """
        try:
            stored = json.loads(self._relation_names_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            return self._unreadable(self._relation_names_file, str(exc))
        if not isinstance(stored, list) or not all(
            isinstance(name, str) for name in stored
        ):
            return self._unreadable(
                self._relation_names_file, "expected a JSON array of strings"
            )
        live_names = set(self.relation_names())
        stored_names = set(stored)
        mismatches = [
            Mismatch(kind=MismatchKind.RELATION_ONLY_IN_MODEL, name=name)
            for name in sorted(live_names - stored_names)
        ]
        mismatches.extend(
            Mismatch(kind=MismatchKind.RELATION_ONLY_IN_SNAPSHOT, name=name)
            for name in sorted(stored_names - live_names)
        )
        return SnapshotCheck(model_name=self._name, mismatches=tuple(mismatches))

    def matches_relation_names(self) -> bool:
        """Return whether stored relation names equal the live ones.

        Returns:
            ``True`` when both set differences are empty.
        """
        check = self.check_relation_names()
        if not check.ok:
            self._log_relation_failure(check)
        return check.ok

    def verify(self) -> SnapshotCheck:
        """Run both checks and combine their outcomes.

        Returns:
            Combined verification outcome.
        """
        return self.check_snapshot().merge(self.check_relation_names())

    def _create_snapshot_folder(self) -> None:
        if self._folder.is_dir():
            return
        try:
            self._folder.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise SnapshotWriteError(
                f"Exception when trying to create snapshot folder ({self._folder})"
            ) from exc
        _LOGGER.info("Snapshot folder created (%s)", self._folder)

    def _write_snapshot_json(self) -> None:
        instance = self._populator.populate(self._model)
        content = json.dumps(_snapshot_payload(instance), indent=self._indent)
        try:
            self._snapshot_file.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise SnapshotWriteError(
                "Exception when trying to write snapshot json file "
                f"({self._snapshot_file.name})"
            ) from exc

    def _write_relation_names_json(self) -> None:
        content = json.dumps(list(self.relation_names()), indent=self._indent)
        try:
            self._relation_names_file.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise SnapshotWriteError(
                "Exception when trying to write relation names json file "
                f"({self._relation_names_file.name})"
            ) from exc

    def _unreadable(self, path: Path, reason: str) -> SnapshotCheck:
        return SnapshotCheck.failed(
            self._name,
            Mismatch(kind=MismatchKind.UNREADABLE, name=path.name, detail=reason),
        )

    def _log_snapshot_failure(self, check: SnapshotCheck) -> None:
        for mismatch in check.mismatches:
            if mismatch.kind == MismatchKind.UNREADABLE:
                _LOGGER.error(
                    "Test failed.\n - Class: %s\n - Exception when trying to read "
                    "snapshot json file.\n - %s: %s",
                    self._name,
                    mismatch.name,
                    mismatch.detail,
                )
        unknown = list(check.names(MismatchKind.UNKNOWN_PROPERTY))
        if unknown:
            _LOGGER.error(
                "Test failed.\n - Class: %s\n - Property not declared by model: %s.",
                self._name,
                unknown,
            )
        nulls = list(check.names(MismatchKind.NULL_PROPERTY))
        if nulls:
            _LOGGER.error(
                "Test failed.\n - Class: %s\n - Property value is null: %s.",
                self._name,
                nulls,
            )

    def _log_relation_failure(self, check: SnapshotCheck) -> None:
        unreadable = check.names(MismatchKind.UNREADABLE)
        if unreadable:
            _LOGGER.error(
                "Exception when trying to read relation names json file (%s).\n%s",
                unreadable[0],
                check.mismatches[0].detail,
            )
            return
        _LOGGER.error(
            "Test failed.\n - Class: %s\n - The relation names are different in "
            "snapshot file and model class:\n"
            " - Relation names in model and not in snapshot: %s\n"
            " - Relation names in snapshot and not in model: %s",
            self._name,
            list(check.names(MismatchKind.RELATION_ONLY_IN_MODEL)),
            list(check.names(MismatchKind.RELATION_ONLY_IN_SNAPSHOT)),
        )


def _validation_mismatches(exc: ValidationError) -> list[Mismatch]:
    """Map validation errors onto mismatches.

    Errors caused by a ``null`` input are reported against the top-level
    property that holds it; anything else makes the snapshot unreadable.

    Args:
        exc: Pydantic validation error.

    Returns:
        Mismatches in error order, one per null property.
    """
    mismatches: list[Mismatch] = []
    seen_nulls: set[str] = set()
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        if error.get("input", ...) is None and error["loc"]:
            name = str(error["loc"][0])
            if name not in seen_nulls:
                seen_nulls.add(name)
                mismatches.append(
                    Mismatch(
                        kind=MismatchKind.NULL_PROPERTY, name=name, detail=location
                    )
                )
            continue
        mismatches.append(
            Mismatch(
                kind=MismatchKind.UNREADABLE,
                name=location or "<root>",
                detail=error["msg"],
            )
        )
    return mismatches


def _snapshot_payload(instance: BaseModel) -> dict[str, object]:
    """Return JSON-ready data keyed the way the model validates it back.

    Computed fields are written for reference and ignored on read.

    Args:
        instance: Populated model instance.

    Returns:
        Payload mapping validation keys to JSON-compatible values.

    Raises:
        UnsupportedFieldTypeError: If a required field is excluded from
            serialization and so cannot be read back.
    """
    model = type(instance)
    payload: dict[str, object] = {}
    for name, info in model.model_fields.items():
        if info.exclude:
            if info.is_required():
                raise UnsupportedFieldTypeError(
                    "Required field excluded from serialization: "
                    f"{model_name(model)}.{name}"
                )
            continue
        payload[input_key(name, info)] = _jsonable(getattr(instance, name))
    for name, info in model.model_computed_fields.items():
        payload[info.alias or name] = _jsonable(getattr(instance, name))
    return payload


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return _snapshot_payload(value)
    if isinstance(value, dict):
        return {
            to_jsonable_python(key): _jsonable(item) for key, item in value.items()
        }
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(item) for item in value]
    return to_jsonable_python(value)


def _computed_keys(model: type[BaseModel]) -> set[str]:
    keys: set[str] = set()
    for name, info in model.model_computed_fields.items():
        keys.add(name)
        if info.alias:
            keys.add(info.alias)
    return keys


def _unknown_keys(model: type[BaseModel], payload: dict[str, object]) -> list[str]:
    if model.model_config.get("extra") == "allow":
        return []
    known = _computed_keys(model)
    for name, info in model.model_fields.items():
        known.update((name, input_key(name, info)))
        if info.alias:
            known.add(info.alias)
    return [key for key in payload if key not in known]


def _readable_properties(instance: BaseModel) -> dict[str, object]:
    model = type(instance)
    names = [
        *(name for name, info in model.model_fields.items() if not info.exclude),
        *model.model_computed_fields,
    ]
    return {name: getattr(instance, name) for name in names}


def clean_snapshot_folder(folder: Path) -> None:
    """Delete every entry inside ``folder``; a missing folder is a no-op.

    Args:
        folder: Snapshot folder.

    Raises:
        SnapshotCleanError: If any entry cannot be removed.
    """
    if not folder.is_dir():
        return
    try:
        for entry in folder.iterdir():
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
    except OSError as exc:
        raise SnapshotCleanError(
            f"Exception when trying to clean snapshot folder ({folder})"
        ) from exc
