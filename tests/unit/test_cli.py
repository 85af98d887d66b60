"""Unit tests for modelsnap CLI command entrypoints."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from modelsnap.cli import app
from modelsnap.schema import model_name
from modelsnap.snapshot import SnapshotManager
from tests.unit.sample_models import Employee, Person

_RUNNER = CliRunner()
_PERSON = "tests.unit.sample_models:Person"
_EMPLOYEE = "tests.unit.sample_models:Employee"


@pytest.mark.unit
def test_create_writes_snapshots_for_each_model(snapshot_folder: Path) -> None:
    """`modelsnap create` should write one snapshot pair per model."""
    # Act - create two snapshots
    result = _RUNNER.invoke(
        app,
        ["create", _PERSON, _EMPLOYEE, "--folder", str(snapshot_folder)],
    )

    # Assert - exit 0 and files present
    assert result.exit_code == 0
    assert SnapshotManager(Person, snapshot_folder).exists()
    assert SnapshotManager(Employee, snapshot_folder).exists()
    assert "wrote" in result.stdout


@pytest.mark.unit
def test_create_with_seed_is_reproducible(tmp_path: Path) -> None:
    """Same seed should produce identical snapshot files."""
    # Act - create into two folders with one seed
    for name in ("a", "b"):
        result = _RUNNER.invoke(
            app,
            ["create", _EMPLOYEE, "--folder", str(tmp_path / name), "--seed", "3"],
        )
        assert result.exit_code == 0

    # Assert - identical content
    file_name = f"{model_name(Employee)}.json"
    first = (tmp_path / "a" / file_name).read_text(encoding="utf-8")
    second = (tmp_path / "b" / file_name).read_text(encoding="utf-8")
    assert first == second


@pytest.mark.unit
def test_create_with_clean_removes_stale_files(snapshot_folder: Path) -> None:
    """`--clean` should empty the folder before writing."""
    # Arrange - stale file in folder
    snapshot_folder.mkdir()
    stale = snapshot_folder / "stale.json"
    stale.write_text("{}", encoding="utf-8")

    # Act - create with clean
    result = _RUNNER.invoke(
        app, ["create", _PERSON, "--folder", str(snapshot_folder), "--clean"]
    )

    # Assert - stale removed, snapshot written
    assert result.exit_code == 0
    assert not stale.exists()
    assert SnapshotManager(Person, snapshot_folder).exists()


@pytest.mark.unit
def test_create_unknown_model_exits_with_error(snapshot_folder: Path) -> None:
    """Unresolvable model reference should exit non-zero."""
    # Act - create unknown model
    result = _RUNNER.invoke(
        app,
        [
            "create",
            "tests.unit.sample_models:Missing",
            "--folder",
            str(snapshot_folder),
        ],
    )

    # Assert - exit 1, nothing written
    assert result.exit_code == 1
    assert "has no attribute" in result.stdout
    assert not snapshot_folder.exists()


@pytest.mark.unit
def test_verify_passes_after_create(snapshot_folder: Path) -> None:
    """`modelsnap verify` should pass for fresh snapshots."""
    # Arrange - create snapshots
    _RUNNER.invoke(
        app, ["create", _PERSON, _EMPLOYEE, "--folder", str(snapshot_folder)]
    )

    # Act - verify
    result = _RUNNER.invoke(
        app, ["verify", _PERSON, _EMPLOYEE, "--folder", str(snapshot_folder)]
    )

    # Assert - exit 0
    assert result.exit_code == 0
    assert "failed" not in result.stdout


@pytest.mark.unit
def test_verify_fails_on_relation_drift(snapshot_folder: Path) -> None:
    """Drifted relation names should make verify exit non-zero."""
    # Arrange - snapshot with extra stored relation
    manager = SnapshotManager(Employee, snapshot_folder)
    manager.create()
    manager.relation_names_file.write_text(
        json.dumps(["EMPLOYER", "MANAGER", "ADDRESS", "EXTRA"]), encoding="utf-8"
    )

    # Act - verify
    result = _RUNNER.invoke(
        app, ["verify", _EMPLOYEE, "--folder", str(snapshot_folder)]
    )

    # Assert - exit 1 and failure rendered
    assert result.exit_code == 1
    assert "failed" in result.stdout


@pytest.mark.unit
def test_verify_missing_snapshot_fails_without_create_flag(
    snapshot_folder: Path,
) -> None:
    """Missing snapshots should fail unless creation is requested."""
    # Act - verify without and with --create-missing
    missing = _RUNNER.invoke(app, ["verify", _PERSON, "--folder", str(snapshot_folder)])
    created = _RUNNER.invoke(
        app,
        ["verify", _PERSON, "--folder", str(snapshot_folder), "--create-missing"],
    )

    # Assert - first fails, second creates and passes
    assert missing.exit_code == 1
    assert created.exit_code == 0
    assert SnapshotManager(Person, snapshot_folder).exists()


@pytest.mark.unit
def test_clean_empties_folder(snapshot_folder: Path) -> None:
    """`modelsnap clean` should remove snapshot files and keep the folder."""
    # Arrange - snapshot on disk
    SnapshotManager(Person, snapshot_folder).create()

    # Act - clean
    result = _RUNNER.invoke(app, ["clean", "--folder", str(snapshot_folder)])

    # Assert - empty folder remains
    assert result.exit_code == 0
    assert snapshot_folder.is_dir()
    assert list(snapshot_folder.iterdir()) == []


@pytest.mark.unit
def test_settings_file_supplies_folder(tmp_path: Path) -> None:
    """Settings file folder should be used when no option overrides it."""
    # Arrange - settings pointing at a custom folder
    folder = tmp_path / "from-config"
    config_file = tmp_path / "modelsnap.yaml"
    config_file.write_text(f"snapshot_folder: {folder}\nseed: 1\n", encoding="utf-8")

    # Act - create using config only
    result = _RUNNER.invoke(app, ["create", _PERSON, "--config-file", str(config_file)])

    # Assert - snapshot written in configured folder
    assert result.exit_code == 0
    assert SnapshotManager(Person, folder).exists()


@pytest.mark.unit
def test_invalid_settings_fall_back_to_defaults(tmp_path: Path) -> None:
    """Invalid settings should warn and continue with defaults."""
    # Arrange - invalid settings and explicit folder
    config_file = tmp_path / "modelsnap.yaml"
    config_file.write_text("unknown_key: 1\n", encoding="utf-8")
    folder = tmp_path / "snapshots"

    # Act - create with invalid config
    result = _RUNNER.invoke(
        app,
        ["create", _PERSON, "--config-file", str(config_file), "--folder", str(folder)],
    )

    # Assert - warning shown and snapshot written
    assert result.exit_code == 0
    assert "Reason:" in result.stdout
    assert SnapshotManager(Person, folder).exists()


@pytest.mark.unit
def test_describe_lists_fields_and_relations() -> None:
    """`modelsnap describe` should print field kinds and relation names."""
    # Act - describe Employee
    result = _RUNNER.invoke(app, ["describe", _EMPLOYEE])

    # Assert - fields and relations rendered
    assert result.exit_code == 0
    assert "nickname" in result.stdout
    assert "optional" in result.stdout
    assert "Relation names: EMPLOYER, MANAGER, ADDRESS" in result.stdout
