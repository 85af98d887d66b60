"""Typer CLI entrypoint for modelsnap."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from pydantic import BaseModel
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from modelsnap.config import (
    DEFAULT_CONFIG_FILE,
    SnapshotSettings,
    load_settings,
)
from modelsnap.errors import ModelLoadError, SnapshotConfigError, SnapshotError
from modelsnap.loader import load_model
from modelsnap.results import SnapshotCheck
from modelsnap.snapshot import SnapshotManager, clean_snapshot_folder

app = typer.Typer(help="Create and verify model snapshot fixtures.")
_CONSOLE = Console()
_LOGGING_CONFIGURED = False

ModelsArgument = Annotated[
    list[str],
    typer.Argument(help="Model references such as 'package.module:Model'."),
]
FolderOption = Annotated[
    Path | None,
    typer.Option(file_okay=False, dir_okay=True, help="Snapshot folder."),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option(
        file_okay=True,
        dir_okay=False,
        help="Path to modelsnap YAML/JSON settings file.",
    ),
]


def configure_logging() -> None:
    """Configure Rich-backed logging once for CLI commands."""
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if _LOGGING_CONFIGURED:
        return
    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, rich_tracebacks=True)],
    )
    _LOGGING_CONFIGURED = True


def _resolve_settings(
    config_file: Path | None,
    *,
    folder: Path | None = None,
    seed: int | None = None,
) -> SnapshotSettings:
    """Load settings and apply command-line overrides.

    Args:
        config_file: Optional settings file override.
        folder: Optional snapshot folder override.
        seed: Optional random seed override.

    Returns:
        Effective settings.
    """
    effective_config_file = config_file or DEFAULT_CONFIG_FILE
    try:
        settings = load_settings(effective_config_file)
    except SnapshotConfigError as exc:
        _CONSOLE.print(
            f"[yellow]Settings at {effective_config_file} are invalid; "
            "falling back to defaults.[/yellow]"
        )
        _CONSOLE.print(f"[yellow]Reason: {exc}[/yellow]")
        settings = SnapshotSettings()
    overrides: dict[str, object] = {}
    if folder is not None:
        overrides["snapshot_folder"] = folder
    if seed is not None:
        overrides["seed"] = seed
    return settings.model_copy(update=overrides)


def _load_models(references: list[str]) -> list[type[BaseModel]]:
    """Resolve model references or exit with an error.

    Args:
        references: Model reference strings.

    Returns:
        Model types in argument order.

    Raises:
        typer.Exit: If any reference cannot be resolved.
    """
    try:
        return [load_model(reference) for reference in references]
    except ModelLoadError as exc:
        _CONSOLE.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1) from exc


def _render_checks(checks: list[SnapshotCheck]) -> None:
    table = Table(title="Snapshot Verification", show_header=True)
    table.add_column("Model", style="bold")
    table.add_column("Status")
    table.add_column("Mismatches")
    for check in checks:
        status = "[green]ok[/green]" if check.ok else "[red]failed[/red]"
        details = "\n".join(
            f"{item.kind.value}: {item.name}" for item in check.mismatches
        )
        table.add_row(check.model_name, status, details or "-")
    _CONSOLE.print(table)


@app.command("create")
def create_command(
    models: ModelsArgument,
    folder: FolderOption = None,
    seed: Annotated[
        int | None,
        typer.Option(help="Random seed for reproducible snapshots."),
    ] = None,
    config_file: ConfigOption = None,
    clean: Annotated[
        bool,
        typer.Option("--clean", help="Empty the snapshot folder first."),
    ] = False,
) -> None:
    """Write fresh snapshots for the given models.

    Args:
        models: Model references.
        folder: Optional snapshot folder override.
        seed: Optional random seed override.
        config_file: Optional settings file override.
        clean: Whether to empty the snapshot folder first.
    """
    configure_logging()
    settings = _resolve_settings(config_file, folder=folder, seed=seed)
    managers = [
        SnapshotManager.from_settings(model, settings)
        for model in _load_models(models)
    ]
    try:
        if clean:
            clean_snapshot_folder(settings.snapshot_folder)
        for manager in managers:
            manager.create()
            _CONSOLE.print(f"wrote {manager.snapshot_file}")
    except SnapshotError as exc:
        _CONSOLE.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1) from exc


@app.command("verify")
def verify_command(
    models: ModelsArgument,
    folder: FolderOption = None,
    config_file: ConfigOption = None,
    create_missing: Annotated[
        bool,
        typer.Option(
            "--create-missing",
            help="Create snapshots that do not exist yet before verifying.",
        ),
    ] = False,
) -> None:
    """Verify stored snapshots against the current models.

    Args:
        models: Model references.
        folder: Optional snapshot folder override.
        config_file: Optional settings file override.
        create_missing: Whether to create absent snapshots first.

    Raises:
        typer.Exit: With code 1 when any model fails verification.
    """
    configure_logging()
    settings = _resolve_settings(config_file, folder=folder)
    checks: list[SnapshotCheck] = []
    for model in _load_models(models):
        manager = SnapshotManager.from_settings(model, settings)
        if create_missing and not manager.exists():
            try:
                manager.create()
            except SnapshotError as exc:
                _CONSOLE.print(f"[bold red]{exc}[/bold red]")
                raise typer.Exit(code=1) from exc
        checks.append(manager.verify())
    _render_checks(checks)
    if not all(check.ok for check in checks):
        raise typer.Exit(code=1)


@app.command("clean")
def clean_command(
    folder: FolderOption = None,
    config_file: ConfigOption = None,
) -> None:
    """Delete every file inside the snapshot folder.

    Args:
        folder: Optional snapshot folder override.
        config_file: Optional settings file override.
    """
    configure_logging()
    settings = _resolve_settings(config_file, folder=folder)
    try:
        clean_snapshot_folder(settings.snapshot_folder)
    except SnapshotError as exc:
        _CONSOLE.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1) from exc
    _CONSOLE.print(f"cleaned {settings.snapshot_folder}")


@app.command("describe")
def describe_command(
    model: Annotated[
        str,
        typer.Argument(help="Model reference such as 'package.module:Model'."),
    ],
) -> None:
    """Show the declared fields and relation names of a model.

    Args:
        model: Model reference.
    """
    configure_logging()
    (model_type,) = _load_models([model])
    try:
        schema = SnapshotManager(model_type).describe()
    except SnapshotError as exc:
        _CONSOLE.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1) from exc
    table = Table(title=schema.name, show_header=True, header_style="bold cyan")
    table.add_column("Field", style="bold")
    table.add_column("Kind", style="green")
    for spec in schema.field_specs:
        table.add_row(spec.name, spec.kind.value)
    _CONSOLE.print(table)
    relations = ", ".join(schema.relation_names) or "-"
    _CONSOLE.print(f"Relation names: {relations}")


def main() -> None:
    """Run the modelsnap CLI."""
    app()


if __name__ == "__main__":
    main()
