"""CLI entry point using typer."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from parrot import __version__
from parrot.config import CONFIG_FILE, AppConfig, load_config, save_config
from parrot.errors import EditorError, ExecutionError, ParseError, ScanError, StoreError
from parrot.services.editor import Editor
from parrot.services.reconcile import Reconciler
from parrot.services.shell import ShellRunner
from parrot.session.parser import Target, parse_predicates
from parrot.session.repl import Session
from parrot.session.scanner import scan
from parrot.session.view import View
from parrot.storage.models import normalize_name, random_name, to_snapshot
from parrot.storage.store import SnapshotStore
from parrot.utils import formatting

app = typer.Typer(
    name="parrot",
    help="Snapshot testing for your scripts and CLI programs.",
    add_completion=False,
)
console = Console()
logger = logging.getLogger(__name__)


def _setup(path: Optional[Path]) -> tuple[AppConfig, SnapshotStore]:
    config = load_config()
    log_path = Path(config.logging.file).expanduser().resolve()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, config.logging.level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.FileHandler(str(log_path))],
    )
    return config, SnapshotStore(path or config.storage.path)


def _load(store: SnapshotStore) -> None:
    """Load the store; any failure here ends the process."""
    try:
        store.load_all()
    except StoreError as e:
        formatting.error(console, e.message)
        raise typer.Exit(1)


@app.command()
def init(path: Optional[Path] = typer.Option(None, "--path", "-p", help="Data directory (default: from config)")) -> None:
    """Initialize a snapshot store."""
    _, store = _setup(path)
    try:
        store.initialize()
    except StoreError as e:
        formatting.error(console, e.message)
        raise typer.Exit(1)
    console.print("Parrot has been initialized.")


@app.command()
def add(
    cmd: str = typer.Argument(..., help="Shell command to snapshot"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Snapshot name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Save without confirmation"),
    path: Optional[Path] = typer.Option(None, "--path", "-p", help="Data directory (default: from config)"),
) -> None:
    """Capture the output of a command as a new snapshot."""
    config, store = _setup(path)
    _load(store)

    try:
        result = ShellRunner(config).execute(cmd)
    except ExecutionError as e:
        formatting.error(console, e.message)
        raise typer.Exit(1)

    if not yes:
        formatting.snap_preview(console, result)
        if not typer.confirm("Save this snapshot?", default=True):
            console.print("[dim]Snapshot discarded.[/dim]")
            return

    description: Optional[str] = None
    tags: list[str] = []
    if name is not None:
        snap_name = normalize_name(name)
    elif yes:
        snap_name = random_name()
    else:
        try:
            edit = Editor(config).open_for_new(store.path, cmd)
        except EditorError as e:
            logger.warning("Editor failed, using a generated name: %s", e.message)
            formatting.warning(console, f"{e.message} Using a generated name.")
            snap_name = random_name()
        else:
            description = edit.description
            tags = edit.tags
            snap_name = normalize_name(edit.name) if edit.name else random_name()

    snapshot = to_snapshot(snap_name, cmd, result, description=description, tags=tags)
    try:
        store.add(snapshot)
    except StoreError as e:
        formatting.error(console, e.message)
        raise typer.Exit(1)
    console.print(f"[green]Saved snapshot '{escape(snapshot.name)}'.[/green]")


@app.command()
def run(
    filters: Optional[List[str]] = typer.Argument(None, help="Filters, e.g. tag:smoke status:failed"),
    path: Optional[Path] = typer.Option(None, "--path", "-p", help="Data directory (default: from config)"),
) -> None:
    """Run all snapshots and report drift."""
    config, store = _setup(path)
    _load(store)

    view = View(store.snapshots)
    if filters:
        try:
            view.apply_filter(parse_predicates(scan(" ".join(filters))))
        except (ScanError, ParseError) as e:
            formatting.error(console, e.message)
            raise typer.Exit(2)

    session = Session(store, view, Reconciler(ShellRunner(config)), Editor(config), console)
    try:
        passed = session.execute_run(Target.ALL)
    except ExecutionError as e:
        formatting.error(console, e.message)
        raise typer.Exit(1)
    if not passed:
        raise typer.Exit(1)


@app.command()
def repl(path: Optional[Path] = typer.Option(None, "--path", "-p", help="Data directory (default: from config)")) -> None:
    """Start the interactive session."""
    from parrot.session.terminal import Terminal

    config, store = _setup(path)
    _load(store)

    view = View(store.snapshots)
    session = Session(store, view, Reconciler(ShellRunner(config)), Editor(config), console)
    console.print(f"[bold]Parrot v{__version__}[/bold] - {len(store.snapshots)} snapshots. Type 'help' for commands.")
    session.run(Terminal())


@app.command()
def config(
    key: str = typer.Argument(None, help="Config key (e.g., shell.executable)"),
    value: str = typer.Argument(None, help="New value"),
) -> None:
    """View or modify configuration."""
    cfg = load_config()
    section_map = {"storage": cfg.storage, "shell": cfg.shell, "editor": cfg.editor, "logging": cfg.logging}

    if key is None:
        table = Table(title="Configuration")
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="green")
        for section, obj in section_map.items():
            for attr, current in vars(obj).items():
                table.add_row(f"{section}.{attr}", str(current) if current != "" else "(not set)")
        console.print(table)
        return

    if value is None:
        console.print("[red]Usage: parrot config <key> <value>[/red]")
        raise typer.Exit(1)

    parts = key.split(".")
    if len(parts) != 2:
        console.print("[red]Key format: section.key (e.g., shell.executable)[/red]")
        raise typer.Exit(1)

    section, attr = parts
    if section not in section_map:
        console.print(f"[red]Unknown section: {section}[/red]")
        raise typer.Exit(1)

    obj = section_map[section]
    if not hasattr(obj, attr):
        console.print(f"[red]Unknown key: {key}[/red]")
        raise typer.Exit(1)

    setattr(obj, attr, value)
    save_config(cfg)
    console.print(f"[green]{key} = {value}[/green]")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"parrot v{__version__}")
    console.print(f"Python: {sys.version.split()[0]}")
    console.print(f"Config: {CONFIG_FILE}")


if __name__ == "__main__":
    app()
