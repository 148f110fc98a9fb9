#!/usr/bin/env python3
"""
Command-line interface for Gravity.

This module renders status, diffs and sync summaries produced by the core
SyncManager. All decisions about what may be synced live in the core.
"""

import sys
import json
import difflib
from pathlib import Path
from typing import Dict, Optional

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.syntax import Syntax
from rich.prompt import Confirm

from .core.classifier import ChangeType
from .core.errors import GravityError
from .core.executor import SyncOptions, SyncSummary
from .core.status import StatusEntry
from .core.sync import SyncManager
from .core.workspace import Workspace, default_root
from .utils.logger import setup_logging
from .utils.path import collapse_home

# Rich console for formatted output
console = Console()

CHANGE_STYLES = {
    ChangeType.UNCHANGED: "green",
    ChangeType.SOURCE_CHANGED: "cyan",
    ChangeType.SYSTEM_CHANGED: "yellow",
    ChangeType.CONFLICT: "red bold",
    ChangeType.MISSING_SYSTEM: "blue",
    ChangeType.MISSING_SOURCE: "red",
    ChangeType.OUT_OF_SYNC: "yellow",
}


def get_manager(ctx) -> SyncManager:
    """Build a sync manager for the workspace selected on the command line."""
    return SyncManager(Workspace.from_root(ctx.obj['root']))


def fail(message: str):
    console.print(f"[red]{message}[/red]")
    sys.exit(1)


def format_status_table(status: Dict[str, StatusEntry]) -> Table:
    """Format a status snapshot as a rich table."""
    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Config", style="cyan", no_wrap=True)
    table.add_column("State")
    table.add_column("Target", style="magenta")

    for key, info in status.items():
        style = CHANGE_STYLES.get(info.change_type, "white")
        override = " [dim]\\[override][/dim]" if info.used_override else ""
        table.add_row(
            key + override,
            f"[{style}]{info.change_type.description}[/]",
            collapse_home(info.target_path),
        )

    return table


def format_sync_summary(summary: SyncSummary):
    """Display the outcome of a batch sync."""
    console.print(
        f"[green]✓ {summary.synced} synced[/green], "
        f"[dim]{summary.unchanged} unchanged[/dim], "
        f"[yellow]{summary.skipped} skipped[/yellow]"
    )

    for key, change_type in summary.skipped_keys.items():
        console.print(f"  [yellow]⚠[/yellow] {key}: {change_type.description}")

    if summary.failed:
        console.print("[red]Failed:[/red]")
        for key, error in summary.failed.items():
            console.print(f"  - {key}: {error}")


def read_lines(path: Path):
    return path.read_text(encoding='utf-8', errors='replace').splitlines(keepends=True)


# Main CLI group
@click.group()
@click.option('--root', type=click.Path(path_type=Path), envvar='GRAVITY_ROOT',
              help='Path to the Gravity configuration tree')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--log-file', type=click.Path(path_type=Path), help='Log file path')
@click.pass_context
def cli(ctx, root: Optional[Path], verbose: bool, log_file: Optional[Path]):
    """Gravity - keep tracked dotfiles in sync with your system."""
    ctx.ensure_object(dict)

    setup_logging(
        level='DEBUG' if verbose else 'INFO',
        log_file=log_file,
        verbose=verbose
    )

    ctx.obj['root'] = root or default_root()
    ctx.obj['verbose'] = verbose


# Status command
@cli.command()
@click.option('--format', 'output_format', type=click.Choice(['table', 'json']),
              default='table', help='Output format')
@click.pass_context
def status(ctx, output_format: str):
    """Show which config files differ from the repository."""
    try:
        snapshot = get_manager(ctx).get_status()
    except GravityError as e:
        fail(f"Failed to get status: {e}")

    if output_format == 'json':
        click.echo(json.dumps([info.to_dict() for info in snapshot.values()], indent=2))
        return

    if not snapshot:
        console.print("[dim]No config files configured in the manifest.[/dim]")
        return

    console.print(format_status_table(snapshot))

    if any(info.change_type.needs_attention for info in snapshot.values()):
        console.print("\n[dim]Run 'gravity sync' to review and apply changes[/dim]")
    else:
        console.print("\n[green]✓ All config files in sync[/green]")


# Sync command
@cli.command()
@click.argument('keys', nargs=-1)
@click.option('--force', is_flag=True, help='Overwrite files that were changed on the system')
@click.option('--quiet', '-q', is_flag=True, help='Only report warnings and the summary')
@click.option('--no-backup', is_flag=True, help='Do not back up files before overwriting')
@click.option('--yes', '-y', is_flag=True, help='Skip confirmation prompt')
@click.pass_context
def sync(ctx, keys: tuple, force: bool, quiet: bool, no_backup: bool, yes: bool):
    """Copy changed config files from the repository to the system."""
    manager = get_manager(ctx)

    try:
        snapshot = manager.get_status()
        for key in keys:
            manager.get_entry(key)
    except GravityError as e:
        fail(f"Failed to sync: {e}")

    selected = {k: v for k, v in snapshot.items() if not keys or k in keys}
    pending = {k: v for k, v in selected.items() if v.change_type.needs_attention}

    if not pending:
        console.print("[green]✓ All config files in sync[/green]")
        return

    if not quiet:
        console.print(format_status_table(pending))

    if not yes and not Confirm.ask("Apply these changes?", console=console):
        console.print("Sync cancelled.")
        return

    overwritten = [k for k, v in pending.items() if v.change_type is ChangeType.SYSTEM_CHANGED]
    if force and overwritten:
        console.print("\n[yellow bold]⚠ Local edits on these files will be overwritten:[/yellow bold]")
        for key in overwritten:
            console.print(f"  - [yellow]{key}[/yellow] ({collapse_home(pending[key].target_path)})")
        console.print(
            "[dim]To keep them, copy each file into configs.overrides/ "
            "under its source filename before syncing.[/dim]"
        )

        if not yes and not Confirm.ask("Overwrite system changes?", console=console):
            console.print("Sync cancelled.")
            return

    options = SyncOptions(force=force, quiet=quiet, no_backup=no_backup)
    try:
        summary = manager.sync_all(options, keys=keys or None)
    except GravityError as e:
        fail(f"Failed to sync: {e}")

    format_sync_summary(summary)
    if summary.has_failures:
        sys.exit(1)


# Diff command
@cli.command()
@click.argument('key', required=False)
@click.pass_context
def diff(ctx, key: Optional[str]):
    """Show the difference between a system file and its source."""
    manager = get_manager(ctx)

    try:
        snapshot = manager.get_status()
        if key:
            manager.get_entry(key)
    except GravityError as e:
        fail(f"Failed to diff: {e}")

    if not key:
        changed = [k for k, info in snapshot.items() if info.change_type.needs_attention]
        if not changed:
            console.print("[green]✓ All config files in sync[/green]")
            return
        console.print("Files with changes:")
        for name in changed:
            console.print(f"  - [cyan]{name}[/cyan] ({snapshot[name].change_type.description})")
        console.print("\n[dim]Run 'gravity diff <config>' to see a diff[/dim]")
        return

    info = snapshot[key]
    source_label = 'override' if info.used_override else 'base'
    console.print(Panel(f"system vs {source_label}", title=f"Diff: {key}"))

    if info.change_type is ChangeType.MISSING_SOURCE:
        fail(f"Source file not found: {info.source_path}")
    if info.change_type is ChangeType.MISSING_SYSTEM:
        console.print("[dim]System file not found (will be created on sync)[/dim]")
        return

    try:
        lines = difflib.unified_diff(
            read_lines(info.target_path),
            read_lines(info.source_path),
            fromfile=collapse_home(info.target_path),
            tofile=f"{source_label}: {collapse_home(info.source_path)}",
        )
        text = ''.join(lines)
    except OSError as e:
        fail(f"Failed to read files: {e}")

    if not text:
        console.print("[green]✓ Files are identical[/green]")
    else:
        console.print(Syntax(text, "diff", theme="ansi_dark"))


# State commands group
@cli.group()
def state():
    """Inspect or reset the recorded sync state."""
    pass


@state.command('show')
@click.pass_context
def state_show(ctx):
    """Print the recorded sync state."""
    sync_state = get_manager(ctx).load_state()
    click.echo(json.dumps(sync_state.to_dict(), indent=2))


@state.command('clear')
@click.argument('keys', nargs=-1)
@click.option('--force', is_flag=True, help='Skip confirmation prompt')
@click.pass_context
def state_clear(ctx, keys: tuple, force: bool):
    """Forget sync records so the entries are treated as never synced."""
    manager = get_manager(ctx)

    if not force and not Confirm.ask("Forget recorded sync state?", console=console):
        console.print("Clear cancelled.")
        return

    try:
        if not keys:
            manager.store.clear()
        else:
            sync_state = manager.load_state()
            removed = 0
            for key in keys:
                if sync_state.remove_record(key):
                    removed += 1
                else:
                    console.print(f"[yellow]No sync record for '{key}'[/yellow]")

            if not removed:
                console.print("[dim]Sync state unchanged.[/dim]")
                return
            manager.save_state(sync_state)
    except GravityError as e:
        fail(f"Failed to save sync state: {e}")

    console.print("[green]✓ Sync state updated[/green]")


def main():
    """Main entry point for the CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user.[/yellow]")
        sys.exit(1)


if __name__ == '__main__':
    main()
