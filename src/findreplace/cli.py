"""Command line interface for FindReplace."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
import uvicorn
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from findreplace.config import AppConfig
from findreplace.history.store import SQLiteHistoryStore
from findreplace.models import Preview, RunSummary
from findreplace.replace.engine import ReplaceEngine, summary_from_scan
from findreplace.replace.scanner import build_preview
from findreplace.utils.files import describe_scope
from findreplace.utils.text import EmptySearchError, normalize_replacement, normalize_search
from findreplace.web.app import app as web_app


console = Console()
app = typer.Typer(help="FindReplace - recursive find & replace for .md/.txt files")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _open_history(history: Optional[Path], config: AppConfig) -> SQLiteHistoryStore:
    if history is not None:
        config = AppConfig(history_path=history, history_size=config.history_size)
    resolved = config.resolve_history_path(Path.cwd())
    _ensure_parent(resolved)
    return SQLiteHistoryStore(resolved, max_items=config.history_size)


def _print_preview_table(preview: Preview) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Matches", justify="right")
    table.add_column("File")
    for entry in preview.entries:
        table.add_row(str(entry.count), escape(str(entry.path)))
    console.print(table)

    if preview.hidden_count:
        console.print(f"... (+{preview.hidden_count} more files)")


def _print_preview(preview: Preview, find: str, replacement: str) -> None:
    _print_preview_table(preview)
    console.print(f"Find: {escape(repr(find))}")
    console.print(f"Replace with: {escape(repr(replacement))}")
    console.print(f"Files with matches: {preview.files_matched}")
    console.print(f"Total matches: {preview.total_occurrences}")
    if preview.unreadable_count:
        console.print(
            f"[yellow]Note: {preview.unreadable_count} files could not be read and are ignored.[/yellow]"
        )


def _print_summary(summary: RunSummary, error_limit: int) -> None:
    console.print("[green]Done.[/green]")
    console.print(f"Files changed: {summary.files_changed}")
    console.print(f"Replacements: {summary.replacements_written}")
    if summary.failures:
        console.print(f"[red]Write errors: {summary.failed}[/red]")
        for line in summary.failure_lines(error_limit):
            console.print(escape(line))


@app.command()
def replace(
    inputs: Optional[List[str]] = typer.Argument(None, help="Files or folders to process."),
    find: Optional[str] = typer.Option(None, "--find", "-f", help="Text to search for"),
    replacement: Optional[str] = typer.Option(
        None, "--replace", "-r", help="Replacement text (empty removes matches)"
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Replace without asking for confirmation"),
    history: Path = typer.Option(None, "--history", help="History database path"),
    no_history: bool = typer.Option(False, "--no-history", help="Do not read or save history"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Replace text in every .md/.txt file below the given paths."""
    _setup_logging(verbose)
    config = AppConfig()
    engine = ReplaceEngine(encodings=config.encodings)

    if not inputs:
        inputs = [typer.prompt("Folder to process", default=str(Path.cwd()))]

    targets = engine.resolve(inputs)
    if not targets:
        console.print("[yellow]No .md/.txt files found.[/yellow]")
        return

    store = None if no_history else _open_history(history, config)
    try:
        recent_finds = store.load_finds() if store else []
        recent_replaces = store.load_replaces() if store else []

        scope = describe_scope(inputs)
        if scope:
            console.print(f"Folder: [bold]{escape(scope)}[/bold]")

        if find is None:
            find = typer.prompt("Find", default=recent_finds[0] if recent_finds else None)
        try:
            find = normalize_search(find)
        except EmptySearchError as exc:
            raise typer.BadParameter(str(exc), param_hint="--find") from exc

        if replacement is None:
            replacement = typer.prompt(
                "Replace with (empty removes matches)",
                default=recent_replaces[0] if recent_replaces else "",
                show_default=bool(recent_replaces),
            )
        replacement = normalize_replacement(replacement)

        if store:
            store.save(find, replacement)
    finally:
        if store:
            store.close()

    report = engine.scan(targets, find)
    if not report.matches:
        console.print(f"[yellow]No matches for: {escape(repr(find))}[/yellow]")
        console.print(f"Files searched: {report.files_scanned}")
        if report.unreadable:
            console.print(f"Unreadable: {len(report.unreadable)}")
        return

    _print_preview(build_preview(report, config.preview_limit), find, replacement)

    if not yes and not typer.confirm("Replace all?", default=False):
        console.print("Cancelled, no files were changed.")
        return

    summary = engine.apply(report.matches, find, replacement, summary=summary_from_scan(report))
    _print_summary(summary, config.error_limit)
    if summary.failures:
        raise typer.Exit(code=1)


@app.command()
def preview(
    inputs: List[str] = typer.Argument(..., help="Files or folders to scan."),
    find: str = typer.Option(..., "--find", "-f", help="Text to search for"),
    limit: int = typer.Option(AppConfig().preview_limit, help="Number of files to display"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Show which files contain the search text without changing anything."""
    _setup_logging(verbose)
    config = AppConfig()
    try:
        find = normalize_search(find)
    except EmptySearchError as exc:
        raise typer.BadParameter(str(exc), param_hint="--find") from exc

    engine = ReplaceEngine(encodings=config.encodings)
    targets = engine.resolve(inputs)
    if not targets:
        console.print("[yellow]No .md/.txt files found.[/yellow]")
        return

    report = engine.scan(targets, find)
    if not report.matches:
        console.print(f"[yellow]No matches for: {escape(repr(find))}[/yellow]")
        console.print(f"Files searched: {report.files_scanned}")
        return

    result = build_preview(report, limit)
    _print_preview_table(result)
    console.print(f"Files with matches: {result.files_matched}, total matches: {result.total_occurrences}")


@app.command("history")
def show_history(
    clear: bool = typer.Option(False, "--clear", help="Delete all saved entries"),
    history: Path = typer.Option(None, "--history", help="History database path"),
) -> None:
    """List or clear recently used search and replacement texts."""
    config = AppConfig()
    store = _open_history(history, config)
    try:
        if clear:
            store.clear()
            console.print("History cleared.")
            return

        finds = store.load_finds()
        replaces = store.load_replaces()
    finally:
        store.close()

    if not finds and not replaces:
        console.print("[yellow]History is empty.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Recent finds")
    table.add_column("Recent replacements")
    for index in range(max(len(finds), len(replaces))):
        table.add_row(
            escape(finds[index]) if index < len(finds) else "",
            escape(replaces[index]) if index < len(replaces) else "",
        )
    console.print(table)


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
) -> None:
    """Start the web interface."""
    console.print(f"Starting web interface on http://{host}:{port}")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
