"""Rich-aware presenters for CLI output and diagnostics."""

from __future__ import annotations

from collections.abc import Sequence
import os
from pathlib import Path
from typing import TYPE_CHECKING

import typer

from git_latexdiff.adapters.latex.log import parse_latex_log, primary_error
from git_latexdiff.core.config import CleanupMode
from git_latexdiff.core.exceptions import CompilationFailure
from git_latexdiff.core.pipeline import PipelineResult

from .state import CLIState


if TYPE_CHECKING:  # pragma: no cover - typing only
    from rich.console import Console

_SIZE_UNITS = ("B", "KiB", "MiB", "GiB")


def _terminal_console(state: CLIState, *, stderr: bool = False) -> Console | None:
    """Return the Rich console for tables and panels, or None when piped."""
    console = state.err_console if stderr else state.console
    return console if console.is_terminal else None


def _display_path(path: Path) -> str:
    """Show ``path`` relative to the working directory when it lies below it."""
    relative = os.path.relpath(path.resolve(), Path.cwd())
    return str(path.resolve()) if relative.startswith("..") else relative


def _file_size(path: Path) -> str:
    if not path.is_file():
        return ""
    size = float(path.stat().st_size)
    for unit in _SIZE_UNITS[:-1]:
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} {_SIZE_UNITS[-1]}"


def _render_summary(state: CLIState, rows: Sequence[tuple[str, str, str]]) -> None:
    """Display the produced artifacts as a table, or as a plain list."""
    console = _terminal_console(state)
    if console is None:
        for artifact, location, size in rows:
            suffix = f" ({size})" if size else ""
            typer.echo(f"  * {artifact}: {location}{suffix}")
        return

    from rich import box
    from rich.table import Table
    from rich.text import Text

    table = Table(box=box.SQUARE, header_style="bold cyan")
    table.add_column("Artifact", style="cyan")
    table.add_column("Location")
    table.add_column("Size", style="magenta", justify="right", no_wrap=True)
    for artifact, location, size in rows:
        style = "bright_green" if location.endswith(".pdf") else None
        table.add_row(artifact, Text(location, style=style), size)
    console.print(table)


def present_result(state: CLIState, result: PipelineResult) -> None:
    """Report where the PDF ended up and what was kept of the workspace."""
    if result.output is not None:
        typer.echo(f"Output written on {result.output}")

    rows: list[tuple[str, str, str]] = []
    if result.pdf_path.exists():
        rows.append(("PDF", _display_path(result.pdf_path), _file_size(result.pdf_path)))
    if result.workspace.root.exists():
        rows.append(("Workspace", _display_path(result.workspace.root), ""))
        if result.cleanup.mode is CleanupMode.NONE:
            annotated = result.workspace.new / result.main.path
            rows.append(("Annotated source", _display_path(annotated), _file_size(annotated)))
    if rows:
        _render_summary(state, rows)


def _render_failure_panel(state: CLIState, title: str, rows: Sequence[tuple[str, str]]) -> None:
    console = _terminal_console(state, stderr=True)
    if console is None:
        typer.echo(title, err=True)
        for label, value in rows:
            typer.echo(f"  {label}: {value}", err=True)
        return

    from rich import box
    from rich.panel import Panel
    from rich.table import Table
    from rich.text import Text

    grid = Table(box=box.SQUARE, show_header=False)
    for label, value in rows:
        grid.add_row(Text(label, style="bold red"), Text(value, style="yellow"))
    console.print(Panel(grid, box=box.SQUARE, title=title, border_style="red"))


def present_compilation_failure(state: CLIState, failure: CompilationFailure) -> None:
    """Point the user at the kept directory and the first LaTeX error."""
    rows: list[tuple[str, str]] = [("Problem", reason) for reason in failure.reasons]

    if failure.log_path is not None:
        message = primary_error(parse_latex_log(failure.log_path))
        if message is not None:
            entry = message.summary
            if message.details:
                entry = f"{entry} ({'; '.join(message.details[:2])})"
            rows.append(("Primary error", entry))
        if failure.log_path.exists():
            rows.append(("Log file", str(failure.log_path)))

    rows.append(("Directory", str(failure.directory)))
    rows.append(("File", failure.main_file))
    _render_failure_panel(state, "LaTeX failure", rows)


__all__ = ["present_compilation_failure", "present_result"]
