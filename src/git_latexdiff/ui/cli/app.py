"""Typer application wiring for the git-latexdiff CLI."""

from __future__ import annotations

import click
import typer
from typer.core import TyperCommand

from git_latexdiff.ui.cli.commands.diff import latexdiff

from .state import debug_enabled, emit_error, get_cli_state
from .utils import protect_working_tree


class RevisionCommand(TyperCommand):
    """Typer command accepting ``--`` as a revision and exiting 1 on misuse."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, protect_working_tree(args))
        except click.UsageError as exc:
            exc.exit_code = 1
            raise


app = typer.Typer(
    help="Compile a PDF showing the changes of a LaTeX document between two git revisions.",
    add_completion=False,
)

app.command(
    cls=RevisionCommand,
    context_settings={
        "help_option_names": ["-h", "--help"],
        "ignore_unknown_options": True,
    },
)(latexdiff)


def _report_unexpected(exc: Exception) -> None:
    state = get_cli_state()
    if not state.show_tracebacks:
        emit_error(str(exc) or type(exc).__name__, exception=exc)
        return
    from rich.traceback import Traceback

    state.err_console.print(
        Traceback.from_exception(
            type(exc), exc, exc.__traceback__, show_locals=state.verbosity >= 2
        )
    )


def main() -> None:
    """Console script entry point."""
    try:
        app()
    except typer.Exit:
        raise
    except KeyboardInterrupt as exc:
        if debug_enabled():
            raise
        emit_error("Operation cancelled by user.")
        raise SystemExit(1) from exc
    except Exception as exc:  # pragma: no cover - last-resort reporting
        _report_unexpected(exc)
        raise SystemExit(1) from exc


__all__ = ["RevisionCommand", "app", "main"]
