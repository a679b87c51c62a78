"""Verbosity and console handles shared by the command and its presenters."""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field
import sys
from typing import TYPE_CHECKING, TextIO

import click


if TYPE_CHECKING:
    from rich.console import Console

__all__ = [
    "CLIState",
    "debug_enabled",
    "emit_error",
    "emit_warning",
    "get_cli_state",
    "render_message",
    "set_cli_state",
]

_LEVEL_STYLES = {"warning": "yellow", "error": "red"}


@dataclass(slots=True)
class CLIState:
    """Diagnostics settings for one invocation of the command."""

    verbosity: int = 0
    show_tracebacks: bool = False
    _stdout: Console | None = field(default=None, init=False, repr=False)
    _stderr: Console | None = field(default=None, init=False, repr=False)

    @staticmethod
    def _bind(current: Console | None, stream: TextIO, **options: object) -> Console:
        # Streams are swapped by test runners; follow the live one.
        if current is not None and current.file is stream:
            return current
        from rich.console import Console

        return Console(file=stream, **options)  # type: ignore[arg-type]

    @property
    def console(self) -> Console:
        """Console writing progress and results to stdout."""
        self._stdout = self._bind(self._stdout, sys.stdout)
        return self._stdout

    @property
    def err_console(self) -> Console:
        """Console writing warnings and errors to stderr."""
        self._stderr = self._bind(self._stderr, sys.stderr, highlight=False)
        return self._stderr


_CURRENT: ContextVar[CLIState | None] = ContextVar("git_latexdiff_cli_state", default=None)


def get_cli_state(ctx: click.Context | None = None) -> CLIState:
    """Return the state stored on the root click context, creating it on demand.

    Outside of a click context, the state of the last invocation is returned.
    """
    ctx = ctx or click.get_current_context(silent=True)
    if ctx is not None:
        root = ctx.find_root()
        if not isinstance(root.obj, CLIState):
            root.obj = CLIState()
        _CURRENT.set(root.obj)
        return root.obj

    state = _CURRENT.get()
    if state is None:
        state = CLIState()
        _CURRENT.set(state)
    return state


def set_cli_state(
    *,
    ctx: click.Context | None = None,
    verbosity: int | None = None,
    debug: bool | None = None,
) -> CLIState:
    state = get_cli_state(ctx)
    if verbosity is not None:
        state.verbosity = max(0, verbosity)
    if debug is not None:
        state.show_tracebacks = debug
    return state


def _cause_lines(exc: BaseException) -> list[str]:
    lines = [f"type: {type(exc).__name__}"]
    seen = {id(exc)}
    cause = exc.__cause__ or exc.__context__
    if cause is not None:
        lines.append("caused by:")
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        lines.append(f"  {type(cause).__name__}: {cause}")
        cause = cause.__cause__ or cause.__context__
    return lines


def render_message(
    level: str,
    message: str,
    *,
    exception: BaseException | None = None,
) -> None:
    """Print ``message``: info on stdout, other levels as ``level: message`` on stderr.

    At verbosity 2 and above the exception type and its cause chain follow.
    """
    state = get_cli_state()
    if level == "info":
        state.console.log(message)
        return

    from rich.text import Text

    style = _LEVEL_STYLES.get(level, "yellow")
    text = Text(f"{level}: ", style=f"bold {style}")
    text.append(message, style=style)
    if exception is not None and state.verbosity >= 2:
        text.append("\n" + "\n".join(_cause_lines(exception)), style=style)
    state.err_console.print(text)


def emit_warning(message: str, *, exception: BaseException | None = None) -> None:
    render_message("warning", message, exception=exception)


def emit_error(message: str, *, exception: BaseException | None = None) -> None:
    render_message("error", message, exception=exception)


def debug_enabled() -> bool:
    """Return whether ``--debug`` asked for full tracebacks."""
    state = _CURRENT.get()
    return state is not None and state.show_tracebacks
