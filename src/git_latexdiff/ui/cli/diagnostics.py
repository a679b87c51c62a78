"""Pipeline diagnostics rendered on the terminal."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from git_latexdiff.core.diagnostics import format_event_message

from .state import CLIState, emit_error, emit_warning, get_cli_state, render_message


# Shown even without --verbose.
_ALWAYS_SHOWN = frozenset({"main_guess"})


class CliEmitter:
    """Print warnings and errors always, progress events only with ``-v``.

    The main file guess is the one event reported at default verbosity.
    """

    def __init__(self, state: CLIState | None = None) -> None:
        self._state = state or get_cli_state()

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        emit_warning(message, exception=exc)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        emit_error(message, exception=exc)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        if name not in _ALWAYS_SHOWN and self._state.verbosity < 1:
            return
        message = format_event_message(name, payload)
        if message is not None:
            render_message("info", message)


__all__ = ["CliEmitter"]
