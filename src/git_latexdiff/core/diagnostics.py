"""Diagnostic channel between the pipeline stages and whoever drives them.

Stages report warnings, errors and named progress events to a
:class:`DiagnosticEmitter`. Events carry a small payload mapping; the
formatters registered in :data:`EVENT_FORMATTERS` turn them into the one-line
progress messages shown in verbose mode.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
import logging
from typing import Any, Protocol, runtime_checkable


logger = logging.getLogger(__name__)

Payload = Mapping[str, Any]


@runtime_checkable
class DiagnosticEmitter(Protocol):
    """Receiver for pipeline warnings, errors and progress events."""

    def warning(self, message: str, exc: BaseException | None = None) -> None: ...

    def error(self, message: str, exc: BaseException | None = None) -> None: ...

    def event(self, name: str, payload: Payload) -> None: ...


class NullEmitter:
    """Discard everything."""

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        pass

    def error(self, message: str, exc: BaseException | None = None) -> None:
        pass

    def event(self, name: str, payload: Payload) -> None:
        pass


class LoggingEmitter:
    """Route diagnostics to a :mod:`logging` logger.

    Known events are logged at INFO with their formatted message, unknown
    ones at DEBUG with the raw payload.
    """

    def __init__(self, *, logger_obj: logging.Logger | None = None) -> None:
        self._logger = logger_obj or logger

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self._logger.warning(message, exc_info=exc)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self._logger.error(message, exc_info=exc)

    def event(self, name: str, payload: Payload) -> None:
        message = format_event_message(name, payload)
        if message is None:
            self._logger.debug("event %s %r", name, dict(payload))
        else:
            self._logger.info(message)


def _main_guess(data: Payload) -> str:
    candidates = list(data.get("candidates") or ())
    if len(candidates) == 1:
        return f"No --main provided, using {candidates[0]} as the main file."
    return "No --main provided, trying to guess the main file."


def _snapshot(data: Payload) -> str:
    side = data.get("side") or "?"
    if data.get("working_tree"):
        return f"Using the working tree as the {side} version"
    return f"Checked out {side} version ({data.get('revision') or '?'}) under {data.get('root')}"


def _latexdiff(data: Payload) -> str:
    command = " ".join(map(str, data.get("argv") or ()))
    return f"Running {command} > {data.get('output')}"


def _cleanup(data: Payload) -> str:
    mode = data.get("mode")
    if mode == "none":
        return f"Generated files kept in {data.get('workspace')}"
    removed = ", ".join(map(str, data.get("removed") or ())) or "nothing to remove"
    return f"Cleaning-up ({mode}): {removed}"


EVENT_FORMATTERS: dict[str, Callable[[Payload], str]] = {
    "main_guess": _main_guess,
    "workspace": lambda d: f"Temporary directories: {d.get('old')} and {d.get('new')}",
    "snapshot": _snapshot,
    "prepare": lambda d: (
        f"Running preparation command {d.get('command')} in {d.get('directory')}"
    ),
    "bbl": lambda d: f"Attempting to regenerate missing {d.get('path')}",
    "flatten": lambda d: (
        f"Running latexpand for the {d.get('side')} version into {d.get('output')}"
    ),
    "latexdiff": _latexdiff,
    "compile": lambda d: f"Compiling result with {d.get('strategy')} in {d.get('directory')}",
    "delivery": lambda d: f"PDF available at {d.get('path')}",
    "viewer": lambda d: f"Opening {d.get('path')} with {d.get('viewer')}",
    "cleanup": _cleanup,
}


def format_event_message(name: str, payload: Payload) -> str | None:
    """Return the progress line for event ``name``, or None if it has none."""
    formatter = EVENT_FORMATTERS.get(name)
    return None if formatter is None else formatter(payload)


__all__ = [
    "EVENT_FORMATTERS",
    "DiagnosticEmitter",
    "LoggingEmitter",
    "NullEmitter",
    "format_event_message",
]
