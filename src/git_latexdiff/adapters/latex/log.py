"""Pick the errors and warnings worth showing out of a TeX ``.log`` file."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
import re


class Severity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(slots=True)
class LogEntry:
    """One message of the log, with the source-location lines of errors."""

    severity: Severity
    summary: str
    details: list[str] = field(default_factory=list)


# First match wins; ``text`` becomes the entry summary.
_RULES: tuple[tuple[Severity, re.Pattern[str]], ...] = (
    (Severity.ERROR, re.compile(r"! (?P<text>.+)")),
    (Severity.ERROR, re.compile(r"(?P<text>.+\.tex:\d+: .+)")),
    (Severity.WARNING, re.compile(r"LaTeX Warning: (?P<text>.+)")),
    (Severity.WARNING, re.compile(r"(?:Package|Class) \S+ Warning: (?P<text>.+)")),
    (Severity.INFO, re.compile(r"No file (?P<text>.+)")),
)

_LOCATION = re.compile(r"l\.\d+ .*|<\*> .*|Emergency stop\.|==> .*")
_LOCATION_LIMIT = 3


def _classify(line: str) -> LogEntry | None:
    for severity, rule in _RULES:
        found = rule.fullmatch(line)
        if found is not None:
            return LogEntry(severity, found["text"].strip())
    return None


def _entries(lines: Iterable[str]) -> Iterator[LogEntry]:
    pending: LogEntry | None = None
    for line in lines:
        entry = _classify(line)
        if entry is not None:
            pending = entry
            yield entry
            continue
        stripped = line.strip()
        if not stripped:
            pending = None
        elif (
            pending is not None
            and pending.severity is Severity.ERROR
            and len(pending.details) < _LOCATION_LIMIT
            and _LOCATION.fullmatch(stripped)
        ):
            pending.details.append(stripped)


def parse_latex_log(log_path: Path) -> list[LogEntry]:
    """Return the entries of ``log_path`` in order; an absent log has none."""
    try:
        text = log_path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return []
    return list(_entries(text.splitlines()))


def primary_error(entries: list[LogEntry]) -> LogEntry | None:
    """First error of the log, else its last warning."""
    errors = (entry for entry in entries if entry.severity is Severity.ERROR)
    first = next(errors, None)
    if first is not None:
        return first
    for entry in reversed(entries):
        if entry.severity is Severity.WARNING:
            return entry
    return None


__all__ = ["LogEntry", "Severity", "parse_latex_log", "primary_error"]
