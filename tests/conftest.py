from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

import pytest

from git_latexdiff.adapters.git import Repository
from git_latexdiff.adapters.process import ExitOutcome, Invoker


Effect = Callable[[list[str], Path, Path | None], None]


class RecordingInvoker(Invoker):
    """Invoker double recording every command and simulating its side effects."""

    def __init__(
        self,
        *,
        quiet: bool = False,
        returncodes: Mapping[str, int] | None = None,
        effects: Mapping[str, Effect] | None = None,
        archives: Mapping[str, Mapping[str, str]] | None = None,
    ) -> None:
        super().__init__(quiet=quiet)
        self.returncodes = dict(returncodes or {})
        self.effects = dict(effects or {})
        self.archives = {rev: dict(files) for rev, files in (archives or {}).items()}
        self.calls: list[tuple[list[str], Path, str | None]] = []
        self.pipes: list[tuple[list[str], list[str], Path]] = []

    def run(
        self,
        argv: Sequence[str] | str,
        *,
        workdir: Path,
        log: str | None = None,
        stdout_path: Path | None = None,
        shell: bool = False,
    ) -> ExitOutcome:
        recorded = [argv] if isinstance(argv, str) else [str(arg) for arg in argv]
        label = recorded[0].split()[0]
        self.calls.append((recorded, workdir, log))
        effect = self.effects.get(label)
        if effect is not None:
            effect(recorded, workdir, stdout_path)
        elif stdout_path is not None:
            stdout_path.write_text("", encoding="utf-8")
        returncode = self.returncodes.get(label, 0)
        return ExitOutcome(recorded, returncode, workdir, self.log_path(workdir, log))

    def pipe(
        self,
        producer: Sequence[str],
        consumer: Sequence[str],
        *,
        producer_workdir: Path,
        consumer_workdir: Path,
        log: str | None = None,
    ) -> tuple[ExitOutcome, ExitOutcome]:
        producer_argv = [str(arg) for arg in producer]
        consumer_argv = [str(arg) for arg in consumer]
        self.pipes.append((producer_argv, consumer_argv, consumer_workdir))
        archive_status = self.returncodes.get("git", 0)
        if archive_status == 0:
            revision = producer_argv[3]
            for name, content in self.archives.get(revision, {}).items():
                target = consumer_workdir / name
                target.parent.mkdir(parents=True, exist_ok=True)
                if target.is_symlink():
                    target.unlink()
                target.write_text(content, encoding="utf-8")
        return (
            ExitOutcome(producer_argv, archive_status, producer_workdir),
            ExitOutcome(consumer_argv, self.returncodes.get("tar", 0), consumer_workdir),
        )

    def commands(self) -> list[str]:
        return [argv[0].split()[0] for argv, _workdir, _log in self.calls]


class RecordingEmitter:
    """Emitter double collecting warnings and events."""

    def __init__(self) -> None:
        self.warnings: list[str] = []
        self.errors: list[str] = []
        self.events: list[tuple[str, dict[str, Any]]] = []

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self.errors.append(message)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        self.events.append((name, dict(payload)))

    def event_names(self) -> list[str]:
        return [name for name, _payload in self.events]


def write_pdf(argv: list[str], workdir: Path, _stdout: Path | None) -> None:
    """Simulate a compiler pass producing ``<mainbase>.pdf``."""
    (workdir / f"{argv[-1]}.pdf").write_bytes(b"%PDF-1.5\n")


def write_diff(argv: list[str], _workdir: Path, stdout: Path | None) -> None:
    """Simulate latexdiff writing the annotated document on stdout."""
    assert stdout is not None
    stdout.write_text(f"% diff of {argv[-2]} and {argv[-1]}\n", encoding="utf-8")


@pytest.fixture
def repository(tmp_path: Path) -> Repository:
    root = tmp_path / "repo"
    (root / ".git").mkdir(parents=True)
    (root / "paper.tex").write_text("\\documentclass{article}\n", encoding="utf-8")
    return Repository(workdir=root, toplevel=root, git_dir=root / ".git", prefix="")


@pytest.fixture
def scratch(tmp_path: Path) -> Path:
    target = tmp_path / "tmp"
    target.mkdir()
    return target
