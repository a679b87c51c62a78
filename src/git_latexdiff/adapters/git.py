"""Read-only queries against the Git repository being compared."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import logging
from pathlib import Path
import subprocess

from git_latexdiff.core.exceptions import UsageError


logger = logging.getLogger(__name__)

DOCUMENTCLASS_PATTERN = r"^[ \t]*\\documentclass"


def _git(args: Sequence[str], *, cwd: Path) -> subprocess.CompletedProcess[str]:
    try:
        return subprocess.run(
            ["git", *args],
            cwd=cwd,
            check=False,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as exc:
        raise UsageError("git is required but was not found on PATH.") from exc


@dataclass(frozen=True, slots=True)
class Repository:
    """Location of the repository relative to the invoking directory."""

    workdir: Path
    toplevel: Path
    git_dir: Path
    prefix: str

    @classmethod
    def discover(cls, cwd: Path | None = None) -> Repository:
        """Locate the repository containing ``cwd``."""
        workdir = (cwd or Path.cwd()).resolve()
        result = _git(
            ["rev-parse", "--show-toplevel", "--git-dir", "--show-prefix"],
            cwd=workdir,
        )
        if result.returncode != 0:
            detail = (result.stderr or "").strip()
            message = "Not a git repository?"
            if detail:
                message = f"{message} ({detail})"
            raise UsageError(message)

        lines = result.stdout.splitlines()
        toplevel = Path(lines[0])
        git_dir = Path(lines[1])
        if not git_dir.is_absolute():
            git_dir = workdir / git_dir
        prefix = lines[2] if len(lines) > 2 else ""
        return cls(
            workdir=workdir,
            toplevel=toplevel,
            git_dir=git_dir.resolve(),
            prefix=prefix,
        )

    def repo_path(self, relative_to_workdir: str) -> str:
        """Rebase a path given relative to the invoking directory onto the root."""
        return f"{self.prefix}{relative_to_workdir}"

    def main_candidates(self) -> list[str]:
        """Return tracked files under the invoking directory that declare a class."""
        result = _git(["grep", "-l", DOCUMENTCLASS_PATTERN], cwd=self.workdir)
        if result.returncode not in (0, 1):
            detail = (result.stderr or "").strip()
            raise UsageError(f"git grep failed while looking for the main file: {detail}")
        return [line for line in result.stdout.splitlines() if line]

    def archive_command(self, revision: str, checkout_root: str) -> list[str]:
        """Return the argv exporting ``revision`` restricted to ``checkout_root``."""
        return ["git", "archive", "--format=tar", revision, checkout_root]


__all__ = ["DOCUMENTCLASS_PATTERN", "Repository"]
