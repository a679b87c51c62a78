"""Temporary workspace holding the two snapshots and produced artifacts."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
import shutil

from .config import CleanupMode, Side
from .exceptions import ResourceError


logger = logging.getLogger(__name__)

WORKSPACE_PREFIX = "git-latexdiff"


@dataclass(slots=True)
class CleanupReport:
    """What :meth:`Workspace.cleanup` did."""

    mode: CleanupMode
    removed: list[Path]
    skipped: bool = False


@dataclass(slots=True)
class Workspace:
    """A run-private directory with ``old`` and ``new`` snapshot subtrees."""

    root: Path

    @classmethod
    def create(cls, prefix: Path, *, pid: int | None = None) -> Workspace:
        """Create ``<prefix>/git-latexdiff.<pid>`` with its two snapshot roots.

        The directory must not exist beforehand; a leftover from a previous run
        with the same process id is reported instead of being reused.
        """
        identity = os.getpid() if pid is None else pid
        root = Path(prefix) / f"{WORKSPACE_PREFIX}.{identity}"
        try:
            root.mkdir()
        except FileExistsError as exc:
            raise ResourceError(f"Temporary directory {root} already exists.") from exc
        except OSError as exc:
            raise ResourceError(f"Cannot create temporary directory {root}: {exc}") from exc

        workspace = cls(root=root)
        try:
            workspace.old.mkdir()
            workspace.new.mkdir()
        except OSError as exc:
            raise ResourceError(f"Cannot create old and new directories in {root}.") from exc
        logger.debug("created workspace %s", root)
        return workspace

    @property
    def old(self) -> Path:
        return self.root / Side.OLD.value

    @property
    def new(self) -> Path:
        return self.root / Side.NEW.value

    def snapshot(self, side: Side) -> Path:
        """Return the snapshot root for ``side``."""
        return self.root / side.value

    def flattened_source(self, side: Side, mainbase: str) -> Path:
        return self.root / f"{side.value}-{mainbase}-fl.tex"

    @property
    def diff_output(self) -> Path:
        return self.root / "diff.tex"

    def cleanup(self, policy: CleanupMode, *, compile_succeeded: bool) -> CleanupReport:
        """Remove temporary state according to ``policy``.

        Nothing is removed when the compilation failed, whatever the policy.
        """
        if not compile_succeeded:
            logger.debug("compilation failed, keeping %s", self.root)
            return CleanupReport(mode=policy, removed=[], skipped=True)

        removed: list[Path] = []
        if policy is CleanupMode.ALL:
            targets = [self.root]
        elif policy is CleanupMode.KEEPPDF:
            targets = [self.old, self.new]
        else:
            targets = []

        for target in targets:
            if target.exists():
                shutil.rmtree(target)
                removed.append(target)
        return CleanupReport(mode=policy, removed=removed)


__all__ = ["WORKSPACE_PREFIX", "CleanupReport", "Workspace"]
