"""Run latexdiff and substitute its output for the new main document."""

from __future__ import annotations

from collections.abc import Sequence
import logging
import os
from pathlib import Path

from git_latexdiff.adapters.process import Invoker
from git_latexdiff.core.exceptions import DiffError


logger = logging.getLogger(__name__)

LATEXDIFF = "latexdiff"
BACKUP_SUFFIX = ".orig"


def latexdiff_command(
    old_source: Path | str,
    new_source: Path | str,
    *,
    options: Sequence[str] = (),
    builtin_flatten: bool = False,
) -> list[str]:
    """Build the latexdiff argv, pass-through options first."""
    argv = [LATEXDIFF, *options]
    if builtin_flatten:
        argv.append("--flatten")
    argv.extend([str(old_source), str(new_source)])
    return argv


def run_latexdiff(
    old_source: Path | str,
    new_source: Path | str,
    *,
    output: Path,
    workdir: Path,
    options: Sequence[str],
    builtin_flatten: bool,
    invoker: Invoker,
) -> Path:
    """Write the annotated document comparing both sources to ``output``."""
    argv = latexdiff_command(
        old_source, new_source, options=options, builtin_flatten=builtin_flatten
    )
    outcome = invoker.run(argv, workdir=workdir, log="latexdiff.log", stdout_path=output)
    if not outcome.ok:
        raise DiffError(f"latexdiff failed with status {outcome.returncode}.")
    return output


def install_diff(diff_path: Path, target: Path) -> Path:
    """Move ``diff_path`` to ``target``, keeping the original as ``<target>.orig``."""
    backup = target.with_name(target.name + BACKUP_SUFFIX)
    if target.exists() or target.is_symlink():
        os.replace(target, backup)
    os.replace(diff_path, target)
    logger.debug("installed %s as %s (original kept as %s)", diff_path, target, backup)
    return backup


__all__ = ["BACKUP_SUFFIX", "install_diff", "latexdiff_command", "run_latexdiff"]
