"""Populate the workspace snapshots from Git revisions."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from git_latexdiff.adapters.git import Repository
from git_latexdiff.adapters.process import Invoker, format_command

from .config import WORKING_TREE, Side
from .exceptions import ExtractionError


logger = logging.getLogger(__name__)


def checkout_root(repository: Repository, *, subtree: bool) -> str:
    """Return the path exported by ``git archive``.

    In subtree mode only the invoking directory (which holds the main document)
    is exported; otherwise the whole tree is.
    """
    if subtree and repository.prefix:
        return repository.prefix
    return "."


def link_untracked(snapshot_root: Path, repository: Repository, maindir: str) -> list[Path]:
    """Overlay the snapshot's main directory with links to the live files.

    Hidden entries are skipped, like a shell ``*`` glob would.
    """
    source_dir = repository.toplevel / maindir
    target_dir = snapshot_root / maindir
    target_dir.mkdir(parents=True, exist_ok=True)
    links: list[Path] = []
    for entry in sorted(source_dir.iterdir()):
        if entry.name.startswith("."):
            continue
        link = target_dir / entry.name
        if link.exists() or link.is_symlink():
            continue
        os.symlink(entry, link)
        links.append(link)
    logger.debug("linked %d untracked entries into %s", len(links), target_dir)
    return links


def extract(
    revision: str,
    dest: Path,
    *,
    side: Side,
    repository: Repository,
    root: str,
    invoker: Invoker,
) -> None:
    """Export ``revision`` restricted to ``root`` into ``dest``.

    The export goes through ``git archive | tar -xf -`` so that neither the
    index nor the working tree of the repository is touched.
    """
    if revision == WORKING_TREE:
        return

    producer = repository.archive_command(revision, root)
    consumer = ["tar", "-xf", "-"]
    archive, unpack = invoker.pipe(
        producer,
        consumer,
        producer_workdir=repository.git_dir,
        consumer_workdir=dest,
        log=None,
    )
    if not archive.ok:
        raise ExtractionError(
            f"{format_command(producer)} failed with status {archive.returncode} "
            f"for the {side} revision '{revision}'.",
            side=side.value,
        )
    if not unpack.ok:
        raise ExtractionError(
            f"tar failed with status {unpack.returncode} while extracting the {side} "
            f"revision '{revision}' into {dest}.",
            side=side.value,
        )


__all__ = ["checkout_root", "extract", "link_untracked"]
