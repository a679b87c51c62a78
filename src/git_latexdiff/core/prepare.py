"""Optional preparation command run inside each snapshot."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from git_latexdiff.adapters.process import Invoker

from .config import Side
from .exceptions import PreparationError


logger = logging.getLogger(__name__)

KNITR_SUFFIXES = frozenset({".Rnw", ".Rtex"})
PREPARE_LOG = "prepare.log"


def knitr_defaults(main: str, prepare: str | None) -> tuple[str, str | None]:
    """Return the main file and preparation command for knitr sources.

    ``paper.Rnw`` becomes ``paper.tex`` and, unless a command was supplied,
    knitr is asked to produce it. Other documents are returned unchanged.
    """
    path = PurePosixPath(main)
    if path.suffix not in KNITR_SUFFIXES:
        return main, prepare
    command = prepare or f"Rscript -e \"library(knitr); knit('{main}')\""
    return str(path.with_suffix(".tex")), command


def run_preparation(
    command: str | None,
    *,
    side: Side,
    snapshot_root: Path,
    prefix: str,
    main: str,
    invoker: Invoker,
) -> Path:
    """Run ``command`` in the snapshot and check that ``main`` exists afterwards.

    ``main`` is relative to the repository root; ``prefix`` is the repository
    path of the invoking directory, where the command runs.
    """
    workdir = snapshot_root / prefix if prefix else snapshot_root
    if command:
        logger.debug("preparing %s version in %s", side, workdir)
        outcome = invoker.run(command, workdir=workdir, log=PREPARE_LOG, shell=True)
        if not outcome.ok:
            raise PreparationError(
                f"{command} failed with status {outcome.returncode} in the {side} version.",
                side=side.value,
                command=command,
                returncode=outcome.returncode,
            )

    expected = snapshot_root / main
    if not expected.is_file():
        if command:
            message = f"{command} did not produce {side}/{main}."
        else:
            message = f"{side}/{main} does not exist in the {side} version."
        raise PreparationError(message, side=side.value, command=command, missing=expected)
    return expected


__all__ = ["KNITR_SUFFIXES", "PREPARE_LOG", "knitr_defaults", "run_preparation"]
