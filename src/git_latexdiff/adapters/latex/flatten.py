"""Flatten multi-file LaTeX sources with latexpand."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from enum import Enum
import logging
from pathlib import Path

from git_latexdiff.adapters.process import Invoker
from git_latexdiff.core.config import PipelineConfig, Side
from git_latexdiff.core.exceptions import BibliographyError, FlattenError


logger = logging.getLogger(__name__)

LATEXPAND = "latexpand"
LATEX_COMPILER = "pdflatex"
BIBTEX = "bibtex"


class FlattenMode(str, Enum):
    """Who expands ``\\input`` and ``\\include`` before the diff."""

    LATEXPAND = "latexpand"
    LATEXDIFF = "latexdiff"
    NONE = "none"


def resolve_flatten_mode(
    config: PipelineConfig,
    *,
    which: Callable[[str], str | None],
    warn: Callable[[str], None] | None = None,
) -> FlattenMode:
    """Select the flattening strategy, falling back when latexpand is missing."""
    if config.flatten:
        if which(LATEXPAND) is not None:
            return FlattenMode.LATEXPAND
        if warn is not None:
            warn("latexpand not found. Falling back to latexdiff --flatten.")
        return FlattenMode.LATEXDIFF
    if config.latexdiff_flatten:
        return FlattenMode.LATEXDIFF
    return FlattenMode.NONE


def regenerate_bbl(
    docdir: Path,
    mainbase: str,
    *,
    side: Side,
    latexopt: Sequence[str],
    invoker: Invoker,
) -> Path:
    """Produce ``<mainbase>.bbl`` with one compiler pass followed by bibtex."""
    bbl_path = docdir / f"{mainbase}.bbl"
    compiler = invoker.run(
        [LATEX_COMPILER, *latexopt, mainbase], workdir=docdir, log="pdflatex0.log"
    )
    bibtex = invoker.run([BIBTEX, mainbase], workdir=docdir, log="bibtex0.log")
    for outcome in (compiler, bibtex):
        if not outcome.ok:
            logger.warning(
                "%s exited with status %s while regenerating %s",
                outcome.label,
                outcome.returncode,
                bbl_path,
            )
    if not bbl_path.is_file():
        raise BibliographyError(
            f"Failed to regenerate {bbl_path.name} for the {side} version.",
            side=side.value,
        )
    return bbl_path


def latexpand_command(
    mainbase: str, *, options: Sequence[str] = (), expand_bbl: bool = False
) -> list[str]:
    argv = [LATEXPAND, f"{mainbase}.tex", *options]
    if expand_bbl:
        argv.extend(["--expand-bbl", f"{mainbase}.bbl"])
    return argv


def flatten(
    docdir: Path,
    mainbase: str,
    *,
    side: Side,
    output: Path,
    options: Sequence[str],
    expand_bbl: bool,
    invoker: Invoker,
) -> Path:
    """Write the single-file expansion of ``<docdir>/<mainbase>.tex`` to ``output``."""
    argv = latexpand_command(mainbase, options=options, expand_bbl=expand_bbl)
    outcome = invoker.run(argv, workdir=docdir, log="latexpand.log", stdout_path=output)
    if not outcome.ok:
        raise FlattenError(
            f"latexpand failed for the {side} version (status {outcome.returncode}).",
            side=side.value,
        )
    return output


__all__ = [
    "FlattenMode",
    "flatten",
    "latexpand_command",
    "regenerate_bbl",
    "resolve_flatten_mode",
]
