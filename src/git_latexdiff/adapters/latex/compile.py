"""Build the annotated document into a PDF."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from pathlib import Path

from git_latexdiff.adapters.process import ExitOutcome, Invoker
from git_latexdiff.core.config import PipelineConfig

from .flatten import BIBTEX, LATEX_COMPILER


logger = logging.getLogger(__name__)

BIBER = "biber"
LATEXMK = "latexmk"
MAKE = "make"

# Passes after the bibliography step; enough for references to settle.
_TRAILING_PASSES = 2


class BuildStrategy(str, Enum):
    """Mutually exclusive ways of producing the PDF."""

    MAKEFILE = "make"
    LATEXMK = "latexmk"
    PDFLATEX = "pdflatex"


@dataclass(slots=True)
class CompileResult:
    """Outcome of the compilation stage."""

    strategy: BuildStrategy
    docdir: Path
    mainbase: str
    outcomes: list[ExitOutcome] = field(default_factory=list)
    command_failed: bool = False
    tolerated: bool = False
    problems: list[str] = field(default_factory=list)

    @property
    def pdf_path(self) -> Path:
        return self.docdir / f"{self.mainbase}.pdf"

    @property
    def log_path(self) -> Path:
        return self.docdir / f"{self.mainbase}.log"

    @property
    def succeeded(self) -> bool:
        return not self.problems and (self.tolerated or not self.command_failed)


def select_strategy(docdir: Path, config: PipelineConfig) -> BuildStrategy:
    """Pick the build strategy: Makefile, then latexmk, then plain pdflatex."""
    if (docdir / "Makefile").is_file() and not config.ignore_makefile:
        return BuildStrategy.MAKEFILE
    if config.latexmk:
        return BuildStrategy.LATEXMK
    return BuildStrategy.PDFLATEX


def compiler_command(mainbase: str, config: PipelineConfig) -> list[str]:
    return [
        LATEX_COMPILER,
        *config.latexopt,
        f"-interaction={config.interaction_mode}",
        mainbase,
    ]


def build_plan(
    strategy: BuildStrategy, mainbase: str, config: PipelineConfig
) -> list[tuple[list[str], str]]:
    """Return the ``(argv, log name)`` sequence run for ``strategy``."""
    if strategy is BuildStrategy.MAKEFILE:
        return [([MAKE], "make.log")]
    if strategy is BuildStrategy.LATEXMK:
        return [([LATEXMK, "-f", "-pdf", "-silent", mainbase], "latexmk.log")]

    compiler = compiler_command(mainbase, config)
    plan: list[tuple[list[str], str]] = [(compiler, "pdflatex1.log")]
    if config.bibtex:
        plan.append(([BIBTEX, mainbase], "bibtex.log"))
    if config.biber:
        plan.append(([BIBER, mainbase], "biber.log"))
    for index in range(_TRAILING_PASSES):
        plan.append((list(compiler), f"pdflatex{index + 2}.log"))
    return plan


def compile_document(
    docdir: Path,
    mainbase: str,
    config: PipelineConfig,
    *,
    invoker: Invoker,
) -> CompileResult:
    """Run every build step, then check the PDF independently of exit codes.

    A failing step does not stop the sequence: later passes still run and the
    failure is only looked at once all of them are done.
    """
    strategy = select_strategy(docdir, config)
    result = CompileResult(strategy=strategy, docdir=docdir, mainbase=mainbase)

    for argv, log in build_plan(strategy, mainbase, config):
        outcome = invoker.run(argv, workdir=docdir, log=log)
        result.outcomes.append(outcome)
        if not outcome.ok:
            logger.debug("%s exited with status %s", outcome.label, outcome.returncode)
            result.command_failed = True

    if result.command_failed and config.ignore_latex_errors:
        result.tolerated = True

    pdf_path = result.pdf_path
    if not pdf_path.is_file():
        result.problems.append("No PDF file generated.")
    elif pdf_path.stat().st_size == 0:
        result.problems.append("PDF file generated is empty.")
    return result


__all__ = [
    "BuildStrategy",
    "CompileResult",
    "build_plan",
    "compile_document",
    "compiler_command",
    "select_strategy",
]
