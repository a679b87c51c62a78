"""Compile a PDF highlighting the changes of a LaTeX document between two git revisions."""

from __future__ import annotations

from git_latexdiff.core.config import CleanupMode, PipelineConfig, Side, ViewMode
from git_latexdiff.core.exceptions import CompilationFailure, LatexDiffError
from git_latexdiff.core.pipeline import DiffPipeline, PipelineResult, run_pipeline
from git_latexdiff.version import get_version


__version__ = get_version()

__all__ = [
    "CleanupMode",
    "CompilationFailure",
    "DiffPipeline",
    "LatexDiffError",
    "PipelineConfig",
    "PipelineResult",
    "Side",
    "ViewMode",
    "__version__",
    "get_version",
    "run_pipeline",
]
