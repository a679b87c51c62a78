"""CLI command implementations exposed via `git_latexdiff.ui.cli`."""

from __future__ import annotations

from .diff import latexdiff


__all__ = ["latexdiff"]
