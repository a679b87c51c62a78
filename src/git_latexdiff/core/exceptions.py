"""Custom exception hierarchy for the latexdiff pipeline."""

from __future__ import annotations

from pathlib import Path


class LatexDiffError(RuntimeError):
    """Base exception for fatal pipeline failures."""

    stage = "pipeline"


class UsageError(LatexDiffError):
    """Raised when the command line or the repository layout cannot be used."""

    stage = "usage"


class ResourceError(LatexDiffError):
    """Raised when the temporary workspace cannot be created."""

    stage = "workspace"


class SnapshotError(LatexDiffError):
    """Base class for failures tied to one side of the comparison."""

    def __init__(self, message: str, *, side: str) -> None:
        super().__init__(message)
        self.side = side


class ExtractionError(SnapshotError):
    """Raised when exporting a revision into its snapshot fails."""

    stage = "extract"


class PreparationError(SnapshotError):
    """Raised when the preparation command fails or does not yield the main document."""

    stage = "prepare"

    def __init__(
        self,
        message: str,
        *,
        side: str,
        command: str | None,
        missing: Path | None = None,
        returncode: int | None = None,
    ) -> None:
        super().__init__(message, side=side)
        self.command = command
        self.missing = missing
        self.returncode = returncode


class FlattenError(SnapshotError):
    """Raised when latexpand fails for a snapshot."""

    stage = "flatten"


class BibliographyError(SnapshotError):
    """Raised when a missing ``.bbl`` file cannot be regenerated."""

    stage = "bibliography"


class DiffError(LatexDiffError):
    """Raised when latexdiff exits with a failure status."""

    stage = "latexdiff"


class CompilationFailure(LatexDiffError):
    """Raised when the annotated document does not compile into a usable PDF."""

    stage = "compile"

    def __init__(
        self,
        message: str,
        *,
        directory: Path,
        main_file: str,
        log_path: Path | None = None,
        reasons: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.directory = directory
        self.main_file = main_file
        self.log_path = log_path
        self.reasons = list(reasons or [])


__all__ = [
    "BibliographyError",
    "CompilationFailure",
    "DiffError",
    "ExtractionError",
    "FlattenError",
    "LatexDiffError",
    "PreparationError",
    "ResourceError",
    "SnapshotError",
    "UsageError",
]
