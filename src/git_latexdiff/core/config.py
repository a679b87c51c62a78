"""Resolved configuration shared by every pipeline stage.

PipelineConfig

`old` (`str`)
: Revision used as the base of the comparison.

`new` (`str`)
: Revision compared against `old`. Defaults to `HEAD`; the `--` sentinel
  selects the live working tree.

`main` (`str | None`)
: Main document, relative to the invoking directory. Guessed from the
  tracked files when omitted.

`cleanup` (`CleanupMode`)
: What to delete from the temporary workspace after a successful build.

`flatten` (`bool`)
: Expand `\\input`/`\\include` with latexpand before running latexdiff.

`latexdiff_flatten` (`bool`)
: Ask latexdiff to flatten the documents itself (`--flatten`).

`latexopt` (`tuple[str, ...]`)
: Extra arguments given to every pdflatex invocation.

`latexdiff_options` (`tuple[str, ...]`)
: Unrecognised dash-prefixed arguments, forwarded to latexdiff in order.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
import shlex
import tempfile


WORKING_TREE = "--"
DEFAULT_NEW_REVISION = "HEAD"


class Side(str, Enum):
    """The two snapshots populated inside the workspace."""

    OLD = "old"
    NEW = "new"

    def __str__(self) -> str:
        return self.value


class CleanupMode(str, Enum):
    """Workspace cleanup policy applied after a successful compilation."""

    NONE = "none"
    ALL = "all"
    KEEPPDF = "keeppdf"


class ViewMode(str, Enum):
    """Whether the resulting PDF should be opened in a viewer."""

    NEVER = "never"
    ALWAYS = "always"
    AUTO = "auto"


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    """Immutable bundle of options resolved from the command line."""

    old: str
    new: str = DEFAULT_NEW_REVISION
    main: str | None = None
    view: ViewMode = ViewMode.AUTO
    pdf_viewer: str | None = None
    bibtex: bool = False
    biber: bool = False
    cleanup: CleanupMode = CleanupMode.KEEPPDF
    flatten: bool = True
    latexdiff_flatten: bool = False
    latexmk: bool = False
    latexopt: tuple[str, ...] = ()
    output: Path | None = None
    tmpdir_prefix: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))
    verbose: bool = False
    quiet: bool = False
    prepare: str | None = None
    ln_untracked: bool = False
    subtree: bool = True
    ignore_latex_errors: bool = False
    ignore_makefile: bool = False
    bbl: bool = False
    latexpand_options: tuple[str, ...] = ()
    latexdiff_options: tuple[str, ...] = ()

    @classmethod
    def create(
        cls,
        *,
        old: str,
        new: str | None = None,
        latexopt: str | Iterable[str] | None = None,
        latexpand_options: str | Iterable[str] | None = None,
        latexdiff_options: Iterable[str] = (),
        cleanup: CleanupMode | None = None,
        no_cleanup: bool = False,
        **kwargs: object,
    ) -> PipelineConfig:
        """Build a configuration, applying the interactions between options."""
        resolved_new = new or DEFAULT_NEW_REVISION
        resolved_cleanup = cleanup or CleanupMode.KEEPPDF
        if no_cleanup:
            resolved_cleanup = CleanupMode.NONE
        if kwargs.get("output") is not None:
            resolved_cleanup = CleanupMode.ALL
        if resolved_new == WORKING_TREE:
            kwargs["ln_untracked"] = True
        if kwargs.get("latexdiff_flatten"):
            kwargs["flatten"] = False
        return cls(
            old=old,
            new=resolved_new,
            cleanup=resolved_cleanup,
            latexopt=split_arguments(latexopt),
            latexpand_options=split_arguments(latexpand_options),
            latexdiff_options=tuple(latexdiff_options),
            **kwargs,  # type: ignore[arg-type]
        )

    @property
    def working_tree(self) -> bool:
        """Return True when the new side is the live working tree."""
        return self.new == WORKING_TREE

    @property
    def interaction_mode(self) -> str:
        """Return the pdflatex interaction mode matching the error policy."""
        if self.ignore_latex_errors:
            return "batchmode"
        if self.quiet:
            return "nonstopmode"
        return "errorstopmode"

    def revision(self, side: Side) -> str:
        return self.old if side is Side.OLD else self.new


def split_arguments(value: str | Iterable[str] | None) -> tuple[str, ...]:
    """Split a user supplied option string following shell quoting rules."""
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(shlex.split(value))
    tokens: list[str] = []
    for entry in value:
        tokens.extend(shlex.split(entry))
    return tuple(tokens)


__all__ = [
    "DEFAULT_NEW_REVISION",
    "WORKING_TREE",
    "CleanupMode",
    "PipelineConfig",
    "Side",
    "ViewMode",
    "split_arguments",
]
