"""Implementation of the ``git-latexdiff`` command."""

from __future__ import annotations

from typing import Annotated

import typer

from git_latexdiff.core.config import PipelineConfig, ViewMode
from git_latexdiff.core.exceptions import CompilationFailure, LatexDiffError
from git_latexdiff.core.pipeline import run_pipeline
from git_latexdiff.version import get_version

from .._options import (
    DIAGNOSTICS_PANEL,
    ArgumentsArgument,
    BblOption,
    BiberOption,
    BibtexOption,
    CleanupOption,
    DebugOption,
    IgnoreLatexErrorsOption,
    IgnoreMakefileOption,
    LatexdiffFlattenOption,
    LatexmkOption,
    LatexoptOption,
    LatexpandOption,
    LnUntrackedOption,
    MainOption,
    NoCleanupOption,
    NoFlattenOption,
    OutputOption,
    PdfViewerOption,
    PrepareOption,
    QuietOption,
    SubtreeOption,
    TmpdirPrefixOption,
    VerboseOption,
    ViewOption,
)
from ..diagnostics import CliEmitter
from ..presenter import present_compilation_failure, present_result
from ..state import emit_error, set_cli_state
from ..utils import split_revision_arguments


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(get_version())
        raise typer.Exit()


def _view_mode(view: bool | None) -> ViewMode:
    if view is None:
        return ViewMode.AUTO
    return ViewMode.ALWAYS if view else ViewMode.NEVER


def latexdiff(
    ctx: typer.Context,
    arguments: ArgumentsArgument = None,
    main: MainOption = None,
    prepare: PrepareOption = None,
    ln_untracked: LnUntrackedOption = False,
    subtree: SubtreeOption = True,
    no_flatten: NoFlattenOption = False,
    latexpand: LatexpandOption = None,
    latexdiff_flatten: LatexdiffFlattenOption = False,
    bbl: BblOption = False,
    bibtex: BibtexOption = False,
    biber: BiberOption = False,
    latexmk: LatexmkOption = False,
    latexopt: LatexoptOption = None,
    ignore_latex_errors: IgnoreLatexErrorsOption = False,
    ignore_makefile: IgnoreMakefileOption = False,
    output: OutputOption = None,
    view: ViewOption = None,
    pdf_viewer: PdfViewerOption = None,
    cleanup: CleanupOption = None,
    no_cleanup: NoCleanupOption = False,
    tmpdirprefix: TmpdirPrefixOption = None,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    debug: DebugOption = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit.",
            rich_help_panel=DIAGNOSTICS_PANEL,
        ),
    ] = False,
) -> None:
    """Compile a PDF showing the changes of a LaTeX document between two git revisions.

    Options that are not recognised are passed on to latexdiff.
    """
    state = set_cli_state(ctx=ctx, verbosity=verbose, debug=debug)
    old, new, passthrough = split_revision_arguments(arguments, ctx)

    settings: dict[str, object] = {
        "main": main,
        "view": _view_mode(view),
        "pdf_viewer": pdf_viewer or None,
        "bibtex": bibtex,
        "biber": biber,
        "flatten": not no_flatten,
        "latexdiff_flatten": latexdiff_flatten,
        "latexmk": latexmk,
        "output": output,
        "verbose": verbose > 0,
        "quiet": quiet,
        "prepare": prepare,
        "ln_untracked": ln_untracked,
        "subtree": subtree,
        "ignore_latex_errors": ignore_latex_errors,
        "ignore_makefile": ignore_makefile,
        "bbl": bbl,
    }
    if tmpdirprefix is not None:
        settings["tmpdir_prefix"] = tmpdirprefix

    config = PipelineConfig.create(
        old=old,
        new=new,
        latexopt=latexopt,
        latexpand_options=latexpand,
        latexdiff_options=passthrough,
        cleanup=cleanup,
        no_cleanup=no_cleanup,
        **settings,
    )

    try:
        result = run_pipeline(config, emitter=CliEmitter(state))
    except CompilationFailure as exc:
        emit_error(f"{exc.stage}: {exc}", exception=exc)
        present_compilation_failure(state, exc)
        raise typer.Exit(code=1) from exc
    except LatexDiffError as exc:
        emit_error(f"{exc.stage}: {exc}", exception=exc)
        raise typer.Exit(code=1) from exc

    present_result(state, result)


__all__ = ["latexdiff"]
