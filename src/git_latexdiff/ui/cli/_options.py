"""Shared Typer option definitions for the latexdiff command."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from git_latexdiff.core.config import CleanupMode


REVISIONS_PANEL = "Revisions"
DOCUMENT_PANEL = "Document"
DIFF_PANEL = "Flattening and Diff"
BUILD_PANEL = "Compilation"
OUTPUT_PANEL = "Output"
DIAGNOSTICS_PANEL = "Diagnostics"

ArgumentsArgument = Annotated[
    list[str] | None,
    typer.Argument(
        metavar="OLD [NEW]",
        help=(
            "Git revisions to compare. NEW defaults to HEAD; use '--' as NEW to compare "
            "against the working tree. Unknown options starting with '-' are passed to "
            "latexdiff."
        ),
        show_default=False,
        rich_help_panel=REVISIONS_PANEL,
    ),
]

MainOption = Annotated[
    str | None,
    typer.Option(
        "--main",
        metavar="FILE.tex",
        help="Main LaTeX file, relative to the current directory (guessed when omitted).",
        rich_help_panel=DOCUMENT_PANEL,
    ),
]

PrepareOption = Annotated[
    str | None,
    typer.Option(
        "--prepare",
        metavar="CMD",
        help="Shell command run in both checkouts before latexdiff (e.g. 'make figures').",
        rich_help_panel=DOCUMENT_PANEL,
    ),
]

LnUntrackedOption = Annotated[
    bool,
    typer.Option(
        "--ln-untracked/--no-ln-untracked",
        help="Symlink uncommitted files from the working directory into both checkouts.",
        rich_help_panel=DOCUMENT_PANEL,
    ),
]

SubtreeOption = Annotated[
    bool,
    typer.Option(
        "--subtree/--whole-tree",
        help="Check out only the tree at and below the current directory, or the whole tree.",
        rich_help_panel=DOCUMENT_PANEL,
    ),
]

NoFlattenOption = Annotated[
    bool,
    typer.Option(
        "--no-flatten",
        help="Do not call latexpand to flatten the document.",
        rich_help_panel=DIFF_PANEL,
    ),
]

LatexpandOption = Annotated[
    str | None,
    typer.Option(
        "--latexpand",
        metavar="OPTS",
        help="Additional options passed to latexpand.",
        rich_help_panel=DIFF_PANEL,
    ),
]

LatexdiffFlattenOption = Annotated[
    bool,
    typer.Option(
        "--latexdiff-flatten",
        help="Use latexdiff --flatten instead of latexpand.",
        rich_help_panel=DIFF_PANEL,
    ),
]

BblOption = Annotated[
    bool,
    typer.Option(
        "--bbl",
        help="Flatten the .bbl file of the same name as the main file into the document.",
        rich_help_panel=DIFF_PANEL,
    ),
]

BibtexOption = Annotated[
    bool,
    typer.Option(
        "--bibtex",
        "-b",
        help="Run bibtex between the first and second pdflatex passes.",
        rich_help_panel=BUILD_PANEL,
    ),
]

BiberOption = Annotated[
    bool,
    typer.Option(
        "--biber",
        help="Run biber between the first and second pdflatex passes.",
        rich_help_panel=BUILD_PANEL,
    ),
]

LatexmkOption = Annotated[
    bool,
    typer.Option(
        "--latexmk",
        help="Build the result with latexmk.",
        rich_help_panel=BUILD_PANEL,
    ),
]

LatexoptOption = Annotated[
    str | None,
    typer.Option(
        "--latexopt",
        metavar="OPTS",
        help="Additional options passed to pdflatex (e.g. -shell-escape).",
        rich_help_panel=BUILD_PANEL,
    ),
]

IgnoreLatexErrorsOption = Annotated[
    bool,
    typer.Option(
        "--ignore-latex-errors",
        help="Keep going despite LaTeX errors, as long as a PDF file is produced.",
        rich_help_panel=BUILD_PANEL,
    ),
]

IgnoreMakefileOption = Annotated[
    bool,
    typer.Option(
        "--ignore-makefile",
        help="Build as though no Makefile existed next to the main file.",
        rich_help_panel=BUILD_PANEL,
    ),
]

OutputOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        metavar="FILE",
        help="Move the resulting PDF to FILE. Implies '--cleanup all'.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

ViewOption = Annotated[
    bool | None,
    typer.Option(
        "--view/--no-view",
        help="Display the resulting PDF (default when --output is not used).",
        show_default=False,
        rich_help_panel=OUTPUT_PANEL,
    ),
]

PdfViewerOption = Annotated[
    str | None,
    typer.Option(
        "--pdf-viewer",
        metavar="CMD",
        envvar="PDFVIEWER",
        help="Command used to view the PDF file.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

CleanupOption = Annotated[
    CleanupMode | None,
    typer.Option(
        "--cleanup",
        metavar="MODE",
        help=(
            "keeppdf (default): keep only the generated PDF; none: keep all temporary "
            "files; all: erase all generated files."
        ),
        show_default=False,
        rich_help_panel=OUTPUT_PANEL,
    ),
]

NoCleanupOption = Annotated[
    bool,
    typer.Option(
        "--no-cleanup",
        help="Keep the temporary directory, like '--cleanup none'. Overrides --cleanup.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

TmpdirPrefixOption = Annotated[
    Path | None,
    typer.Option(
        "--tmpdirprefix",
        metavar="DIR",
        help="Directory where the temporary directory is created.",
        show_default=False,
        rich_help_panel=OUTPUT_PANEL,
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Report progress. Repeat for error details.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

QuietOption = Annotated[
    bool,
    typer.Option(
        "--quiet",
        help="Redirect output from external tools to log files.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Show full tracebacks when an unexpected error occurs.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]
