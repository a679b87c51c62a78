"""Sequential pipeline turning two revisions into a compiled latexdiff PDF.

The stages run strictly one after the other: workspace creation, snapshot
extraction (old then new), preparation, flattening, latexdiff, compilation,
delivery, viewing and cleanup. Any fatal error aborts the remaining stages and
leaves the workspace on disk for inspection.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import logging
from pathlib import Path, PurePosixPath
import shutil

from git_latexdiff.adapters.git import Repository
from git_latexdiff.adapters.latex.compile import CompileResult, compile_document, select_strategy
from git_latexdiff.adapters.latex.flatten import (
    FlattenMode,
    flatten,
    regenerate_bbl,
    resolve_flatten_mode,
)
from git_latexdiff.adapters.latex.latexdiff import install_diff, latexdiff_command, run_latexdiff
from git_latexdiff.adapters.process import Invoker
from git_latexdiff.adapters.viewer import detect_viewer, launch_viewer

from .config import CleanupMode, PipelineConfig, Side, ViewMode
from .diagnostics import DiagnosticEmitter, LoggingEmitter, NullEmitter
from .exceptions import CompilationFailure, UsageError
from .prepare import knitr_defaults, run_preparation
from .snapshot import checkout_root, extract, link_untracked
from .workspace import CleanupReport, Workspace


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MainDocument:
    """Entry-point document, located relative to the repository root."""

    path: str
    prepare: str | None = None

    @property
    def mainbase(self) -> str:
        name = PurePosixPath(self.path).name
        return name[: -len(".tex")] if name.endswith(".tex") else name

    @property
    def maindir(self) -> str:
        return str(PurePosixPath(self.path).parent)


@dataclass(slots=True)
class PipelineResult:
    """Everything the caller needs to report a finished run."""

    workspace: Workspace
    main: MainDocument
    compile: CompileResult
    pdf_path: Path
    output: Path | None
    cleanup: CleanupReport
    viewer: str | None = None


def resolve_main_document(
    config: PipelineConfig,
    repository: Repository,
    emitter: DiagnosticEmitter,
) -> MainDocument:
    """Determine the main document and the preparation command it implies."""
    main = config.main
    if not main:
        candidates = repository.main_candidates()
        emitter.event("main_guess", {"candidates": candidates})
        if len(candidates) != 1:
            if not candidates:
                detail = "No candidate for main file."
            else:
                listing = "\n".join(f"\t{candidate}" for candidate in candidates)
                detail = f"Multiple candidates for main file:\n{listing}"
            raise UsageError(f"{detail}\nPlease, provide a main file with --main FILE.tex.")
        main = candidates[0]

    source = repository.workdir / main
    if not source.is_file():
        raise UsageError(f"Cannot read {main}.")

    main, prepare = knitr_defaults(main, config.prepare)
    return MainDocument(path=repository.repo_path(main), prepare=prepare)


class DiffPipeline:
    """Drive one run of the pipeline for a resolved configuration."""

    def __init__(
        self,
        config: PipelineConfig,
        *,
        repository: Repository,
        invoker: Invoker | None = None,
        emitter: DiagnosticEmitter | None = None,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self.config = config
        self.repository = repository
        self.invoker = invoker or Invoker(quiet=config.quiet)
        if emitter is None:
            emitter = LoggingEmitter() if config.verbose else NullEmitter()
        self.emitter = emitter
        self.which = which

    def run(self) -> PipelineResult:
        config = self.config
        logger.debug(
            "Diffing %s against %s in %s", config.old, config.new, self.repository.toplevel
        )
        main = resolve_main_document(config, self.repository, self.emitter)
        mode = resolve_flatten_mode(config, which=self.which, warn=self.emitter.warning)
        viewer = self._resolve_viewer()

        workspace = Workspace.create(config.tmpdir_prefix)
        self.emitter.event(
            "workspace", {"root": workspace.root, "old": workspace.old, "new": workspace.new}
        )

        for side in Side:
            self._populate(workspace, side, main)
        for side in Side:
            self.emitter.event(
                "prepare",
                {
                    "command": main.prepare or "(none)",
                    "directory": workspace.snapshot(side) / self.repository.prefix,
                },
            )
            run_preparation(
                main.prepare,
                side=side,
                snapshot_root=workspace.snapshot(side),
                prefix=self.repository.prefix,
                main=main.path,
                invoker=self.invoker,
            )

        self._diff(workspace, main, mode)
        result = self._compile(workspace, main)

        pdf_path = self._deliver(workspace, result)
        if viewer is not None:
            self.emitter.event("viewer", {"viewer": viewer, "path": pdf_path})
            launch_viewer(viewer, pdf_path)

        report = workspace.cleanup(self._cleanup_mode(viewer), compile_succeeded=True)
        self.emitter.event(
            "cleanup",
            {"mode": report.mode.value, "removed": report.removed, "workspace": workspace.root},
        )
        return PipelineResult(
            workspace=workspace,
            main=main,
            compile=result,
            pdf_path=pdf_path,
            output=self._output_path(),
            cleanup=report,
            viewer=viewer,
        )

    def _resolve_viewer(self) -> str | None:
        config = self.config
        if config.view is ViewMode.NEVER or config.output is not None:
            return None
        viewer = detect_viewer(config.pdf_viewer, which=self.which)
        if viewer is None:
            self.emitter.warning(
                "could not find a PDF viewer on your system. "
                "Please set $PDFVIEWER or use --pdf-viewer CMD."
            )
        return viewer

    def _cleanup_mode(self, viewer: str | None) -> CleanupMode:
        mode = self.config.cleanup
        if viewer is not None and mode is CleanupMode.ALL:
            self.emitter.warning(
                "keeping the temporary directory, the viewer still has its PDF open."
            )
            return CleanupMode.KEEPPDF
        return mode

    def _populate(self, workspace: Workspace, side: Side, main: MainDocument) -> None:
        config = self.config
        snapshot_root = workspace.snapshot(side)
        revision = config.revision(side)
        if config.ln_untracked:
            link_untracked(snapshot_root, self.repository, main.maindir)
        extract(
            revision,
            snapshot_root,
            side=side,
            repository=self.repository,
            root=checkout_root(self.repository, subtree=config.subtree),
            invoker=self.invoker,
        )
        self.emitter.event(
            "snapshot",
            {
                "side": side.value,
                "revision": revision,
                "root": snapshot_root,
                "working_tree": side is Side.NEW and config.working_tree,
            },
        )

    def _diff(self, workspace: Workspace, main: MainDocument, mode: FlattenMode) -> None:
        config = self.config
        mainbase = main.mainbase
        if mode is FlattenMode.LATEXPAND:
            if config.bbl:
                for side in Side:
                    docdir = workspace.snapshot(side) / main.maindir
                    bbl_path = docdir / f"{mainbase}.bbl"
                    if bbl_path.is_file():
                        continue
                    self.emitter.event("bbl", {"side": side.value, "path": bbl_path})
                    regenerate_bbl(
                        docdir,
                        mainbase,
                        side=side,
                        latexopt=config.latexopt,
                        invoker=self.invoker,
                    )
            for side in Side:
                output = workspace.flattened_source(side, mainbase)
                self.emitter.event("flatten", {"side": side.value, "output": output})
                flatten(
                    workspace.snapshot(side) / main.maindir,
                    mainbase,
                    side=side,
                    output=output,
                    options=config.latexpand_options,
                    expand_bbl=config.bbl,
                    invoker=self.invoker,
                )
            old_source = workspace.flattened_source(Side.OLD, mainbase).name
            new_source = workspace.flattened_source(Side.NEW, mainbase).name
        else:
            old_source = f"{Side.OLD.value}/{main.path}"
            new_source = f"{Side.NEW.value}/{main.path}"

        self.emitter.event(
            "latexdiff",
            {
                "argv": latexdiff_command(
                    old_source,
                    new_source,
                    options=config.latexdiff_options,
                    builtin_flatten=mode is FlattenMode.LATEXDIFF,
                ),
                "output": workspace.diff_output,
            },
        )
        run_latexdiff(
            old_source,
            new_source,
            output=workspace.diff_output,
            workdir=workspace.root,
            options=config.latexdiff_options,
            builtin_flatten=mode is FlattenMode.LATEXDIFF,
            invoker=self.invoker,
        )
        install_diff(workspace.diff_output, workspace.new / main.path)

    def _compile(self, workspace: Workspace, main: MainDocument) -> CompileResult:
        docdir = workspace.new / main.maindir
        strategy = select_strategy(docdir, self.config)
        self.emitter.event("compile", {"strategy": strategy.value, "directory": docdir})
        result = compile_document(docdir, main.mainbase, self.config, invoker=self.invoker)
        if result.tolerated:
            self.emitter.warning("LaTeX errors were found - but attempting to carry on.")
        if not result.succeeded:
            workspace.cleanup(self.config.cleanup, compile_succeeded=False)
            raise CompilationFailure(
                "Error during compilation. Please examine and cleanup if needed.",
                directory=docdir,
                main_file=f"{main.mainbase}.tex",
                log_path=result.log_path,
                reasons=result.problems,
            )
        return result

    def _output_path(self) -> Path | None:
        output = self.config.output
        if output is None:
            return None
        return output if output.is_absolute() else self.repository.workdir / output

    def _deliver(self, workspace: Workspace, result: CompileResult) -> Path:
        destination = self._output_path()
        if destination is None:
            destination = workspace.root / result.pdf_path.name
        delivered = Path(shutil.move(str(result.pdf_path), str(destination)))
        self.emitter.event("delivery", {"path": delivered})
        return delivered


def run_pipeline(
    config: PipelineConfig,
    *,
    repository: Repository | None = None,
    invoker: Invoker | None = None,
    emitter: DiagnosticEmitter | None = None,
    which: Callable[[str], str | None] = shutil.which,
) -> PipelineResult:
    """Run the whole pipeline for ``config`` in the current repository."""
    pipeline = DiffPipeline(
        config,
        repository=repository or Repository.discover(),
        invoker=invoker,
        emitter=emitter,
        which=which,
    )
    return pipeline.run()


__all__ = [
    "DiffPipeline",
    "MainDocument",
    "PipelineResult",
    "resolve_main_document",
    "run_pipeline",
]
