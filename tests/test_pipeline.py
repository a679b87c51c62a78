from pathlib import Path

from conftest import RecordingEmitter, RecordingInvoker, write_diff, write_pdf
import pytest

from git_latexdiff.adapters.git import Repository
from git_latexdiff.core.config import WORKING_TREE, CleanupMode, PipelineConfig, ViewMode
from git_latexdiff.core.exceptions import (
    CompilationFailure,
    ExtractionError,
    PreparationError,
    UsageError,
)
from git_latexdiff.core.pipeline import MainDocument, resolve_main_document, run_pipeline


ARCHIVES = {
    "v1": {"paper.tex": "old version\n"},
    "HEAD": {"paper.tex": "new version\n"},
}


def _no_tools(_name: str) -> str | None:
    return None


def _latexpand_only(name: str) -> str | None:
    return "/usr/bin/latexpand" if name == "latexpand" else None


def _invoker(**kwargs: object) -> RecordingInvoker:
    effects = {"latexdiff": write_diff, "pdflatex": write_pdf}
    return RecordingInvoker(archives=ARCHIVES, effects=effects, **kwargs)


def _config(scratch: Path, **kwargs: object) -> PipelineConfig:
    kwargs.setdefault("main", "paper.tex")
    kwargs.setdefault("view", ViewMode.NEVER)
    return PipelineConfig.create(old="v1", tmpdir_prefix=scratch, **kwargs)


def test_main_document_paths() -> None:
    main = MainDocument(path="doc/paper.tex")

    assert main.mainbase == "paper"
    assert main.maindir == "doc"
    assert MainDocument(path="paper.tex").maindir == "."


def test_main_is_guessed_from_single_candidate(
    monkeypatch: pytest.MonkeyPatch, repository: Repository, scratch: Path
) -> None:
    monkeypatch.setattr(Repository, "main_candidates", lambda self: ["paper.tex"])
    emitter = RecordingEmitter()

    main = resolve_main_document(_config(scratch, main=None), repository, emitter)

    assert main.path == "paper.tex"
    assert emitter.events == [("main_guess", {"candidates": ["paper.tex"]})]


@pytest.mark.parametrize(
    ("candidates", "expected"),
    [([], "No candidate for main file."), (["a.tex", "b.tex"], "Multiple candidates")],
)
def test_ambiguous_guess_is_a_usage_error(
    monkeypatch: pytest.MonkeyPatch,
    repository: Repository,
    scratch: Path,
    candidates: list[str],
    expected: str,
) -> None:
    monkeypatch.setattr(Repository, "main_candidates", lambda self: candidates)

    with pytest.raises(UsageError, match=expected) as excinfo:
        resolve_main_document(_config(scratch, main=None), repository, RecordingEmitter())

    assert "--main FILE.tex" in str(excinfo.value)


def test_unreadable_main_is_a_usage_error(repository: Repository, scratch: Path) -> None:
    with pytest.raises(UsageError, match="Cannot read missing.tex"):
        resolve_main_document(_config(scratch, main="missing.tex"), repository, RecordingEmitter())


def test_main_is_rebased_on_repository_root(tmp_path: Path, scratch: Path) -> None:
    root = tmp_path / "nested"
    (root / "doc").mkdir(parents=True)
    (root / "doc" / "report.Rnw").write_text("<<>>=\n@\n", encoding="utf-8")
    repository = Repository(
        workdir=root / "doc", toplevel=root, git_dir=root / ".git", prefix="doc/"
    )

    config = _config(scratch, main="report.Rnw")
    main = resolve_main_document(config, repository, RecordingEmitter())

    assert main.path == "doc/report.tex"
    assert main.prepare == "Rscript -e \"library(knitr); knit('report.Rnw')\""


def test_full_run_with_latexdiff_flatten(repository: Repository, scratch: Path) -> None:
    invoker = _invoker()
    emitter = RecordingEmitter()

    result = run_pipeline(
        _config(scratch),
        repository=repository,
        invoker=invoker,
        emitter=emitter,
        which=_no_tools,
    )

    assert emitter.warnings == ["latexpand not found. Falling back to latexdiff --flatten."]
    latexdiff_argv = invoker.calls[0][0]
    assert latexdiff_argv == ["latexdiff", "--flatten", "old/paper.tex", "new/paper.tex"]
    assert invoker.calls[0][1] == result.workspace.root
    assert invoker.commands()[1:] == ["pdflatex", "pdflatex", "pdflatex"]

    assert result.pdf_path == result.workspace.root / "paper.pdf"
    assert result.pdf_path.exists()
    assert result.cleanup.mode is CleanupMode.KEEPPDF
    assert not result.workspace.new.exists()
    assert emitter.event_names() == [
        "workspace",
        "snapshot",
        "snapshot",
        "prepare",
        "prepare",
        "latexdiff",
        "compile",
        "delivery",
        "cleanup",
    ]


def test_latexpand_flattens_both_sides(repository: Repository, scratch: Path) -> None:
    invoker = _invoker()

    result = run_pipeline(
        _config(scratch, latexpand_options="--keep-comments", cleanup=CleanupMode.NONE),
        repository=repository,
        invoker=invoker,
        emitter=RecordingEmitter(),
        which=_latexpand_only,
    )

    root = result.workspace.root
    assert invoker.calls[0][0] == ["latexpand", "paper.tex", "--keep-comments"]
    assert invoker.calls[0][1] == root / "old" / "."
    assert invoker.calls[1][1] == root / "new" / "."
    assert invoker.calls[2][0] == ["latexdiff", "old-paper-fl.tex", "new-paper-fl.tex"]
    annotated = root / "new" / "paper.tex"
    assert "old-paper-fl.tex" in annotated.read_text(encoding="utf-8")
    assert (root / "new" / "paper.tex.orig").read_text(encoding="utf-8") == "new version\n"


def test_bbl_is_regenerated_only_when_missing(repository: Repository, scratch: Path) -> None:
    archives = {
        "v1": {"paper.tex": "old\n", "paper.bbl": "bbl\n"},
        "HEAD": {"paper.tex": "new\n"},
    }

    def write_bbl(argv: list[str], workdir: Path, _stdout: Path | None) -> None:
        (workdir / f"{argv[-1]}.bbl").write_text("bbl\n", encoding="utf-8")

    invoker = RecordingInvoker(
        archives=archives,
        effects={"latexdiff": write_diff, "pdflatex": write_pdf, "bibtex": write_bbl},
    )

    result = run_pipeline(
        _config(scratch, bbl=True),
        repository=repository,
        invoker=invoker,
        emitter=RecordingEmitter(),
        which=_latexpand_only,
    )

    logs = [log for _argv, _workdir, log in invoker.calls]
    assert logs[:2] == ["pdflatex0.log", "bibtex0.log"]
    assert invoker.calls[0][1] == result.workspace.root / "new" / "."
    assert invoker.calls[2][0][-2:] == ["--expand-bbl", "paper.bbl"]


def test_output_is_delivered_and_workspace_removed(
    repository: Repository, scratch: Path
) -> None:
    result = run_pipeline(
        _config(scratch, output=Path("diff.pdf"), view=ViewMode.AUTO),
        repository=repository,
        invoker=_invoker(),
        emitter=RecordingEmitter(),
        which=_no_tools,
    )

    assert result.output == repository.workdir / "diff.pdf"
    assert (repository.workdir / "diff.pdf").exists()
    assert result.viewer is None
    assert not result.workspace.root.exists()


def test_working_tree_links_live_files(repository: Repository, scratch: Path) -> None:
    (repository.workdir / "figure.pdf").write_bytes(b"%PDF")
    invoker = _invoker()

    result = run_pipeline(
        _config(scratch, new=WORKING_TREE, cleanup=CleanupMode.NONE),
        repository=repository,
        invoker=invoker,
        emitter=RecordingEmitter(),
        which=_no_tools,
    )

    assert [producer[3] for producer, _consumer, _dest in invoker.pipes] == ["v1"]
    new = result.workspace.new
    assert (new / "figure.pdf").is_symlink()
    assert (new / "paper.tex.orig").is_symlink()
    assert not (new / "paper.tex").is_symlink()
    live = repository.workdir / "paper.tex"
    assert live.read_text(encoding="utf-8") == "\\documentclass{article}\n"


def test_compilation_failure_keeps_workspace(repository: Repository, scratch: Path) -> None:
    invoker = RecordingInvoker(
        archives=ARCHIVES, effects={"latexdiff": write_diff}, returncodes={"pdflatex": 1}
    )

    with pytest.raises(CompilationFailure) as excinfo:
        run_pipeline(
            _config(scratch, cleanup=CleanupMode.ALL),
            repository=repository,
            invoker=invoker,
            emitter=RecordingEmitter(),
            which=_no_tools,
        )

    failure = excinfo.value
    assert failure.reasons == ["No PDF file generated."]
    assert failure.main_file == "paper.tex"
    assert failure.directory.exists()
    assert failure.log_path == failure.directory / "paper.log"


def test_extraction_failure_stops_the_run(repository: Repository, scratch: Path) -> None:
    invoker = _invoker(returncodes={"git": 128})

    with pytest.raises(ExtractionError):
        run_pipeline(
            _config(scratch),
            repository=repository,
            invoker=invoker,
            emitter=RecordingEmitter(),
            which=_no_tools,
        )

    assert invoker.calls == []


def test_missing_main_in_revision(repository: Repository, scratch: Path) -> None:
    invoker = RecordingInvoker(archives={"v1": {}, "HEAD": {"paper.tex": "new\n"}})

    with pytest.raises(PreparationError, match="old/paper.tex does not exist"):
        run_pipeline(
            _config(scratch),
            repository=repository,
            invoker=invoker,
            emitter=RecordingEmitter(),
            which=_no_tools,
        )


def test_viewer_is_launched_on_the_delivered_pdf(
    monkeypatch: pytest.MonkeyPatch, repository: Repository, scratch: Path
) -> None:
    launched: list[tuple[str, Path]] = []
    monkeypatch.setattr(
        "git_latexdiff.core.pipeline.launch_viewer",
        lambda viewer, pdf: launched.append((viewer, pdf)),
    )

    result = run_pipeline(
        _config(scratch, view=ViewMode.AUTO, pdf_viewer="evince"),
        repository=repository,
        invoker=_invoker(),
        emitter=RecordingEmitter(),
        which=_no_tools,
    )

    assert launched == [("evince", result.pdf_path)]


def test_missing_viewer_is_a_warning(repository: Repository, scratch: Path) -> None:
    emitter = RecordingEmitter()

    result = run_pipeline(
        _config(scratch, view=ViewMode.AUTO),
        repository=repository,
        invoker=_invoker(),
        emitter=emitter,
        which=_no_tools,
    )

    assert result.viewer is None
    assert any("PDF viewer" in warning for warning in emitter.warnings)


def test_requested_output_is_never_viewed(
    monkeypatch: pytest.MonkeyPatch, repository: Repository, scratch: Path
) -> None:
    launched: list[tuple[str, Path]] = []
    monkeypatch.setattr(
        "git_latexdiff.core.pipeline.launch_viewer",
        lambda viewer, pdf: launched.append((viewer, pdf)),
    )

    result = run_pipeline(
        _config(scratch, view=ViewMode.ALWAYS, pdf_viewer="evince", output=Path("out.pdf")),
        repository=repository,
        invoker=_invoker(),
        emitter=RecordingEmitter(),
        which=_no_tools,
    )

    assert launched == []
    assert result.viewer is None
    assert (repository.workdir / "out.pdf").exists()


def test_viewed_pdf_survives_full_cleanup(
    monkeypatch: pytest.MonkeyPatch, repository: Repository, scratch: Path
) -> None:
    monkeypatch.setattr("git_latexdiff.core.pipeline.launch_viewer", lambda viewer, pdf: None)
    emitter = RecordingEmitter()

    result = run_pipeline(
        _config(scratch, view=ViewMode.ALWAYS, pdf_viewer="evince", cleanup=CleanupMode.ALL),
        repository=repository,
        invoker=_invoker(),
        emitter=emitter,
        which=_no_tools,
    )

    assert result.pdf_path.exists()
    assert result.cleanup.mode is CleanupMode.KEEPPDF
    assert not result.workspace.new.exists()
    assert any("viewer still has its PDF open" in warning for warning in emitter.warnings)


def test_failing_preparation_stops_before_latexdiff(
    repository: Repository, scratch: Path
) -> None:
    invoker = _invoker(returncodes={"false": 1})

    with pytest.raises(PreparationError, match="false failed with status 1 in the old version"):
        run_pipeline(
            _config(scratch, prepare="false"),
            repository=repository,
            invoker=invoker,
            emitter=RecordingEmitter(),
            which=_no_tools,
        )

    assert invoker.commands() == ["false"]
