from pathlib import Path

from conftest import RecordingInvoker, write_pdf
import pytest

from git_latexdiff.adapters.latex.compile import (
    BuildStrategy,
    build_plan,
    compile_document,
    select_strategy,
)
from git_latexdiff.core.config import PipelineConfig


def test_makefile_wins_unless_ignored(scratch: Path) -> None:
    (scratch / "Makefile").write_text("all:\n", encoding="utf-8")

    assert select_strategy(scratch, PipelineConfig.create(old="v1", latexmk=True)) is (
        BuildStrategy.MAKEFILE
    )
    ignored = PipelineConfig.create(old="v1", latexmk=True, ignore_makefile=True)
    assert select_strategy(scratch, ignored) is BuildStrategy.LATEXMK
    plain = PipelineConfig.create(old="v1", ignore_makefile=True)
    assert select_strategy(scratch, plain) is BuildStrategy.PDFLATEX


def test_plain_plan_runs_three_passes_around_bibliography() -> None:
    config = PipelineConfig.create(old="v1", bibtex=True, biber=True, latexopt="-shell-escape")

    plan = build_plan(BuildStrategy.PDFLATEX, "paper", config)

    compiler = ["pdflatex", "-shell-escape", "-interaction=errorstopmode", "paper"]
    assert plan == [
        (compiler, "pdflatex1.log"),
        (["bibtex", "paper"], "bibtex.log"),
        (["biber", "paper"], "biber.log"),
        (compiler, "pdflatex2.log"),
        (compiler, "pdflatex3.log"),
    ]


def test_latexmk_and_make_plans() -> None:
    config = PipelineConfig.create(old="v1")

    assert build_plan(BuildStrategy.LATEXMK, "paper", config) == [
        (["latexmk", "-f", "-pdf", "-silent", "paper"], "latexmk.log")
    ]
    assert build_plan(BuildStrategy.MAKEFILE, "paper", config) == [(["make"], "make.log")]


def test_compile_succeeds_with_pdf(scratch: Path) -> None:
    invoker = RecordingInvoker(effects={"pdflatex": write_pdf})

    result = compile_document(scratch, "paper", PipelineConfig.create(old="v1"), invoker=invoker)

    assert result.succeeded
    assert invoker.commands() == ["pdflatex", "pdflatex", "pdflatex"]
    assert result.pdf_path == scratch / "paper.pdf"


def test_failing_pass_does_not_stop_later_passes(scratch: Path) -> None:
    invoker = RecordingInvoker(returncodes={"bibtex": 2}, effects={"pdflatex": write_pdf})
    config = PipelineConfig.create(old="v1", bibtex=True)

    result = compile_document(scratch, "paper", config, invoker=invoker)

    assert invoker.commands() == ["pdflatex", "bibtex", "pdflatex", "pdflatex"]
    assert result.command_failed
    assert not result.succeeded
    assert result.problems == []


def test_ignored_errors_are_tolerated_when_pdf_exists(scratch: Path) -> None:
    invoker = RecordingInvoker(returncodes={"pdflatex": 1}, effects={"pdflatex": write_pdf})
    config = PipelineConfig.create(old="v1", ignore_latex_errors=True)

    result = compile_document(scratch, "paper", config, invoker=invoker)

    assert result.tolerated
    assert result.succeeded
    assert invoker.calls[0][0][-2] == "-interaction=batchmode"


@pytest.mark.parametrize(
    ("content", "problem"),
    [(None, "No PDF file generated."), (b"", "PDF file generated is empty.")],
)
def test_missing_or_empty_pdf_fails_even_when_errors_are_ignored(
    scratch: Path, content: bytes | None, problem: str
) -> None:
    if content is not None:
        (scratch / "paper.pdf").write_bytes(content)
    config = PipelineConfig.create(old="v1", ignore_latex_errors=True)

    result = compile_document(scratch, "paper", config, invoker=RecordingInvoker())

    assert not result.succeeded
    assert result.problems == [problem]
