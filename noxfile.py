"""Nox sessions for git-latexdiff."""

import nox


PYPROJECT = nox.project.load_toml("pyproject.toml")
PYTHON_VERSIONS = nox.project.python_versions(PYPROJECT, max_version="3.14")
nox.options.default_venv_backend = "uv"
nox.options.sessions = ["tests"]


def _pytest(session: nox.Session, *extra: str) -> None:
    session.install(".", *nox.project.dependency_groups(PYPROJECT, "dev"))
    # git is required by the repository fixtures.
    session.run("git", "--version", external=True, silent=True)
    session.run("pytest", *extra, *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run the test suite on every supported interpreter."""
    _pytest(session)


@nox.session(python=PYTHON_VERSIONS[-1])
def coverage(session: nox.Session) -> None:
    """Run the test suite once with a coverage report."""
    _pytest(session, "--cov=git_latexdiff", "--cov-report=term-missing")
