"""Uniform invocation of external tools with log redirection."""

from __future__ import annotations

from collections.abc import Sequence
import contextlib
from dataclasses import dataclass
import logging
from pathlib import Path
import shlex
import subprocess
from typing import IO


logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127


@dataclass(slots=True)
class ExitOutcome:
    """Exit status of an external command plus where its output went."""

    argv: list[str]
    returncode: int
    workdir: Path
    log_path: Path | None = None

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def label(self) -> str:
        return self.argv[0] if self.argv else "<none>"


def format_command(argv: Sequence[str] | str) -> str:
    """Return a shell-like rendering of a command for diagnostics."""
    if isinstance(argv, str):
        return argv
    return shlex.join(str(arg) for arg in argv)


class Invoker:
    """Run external commands, redirecting their output to logs when quiet.

    Every stage goes through :meth:`run` (or :meth:`pipe`), so the choice between
    streaming output to the terminal and writing it to ``<workdir>/<log>`` is
    made in one place.
    """

    def __init__(self, *, quiet: bool = False) -> None:
        self.quiet = quiet

    def log_path(self, workdir: Path, log: str | None) -> Path | None:
        """Return the log file used for ``log`` under the current policy."""
        if not self.quiet or not log:
            return None
        return workdir / log

    def run(
        self,
        argv: Sequence[str] | str,
        *,
        workdir: Path,
        log: str | None = None,
        stdout_path: Path | None = None,
        shell: bool = False,
    ) -> ExitOutcome:
        """Execute a command to completion and report its exit status.

        ``stdout_path`` captures standard output into a file (used by tools
        writing their result on stdout); standard error then follows the log
        policy alone.
        """
        command = argv if shell else [str(arg) for arg in argv]
        recorded = [command] if isinstance(command, str) else list(command)
        log_path = self.log_path(workdir, log)
        logger.debug("running %s in %s", format_command(command), workdir)

        with contextlib.ExitStack() as stack:
            log_handle: IO[bytes] | None = None
            if log_path is not None:
                log_handle = stack.enter_context(log_path.open("wb"))
            stdout_target: IO[bytes] | None = log_handle
            if stdout_path is not None:
                stdout_target = stack.enter_context(stdout_path.open("wb"))
            stderr_target = subprocess.STDOUT if stdout_path is None else log_handle
            if log_handle is None and stdout_path is None:
                stderr_target = None
            try:
                process = subprocess.run(
                    command,
                    cwd=workdir,
                    shell=shell,
                    check=False,
                    stdout=stdout_target,
                    stderr=stderr_target,
                )
            except FileNotFoundError as exc:
                logger.error("cannot execute %s: %s", format_command(command), exc)
                return ExitOutcome(recorded, COMMAND_NOT_FOUND, workdir, log_path)
            except OSError as exc:
                logger.error("failed to invoke %s: %s", format_command(command), exc)
                return ExitOutcome(recorded, 1, workdir, log_path)

        logger.debug("%s exited with status %s", recorded[0], process.returncode)
        return ExitOutcome(recorded, process.returncode, workdir, log_path)

    def pipe(
        self,
        producer: Sequence[str],
        consumer: Sequence[str],
        *,
        producer_workdir: Path,
        consumer_workdir: Path,
        log: str | None = None,
    ) -> tuple[ExitOutcome, ExitOutcome]:
        """Run ``producer | consumer`` and report both exit statuses."""
        producer_argv = [str(arg) for arg in producer]
        consumer_argv = [str(arg) for arg in consumer]
        log_path = self.log_path(consumer_workdir, log)
        logger.debug(
            "running (cd %s && %s) | %s in %s",
            producer_workdir,
            format_command(producer_argv),
            format_command(consumer_argv),
            consumer_workdir,
        )

        with contextlib.ExitStack() as stack:
            log_handle: IO[bytes] | None = None
            if log_path is not None:
                log_handle = stack.enter_context(log_path.open("wb"))
            try:
                upstream = subprocess.Popen(
                    producer_argv,
                    cwd=producer_workdir,
                    stdout=subprocess.PIPE,
                    stderr=log_handle,
                )
            except OSError as exc:
                logger.error("cannot execute %s: %s", format_command(producer_argv), exc)
                return (
                    ExitOutcome(producer_argv, COMMAND_NOT_FOUND, producer_workdir, log_path),
                    ExitOutcome(consumer_argv, 1, consumer_workdir, log_path),
                )
            assert upstream.stdout is not None
            try:
                downstream = subprocess.Popen(
                    consumer_argv,
                    cwd=consumer_workdir,
                    stdin=upstream.stdout,
                    stdout=log_handle,
                    stderr=log_handle,
                )
            except OSError as exc:
                logger.error("cannot execute %s: %s", format_command(consumer_argv), exc)
                upstream.stdout.close()
                upstream.kill()
                upstream.wait()
                producer_status = upstream.returncode or 1
                return (
                    ExitOutcome(producer_argv, producer_status, producer_workdir, log_path),
                    ExitOutcome(consumer_argv, COMMAND_NOT_FOUND, consumer_workdir, log_path),
                )
            # Let the producer see SIGPIPE if the consumer exits early.
            upstream.stdout.close()
            consumer_status = downstream.wait()
            producer_status = upstream.wait()

        return (
            ExitOutcome(producer_argv, producer_status, producer_workdir, log_path),
            ExitOutcome(consumer_argv, consumer_status, consumer_workdir, log_path),
        )


__all__ = ["COMMAND_NOT_FOUND", "ExitOutcome", "Invoker", "format_command"]
