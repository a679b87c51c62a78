"""Locate and launch a PDF viewer."""

from __future__ import annotations

from collections.abc import Callable
import logging
from pathlib import Path
import shlex
import shutil
import subprocess
import sys


logger = logging.getLogger(__name__)

VIEWER_CANDIDATES = ("xdg-open", "evince", "okular", "xpdf", "acroread")


def viewer_candidates(platform: str | None = None) -> tuple[str, ...]:
    """Return viewers to probe, ``open`` first on macOS."""
    current = sys.platform if platform is None else platform
    if current == "darwin":
        return ("open", *VIEWER_CANDIDATES)
    return VIEWER_CANDIDATES


def detect_viewer(
    configured: str | None,
    *,
    which: Callable[[str], str | None] = shutil.which,
    platform: str | None = None,
) -> str | None:
    """Return the configured viewer, or the first candidate found on PATH."""
    if configured:
        return configured
    for candidate in viewer_candidates(platform):
        if which(candidate) is not None:
            logger.debug("using %s as PDF viewer", candidate)
            return candidate
    return None


def launch_viewer(viewer: str, pdf_path: Path) -> subprocess.Popen[bytes] | None:
    """Start ``viewer`` on ``pdf_path`` without waiting for it to exit."""
    argv = [*shlex.split(viewer), str(pdf_path)]
    try:
        return subprocess.Popen(argv, stdin=subprocess.DEVNULL)
    except OSError as exc:
        logger.warning("cannot start PDF viewer %s: %s", viewer, exc)
        return None


__all__ = ["VIEWER_CANDIDATES", "detect_viewer", "launch_viewer", "viewer_candidates"]
