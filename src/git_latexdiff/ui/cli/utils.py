"""Auxiliary helpers used by CLI commands."""

from __future__ import annotations

from collections.abc import Iterable

import click

from git_latexdiff.core.config import WORKING_TREE


# Stand-in for a literal "--" so that click keeps it as a positional value.
WORKING_TREE_TOKEN = "\0working-tree\0"


class RevisionUsageError(click.UsageError):
    """Usage error reported with exit status 1."""

    exit_code = 1


def protect_working_tree(args: Iterable[str]) -> list[str]:
    """Replace every literal ``--`` with a token click will not interpret."""
    return [WORKING_TREE_TOKEN if arg == WORKING_TREE else arg for arg in args]


def split_revision_arguments(
    tokens: Iterable[str] | None,
    ctx: click.Context | None = None,
) -> tuple[str, str | None, list[str]]:
    """Split raw positional tokens into OLD, NEW and latexdiff options.

    Dash-prefixed tokens are forwarded to latexdiff in their original order.
    The first two plain tokens are the revisions; ``--`` stands for NEW and
    selects the working tree.
    """
    old: str | None = None
    new: str | None = None
    passthrough: list[str] = []

    for token in tokens or ():
        if token == WORKING_TREE_TOKEN:
            if new is not None:
                raise RevisionUsageError(f"Bad argument {WORKING_TREE}", ctx=ctx)
            new = WORKING_TREE
        elif token == "":
            raise RevisionUsageError("Empty string not allowed as argument", ctx=ctx)
        elif token.startswith("-"):
            passthrough.append(token)
        elif old is None:
            old = token
        elif new is None:
            new = token
        else:
            raise RevisionUsageError(f"Bad argument {token}", ctx=ctx)

    if old is None:
        raise RevisionUsageError("Please, provide at least one revision to diff with.", ctx=ctx)
    return old, new, passthrough


__all__ = [
    "WORKING_TREE_TOKEN",
    "RevisionUsageError",
    "protect_working_tree",
    "split_revision_arguments",
]
