"""Adapters wrapping git, LaTeX tooling and external processes."""
