"""LaTeX tooling: flattening, latexdiff, compilation and log parsing."""
