"""Allow ``python -m git_latexdiff``."""

from git_latexdiff.ui.cli import main


if __name__ == "__main__":
    main()
