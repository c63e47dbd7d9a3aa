"""CLI package for gitlinks.

This package contains the Typer application and all subcommands.
"""

from gitlinks.cli.main import app

__all__ = ["app"]
