"""CLI commands for gitlinks.

This package contains all subcommand implementations.
"""

from gitlinks.cli.commands import add, config, list_cmd, remove, update, update_all

__all__ = ["add", "config", "list_cmd", "remove", "update", "update_all"]
