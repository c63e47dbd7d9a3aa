"""Utility modules for gitlinks.

This module exports commonly used utility functions.
"""

from gitlinks.utils.formatting import (
    console,
    create_package_table,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from gitlinks.utils.shell import BackgroundCommand, CommandResult, command_exists

__all__ = [
    "BackgroundCommand",
    "CommandResult",
    "command_exists",
    "console",
    "create_package_table",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]
