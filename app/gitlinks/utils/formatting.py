"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gitlinks.core.theme import get_theme

if TYPE_CHECKING:
    from gitlinks.models.package import InstalledPackage


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def create_package_table(title: str = "Installed Packages") -> Table:
    """Create a pre-configured table for displaying installed packages.

    Args:
        title: Table title.

    Returns:
        Rich Table with Name, Version, Source and Package Id columns.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],  # Zebra striping for readability
    )
    table.add_column("Name", no_wrap=True)
    table.add_column("Version", style="muted")
    table.add_column("Source", width=9)
    table.add_column("Package Id", style="text", overflow="fold")
    return table


def format_package_row(pkg: InstalledPackage) -> tuple[str, str, str, str]:
    """Format a package as a table row with origin-specific styling.

    Args:
        pkg: The installed package to format.

    Returns:
        Tuple of (name, version, source, package id) with Rich markup.
    """
    style = f"origin.{pkg.origin.value}"
    return (
        f"[{style}]{escape(pkg.name)}[/]",
        escape(pkg.version or "-"),
        f"[{style}]{pkg.origin.value}[/]",
        escape(pkg.package_id or "-"),
    )


def sort_packages(packages: tuple[InstalledPackage, ...] | list[InstalledPackage]) -> list[InstalledPackage]:
    """Sort packages case-insensitively by name."""
    return sorted(packages, key=lambda p: p.name.casefold())


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{escape(message)}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {escape(message)}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {escape(message)}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{escape(message)}[/]")
