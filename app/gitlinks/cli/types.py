"""Shared types and options for CLI commands.

This module provides common enums and option aliases used across
multiple CLI command modules to avoid code duplication.
"""

from enum import Enum
from pathlib import Path
from typing import Annotated

import typer


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


ProjectOption = Annotated[
    Path | None,
    typer.Option(
        "--project",
        "-p",
        help="Project directory (default: configured project_dir or current directory).",
        file_okay=False,
    ),
]

YesOption = Annotated[
    bool,
    typer.Option(
        "--yes",
        "-y",
        help="Accept update prompts without asking.",
    ),
]
