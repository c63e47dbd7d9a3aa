"""List command implementation.

Shows the packages installed in the project.
"""

import json
from typing import Annotated

import typer

from gitlinks.cli.session import open_session
from gitlinks.cli.types import OutputFormat, ProjectOption
from gitlinks.utils.formatting import (
    console,
    create_package_table,
    format_package_row,
    print_info,
    sort_packages,
)

app = typer.Typer(
    help="List installed packages.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def list_packages(
    ctx: typer.Context,
    project: ProjectOption = None,
    git_only: Annotated[
        bool,
        typer.Option(
            "--git-only",
            "-g",
            help="Only show packages installed from git.",
        ),
    ] = False,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """List installed packages sorted by name.

    Examples:
        gitlinks list                   # Table of all packages
        gitlinks list --git-only        # Only git-sourced packages
        gitlinks list --format json     # Output as JSON
    """
    session = open_session(ctx, project)
    session.orchestrator.request_list(refresh=True)
    session.run()

    packages = sort_packages(session.orchestrator.installed)
    if git_only:
        packages = [p for p in packages if p.is_git]

    if output_format == OutputFormat.JSON:
        payload = [
            {
                "name": p.name,
                "version": p.version,
                "source": p.origin.value,
                "package_id": p.package_id,
                "resolved_path": p.resolved_path,
            }
            for p in packages
        ]
        typer.echo(json.dumps(payload, indent=2))
    elif not packages:
        print_info("No packages found or list not loaded.")
    else:
        table = create_package_table()
        for package in packages:
            table.add_row(*format_package_row(package))
        console.print(table)

    session.finish()
