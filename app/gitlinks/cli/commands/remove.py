"""Remove command implementation.

Uninstalls packages by name or package id.
"""

from typing import Annotated

import typer

from gitlinks.cli.session import open_session
from gitlinks.cli.types import ProjectOption
from gitlinks.utils.formatting import print_success, print_warning

app = typer.Typer(
    help="Uninstall packages.",
    invoke_without_command=True,
    context_settings={"allow_interspersed_args": True},
)


@app.callback(invoke_without_command=True)
def remove_packages(
    ctx: typer.Context,
    names: Annotated[
        list[str],
        typer.Argument(help="Package names or ids to uninstall."),
    ],
    project: ProjectOption = None,
) -> None:
    """Uninstall one or more packages.

    Examples:
        gitlinks remove tools
        gitlinks remove @scope/widgets left-pad
    """
    session = open_session(ctx, project)
    orchestrator = session.orchestrator

    queued = [name for name in names if orchestrator.enqueue_remove(name)]
    if not queued:
        print_warning("Nothing to remove.")
        session.finish()
        return

    session.run()
    session.finish()
    print_success(f"Processed {len(queued)} removal(s).")
