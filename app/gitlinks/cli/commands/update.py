"""Update command implementation.

Checks a single installed package for updates. Registry packages are
compared against the latest published version; git packages are
reinstalled from their source reference together with their git
dependencies.
"""

from typing import Annotated

import typer

from gitlinks.cli.session import open_session
from gitlinks.cli.types import ProjectOption, YesOption
from gitlinks.utils.formatting import print_error

app = typer.Typer(
    help="Check one package for updates.",
    invoke_without_command=True,
    context_settings={"allow_interspersed_args": True},
)


@app.callback(invoke_without_command=True)
def update_package(
    ctx: typer.Context,
    name: Annotated[
        str,
        typer.Argument(help="Name of the installed package."),
    ],
    project: ProjectOption = None,
    yes: YesOption = False,
) -> None:
    """Check an installed package for updates and apply them.

    Examples:
        gitlinks update left-pad          # Offer newer registry version
        gitlinks update tools --yes       # Reinstall git package without asking
    """
    session = open_session(ctx, project, assume_yes=yes)
    orchestrator = session.orchestrator
    orchestrator.request_list(refresh=True)
    session.run()

    if orchestrator.failures:
        session.finish()
        return

    wanted = name.casefold()
    package = next((p for p in orchestrator.installed if p.name.casefold() == wanted), None)
    if package is None:
        orchestrator.close()
        print_error(f"Package '{name}' is not installed.")
        raise typer.Exit(code=1)

    orchestrator.check_updates(package)
    session.run()
    session.finish()
