"""Add command implementation.

Installs packages from git references (or any reference the package
manager accepts) and re-adds the git dependencies they declare.
"""

from typing import Annotated

import typer

from gitlinks.cli.session import open_session
from gitlinks.cli.types import ProjectOption
from gitlinks.utils.formatting import print_success, print_warning

app = typer.Typer(
    help="Install packages from links.",
    invoke_without_command=True,
    context_settings={"allow_interspersed_args": True},
)


@app.callback(invoke_without_command=True)
def add_packages(
    ctx: typer.Context,
    links: Annotated[
        list[str],
        typer.Argument(help="Package links, e.g. git@github.com:org/repo.git#v1."),
    ],
    project: ProjectOption = None,
) -> None:
    """Install one or more package links.

    Links already requested in this run are not queued twice. After each
    git install, the links listed under "gitdependencies" in the
    package's package.json are installed as well.

    Examples:
        gitlinks add git@github.com:org/tools.git
        gitlinks add https://example.com/repo.git#main other@1.2.0
    """
    session = open_session(ctx, project)
    orchestrator = session.orchestrator
    orchestrator.request_list(refresh=True)

    queued = [link for link in links if orchestrator.enqueue_add(link)]
    if not queued:
        print_warning("Nothing to add.")
        session.finish()
        return

    session.run()
    session.finish()
    print_success(f"Processed {len(queued)} link(s).")
