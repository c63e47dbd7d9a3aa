"""Update-all command implementation.

Reinstalls every git-sourced package from its source reference so each
resolves to the latest commit of its branch or tag. Registry packages
are left untouched.
"""

import typer

from gitlinks.cli.session import open_session
from gitlinks.cli.types import ProjectOption

app = typer.Typer(
    help="Reinstall all git packages and their git dependencies.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def update_all_git(
    ctx: typer.Context,
    project: ProjectOption = None,
) -> None:
    """Reinstall the latest commit of every git package.

    Git dependencies declared by each reinstalled package are re-added
    as well.
    """
    session = open_session(ctx, project)
    orchestrator = session.orchestrator
    orchestrator.request_list(refresh=True)
    session.run()

    if orchestrator.failures:
        session.finish()
        return

    orchestrator.enqueue_update_all_git()
    session.run()
    session.finish()
