"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from gitlinks import __version__
from gitlinks.cli.commands import add, config, list_cmd, remove, update, update_all
from gitlinks.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="gitlinks",
    help="Install and update git-sourced packages and their git dependencies.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"gitlinks version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route gitlinks log records to stderr through Rich."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )
    logging.getLogger("gitlinks").setLevel(level)


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress status and progress output.",
        ),
    ] = False,
) -> None:
    """gitlinks - git package links for npm projects.

    Install packages straight from git references, keep their declared
    git dependencies installed, and reinstall them at the latest commit.
    """
    configure_logging(verbose)
    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands
app.add_typer(list_cmd.app, name="list")
app.add_typer(add.app, name="add")
app.add_typer(remove.app, name="remove")
app.add_typer(update.app, name="update")
app.add_typer(update_all.app, name="update-all")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
