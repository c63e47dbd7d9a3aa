"""Config command implementation.

Shows and initializes the gitlinks configuration file.
"""

from typing import Annotated

import typer
from rich.table import Table

from gitlinks.cli.session import load_settings
from gitlinks.core.config import ConfigError, GitLinksConfig, config_to_dict, save_config
from gitlinks.core.paths import get_config_path
from gitlinks.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or initialize configuration.",
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Show the effective configuration."""
    config = load_settings()
    path = get_config_path()

    table = Table(
        title="Configuration",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Setting", no_wrap=True)
    table.add_column("Value", style="info")

    values = config_to_dict(config)
    for name in GitLinksConfig.model_fields:
        table.add_row(name, str(values.get(name, "-")))

    console.print(table)
    if path.exists():
        print_info(f"Loaded from {path}")
    else:
        print_info(f"No config file at {path}; showing defaults.")


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite an existing config file.",
        ),
    ] = False,
) -> None:
    """Write a config file with default settings."""
    path = get_config_path()
    if path.exists() and not force:
        print_error(f"Config already exists: {path}")
        print_info("Use --force to overwrite it.")
        raise typer.Exit(code=1)

    try:
        saved = save_config(GitLinksConfig(), path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {saved}")
