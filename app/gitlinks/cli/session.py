"""Command session wiring.

Builds an :class:`Orchestrator` for a CLI command from the configuration
and drives it until the queues drain. Status messages go to stderr so
stdout stays usable for machine-readable output.
"""

import logging
from pathlib import Path

import typer
from rich.markup import escape

from gitlinks.core.config import ConfigError, GitLinksConfig, load_config_or_default
from gitlinks.core.orchestrator import Confirm, Orchestrator, descriptor_reader
from gitlinks.services.base import PackageService
from gitlinks.services.npm import NpmService
from gitlinks.utils.formatting import err_console, print_error
from gitlinks.utils.progress import NullProgress, ProgressReporter, RichProgress

logger = logging.getLogger(__name__)


def load_settings() -> GitLinksConfig:
    """Load configuration or exit with a helpful error message.

    Raises:
        typer.Exit: If the config file exists but cannot be loaded.
    """
    try:
        return load_config_or_default()
    except ConfigError as e:
        print_error(f"Failed to load config: {e}")
        raise typer.Exit(code=1) from e


def create_service(config: GitLinksConfig, project: Path | None) -> PackageService:
    """Create the package service for a project directory."""
    project_dir = project if project is not None else config.effective_project_dir
    return NpmService(project_dir=project_dir, executable=config.npm_executable)


def _confirm_with(assume_yes: bool) -> Confirm:
    def confirm(title: str, message: str) -> bool:
        if assume_yes:
            return True
        err_console.print(f"[bold_header]{escape(title)}[/]")
        return typer.confirm(message, default=False)

    return confirm


class Session:
    """An orchestrator bound to one CLI invocation.

    Attributes:
        orchestrator: The orchestrator driving package operations.
        config: Loaded settings.
        quiet: Status lines are suppressed, so failures are reported on finish.
    """

    def __init__(
        self,
        orchestrator: Orchestrator,
        config: GitLinksConfig,
        *,
        quiet: bool = False,
    ) -> None:
        self.orchestrator = orchestrator
        self.config = config
        self.quiet = quiet

    def run(self) -> None:
        """Drive the orchestrator until nothing is pending."""
        self.orchestrator.run_until_idle(poll_interval=self.config.poll_interval)

    @property
    def exit_code(self) -> int:
        """1 if any operation failed, else 0."""
        return 1 if self.orchestrator.failures else 0

    def finish(self) -> None:
        """Release resources and exit non-zero if an operation failed.

        Raises:
            typer.Exit: If any operation failed.
        """
        self.orchestrator.close()
        if self.exit_code:
            if self.quiet:
                for message in self.orchestrator.failures:
                    print_error(message)
            raise typer.Exit(code=self.exit_code)


def open_session(
    ctx: typer.Context,
    project: Path | None,
    *,
    assume_yes: bool = False,
) -> Session:
    """Create a session for a command.

    Args:
        ctx: Typer context carrying the global ``quiet`` flag.
        project: Project directory override.
        assume_yes: Accept confirmation prompts automatically.

    Raises:
        typer.Exit: If the config is invalid or npm is not available.
    """
    config = load_settings()
    service = create_service(config, project)

    if not service.is_available():
        print_error(f"Package manager '{config.npm_executable}' is not available on this system.")
        raise typer.Exit(code=1)

    options = ctx.obj if isinstance(ctx.obj, dict) else {}
    quiet = bool(options.get("quiet", False))

    def show_status(message: str) -> None:
        if not quiet and message:
            err_console.print(f"[muted]{escape(message)}[/]")

    progress: ProgressReporter = (
        RichProgress(err_console) if not quiet and err_console.is_terminal else NullProgress()
    )

    orchestrator = Orchestrator(
        service,
        progress=progress,
        confirm=_confirm_with(assume_yes),
        dependency_reader=descriptor_reader(config.descriptor_name, config.dependency_key),
        max_dependency_depth=config.max_dependency_depth,
        on_status=show_status,
    )
    logger.debug("Opened session for %s", project or config.effective_project_dir)
    return Session(orchestrator, config, quiet=quiet)
