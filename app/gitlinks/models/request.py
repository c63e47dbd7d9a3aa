"""Request and state models for the operation queue.

Requests are ephemeral: created by a user action, dependency discovery
or update-all, consumed once by the orchestrator, never persisted.
"""

from dataclasses import dataclass
from enum import Enum


class OperationKind(Enum):
    """External operations the orchestrator can have in flight."""

    LIST = "list"
    SEARCH = "search"
    ADD = "add"
    REMOVE = "remove"


class OrchestratorState(Enum):
    """State of the orchestration loop.

    Attributes:
        IDLE: No external operation in flight.
        LISTING: Waiting for the installed package list.
        SEARCHING: Waiting for an update search.
        ADDING: Waiting for an install.
        REMOVING: Waiting for an uninstall.
    """

    IDLE = "idle"
    LISTING = "listing"
    SEARCHING = "searching"
    ADDING = "adding"
    REMOVING = "removing"


@dataclass(frozen=True, slots=True)
class InstallRequest:
    """A pending install of a source reference.

    Attributes:
        link: Source reference (git URL with optional ref, path, or
            'name@version' for registry updates).
        force: Bypass the session "already seen" guard.
        depth: Dependency discovery depth; 0 for requests not produced by
            dependency discovery.
    """

    link: str
    force: bool = False
    depth: int = 0

    def __post_init__(self) -> None:
        """Validate request data after initialization."""
        if not self.link or not self.link.strip():
            msg = "Install link cannot be empty"
            raise ValueError(msg)
        if self.depth < 0:
            msg = f"Depth cannot be negative, got {self.depth}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class RemoveRequest:
    """A pending uninstall of a package id or name."""

    target: str

    def __post_init__(self) -> None:
        """Validate request data after initialization."""
        if not self.target or not self.target.strip():
            msg = "Remove target cannot be empty"
            raise ValueError(msg)
