"""Package models for installed and searched packages.

This module defines the immutable snapshots returned by a package
service. The orchestrator only reads these, it never mutates them.
"""

from dataclasses import dataclass, field
from enum import Enum


class PackageOrigin(Enum):
    """Where an installed package came from."""

    REGISTRY = "registry"
    GIT = "git"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class InstalledPackage:
    """Represents a package reported as installed by the package service.

    Attributes:
        name: Package name (e.g., 'left-pad', '@scope/tools').
        version: Installed version string.
        origin: Whether the package came from a registry or a git reference.
        package_id: Opaque identifier encoding origin and resolved reference,
            e.g. 'tools@git+ssh://git@host/org/tools.git#3f2a9c1'.
        resolved_path: Directory holding the resolved package contents.
    """

    name: str
    version: str
    origin: PackageOrigin
    package_id: str
    resolved_path: str | None = field(default=None)

    def __post_init__(self) -> None:
        """Validate package data after initialization."""
        if not self.name:
            msg = "Package name cannot be empty"
            raise ValueError(msg)

    @property
    def is_git(self) -> bool:
        """Check if package was installed from a git reference."""
        return self.origin == PackageOrigin.GIT

    @property
    def is_registry(self) -> bool:
        """Check if package was installed from a registry."""
        return self.origin == PackageOrigin.REGISTRY


@dataclass(frozen=True, slots=True)
class PackageVersions:
    """Version information published for a package.

    Attributes:
        latest: Most recent published version.
        latest_compatible: Most recent version compatible with the project,
            when the service can determine it.
    """

    latest: str | None = None
    latest_compatible: str | None = None

    @property
    def recommended(self) -> str | None:
        """Version an update should target."""
        return self.latest_compatible or self.latest


@dataclass(frozen=True, slots=True)
class SearchResult:
    """A single entry returned by a package search."""

    name: str
    versions: PackageVersions = field(default_factory=PackageVersions)
