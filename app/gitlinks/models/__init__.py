"""Data models for gitlinks.

This module exports the core data structures used throughout the application.
"""

from gitlinks.models.package import (
    InstalledPackage,
    PackageOrigin,
    PackageVersions,
    SearchResult,
)
from gitlinks.models.request import (
    InstallRequest,
    OperationKind,
    OrchestratorState,
    RemoveRequest,
)

__all__ = [
    "InstallRequest",
    "InstalledPackage",
    "OperationKind",
    "OrchestratorState",
    "PackageOrigin",
    "PackageVersions",
    "RemoveRequest",
    "SearchResult",
]
