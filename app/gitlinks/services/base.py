"""Abstract base classes for the external package service.

The package service is an opaque asynchronous collaborator. Every call
returns immediately with a :class:`PendingOperation` handle that the
orchestrator polls for completion on each tick.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from gitlinks.models.package import InstalledPackage, SearchResult

T = TypeVar("T")


class PendingOperation(ABC, Generic[T]):
    """Handle to an asynchronous package service operation.

    Handles never block. Once :attr:`is_completed` is True the handle
    reports either a result (:attr:`succeeded` True) or an error message.
    Operations cannot be cancelled.
    """

    @property
    @abstractmethod
    def is_completed(self) -> bool:
        """Check (without blocking) whether the operation has finished."""

    @property
    @abstractmethod
    def succeeded(self) -> bool:
        """Check if the operation finished successfully."""

    @property
    @abstractmethod
    def result(self) -> T | None:
        """Result of a successful operation, None otherwise."""

    @property
    @abstractmethod
    def error(self) -> str | None:
        """Error message of a failed operation, None otherwise."""


class CompletedOperation(PendingOperation[T]):
    """An operation whose outcome is known at dispatch time."""

    def __init__(self, result: T | None = None, error: str | None = None) -> None:
        """Initialize a finished operation.

        Args:
            result: Result value for a successful operation.
            error: Error message; when given the operation is a failure.
        """
        self._result = result
        self._error = error

    @classmethod
    def failure(cls, error: str) -> CompletedOperation[T]:
        """Create a failed operation."""
        return cls(error=error)

    @property
    def is_completed(self) -> bool:
        return True

    @property
    def succeeded(self) -> bool:
        return self._error is None

    @property
    def result(self) -> T | None:
        return self._result if self._error is None else None

    @property
    def error(self) -> str | None:
        return self._error


class PackageService(ABC):
    """Abstract base class for package services.

    Example:
        >>> service = NpmService(project_dir=Path("."))
        >>> handle = service.list(refresh=True)
        >>> while not handle.is_completed:
        ...     time.sleep(0.1)
        >>> for pkg in handle.result or []:
        ...     print(pkg.name, pkg.version)
    """

    @abstractmethod
    def list(self, refresh: bool) -> PendingOperation[list[InstalledPackage]]:
        """List installed packages.

        Args:
            refresh: Re-read the installed state instead of a cached one.
        """

    @abstractmethod
    def add(self, ref: str) -> PendingOperation[InstalledPackage]:
        """Install a package from a source reference."""

    @abstractmethod
    def remove(self, id_or_name: str) -> PendingOperation[str]:
        """Uninstall a package. The result is the id or name removed."""

    @abstractmethod
    def search(self, name: str) -> PendingOperation[list[SearchResult]]:
        """Search published versions of a package."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the package service can be used on this system."""
