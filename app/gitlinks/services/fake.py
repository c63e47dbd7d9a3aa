"""Fake package service for testing.

FakePackageService is an in-memory implementation that accepts
pre-configured state in its constructor. By default operations complete
on dispatch; with ``auto_complete=False`` they stay pending until the
test calls :meth:`FakePackageService.complete_all`.
"""

from __future__ import annotations

from typing import TypeVar

from gitlinks.models.package import InstalledPackage, PackageOrigin, SearchResult
from gitlinks.services.base import PackageService, PendingOperation

T = TypeVar("T")


class FakeOperation(PendingOperation[T]):
    """Pending operation completed explicitly by the fake service."""

    def __init__(self, result: T | None = None, error: str | None = None) -> None:
        self._outcome_result = result
        self._outcome_error = error
        self._completed = False

    def complete(self) -> None:
        """Mark the operation as finished."""
        self._completed = True

    @property
    def is_completed(self) -> bool:
        return self._completed

    @property
    def succeeded(self) -> bool:
        return self._completed and self._outcome_error is None

    @property
    def result(self) -> T | None:
        return self._outcome_result if self.succeeded else None

    @property
    def error(self) -> str | None:
        return self._outcome_error if self._completed else None


class FakePackageService(PackageService):
    """In-memory fake implementation of a package service.

    This class has NO public setup methods. All state is provided via
    constructor using keyword arguments with sensible defaults.
    """

    def __init__(
        self,
        *,
        installed: list[InstalledPackage] | None = None,
        packages_by_ref: dict[str, InstalledPackage] | None = None,
        search_results: dict[str, list[SearchResult]] | None = None,
        failing_refs: dict[str, str] | None = None,
        list_error: str | None = None,
        remove_error: str | None = None,
        search_error: str | None = None,
        auto_complete: bool = True,
        available: bool = True,
    ) -> None:
        """Create FakePackageService with pre-configured state.

        Args:
            installed: Packages reported by list().
            packages_by_ref: Mapping of add() ref -> package it installs.
                Unknown refs install a git package named after the ref.
            search_results: Mapping of searched name -> results.
            failing_refs: Mapping of add() ref -> error message.
            list_error: Error returned by every list() call.
            remove_error: Error returned by every remove() call.
            search_error: Error returned by every search() call.
            auto_complete: Complete operations immediately on dispatch.
            available: Value reported by is_available().
        """
        self._installed = list(installed or [])
        self._packages_by_ref = packages_by_ref or {}
        self._search_results = search_results or {}
        self._failing_refs = failing_refs or {}
        self._list_error = list_error
        self._remove_error = remove_error
        self._search_error = search_error
        self._auto_complete = auto_complete
        self._available = available
        self._pending: list[FakeOperation] = []
        self._list_calls: list[bool] = []
        self._added_refs: list[str] = []
        self._removed: list[str] = []
        self._searched: list[str] = []

    @property
    def list_calls(self) -> list[bool]:
        """Refresh flags of list() calls, in order."""
        return self._list_calls

    @property
    def added_refs(self) -> list[str]:
        """Refs passed to add(), in order."""
        return self._added_refs

    @property
    def removed(self) -> list[str]:
        """Ids or names passed to remove(), in order."""
        return self._removed

    @property
    def searched(self) -> list[str]:
        """Names passed to search(), in order."""
        return self._searched

    @property
    def installed(self) -> list[InstalledPackage]:
        """Current fake installed state."""
        return list(self._installed)

    @property
    def outstanding(self) -> int:
        """Number of dispatched operations not yet completed."""
        return sum(1 for op in self._pending if not op.is_completed)

    def complete_all(self) -> None:
        """Complete every outstanding operation."""
        for op in self._pending:
            op.complete()
        self._pending = []

    def _start(self, op: FakeOperation[T]) -> FakeOperation[T]:
        if self._auto_complete:
            op.complete()
        else:
            self._pending.append(op)
        return op

    def list(self, refresh: bool) -> PendingOperation[list[InstalledPackage]]:
        self._list_calls.append(refresh)
        if self._list_error is not None:
            return self._start(FakeOperation(error=self._list_error))
        return self._start(FakeOperation(result=list(self._installed)))

    def add(self, ref: str) -> PendingOperation[InstalledPackage]:
        self._added_refs.append(ref)
        if ref in self._failing_refs:
            return self._start(FakeOperation(error=self._failing_refs[ref]))

        package = self._packages_by_ref.get(ref)
        if package is None:
            package = InstalledPackage(
                name=ref,
                version="1.0.0",
                origin=PackageOrigin.GIT,
                package_id=f"{ref}@{ref}",
            )

        self._installed = [p for p in self._installed if p.name != package.name]
        self._installed.append(package)
        return self._start(FakeOperation(result=package))

    def remove(self, id_or_name: str) -> PendingOperation[str]:
        self._removed.append(id_or_name)
        if self._remove_error is not None:
            return self._start(FakeOperation(error=self._remove_error))

        self._installed = [
            p for p in self._installed if id_or_name not in (p.name, p.package_id)
        ]
        return self._start(FakeOperation(result=id_or_name))

    def search(self, name: str) -> PendingOperation[list[SearchResult]]:
        self._searched.append(name)
        if self._search_error is not None:
            return self._start(FakeOperation(error=self._search_error))
        return self._start(FakeOperation(result=list(self._search_results.get(name, []))))

    def is_available(self) -> bool:
        return self._available
