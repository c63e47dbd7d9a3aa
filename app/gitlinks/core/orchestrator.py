"""Single-flight orchestration of package service operations.

The :class:`Orchestrator` is a cooperative state machine advanced by
calling :meth:`Orchestrator.tick` from the host's recurring callback (or
:meth:`Orchestrator.run_until_idle`). Each tick either observes the
completion of the single in-flight operation or dispatches the next one,
never both. Dispatch priority is list, search, add, remove.

All state is touched from the ticking thread only; no locks are taken.
A multi-threaded host must route every call through that one thread.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from gitlinks.core.descriptor import (
    DEFAULT_DEPENDENCY_KEY,
    DEFAULT_DESCRIPTOR_NAME,
    read_git_dependencies,
)
from gitlinks.core.queue import OperationQueue
from gitlinks.core.source_ref import extract_git_source_from_id
from gitlinks.models.package import InstalledPackage, PackageOrigin, SearchResult
from gitlinks.models.request import (
    InstallRequest,
    OperationKind,
    OrchestratorState,
    RemoveRequest,
)
from gitlinks.services.base import PackageService, PendingOperation
from gitlinks.utils.progress import NullProgress, ProgressReporter

logger = logging.getLogger(__name__)

# (title, message) -> accepted
Confirm = Callable[[str, str], bool]
DependencyReader = Callable[[InstalledPackage], list[str] | None]

DEFAULT_MAX_DEPENDENCY_DEPTH = 8

_STATE_BY_KIND = {
    OperationKind.LIST: OrchestratorState.LISTING,
    OperationKind.SEARCH: OrchestratorState.SEARCHING,
    OperationKind.ADD: OrchestratorState.ADDING,
    OperationKind.REMOVE: OrchestratorState.REMOVING,
}

# Rough completion fractions shown while an operation runs
_PROGRESS_BY_KIND = {
    OperationKind.LIST: 0.1,
    OperationKind.SEARCH: 0.2,
    OperationKind.ADD: 0.3,
    OperationKind.REMOVE: 0.3,
}


@dataclass(frozen=True, slots=True)
class UpdateCheck:
    """Registry package whose published versions are being checked."""

    name: str
    installed_version: str


@dataclass(frozen=True, slots=True)
class _InFlight:
    kind: OperationKind
    handle: PendingOperation[Any]
    request: InstallRequest | RemoveRequest | UpdateCheck | None = None


def _decline(title: str, message: str) -> bool:
    return False


def descriptor_reader(
    descriptor_name: str = DEFAULT_DESCRIPTOR_NAME,
    key: str = DEFAULT_DEPENDENCY_KEY,
) -> DependencyReader:
    """Build a dependency reader scanning each package's descriptor file."""

    def read(package: InstalledPackage) -> list[str] | None:
        return read_git_dependencies(package.resolved_path, descriptor_name, key)

    return read


class Orchestrator:
    """Serializes package operations against a package service.

    Attributes:
        queue: Pending add/remove queues and their dedup ledger.

    Example:
        >>> orchestrator = Orchestrator(NpmService(Path(".")))
        >>> orchestrator.request_list(refresh=True)
        >>> orchestrator.enqueue_add("git@github.com:org/tools.git#main")
        >>> orchestrator.run_until_idle()
        >>> print(orchestrator.status)
    """

    def __init__(
        self,
        service: PackageService,
        *,
        queue: OperationQueue | None = None,
        progress: ProgressReporter | None = None,
        confirm: Confirm | None = None,
        dependency_reader: DependencyReader | None = None,
        max_dependency_depth: int = DEFAULT_MAX_DEPENDENCY_DEPTH,
        on_status: Callable[[str], None] | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            service: Package service executing the operations.
            queue: Optional pre-existing queue (shares its session ledger).
            progress: Indicator shown while an operation is in flight.
            confirm: Asks the user a yes/no question. Declines by default.
            dependency_reader: Reads git dependencies of an installed
                package. Defaults to scanning its package.json.
            max_dependency_depth: Deepest dependency discovery level that is
                still re-added; guards against dependency cycles.
            on_status: Called with every new status message.
        """
        if max_dependency_depth < 1:
            msg = f"max_dependency_depth must be at least 1, got {max_dependency_depth}"
            raise ValueError(msg)

        self._service = service
        self.queue = queue if queue is not None else OperationQueue()
        self._progress: ProgressReporter = progress if progress is not None else NullProgress()
        self._confirm = confirm or _decline
        self._read_dependencies = dependency_reader or descriptor_reader()
        self._max_dependency_depth = max_dependency_depth
        self._on_status = on_status

        self._installed: list[InstalledPackage] = []
        self._status = ""
        self._failures: list[str] = []
        self._closed = False

        self._slot: _InFlight | None = None
        self._list_refresh: bool | None = None
        self._pending_search: UpdateCheck | None = None

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def installed(self) -> tuple[InstalledPackage, ...]:
        """Last installed-package snapshot."""
        return tuple(self._installed)

    @property
    def status(self) -> str:
        """Human-readable status of the last event."""
        return self._status

    @property
    def failures(self) -> tuple[str, ...]:
        """Status messages of every failed operation so far."""
        return tuple(self._failures)

    @property
    def state(self) -> OrchestratorState:
        """Current state of the loop."""
        if self._slot is None:
            return OrchestratorState.IDLE
        return _STATE_BY_KIND[self._slot.kind]

    @property
    def in_flight(self) -> OperationKind | None:
        """Kind of the operation occupying the slot, if any."""
        return self._slot.kind if self._slot is not None else None

    @property
    def list_pending(self) -> bool:
        """Check if a list refresh is waiting to be dispatched."""
        return self._list_refresh is not None

    @property
    def busy(self) -> bool:
        """Check if an operation is in flight or about to be dispatched."""
        if self._slot is not None:
            return True
        if self._closed:
            return False
        return (
            self._list_refresh is not None
            or self._pending_search is not None
            or self.queue.has_pending
        )

    @property
    def closed(self) -> bool:
        """Check if :meth:`close` was called."""
        return self._closed

    def _set_status(self, message: str) -> None:
        self._status = message
        if self._on_status is not None:
            self._on_status(message)

    def _fail(self, message: str) -> None:
        self._failures.append(message)
        logger.debug("Operation failed: %s", message)
        self._set_status(message)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def enqueue_add(self, link: str, force: bool = False) -> bool:
        """Queue an install of a source reference.

        Args:
            link: Source reference to install.
            force: Re-add even if the link was already requested this
                session. Never bypasses the queued-duplicate guard.

        Returns:
            True if the link entered the pending-add queue.
        """
        return self.queue.enqueue_add(link, force=force)

    def enqueue_remove(self, id_or_name: str) -> bool:
        """Queue an uninstall of a package id or name."""
        return self.queue.enqueue_remove(id_or_name)

    def enqueue_update_all_git(self) -> int:
        """Force-reinstall every installed git package.

        Each git package's source reference is derived from its package id
        and force-enqueued. Packages without a derivable source are
        skipped. Dependencies are re-added as each install completes.

        Returns:
            Number of git packages queued for reinstall.
        """
        count = 0
        for package in self._installed:
            if not package.is_git:
                continue

            source = extract_git_source_from_id(package.package_id)
            if not source:
                logger.debug("No git source derivable for %s", package.name)
                continue

            self.queue.enqueue_add(source, force=True)
            count += 1

        self._set_status("Queued Update All (Git)." if count else "No Git packages to update.")
        return count

    def check_updates(self, package: InstalledPackage) -> None:
        """Check one installed package for updates.

        Registry packages are searched for a newer version. Git packages
        are offered a forced reinstall from their source reference.
        """
        if package.origin == PackageOrigin.REGISTRY:
            self._pending_search = UpdateCheck(name=package.name, installed_version=package.version)
            return

        if package.origin == PackageOrigin.GIT:
            source = extract_git_source_from_id(package.package_id)
            if not source:
                self._set_status(f"No git source could be derived for {package.name}.")
                return

            accepted = self._confirm(
                "Update from Git",
                f"Reinstall from:\n{source}\n\n"
                "The latest commit for the specified branch or tag will be fetched.\n"
                "Git dependencies will be re-added.",
            )
            if accepted:
                self.queue.enqueue_add(source, force=True)
            else:
                self._set_status("Update canceled.")
            return

        self._set_status(f"Update check not supported for source: {package.origin.value}")

    def request_list(self, refresh: bool = True) -> None:
        """Schedule an installed-package listing.

        Requests made before the listing is dispatched coalesce into one.
        """
        self._list_refresh = bool(self._list_refresh) or refresh

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def tick(self) -> None:
        """Advance the state machine by one step.

        Observes the completion of the in-flight operation, or dispatches
        the next pending one when the slot is free. Never blocks.
        """
        if self._slot is not None:
            if not self._slot.handle.is_completed:
                return

            finished, self._slot = self._slot, None
            self._release_progress()
            self._handle_completion(finished)
            return

        if not self._closed:
            self._dispatch_next()

    def run_until_idle(
        self,
        poll_interval: float = 0.2,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Tick until nothing is in flight or pending.

        Args:
            poll_interval: Seconds to sleep between ticks while an
                operation is in flight.
            sleep: Sleep function (injectable for tests).
        """
        try:
            while self.busy:
                self.tick()
                if self._slot is not None:
                    sleep(poll_interval)
        finally:
            if self._slot is not None:
                self.close()

    def close(self) -> None:
        """Stop dispatching and release the progress indicator.

        An operation already in flight cannot be cancelled; it is left to
        finish on its own.
        """
        self._closed = True
        if self._slot is not None:
            logger.warning(
                "Closing while %s operation is in flight; it cannot be cancelled",
                self._slot.kind.value,
            )
        self._release_progress()

    def _release_progress(self) -> None:
        try:
            self._progress.clear()
        except Exception as e:  # noqa: BLE001
            logger.debug("Failed to clear progress indicator: %s", e)

    def _start(
        self,
        kind: OperationKind,
        message: str,
        start: Callable[[], PendingOperation[Any]],
        request: InstallRequest | RemoveRequest | UpdateCheck | None = None,
    ) -> None:
        self._set_status(message)
        self._progress.show(message, _PROGRESS_BY_KIND[kind])
        logger.debug("Dispatching %s: %s", kind.value, message)
        self._slot = _InFlight(kind=kind, handle=start(), request=request)

    def _dispatch_next(self) -> None:
        if self._list_refresh is not None:
            refresh, self._list_refresh = self._list_refresh, None
            self._start(
                OperationKind.LIST,
                "Refreshing installed packages...",
                lambda: self._service.list(refresh),
            )
            return

        if self._pending_search is not None:
            check, self._pending_search = self._pending_search, None
            self._start(
                OperationKind.SEARCH,
                f"Checking updates for {check.name}...",
                lambda: self._service.search(check.name),
                check,
            )
            return

        install = self.queue.pop_add()
        if install is not None:
            self._start(
                OperationKind.ADD,
                f"Adding {install.link}",
                lambda: self._service.add(install.link),
                install,
            )
            return

        removal = self.queue.pop_remove()
        if removal is not None:
            self._start(
                OperationKind.REMOVE,
                f"Removing {removal.target}",
                lambda: self._service.remove(removal.target),
                removal,
            )

    # ------------------------------------------------------------------
    # Completion side effects
    # ------------------------------------------------------------------

    def _handle_completion(self, finished: _InFlight) -> None:
        handle = finished.handle
        request = finished.request

        if finished.kind == OperationKind.LIST:
            self._on_list_done(handle)
        elif finished.kind == OperationKind.SEARCH and isinstance(request, UpdateCheck):
            self._on_search_done(handle, request)
        elif finished.kind == OperationKind.ADD and isinstance(request, InstallRequest):
            self._on_add_done(handle, request)
        elif finished.kind == OperationKind.REMOVE and isinstance(request, RemoveRequest):
            self._on_remove_done(handle, request)

    def _on_list_done(self, handle: PendingOperation[list[InstalledPackage]]) -> None:
        if handle.succeeded and handle.result is not None:
            self._installed = list(handle.result)
            logger.info("Loaded %d installed package(s)", len(self._installed))
            self._set_status(f"Loaded {len(self._installed)} installed package(s).")
        else:
            self._fail(f"Package list failed: {handle.error}")

    def _on_search_done(
        self,
        handle: PendingOperation[list[SearchResult]],
        check: UpdateCheck,
    ) -> None:
        if not handle.succeeded or handle.result is None:
            self._fail(f"Search failed: {handle.error}")
            return

        wanted = check.name.casefold()
        match = next((r for r in handle.result if r.name.casefold() == wanted), None)
        latest = match.versions.recommended if match is not None else None

        if not latest or latest.casefold() == (check.installed_version or "").casefold():
            self._set_status("No update found.")
            return

        accepted = self._confirm(
            "Update Available",
            f"{check.name}\nInstalled: {check.installed_version}\nLatest:    {latest}\n\n"
            "Update now?",
        )
        if accepted:
            self.queue.enqueue_add(f"{check.name}@{latest}", force=False)
            self._set_status(f"Queued update of {check.name} to {latest}.")
        else:
            self._set_status("Update canceled.")

    def _on_add_done(
        self,
        handle: PendingOperation[InstalledPackage],
        request: InstallRequest,
    ) -> None:
        if not handle.succeeded:
            self._fail(f"Add failed: {handle.error}")
            return

        package = handle.result
        if package is None:
            self._set_status(f"Installed: {request.link}")
        else:
            logger.info("Installed %s %s from %s", package.name, package.version, request.link)
            self._set_status(f"Installed: {package.name} {package.version}")
            if package.is_git:
                self._enqueue_git_dependencies(package, request.depth + 1)

        self.request_list(refresh=True)

    def _on_remove_done(self, handle: PendingOperation[str], request: RemoveRequest) -> None:
        if not handle.succeeded:
            self._fail(f"Remove failed: {handle.error}")
            return

        self._set_status(f"Removed: {handle.result or request.target}")
        self.request_list(refresh=True)

    def _enqueue_git_dependencies(self, package: InstalledPackage, depth: int) -> None:
        try:
            dependencies = self._read_dependencies(package)
        except (OSError, ValueError) as e:
            logger.debug("Cannot scan git dependencies of %s: %s", package.name, e)
            return

        if not dependencies:
            return

        if depth > self._max_dependency_depth:
            logger.warning(
                "Not re-adding %d git dependencies of %s: depth %d exceeds limit %d",
                len(dependencies),
                package.name,
                depth,
                self._max_dependency_depth,
            )
            return

        for dependency in dependencies:
            self.queue.enqueue_add(dependency, force=True, depth=depth)

        logger.info("Discovered %d git dependencies in %s", len(dependencies), package.name)
