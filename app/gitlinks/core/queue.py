"""Pending operation queues feeding the orchestrator.

Install requests pass through the :class:`RequestLedger` before entering
the pending-add queue. Remove requests are not deduplicated: removal is
idempotent at the package service.
"""

import logging
from collections import deque

from gitlinks.core.ledger import RequestLedger
from gitlinks.models.request import InstallRequest, RemoveRequest

logger = logging.getLogger(__name__)


class OperationQueue:
    """Ordered pending-add and pending-remove queues.

    Attributes:
        ledger: Seen/queued bookkeeping for install links.
    """

    def __init__(self, ledger: RequestLedger | None = None) -> None:
        """Initialize empty queues.

        Args:
            ledger: Optional pre-existing ledger to share session state.
        """
        self.ledger = ledger if ledger is not None else RequestLedger()
        self._adds: deque[InstallRequest] = deque()
        self._removes: deque[RemoveRequest] = deque()

    def enqueue_add(self, link: str, force: bool = False, depth: int = 0) -> bool:
        """Queue an install of a link unless the ledger rejects it.

        Args:
            link: Source reference to install. Surrounding whitespace is
                ignored; an empty link is dropped.
            force: Bypass the session "already seen" guard.
            depth: Dependency discovery depth of the request.

        Returns:
            True if the link was appended to the pending-add queue.
        """
        link = (link or "").strip()
        if not link:
            return False

        if not self.ledger.admit(link, force):
            logger.debug("Skipping add of %s (force=%s): already seen or queued", link, force)
            return False

        self._adds.append(InstallRequest(link=link, force=force, depth=depth))
        logger.debug("Queued add of %s (force=%s, depth=%d)", link, force, depth)
        return True

    def enqueue_remove(self, id_or_name: str) -> bool:
        """Queue an uninstall of a package id or name.

        Returns:
            True if the request was appended, False for an empty target.
        """
        target = (id_or_name or "").strip()
        if not target:
            return False

        self._removes.append(RemoveRequest(target=target))
        logger.debug("Queued remove of %s", target)
        return True

    def pop_add(self) -> InstallRequest | None:
        """Take the next install request, freeing its link for re-queueing."""
        if not self._adds:
            return None
        request = self._adds.popleft()
        self.ledger.release(request.link)
        return request

    def pop_remove(self) -> RemoveRequest | None:
        """Take the next remove request."""
        if not self._removes:
            return None
        return self._removes.popleft()

    @property
    def pending_adds(self) -> tuple[InstallRequest, ...]:
        """Snapshot of queued install requests, oldest first."""
        return tuple(self._adds)

    @property
    def pending_removes(self) -> tuple[RemoveRequest, ...]:
        """Snapshot of queued remove requests, oldest first."""
        return tuple(self._removes)

    @property
    def has_pending(self) -> bool:
        """Check if any add or remove is waiting."""
        return bool(self._adds or self._removes)
