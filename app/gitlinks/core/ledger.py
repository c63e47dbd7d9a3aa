"""Session ledger of install links.

Tracks which links have been requested during this session and which are
currently waiting in the pending-add queue. Both sets compare links
case-insensitively through a normalized key.
"""

from collections.abc import Iterator


def normalize_link(link: str) -> str:
    """Return the case-insensitive key for a link."""
    return link.casefold()


class LinkSet:
    """Set of links compared case-insensitively.

    The first spelling added for a key is the one reported on iteration.
    """

    def __init__(self) -> None:
        self._links: dict[str, str] = {}

    def add(self, link: str) -> bool:
        """Add a link.

        Returns:
            True if the link was not present before.
        """
        key = normalize_link(link)
        if key in self._links:
            return False
        self._links[key] = link
        return True

    def discard(self, link: str) -> None:
        """Remove a link if present."""
        self._links.pop(normalize_link(link), None)

    def __contains__(self, link: object) -> bool:
        return isinstance(link, str) and normalize_link(link) in self._links

    def __len__(self) -> int:
        return len(self._links)

    def __iter__(self) -> Iterator[str]:
        return iter(self._links.values())


class RequestLedger:
    """Dedup ledger for install requests.

    ``seen`` holds every non-forced link requested this session and only
    ever grows. ``queued`` holds links currently sitting in the pending-add
    queue; a link appears there at most once.

    Example:
        >>> ledger = RequestLedger()
        >>> ledger.admit("git@host:a/b.git", force=False)
        True
        >>> ledger.admit("git@host:a/b.git", force=False)
        False
    """

    def __init__(self) -> None:
        self.seen = LinkSet()
        self.queued = LinkSet()

    def admit(self, link: str, force: bool) -> bool:
        """Decide whether a link may enter the pending-add queue.

        A non-forced link already seen this session is rejected. Any link
        already queued is rejected, forced or not. An admitted link is
        marked queued, and also seen unless it was forced.

        Args:
            link: Source reference to admit.
            force: Bypass the "already seen" guard.

        Returns:
            True if the caller should append the link to the queue.
        """
        if not force and link in self.seen:
            return False
        if link in self.queued:
            return False

        if not force:
            self.seen.add(link)
        self.queued.add(link)
        return True

    def release(self, link: str) -> None:
        """Mark a link as no longer queued. It stays seen."""
        self.queued.discard(link)
