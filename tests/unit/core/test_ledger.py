"""Unit tests for LinkSet and RequestLedger."""

from gitlinks.core.ledger import LinkSet, RequestLedger, normalize_link


class TestLinkSet:
    """Tests for LinkSet class."""

    def test_add_is_case_insensitive(self) -> None:
        """Links differing only in case are the same entry."""
        links = LinkSet()

        assert links.add("git@Host:Org/Repo.git") is True
        assert links.add("git@host:org/repo.git") is False
        assert len(links) == 1

    def test_contains_ignores_case(self) -> None:
        """Membership checks ignore case."""
        links = LinkSet()
        links.add("https://Example.com/repo.git")

        assert "https://example.com/REPO.git" in links
        assert 42 not in links

    def test_iteration_keeps_first_spelling(self) -> None:
        """Iteration reports the spelling that was added first."""
        links = LinkSet()
        links.add("A.git")
        links.add("a.git")

        assert list(links) == ["A.git"]

    def test_discard(self) -> None:
        """discard removes regardless of case and ignores absent links."""
        links = LinkSet()
        links.add("A.git")

        links.discard("a.GIT")
        links.discard("missing.git")

        assert len(links) == 0

    def test_normalize_link(self) -> None:
        """Normalization folds case."""
        assert normalize_link("ABC") == normalize_link("abc")


class TestRequestLedger:
    """Tests for RequestLedger class."""

    def test_admit_marks_seen_and_queued(self) -> None:
        """An admitted link is both seen and queued."""
        ledger = RequestLedger()

        assert ledger.admit("a.git", force=False) is True
        assert "a.git" in ledger.seen
        assert "a.git" in ledger.queued

    def test_seen_link_rejected_without_force(self) -> None:
        """A link seen earlier is rejected unless forced."""
        ledger = RequestLedger()
        ledger.admit("a.git", force=False)
        ledger.release("a.git")

        assert ledger.admit("a.git", force=False) is False
        assert ledger.admit("a.git", force=True) is True

    def test_queued_link_rejected_even_when_forced(self) -> None:
        """Force never bypasses the queued-duplicate guard."""
        ledger = RequestLedger()
        ledger.admit("a.git", force=True)

        assert ledger.admit("A.GIT", force=True) is False

    def test_release_keeps_seen(self) -> None:
        """Releasing a link frees the queue slot but it stays seen."""
        ledger = RequestLedger()
        ledger.admit("a.git", force=False)

        ledger.release("a.git")

        assert "a.git" not in ledger.queued
        assert "a.git" in ledger.seen

    def test_forced_link_is_not_recorded_as_seen(self) -> None:
        """A link requested only with force stays unseen."""
        ledger = RequestLedger()
        ledger.admit("a.git", force=True)

        assert "a.git" in ledger.queued
        assert "a.git" not in ledger.seen

    def test_plain_admit_after_forced_dispatch(self) -> None:
        """A non-forced request is admitted after a forced one was released."""
        ledger = RequestLedger()
        ledger.admit("a.git", force=True)
        ledger.release("a.git")

        assert ledger.admit("A.git", force=False) is True
        assert "a.git" in ledger.seen
