"""
Engagement Ledger & Tracker Tests

Tests like/bookmark toggles, counter integrity, idempotency, and the
optimistic update state machine.

Properties:
-----------
- Toggling twice restores both the viewer flag and the counter
- Likes move `likes`; bookmarks move `saves`
- Counters never go below zero
- Concurrent toggles on one item never lose an increment
- A replayed idempotency key returns the original result
- A store failure during an optimistic toggle yields RolledBack, not an exception

Run:
----
    pytest tests/test_engagement.py -v
"""

import threading

import pytest

from discovery.errors import TransientStoreError, ValidationError
from discovery.models.engagement import EngagementKind, EngagementState, OptimisticToggle, TogglePhase
from discovery_api.services import EngagementTracker, InMemoryEngagementLedger


class FailingLedger(InMemoryEngagementLedger):
    """Ledger whose writes always fail, as if the store were unreachable."""

    def toggle(self, item_id, viewer_id, kind):
        raise TransientStoreError("store unreachable")


@pytest.fixture
def ledger():
    ledger = InMemoryEngagementLedger()
    ledger.seed("item", {"likes": 5, "saves": 2})
    return ledger


@pytest.fixture
def tracker(ledger):
    return EngagementTracker(ledger)


class TestLedger:
    def test_seed_does_not_overwrite(self, ledger):
        ledger.seed("item", {"likes": 99})
        assert ledger.get_counters("item")["likes"] == 5

    def test_unknown_item_has_no_counters(self, ledger):
        assert ledger.get_counters("nope") is None
        assert ledger.get_counters_many(["item", "nope"]).keys() == {"item"}

    def test_adjust_floors_at_zero(self, ledger):
        assert ledger.adjust("item", "comments", 1) == 1
        assert ledger.adjust("item", "comments", -1) == 0
        assert ledger.adjust("item", "comments", -1) == 0

    def test_adjust_unknown_counter_rejected(self, ledger):
        with pytest.raises(ValidationError):
            ledger.adjust("item", "views", 1)

    def test_concurrent_likes_are_not_lost(self, ledger):
        viewers = [f"v{n}" for n in range(50)]
        threads = [
            threading.Thread(target=ledger.toggle, args=("item", v, EngagementKind.LIKE))
            for v in viewers
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert ledger.get_counters("item")["likes"] == 55
        assert all(s.has_liked for s in ledger.get_states("v0", ["item"]).values())


class TestToggles:
    def test_like_then_unlike_restores(self, tracker, ledger):
        first = tracker.toggle_like("item", "alice")
        assert first.liked is True
        assert first.count == 6
        second = tracker.toggle_like("item", "alice")
        assert second.liked is False
        assert second.count == 5
        assert ledger.get_state("item", "alice") == EngagementState()

    def test_bookmark_moves_saves(self, tracker, ledger):
        result = tracker.toggle_bookmark("item", "alice")
        assert result.bookmarked is True
        assert result.count == 3
        assert ledger.get_counters("item")["likes"] == 5

    def test_kinds_are_independent(self, tracker):
        tracker.toggle_like("item", "alice")
        tracker.toggle_bookmark("item", "alice")
        states = tracker.get_engagement_states("alice", ["item", "other"])
        assert states["item"] == EngagementState(has_liked=True, has_bookmarked=True)
        assert states["other"] == EngagementState()

    def test_unlike_at_zero_stays_zero(self):
        ledger = InMemoryEngagementLedger()
        tracker = EngagementTracker(ledger)
        tracker.toggle_like("fresh", "alice")
        ledger.adjust("fresh", "likes", -10)
        assert tracker.toggle_like("fresh", "alice").count == 0

    def test_idempotent_replay(self, tracker):
        first = tracker.toggle_like("item", "alice", idempotency_key="k1")
        replay = tracker.toggle_like("item", "alice", idempotency_key="k1")
        assert replay == first
        assert tracker.replays == 1
        # a new key toggles again
        assert tracker.toggle_like("item", "alice", idempotency_key="k2").liked is False

    def test_idempotency_key_is_scoped_per_viewer(self, tracker):
        tracker.toggle_like("item", "alice", idempotency_key="same")
        result = tracker.toggle_like("item", "bob", idempotency_key="same")
        assert result.liked is True
        assert result.count == 7


class TestOptimisticToggle:
    def test_commits_server_truth(self, tracker):
        outcome = tracker.apply_optimistic(
            "item", "alice", EngagementKind.LIKE, EngagementState(), previous_count=5
        )
        assert outcome.phase is TogglePhase.COMMITTED
        assert outcome.state.has_liked is True
        assert outcome.count == 6
        assert outcome.error is None

    def test_commit_corrects_a_stale_guess(self, tracker):
        tracker.toggle_like("item", "alice")
        # caller still thinks the item is unliked with 3 likes
        outcome = tracker.apply_optimistic(
            "item", "alice", EngagementKind.LIKE, EngagementState(), previous_count=3
        )
        assert outcome.phase is TogglePhase.COMMITTED
        assert outcome.state.has_liked is False
        assert outcome.count == 5

    def test_store_failure_rolls_back(self):
        tracker = EngagementTracker(FailingLedger())
        previous = EngagementState(has_bookmarked=True)
        outcome = tracker.apply_optimistic(
            "item", "alice", EngagementKind.BOOKMARK, previous, previous_count=4
        )
        assert outcome.phase is TogglePhase.ROLLED_BACK
        assert outcome.state == previous
        assert outcome.count == 4
        assert outcome.error == "store unreachable"

    def test_applying_guess(self):
        pending = OptimisticToggle.applying("item", EngagementKind.LIKE, EngagementState(), 0)
        assert pending.phase is TogglePhase.APPLYING
        assert pending.state.has_liked is True
        assert pending.count == 1

    def test_finished_toggle_cannot_transition_again(self):
        pending = OptimisticToggle.applying("item", EngagementKind.LIKE, EngagementState(), 0)
        committed = pending.committed(True, 1)
        with pytest.raises(ValueError):
            committed.rolled_back("late failure")
        with pytest.raises(ValueError):
            committed.committed(True, 1)
