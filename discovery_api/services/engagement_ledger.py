"""
Engagement Ledger abstraction.

Authoritative per-item counters (likes, saves, comments, reshares) and the
per-(item, viewer) like/bookmark state rows. Every counter change goes through
a single atomic primitive here; nothing else writes counters.
Implementations: in-memory (local runs, tests), Firestore (production).
"""

import logging
import threading
from typing import Dict, Iterable, Optional, Protocol, Tuple

from discovery.errors import ValidationError
from discovery.models.content import COUNTER_FIELDS
from discovery.models.engagement import COUNTER_FOR_KIND, EngagementKind, EngagementState

logger = logging.getLogger(__name__)


def zero_counters() -> Dict[str, int]:
    return {name: 0 for name in COUNTER_FIELDS}


def check_counter(counter: str) -> None:
    if counter not in COUNTER_FIELDS:
        raise ValidationError(f"unknown counter {counter!r}; expected one of {COUNTER_FIELDS}")


class EngagementLedger(Protocol):
    """Protocol for counter and engagement-state storage."""

    def toggle(self, item_id: str, viewer_id: str, kind: EngagementKind) -> Tuple[bool, int]:
        """
        Flip the viewer's flag for kind and move the matching counter by +1/-1
        (floored at 0) in one atomic step. Returns (new flag, new count).
        """
        ...

    def adjust(self, item_id: str, counter: str, delta: int) -> int:
        """Add delta to one counter, floored at 0. Returns the new value."""
        ...

    def get_counters(self, item_id: str) -> Optional[Dict[str, int]]:
        """Counters for one item, or None if the ledger has never seen it."""
        ...

    def get_counters_many(self, item_ids: Iterable[str]) -> Dict[str, Dict[str, int]]:
        """Counters for every known item among item_ids."""
        ...

    def get_state(self, item_id: str, viewer_id: str) -> EngagementState:
        ...

    def get_states(self, viewer_id: str, item_ids: Iterable[str]) -> Dict[str, EngagementState]:
        ...

    def seed(self, item_id: str, counters: Dict[str, int]) -> None:
        """Initialise counters for an item that the ledger does not know yet."""
        ...


class InMemoryEngagementLedger:
    """
    Ledger held in process memory.

    One lock per item id guards the counters and all viewer state rows of that
    item, so concurrent toggles on the same item never lose an increment.
    """

    def __init__(self):
        self._counters: Dict[str, Dict[str, int]] = {}
        self._states: Dict[Tuple[str, str], EngagementState] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, item_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(item_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[item_id] = lock
            return lock

    def toggle(self, item_id: str, viewer_id: str, kind: EngagementKind) -> Tuple[bool, int]:
        counter = COUNTER_FOR_KIND[kind]
        with self._lock_for(item_id):
            state = self._states.get((item_id, viewer_id), EngagementState())
            new_state = state.flipped(kind)
            flag = new_state.flag(kind)
            counters = self._counters.setdefault(item_id, zero_counters())
            counters[counter] = max(0, counters[counter] + (1 if flag else -1))
            self._states[(item_id, viewer_id)] = new_state
            return flag, counters[counter]

    def adjust(self, item_id: str, counter: str, delta: int) -> int:
        check_counter(counter)
        with self._lock_for(item_id):
            counters = self._counters.setdefault(item_id, zero_counters())
            counters[counter] = max(0, counters[counter] + delta)
            return counters[counter]

    def get_counters(self, item_id: str) -> Optional[Dict[str, int]]:
        with self._lock_for(item_id):
            counters = self._counters.get(item_id)
            return dict(counters) if counters is not None else None

    def get_counters_many(self, item_ids: Iterable[str]) -> Dict[str, Dict[str, int]]:
        out = {}
        for item_id in item_ids:
            counters = self.get_counters(item_id)
            if counters is not None:
                out[item_id] = counters
        return out

    def get_state(self, item_id: str, viewer_id: str) -> EngagementState:
        with self._lock_for(item_id):
            return self._states.get((item_id, viewer_id), EngagementState())

    def get_states(self, viewer_id: str, item_ids: Iterable[str]) -> Dict[str, EngagementState]:
        return {item_id: self.get_state(item_id, viewer_id) for item_id in item_ids}

    def seed(self, item_id: str, counters: Dict[str, int]) -> None:
        with self._lock_for(item_id):
            if item_id in self._counters:
                return
            seeded = zero_counters()
            seeded.update({k: max(0, int(v)) for k, v in counters.items() if k in COUNTER_FIELDS})
            self._counters[item_id] = seeded
