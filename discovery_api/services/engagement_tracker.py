"""
Engagement state tracker: like / bookmark toggles on top of the ledger.

- Strict toggle: a second call undoes the first; there is no "already liked" error.
- Idempotency keys are scoped to (viewer, kind, item). A replayed key returns the
  original result without toggling again.
- apply_optimistic() hands the caller an OptimisticToggle that ends Committed with
  server truth or RolledBack to the pre-toggle values. A TransientStoreError
  becomes a RolledBack value instead of an exception.
"""

import logging
import threading
from typing import Dict, Iterable, Optional, Tuple, Union

from cachetools import TTLCache

from discovery.errors import TransientStoreError
from discovery.models.engagement import (
    BookmarkToggleResult,
    EngagementKind,
    EngagementState,
    LikeToggleResult,
    OptimisticToggle,
)

from .engagement_ledger import EngagementLedger

logger = logging.getLogger(__name__)

ToggleResult = Union[LikeToggleResult, BookmarkToggleResult]

# Replay window for idempotency keys
IDEMPOTENCY_TTL_SECONDS = 24 * 3600
IDEMPOTENCY_MAX_KEYS = 100_000
_KEY_LOCK_STRIPES = 64


class EngagementTracker:
    """Toggle entry point used by the API and the service facade."""

    def __init__(
        self,
        ledger: EngagementLedger,
        idempotency_ttl_seconds: int = IDEMPOTENCY_TTL_SECONDS,
        max_keys: int = IDEMPOTENCY_MAX_KEYS,
    ):
        self._ledger = ledger
        self._results: TTLCache = TTLCache(maxsize=max_keys, ttl=idempotency_ttl_seconds)
        self._results_lock = threading.Lock()
        self._key_locks = [threading.Lock() for _ in range(_KEY_LOCK_STRIPES)]
        self.replays = 0

    def _build_result(self, item_id: str, kind: EngagementKind, flag: bool, count: int) -> ToggleResult:
        if kind is EngagementKind.LIKE:
            return LikeToggleResult(item_id=item_id, count=count, liked=flag)
        return BookmarkToggleResult(item_id=item_id, bookmarked=flag, count=count)

    def _toggle(
        self,
        item_id: str,
        viewer_id: str,
        kind: EngagementKind,
        idempotency_key: Optional[str],
    ) -> Tuple[ToggleResult, bool]:
        """Returns (result, replayed)."""
        if not idempotency_key:
            flag, count = self._ledger.toggle(item_id, viewer_id, kind)
            return self._build_result(item_id, kind, flag, count), False

        scoped = (viewer_id, kind.value, item_id, idempotency_key)
        # Same key -> same stripe, so duplicates in flight wait for the first
        with self._key_locks[hash(scoped) % _KEY_LOCK_STRIPES]:
            with self._results_lock:
                cached = self._results.get(scoped)
            if cached is not None:
                self.replays += 1
                logger.info("idempotent replay of %s on item=%s viewer=%s", kind.value, item_id, viewer_id)
                return cached, True
            flag, count = self._ledger.toggle(item_id, viewer_id, kind)
            result = self._build_result(item_id, kind, flag, count)
            with self._results_lock:
                self._results[scoped] = result
            return result, False

    def toggle_like(
        self,
        item_id: str,
        viewer_id: str,
        idempotency_key: Optional[str] = None,
    ) -> LikeToggleResult:
        return self._toggle(item_id, viewer_id, EngagementKind.LIKE, idempotency_key)[0]

    def toggle_bookmark(
        self,
        item_id: str,
        viewer_id: str,
        idempotency_key: Optional[str] = None,
    ) -> BookmarkToggleResult:
        return self._toggle(item_id, viewer_id, EngagementKind.BOOKMARK, idempotency_key)[0]

    def apply_optimistic(
        self,
        item_id: str,
        viewer_id: str,
        kind: EngagementKind,
        previous_state: EngagementState,
        previous_count: int,
        idempotency_key: Optional[str] = None,
    ) -> OptimisticToggle:
        """
        Run one toggle through the optimistic state machine.

        previous_state / previous_count are what the caller rendered before the
        tap. The returned value is Committed (server truth) or RolledBack
        (previous values plus the error); it never raises TransientStoreError.
        """
        pending = OptimisticToggle.applying(item_id, kind, previous_state, previous_count)
        try:
            result, _ = self._toggle(item_id, viewer_id, kind, idempotency_key)
        except TransientStoreError as e:
            logger.warning("rolling back %s on item=%s viewer=%s: %s", kind.value, item_id, viewer_id, e)
            return pending.rolled_back(e.message)
        flag = result.liked if kind is EngagementKind.LIKE else result.bookmarked
        return pending.committed(flag, result.count)

    def get_engagement_states(
        self,
        viewer_id: str,
        item_ids: Iterable[str],
    ) -> Dict[str, EngagementState]:
        """Server truth for the viewer, used to rebuild client state at session start."""
        return self._ledger.get_states(viewer_id, item_ids)
