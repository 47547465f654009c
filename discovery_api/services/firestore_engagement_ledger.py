"""
Firestore engagement ledger.

Layout:
    engagement_counters/{item_id}                      { likes, saves, comments, reshares }
    engagement_counters/{item_id}/viewers/{viewer_id}  { has_liked, has_bookmarked }

Used when DATA_SOURCE=firebase. Each toggle is one Firestore transaction: read the
viewer row and the counter, write the flipped row and Increment(+1/-1) on the
counter. The client retries the transaction on contention. The zero floor is
checked inside the transaction. Firestore/API-core failures surface as
TransientStoreError.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from google.api_core import exceptions as gexc
from google.cloud.firestore import Increment, transactional

from discovery.errors import TransientStoreError
from discovery.models.content import COUNTER_FIELDS
from discovery.models.engagement import COUNTER_FOR_KIND, EngagementKind, EngagementState

from .engagement_ledger import check_counter, zero_counters
from .firebase import firestore_client

logger = logging.getLogger(__name__)

COUNTERS_COLLECTION = "engagement_counters"
VIEWERS_SUBCOLLECTION = "viewers"


def _counters_from(data: Optional[Dict[str, Any]]) -> Dict[str, int]:
    counters = zero_counters()
    for name in COUNTER_FIELDS:
        counters[name] = max(0, int((data or {}).get(name) or 0))
    return counters


def _state_from(data: Optional[Dict[str, Any]]) -> EngagementState:
    data = data or {}
    return EngagementState(
        has_liked=bool(data.get("has_liked", False)),
        has_bookmarked=bool(data.get("has_bookmarked", False)),
    )


@transactional
def _toggle_in_transaction(transaction, counter_ref, state_ref, kind: EngagementKind):
    counter = COUNTER_FOR_KIND[kind]
    state_snap = state_ref.get(transaction=transaction)
    counter_snap = counter_ref.get(transaction=transaction)
    state = _state_from(state_snap.to_dict() if state_snap.exists else None)
    current = _counters_from(counter_snap.to_dict() if counter_snap.exists else None)[counter]

    new_state = state.flipped(kind)
    flag = new_state.flag(kind)
    delta = 1 if flag else -1
    transaction.set(state_ref, new_state.model_dump())
    if current + delta >= 0:
        transaction.set(counter_ref, {counter: Increment(delta)}, merge=True)
        return flag, current + delta
    return flag, 0


@transactional
def _adjust_in_transaction(transaction, counter_ref, counter: str, delta: int):
    snap = counter_ref.get(transaction=transaction)
    current = _counters_from(snap.to_dict() if snap.exists else None)[counter]
    new_value = max(0, current + delta)
    if new_value != current:
        transaction.set(counter_ref, {counter: Increment(new_value - current)}, merge=True)
    return new_value


class FirestoreEngagementLedger:
    """Engagement ledger backed by Firestore."""

    def __init__(
        self,
        project_id: Optional[str] = None,
        credentials_path: Optional[Union[Path, str]] = None,
        client: Any = None,
    ):
        self._db = client if client is not None else firestore_client(project_id, credentials_path)

    def _counter_ref(self, item_id: str):
        return self._db.collection(COUNTERS_COLLECTION).document(item_id)

    def _state_ref(self, item_id: str, viewer_id: str):
        return self._counter_ref(item_id).collection(VIEWERS_SUBCOLLECTION).document(viewer_id)

    def toggle(self, item_id: str, viewer_id: str, kind: EngagementKind) -> Tuple[bool, int]:
        try:
            return _toggle_in_transaction(
                self._db.transaction(),
                self._counter_ref(item_id),
                self._state_ref(item_id, viewer_id),
                kind,
            )
        except gexc.GoogleAPIError as e:
            logger.warning("toggle %s failed for item=%s viewer=%s: %s", kind.value, item_id, viewer_id, e)
            raise TransientStoreError(f"engagement store unavailable: {e}") from e

    def adjust(self, item_id: str, counter: str, delta: int) -> int:
        check_counter(counter)
        try:
            return _adjust_in_transaction(
                self._db.transaction(), self._counter_ref(item_id), counter, delta
            )
        except gexc.GoogleAPIError as e:
            logger.warning("adjust %s failed for item=%s: %s", counter, item_id, e)
            raise TransientStoreError(f"engagement store unavailable: {e}") from e

    def get_counters(self, item_id: str) -> Optional[Dict[str, int]]:
        try:
            snap = self._counter_ref(item_id).get()
        except gexc.GoogleAPIError as e:
            raise TransientStoreError(f"engagement store unavailable: {e}") from e
        return _counters_from(snap.to_dict()) if snap.exists else None

    def get_counters_many(self, item_ids: Iterable[str]) -> Dict[str, Dict[str, int]]:
        refs = [self._counter_ref(item_id) for item_id in item_ids]
        if not refs:
            return {}
        try:
            snaps = list(self._db.get_all(refs))
        except gexc.GoogleAPIError as e:
            raise TransientStoreError(f"engagement store unavailable: {e}") from e
        return {snap.id: _counters_from(snap.to_dict()) for snap in snaps if snap.exists}

    def get_state(self, item_id: str, viewer_id: str) -> EngagementState:
        try:
            snap = self._state_ref(item_id, viewer_id).get()
        except gexc.GoogleAPIError as e:
            raise TransientStoreError(f"engagement store unavailable: {e}") from e
        return _state_from(snap.to_dict() if snap.exists else None)

    def get_states(self, viewer_id: str, item_ids: Iterable[str]) -> Dict[str, EngagementState]:
        item_ids = list(item_ids)
        states = {item_id: EngagementState() for item_id in item_ids}
        refs = [self._state_ref(item_id, viewer_id) for item_id in item_ids]
        if not refs:
            return states
        try:
            snaps = list(self._db.get_all(refs))
        except gexc.GoogleAPIError as e:
            raise TransientStoreError(f"engagement store unavailable: {e}") from e
        for snap in snaps:
            if snap.exists:
                # viewers/{viewer_id} sits under engagement_counters/{item_id}
                item_id = snap.reference.parent.parent.id
                states[item_id] = _state_from(snap.to_dict())
        return states

    def seed(self, item_id: str, counters: Dict[str, int]) -> None:
        ref = self._counter_ref(item_id)
        try:
            if ref.get().exists:
                return
            ref.set(_counters_from(counters))
        except gexc.GoogleAPIError as e:
            raise TransientStoreError(f"engagement store unavailable: {e}") from e
