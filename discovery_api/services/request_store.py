"""
Request store: discovery requests held in process memory.

Transitions are read-modify-write under one lock per request id. Lifecycle
functions are pure, so the store just swaps in whatever they return.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Dict, List, Tuple, TypeVar

from discovery import lifecycle
from discovery.errors import NotFoundError
from discovery.models.request import DiscoveryRequest

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InMemoryRequestStore:
    """Request records keyed by id."""

    def __init__(self):
        self._requests: Dict[str, DiscoveryRequest] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, request_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(request_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[request_id] = lock
            return lock

    def add(self, request: DiscoveryRequest) -> DiscoveryRequest:
        with self._lock_for(request.id):
            self._requests[request.id] = request
        return request

    def get(self, request_id: str, now: datetime) -> DiscoveryRequest:
        """Fetch one request, applying expiry first."""
        return self.update(request_id, lambda r: (lifecycle.expire(r, now), None))[0]

    def update(
        self,
        request_id: str,
        transition: Callable[[DiscoveryRequest], Tuple[DiscoveryRequest, T]],
    ) -> Tuple[DiscoveryRequest, T]:
        """
        Apply transition(request) -> (new request, extra) under the request's lock.
        The stored record only changes if the transition returns without raising.
        """
        with self._lock_for(request_id):
            current = self._requests.get(request_id)
            if current is None:
                raise NotFoundError(f"request {request_id} not found")
            updated, extra = transition(current)
            self._requests[request_id] = updated
            return updated, extra

    def list_requests(self) -> List[DiscoveryRequest]:
        with self._locks_guard:
            return list(self._requests.values())

    def expire_overdue(self, now: datetime) -> List[DiscoveryRequest]:
        """Sweep every stored request; returns the ones that expired now."""
        expired = []
        for request in self.list_requests():
            updated, _ = self.update(request.id, lambda r: (lifecycle.expire(r, now), None))
            if updated is not request and updated.status != request.status:
                expired.append(updated)
        if expired:
            logger.info("expired %d overdue requests", len(expired))
        return expired

    def count_by_status(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for request in self.list_requests():
            counts[request.status.value] = counts.get(request.status.value, 0) + 1
        return counts

