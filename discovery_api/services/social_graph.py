"""
Social graph collaborator.

Answers two questions for the ranking core:
- how many of an item's endorsers are the viewer's direct connections (1 hop)
  and connections-of-connections (2 hops);
- how far an author is from the viewer.
Connections are undirected. An item's endorsers are the users who liked it.
Implementations: in-memory, JSON file (SOCIAL_GRAPH_JSON_PATH).
"""

import json
import logging
import threading
from pathlib import Path
from typing import Dict, Iterable, NamedTuple, Optional, Protocol, Set, Union

from discovery.models.content import ContentItem, SocialDistance
from discovery.stages.trust import SocialGraphLookup

logger = logging.getLogger(__name__)


class SocialGraph(SocialGraphLookup, Protocol):
    """Graph collaborator that also records endorsements as likes change."""

    def set_endorsement(self, item_id: str, user_id: str, endorsed: bool) -> None:
        ...


class EndorsementCounts(NamedTuple):
    direct_count: int
    network_count: int


class InMemorySocialGraph:
    """Adjacency sets plus per-item endorser sets, held in process memory."""

    def __init__(
        self,
        connections: Optional[Dict[str, Iterable[str]]] = None,
        endorsements: Optional[Dict[str, Iterable[str]]] = None,
    ):
        self._adjacency: Dict[str, Set[str]] = {}
        self._endorsers: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()
        for user_id, others in (connections or {}).items():
            for other in others:
                self.connect(user_id, other)
        for item_id, users in (endorsements or {}).items():
            for user_id in users:
                self.set_endorsement(item_id, user_id, True)

    def connect(self, user_id: str, other_id: str) -> None:
        if user_id == other_id:
            return
        with self._lock:
            self._adjacency.setdefault(user_id, set()).add(other_id)
            self._adjacency.setdefault(other_id, set()).add(user_id)

    def set_endorsement(self, item_id: str, user_id: str, endorsed: bool) -> None:
        with self._lock:
            endorsers = self._endorsers.setdefault(item_id, set())
            if endorsed:
                endorsers.add(user_id)
            else:
                endorsers.discard(user_id)

    def _circles(self, viewer_id: str):
        """(direct, network) sets for the viewer; network excludes direct and the viewer."""
        direct = set(self._adjacency.get(viewer_id, ()))
        network: Set[str] = set()
        for friend in direct:
            network |= self._adjacency.get(friend, set())
        network -= direct
        network.discard(viewer_id)
        return direct, network

    def get_social_distance(self, viewer_id: str, item: ContentItem) -> EndorsementCounts:
        with self._lock:
            endorsers = set(self._endorsers.get(item.id, ()))
            endorsers.discard(viewer_id)
            direct, network = self._circles(viewer_id)
        return EndorsementCounts(
            direct_count=len(endorsers & direct),
            network_count=len(endorsers & network),
        )

    def get_author_distance(self, viewer_id: str, author_id: str) -> SocialDistance:
        if viewer_id == author_id:
            return SocialDistance.NONE
        with self._lock:
            direct, network = self._circles(viewer_id)
        if author_id in direct:
            return SocialDistance.DIRECT
        if author_id in network:
            return SocialDistance.NETWORK
        return SocialDistance.NONE

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "users": len(self._adjacency),
                "connections": sum(len(v) for v in self._adjacency.values()) // 2,
                "endorsed_items": sum(1 for v in self._endorsers.values() if v),
            }


class JsonSocialGraph(InMemorySocialGraph):
    """
    Social graph loaded from JSON:
        {"connections": {"alice": ["bob"]}, "endorsements": {"item-1": ["bob"]}}
    """

    def __init__(self, path: Union[Path, str]):
        self._path = Path(path)
        if not self._path.exists():
            raise FileNotFoundError(f"Social graph JSON not found: {self._path}")
        with open(self._path) as f:
            data = json.load(f)
        super().__init__(data.get("connections", {}), data.get("endorsements", {}))
        logger.info("Loaded social graph from %s: %s", self._path, self.stats())
