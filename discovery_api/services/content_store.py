"""
Content Store abstraction.

Supplies recommendations and lists to the ranking pipeline.
Implementations: in-memory, JSON file (DATA_SOURCE=json), Firestore (DATA_SOURCE=firebase).
Counter values on stored items are snapshots; the engagement ledger is authoritative.
"""

import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Union

from google.api_core import exceptions as gexc

from discovery.errors import TransientStoreError
from discovery.models.content import ContentItem, as_utc

from .firebase import firestore_client

logger = logging.getLogger(__name__)


class ContentStore(Protocol):
    """Protocol for content catalog access."""

    def get(self, item_id: str) -> Optional[ContentItem]:
        ...

    def list_items(self) -> List[ContentItem]:
        """Every item, newest first."""
        ...

    def created_since(self, since: datetime, limit: Optional[int] = None) -> List[ContentItem]:
        """Items with created_at >= since, newest first."""
        ...

    def add(self, item: ContentItem) -> ContentItem:
        ...


def _newest_first(items: Iterable[ContentItem]) -> List[ContentItem]:
    return sorted(items, key=lambda i: (i.created_at, i.id), reverse=True)


class InMemoryContentStore:
    """Content store held in process memory. Used for local runs and tests."""

    def __init__(self, items: Optional[Iterable[Union[ContentItem, Dict]]] = None):
        self._items: Dict[str, ContentItem] = {}
        self._lock = threading.Lock()
        for item in items or []:
            self.add(item)

    def get(self, item_id: str) -> Optional[ContentItem]:
        return self._items.get(item_id)

    def list_items(self) -> List[ContentItem]:
        with self._lock:
            return _newest_first(self._items.values())

    def created_since(self, since: datetime, limit: Optional[int] = None) -> List[ContentItem]:
        since = as_utc(since)
        items = [i for i in self.list_items() if i.created_at >= since]
        return items[:limit] if limit is not None else items

    def add(self, item: Union[ContentItem, Dict]) -> ContentItem:
        if isinstance(item, dict):
            item = ContentItem.model_validate(item)
        with self._lock:
            self._items[item.id] = item
        return item

    def __len__(self) -> int:
        return len(self._items)


class JsonContentStore(InMemoryContentStore):
    """
    Content store loaded from a JSON file (list of items, or {"items": [...]}).
    Used when DATA_SOURCE=json; the path comes from CONTENT_JSON_PATH.
    """

    def __init__(self, path: Union[Path, str]):
        self._path = Path(path)
        if not self._path.exists():
            raise FileNotFoundError(f"Content JSON not found: {self._path}")
        with open(self._path) as f:
            data = json.load(f)
        items = data.get("items", []) if isinstance(data, dict) else data
        super().__init__(items)
        logger.info("Loaded %d content items from %s", len(self), self._path)


class FirestoreContentStore:
    """
    Content store backed by a Firestore collection (default: content_items).
    Document id = item id; created_at stored as a Firestore timestamp.
    """

    def __init__(
        self,
        project_id: Optional[str] = None,
        credentials_path: Optional[Union[Path, str]] = None,
        *,
        collection: str = "content_items",
        client: Any = None,
    ):
        db = client if client is not None else firestore_client(project_id, credentials_path)
        self._coll = db.collection(collection)

    def _doc_to_item(self, doc: Any) -> ContentItem:
        d = doc.to_dict()
        d["id"] = doc.id
        return ContentItem.model_validate(d)

    def get(self, item_id: str) -> Optional[ContentItem]:
        try:
            doc = self._coll.document(item_id).get()
        except gexc.GoogleAPIError as e:
            raise TransientStoreError(f"content store unavailable: {e}") from e
        return self._doc_to_item(doc) if doc.exists else None

    def _query(self, since: Optional[datetime] = None, limit: Optional[int] = None) -> List[ContentItem]:
        query = self._coll
        if since is not None:
            query = query.where("created_at", ">=", as_utc(since))
        query = query.order_by("created_at", direction="DESCENDING")
        if limit is not None:
            query = query.limit(limit)
        try:
            return [self._doc_to_item(doc) for doc in query.stream()]
        except gexc.GoogleAPIError as e:
            raise TransientStoreError(f"content store unavailable: {e}") from e

    def list_items(self) -> List[ContentItem]:
        return self._query()

    def created_since(self, since: datetime, limit: Optional[int] = None) -> List[ContentItem]:
        return self._query(since=since, limit=limit)

    def add(self, item: Union[ContentItem, Dict]) -> ContentItem:
        if isinstance(item, dict):
            item = ContentItem.model_validate(item)
        data = item.model_dump(mode="json", exclude={"id", "trust_score"})
        data["tags"] = sorted(item.tags)
        data["created_at"] = item.created_at
        try:
            self._coll.document(item.id).set(data)
        except gexc.GoogleAPIError as e:
            raise TransientStoreError(f"content store unavailable: {e}") from e
        return item
