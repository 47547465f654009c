"""
Shared fixtures: a fixed clock, an item factory, a small social graph,
an in-memory DiscoveryService, and a TestClient bound to it.

Social graph used throughout:

    viewer -- friend1 -- fof1
       \\        \\
        friend2   fof2

Corpus (relative to NOW):
    fresh-hit  1h old,  likes=10  -> 15 points, author friend1
    old-hit    48h old, likes=40  -> 60 points, author stranger
    quiet      5h old,  no engagement, author viewer
    stale      40 days old, reshares=100 (outside the trending window), author fof1
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from discovery.models.content import ContentItem
from discovery_api import app
from discovery_api.config import get_config
from discovery_api.services import (
    DiscoveryService,
    InMemoryContentStore,
    InMemoryEngagementLedger,
    InMemorySocialGraph,
)
from discovery_api.state import AppState, set_state

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _make_item(item_id: str, hours_ago: float = 1.0, **fields) -> ContentItem:
    data = {
        "id": item_id,
        "author_id": "author",
        "title": f"Item {item_id}",
        "created_at": NOW - timedelta(hours=hours_ago),
    }
    data.update(fields)
    return ContentItem.model_validate(data)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_item():
    return _make_item


@pytest.fixture
def corpus():
    return [
        _make_item(
            "fresh-hit", hours_ago=1, author_id="friend1", likes=10,
            title="Best Coffee in NYC", body="Small roaster in Brooklyn", tags=["coffee", "nyc"],
        ),
        _make_item(
            "old-hit", hours_ago=48, author_id="stranger", likes=40,
            title="Espresso guide", body="Every shot explained", tags=["coffee"],
        ),
        _make_item(
            "quiet", hours_ago=5, author_id="viewer",
            title="Quiet pick", body="A calm COFFEE spot", tags=["coffee", "quiet"],
        ),
        _make_item(
            "stale", hours_ago=40 * 24, author_id="fof1", reshares=100,
            title="Ancient list", body="Books from long ago", tags=["books"], kind="list",
        ),
    ]


@pytest.fixture
def graph():
    return InMemorySocialGraph(
        connections={
            "viewer": ["friend1", "friend2"],
            "friend1": ["fof1", "fof2"],
        },
        endorsements={
            # direct: friend1, friend2; network: fof1
            "old-hit": ["friend1", "friend2", "fof1"],
        },
    )


@pytest.fixture
def service(corpus, graph):
    svc = DiscoveryService(
        content_store=InMemoryContentStore(corpus),
        social_graph=graph,
        ledger=InMemoryEngagementLedger(),
        clock=lambda: NOW,
    )
    svc.seed_ledger()
    return svc


@pytest.fixture
def client(service):
    set_state(AppState(get_config(), service=service))
    with TestClient(app) as c:
        yield c
    set_state(None)
