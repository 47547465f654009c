"""Backing logic: stores, social graph, caches, and the discovery service facade."""

from .cache import MemoryCache, RedisCache, ResultCache, build_cache
from .content_store import ContentStore, FirestoreContentStore, InMemoryContentStore, JsonContentStore
from .discovery_service import DiscoveryService, TrustResult, utc_now
from .engagement_ledger import EngagementLedger, InMemoryEngagementLedger
from .engagement_tracker import EngagementTracker
from .firestore_engagement_ledger import FirestoreEngagementLedger
from .request_store import InMemoryRequestStore
from .social_graph import EndorsementCounts, InMemorySocialGraph, JsonSocialGraph, SocialGraph

__all__ = [
    "ContentStore",
    "DiscoveryService",
    "EndorsementCounts",
    "EngagementLedger",
    "EngagementTracker",
    "FirestoreContentStore",
    "FirestoreEngagementLedger",
    "InMemoryContentStore",
    "InMemoryEngagementLedger",
    "InMemoryRequestStore",
    "InMemorySocialGraph",
    "JsonContentStore",
    "JsonSocialGraph",
    "MemoryCache",
    "RedisCache",
    "ResultCache",
    "SocialGraph",
    "TrustResult",
    "build_cache",
    "utc_now",
]
