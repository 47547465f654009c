"""Application state: stores, social graph, caches, and the discovery service."""

import logging
from typing import Optional

from .config import ServerConfig, get_config
from .services import (
    DiscoveryService,
    FirestoreContentStore,
    FirestoreEngagementLedger,
    InMemoryContentStore,
    InMemoryEngagementLedger,
    InMemoryRequestStore,
    InMemorySocialGraph,
    JsonContentStore,
    JsonSocialGraph,
    build_cache,
)

logger = logging.getLogger(__name__)


class AppState:
    """Global application state."""

    def __init__(self, config: ServerConfig, service: Optional[DiscoveryService] = None):
        self.config = config
        if service is None:
            service = self._create_service(config)
        self.service = service

    def _create_service(self, config: ServerConfig) -> DiscoveryService:
        ranking = config.load_ranking_config()
        content = self._create_content_store(config)
        graph = (
            JsonSocialGraph(config.social_graph_json_path)
            if config.social_graph_json_path
            else InMemorySocialGraph()
        )
        ledger = self._create_ledger(config)
        service = DiscoveryService(
            content_store=content,
            social_graph=graph,
            ledger=ledger,
            request_store=InMemoryRequestStore(),
            config=ranking,
            trending_cache=build_cache(ranking.trending_cache_ttl_seconds, "trending", config.redis_url),
            trust_cache=build_cache(ranking.trust_cache_ttl_seconds, "trust", config.redis_url),
        )
        service.seed_ledger()
        logger.info(
            "Stores: content=%s ledger=%s graph=%s",
            type(content).__name__, type(ledger).__name__, type(graph).__name__,
        )
        return service

    def _create_content_store(self, config: ServerConfig):
        """Content store from DATA_SOURCE (JSON, Firestore, or empty in-memory)."""
        if config.data_source == "json" and config.content_json_path:
            return JsonContentStore(config.content_json_path)
        if config.data_source == "firebase":
            return FirestoreContentStore(
                project_id=config.firebase_project_id,
                credentials_path=config.firebase_credentials_path,
            )
        return InMemoryContentStore()

    def _create_ledger(self, config: ServerConfig):
        """Engagement ledger (Firestore when DATA_SOURCE=firebase, else in-memory)."""
        if config.data_source == "firebase":
            return FirestoreEngagementLedger(
                project_id=config.firebase_project_id,
                credentials_path=config.firebase_credentials_path,
            )
        return InMemoryEngagementLedger()

    @property
    def backends(self) -> dict:
        service = self.service
        return {
            "data_source": self.config.data_source,
            "content_store": type(service.content).__name__,
            "engagement_ledger": type(service.ledger).__name__,
            "social_graph": type(service.graph).__name__,
            "cache": "redis" if self.config.redis_url else "memory",
        }


_state: Optional[AppState] = None


def get_state() -> AppState:
    global _state
    if _state is None:
        config = get_config()
        _state = AppState(config)
    return _state


def set_state(state: Optional[AppState]) -> None:
    """Replace the global state (tests build their own service)."""
    global _state
    _state = state
