"""
Discovery service: the facade routes call into.

Joins the stores (content, ledger, requests), the social graph, and the caches
with the pure ranking core in `discovery`. Reads that hit a TransientStoreError
degrade to an empty page carrying `error`; writes propagate it.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel

from discovery import lifecycle
from discovery.errors import NotFoundError, TransientStoreError
from discovery.models.config import DEFAULT_CONFIG, RankingConfig
from discovery.models.content import ContentItem
from discovery.models.engagement import (
    BookmarkToggleResult,
    EngagementKind,
    EngagementState,
    LikeToggleResult,
    OptimisticToggle,
)
from discovery.models.request import AwardResult, DiscoveryRequest, RequestResponse
from discovery.models.scoring import ScoredItem
from discovery.models.search import Page, SearchFilters
from discovery.models.trust import TrustScore
from discovery.stages.candidate_pool import window_start
from discovery.stages.filters import paginate, query, validate_pagination
from discovery.stages.trending import rank_trending
from discovery.stages.trust import trust_for_item

from .cache import MemoryCache, ResultCache
from .content_store import ContentStore
from .engagement_ledger import EngagementLedger
from .engagement_tracker import EngagementTracker
from .request_store import InMemoryRequestStore
from .social_graph import SocialGraph

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TrustResult(BaseModel):
    item_id: str
    viewer_id: str
    trust: Optional[TrustScore] = None
    error: Optional[str] = None


class DiscoveryService:
    """One instance per app; safe to share across the route threadpool."""

    def __init__(
        self,
        content_store: ContentStore,
        social_graph: SocialGraph,
        ledger: EngagementLedger,
        request_store: Optional[InMemoryRequestStore] = None,
        config: RankingConfig = DEFAULT_CONFIG,
        trending_cache: Optional[ResultCache] = None,
        trust_cache: Optional[ResultCache] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.content = content_store
        self.graph = social_graph
        self.ledger = ledger
        self.requests = request_store or InMemoryRequestStore()
        self.config = config
        self.trending_cache = trending_cache or MemoryCache(config.trending_cache_ttl_seconds)
        self.trust_cache = trust_cache or MemoryCache(config.trust_cache_ttl_seconds)
        self.tracker = EngagementTracker(ledger)
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    def seed_ledger(self) -> int:
        """Copy stored counter snapshots into the ledger for items it has not seen."""
        items = self.content.list_items()
        for item in items:
            self.ledger.seed(item.id, item.counters())
        logger.info("Seeded engagement ledger from %d content items", len(items))
        return len(items)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _with_live_counters(self, items: List[ContentItem]) -> List[ContentItem]:
        counters = self.ledger.get_counters_many([i.id for i in items])
        return [i.with_counters(counters[i.id]) if i.id in counters else i for i in items]

    def _require_item(self, item_id: str) -> ContentItem:
        item = self.content.get(item_id)
        if item is None:
            raise NotFoundError(f"item {item_id} not found")
        return item

    def _trust(self, viewer_id: str, item: ContentItem) -> TrustScore:
        key = f"{item.id}:{viewer_id}"
        cached = self.trust_cache.get(key)
        if cached is not None:
            return TrustScore.model_validate(cached)
        trust = trust_for_item(viewer_id, item, self.graph, self.config)
        self.trust_cache.set(key, trust.model_dump(mode="json"))
        return trust

    def _annotate(self, scored: List[ScoredItem], viewer_id: Optional[str]) -> None:
        if not viewer_id:
            return
        for s in scored:
            if s.trust is None:
                s.trust = self._trust(viewer_id, s.item)
                s.item = s.item.model_copy(update={"trust_score": s.trust.score})
            s.author_distance = self.graph.get_author_distance(viewer_id, s.item.author_id)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_trust(self, item_id: str, viewer_id: str) -> TrustResult:
        try:
            item = self._require_item(item_id)
            return TrustResult(item_id=item_id, viewer_id=viewer_id, trust=self._trust(viewer_id, item))
        except TransientStoreError as e:
            logger.warning("trust lookup degraded for item=%s viewer=%s: %s", item_id, viewer_id, e)
            return TrustResult(item_id=item_id, viewer_id=viewer_id, error=e.message)

    def _ranked_trending(self, now: datetime, limit: int) -> List[ScoredItem]:
        """Viewer-independent ranking, cached per time bucket."""
        bucket = int(now.timestamp() // max(1, self.config.trending_cache_ttl_seconds))
        key = f"{bucket}:{limit}"
        cached = self.trending_cache.get(key)
        if cached is not None:
            return [ScoredItem.model_validate(s) for s in cached]
        candidates = self._with_live_counters(
            self.content.created_since(window_start(now, self.config))
        )
        ranked = rank_trending(candidates, now, limit, self.config)
        self.trending_cache.set(key, [s.model_dump(mode="json") for s in ranked])
        return ranked

    def get_trending(self, limit: int, viewer_id: Optional[str] = None) -> Page:
        validate_pagination(0, limit, self.config)
        now = self.now()
        try:
            ranked = self._ranked_trending(now, limit)
            self._annotate(ranked, viewer_id)
        except TransientStoreError as e:
            logger.warning("trending degraded: %s", e)
            return Page(items=[], total_count=0, offset=0, limit=limit, has_more=False, error=e.message)
        return Page(items=ranked, total_count=len(ranked), offset=0, limit=limit, has_more=False)

    def search(self, filters: SearchFilters, viewer_id: Optional[str] = None) -> Page:
        now = self.now()
        lookup = (lambda item: self._trust(viewer_id, item)) if viewer_id else None
        try:
            corpus = self._with_live_counters(self.content.list_items())
            page = query(corpus, filters, now, lookup, self.config)
            self._annotate(page.items, viewer_id)
        except TransientStoreError as e:
            logger.warning("search degraded: %s", e)
            return Page(
                items=[], total_count=0, offset=filters.offset, limit=filters.limit,
                has_more=False, error=e.message,
            )
        return page

    def get_item(self, item_id: str) -> ContentItem:
        item = self._require_item(item_id)
        return self._with_live_counters([item])[0]

    # -------------------------------------------------------------------------
    # Engagement writes
    # -------------------------------------------------------------------------

    def _after_like(self, item_id: str, viewer_id: str) -> None:
        # Endorsement follows the ledger, not the returned result (a replay returns an old flag)
        liked = self.ledger.get_state(item_id, viewer_id).has_liked
        self.graph.set_endorsement(item_id, viewer_id, liked)
        self.trust_cache.delete_prefix(f"{item_id}:")

    def toggle_like(
        self,
        item_id: str,
        viewer_id: str,
        idempotency_key: Optional[str] = None,
    ) -> LikeToggleResult:
        self._require_item(item_id)
        result = self.tracker.toggle_like(item_id, viewer_id, idempotency_key)
        self._after_like(item_id, viewer_id)
        return result

    def toggle_bookmark(
        self,
        item_id: str,
        viewer_id: str,
        idempotency_key: Optional[str] = None,
    ) -> BookmarkToggleResult:
        self._require_item(item_id)
        return self.tracker.toggle_bookmark(item_id, viewer_id, idempotency_key)

    def apply_optimistic(
        self,
        item_id: str,
        viewer_id: str,
        kind: EngagementKind,
        previous_state: EngagementState,
        previous_count: int,
        idempotency_key: Optional[str] = None,
    ) -> OptimisticToggle:
        self._require_item(item_id)
        outcome = self.tracker.apply_optimistic(
            item_id, viewer_id, kind, previous_state, previous_count, idempotency_key
        )
        if kind is EngagementKind.LIKE and outcome.error is None:
            self._after_like(item_id, viewer_id)
        return outcome

    def get_engagement_states(self, viewer_id: str, item_ids: Iterable[str]) -> Dict[str, EngagementState]:
        return self.tracker.get_engagement_states(viewer_id, item_ids)

    def _adjust(self, item_id: str, counter: str, delta: int) -> Dict[str, Any]:
        self._require_item(item_id)
        return {"item_id": item_id, counter: self.ledger.adjust(item_id, counter, delta)}

    def record_comment(self, item_id: str) -> Dict[str, Any]:
        return self._adjust(item_id, "comments", 1)

    def remove_comment(self, item_id: str) -> Dict[str, Any]:
        return self._adjust(item_id, "comments", -1)

    def record_reshare(self, item_id: str) -> Dict[str, Any]:
        return self._adjust(item_id, "reshares", 1)

    # -------------------------------------------------------------------------
    # Discovery requests
    # -------------------------------------------------------------------------

    def create_request(
        self,
        creator_id: str,
        title: str,
        description: str = "",
        tags: Iterable[str] = (),
        bounty_amount: float = 0.0,
        expires_at: Optional[datetime] = None,
        deadline_hours: Optional[int] = None,
    ) -> DiscoveryRequest:
        request = lifecycle.create_request(
            creator_id,
            title,
            self.now(),
            description=description,
            tags=tags,
            bounty_amount=bounty_amount,
            expires_at=expires_at,
            deadline_hours=deadline_hours,
            config=self.config,
        )
        logger.info("request %s created by %s (bounty=%s)", request.id, creator_id, request.bounty_amount)
        return self.requests.add(request)

    def get_request(self, request_id: str) -> DiscoveryRequest:
        return self.requests.get(request_id, self.now())

    def list_requests(
        self,
        status: Optional[str] = "open",
        text: Optional[str] = None,
        tags: Iterable[str] = (),
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Page:
        limit = limit if limit is not None else self.config.default_page_size
        validate_pagination(offset, limit, self.config)
        self.requests.expire_overdue(self.now())
        selected = lifecycle.select_requests(self.requests.list_requests(), status, text, tags)
        return paginate(selected, offset, limit)

    def respond(
        self,
        request_id: str,
        responder_id: str,
        text: str,
        item_id: Optional[str] = None,
    ) -> RequestResponse:
        if item_id is not None:
            self._require_item(item_id)
        now = self.now()
        _, response = self.requests.update(
            request_id, lambda r: lifecycle.respond(r, responder_id, text, now, item_id=item_id)
        )
        return response

    def close_request(self, request_id: str, actor_id: str) -> DiscoveryRequest:
        now = self.now()
        updated, _ = self.requests.update(
            request_id, lambda r: (lifecycle.close(r, actor_id, now), None)
        )
        logger.info("request %s closed by %s (bounty %s)", request_id, actor_id, updated.bounty_status.value)
        return updated

    def award_bounty(self, request_id: str, actor_id: str, response_id: str) -> AwardResult:
        now = self.now()

        def _award(request: DiscoveryRequest):
            result = lifecycle.award_bounty(request, actor_id, response_id, now, self.config)
            return result.request, result

        _, result = self.requests.update(request_id, _award)
        logger.info(
            "request %s bounty awarded to %s (payout=%s fee=%s)",
            request_id, result.winner_id, result.payout_amount, result.platform_fee,
        )
        return result

    def expire_overdue(self) -> List[DiscoveryRequest]:
        return self.requests.expire_overdue(self.now())

    # -------------------------------------------------------------------------
    # Stats
    # -------------------------------------------------------------------------

    def stats(self) -> Dict[str, Any]:
        return {
            "items": len(self.content.list_items()),
            "requests": self.requests.count_by_status(),
            "idempotent_replays": self.tracker.replays,
            "caches": {
                "trending": self.trending_cache.stats(),
                "trust": self.trust_cache.stats(),
            },
        }
