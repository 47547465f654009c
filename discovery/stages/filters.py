"""
Discovery search: filter predicates, ordering, and offset pagination over a corpus.

All supplied filters are ANDed. Text matches title OR body case-insensitively;
tags require containment (the item's tags must include every requested tag);
min_trust_score is inclusive and evaluated against the requesting viewer's trust.
Without a ranking signal the order is recency descending.
"""

from datetime import datetime
from typing import Callable, Dict, List, Optional

from ..errors import ValidationError
from ..models.config import DEFAULT_CONFIG, RankingConfig
from ..models.content import ContentItem
from ..models.scoring import ScoredItem
from ..models.search import Page, SearchFilters, SortOrder
from ..models.trust import TrustScore
from .candidate_pool import window_start
from .trending import score_item

TrustLookup = Callable[[ContentItem], TrustScore]


def validate_pagination(offset: int, limit: int, config: RankingConfig = DEFAULT_CONFIG) -> None:
    if limit <= 0:
        raise ValidationError(f"limit must be > 0, got {limit}")
    if limit > config.max_page_size:
        raise ValidationError(f"limit must be <= {config.max_page_size}, got {limit}")
    if offset < 0:
        raise ValidationError(f"offset must be >= 0, got {offset}")


def paginate(items: List, offset: int, limit: int) -> Page:
    """Slice one page. has_more is true when items remain past offset + limit."""
    total = len(items)
    return Page(
        items=items[offset:offset + limit],
        total_count=total,
        offset=offset,
        limit=limit,
        has_more=total > offset + limit,
    )


def _validate_filters(
    filters: SearchFilters,
    trust_lookup: Optional[TrustLookup],
    config: RankingConfig,
) -> None:
    validate_pagination(filters.offset, filters.limit, config)
    if filters.min_trust_score is not None:
        if not 0 <= filters.min_trust_score <= 10:
            raise ValidationError(
                f"min_trust_score must be within [0, 10], got {filters.min_trust_score}"
            )
    needs_trust = filters.min_trust_score is not None or filters.sort is SortOrder.TRUST
    if needs_trust and trust_lookup is None:
        raise ValidationError("trust filtering and ordering require a viewer")


def _matches_text(item: ContentItem, text: str) -> bool:
    needle = text.casefold()
    return needle in item.title.casefold() or needle in item.body.casefold()


def _matches(item: ContentItem, filters: SearchFilters) -> bool:
    """Every predicate except trust, which needs the viewer lookup."""
    text = (filters.text or "").strip()
    if text and not _matches_text(item, text):
        return False
    if filters.author_id and item.author_id != filters.author_id:
        return False
    if filters.tags and not filters.tags.issubset(item.tags):
        return False
    return True


def _order(
    scored: List[ScoredItem],
    sort: SortOrder,
    now: datetime,
    config: RankingConfig,
) -> List[ScoredItem]:
    # Recency first; later stable sorts keep it as the tie-breaker
    scored.sort(key=lambda s: (s.item.created_at, s.item.id), reverse=True)
    if sort is SortOrder.TRUST:
        scored.sort(key=lambda s: s.trust.score if s.trust else 0.0, reverse=True)
    elif sort is SortOrder.TRENDING:
        oldest = window_start(now, config)
        scored.sort(
            key=lambda s: s.trending_score if s.item.created_at >= oldest else 0.0,
            reverse=True,
        )
    return scored


def query(
    corpus: List[ContentItem],
    filters: SearchFilters,
    now: datetime,
    trust_lookup: Optional[TrustLookup] = None,
    config: RankingConfig = DEFAULT_CONFIG,
) -> Page:
    """
    Filter, order, and paginate the corpus for one viewer.

    trust_lookup scores an item for the requesting viewer; it is required when
    min_trust_score or trust ordering is requested and otherwise only annotates
    the returned page. An offset past the end yields an empty page.
    """
    _validate_filters(filters, trust_lookup, config)

    # 1) Cheap predicates first
    matched = [item for item in corpus if _matches(item, filters)]

    # 2) Viewer-relative trust, only computed where it decides membership or order
    trust_by_id: Dict[str, TrustScore] = {}
    needs_trust = filters.min_trust_score is not None or filters.sort is SortOrder.TRUST
    if needs_trust:
        for item in matched:
            trust_by_id[item.id] = trust_lookup(item)
        if filters.min_trust_score is not None:
            matched = [
                item for item in matched
                if trust_by_id[item.id].score >= filters.min_trust_score
            ]

    # 3) Order
    scored = [score_item(item, now, config) for item in matched]
    for s in scored:
        s.trust = trust_by_id.get(s.item.id)
    scored = _order(scored, filters.sort, now, config)

    # 4) Paginate, then annotate the visible page
    page = paginate(scored, filters.offset, filters.limit)
    if trust_lookup is not None:
        for s in page.items:
            if s.trust is None:
                s.trust = trust_lookup(s.item)
    for s in page.items:
        if s.trust is not None:
            s.item = s.item.model_copy(update={"trust_score": s.trust.score})
    return page
