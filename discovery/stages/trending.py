"""
Trending rank: decayed popularity over the candidate pool.

Per item: points = weighted engagement, hours = age clamped at 0,
trending = points / (hours + offset) ** exponent. Sorted by trending desc,
then most recent, then id.
"""

import logging
from datetime import datetime
from typing import List

from ..errors import ValidationError
from ..models.config import DEFAULT_CONFIG, RankingConfig
from ..models.content import ContentItem
from ..models.scoring import ScoredItem, engagement_points, hours_since, trending_score
from .candidate_pool import get_candidate_pool

logger = logging.getLogger(__name__)


def score_item(
    item: ContentItem,
    now: datetime,
    config: RankingConfig = DEFAULT_CONFIG,
) -> ScoredItem:
    """Compute the trending components for one item."""
    points = engagement_points(item, config)
    hours = hours_since(item.created_at, now)
    return ScoredItem(
        item=item,
        engagement_points=points,
        hours_since_posted=hours,
        trending_score=trending_score(points, hours, config),
    )


def sort_scored(scored: List[ScoredItem]) -> List[ScoredItem]:
    """Trending desc, ties by newest created_at, then id for a stable order."""
    scored.sort(key=lambda s: s.item.id)
    scored.sort(key=lambda s: (s.trending_score, s.item.created_at), reverse=True)
    return scored


def rank_trending(
    candidates: List[ContentItem],
    now: datetime,
    limit: int,
    config: RankingConfig = DEFAULT_CONFIG,
) -> List[ScoredItem]:
    """
    Rank candidates by trending score and return the top `limit`.

    An empty pool returns an empty list. `limit` must be positive.
    """
    if limit <= 0:
        raise ValidationError(f"limit must be > 0, got {limit}")

    # 1) Window + cap
    pool = get_candidate_pool(candidates, now, config)
    if not pool:
        return []

    # 2) Score and sort
    scored = sort_scored([score_item(item, now, config) for item in pool])
    logger.debug(
        "trending ranked pool=%d of candidates=%d, returning %d",
        len(pool), len(candidates), min(limit, len(scored)),
    )
    return scored[:limit]
