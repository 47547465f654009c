"""
Trending candidate pool pre-selection.

Pre-selects candidates using the trailing trending window and a size cap.
Filter: created within trending_window_days of now.
Returns items sorted by raw engagement points, capped at trending_candidate_pool_size.

The public entry point is get_candidate_pool.
"""

from datetime import datetime, timedelta
from typing import List

from ..models.config import DEFAULT_CONFIG, RankingConfig
from ..models.content import ContentItem, as_utc
from ..models.scoring import engagement_points


def window_start(now: datetime, config: RankingConfig = DEFAULT_CONFIG) -> datetime:
    """Oldest created_at still eligible to trend."""
    return as_utc(now) - timedelta(days=config.trending_window_days)


def _within_trending_window(
    item: ContentItem,
    now: datetime,
    config: RankingConfig,
) -> bool:
    """True if the item was created inside the trailing window. Future items count as fresh."""
    return item.created_at >= window_start(now, config)


def _filter_eligible_candidates(
    items: List[ContentItem],
    now: datetime,
    config: RankingConfig,
) -> List[ContentItem]:
    """Return items inside the window."""
    return [item for item in items if _within_trending_window(item, now, config)]


def _sort_by_engagement_and_cap(
    candidates: List[ContentItem],
    config: RankingConfig,
) -> List[ContentItem]:
    """Sort by engagement points (descending) and return up to trending_candidate_pool_size."""
    candidates.sort(
        key=lambda item: (engagement_points(item, config), item.created_at),
        reverse=True,
    )
    return candidates[:config.trending_candidate_pool_size]


def get_candidate_pool(
    items: List[ContentItem],
    now: datetime,
    config: RankingConfig = DEFAULT_CONFIG,
) -> List[ContentItem]:
    """
    Pre-select the trending candidate pool.

    Items older than the window never trend regardless of engagement. The cap
    bounds ranking cost; it keeps the most-engaged items, so recall is traded
    for latency only among low-engagement items.
    """
    candidates = _filter_eligible_candidates(items, now, config)
    return _sort_by_engagement_and_cap(candidates, config)
