"""
Scoring model: ScoredItem and score/time helpers used by the pipeline.

Contains:
- ScoredItem: a content item with its ranking scores for one viewer
- hours_since, engagement_points, trending_score: used by candidate_pool, trending, filters
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from .config import DEFAULT_CONFIG, RankingConfig
from .content import ContentItem, SocialDistance, as_utc
from .trust import TrustScore


def hours_since(created_at: datetime, now: datetime) -> float:
    """Age in hours, clamped at 0 for future timestamps (clock skew)."""
    delta = as_utc(now) - as_utc(created_at)
    return max(0.0, delta.total_seconds() / 3600.0)


def engagement_points(item: ContentItem, config: RankingConfig = DEFAULT_CONFIG) -> float:
    """Weighted combination of reshares, likes, saves, and comments."""
    return (
        item.reshares * config.engagement_weight_reshare
        + item.likes * config.engagement_weight_like
        + item.saves * config.engagement_weight_save
        + item.comments * config.engagement_weight_comment
    )


def trending_score(
    points: float,
    hours: float,
    config: RankingConfig = DEFAULT_CONFIG,
) -> float:
    """points / (hours + offset) ** exponent. Gentle decay at the default 0.5."""
    hours = max(0.0, hours)
    return points / (hours + config.trending_hours_offset) ** config.trending_decay_exponent


class ScoredItem(BaseModel):
    """A content item with all its ranking components."""

    item: ContentItem
    engagement_points: float = 0.0
    hours_since_posted: float = 0.0
    trending_score: float = 0.0
    trust: Optional[TrustScore] = None
    author_distance: Optional[SocialDistance] = None
