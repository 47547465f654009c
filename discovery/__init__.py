"""
Trust-weighted discovery and ranking engine.

Single entry point for the engine package:
- models/: RankingConfig, ContentItem, TrustScore, ScoredItem, DiscoveryRequest
- stages/: trust, candidate_pool, trending, filters
- lifecycle: discovery request status and bounty transitions
"""

from datetime import datetime
from typing import List, Optional

from . import lifecycle
from .computed_params import compute_parameters
from .errors import (
    ConflictError,
    DiscoveryError,
    NotFoundError,
    PermissionDeniedError,
    TransientStoreError,
    ValidationError,
)
from .models.config import DEFAULT_CONFIG, RankingConfig, resolve_config
from .models.content import ContentItem, ensure_items
from .models.scoring import ScoredItem
from .stages.candidate_pool import get_candidate_pool
from .stages.filters import query
from .stages.trending import rank_trending
from .stages.trust import compute_trust, trust_for_item


def get_trending(
    items: List,
    now: datetime,
    limit: int,
    config: Optional[RankingConfig] = None,
) -> List[ScoredItem]:
    """
    Rank raw items (dicts or ContentItem) by trending score.
    Accepts items as list of dicts, the shape content stores hand over.
    """
    config = resolve_config(config)
    return rank_trending(ensure_items(items), now, limit, config)


__all__ = [
    "ConflictError",
    "ContentItem",
    "DEFAULT_CONFIG",
    "DiscoveryError",
    "NotFoundError",
    "PermissionDeniedError",
    "RankingConfig",
    "ScoredItem",
    "TransientStoreError",
    "ValidationError",
    "compute_parameters",
    "compute_trust",
    "get_candidate_pool",
    "get_trending",
    "lifecycle",
    "query",
    "rank_trending",
    "resolve_config",
    "trust_for_item",
]
