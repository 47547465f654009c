"""Ranking stages: trust scoring, candidate pool, trending rank, discovery filters."""

from .candidate_pool import get_candidate_pool
from .filters import paginate, query, validate_pagination
from .trending import rank_trending, score_item
from .trust import compute_trust, trust_for_item, trust_level

__all__ = [
    "compute_trust",
    "get_candidate_pool",
    "paginate",
    "query",
    "rank_trending",
    "score_item",
    "trust_for_item",
    "trust_level",
    "validate_pagination",
]
