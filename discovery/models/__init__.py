"""Data models for the discovery engine."""

from .config import DEFAULT_CONFIG, RankingConfig, resolve_config
from .content import Author, ContentItem, ContentKind, SocialDistance, ensure_items
from .engagement import (
    BookmarkToggleResult,
    EngagementKind,
    EngagementState,
    LikeToggleResult,
    OptimisticToggle,
    TogglePhase,
)
from .request import (
    AwardResult,
    BountyStatus,
    DiscoveryRequest,
    RequestResponse,
    RequestStatus,
)
from .scoring import ScoredItem
from .search import Page, SearchFilters, SortOrder
from .trust import SocialHops, TrustBreakdown, TrustLevel, TrustScore

__all__ = [
    "DEFAULT_CONFIG",
    "Author",
    "AwardResult",
    "BookmarkToggleResult",
    "BountyStatus",
    "ContentItem",
    "ContentKind",
    "DiscoveryRequest",
    "EngagementKind",
    "EngagementState",
    "LikeToggleResult",
    "OptimisticToggle",
    "Page",
    "RankingConfig",
    "RequestResponse",
    "RequestStatus",
    "ScoredItem",
    "SearchFilters",
    "SocialDistance",
    "SocialHops",
    "SortOrder",
    "TogglePhase",
    "TrustBreakdown",
    "TrustLevel",
    "TrustScore",
    "ensure_items",
    "resolve_config",
]
