"""
Content model: typed representation of a recommendation or list for ranking and search.

Used by candidate_pool, trending, trust, and filters stages instead of raw dicts.
Built from store/API dicts via ContentItem.model_validate(d).
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

COUNTER_FIELDS = ("likes", "saves", "comments", "reshares")


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ContentKind(str, Enum):
    RECOMMENDATION = "recommendation"
    LIST = "list"


class SocialDistance(str, Enum):
    """Graph distance between the viewer and an author."""

    DIRECT = "direct"
    NETWORK = "network"
    NONE = "none"


class Author(BaseModel):
    id: str
    reputation_score: float = Field(default=0.0, ge=0)
    social_distance: SocialDistance = SocialDistance.NONE


class ContentItem(BaseModel):
    """
    A recommendation or list as seen by the ranking pipeline.

    Counters are authoritative in the engagement ledger; values here are a snapshot.
    trust_score is filled per viewer when a result is built and is never stored.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    author_id: str
    title: str = ""
    body: str = ""
    kind: ContentKind = ContentKind.RECOMMENDATION
    tags: Set[str] = Field(default_factory=set)
    created_at: datetime
    likes: int = Field(default=0, ge=0)
    saves: int = Field(default=0, ge=0)
    comments: int = Field(default=0, ge=0)
    reshares: int = Field(default=0, ge=0)
    trust_score: Optional[float] = Field(default=None, ge=0, le=10)

    @field_validator("created_at")
    @classmethod
    def _created_at_utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, v: Any) -> Any:
        if v is None:
            return set()
        if isinstance(v, str):
            v = [v]
        return {str(t).strip().lower() for t in v if str(t).strip()}

    def counters(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in COUNTER_FIELDS}

    def with_counters(self, counters: Dict[str, int]) -> "ContentItem":
        """Copy with ledger counters applied (unknown keys ignored)."""
        update = {k: v for k, v in counters.items() if k in COUNTER_FIELDS}
        return self.model_copy(update=update)


def ensure_items(items: List[Union[Dict[str, Any], "ContentItem"]]) -> List["ContentItem"]:
    """Convert list of dicts or ContentItems to list of ContentItem models for the pipeline."""
    return [
        ContentItem.model_validate(i) if isinstance(i, dict) else i
        for i in items
    ]
