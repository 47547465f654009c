"""
Search models: filter set and paginated result page.
"""

from enum import Enum
from typing import Generic, List, Optional, Set, TypeVar

from pydantic import BaseModel, Field, field_validator

T = TypeVar("T")


class SortOrder(str, Enum):
    RECENT = "recent"
    TRUST = "trust"
    TRENDING = "trending"


class SearchFilters(BaseModel):
    """
    All supplied fields are ANDed. Bounds on offset/limit are checked by the
    filter stage so the engine's ValidationError is raised, not pydantic's.
    """

    text: Optional[str] = None
    min_trust_score: Optional[float] = None
    author_id: Optional[str] = None
    tags: Set[str] = Field(default_factory=set)
    sort: SortOrder = SortOrder.RECENT
    offset: int = 0
    limit: int = 20

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, v):
        if v is None:
            return set()
        if isinstance(v, str):
            v = [v]
        return {str(t).strip().lower() for t in v if str(t).strip()}


class Page(BaseModel, Generic[T]):
    items: List[T]
    total_count: int
    offset: int
    limit: int
    has_more: bool
    error: Optional[str] = None
