"""Search and engagement Pydantic models."""

from typing import List, Optional

from pydantic import BaseModel

from discovery.models.engagement import EngagementKind, EngagementState
from discovery.models.search import SearchFilters, SortOrder

from .common import ToggleRequest


class SearchRequest(BaseModel):
    viewer_id: Optional[str] = None
    text: Optional[str] = None
    min_trust_score: Optional[float] = None
    author_id: Optional[str] = None
    tags: List[str] = []
    sort: SortOrder = SortOrder.RECENT
    offset: int = 0
    limit: Optional[int] = None

    def to_filters(self, default_limit: int) -> SearchFilters:
        return SearchFilters(
            text=self.text,
            min_trust_score=self.min_trust_score,
            author_id=self.author_id,
            tags=self.tags,
            sort=self.sort,
            offset=self.offset,
            limit=self.limit if self.limit is not None else default_limit,
        )


class OptimisticToggleRequest(ToggleRequest):
    kind: EngagementKind
    previous_state: EngagementState = EngagementState()
    previous_count: int = 0
