"""Ranking endpoints: trending feed and discovery search."""

from typing import Optional

from fastapi import APIRouter, Query

from ..models import SearchRequest
from ..state import get_state

router = APIRouter()


@router.get("/trending")
def get_trending(
    limit: Optional[int] = Query(None, description="Max items to return"),
    viewer_id: Optional[str] = Query(None, description="Annotate trust and author distance for this viewer"),
):
    """Top items by decayed engagement. Degrades to an empty page with `error` on store failure."""
    service = get_state().service
    return service.get_trending(
        limit if limit is not None else service.config.default_page_size,
        viewer_id=viewer_id,
    )


@router.post("/search")
def search(request: SearchRequest):
    """Filtered, paginated discovery search."""
    service = get_state().service
    filters = request.to_filters(service.config.default_page_size)
    return service.search(filters, viewer_id=request.viewer_id)
