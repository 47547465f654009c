"""Item endpoints: trust score, like/bookmark toggles, engagement state, counters."""

from fastapi import APIRouter, Query

from ..models import OptimisticToggleRequest, ToggleRequest
from ..state import get_state

router = APIRouter()


@router.get("/engagement")
def get_engagement_states(
    viewer_id: str = Query(..., min_length=1),
    item_ids: str = Query("", description="Comma-separated item ids"),
):
    """Server truth of the viewer's likes/bookmarks, to rebuild client state."""
    ids = [i.strip() for i in item_ids.split(",") if i.strip()]
    states = get_state().service.get_engagement_states(viewer_id, ids)
    return {"viewer_id": viewer_id, "states": states}


@router.get("/{item_id}")
def get_item(item_id: str):
    return get_state().service.get_item(item_id)


@router.get("/{item_id}/trust")
def get_trust(item_id: str, viewer_id: str = Query(..., min_length=1)):
    return get_state().service.get_trust(item_id, viewer_id)


@router.post("/{item_id}/like")
def toggle_like(item_id: str, request: ToggleRequest):
    return get_state().service.toggle_like(item_id, request.viewer_id, request.idempotency_key)


@router.post("/{item_id}/bookmark")
def toggle_bookmark(item_id: str, request: ToggleRequest):
    return get_state().service.toggle_bookmark(item_id, request.viewer_id, request.idempotency_key)


@router.post("/{item_id}/optimistic")
def apply_optimistic(item_id: str, request: OptimisticToggleRequest):
    """Toggle through the optimistic state machine; store failures come back as rolled_back."""
    return get_state().service.apply_optimistic(
        item_id,
        request.viewer_id,
        request.kind,
        request.previous_state,
        request.previous_count,
        request.idempotency_key,
    )


@router.post("/{item_id}/comments")
def record_comment(item_id: str):
    return get_state().service.record_comment(item_id)


@router.delete("/{item_id}/comments")
def remove_comment(item_id: str):
    return get_state().service.remove_comment(item_id)


@router.post("/{item_id}/reshares")
def record_reshare(item_id: str):
    return get_state().service.record_reshare(item_id)
