"""Stats endpoint."""

from fastapi import APIRouter

from ..state import get_state

router = APIRouter()


@router.get("/stats")
def get_stats():
    """Get current statistics."""
    state = get_state()
    stats = state.service.stats()
    stats["backends"] = state.backends
    return stats
