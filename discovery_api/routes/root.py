"""Root and health endpoints."""

from fastapi import APIRouter

from ..services import RedisCache
from ..state import get_state

router = APIRouter()


@router.get("/")
def root():
    state = get_state()
    return {
        "name": "Trust-Weighted Discovery API",
        "version": "1.0.0",
        "status": "ready",
        "backends": state.backends,
        "endpoints": {
            "ranking": ["/api/trending", "/api/search", "/api/items/{id}/trust"],
            "engagement": [
                "/api/items/{id}/like",
                "/api/items/{id}/bookmark",
                "/api/items/{id}/optimistic",
                "/api/items/engagement",
            ],
            "requests": ["/api/requests", "/api/requests/{id}/responses", "/api/requests/{id}/award"],
            "config": ["/api/config", "/api/stats"],
        },
    }


@router.get("/api/health")
def health():
    state = get_state()
    cache = state.service.trending_cache
    redis_ok = cache.ping() if isinstance(cache, RedisCache) else None
    return {
        "status": "healthy",
        "backends": state.backends,
        "redis": {"available": redis_ok} if redis_ok is not None else None,
    }
