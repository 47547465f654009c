"""Register all route modules on the FastAPI app."""

from fastapi import FastAPI

from .root import router as root_router
from .config import router as config_router
from .ranking import router as ranking_router
from .items import router as items_router
from .requests import router as requests_router
from .stats import router as stats_router


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the app."""
    app.include_router(root_router)
    app.include_router(config_router, prefix="/api/config", tags=["config"])
    app.include_router(ranking_router, prefix="/api", tags=["ranking"])
    app.include_router(items_router, prefix="/api/items", tags=["items"])
    app.include_router(requests_router, prefix="/api/requests", tags=["requests"])
    app.include_router(stats_router, prefix="/api", tags=["stats"])
