"""
Trust-Weighted Discovery API: FastAPI app factory.

Use: uvicorn discovery_api.app:app
Or:  from discovery_api import app
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from discovery.errors import (
    ConflictError,
    DiscoveryError,
    NotFoundError,
    PermissionDeniedError,
    TransientStoreError,
    ValidationError,
)

from .config import get_config
from .models import ErrorResponse
from .routes import register_routes
from .state import get_state

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

STATUS_FOR_ERROR = {
    ValidationError: 400,
    PermissionDeniedError: 403,
    NotFoundError: 404,
    ConflictError: 409,
    TransientStoreError: 503,
}


def status_for(exc: DiscoveryError) -> int:
    for error_type, status in STATUS_FOR_ERROR.items():
        if isinstance(exc, error_type):
            return status
    return 500


def _error_response(status: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content=ErrorResponse(code=code, message=message).model_dump(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Translate engine errors to {"code", "message"} bodies."""

    @app.exception_handler(DiscoveryError)
    async def discovery_error_handler(request: Request, exc: DiscoveryError):
        status = status_for(exc)
        if status == 409:
            logger.info("%s %s -> conflict: %s", request.method, request.url.path, exc.message)
        elif status >= 500:
            logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
        return _error_response(status, exc.code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ()))
        message = f"{where}: {first.get('msg', 'invalid request')}" if where else "invalid request"
        return _error_response(400, ValidationError.code, message)


def create_app() -> FastAPI:
    """Build FastAPI app with logging, CORS, error handlers, and routes."""
    config = get_config()
    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)

    app = FastAPI(
        title="Trust-Weighted Discovery API",
        description="Trust scoring, trending rank, discovery search, and bounty-backed requests",
        version="1.0.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    register_routes(app)

    @app.on_event("startup")
    def _startup_logging():
        ok, errors = config.validate()
        for error in errors:
            logger.warning("Config: %s", error)
        state = get_state()
        logger.info("Trust-Weighted Discovery API starting...")
        logger.info("Backends: %s", state.backends)

    return app


app = create_app()
