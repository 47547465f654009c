"""Pydantic request/response models for the API."""

from .common import ErrorResponse, ToggleRequest, ViewerRequest
from .items import OptimisticToggleRequest, SearchRequest
from .requests import (
    AwardBountyRequest,
    CloseDiscoveryRequest,
    CreateDiscoveryRequest,
    RespondRequest,
)

__all__ = [
    "AwardBountyRequest",
    "CloseDiscoveryRequest",
    "CreateDiscoveryRequest",
    "ErrorResponse",
    "OptimisticToggleRequest",
    "RespondRequest",
    "SearchRequest",
    "ToggleRequest",
    "ViewerRequest",
]
