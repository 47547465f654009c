"""Common Pydantic models shared across routes."""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    code: str
    message: str


class ViewerRequest(BaseModel):
    viewer_id: str = Field(..., min_length=1)


class ToggleRequest(ViewerRequest):
    idempotency_key: Optional[str] = None

