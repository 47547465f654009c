"""Discovery request Pydantic models."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .common import ViewerRequest


class CreateDiscoveryRequest(BaseModel):
    creator_id: str = Field(..., min_length=1)
    title: str
    description: str = ""
    tags: List[str] = []
    bounty_amount: float = 0.0
    expires_at: Optional[datetime] = None
    deadline_hours: Optional[int] = None


class RespondRequest(BaseModel):
    responder_id: str = Field(..., min_length=1)
    text: str
    item_id: Optional[str] = None


class CloseDiscoveryRequest(ViewerRequest):
    pass


class AwardBountyRequest(ViewerRequest):
    response_id: str
