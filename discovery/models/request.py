"""
Discovery request model: a "help me find X" request with an optional bounty.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Set

from pydantic import BaseModel, Field, field_validator

from .content import as_utc


class RequestStatus(str, Enum):
    OPEN = "open"
    ANSWERED = "answered"
    CLOSED = "closed"


class BountyStatus(str, Enum):
    NONE = "none"
    PENDING = "pending"
    AWARDED = "awarded"
    REFUNDED = "refunded"
    EXPIRED = "expired"


TERMINAL_BOUNTY_STATES = frozenset(
    {BountyStatus.AWARDED, BountyStatus.REFUNDED, BountyStatus.EXPIRED}
)


class RequestResponse(BaseModel):
    id: str
    responder_id: str
    text: str
    item_id: Optional[str] = None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class DiscoveryRequest(BaseModel):
    id: str
    creator_id: str
    title: str
    description: str = ""
    tags: Set[str] = Field(default_factory=set)
    status: RequestStatus = RequestStatus.OPEN
    bounty_amount: float = Field(default=0.0, ge=0)
    bounty_status: BountyStatus = BountyStatus.NONE
    response_count: int = Field(default=0, ge=0)
    responses: List[RequestResponse] = Field(default_factory=list)
    winner_response_id: Optional[str] = None
    created_at: datetime
    expires_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None

    @field_validator("created_at", "expires_at", "closed_at")
    @classmethod
    def _utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v) if v is not None else None

    @property
    def has_bounty(self) -> bool:
        return self.bounty_amount > 0

    def get_response(self, response_id: str) -> Optional[RequestResponse]:
        for r in self.responses:
            if r.id == response_id:
                return r
        return None


class AwardResult(BaseModel):
    """Bounty award bookkeeping. No funds move here."""

    request: DiscoveryRequest
    winner_response_id: str
    winner_id: str
    bounty_amount: float
    platform_fee: float
    payout_amount: float
