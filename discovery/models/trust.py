"""
Trust models: endorsement breakdown, level buckets, and the scored result.
"""

from enum import Enum

from pydantic import BaseModel, computed_field, field_validator

from ..errors import ValidationError


class TrustLevel(str, Enum):
    HIGHLY_TRUSTED = "Highly Trusted"
    TRUSTED = "Trusted"
    SOME_TRUST = "Some Trust"
    LIMITED_DATA = "Limited Data"


class SocialHops(str, Enum):
    ONE_HOP = "±1 hop"
    TWO_HOPS = "±2 hops"
    MIXED = "Mixed"
    LIMITED_DATA = "Limited Data"


class TrustBreakdown(BaseModel):
    """
    Endorsements of one content item from the viewer's social circle.

    total_endorsements is always derived, so it cannot drift from the two counts.
    Negative counts raise the engine's ValidationError rather than pydantic's.
    """

    direct_friends_count: int = 0
    friends_of_friends_count: int = 0

    @field_validator("direct_friends_count", "friends_of_friends_count")
    @classmethod
    def _non_negative(cls, v: int, info) -> int:
        if v < 0:
            raise ValidationError(f"{info.field_name} must be >= 0, got {v}")
        return v

    @computed_field
    @property
    def total_endorsements(self) -> int:
        return self.direct_friends_count + self.friends_of_friends_count

    @computed_field
    @property
    def social_hops(self) -> SocialHops:
        direct = self.direct_friends_count > 0
        network = self.friends_of_friends_count > 0
        if direct and network:
            return SocialHops.MIXED
        if direct:
            return SocialHops.ONE_HOP
        if network:
            return SocialHops.TWO_HOPS
        return SocialHops.LIMITED_DATA


class TrustScore(BaseModel):
    """Trust of one item for one viewer."""

    score: float
    level: TrustLevel
    weighted_endorsements: float
    breakdown: TrustBreakdown
