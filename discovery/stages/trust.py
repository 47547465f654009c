"""
Trust scoring: social endorsements -> 0-10 score and level.

Each direct-friend endorsement weighs trust_direct_weight, each friend-of-friend
endorsement trust_network_weight. The weighted sum scales linearly to 10 and
saturates at trust_saturation_weight. Pure function of the breakdown, so results
are cacheable per (item, viewer) until the graph or endorsement set changes.
"""

from typing import Protocol

from ..models.config import DEFAULT_CONFIG, RankingConfig
from ..models.content import ContentItem, SocialDistance
from ..models.trust import TrustBreakdown, TrustLevel, TrustScore

MAX_TRUST_SCORE = 10.0


class SocialCounts(Protocol):
    direct_count: int
    network_count: int


class SocialGraphLookup(Protocol):
    """Social graph collaborator. Graph traversal happens behind this interface."""

    def get_social_distance(self, viewer_id: str, item: ContentItem) -> SocialCounts:
        """Endorsers of item among the viewer's direct (1 hop) and network (2 hop) connections."""
        ...

    def get_author_distance(self, viewer_id: str, author_id: str) -> SocialDistance:
        ...


def weighted_endorsements(
    breakdown: TrustBreakdown,
    config: RankingConfig = DEFAULT_CONFIG,
) -> float:
    return (
        breakdown.direct_friends_count * config.trust_direct_weight
        + breakdown.friends_of_friends_count * config.trust_network_weight
    )


def trust_level(score: float, config: RankingConfig = DEFAULT_CONFIG) -> TrustLevel:
    if score >= config.trust_level_highly_trusted:
        return TrustLevel.HIGHLY_TRUSTED
    if score >= config.trust_level_trusted:
        return TrustLevel.TRUSTED
    if score >= config.trust_level_some_trust:
        return TrustLevel.SOME_TRUST
    return TrustLevel.LIMITED_DATA


def compute_trust(
    breakdown: TrustBreakdown,
    config: RankingConfig = DEFAULT_CONFIG,
) -> TrustScore:
    """Score in [0, 10] and level for an endorsement breakdown."""
    weighted = weighted_endorsements(breakdown, config)
    if breakdown.total_endorsements == 0:
        score = 0.0
    else:
        score = min(MAX_TRUST_SCORE, weighted / config.trust_saturation_weight * MAX_TRUST_SCORE)
    # Level is bucketed on the reported (rounded) score
    score = round(score, 4)
    return TrustScore(
        score=score,
        level=trust_level(score, config),
        weighted_endorsements=weighted,
        breakdown=breakdown,
    )


def trust_for_item(
    viewer_id: str,
    item: ContentItem,
    graph: SocialGraphLookup,
    config: RankingConfig = DEFAULT_CONFIG,
) -> TrustScore:
    """Ask the social graph for endorsement counts and score them."""
    counts = graph.get_social_distance(viewer_id, item)
    breakdown = TrustBreakdown(
        direct_friends_count=counts.direct_count,
        friends_of_friends_count=counts.network_count,
    )
    return compute_trust(breakdown, config)
