"""
Computed Parameters for the ranking configuration

This module computes derived parameters from base parameters.
Computed parameters are readonly for operators and are recalculated
whenever the base RankingConfig changes (served at GET /api/config).
"""

import math
from typing import Any, Dict

from .models.config import RankingConfig


def compute_parameters(config: RankingConfig) -> Dict[str, Any]:
    """
    Compute derived parameters from a RankingConfig.

    Args:
        config: Resolved ranking configuration

    Returns:
        Dictionary of computed parameter values
    """
    computed = {}

    # =========================================================================
    # Trust Saturation (endorsements needed to reach a score of 10)
    # =========================================================================
    saturation = config.trust_saturation_weight
    computed["direct_endorsements_to_saturate"] = math.ceil(saturation / config.trust_direct_weight)
    if config.trust_network_weight > 0:
        computed["network_endorsements_to_saturate"] = math.ceil(
            saturation / config.trust_network_weight
        )
    else:
        computed["network_endorsements_to_saturate"] = None
    computed["score_per_direct_endorsement"] = config.trust_direct_weight / saturation * 10
    computed["score_per_network_endorsement"] = config.trust_network_weight / saturation * 10
    computed["direct_to_network_ratio"] = (
        config.trust_direct_weight / config.trust_network_weight
        if config.trust_network_weight > 0
        else None
    )

    # =========================================================================
    # Trust Level Entry Points (weighted endorsements per level)
    # =========================================================================
    computed["weighted_for_highly_trusted"] = config.trust_level_highly_trusted / 10 * saturation
    computed["weighted_for_trusted"] = config.trust_level_trusted / 10 * saturation
    computed["weighted_for_some_trust"] = config.trust_level_some_trust / 10 * saturation

    # =========================================================================
    # Trending Decay
    # score(h) = points / (h + offset) ** exponent
    # Halves when (h + offset) grows by 2 ** (1 / exponent)
    # =========================================================================
    offset = config.trending_hours_offset
    exponent = config.trending_decay_exponent
    computed["trending_half_life_hours"] = offset * (2 ** (1 / exponent) - 1)
    computed["fresh_item_divisor"] = offset ** exponent
    window_hours = config.trending_window_days * 24
    computed["window_end_divisor"] = (window_hours + offset) ** exponent
    computed["window_end_retention"] = computed["fresh_item_divisor"] / computed["window_end_divisor"]

    # =========================================================================
    # Engagement Weight Normalization (relative proportions)
    # =========================================================================
    weights = {
        "reshare": config.engagement_weight_reshare,
        "like": config.engagement_weight_like,
        "save": config.engagement_weight_save,
        "comment": config.engagement_weight_comment,
    }
    total = sum(weights.values())
    for key, value in weights.items():
        computed[f"effective_{key}_weight"] = value / total if total > 0 else 0.25

    # =========================================================================
    # Requests
    # =========================================================================
    computed["creator_payout_fraction"] = 1 - config.platform_fee_percent / 100
    computed["max_deadline_days"] = config.max_deadline_hours / 24

    return computed
