"""
Ranking configuration: trust, trending, search, and cache parameters.

RankingConfig defaults are defined here. The server may pass a dict
(e.g. from a JSON file at RANKING_CONFIG_PATH); from_dict() merges it with these defaults.
"""

from typing import Dict, Optional

from pydantic import BaseModel, model_validator


class RankingConfig(BaseModel):
    """Configuration for trust scoring, trending rank, and discovery search."""

    # -------------------------------------------------------------------------
    # Trust Score
    # weighted = direct * trust_direct_weight + network * trust_network_weight
    # score = min(10, weighted / trust_saturation_weight * 10)
    # -------------------------------------------------------------------------

    # Weight per endorsement from a direct connection (1 hop).
    trust_direct_weight: float = 0.75
    # Weight per endorsement from a connection-of-connection (2 hops).
    trust_network_weight: float = 0.25
    # Weighted endorsements at which the score saturates at 10.
    # 5.0 = about 7 direct friends, or 20 friends-of-friends.
    trust_saturation_weight: float = 5.0

    # Level thresholds (score >= threshold).
    trust_level_highly_trusted: float = 8.0
    trust_level_trusted: float = 6.0
    trust_level_some_trust: float = 4.0

    # -------------------------------------------------------------------------
    # Trending
    # points = reshares*w_reshare + likes*w_like + saves*w_save + comments*w_comment
    # trending = points / (hours + trending_hours_offset) ** trending_decay_exponent
    # -------------------------------------------------------------------------

    engagement_weight_reshare: float = 2.0
    engagement_weight_like: float = 1.5
    engagement_weight_save: float = 1.5
    engagement_weight_comment: float = 1.0

    # Floor added to age in hours; keeps brand-new items from spiking.
    trending_hours_offset: float = 2.0
    # 0.5 = square-root decay.
    trending_decay_exponent: float = 0.5

    # Only items created within this many days are eligible to trend.
    trending_window_days: int = 30
    # Max candidates ranked per trending request (fetch-then-rank).
    trending_candidate_pool_size: int = 100

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    default_page_size: int = 20
    max_page_size: int = 100

    # -------------------------------------------------------------------------
    # Caching (seconds). Trending results are keyed by time bucket of this width.
    # -------------------------------------------------------------------------

    trending_cache_ttl_seconds: int = 300
    trust_cache_ttl_seconds: int = 120

    # -------------------------------------------------------------------------
    # Discovery requests
    # -------------------------------------------------------------------------

    # Percent of the bounty withheld on award.
    platform_fee_percent: float = 10.0
    min_deadline_hours: int = 1
    max_deadline_hours: int = 2016

    @model_validator(mode="after")
    def check_weights(self):
        if self.trust_direct_weight <= self.trust_network_weight:
            raise ValueError(
                "trust_direct_weight must exceed trust_network_weight, got "
                f"{self.trust_direct_weight} <= {self.trust_network_weight}"
            )
        if self.trust_network_weight < 0:
            raise ValueError("trust_network_weight must be >= 0")
        if self.trust_saturation_weight <= 0:
            raise ValueError("trust_saturation_weight must be > 0")
        if self.trending_hours_offset <= 0:
            raise ValueError("trending_hours_offset must be > 0")
        if self.trending_decay_exponent <= 0:
            raise ValueError("trending_decay_exponent must be > 0")
        if self.trending_candidate_pool_size < 1:
            raise ValueError("trending_candidate_pool_size must be >= 1")
        if not 0 <= self.platform_fee_percent <= 100:
            raise ValueError("platform_fee_percent must be within [0, 100]")
        return self

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "RankingConfig":
        """Create config from dictionary (e.g., loaded from JSON)."""
        flat = {}
        if "trust" in config_dict:
            tr = config_dict["trust"]
            if "direct_weight" in tr:
                flat["trust_direct_weight"] = tr["direct_weight"]
            if "network_weight" in tr:
                flat["trust_network_weight"] = tr["network_weight"]
            if "saturation_weight" in tr:
                flat["trust_saturation_weight"] = tr["saturation_weight"]
        if "trending" in config_dict:
            td = config_dict["trending"]
            weights = td.get("engagement_weights", {})
            for key in ("reshare", "like", "save", "comment"):
                if key in weights:
                    flat[f"engagement_weight_{key}"] = weights[key]
            for key in ("hours_offset", "decay_exponent", "window_days", "candidate_pool_size"):
                if key in td:
                    flat[f"trending_{key}"] = td[key]
        if "search" in config_dict:
            flat.update(config_dict["search"])
        if "cache" in config_dict:
            ca = config_dict["cache"]
            if "trending_ttl_seconds" in ca:
                flat["trending_cache_ttl_seconds"] = ca["trending_ttl_seconds"]
            if "trust_ttl_seconds" in ca:
                flat["trust_cache_ttl_seconds"] = ca["trust_ttl_seconds"]
        if "requests" in config_dict:
            flat.update(config_dict["requests"])
        # Flat keys are accepted as-is
        flat.update({k: v for k, v in config_dict.items() if not isinstance(v, dict)})
        allowed = set(cls.model_fields)
        filtered = {k: v for k, v in flat.items() if k in allowed}
        return cls.model_validate(filtered)


DEFAULT_CONFIG = RankingConfig()


def resolve_config(config: Optional["RankingConfig"]) -> "RankingConfig":
    """Return config or DEFAULT_CONFIG when none is provided."""
    return config if config is not None else DEFAULT_CONFIG
