"""
Configuration Tests

Tests RankingConfig defaults and invariants, grouped JSON loading, computed
parameters, and ServerConfig environment loading.

Run:
----
    pytest tests/test_config.py -v
"""

import json

import pydantic
import pytest

from discovery.computed_params import compute_parameters
from discovery.models.config import DEFAULT_CONFIG, RankingConfig, resolve_config
from discovery_api.config import ServerConfig


class TestRankingConfig:
    def test_defaults(self):
        c = DEFAULT_CONFIG
        assert (c.trust_direct_weight, c.trust_network_weight) == (0.75, 0.25)
        assert c.trust_saturation_weight == 5.0
        assert (c.engagement_weight_reshare, c.engagement_weight_like) == (2.0, 1.5)
        assert (c.engagement_weight_save, c.engagement_weight_comment) == (1.5, 1.0)
        assert (c.trending_hours_offset, c.trending_decay_exponent) == (2.0, 0.5)
        assert c.trending_window_days == 30
        assert c.trending_candidate_pool_size == 100

    def test_resolve_config(self):
        assert resolve_config(None) is DEFAULT_CONFIG
        custom = RankingConfig(trending_window_days=7)
        assert resolve_config(custom) is custom

    @pytest.mark.parametrize(
        "overrides",
        [
            {"trust_direct_weight": 0.2, "trust_network_weight": 0.25},
            {"trust_saturation_weight": 0},
            {"trending_hours_offset": 0},
            {"trending_decay_exponent": -1},
            {"trending_candidate_pool_size": 0},
            {"platform_fee_percent": 120},
        ],
    )
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(pydantic.ValidationError):
            RankingConfig(**overrides)

    def test_from_dict_grouped_sections(self):
        config = RankingConfig.from_dict(
            {
                "trust": {"direct_weight": 1.0, "network_weight": 0.5, "saturation_weight": 8.0},
                "trending": {
                    "engagement_weights": {"reshare": 3.0, "comment": 0.5},
                    "hours_offset": 1.0,
                    "window_days": 14,
                },
                "search": {"default_page_size": 10},
                "cache": {"trending_ttl_seconds": 60},
                "requests": {"platform_fee_percent": 5},
                "unknown_key": 1,
            }
        )
        assert config.trust_direct_weight == 1.0
        assert config.trust_saturation_weight == 8.0
        assert config.engagement_weight_reshare == 3.0
        assert config.engagement_weight_comment == 0.5
        assert config.engagement_weight_like == 1.5
        assert config.trending_hours_offset == 1.0
        assert config.trending_window_days == 14
        assert config.default_page_size == 10
        assert config.trending_cache_ttl_seconds == 60
        assert config.platform_fee_percent == 5

    def test_from_dict_flat_keys(self):
        assert RankingConfig.from_dict({"trending_window_days": 3}).trending_window_days == 3


class TestComputedParameters:
    def test_defaults(self):
        computed = compute_parameters(DEFAULT_CONFIG)
        assert computed["direct_endorsements_to_saturate"] == 7
        assert computed["network_endorsements_to_saturate"] == 20
        assert computed["score_per_direct_endorsement"] == pytest.approx(1.5)
        assert computed["direct_to_network_ratio"] == pytest.approx(3.0)
        # (h + 2) ** 0.5 doubles when h + 2 quadruples: h = 6
        assert computed["trending_half_life_hours"] == pytest.approx(6.0)
        assert computed["creator_payout_fraction"] == pytest.approx(0.9)
        weights = [computed[f"effective_{k}_weight"] for k in ("reshare", "like", "save", "comment")]
        assert sum(weights) == pytest.approx(1.0)

    def test_zero_network_weight(self):
        computed = compute_parameters(RankingConfig(trust_network_weight=0.0))
        assert computed["network_endorsements_to_saturate"] is None
        assert computed["direct_to_network_ratio"] is None


class TestServerConfig:
    def test_from_env(self, monkeypatch, tmp_path):
        ranking = tmp_path / "ranking.json"
        ranking.write_text(json.dumps({"trending": {"window_days": 7}}))
        monkeypatch.setenv("PORT", "9001")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("DATA_SOURCE", "JSON")
        monkeypatch.setenv("RANKING_CONFIG_PATH", str(ranking))
        monkeypatch.setenv("REDIS_URL", "redis://cache:6379/1")
        config = ServerConfig.from_env()
        assert config.port == 9001
        assert config.log_level == "DEBUG"
        assert config.data_source == "json"
        assert config.redis_url == "redis://cache:6379/1"
        assert config.load_ranking_config().trending_window_days == 7

    def test_unknown_data_source_falls_back_to_memory(self, monkeypatch):
        monkeypatch.setenv("DATA_SOURCE", "cassandra")
        assert ServerConfig.from_env().data_source == "memory"

    def test_validate_reports_missing_json(self, tmp_path):
        config = ServerConfig(data_source="json", content_json_path=tmp_path / "missing.json")
        ok, errors = config.validate()
        assert ok is False
        assert any("missing.json" in e for e in errors)
