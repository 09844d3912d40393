"""
Tests for scoring configuration and strategy presets.
"""

from pathlib import Path

import pytest

from churnguard.config import (
    BULK_REANALYSIS_CONFIG,
    IMPORT_TIME_CONFIG,
    ScoringConfig,
    ScoringStrategy,
)

CONFIGS_DIR = Path(__file__).parent.parent / "configs"


class TestScoringStrategy:

    def test_strategies_resolve_to_presets(self):
        assert ScoringStrategy.IMPORT_TIME.config is IMPORT_TIME_CONFIG
        assert ScoringStrategy.BULK_REANALYSIS.config is BULK_REANALYSIS_CONFIG

    def test_lookup_by_name(self):
        assert ScoringStrategy("bulk_reanalysis") is ScoringStrategy.BULK_REANALYSIS

    def test_presets_are_distinct(self):
        assert IMPORT_TIME_CONFIG.risk_levels != BULK_REANALYSIS_CONFIG.risk_levels
        assert IMPORT_TIME_CONFIG.inactivity_thresholds != BULK_REANALYSIS_CONFIG.inactivity_thresholds


class TestYaml:

    def test_round_trip(self, tmp_path):
        path = tmp_path / "configs" / "bulk.yaml"
        BULK_REANALYSIS_CONFIG.to_yaml(path)

        loaded = ScoringConfig.from_yaml(path)

        assert loaded.to_dict() == BULK_REANALYSIS_CONFIG.to_dict()
        assert loaded.get_risk_level(80) == "critical"

    @pytest.mark.parametrize("filename,preset", [
        ("import_time.yaml", IMPORT_TIME_CONFIG),
        ("bulk_reanalysis.yaml", BULK_REANALYSIS_CONFIG),
    ])
    def test_shipped_configs_match_presets(self, filename, preset):
        loaded = ScoringConfig.from_yaml(CONFIGS_DIR / filename)

        assert loaded.to_dict() == preset.to_dict()

    def test_partial_yaml_keeps_defaults(self, tmp_path):
        path = tmp_path / "tuned.yaml"
        path.write_text("name: tuned\nmissing_activity_points: 50\n")

        loaded = ScoringConfig.from_yaml(path)

        assert loaded.missing_activity_points == 50
        assert loaded.zero_revenue_points == IMPORT_TIME_CONFIG.zero_revenue_points

    def test_unknown_key_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("not_a_setting: 1\n")

        with pytest.raises(TypeError):
            ScoringConfig.from_yaml(path)
