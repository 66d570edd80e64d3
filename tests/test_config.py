"""Tests for wellscore.config -- defaults and JSON overrides."""

import json

import pytest

from wellscore.config import DEFAULT_CONFIG, RecoveryWeights, config_from_dict, load_config
from wellscore.errors import ConfigError


class TestDefaults:
    def test_recovery_weights(self):
        w = DEFAULT_CONFIG.recovery.weights
        assert (w.hrv, w.rhr, w.sleep, w.respiratory, w.strain) == (0.4, 0.3, 0.2, 0.1, 0.0)
        w.validate()

    def test_strain_tunables(self):
        s = DEFAULT_CONFIG.strain
        assert s.zone_weights == (0.5, 1.0, 2.0, 4.0, 8.0)
        assert (s.trimp_max, s.strain_max) == (400.0, 21.0)
        assert len(s.swim_pace_intensities) == len(s.swim_pace_steps) + 1
        assert len(s.strength_duration_factors) == len(s.strength_duration_steps_min) + 1

    def test_windows(self):
        assert DEFAULT_CONFIG.baseline.acute_days == 7
        assert DEFAULT_CONFIG.baseline.chronic_days == 28
        assert DEFAULT_CONFIG.baseline.min_recent_days == 5

    def test_to_json(self):
        data = json.loads(DEFAULT_CONFIG.to_json())
        assert data["acwr"]["caution_max"] == 1.5
        assert data["stress"]["hr_elevation_pct_steps"] == [10.0, 20.0, 30.0]


class TestConfigFromDict:
    def test_empty_is_default(self):
        assert config_from_dict({}) == DEFAULT_CONFIG

    def test_partial_override(self):
        cfg = config_from_dict({"acwr": {"caution_max": 1.6}, "recovery": {"weights": {"strain": 0.1}}})
        assert cfg.acwr.caution_max == 1.6
        assert cfg.acwr.optimal_max == 1.3
        assert cfg.recovery.weights.strain == 0.1
        assert cfg.recovery.weights.hrv == 0.4

    def test_int_coerced(self):
        cfg = config_from_dict({"sleep": {"target_hours": 7}, "baseline": {"acute_days": 10.0}})
        assert cfg.sleep.target_hours == 7.0
        assert cfg.baseline.acute_days == 10
        assert isinstance(cfg.baseline.acute_days, int)

    def test_tuple_override(self):
        cfg = config_from_dict({"stress": {"hr_elevation_pct_steps": [15, 25, 35]}})
        assert cfg.stress.hr_elevation_pct_steps == (15.0, 25.0, 35.0)

    @pytest.mark.parametrize("data", [
        {"nope": {}},
        {"acwr": {"nope": 1.0}},
        {"acwr": 1.0},
        {"acwr": {"caution_max": "high"}},
        {"acwr": {"caution_max": True}},
        {"stress": {"hr_elevation_pct_steps": [10, 20]}},
    ])
    def test_invalid(self, data):
        with pytest.raises(ConfigError):
            config_from_dict(data)

    def test_weights_validated(self):
        with pytest.raises(ConfigError):
            config_from_dict({"recovery": {"weights": {"hrv": -0.1}}})
        with pytest.raises(ConfigError):
            RecoveryWeights(hrv=0, rhr=0, sleep=0, respiratory=0).validate()

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            config_from_dict({"nope": {}})


class TestLoadConfig:
    def test_loads_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"sleep": {"target_hours": 7.5}}))
        assert load_config(path).sleep.target_hours == 7.5

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.json")

    def test_bad_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{")
        with pytest.raises(ConfigError, match="invalid JSON"):
            load_config(path)
