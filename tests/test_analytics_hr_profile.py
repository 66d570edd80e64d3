"""Tests for wellscore.analytics.hr_profile -- HR model and zones."""

import logging

import pytest

from wellscore.analytics.hr_profile import HeartRateProfile, zone_name
from wellscore.config import HeartRateConfig


class TestResolve:
    def test_explicit_max(self):
        p = HeartRateProfile.resolve(resting_heart_rate=55.0, max_heart_rate=185.0, age=40)
        assert p.max_heart_rate == 185.0

    def test_age_estimate(self):
        assert HeartRateProfile.resolve(resting_heart_rate=55.0, age=30).max_heart_rate == 190.0

    def test_fallback(self):
        p = HeartRateProfile.resolve(resting_heart_rate=55.0)
        assert p.max_heart_rate == 190.0

    def test_default_resting(self):
        p = HeartRateProfile.resolve(config=HeartRateConfig(default_resting_hr=58.0))
        assert p.resting_heart_rate == 58.0

    def test_reserve(self, profile):
        assert profile.heart_rate_reserve == 130.0


class TestIntensity:
    @pytest.mark.parametrize("hr", [-50.0, 0.0, 60.0, 150.0, 190.0, 500.0, 1e9])
    def test_always_clamped(self, profile, hr):
        assert 0.0 <= profile.intensity_from_heart_rate(hr) <= 1.0
        assert 0.0 <= profile.intensity_from_heart_rate_reserve(hr) <= 1.0

    def test_percent_of_max(self, profile):
        assert profile.intensity_from_heart_rate(95.0) == pytest.approx(0.5)

    def test_karvonen(self, profile):
        # (125 - 60) / 130
        assert profile.intensity_from_heart_rate_reserve(125.0) == pytest.approx(0.5)

    def test_below_resting_is_zero(self, profile):
        assert profile.intensity_from_heart_rate_reserve(50.0) == 0.0

    def test_nan(self, profile):
        assert profile.intensity_from_heart_rate(float("nan")) == 0.0

    def test_invalid_profile_degrades_to_zero(self, caplog):
        with caplog.at_level(logging.WARNING):
            p = HeartRateProfile(max_heart_rate=60.0, resting_heart_rate=70.0)
        assert not p.is_valid
        assert p.intensity_from_heart_rate_reserve(150.0) == 0.0
        assert "Invalid heart rate profile" in caplog.text

    def test_zero_max(self):
        p = HeartRateProfile(max_heart_rate=0.0, resting_heart_rate=0.0)
        assert p.intensity_from_heart_rate(120.0) == 0.0


class TestZones:
    @pytest.mark.parametrize("hr,zone", [
        (100.0, 1),  # 53%
        (113.0, 1),  # 59%
        (114.0, 2),  # 60%
        (140.0, 3),  # 74%
        (160.0, 4),  # 84%
        (171.0, 5),  # 90%
        (200.0, 5),
    ])
    def test_heart_rate_zone(self, profile, hr, zone):
        assert profile.heart_rate_zone(hr) == zone

    def test_target_heart_rate(self, profile):
        assert profile.target_heart_rate(1) == (95.0, 114.0)
        assert profile.target_heart_rate(5) == (171.0, 190.0)

    def test_target_heart_rate_unknown_zone(self, profile):
        assert profile.target_heart_rate(9) == (60.0, 190.0)

    def test_zone_names(self):
        assert zone_name(4) == "Threshold"
        assert zone_name(0) == "Unknown"
