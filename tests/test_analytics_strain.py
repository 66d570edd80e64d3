"""Tests for wellscore.analytics.strain -- HR-reserve TRIMP strain."""

import math
from datetime import datetime, timedelta

import pytest

from wellscore.analytics.activity import ActivityType, SwimStroke
from wellscore.analytics.strain import (
    workout_strain,
    calorie_strain,
    swim_strain,
    strength_strain,
    daily_strain,
    combine_strain,
    score_workout,
    strain_level,
    StrainLevel,
    WorkoutSummary,
    _classify_zone,
    ZONE_LABELS,
)
from wellscore.config import StrainConfig
from wellscore.models import Sample

from tests.conftest import MIDNIGHT, make_samples, make_workout

BOUNDARIES = StrainConfig().zone_boundaries
RUN_START = datetime(2026, 3, 2, 7, 0)

# 85% of the 130 bpm reserve above a resting HR of 60
HR_85_PCT_RESERVE = 60.0 + 0.85 * 130.0


class TestClassifyZone:
    def test_below_zone_1(self):
        assert _classify_zone(0.40, BOUNDARIES) == 0

    def test_zone_4(self):
        assert _classify_zone(0.85, BOUNDARIES) == 4

    def test_boundary_50(self):
        assert _classify_zone(0.50, BOUNDARIES) == 1

    def test_at_100_percent(self):
        assert _classify_zone(1.00, BOUNDARIES) == 5


class TestWorkoutStrain:
    def test_empty(self, profile):
        assert workout_strain([], profile) == 0.0

    def test_hard_run(self, profile):
        # 30 min in zone 4: TRIMP 120 -> 21 * (1 - e^-0.9)
        samples = make_samples([HR_85_PCT_RESERVE] * 30, RUN_START)
        score = workout_strain(samples, profile)
        assert score == pytest.approx(21.0 * (1.0 - math.exp(-0.9)))
        assert 10.0 <= score <= 15.0
        assert strain_level(score) is StrainLevel.HARD

    def test_below_zone_1_no_strain(self, profile):
        assert workout_strain(make_samples([100.0] * 60), profile) == 0.0

    def test_zero_samples_contribute_nothing(self, profile):
        assert workout_strain(make_samples([0.0] * 30), profile) == 0.0
        base = make_samples([HR_85_PCT_RESERVE] * 30, RUN_START)
        dropout = make_samples([0.0] * 10, RUN_START + timedelta(minutes=30))
        assert workout_strain(base + dropout, profile) == pytest.approx(workout_strain(base, profile))

    def test_monotonic_in_intensity(self, profile):
        scores = [workout_strain(make_samples([float(hr)] * 30), profile) for hr in range(60, 205, 5)]
        assert scores == sorted(scores)

    def test_bounded(self, profile):
        score = workout_strain(make_samples([190.0] * 2000), profile)
        assert 20.0 < score <= 21.0

    def test_gap_is_capped(self, profile):
        # Two samples an hour apart each count for 5 minutes only
        samples = [
            Sample(RUN_START, HR_85_PCT_RESERVE),
            Sample(RUN_START + timedelta(hours=1), HR_85_PCT_RESERVE),
        ]
        expected = workout_strain(make_samples([HR_85_PCT_RESERVE] * 10), profile)
        assert workout_strain(samples, profile) == pytest.approx(expected)

    def test_single_sample_counts_one_minute(self, profile):
        one = workout_strain([Sample(RUN_START, HR_85_PCT_RESERVE)], profile)
        assert one == pytest.approx(21.0 * (1.0 - math.exp(-4.0 / (400.0 / 3.0))))

    def test_order_independent(self, profile):
        samples = make_samples([120.0, 150.0, 170.0, 180.0, 140.0], RUN_START)
        assert workout_strain(list(reversed(samples)), profile) == workout_strain(samples, profile)

    def test_swim_multiplier(self, profile):
        samples = make_samples([HR_85_PCT_RESERVE] * 30, RUN_START)
        base = workout_strain(samples, profile)
        assert workout_strain(samples, profile, SwimStroke.BUTTERFLY) == pytest.approx(base * 1.4)
        assert workout_strain(samples, profile, SwimStroke.KICKBOARD) == pytest.approx(base)

    def test_swim_multiplier_still_capped(self, profile):
        samples = make_samples([190.0] * 600)
        assert workout_strain(samples, profile, SwimStroke.BUTTERFLY) == 21.0

    def test_invalid_profile_gives_zero(self):
        from wellscore.analytics.hr_profile import HeartRateProfile

        bad = HeartRateProfile(max_heart_rate=50.0, resting_heart_rate=60.0)
        assert workout_strain(make_samples([170.0] * 30), bad) == 0.0


class TestCombineStrain:
    def test_empty(self):
        assert combine_strain([]) == 0.0

    def test_single_workout_unchanged(self):
        assert combine_strain([12.0]) == pytest.approx(12.0)

    def test_two_workouts_saturate(self):
        combined = combine_strain([12.0, 12.0])
        assert combined == pytest.approx(21.0 * (1.0 - (9.0 / 21.0) ** 2))
        assert 12.0 < combined < 21.0

    def test_never_exceeds_ceiling(self):
        assert combine_strain([20.0] * 10) <= 21.0
        assert combine_strain([21.0, 5.0]) == pytest.approx(21.0)


class TestScoreWorkout:
    def test_run_summary(self, profile):
        record = make_workout(RUN_START, 30, HR_85_PCT_RESERVE, calories=410.0)
        summary = score_workout(record, profile)
        assert summary.id == "w1"
        assert summary.activity_type is ActivityType.RUNNING
        assert summary.duration == 1800.0
        assert summary.calories == 410.0
        assert summary.avg_heart_rate == pytest.approx(HR_85_PCT_RESERVE, abs=0.1)
        assert summary.max_heart_rate == pytest.approx(HR_85_PCT_RESERVE, abs=0.1)
        assert summary.heart_rate_intensity == pytest.approx(0.85, abs=1e-3)
        assert summary.zone_minutes["Zone 4"] == 30.0
        assert summary.strain == pytest.approx(12.46, abs=0.01)
        assert summary.stroke is None

    def test_swim_applies_stroke(self, profile):
        record = make_workout(RUN_START, 30, HR_85_PCT_RESERVE, activity_type="HKWorkoutActivityTypeSwimming",
                              stroke_style="breaststroke")
        summary = score_workout(record, profile)
        assert summary.activity_type is ActivityType.SWIMMING
        assert summary.stroke is SwimStroke.BREASTSTROKE
        assert summary.strain == pytest.approx(12.46 * 1.2, abs=0.02)

    def test_no_heart_rate(self, profile):
        record = make_workout(RUN_START, 0, [], activity_type="yoga")
        summary = score_workout(record, profile)
        assert summary.strain == 0.0
        assert summary.avg_heart_rate is None
        assert set(summary.zone_minutes) == set(ZONE_LABELS)

    def test_unknown_activity(self, profile):
        record = make_workout(RUN_START, 10, 120.0, activity_type="underwater_basket_weaving")
        assert score_workout(record, profile).activity_type is ActivityType.OTHER

    def test_dict_round_trip(self, profile):
        summary = score_workout(make_workout(RUN_START, 20, 150.0, stroke_style="mixed",
                                             activity_type="swimming"), profile)
        assert WorkoutSummary.from_dict(summary.to_dict()) == summary


class TestCalorieStrain:
    def test_run_without_heart_rate(self, profile):
        # 8 kcal/min -> 0.667 * 1.1 running multiplier, over 30 min
        record = make_workout(RUN_START, 30, [], calories=240.0)
        summary = score_workout(record, profile)
        assert summary.avg_heart_rate is None
        assert summary.strain == pytest.approx(3.0 * math.log2(0.7333333 * 30 + 72.0 + 1.0), abs=0.01)
        assert summary.strain > 0.0

    def test_activity_multiplier(self):
        walk = calorie_strain(60, 300.0, ActivityType.WALKING)
        run = calorie_strain(60, 300.0, ActivityType.RUNNING)
        assert 0.0 < walk < run

    def test_intensity_capped(self):
        # 30 kcal/min counts as 12
        assert calorie_strain(10, 300.0) == pytest.approx(3.0 * math.log2(10.0 + 90.0 + 1.0))

    def test_no_duration(self):
        assert calorie_strain(0, 300.0) == 0.0


class TestSwimStrain:
    def test_swim_without_heart_rate(self, profile):
        # 3 min/100 m -> easy pace 0.5; 5 kcal/min -> 0.417
        record = make_workout(RUN_START, 30, [], activity_type="swimming", calories=150.0, distance=1000.0)
        summary = score_workout(record, profile)
        assert summary.activity_type is ActivityType.SWIMMING
        assert summary.strain == pytest.approx(3.0 * math.log2(60.0), abs=0.01)

    def test_long_swim_saturates(self, profile):
        record = make_workout(RUN_START, 60, [], activity_type="swimming", calories=550.0, distance=2500.0)
        assert score_workout(record, profile).strain == 21.0

    def test_faster_pace_scores_higher(self):
        easy = swim_strain(30, 150.0, distance=1000.0)
        hard = swim_strain(30, 150.0, distance=2000.0)
        assert hard > easy

    def test_unknown_distance_is_easy_pace(self):
        assert swim_strain(30, 150.0) == pytest.approx(swim_strain(30, 150.0, distance=1000.0))

    def test_stroke(self):
        base = swim_strain(30, 150.0, distance=1000.0)
        assert swim_strain(30, 150.0, 1000.0, SwimStroke.BACKSTROKE) == pytest.approx(base * 1.1)
        assert swim_strain(30, 150.0, 1000.0, SwimStroke.BUTTERFLY) == 21.0


class TestStrengthStrain:
    # 55% of the heart rate reserve -> 0.85; 6 kcal/min -> 0.8
    LIFT_HR = 60.0 + 0.55 * 130.0

    def test_session_with_heart_rate(self, profile):
        record = make_workout(RUN_START, 60, self.LIFT_HR, activity_type="HKWorkoutActivityTypeTraditionalStrengthTraining",
                              calories=360.0)
        summary = score_workout(record, profile)
        assert summary.activity_type is ActivityType.STRENGTH_TRAINING
        blended = 0.85 * 0.65 + 0.8 * 0.35
        assert summary.strain == pytest.approx(blended ** 1.3 * 1.15 * 16.0, abs=0.01)

    def test_low_heart_rate_lifting_still_scores(self, profile):
        lift = score_workout(
            make_workout(RUN_START, 60, 100.0, activity_type="strength_training", calories=360.0), profile,
        )
        run = score_workout(make_workout(RUN_START, 60, 100.0, calories=360.0), profile)
        assert run.strain == 0.0
        assert lift.strain > 5.0

    def test_without_heart_rate(self, profile):
        assert strength_strain(60, 360.0, None, profile) == pytest.approx(0.8 ** 1.3 * 1.15 * 16.0)

    def test_format_multiplier(self, profile):
        base = strength_strain(45, 270.0, None, profile)
        assert strength_strain(45, 270.0, None, profile, 1.15) == pytest.approx(base * 1.15)
        circuit = score_workout(
            make_workout(RUN_START, 45, [], activity_type="functionalStrengthTraining", calories=270.0), profile,
        )
        assert circuit.strain == pytest.approx(base * 1.15, abs=0.01)

    @pytest.mark.parametrize("minutes,factor", [
        (20, 0.6),
        (30, 0.8),
        (59, 1.0),
        (89, 1.25),
        (120, 1.35),
    ])
    def test_duration_factor(self, profile, minutes, factor):
        score = strength_strain(minutes, 6.0 * minutes, None, profile)
        assert score == pytest.approx(0.8 ** 1.3 * 16.0 * factor)

    def test_capped(self, profile):
        assert strength_strain(120, 1500.0, 185.0, profile, 1.15) == 21.0

    def test_no_duration(self, profile):
        assert strength_strain(0, 100.0, 150.0, profile) == 0.0


class TestDailyStrain:
    def test_no_workouts(self, profile):
        assert daily_strain([], profile) == 0.0

    def test_two_workouts(self, profile):
        morning = make_workout(RUN_START, 30, HR_85_PCT_RESERVE, workout_id="a")
        evening = make_workout(RUN_START + timedelta(hours=10), 30, HR_85_PCT_RESERVE, workout_id="b")
        single = score_workout(morning, profile).strain
        day = daily_strain([morning, evening], profile)
        assert single < day < 21.0
        assert day == pytest.approx(combine_strain([single, single]))


class TestStrainLevel:
    @pytest.mark.parametrize("score,level", [
        (0.0, StrainLevel.LIGHT),
        (4.9, StrainLevel.LIGHT),
        (5.0, StrainLevel.MODERATE),
        (10.0, StrainLevel.HARD),
        (14.9, StrainLevel.HARD),
        (15.0, StrainLevel.VERY_HARD),
        (21.0, StrainLevel.VERY_HARD),
    ])
    def test_bands(self, score, level):
        assert strain_level(score) is level
