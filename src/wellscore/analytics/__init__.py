"""Scoring engine: turns raw physiological samples into daily scores.

Modules:
    outliers   -- Absolute-bound + modified z-score (MAD) filtering
    baseline   -- Rolling 7/28-day HRV, RHR and strain baselines
    hr_profile -- Max / resting HR, Karvonen intensity, zones
    activity   -- Workout type and swim stroke mapping
    strain     -- Strain scoring (0-21): HR-reserve TRIMP, strength, calorie and swim models
    recovery   -- Baseline-relative composite recovery (0-100)
    sleep      -- Sleep stage totals, sleep debt, bedtime consistency
    stress     -- HR-elevation stress (0-3) and daily stress summary
    acwr       -- Acute:chronic workload ratio
    summary    -- DailyRecord, the persisted unit
    pipeline   -- Daily aggregation (async fetch, score, store)
"""

from wellscore.analytics.outliers import (
    filter_outliers,
    filter_absolute,
    filter_statistical,
    is_likely_outlier,
    analyze_outliers,
    OutlierAnalysis,
)
from wellscore.analytics.baseline import compute_baselines, BaselineMetrics
from wellscore.analytics.hr_profile import HeartRateProfile, zone_name
from wellscore.analytics.activity import (
    ActivityType,
    SwimStroke,
    map_activity_type,
    map_swim_stroke,
    strength_multiplier,
)
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
)
from wellscore.analytics.recovery import (
    recovery_score,
    recovery_components,
    recovery_level,
    RecoveryComponents,
    RecoveryLevel,
)
from wellscore.analytics.sleep import summarize_sleep, sleep_debt, sleep_consistency, SleepResult
from wellscore.analytics.stress import (
    stress_level,
    stress_zone,
    compute_stress_readings,
    summarize_stress,
    StressReading,
    StressSummary,
    StressZone,
)
from wellscore.analytics.acwr import compute_acwr, acwr_status, ACWRStatus
from wellscore.analytics.summary import DailyRecord
from wellscore.analytics.pipeline import (
    build_daily_record,
    DailyAggregator,
    DayInputs,
)

__all__ = [
    # outliers
    "filter_outliers",
    "filter_absolute",
    "filter_statistical",
    "is_likely_outlier",
    "analyze_outliers",
    "OutlierAnalysis",
    # baseline
    "compute_baselines",
    "BaselineMetrics",
    # hr_profile
    "HeartRateProfile",
    "zone_name",
    # activity
    "ActivityType",
    "SwimStroke",
    "map_activity_type",
    "map_swim_stroke",
    "strength_multiplier",
    # strain
    "workout_strain",
    "calorie_strain",
    "swim_strain",
    "strength_strain",
    "daily_strain",
    "combine_strain",
    "score_workout",
    "strain_level",
    "StrainLevel",
    "WorkoutSummary",
    # recovery
    "recovery_score",
    "recovery_components",
    "recovery_level",
    "RecoveryComponents",
    "RecoveryLevel",
    # sleep
    "summarize_sleep",
    "sleep_debt",
    "sleep_consistency",
    "SleepResult",
    # stress
    "stress_level",
    "stress_zone",
    "compute_stress_readings",
    "summarize_stress",
    "StressReading",
    "StressSummary",
    "StressZone",
    # acwr
    "compute_acwr",
    "acwr_status",
    "ACWRStatus",
    # summary
    "DailyRecord",
    # pipeline
    "build_daily_record",
    "DailyAggregator",
    "DayInputs",
]
