"""Strain / training load scoring (HR-reserve TRIMP variant).

Each heart rate sample is classified into a zone by its Karvonen intensity
and credited with the time until the next sample.  Zone-weighted minutes
(TRIMP) are mapped onto the 0-21 scale with an exponential saturation
curve, so long or intense sessions approach 21 but never pass it.

Two kinds of workout are scored differently:

- Strength sessions alternate sets and rests, so their average HR stays
  low.  They blend stepped HR-reserve and kcal/min intensities and scale
  the result by session length and format.
- Workouts without heart rate fall back to energy expenditure:
  ``log2(intensity * minutes + 0.3 * kcal + 1) * 3``.  Swims use pace per
  100 m plus kcal/min for the intensity, other activities kcal/min scaled
  per activity type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Sequence

import numpy as np

from wellscore.analytics.activity import (
    ActivityType,
    SwimStroke,
    map_activity_type,
    map_swim_stroke,
    strength_multiplier,
)
from wellscore.analytics.hr_profile import HeartRateProfile
from wellscore.config import DEFAULT_CONFIG, StrainConfig
from wellscore.models import Sample, WorkoutRecord


ZONE_LABELS = ["Zone 1", "Zone 2", "Zone 3", "Zone 4", "Zone 5"]


class StrainLevel(str, Enum):
    LIGHT = "light"
    MODERATE = "moderate"
    HARD = "hard"
    VERY_HARD = "very_hard"


@dataclass(frozen=True)
class WorkoutSummary:
    """One scored workout, as stored on the daily record."""

    id: str
    activity_type: ActivityType
    start: datetime
    end: datetime
    duration: float  # seconds
    calories: float
    strain: float  # 0-21
    distance: float | None = None  # meters
    avg_heart_rate: float | None = None
    max_heart_rate: float | None = None
    heart_rate_intensity: float | None = None  # mean Karvonen intensity, 0-1
    zone_minutes: dict[str, float] = field(default_factory=dict)
    stroke: SwimStroke | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "activity_type": self.activity_type.value,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "duration": self.duration,
            "calories": self.calories,
            "strain": self.strain,
            "distance": self.distance,
            "avg_heart_rate": self.avg_heart_rate,
            "max_heart_rate": self.max_heart_rate,
            "heart_rate_intensity": self.heart_rate_intensity,
            "zone_minutes": dict(self.zone_minutes),
            "stroke": self.stroke.value if self.stroke else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutSummary":
        stroke = data.get("stroke")
        return cls(
            id=data["id"],
            activity_type=ActivityType(data.get("activity_type", "other")),
            start=datetime.fromisoformat(data["start"]),
            end=datetime.fromisoformat(data["end"]),
            duration=float(data.get("duration", 0.0)),
            calories=float(data.get("calories", 0.0)),
            strain=float(data.get("strain", 0.0)),
            distance=data.get("distance"),
            avg_heart_rate=data.get("avg_heart_rate"),
            max_heart_rate=data.get("max_heart_rate"),
            heart_rate_intensity=data.get("heart_rate_intensity"),
            zone_minutes=dict(data.get("zone_minutes") or {}),
            stroke=SwimStroke(stroke) if stroke else None,
        )

    def __repr__(self) -> str:
        return (
            f"WorkoutSummary({self.activity_type.value}, "
            f"{self.duration / 60:.0f}min, strain={self.strain:.1f}/21)"
        )


# ---------------------------------------------------------------------------
# Zone accumulation
# ---------------------------------------------------------------------------


def _classify_zone(intensity: float, boundaries: Sequence[float]) -> int:
    """Return 0-based zone index (0 = below zone 1, 1..5 = zone 1..5)."""
    for i, upper in enumerate(boundaries):
        if intensity < upper:
            return i
    return len(boundaries) - 1


def _sample_durations(samples: Sequence[Sample], cfg: StrainConfig) -> list[float]:
    """Seconds credited to each (time-sorted) sample.

    A sample counts until the next one, capped at ``max_sample_gap_sec`` so
    that sensor gaps are not filled in.  The last sample reuses the
    previous interval.
    """
    n = len(samples)
    if n == 1:
        return [cfg.default_sample_sec]
    gaps = [
        min((samples[i + 1].timestamp - samples[i].timestamp).total_seconds(), cfg.max_sample_gap_sec)
        for i in range(n - 1)
    ]
    return gaps + [gaps[-1]]


def _accumulate(
    samples: Sequence[Sample],
    profile: HeartRateProfile,
    cfg: StrainConfig,
) -> tuple[float, dict[str, float]]:
    """Return (TRIMP in weighted minutes, minutes per zone label)."""
    zone_mins = {label: 0.0 for label in ZONE_LABELS}
    if not samples:
        return 0.0, zone_mins

    ordered = sorted(samples)
    trimp = 0.0
    for sample, seconds in zip(ordered, _sample_durations(ordered, cfg)):
        if sample.value <= 0:
            continue  # sensor dropout
        intensity = profile.intensity_from_heart_rate_reserve(sample.value)
        zone_idx = _classify_zone(intensity, cfg.zone_boundaries)
        if zone_idx >= 1:
            minutes = seconds / 60.0
            zone_mins[ZONE_LABELS[zone_idx - 1]] += minutes
            trimp += minutes * cfg.zone_weights[zone_idx - 1]
    return trimp, zone_mins


def _trimp_to_strain(trimp: float, cfg: StrainConfig) -> float:
    if trimp <= 0:
        return 0.0
    return cfg.strain_max * (1.0 - float(np.exp(-trimp / (cfg.trimp_max / 3.0))))


def _step_value(x: float, steps: Sequence[float], values: Sequence[float]) -> float:
    """``values[i]`` for the first ``x < steps[i]``, else the last value."""
    for upper, value in zip(steps, values):
        if x < upper:
            return value
    return values[-1]


def _log_strain(intensity: float, minutes: float, calories: float, cfg: StrainConfig) -> float:
    raw = intensity * minutes + max(calories, 0.0) * cfg.calorie_strain_weight + 1.0
    return float(np.log2(raw)) * cfg.log_strain_scale


# ---------------------------------------------------------------------------
# Scoring without heart rate / strength sessions
# ---------------------------------------------------------------------------


def calorie_strain(
    minutes: float,
    calories: float,
    activity: ActivityType = ActivityType.OTHER,
    config: StrainConfig | None = None,
) -> float:
    """Strain from energy expenditure alone, for workouts without HR."""
    cfg = config or DEFAULT_CONFIG.strain
    if minutes <= 0:
        return 0.0
    intensity = min(calories / minutes / cfg.calorie_intensity_max_kcal_min, 1.0)
    intensity = max(intensity, 0.0) * activity.calorie_multiplier
    return float(np.clip(_log_strain(intensity, minutes, calories, cfg), 0.0, cfg.strain_max))


def swim_strain(
    minutes: float,
    calories: float,
    distance: float | None = None,
    stroke: SwimStroke | None = None,
    config: StrainConfig | None = None,
) -> float:
    """Strain of a swim from pace and energy expenditure.

    Args:
        minutes: Session length.
        calories: Active kcal.
        distance: Meters swum; without it the pace intensity is the
            ``swim_unknown_pace_intensity`` default.
        stroke: Scales the result by the stroke's energy cost.
        config: Pace steps, weights and log scale.

    Returns:
        Strain in [0, 21].
    """
    cfg = config or DEFAULT_CONFIG.strain
    if minutes <= 0:
        return 0.0
    if distance:
        pace = minutes / (distance / 100.0)  # min per 100 m
        pace_intensity = _step_value(pace, cfg.swim_pace_steps, cfg.swim_pace_intensities)
    else:
        pace_intensity = cfg.swim_unknown_pace_intensity
    calorie_intensity = max(calories, 0.0) / minutes / cfg.calorie_intensity_max_kcal_min
    intensity = pace_intensity * cfg.swim_pace_weight + calorie_intensity * cfg.swim_calorie_weight

    score = _log_strain(intensity, minutes, calories, cfg)
    if stroke is not None:
        score *= stroke.multiplier
    return float(np.clip(score, 0.0, cfg.strain_max))


def strength_strain(
    minutes: float,
    calories: float,
    avg_heart_rate: float | None,
    profile: HeartRateProfile,
    type_multiplier: float = 1.0,
    config: StrainConfig | None = None,
) -> float:
    """Strain of a strength session.

    Stepped HR-reserve intensity (from the session's average HR) is
    blended with stepped kcal/min intensity; without usable HR only the
    calorie part counts.  ``intensity ** 1.3`` is then scaled by a
    duration factor that grows gently with session length, and by the
    session format's multiplier.
    """
    cfg = config or DEFAULT_CONFIG.strain
    if minutes <= 0:
        return 0.0
    calorie_intensity = _step_value(
        calories / minutes, cfg.strength_kcal_min_steps, cfg.strength_calorie_intensities,
    )
    if avg_heart_rate is not None and profile.is_valid:
        reserve = profile.intensity_from_heart_rate_reserve(avg_heart_rate)
        hr_intensity = _step_value(reserve, cfg.strength_hr_reserve_steps, cfg.strength_hr_intensities)
        intensity = hr_intensity * cfg.strength_hr_weight + calorie_intensity * (1.0 - cfg.strength_hr_weight)
    else:
        intensity = calorie_intensity

    factor = _step_value(minutes, cfg.strength_duration_steps_min, cfg.strength_duration_factors)
    score = intensity ** cfg.strength_exponent * factor * cfg.strength_scale * type_multiplier
    return float(np.clip(score, 0.0, cfg.strain_max))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def workout_strain(
    heart_rate: Sequence[Sample],
    profile: HeartRateProfile,
    stroke: SwimStroke | None = None,
    config: StrainConfig | None = None,
) -> float:
    """Strain of one workout from its heart rate samples.

    Args:
        heart_rate: HR samples (bpm) in any order.
        profile: Max / resting HR used for Karvonen intensity.
        stroke: Swim stroke, for swimming workouts only.
        config: Zone boundaries and weights, TRIMP scale.

    Returns:
        Strain in [0, 21].
    """
    cfg = config or DEFAULT_CONFIG.strain
    trimp, _ = _accumulate(heart_rate, profile, cfg)
    score = _trimp_to_strain(trimp, cfg)
    if stroke is not None:
        score *= stroke.multiplier
    return float(np.clip(score, 0.0, cfg.strain_max))


def combine_strain(scores: Sequence[float], config: StrainConfig | None = None) -> float:
    """Combine workout strains into a day's strain.

    Each workout closes the same fraction of the remaining distance to the
    ceiling, so ``21 * (1 - prod(1 - s_i / 21))``: one workout keeps its
    score, more workouts saturate towards 21.
    """
    cfg = config or DEFAULT_CONFIG.strain
    remaining = 1.0
    for s in scores:
        frac = min(max(s, 0.0), cfg.strain_max) / cfg.strain_max
        remaining *= 1.0 - frac
    return float(cfg.strain_max * (1.0 - remaining))


def score_workout(
    record: WorkoutRecord,
    profile: HeartRateProfile,
    config: StrainConfig | None = None,
) -> WorkoutSummary:
    """Build the WorkoutSummary for a raw workout.

    Strength sessions use :func:`strength_strain`.  Other workouts with
    heart rate use TRIMP; without it, swims use :func:`swim_strain` and
    everything else :func:`calorie_strain`.
    """
    cfg = config or DEFAULT_CONFIG.strain
    activity = map_activity_type(record.activity_type)
    stroke = map_swim_stroke(record.stroke_style) if activity is ActivityType.SWIMMING else None
    minutes = record.duration_sec / 60.0

    hr = np.asarray([s.value for s in record.heart_rate if s.value > 0], dtype=np.float64)
    if hr.size:
        avg_hr = round(float(np.mean(hr)), 1)
        max_hr = round(float(np.max(hr)), 1)
        intensity = round(float(np.mean([profile.intensity_from_heart_rate_reserve(v) for v in hr])), 3)
    else:
        avg_hr = max_hr = intensity = None

    trimp, zone_mins = _accumulate(record.heart_rate, profile, cfg)
    if activity is ActivityType.STRENGTH_TRAINING:
        score = strength_strain(
            minutes, record.calories, avg_hr, profile, strength_multiplier(record.activity_type), cfg,
        )
    elif hr.size:
        score = _trimp_to_strain(trimp, cfg)
        if stroke is not None:
            score *= stroke.multiplier
        score = float(np.clip(score, 0.0, cfg.strain_max))
    elif activity is ActivityType.SWIMMING:
        score = swim_strain(minutes, record.calories, record.distance, stroke, cfg)
    else:
        score = calorie_strain(minutes, record.calories, activity, cfg)

    return WorkoutSummary(
        id=record.id,
        activity_type=activity,
        start=record.start,
        end=record.end,
        duration=record.duration_sec,
        calories=record.calories,
        strain=round(score, 2),
        distance=record.distance,
        avg_heart_rate=avg_hr,
        max_heart_rate=max_hr,
        heart_rate_intensity=intensity,
        zone_minutes={k: round(v, 1) for k, v in zone_mins.items()},
        stroke=stroke,
    )


def daily_strain(
    workouts: Sequence[WorkoutRecord],
    profile: HeartRateProfile,
    config: StrainConfig | None = None,
) -> float:
    """Day strain from raw workouts (0 when there are none)."""
    summaries = [score_workout(w, profile, config) for w in workouts]
    return combine_strain([s.strain for s in summaries], config)


def strain_level(score: float, config: StrainConfig | None = None) -> StrainLevel:
    cfg = config or DEFAULT_CONFIG.strain
    if score < cfg.light_max:
        return StrainLevel.LIGHT
    if score < cfg.moderate_max:
        return StrainLevel.MODERATE
    if score < cfg.hard_max:
        return StrainLevel.HARD
    return StrainLevel.VERY_HARD
