"""Stress estimation (0-3) from heart rate elevation over resting baseline.

Heart rate is resampled onto a fixed cadence (5 minutes).  Each reading's
stress is a piecewise-linear function of the % elevation of HR over the
baseline resting HR, optionally blended with the % depression of the
nearest HRV sample below baseline HRV.  Readings close to a workout are
flagged as exercise-related and left out of the daily aggregates.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Protocol, Sequence

import numpy as np

from wellscore.config import DEFAULT_CONFIG, StressConfig
from wellscore.models import Sample


class StressZone(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class _TimeSpan(Protocol):
    start: datetime
    end: datetime


@dataclass(frozen=True)
class StressReading:
    timestamp: datetime
    stress_level: float  # 0-3
    heart_rate: float
    is_exercise_related: bool = False
    hrv: float | None = None
    confidence: float = 1.0

    @property
    def zone(self) -> StressZone:
        return stress_zone(self.stress_level)


@dataclass
class StressSummary:
    """Daily stress aggregates over non-exercise readings."""

    average: float | None = None
    maximum: float | None = None
    minutes_low: float = 0.0
    minutes_medium: float = 0.0
    minutes_high: float = 0.0
    dominant_zone: StressZone | None = None
    longest_high_minutes: float = 0.0
    longest_high_start: datetime | None = None
    reading_count: int = 0
    excluded_exercise: int = 0

    def __repr__(self) -> str:
        avg = "-" if self.average is None else f"{self.average:.2f}"
        zone = self.dominant_zone.value if self.dominant_zone else "-"
        return (
            f"StressSummary(avg={avg}, zone={zone}, "
            f"high={self.minutes_high:.0f}min, longest_high={self.longest_high_minutes:.0f}min)"
        )


# ---------------------------------------------------------------------------
# Per-reading math
# ---------------------------------------------------------------------------


def _piecewise(pct: float, steps: Sequence[float], ceiling: float) -> float:
    """Map a percentage onto 0..3 with linear segments between *steps*."""
    if pct <= 0:
        return 0.0
    lower = 0.0
    for level, upper in enumerate(steps):
        if pct < upper:
            return level + (pct - lower) / (upper - lower)
        lower = upper
    return ceiling


def hr_stress_component(
    heart_rate: float,
    baseline_rhr: float,
    config: StressConfig | None = None,
) -> float:
    cfg = config or DEFAULT_CONFIG.stress
    if baseline_rhr <= 0:
        return 0.0
    elevation_pct = (heart_rate - baseline_rhr) / baseline_rhr * 100.0
    return _piecewise(elevation_pct, cfg.hr_elevation_pct_steps, cfg.stress_max)


def hrv_stress_component(
    hrv: float,
    baseline_hrv: float,
    config: StressConfig | None = None,
) -> float:
    cfg = config or DEFAULT_CONFIG.stress
    if baseline_hrv <= 0:
        return 0.0
    depression_pct = (baseline_hrv - hrv) / baseline_hrv * 100.0
    return _piecewise(depression_pct, cfg.hrv_depression_pct_steps, cfg.stress_max)


def stress_level(
    heart_rate: float,
    baseline_rhr: float,
    hrv: float | None = None,
    baseline_hrv: float | None = None,
    config: StressConfig | None = None,
) -> float:
    """Stress in [0, 3]; the HRV component is only used when both HRV values exist."""
    cfg = config or DEFAULT_CONFIG.stress
    level = hr_stress_component(heart_rate, baseline_rhr, cfg)
    if hrv is not None and baseline_hrv is not None and baseline_hrv > 0:
        hrv_part = hrv_stress_component(hrv, baseline_hrv, cfg)
        level = (level * cfg.hr_weight + hrv_part * cfg.hrv_weight) / (cfg.hr_weight + cfg.hrv_weight)
    return float(np.clip(level, 0.0, cfg.stress_max))


def stress_zone(level: float, config: StressConfig | None = None) -> StressZone:
    cfg = config or DEFAULT_CONFIG.stress
    if level < cfg.medium_threshold:
        return StressZone.LOW
    if level < cfg.high_threshold:
        return StressZone.MEDIUM
    return StressZone.HIGH


def is_exercise_related(
    timestamp: datetime,
    workouts: Sequence[_TimeSpan],
    config: StressConfig | None = None,
) -> bool:
    """True within ``exercise_buffer_min`` of any workout."""
    cfg = config or DEFAULT_CONFIG.stress
    buffer = timedelta(minutes=cfg.exercise_buffer_min)
    return any(w.start - buffer <= timestamp <= w.end + buffer for w in workouts)


def nearest_hrv(
    timestamp: datetime,
    hrv: Sequence[Sample],
    config: StressConfig | None = None,
) -> float | None:
    """Value of the HRV sample closest to *timestamp*, within the match window."""
    cfg = config or DEFAULT_CONFIG.stress
    window = cfg.hrv_match_window_min * 60.0
    best: Sample | None = None
    best_gap = window
    for s in hrv:
        gap = abs((s.timestamp - timestamp).total_seconds())
        if gap <= best_gap:
            best, best_gap = s, gap
    return None if best is None else float(best.value)


# ---------------------------------------------------------------------------
# Day series
# ---------------------------------------------------------------------------


def _floor_to_cadence(t: datetime, step_sec: float) -> datetime:
    midnight = t.replace(hour=0, minute=0, second=0, microsecond=0)
    offset = (t - midnight).total_seconds()
    return midnight + timedelta(seconds=offset - offset % step_sec)


def resample_heart_rate(samples: Sequence[Sample], config: StressConfig | None = None) -> list[Sample]:
    """Mean HR per cadence bucket, stamped at the bucket start, sorted."""
    cfg = config or DEFAULT_CONFIG.stress
    step = cfg.reading_interval_min * 60.0
    buckets: dict[datetime, list[float]] = {}
    for s in samples:
        if s.value > 0:
            buckets.setdefault(_floor_to_cadence(s.timestamp, step), []).append(s.value)
    return [Sample(t, float(np.mean(v))) for t, v in sorted(buckets.items())]


def compute_stress_readings(
    heart_rate: Sequence[Sample],
    baseline_rhr: float | None,
    workouts: Sequence[_TimeSpan] = (),
    hrv: Sequence[Sample] = (),
    baseline_hrv: float | None = None,
    config: StressConfig | None = None,
) -> list[StressReading]:
    """One StressReading per cadence bucket of the day's heart rate.

    Samples are split by their own timestamp into exercise-related and
    ordinary ones before resampling, so a bucket that straddles the edge
    of an exclusion window yields one reading of each kind.

    Args:
        heart_rate: Raw HR samples for the day.
        baseline_rhr: Rolling resting HR baseline; no readings without it.
        workouts: Anything with ``start`` / ``end`` datetimes.
        hrv: HRV samples, matched to readings by nearest timestamp.
        baseline_hrv: Rolling HRV baseline.
        config: Thresholds, weights, cadence and exclusion buffer.
    """
    cfg = config or DEFAULT_CONFIG.stress
    if baseline_rhr is None or baseline_rhr <= 0:
        return []

    ordinary: list[Sample] = []
    during_exercise: list[Sample] = []
    for s in heart_rate:
        if is_exercise_related(s.timestamp, workouts, cfg):
            during_exercise.append(s)
        else:
            ordinary.append(s)

    readings = []
    for samples, exercise in ((ordinary, False), (during_exercise, True)):
        for s in resample_heart_rate(samples, cfg):
            matched = nearest_hrv(s.timestamp, hrv, cfg)
            confidence = 1.0
            if matched is None or baseline_hrv is None:
                confidence *= 0.7
            if exercise:
                confidence *= 0.5
            readings.append(
                StressReading(
                    timestamp=s.timestamp,
                    stress_level=round(stress_level(s.value, baseline_rhr, matched, baseline_hrv, cfg), 3),
                    heart_rate=round(s.value, 1),
                    is_exercise_related=exercise,
                    hrv=matched,
                    confidence=confidence,
                )
            )
    readings.sort(key=lambda r: (r.timestamp, r.is_exercise_related))
    return readings


def _longest_high_period(
    readings: Sequence[StressReading],
    cfg: StressConfig,
) -> tuple[float, datetime | None]:
    high = sorted(
        (r for r in readings if stress_zone(r.stress_level, cfg) is StressZone.HIGH),
        key=lambda r: r.timestamp,
    )
    if not high:
        return 0.0, None

    tolerance = timedelta(minutes=cfg.gap_tolerance_min)
    best_count, best_start = 1, high[0].timestamp
    count, start = 1, high[0].timestamp
    for prev, cur in zip(high, high[1:]):
        if cur.timestamp - prev.timestamp <= tolerance:
            count += 1
        else:
            count, start = 1, cur.timestamp
        if count > best_count:
            best_count, best_start = count, start
    return best_count * cfg.reading_interval_min, best_start


def summarize_stress(
    readings: Sequence[StressReading],
    config: StressConfig | None = None,
) -> StressSummary:
    """Aggregate a day's readings, ignoring exercise-related ones."""
    cfg = config or DEFAULT_CONFIG.stress
    kept = [r for r in readings if not r.is_exercise_related]
    summary = StressSummary(reading_count=len(kept), excluded_exercise=len(readings) - len(kept))
    if not kept:
        return summary

    levels = np.asarray([r.stress_level for r in kept], dtype=np.float64)
    minutes = {zone: 0.0 for zone in StressZone}
    for r in kept:
        minutes[stress_zone(r.stress_level, cfg)] += cfg.reading_interval_min

    summary.average = round(float(np.mean(levels)), 2)
    summary.maximum = round(float(np.max(levels)), 2)
    summary.minutes_low = minutes[StressZone.LOW]
    summary.minutes_medium = minutes[StressZone.MEDIUM]
    summary.minutes_high = minutes[StressZone.HIGH]
    # max() keeps the first of equal values, so ties go to the calmer zone
    summary.dominant_zone = max(StressZone, key=lambda z: minutes[z])
    summary.longest_high_minutes, summary.longest_high_start = _longest_high_period(kept, cfg)
    return summary
