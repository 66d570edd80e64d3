"""Tunable constants for the scoring engine.

Every tunable default lives in one of the frozen dataclasses below, grouped
per analytics module, so a caller can override any of them without touching
the code.  Analytics modules keep only fixed lookup tables (zone labels,
stroke and activity multipliers) at module level.  ``DEFAULT_CONFIG`` is
used whenever a function is called without an explicit config.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from wellscore.errors import ConfigError


@dataclass(frozen=True)
class OutlierConfig:
    """Absolute bounds and modified z-score threshold (HRV in ms by default)."""

    absolute_min: float = 10.0
    absolute_max: float = 200.0
    z_threshold: float = 3.0
    min_samples_for_stats: int = 5


@dataclass(frozen=True)
class BaselineConfig:
    acute_days: int = 7
    chronic_days: int = 28
    min_recent_days: int = 5
    established_days: int = 7
    rhr_min: float = 0.0  # exclusive
    rhr_max: float = 120.0  # exclusive
    abnormal_std_devs: float = 2.0


@dataclass(frozen=True)
class HeartRateConfig:
    default_max_hr: float = 190.0
    default_resting_hr: float = 60.0


@dataclass(frozen=True)
class StrainConfig:
    # Karvonen intensity breakpoints for zones 1-5 (upper bound of zone 5 > 1)
    zone_boundaries: tuple[float, ...] = (0.50, 0.60, 0.70, 0.80, 0.90, 1.01)
    zone_weights: tuple[float, ...] = (0.5, 1.0, 2.0, 4.0, 8.0)
    # Weighted zone-minutes that map to ~21 * (1 - e^-3)
    trimp_max: float = 400.0
    strain_max: float = 21.0
    # Longest gap between HR samples that still counts as continuous wear
    max_sample_gap_sec: float = 300.0
    default_sample_sec: float = 60.0
    light_max: float = 5.0
    moderate_max: float = 10.0
    hard_max: float = 15.0
    # Workouts without heart rate: log2(intensity * min + kcal * w + 1) * scale
    calorie_intensity_max_kcal_min: float = 12.0
    calorie_strain_weight: float = 0.3
    log_strain_scale: float = 3.0
    # Swim pace in min/100 m, fastest first; one more intensity than steps
    swim_pace_steps: tuple[float, ...] = (1.3, 1.8, 2.5)
    swim_pace_intensities: tuple[float, ...] = (1.4, 1.1, 0.8, 0.5)
    swim_unknown_pace_intensity: float = 0.5
    swim_pace_weight: float = 0.6
    swim_calorie_weight: float = 0.4
    # Strength training: blended intensity ** exponent * duration factor * scale
    strength_hr_reserve_steps: tuple[float, ...] = (0.35, 0.50, 0.65, 0.75)
    strength_hr_intensities: tuple[float, ...] = (0.4, 0.65, 0.85, 1.05, 1.25)
    strength_kcal_min_steps: tuple[float, ...] = (3.0, 5.0, 7.0, 9.0)
    strength_calorie_intensities: tuple[float, ...] = (0.4, 0.6, 0.8, 1.0, 1.2)
    strength_duration_steps_min: tuple[float, ...] = (30.0, 45.0, 60.0, 75.0, 90.0)
    strength_duration_factors: tuple[float, ...] = (0.6, 0.8, 1.0, 1.15, 1.25, 1.35)
    strength_hr_weight: float = 0.65
    strength_exponent: float = 1.3
    strength_scale: float = 16.0


@dataclass(frozen=True)
class RecoveryWeights:
    hrv: float = 0.40
    rhr: float = 0.30
    sleep: float = 0.20
    respiratory: float = 0.10
    strain: float = 0.0

    def validate(self) -> None:
        values = asdict(self).values()
        if any(w < 0 for w in values):
            raise ConfigError("recovery weights must be non-negative")
        if not any(w > 0 for w in values):
            raise ConfigError("at least one recovery weight must be positive")


@dataclass(frozen=True)
class RecoveryConfig:
    weights: RecoveryWeights = field(default_factory=RecoveryWeights)
    # Score points per standard deviation away from baseline (50 = baseline)
    z_score_scale: float = 25.0
    hrv_default_cv: float = 0.15
    rhr_default_cv: float = 0.08
    sleep_target_min_h: float = 7.0
    sleep_target_max_h: float = 9.0
    undersleep_penalty_per_h: float = 25.0
    oversleep_penalty_per_h: float = 10.0
    efficiency_floor: float = 50.0
    efficiency_ceiling: float = 90.0
    default_respiratory_baseline: float = 14.0
    respiratory_penalty_per_breath: float = 20.0
    excellent_min: float = 85.0
    good_min: float = 70.0
    fair_min: float = 50.0


@dataclass(frozen=True)
class StressConfig:
    medium_threshold: float = 1.0
    high_threshold: float = 2.0
    stress_max: float = 3.0
    # % HR elevation over baseline RHR at which stress reaches 1, 2 and 3
    hr_elevation_pct_steps: tuple[float, float, float] = (10.0, 20.0, 30.0)
    # % HRV depression below baseline at which stress reaches 1, 2 and 3
    hrv_depression_pct_steps: tuple[float, float, float] = (10.0, 25.0, 40.0)
    hr_weight: float = 0.6
    hrv_weight: float = 0.4
    exercise_buffer_min: float = 60.0
    reading_interval_min: float = 5.0
    gap_tolerance_min: float = 10.0
    hrv_match_window_min: float = 30.0


@dataclass(frozen=True)
class AcwrConfig:
    undertraining_max: float = 0.8
    optimal_max: float = 1.3
    caution_max: float = 1.5


@dataclass(frozen=True)
class SleepConfig:
    target_hours: float = 8.0
    debt_window_days: int = 7
    consistency_window_days: int = 7
    consistency_min_nights: int = 3
    consistency_max_std_h: float = 2.0
    # Sleep window for a day starts this many hours before midnight
    lookback_hours: float = 12.0


@dataclass(frozen=True)
class ScoringConfig:
    outliers: OutlierConfig = field(default_factory=OutlierConfig)
    baseline: BaselineConfig = field(default_factory=BaselineConfig)
    heart_rate: HeartRateConfig = field(default_factory=HeartRateConfig)
    strain: StrainConfig = field(default_factory=StrainConfig)
    recovery: RecoveryConfig = field(default_factory=RecoveryConfig)
    stress: StressConfig = field(default_factory=StressConfig)
    acwr: AcwrConfig = field(default_factory=AcwrConfig)
    sleep: SleepConfig = field(default_factory=SleepConfig)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


DEFAULT_CONFIG = ScoringConfig()


# ---------------------------------------------------------------------------
# Loading overrides
# ---------------------------------------------------------------------------


def _override(obj: Any, overrides: dict[str, Any], path: str) -> Any:
    """Return a copy of dataclass *obj* with *overrides* applied recursively."""
    if not isinstance(overrides, dict):
        raise ConfigError(f"{path}: expected an object, got {type(overrides).__name__}")

    known = {f.name: f for f in fields(obj)}
    changes: dict[str, Any] = {}
    for key, value in overrides.items():
        if key not in known:
            raise ConfigError(f"{path}.{key}: unknown setting")
        current = getattr(obj, key)
        if hasattr(current, "__dataclass_fields__"):
            changes[key] = _override(current, value, f"{path}.{key}")
        elif isinstance(current, tuple):
            if not isinstance(value, list) or len(value) != len(current):
                raise ConfigError(
                    f"{path}.{key}: expected a list of {len(current)} numbers"
                )
            changes[key] = tuple(float(v) for v in value)
        elif isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"{path}.{key}: expected a number")
        else:
            changes[key] = type(current)(value)
    return replace(obj, **changes)


def config_from_dict(data: dict[str, Any]) -> ScoringConfig:
    """Build a ScoringConfig from a (possibly partial) nested dict."""
    config = _override(DEFAULT_CONFIG, data, "config")
    config.recovery.weights.validate()
    return config


def load_config(path: str | Path) -> ScoringConfig:
    """Load overrides from a JSON file.

    Args:
        path: JSON file with top-level keys named after the config groups,
            e.g. ``{"acwr": {"caution_max": 1.6}}``.

    Returns:
        The default config with the file's overrides applied.
    """
    p = Path(path)
    try:
        data = json.loads(p.read_text())
    except FileNotFoundError as exc:
        raise ConfigError(f"config file not found: {p}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in {p}: {exc}") from exc
    return config_from_dict(data)
