"""Recovery score computation (baseline-relative composite).

Recovery combines four signals, each normalised to 0-100 against the
user's own baseline before weighting:

    HRV          40%   above baseline is good
    Resting HR   30%   below baseline is good
    Sleep        20%   duration, efficiency, consistency
    Respiratory  10%   any deviation from baseline is bad

A missing signal drops out and the remaining weights are renormalised.
An optional strain-impact component (yesterday's strain and the
acute:chronic ratio) is available with weight 0 by default.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum

from wellscore.analytics.acwr import compute_acwr
from wellscore.config import DEFAULT_CONFIG, RecoveryConfig


# Sleep sub-score blend
SLEEP_W_DURATION = 0.50
SLEEP_W_EFFICIENCY = 0.30
SLEEP_W_CONSISTENCY = 0.20

# Strain impact blend: yesterday's strain vs. acute:chronic ratio
STRAIN_W_YESTERDAY = 0.60
STRAIN_W_RATIO = 0.40

# (upper bound of yesterday's strain, score)
_YESTERDAY_STRAIN_IMPACT = [(5.0, 100.0), (10.0, 95.0), (14.0, 85.0), (18.0, 65.0)]
_YESTERDAY_STRAIN_FLOOR = 40.0

# (upper bound of acute:chronic ratio, score)
_RATIO_IMPACT = [(0.8, 90.0), (1.0, 100.0), (1.3, 95.0), (1.5, 75.0), (2.0, 50.0)]
_RATIO_FLOOR = 30.0


class RecoveryLevel(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"

    @property
    def recommendation(self) -> str:
        return _RECOMMENDATIONS[self]


_RECOMMENDATIONS = {
    RecoveryLevel.EXCELLENT: "Well recovered. A good day for a hard workout.",
    RecoveryLevel.GOOD: "Good recovery. Train normally.",
    RecoveryLevel.FAIR: "Moderate recovery. Consider a lighter session.",
    RecoveryLevel.POOR: "Low recovery. Rest or very light activity.",
}


@dataclass(frozen=True)
class RecoveryComponents:
    """Per-signal sub-scores (0-100, None when the input was missing)."""

    hrv: float | None = None
    rhr: float | None = None
    sleep: float | None = None
    respiratory: float | None = None
    strain: float | None = None
    overall: float | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "RecoveryComponents":
        return cls(**{k: data.get(k) for k in ("hrv", "rhr", "sleep", "respiratory", "strain", "overall")})

    def __repr__(self) -> str:
        def fmt(v: float | None) -> str:
            return "-" if v is None else f"{v:.0f}"

        return (
            f"RecoveryComponents(overall={fmt(self.overall)}, hrv={fmt(self.hrv)}, "
            f"rhr={fmt(self.rhr)}, sleep={fmt(self.sleep)}, resp={fmt(self.respiratory)})"
        )


def _clamp(x: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return min(max(x, lo), hi)


def _step_score(value: float, table: list[tuple[float, float]], floor: float) -> float:
    for upper, score in table:
        if value < upper:
            return score
    return floor


# ---------------------------------------------------------------------------
# Component scores
# ---------------------------------------------------------------------------


def _z_score(current: float, baseline: float, std_dev: float | None, default_cv: float) -> float:
    std = std_dev if std_dev is not None and std_dev > 0 else baseline * default_cv
    return (current - baseline) / std


def hrv_component(
    current: float | None,
    baseline: float | None,
    std_dev: float | None = None,
    config: RecoveryConfig | None = None,
) -> float | None:
    """50 at baseline, +/- ``z_score_scale`` per standard deviation."""
    cfg = config or DEFAULT_CONFIG.recovery
    if current is None or baseline is None or baseline <= 0:
        return None
    z = _z_score(current, baseline, std_dev, cfg.hrv_default_cv)
    return _clamp(50.0 + cfg.z_score_scale * z)


def rhr_component(
    current: float | None,
    baseline: float | None,
    std_dev: float | None = None,
    config: RecoveryConfig | None = None,
) -> float | None:
    """Inverse of the HRV mapping: a lower resting HR scores higher."""
    cfg = config or DEFAULT_CONFIG.recovery
    if current is None or baseline is None or baseline <= 0:
        return None
    z = _z_score(current, baseline, std_dev, cfg.rhr_default_cv)
    return _clamp(50.0 - cfg.z_score_scale * z)


def sleep_duration_score(hours: float, config: RecoveryConfig | None = None) -> float:
    """100 inside the target band; under-sleeping costs more than over-sleeping."""
    cfg = config or DEFAULT_CONFIG.recovery
    if hours < cfg.sleep_target_min_h:
        return _clamp(100.0 - cfg.undersleep_penalty_per_h * (cfg.sleep_target_min_h - hours))
    if hours > cfg.sleep_target_max_h:
        return _clamp(100.0 - cfg.oversleep_penalty_per_h * (hours - cfg.sleep_target_max_h))
    return 100.0


def sleep_efficiency_score(efficiency: float, config: RecoveryConfig | None = None) -> float:
    cfg = config or DEFAULT_CONFIG.recovery
    span = cfg.efficiency_ceiling - cfg.efficiency_floor
    return _clamp((efficiency - cfg.efficiency_floor) / span * 100.0)


def sleep_component(
    duration_hours: float | None,
    efficiency: float | None = None,
    consistency: float | None = None,
    config: RecoveryConfig | None = None,
) -> float | None:
    """Blend duration, efficiency and consistency over whichever are present."""
    if duration_hours is None:
        return None
    parts = [(sleep_duration_score(duration_hours, config), SLEEP_W_DURATION)]
    if efficiency is not None:
        parts.append((sleep_efficiency_score(efficiency, config), SLEEP_W_EFFICIENCY))
    if consistency is not None:
        parts.append((_clamp(consistency), SLEEP_W_CONSISTENCY))
    total = sum(w for _, w in parts)
    return sum(s * w for s, w in parts) / total


def respiratory_component(
    rate: float | None,
    baseline: float | None = None,
    config: RecoveryConfig | None = None,
) -> float | None:
    cfg = config or DEFAULT_CONFIG.recovery
    if rate is None or rate <= 0:
        return None
    ref = baseline if baseline is not None and baseline > 0 else cfg.default_respiratory_baseline
    return _clamp(100.0 - cfg.respiratory_penalty_per_breath * abs(rate - ref))


def strain_component(
    recent_strain: float | None,
    acute_strain: float | None = None,
    chronic_strain: float | None = None,
) -> float | None:
    """How much recent training load is still weighing on recovery."""
    if recent_strain is None:
        return None
    parts = [(_step_score(recent_strain, _YESTERDAY_STRAIN_IMPACT, _YESTERDAY_STRAIN_FLOOR), STRAIN_W_YESTERDAY)]
    ratio = compute_acwr(acute_strain, chronic_strain)
    if ratio is not None:
        parts.append((_step_score(ratio, _RATIO_IMPACT, _RATIO_FLOOR), STRAIN_W_RATIO))
    total = sum(w for _, w in parts)
    return sum(s * w for s, w in parts) / total


# ---------------------------------------------------------------------------
# Composite
# ---------------------------------------------------------------------------


def recovery_components(
    hrv_current: float | None = None,
    hrv_baseline: float | None = None,
    hrv_std_dev: float | None = None,
    rhr_current: float | None = None,
    rhr_baseline: float | None = None,
    rhr_std_dev: float | None = None,
    sleep_duration: float | None = None,
    sleep_efficiency: float | None = None,
    sleep_consistency: float | None = None,
    recent_strain: float | None = None,
    acute_strain: float | None = None,
    chronic_strain: float | None = None,
    respiratory_rate: float | None = None,
    respiratory_baseline: float | None = None,
    config: RecoveryConfig | None = None,
) -> RecoveryComponents:
    """Compute every sub-score and the weighted composite.

    Args:
        hrv_current: Today's HRV (ms).
        hrv_baseline: Baseline HRV mean; ``hrv_std_dev`` its spread.  A
            missing or zero spread falls back to a fixed fraction of the
            baseline.
        rhr_current: Today's resting HR (bpm), with baseline and spread.
        sleep_duration: Hours asleep last night.
        sleep_efficiency: Asleep / in bed, percent.
        sleep_consistency: 0-100 bedtime regularity.
        recent_strain: Yesterday's strain, with acute / chronic averages.
        respiratory_rate: Breaths per minute, with personal baseline.
        config: Weights and normalisation constants.

    Returns:
        RecoveryComponents.  ``overall`` is None when HRV, resting HR and
        sleep are all missing.
    """
    cfg = config or DEFAULT_CONFIG.recovery
    w = cfg.weights

    comps = {
        "hrv": hrv_component(hrv_current, hrv_baseline, hrv_std_dev, cfg),
        "rhr": rhr_component(rhr_current, rhr_baseline, rhr_std_dev, cfg),
        "sleep": sleep_component(sleep_duration, sleep_efficiency, sleep_consistency, cfg),
        "respiratory": respiratory_component(respiratory_rate, respiratory_baseline, cfg),
        "strain": strain_component(recent_strain, acute_strain, chronic_strain),
    }
    weights = {
        "hrv": w.hrv,
        "rhr": w.rhr,
        "sleep": w.sleep,
        "respiratory": w.respiratory,
        "strain": w.strain,
    }

    overall = None
    if any(comps[k] is not None for k in ("hrv", "rhr", "sleep")):
        present = [(comps[k], weights[k]) for k in comps if comps[k] is not None and weights[k] > 0]
        total = sum(wt for _, wt in present)
        if total > 0:
            overall = round(_clamp(sum(s * wt for s, wt in present) / total), 1)

    return RecoveryComponents(
        hrv=None if comps["hrv"] is None else round(comps["hrv"], 1),
        rhr=None if comps["rhr"] is None else round(comps["rhr"], 1),
        sleep=None if comps["sleep"] is None else round(comps["sleep"], 1),
        respiratory=None if comps["respiratory"] is None else round(comps["respiratory"], 1),
        strain=None if comps["strain"] is None else round(comps["strain"], 1),
        overall=overall,
    )


def recovery_score(
    hrv_current: float | None = None,
    hrv_baseline: float | None = None,
    hrv_std_dev: float | None = None,
    rhr_current: float | None = None,
    rhr_baseline: float | None = None,
    rhr_std_dev: float | None = None,
    sleep_duration: float | None = None,
    sleep_efficiency: float | None = None,
    sleep_consistency: float | None = None,
    recent_strain: float | None = None,
    acute_strain: float | None = None,
    chronic_strain: float | None = None,
    respiratory_rate: float | None = None,
    respiratory_baseline: float | None = None,
    config: RecoveryConfig | None = None,
) -> float | None:
    """Composite recovery in [0, 100], or None with no HRV, RHR or sleep.

    Arguments are those of :func:`recovery_components`.
    """
    return recovery_components(
        hrv_current=hrv_current,
        hrv_baseline=hrv_baseline,
        hrv_std_dev=hrv_std_dev,
        rhr_current=rhr_current,
        rhr_baseline=rhr_baseline,
        rhr_std_dev=rhr_std_dev,
        sleep_duration=sleep_duration,
        sleep_efficiency=sleep_efficiency,
        sleep_consistency=sleep_consistency,
        recent_strain=recent_strain,
        acute_strain=acute_strain,
        chronic_strain=chronic_strain,
        respiratory_rate=respiratory_rate,
        respiratory_baseline=respiratory_baseline,
        config=config,
    ).overall


def recovery_level(score: float, config: RecoveryConfig | None = None) -> RecoveryLevel:
    cfg = config or DEFAULT_CONFIG.recovery
    if score >= cfg.excellent_min:
        return RecoveryLevel.EXCELLENT
    if score >= cfg.good_min:
        return RecoveryLevel.GOOD
    if score >= cfg.fair_min:
        return RecoveryLevel.FAIR
    return RecoveryLevel.POOR
