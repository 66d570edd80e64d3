"""Rolling personal baselines from stored daily records.

The recent (acute) window is the 7 days strictly before ``as_of`` and the
historical (chronic) window the 28 days strictly before it, so a baseline
never sees the day it is used to score.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING, Sequence

import numpy as np

from wellscore.analytics.acwr import ACWRStatus, acwr_status, compute_acwr
from wellscore.analytics.outliers import filter_outliers
from wellscore.config import DEFAULT_CONFIG, ScoringConfig

if TYPE_CHECKING:
    from wellscore.analytics.summary import DailyRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BaselineMetrics:
    """Snapshot of a user's "normal", computed once per scoring run."""

    hrv_baseline: float | None  # ms, outlier-filtered mean
    hrv_std_dev: float
    rhr_baseline: float | None  # bpm
    rhr_std_dev: float
    acute_strain: float  # 7-day mean
    chronic_strain: float  # 28-day mean
    respiratory_rate_baseline: float | None  # breaths/min
    calculated_date: date
    days_of_data: int  # recent records with both HRV and RHR
    established_days: int = DEFAULT_CONFIG.baseline.established_days
    abnormal_std_devs: float = DEFAULT_CONFIG.baseline.abnormal_std_devs

    @property
    def is_established(self) -> bool:
        return self.days_of_data >= self.established_days

    @property
    def acwr(self) -> float | None:
        return compute_acwr(self.acute_strain, self.chronic_strain)

    def acwr_status(self) -> ACWRStatus:
        return acwr_status(self.acwr)

    @property
    def hrv_variability(self) -> float | None:
        """Coefficient of variation of HRV, in percent."""
        if not self.hrv_baseline:
            return None
        return self.hrv_std_dev / self.hrv_baseline * 100.0

    @property
    def rhr_variability(self) -> float | None:
        if not self.rhr_baseline:
            return None
        return self.rhr_std_dev / self.rhr_baseline * 100.0

    def is_hrv_abnormal(self, value: float) -> bool:
        if self.hrv_baseline is None or self.hrv_std_dev <= 0:
            return False
        return abs(value - self.hrv_baseline) > self.abnormal_std_devs * self.hrv_std_dev

    def is_rhr_abnormal(self, value: float) -> bool:
        if self.rhr_baseline is None or self.rhr_std_dev <= 0:
            return False
        return abs(value - self.rhr_baseline) > self.abnormal_std_devs * self.rhr_std_dev

    def to_dict(self) -> dict:
        return {
            "hrv_baseline": self.hrv_baseline,
            "hrv_std_dev": self.hrv_std_dev,
            "rhr_baseline": self.rhr_baseline,
            "rhr_std_dev": self.rhr_std_dev,
            "acute_strain": self.acute_strain,
            "chronic_strain": self.chronic_strain,
            "respiratory_rate_baseline": self.respiratory_rate_baseline,
            "calculated_date": self.calculated_date.isoformat(),
            "days_of_data": self.days_of_data,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BaselineMetrics":
        return cls(
            hrv_baseline=data.get("hrv_baseline"),
            hrv_std_dev=float(data.get("hrv_std_dev", 0.0)),
            rhr_baseline=data.get("rhr_baseline"),
            rhr_std_dev=float(data.get("rhr_std_dev", 0.0)),
            acute_strain=float(data.get("acute_strain", 0.0)),
            chronic_strain=float(data.get("chronic_strain", 0.0)),
            respiratory_rate_baseline=data.get("respiratory_rate_baseline"),
            calculated_date=date.fromisoformat(data["calculated_date"]),
            days_of_data=int(data.get("days_of_data", 0)),
        )

    def __repr__(self) -> str:
        hrv = f"{self.hrv_baseline:.1f}" if self.hrv_baseline is not None else "-"
        rhr = f"{self.rhr_baseline:.1f}" if self.rhr_baseline is not None else "-"
        return (
            f"BaselineMetrics(hrv={hrv}±{self.hrv_std_dev:.1f}ms, "
            f"rhr={rhr}±{self.rhr_std_dev:.1f}bpm, "
            f"acute={self.acute_strain:.1f}, chronic={self.chronic_strain:.1f}, "
            f"days={self.days_of_data})"
        )


# ---------------------------------------------------------------------------
# Statistics helpers
# ---------------------------------------------------------------------------


def mean_and_std(values: Sequence[float]) -> tuple[float | None, float]:
    """Mean and Bessel-corrected standard deviation (0 when n <= 1)."""
    if len(values) == 0:
        return None, 0.0
    arr = np.asarray(values, dtype=np.float64)
    std = float(np.std(arr, ddof=1)) if len(arr) > 1 else 0.0
    return float(np.mean(arr)), std


def _in_window(records: Sequence["DailyRecord"], start: date, end: date) -> list["DailyRecord"]:
    return [r for r in records if start <= r.date < end]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def compute_baselines(
    history: Sequence["DailyRecord"],
    as_of: date,
    config: ScoringConfig | None = None,
) -> BaselineMetrics | None:
    """Compute HRV / RHR / strain baselines from records before *as_of*.

    Args:
        history: Daily records in any order; records on or after *as_of*
            are ignored.
        as_of: The day being scored.
        config: Window sizes, bounds and outlier settings.

    Returns:
        BaselineMetrics, or None when fewer than ``min_recent_days``
        records fall in the recent window.
    """
    cfg = config or DEFAULT_CONFIG
    bcfg = cfg.baseline

    recent = _in_window(history, as_of - timedelta(days=bcfg.acute_days), as_of)
    historical = _in_window(history, as_of - timedelta(days=bcfg.chronic_days), as_of)

    if len(recent) < bcfg.min_recent_days:
        logger.info(
            "Baseline for %s unavailable: %d of %d recent days",
            as_of, len(recent), bcfg.min_recent_days,
        )
        return None

    hrv_raw = [r.hrv_average for r in recent if r.hrv_average is not None and r.hrv_average > 0]
    hrv_mean, hrv_std = mean_and_std(filter_outliers(hrv_raw, cfg.outliers))

    rhr_raw = [
        r.resting_heart_rate for r in recent
        if r.resting_heart_rate is not None and bcfg.rhr_min < r.resting_heart_rate < bcfg.rhr_max
    ]
    rhr_mean, rhr_std = mean_and_std(rhr_raw)

    acute = float(np.mean([r.strain for r in recent]))
    chronic = float(np.mean([r.strain for r in historical])) if historical else acute

    resp = [r.respiratory_rate for r in recent if r.respiratory_rate is not None and r.respiratory_rate > 0]
    resp_mean = float(np.mean(resp)) if resp else None

    days = sum(
        1 for r in recent
        if r.hrv_average is not None and r.resting_heart_rate is not None
    )

    return BaselineMetrics(
        hrv_baseline=hrv_mean,
        hrv_std_dev=hrv_std,
        rhr_baseline=rhr_mean,
        rhr_std_dev=rhr_std,
        acute_strain=acute,
        chronic_strain=chronic,
        respiratory_rate_baseline=resp_mean,
        calculated_date=as_of,
        days_of_data=days,
        established_days=bcfg.established_days,
        abnormal_std_devs=bcfg.abnormal_std_devs,
    )
