"""Outlier rejection for scalar physiological series (HRV by default).

Two stages, applied in order:

1. Absolute bounds -- anything outside ``[absolute_min, absolute_max]`` is
   a sensor glitch and is dropped.
2. Modified z-score -- with at least ``min_samples_for_stats`` survivors,
   values whose ``0.6745 * |x - median| / MAD`` exceeds the threshold are
   dropped.  Skipped when MAD is 0.

Stage 2 is repeated until it removes nothing, so filtering an already
filtered series is a no-op.  Output always preserves input order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from scipy.stats import median_abs_deviation

from wellscore.config import DEFAULT_CONFIG, OutlierConfig

logger = logging.getLogger(__name__)

# Consistency constant relating MAD to the standard deviation of a normal
MODIFIED_Z_FACTOR = 0.6745


@dataclass
class OutlierAnalysis:
    """What the filter removed from a series, for diagnostics only."""

    total_samples: int
    absolute_outliers: int
    statistical_outliers: int
    retained_samples: int
    original_average: float
    filtered_average: float

    @property
    def total_outliers(self) -> int:
        return self.absolute_outliers + self.statistical_outliers

    @property
    def average_difference(self) -> float:
        return abs(self.filtered_average - self.original_average)

    @property
    def outlier_percentage(self) -> float:
        if self.total_samples == 0:
            return 0.0
        return self.total_outliers / self.total_samples * 100.0

    @property
    def impact_on_average(self) -> float:
        """Shift of the mean caused by filtering, as % of the original mean."""
        if self.original_average <= 0:
            return 0.0
        return self.average_difference / self.original_average * 100.0

    def __repr__(self) -> str:
        return (
            f"OutlierAnalysis(removed={self.total_outliers}/{self.total_samples}, "
            f"abs={self.absolute_outliers}, stat={self.statistical_outliers}, "
            f"mean {self.original_average:.1f}->{self.filtered_average:.1f})"
        )


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


def filter_absolute(
    values: Sequence[float],
    config: OutlierConfig | None = None,
) -> list[float]:
    """Drop values outside the configured absolute bounds."""
    cfg = config or DEFAULT_CONFIG.outliers
    kept = [float(v) for v in values if cfg.absolute_min <= v <= cfg.absolute_max]
    removed = len(values) - len(kept)
    if removed:
        logger.debug("Removed %d absolute outliers from %d values", removed, len(values))
    return kept


def _modified_z_scores(values: Sequence[float]) -> np.ndarray | None:
    """Modified z-score per value, or None when MAD is 0."""
    arr = np.asarray(values, dtype=np.float64)
    median = float(np.median(arr))
    mad = float(median_abs_deviation(arr, scale=1.0))
    if mad == 0:
        return None
    return MODIFIED_Z_FACTOR * np.abs(arr - median) / mad


def _statistical_pass(values: list[float], cfg: OutlierConfig) -> list[float]:
    if len(values) < cfg.min_samples_for_stats:
        return values
    scores = _modified_z_scores(values)
    if scores is None:
        return values
    return [v for v, z in zip(values, scores) if z <= cfg.z_threshold]


def filter_statistical(
    values: Sequence[float],
    config: OutlierConfig | None = None,
) -> list[float]:
    """Drop modified z-score outliers, repeating until nothing changes."""
    cfg = config or DEFAULT_CONFIG.outliers
    current = [float(v) for v in values]
    while True:
        kept = _statistical_pass(current, cfg)
        if len(kept) == len(current):
            break
        current = kept
    removed = len(values) - len(current)
    if removed:
        logger.debug("Removed %d statistical outliers from %d values", removed, len(values))
    return current


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def filter_outliers(
    values: Sequence[float],
    config: OutlierConfig | None = None,
) -> list[float]:
    """Remove sensor glitches and statistical outliers from *values*.

    Args:
        values: Scalar readings, in any order (order is preserved).
        config: Bounds and thresholds; defaults tuned for HRV in ms.

    Returns:
        The retained values as an order-preserving subsequence.
    """
    if len(values) == 0:
        return []
    return filter_statistical(filter_absolute(values, config), config)


def is_likely_outlier(
    value: float,
    reference: Sequence[float],
    config: OutlierConfig | None = None,
) -> bool:
    """Check a single new value against an existing reference population."""
    cfg = config or DEFAULT_CONFIG.outliers
    if not cfg.absolute_min <= value <= cfg.absolute_max:
        return True
    if len(reference) < cfg.min_samples_for_stats:
        return False

    arr = np.asarray(reference, dtype=np.float64)
    median = float(np.median(arr))
    mad = float(median_abs_deviation(arr, scale=1.0))
    if mad == 0:
        return False
    return MODIFIED_Z_FACTOR * abs(value - median) / mad > cfg.z_threshold


def analyze_outliers(
    values: Sequence[float],
    config: OutlierConfig | None = None,
) -> OutlierAnalysis:
    """Count what each stage removes and how much the mean moves."""
    after_absolute = filter_absolute(values, config)
    after_all = filter_statistical(after_absolute, config)

    original_avg = float(np.mean(values)) if len(values) else 0.0
    filtered_avg = float(np.mean(after_all)) if after_all else 0.0

    return OutlierAnalysis(
        total_samples=len(values),
        absolute_outliers=len(values) - len(after_absolute),
        statistical_outliers=len(after_absolute) - len(after_all),
        retained_samples=len(after_all),
        original_average=round(original_avg, 2),
        filtered_average=round(filtered_avg, 2),
    )
