"""Acute:chronic workload ratio (7-day vs 28-day average strain)."""

from __future__ import annotations

import math
from enum import Enum

from wellscore.config import DEFAULT_CONFIG, AcwrConfig


class ACWRStatus(str, Enum):
    UNDERTRAINING = "undertraining"
    OPTIMAL = "optimal"
    CAUTION = "caution"
    HIGH_RISK = "high_risk"
    UNKNOWN = "unknown"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    ACWRStatus.UNDERTRAINING: "Training load is low relative to your recent norm",
    ACWRStatus.OPTIMAL: "Training load is in the optimal range",
    ACWRStatus.CAUTION: "Training load is climbing; watch for fatigue",
    ACWRStatus.HIGH_RISK: "Training load spike; injury risk is elevated",
    ACWRStatus.UNKNOWN: "Not enough training history",
}


def compute_acwr(acute: float | None, chronic: float | None) -> float | None:
    """Return ``acute / chronic``, or None if either is missing or chronic <= 0."""
    if acute is None or chronic is None or chronic <= 0:
        return None
    return acute / chronic


def acwr_status(ratio: float | None, config: AcwrConfig | None = None) -> ACWRStatus:
    """Classify a ratio: <0.8 under, [0.8, 1.3] optimal, (1.3, 1.5] caution, >1.5 high risk."""
    cfg = config or DEFAULT_CONFIG.acwr
    if ratio is None or math.isnan(ratio):
        return ACWRStatus.UNKNOWN
    if ratio < cfg.undertraining_max:
        return ACWRStatus.UNDERTRAINING
    if ratio <= cfg.optimal_max:
        return ACWRStatus.OPTIMAL
    if ratio <= cfg.caution_max:
        return ACWRStatus.CAUTION
    return ACWRStatus.HIGH_RISK
