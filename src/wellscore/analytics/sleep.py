"""Sleep summarisation from stage-annotated intervals.

The health data source hands over already-staged intervals (core, deep,
REM, awake, in bed); this module reduces them to nightly totals and the
multi-night measures recovery uses: sleep debt and bedtime consistency.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

import numpy as np

from wellscore.config import DEFAULT_CONFIG, SleepConfig
from wellscore.models import SleepInterval, SleepStage


@dataclass
class SleepResult:
    """Totals for one night, in hours."""

    total_sleep_hours: float
    time_in_bed_hours: float
    efficiency: float  # asleep / in bed, percent
    stage_hours: dict[str, float] = field(default_factory=dict)
    restorative_hours: float = 0.0  # deep + REM
    restorative_pct: float = 0.0
    start: datetime | None = None
    end: datetime | None = None

    def __repr__(self) -> str:
        return (
            f"SleepResult(sleep={self.total_sleep_hours:.1f}h, "
            f"bed={self.time_in_bed_hours:.1f}h, "
            f"eff={self.efficiency:.0f}%, "
            f"restorative={self.restorative_pct:.0f}%)"
        )


def summarize_sleep(intervals: Sequence[SleepInterval]) -> SleepResult | None:
    """Reduce one night's intervals to a SleepResult.

    Returns:
        None when there are no intervals or none of them is asleep.
    """
    if not intervals:
        return None

    stage_hours = {stage.value: 0.0 for stage in SleepStage}
    for iv in intervals:
        stage_hours[iv.stage.value] += iv.hours

    asleep = sum(iv.hours for iv in intervals if iv.is_asleep)
    if asleep <= 0:
        return None

    in_bed = asleep + stage_hours[SleepStage.AWAKE.value] + stage_hours[SleepStage.IN_BED.value]
    efficiency = min(asleep / in_bed * 100.0, 100.0) if in_bed > 0 else 0.0
    restorative = stage_hours[SleepStage.DEEP.value] + stage_hours[SleepStage.REM.value]

    return SleepResult(
        total_sleep_hours=round(asleep, 2),
        time_in_bed_hours=round(in_bed, 2),
        efficiency=round(efficiency, 1),
        stage_hours={k: round(v, 2) for k, v in stage_hours.items()},
        restorative_hours=round(restorative, 2),
        restorative_pct=round(restorative / asleep * 100.0, 1),
        start=min(iv.start for iv in intervals),
        end=max(iv.end for iv in intervals),
    )


def sleep_debt(
    previous_nights: Sequence[float],
    last_night: float,
    target_hours: float | None = None,
    config: SleepConfig | None = None,
) -> float:
    """Accumulated shortfall in hours over the trailing window plus last night.

    Args:
        previous_nights: Hours slept on earlier nights, oldest first.
        last_night: Hours slept last night.
        target_hours: Nightly need; defaults to the configured target.
    """
    cfg = config or DEFAULT_CONFIG.sleep
    target = cfg.target_hours if target_hours is None else target_hours
    window = list(previous_nights)[-cfg.debt_window_days:] if cfg.debt_window_days > 0 else []
    return round(sum(max(0.0, target - h) for h in window + [last_night]), 2)


def _hours_from_noon(t: datetime) -> float:
    # 23:30 -> 11.5 and 00:30 -> 12.5, so bedtimes around midnight stay close
    return ((t.hour + t.minute / 60.0 + t.second / 3600.0) - 12.0) % 24.0


def sleep_consistency(
    bedtimes: Sequence[datetime],
    config: SleepConfig | None = None,
) -> float | None:
    """Bedtime regularity, 0-100 (100 = same bedtime every night).

    Returns:
        None with fewer than ``consistency_min_nights`` bedtimes.
    """
    cfg = config or DEFAULT_CONFIG.sleep
    recent = list(bedtimes)[-cfg.consistency_window_days:]
    if len(recent) < cfg.consistency_min_nights:
        return None
    std = float(np.std([_hours_from_noon(t) for t in recent]))
    score = 100.0 * (1.0 - std / cfg.consistency_max_std_h)
    return round(min(max(score, 0.0), 100.0), 1)
