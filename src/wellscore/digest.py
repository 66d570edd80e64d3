"""Short plain-text health digest, used as context for the chat assistant.

Built purely from stored DailyRecords.  Values that are missing are left
out rather than printed as zero.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING, Sequence

import numpy as np

from wellscore.analytics.stress import stress_zone
from wellscore.analytics.summary import DailyRecord

if TYPE_CHECKING:
    from wellscore.store import MetricsStore

TREND_DAYS = 7


def _mean(values: Sequence[float | None]) -> float | None:
    present = [v for v in values if v is not None]
    return float(np.mean(present)) if present else None


def _today_lines(record: DailyRecord | None) -> list[str]:
    if record is None:
        return ["No data tracked yet today."]

    lines = [f"Strain: {record.strain:.1f}/21"]
    if record.recovery is not None:
        lines.append(f"Recovery: {record.recovery:.0f}/100")
    if record.sleep_duration is not None:
        sleep = f"Sleep: {record.sleep_duration:.1f} hours"
        if record.sleep_efficiency is not None:
            sleep += f" (efficiency {record.sleep_efficiency:.0f}%)"
        lines.append(sleep)
    if record.hrv_average is not None:
        lines.append(f"HRV: {record.hrv_average:.0f} ms")
    if record.resting_heart_rate is not None:
        lines.append(f"Resting heart rate: {record.resting_heart_rate:.0f} bpm")
    if record.respiratory_rate is not None:
        lines.append(f"Respiratory rate: {record.respiratory_rate:.1f} breaths/min")

    lines.append(f"Workouts: {len(record.workouts)}")
    for w in record.workouts:
        line = f"  - {w.activity_type.display_name}: {w.duration / 60:.0f} min, strain {w.strain:.1f}"
        if w.avg_heart_rate is not None:
            line += f", avg {w.avg_heart_rate:.0f} bpm"
        lines.append(line)

    if record.stress_average is not None:
        zone = stress_zone(record.stress_average).value
        lines.append(f"Average stress: {record.stress_average:.1f}/3.0 ({zone})")
        if record.stress_max is not None:
            lines.append(f"Peak stress: {record.stress_max:.1f}/3.0")
    return lines


def _trend_lines(recent: Sequence[DailyRecord]) -> list[str]:
    if not recent:
        return ["No recent data."]

    strains = [r.strain for r in recent]
    lines = [f"Strain: {np.mean(strains):.1f} (peak {max(strains):.1f})"]

    recovery = _mean([r.recovery for r in recent])
    if recovery is not None:
        lines.append(f"Recovery: {recovery:.0f}/100")
    sleep = _mean([r.sleep_duration for r in recent])
    if sleep is not None:
        lines.append(f"Sleep: {sleep:.1f} hours per night")
    hrv = _mean([r.hrv_average for r in recent])
    if hrv is not None:
        lines.append(f"HRV: {hrv:.0f} ms")
    rhr = _mean([r.resting_heart_rate for r in recent])
    if rhr is not None:
        lines.append(f"Resting heart rate: {rhr:.0f} bpm")
    lines.append(f"Total workouts: {sum(len(r.workouts) for r in recent)}")
    return lines


def build_health_digest(today: DailyRecord | None, recent: Sequence[DailyRecord]) -> str:
    """Render today's record and the trailing-week averages as text.

    Args:
        today: Today's record, or None if nothing has been aggregated yet.
        recent: Records of the preceding days (today excluded).
    """
    header = f"TODAY ({today.date.isoformat()}):" if today is not None else "TODAY:"
    parts = [header, *_today_lines(today), "", f"{TREND_DAYS}-DAY AVERAGES:", *_trend_lines(recent)]
    return "\n".join(parts) + "\n"


async def health_digest(store: "MetricsStore", day: date) -> str:
    """Read *day* and the week before it from *store* and build the digest."""
    today = await store.get(day)
    recent = await store.get_range(day - timedelta(days=TREND_DAYS), day - timedelta(days=1))
    return build_health_digest(today, recent)
