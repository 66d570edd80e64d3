"""Daily record: the unit the metrics store persists, one per calendar day.

Records are immutable.  Updates go through the ``with_updated_*`` methods,
which return a new record with a fresh ``last_updated`` stamp.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Sequence

from wellscore.analytics.acwr import ACWRStatus, acwr_status, compute_acwr
from wellscore.analytics.baseline import BaselineMetrics
from wellscore.analytics.recovery import RecoveryComponents
from wellscore.analytics.strain import WorkoutSummary
from wellscore.analytics.stress import StressSummary, StressZone
from wellscore.config import AcwrConfig


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@dataclass(frozen=True)
class DailyRecord:
    """A single day's scores and the inputs they were computed from."""

    date: date

    # Strain
    strain: float = 0.0
    workouts: tuple[WorkoutSummary, ...] = ()

    # Recovery
    recovery: float | None = None
    recovery_components: RecoveryComponents | None = None

    # Sleep
    sleep_duration: float | None = None  # hours asleep
    sleep_efficiency: float | None = None  # percent
    sleep_consistency: float | None = None  # 0-100
    sleep_debt: float | None = None  # hours
    restorative_sleep_pct: float | None = None
    sleep_start: datetime | None = None
    sleep_end: datetime | None = None

    # Vitals
    hrv_average: float | None = None  # ms
    resting_heart_rate: float | None = None  # bpm
    respiratory_rate: float | None = None  # breaths/min

    # Stress (non-exercise readings only)
    stress_average: float | None = None
    stress_max: float | None = None
    high_stress_minutes: float | None = None
    dominant_stress_zone: StressZone | None = None
    longest_high_stress_minutes: float | None = None

    # Baseline snapshot used to score this day
    baseline_metrics: BaselineMetrics | None = None
    acwr: float | None = None
    acwr_status: ACWRStatus = ACWRStatus.UNKNOWN

    last_updated: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        # Keyed by calendar day
        if isinstance(self.date, datetime):
            object.__setattr__(self, "date", self.date.date())
        object.__setattr__(self, "workouts", tuple(self.workouts))

    # -- copy-on-write updates ------------------------------------------------

    def with_updated_recovery(
        self,
        recovery: float | None,
        components: RecoveryComponents | None = None,
    ) -> "DailyRecord":
        return replace(
            self,
            recovery=recovery,
            recovery_components=components,
            last_updated=datetime.now(),
        )

    def with_updated_strain(
        self,
        strain: float,
        workouts: Sequence[WorkoutSummary] | None = None,
    ) -> "DailyRecord":
        return replace(
            self,
            strain=strain,
            workouts=self.workouts if workouts is None else tuple(workouts),
            last_updated=datetime.now(),
        )

    def with_updated_stress(self, summary: StressSummary) -> "DailyRecord":
        return replace(
            self,
            stress_average=summary.average,
            stress_max=summary.maximum,
            high_stress_minutes=summary.minutes_high,
            dominant_stress_zone=summary.dominant_zone,
            longest_high_stress_minutes=summary.longest_high_minutes,
            last_updated=datetime.now(),
        )

    def with_updated_baseline(
        self,
        baseline: BaselineMetrics | None,
        config: AcwrConfig | None = None,
    ) -> "DailyRecord":
        """Swap the baseline and re-derive ACWR; *config* sets the status bands."""
        ratio = compute_acwr(baseline.acute_strain, baseline.chronic_strain) if baseline else None
        return replace(
            self,
            baseline_metrics=baseline,
            acwr=ratio,
            acwr_status=acwr_status(ratio, config),
            last_updated=datetime.now(),
        )

    # -- serialisation --------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict (JSON-friendly)."""
        return {
            "date": self.date.isoformat(),
            "strain": self.strain,
            "workouts": [w.to_dict() for w in self.workouts],
            "recovery": self.recovery,
            "recovery_components": self.recovery_components.to_dict() if self.recovery_components else None,
            "sleep_duration": self.sleep_duration,
            "sleep_efficiency": self.sleep_efficiency,
            "sleep_consistency": self.sleep_consistency,
            "sleep_debt": self.sleep_debt,
            "restorative_sleep_pct": self.restorative_sleep_pct,
            "sleep_start": _iso(self.sleep_start),
            "sleep_end": _iso(self.sleep_end),
            "hrv_average": self.hrv_average,
            "resting_heart_rate": self.resting_heart_rate,
            "respiratory_rate": self.respiratory_rate,
            "stress_average": self.stress_average,
            "stress_max": self.stress_max,
            "high_stress_minutes": self.high_stress_minutes,
            "dominant_stress_zone": self.dominant_stress_zone.value if self.dominant_stress_zone else None,
            "longest_high_stress_minutes": self.longest_high_stress_minutes,
            "baseline_metrics": self.baseline_metrics.to_dict() if self.baseline_metrics else None,
            "acwr": self.acwr,
            "acwr_status": self.acwr_status.value,
            "last_updated": self.last_updated.isoformat(),
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DailyRecord":
        components = data.get("recovery_components")
        baseline = data.get("baseline_metrics")
        zone = data.get("dominant_stress_zone")
        return cls(
            date=date.fromisoformat(data["date"]),
            strain=float(data.get("strain", 0.0)),
            workouts=tuple(WorkoutSummary.from_dict(w) for w in data.get("workouts") or []),
            recovery=data.get("recovery"),
            recovery_components=RecoveryComponents.from_dict(components) if components else None,
            sleep_duration=data.get("sleep_duration"),
            sleep_efficiency=data.get("sleep_efficiency"),
            sleep_consistency=data.get("sleep_consistency"),
            sleep_debt=data.get("sleep_debt"),
            restorative_sleep_pct=data.get("restorative_sleep_pct"),
            sleep_start=_parse_dt(data.get("sleep_start")),
            sleep_end=_parse_dt(data.get("sleep_end")),
            hrv_average=data.get("hrv_average"),
            resting_heart_rate=data.get("resting_heart_rate"),
            respiratory_rate=data.get("respiratory_rate"),
            stress_average=data.get("stress_average"),
            stress_max=data.get("stress_max"),
            high_stress_minutes=data.get("high_stress_minutes"),
            dominant_stress_zone=StressZone(zone) if zone else None,
            longest_high_stress_minutes=data.get("longest_high_stress_minutes"),
            baseline_metrics=BaselineMetrics.from_dict(baseline) if baseline else None,
            acwr=data.get("acwr"),
            acwr_status=ACWRStatus(data.get("acwr_status", ACWRStatus.UNKNOWN.value)),
            last_updated=_parse_dt(data.get("last_updated")) or datetime.now(),
        )

    @classmethod
    def from_json(cls, text: str) -> "DailyRecord":
        return cls.from_dict(json.loads(text))

    def __repr__(self) -> str:
        recovery = "-" if self.recovery is None else f"{self.recovery:.0f}"
        sleep = "-" if self.sleep_duration is None else f"{self.sleep_duration:.1f}h"
        return (
            f"DailyRecord({self.date.isoformat()}: "
            f"strain={self.strain:.1f}/21, "
            f"recovery={recovery}, "
            f"sleep={sleep}, "
            f"workouts={len(self.workouts)})"
        )
