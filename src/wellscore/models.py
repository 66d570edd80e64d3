"""Raw payloads handed over by a health data source.

These are never assumed clean: values may be duplicated, out of order or
physiologically impossible.  The analytics modules decide what to keep.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Sequence


@dataclass(frozen=True, order=True)
class Sample:
    """A single timestamped scalar reading."""

    timestamp: datetime
    value: float


class SleepStage(str, Enum):
    """Stage annotation on a sleep interval."""

    IN_BED = "in_bed"
    AWAKE = "awake"
    ASLEEP = "asleep"  # asleep, stage unspecified
    CORE = "core"
    DEEP = "deep"
    REM = "rem"


ASLEEP_STAGES = frozenset({SleepStage.ASLEEP, SleepStage.CORE, SleepStage.DEEP, SleepStage.REM})


@dataclass(frozen=True)
class SleepInterval:
    """A stage-annotated stretch of a sleep session."""

    start: datetime
    end: datetime
    stage: SleepStage

    @property
    def hours(self) -> float:
        return max((self.end - self.start).total_seconds(), 0.0) / 3600.0

    @property
    def is_asleep(self) -> bool:
        return self.stage in ASLEEP_STAGES


@dataclass(frozen=True)
class WorkoutRecord:
    """Workout metadata plus the heart rate samples recorded during it."""

    id: str
    activity_type: str | None  # platform identifier, mapped via analytics.activity
    start: datetime
    end: datetime
    calories: float = 0.0
    distance: float | None = None  # meters
    stroke_style: str | None = None
    heart_rate: tuple[Sample, ...] = field(default_factory=tuple)

    @property
    def duration_sec(self) -> float:
        return max((self.end - self.start).total_seconds(), 0.0)


def values_of(samples: Sequence[Sample]) -> list[float]:
    """Plain list of sample values, in the given order."""
    return [float(s.value) for s in samples]
