"""Shared fixtures and helpers for the wellscore test suite."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Sequence

import pytest

from wellscore.analytics.hr_profile import HeartRateProfile
from wellscore.analytics.summary import DailyRecord
from wellscore.errors import HealthDataSourceError
from wellscore.models import Sample, SleepInterval, SleepStage, WorkoutRecord


DAY = date(2026, 3, 2)
MIDNIGHT = datetime(2026, 3, 2, 0, 0)


# ---------------------------------------------------------------------------
# Sample / record builders
# ---------------------------------------------------------------------------


def make_samples(
    values: Sequence[float],
    start: datetime = MIDNIGHT,
    step_sec: float = 60.0,
) -> list[Sample]:
    """Evenly spaced samples starting at *start*."""
    return [Sample(start + timedelta(seconds=i * step_sec), float(v)) for i, v in enumerate(values)]


def make_workout(
    start: datetime,
    minutes: int,
    hr: float | Sequence[float],
    activity_type: str | None = "running",
    workout_id: str = "w1",
    stroke_style: str | None = None,
    calories: float = 300.0,
    distance: float | None = None,
) -> WorkoutRecord:
    """A workout with one HR sample per minute."""
    values = [hr] * minutes if isinstance(hr, (int, float)) else list(hr)
    return WorkoutRecord(
        id=workout_id,
        activity_type=activity_type,
        start=start,
        end=start + timedelta(minutes=minutes),
        calories=calories,
        distance=distance,
        stroke_style=stroke_style,
        heart_rate=tuple(make_samples(values, start)),
    )


def make_record(
    day: date,
    strain: float = 10.0,
    hrv: float | None = 50.0,
    rhr: float | None = 55.0,
    resp: float | None = 14.0,
    sleep_hours: float | None = 7.5,
    sleep_start: datetime | None = None,
) -> DailyRecord:
    return DailyRecord(
        date=day,
        strain=strain,
        hrv_average=hrv,
        resting_heart_rate=rhr,
        respiratory_rate=resp,
        sleep_duration=sleep_hours,
        sleep_start=sleep_start,
        last_updated=datetime(2026, 1, 1),
    )


def make_history(as_of: date, days: int, **kwargs) -> list[DailyRecord]:
    """One record per day for the *days* days before *as_of*, oldest first."""
    return [make_record(as_of - timedelta(days=n), **kwargs) for n in range(days, 0, -1)]


def make_night(bedtime: datetime, hours: float = 7.5) -> list[SleepInterval]:
    """A simple night: 15 min awake, then core / deep / REM thirds."""
    awake_end = bedtime + timedelta(minutes=15)
    third = timedelta(hours=hours / 3)
    return [
        SleepInterval(bedtime, awake_end, SleepStage.AWAKE),
        SleepInterval(awake_end, awake_end + third, SleepStage.CORE),
        SleepInterval(awake_end + third, awake_end + 2 * third, SleepStage.DEEP),
        SleepInterval(awake_end + 2 * third, awake_end + 3 * third, SleepStage.REM),
    ]


# ---------------------------------------------------------------------------
# Fake health data source
# ---------------------------------------------------------------------------


class FakeHealthSource:
    """In-memory HealthDataSource; *fail_on* names a stream that raises."""

    def __init__(
        self,
        heart_rate: Sequence[Sample] = (),
        hrv: Sequence[Sample] = (),
        resting_heart_rate: float | None = None,
        respiratory_rate: float | None = None,
        sleep: Sequence[SleepInterval] = (),
        workouts: Sequence[WorkoutRecord] = (),
        fail_on: str | None = None,
    ) -> None:
        self._hr = list(heart_rate)
        self._hrv = list(hrv)
        self._rhr = resting_heart_rate
        self._resp = respiratory_rate
        self._sleep = list(sleep)
        self._workouts = list(workouts)
        self.fail_on = fail_on
        self.calls: list[str] = []

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_on == name:
            raise HealthDataSourceError(f"{name} unavailable")

    async def heart_rate(self, start, end):
        self._check("heart_rate")
        return [s for s in self._hr if start <= s.timestamp < end]

    async def hrv(self, start, end):
        self._check("hrv")
        return [s for s in self._hrv if start <= s.timestamp < end]

    async def resting_heart_rate(self, as_of):
        self._check("resting_heart_rate")
        return self._rhr

    async def respiratory_rate(self, as_of):
        self._check("respiratory_rate")
        return self._resp

    async def sleep(self, start, end):
        self._check("sleep")
        return [iv for iv in self._sleep if start <= iv.start < end]

    async def workouts(self, start, end):
        self._check("workouts")
        return [w for w in self._workouts if start <= w.start < end]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def profile() -> HeartRateProfile:
    """Max 190, resting 60: reserve of 130 bpm."""
    return HeartRateProfile(max_heart_rate=190.0, resting_heart_rate=60.0)
