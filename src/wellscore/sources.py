"""Health data sources: where raw samples come from.

The scoring engine only depends on the :class:`HealthDataSource` protocol.
:class:`JsonlHealthSource` reads a newline-delimited JSON export, one
object per line, tagged with a ``"kind"``::

    {"kind": "heart_rate", "timestamp": "2026-03-01T08:00:00", "value": 62}
    {"kind": "hrv", "timestamp": "2026-03-01T06:55:00", "value": 48.5}
    {"kind": "resting_heart_rate", "timestamp": "2026-03-01T07:00:00", "value": 54}
    {"kind": "respiratory_rate", "timestamp": "2026-03-01T04:00:00", "value": 14.2}
    {"kind": "sleep", "start": "...", "end": "...", "stage": "deep"}
    {"kind": "workout", "id": "w1", "activity_type": "running",
     "start": "...", "end": "...", "calories": 320, "distance": 5000,
     "heart_rate": [{"timestamp": "...", "value": 150}, ...]}

Timestamps with a UTC offset are converted to naive local time.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Any, Protocol

import numpy as np

from wellscore.errors import HealthDataSourceError
from wellscore.models import Sample, SleepInterval, SleepStage, WorkoutRecord

logger = logging.getLogger(__name__)


class HealthDataSource(Protocol):
    """Read-only access to a user's raw health samples.

    Returned lists are finite and may be iterated any number of times.
    Implementations raise :class:`HealthDataSourceError` when a window
    cannot be fetched.
    """

    async def heart_rate(self, start: datetime, end: datetime) -> list[Sample]: ...

    async def hrv(self, start: datetime, end: datetime) -> list[Sample]: ...

    async def resting_heart_rate(self, as_of: date) -> float | None: ...

    async def respiratory_rate(self, as_of: date) -> float | None: ...

    async def sleep(self, start: datetime, end: datetime) -> list[SleepInterval]: ...

    async def workouts(self, start: datetime, end: datetime) -> list[WorkoutRecord]: ...


# ---------------------------------------------------------------------------
# JSONL export
# ---------------------------------------------------------------------------


def _parse_ts(value: str) -> datetime:
    ts = datetime.fromisoformat(value)
    if ts.tzinfo is not None:
        ts = ts.astimezone().replace(tzinfo=None)
    return ts


def _parse_sample(obj: dict[str, Any]) -> Sample:
    return Sample(_parse_ts(obj["timestamp"]), float(obj["value"]))


def _parse_workout(obj: dict[str, Any]) -> WorkoutRecord:
    distance = obj.get("distance")
    return WorkoutRecord(
        id=str(obj["id"]),
        activity_type=obj.get("activity_type"),
        start=_parse_ts(obj["start"]),
        end=_parse_ts(obj["end"]),
        calories=float(obj.get("calories") or 0.0),
        distance=None if distance is None else float(distance),
        stroke_style=obj.get("stroke_style"),
        heart_rate=tuple(sorted(_parse_sample(s) for s in obj.get("heart_rate") or [])),
    )


@dataclass
class _Export:
    heart_rate: list[Sample] = field(default_factory=list)
    hrv: list[Sample] = field(default_factory=list)
    resting_heart_rate: list[Sample] = field(default_factory=list)
    respiratory_rate: list[Sample] = field(default_factory=list)
    sleep: list[SleepInterval] = field(default_factory=list)
    workouts: list[WorkoutRecord] = field(default_factory=list)


_SCALAR_KINDS = ("heart_rate", "hrv", "resting_heart_rate", "respiratory_rate")


def parse_export(path: Path) -> _Export:
    """Parse a JSONL export, skipping (and logging) malformed lines."""
    export = _Export()
    try:
        lines = path.read_text().splitlines()
    except OSError as exc:
        raise HealthDataSourceError(f"cannot read health export {path}: {exc}") from exc

    skipped = 0
    for lineno, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            obj = json.loads(line)
            kind = obj["kind"]
            if kind in _SCALAR_KINDS:
                getattr(export, kind).append(_parse_sample(obj))
            elif kind == "sleep":
                export.sleep.append(
                    SleepInterval(_parse_ts(obj["start"]), _parse_ts(obj["end"]), SleepStage(obj["stage"]))
                )
            elif kind == "workout":
                export.workouts.append(_parse_workout(obj))
            else:
                raise ValueError(f"unknown kind {kind!r}")
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            skipped += 1
            logger.warning("%s:%d: skipping invalid line (%s)", path, lineno, exc)

    for samples in (export.heart_rate, export.hrv, export.resting_heart_rate, export.respiratory_rate):
        samples.sort()
    export.sleep.sort(key=lambda iv: iv.start)
    export.workouts.sort(key=lambda w: w.start)
    logger.info(
        "Loaded %s: %d HR, %d HRV, %d sleep intervals, %d workouts (%d lines skipped)",
        path, len(export.heart_rate), len(export.hrv), len(export.sleep), len(export.workouts), skipped,
    )
    return export


class JsonlHealthSource:
    """HealthDataSource backed by a JSONL export file.

    The file is parsed once, on first use, in a worker thread.

    Args:
        path: Export file.
        trailing_days: Days averaged for ``resting_heart_rate`` and
            ``respiratory_rate`` (1 = the ``as_of`` day only).
    """

    def __init__(self, path: str | Path, trailing_days: int = 1) -> None:
        self.path = Path(path)
        self.trailing_days = trailing_days
        self._export: _Export | None = None
        self._lock = asyncio.Lock()

    async def _load(self) -> _Export:
        if self._export is None:
            async with self._lock:
                if self._export is None:
                    if not self.path.is_file():
                        raise HealthDataSourceError(f"health export not found: {self.path}")
                    self._export = await asyncio.to_thread(parse_export, self.path)
        return self._export

    @staticmethod
    def _window(samples: list[Sample], start: datetime, end: datetime) -> list[Sample]:
        return [s for s in samples if start <= s.timestamp < end]

    def _trailing_mean(self, samples: list[Sample], as_of: date) -> float | None:
        end = datetime.combine(as_of + timedelta(days=1), time.min)
        start = end - timedelta(days=self.trailing_days)
        values = [s.value for s in self._window(samples, start, end) if s.value > 0]
        if not values:
            return None
        return round(float(np.mean(values)), 1)

    async def heart_rate(self, start: datetime, end: datetime) -> list[Sample]:
        return self._window((await self._load()).heart_rate, start, end)

    async def hrv(self, start: datetime, end: datetime) -> list[Sample]:
        return self._window((await self._load()).hrv, start, end)

    async def resting_heart_rate(self, as_of: date) -> float | None:
        return self._trailing_mean((await self._load()).resting_heart_rate, as_of)

    async def respiratory_rate(self, as_of: date) -> float | None:
        return self._trailing_mean((await self._load()).respiratory_rate, as_of)

    async def sleep(self, start: datetime, end: datetime) -> list[SleepInterval]:
        return [iv for iv in (await self._load()).sleep if start <= iv.start < end]

    async def workouts(self, start: datetime, end: datetime) -> list[WorkoutRecord]:
        return [w for w in (await self._load()).workouts if start <= w.start < end]
