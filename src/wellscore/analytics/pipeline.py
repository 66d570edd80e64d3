"""Daily aggregation: raw health samples in, one DailyRecord out.

:func:`build_daily_record` is the pure part: given a day's raw inputs and
the stored history before that day it runs every scoring module.
:class:`DailyAggregator` adds the I/O around it: it fetches the inputs
concurrently from a :class:`~wellscore.sources.HealthDataSource` and writes
the finished record to a :class:`~wellscore.store.MetricsStore`.  Either a
complete record is written or nothing is.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import TYPE_CHECKING, Sequence

import numpy as np

from wellscore.analytics.acwr import acwr_status, compute_acwr
from wellscore.analytics.baseline import compute_baselines
from wellscore.analytics.hr_profile import HeartRateProfile
from wellscore.analytics.outliers import filter_outliers
from wellscore.analytics.recovery import recovery_components
from wellscore.analytics.sleep import sleep_consistency, sleep_debt, summarize_sleep
from wellscore.analytics.strain import combine_strain, score_workout
from wellscore.analytics.stress import compute_stress_readings, summarize_stress
from wellscore.analytics.summary import DailyRecord
from wellscore.config import DEFAULT_CONFIG, ScoringConfig
from wellscore.errors import AggregationError, FailureKind
from wellscore.models import Sample, SleepInterval, WorkoutRecord, values_of

if TYPE_CHECKING:
    from wellscore.sources import HealthDataSource
    from wellscore.store import MetricsStore

logger = logging.getLogger(__name__)


async def _gather_or_cancel(*aws):
    """``asyncio.gather`` that cancels the still-running siblings when one fails."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except Exception:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


@dataclass
class DayInputs:
    """Everything the health data source returned for one day."""

    heart_rate: list[Sample] = field(default_factory=list)
    hrv: list[Sample] = field(default_factory=list)
    resting_heart_rate: float | None = None
    respiratory_rate: float | None = None
    sleep: list[SleepInterval] = field(default_factory=list)
    workouts: list[WorkoutRecord] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (
            self.heart_rate
            or self.hrv
            or self.sleep
            or self.workouts
            or self.resting_heart_rate is not None
            or self.respiratory_rate is not None
        )


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """[midnight, next midnight) for *day*."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


async def fetch_day_inputs(
    source: "HealthDataSource",
    day: date,
    config: ScoringConfig | None = None,
) -> DayInputs:
    """Fetch all of a day's streams concurrently.

    If one stream fails the others are cancelled and the error propagates.

    The sleep window opens ``lookback_hours`` before midnight so that last
    night's sleep belongs to the morning it ends on.
    """
    cfg = config or DEFAULT_CONFIG
    start, end = day_bounds(day)
    sleep_start = start - timedelta(hours=cfg.sleep.lookback_hours)

    hr, hrv, rhr, resp, sleep, workouts = await _gather_or_cancel(
        source.heart_rate(start, end),
        source.hrv(start, end),
        source.resting_heart_rate(day),
        source.respiratory_rate(day),
        source.sleep(sleep_start, end),
        source.workouts(start, end),
    )
    return DayInputs(
        heart_rate=list(hr),
        hrv=list(hrv),
        resting_heart_rate=rhr,
        respiratory_rate=resp,
        sleep=list(sleep),
        workouts=list(workouts),
    )


def build_daily_record(
    day: date,
    inputs: DayInputs,
    history: Sequence[DailyRecord],
    age: int | None = None,
    max_hr: float | None = None,
    config: ScoringConfig | None = None,
) -> DailyRecord:
    """Score one day.

    Args:
        day: The day being scored.
        inputs: Raw samples for the day.
        history: Stored records; anything on or after *day* is ignored.
        age: Used for max HR when *max_hr* is not given.
        max_hr: Measured max HR.
        config: Scoring configuration.

    Returns:
        A complete DailyRecord.  Recovery and stress are None until a
        baseline can be established.
    """
    cfg = config or DEFAULT_CONFIG
    prior = sorted((r for r in history if r.date < day), key=lambda r: r.date)

    # Baseline first: recovery and stress are relative to it
    baseline = compute_baselines(prior, day, cfg)

    hrv_clean = filter_outliers([v for v in values_of(inputs.hrv) if v > 0], cfg.outliers)
    hrv_avg = round(float(np.mean(hrv_clean)), 1) if hrv_clean else None
    rhr = inputs.resting_heart_rate

    profile_rhr = rhr if rhr is not None else (baseline.rhr_baseline if baseline else None)
    profile = HeartRateProfile.resolve(
        resting_heart_rate=profile_rhr,
        max_heart_rate=max_hr,
        age=age,
        config=cfg.heart_rate,
    )

    # Strain
    workouts = tuple(score_workout(w, profile, cfg.strain) for w in inputs.workouts)
    strain = round(combine_strain([w.strain for w in workouts], cfg.strain), 2)

    # Sleep
    sleep = summarize_sleep(inputs.sleep)
    debt = consistency = None
    if sleep is not None:
        debt_since = day - timedelta(days=cfg.sleep.debt_window_days)
        previous = [r.sleep_duration for r in prior if r.sleep_duration is not None and r.date >= debt_since]
        debt = sleep_debt(previous, sleep.total_sleep_hours, config=cfg.sleep)
        bedtimes = [r.sleep_start for r in prior if r.sleep_start is not None] + [sleep.start]
        consistency = sleep_consistency(bedtimes, cfg.sleep)

    # Recovery
    components = None
    if baseline is None:
        logger.info("No baseline for %s yet; recovery not available", day)
    else:
        yesterday = next((r for r in prior if r.date == day - timedelta(days=1)), None)
        components = recovery_components(
            hrv_current=hrv_avg,
            hrv_baseline=baseline.hrv_baseline,
            hrv_std_dev=baseline.hrv_std_dev,
            rhr_current=rhr,
            rhr_baseline=baseline.rhr_baseline,
            rhr_std_dev=baseline.rhr_std_dev,
            sleep_duration=sleep.total_sleep_hours if sleep else None,
            sleep_efficiency=sleep.efficiency if sleep else None,
            sleep_consistency=consistency,
            recent_strain=yesterday.strain if yesterday else None,
            acute_strain=baseline.acute_strain,
            chronic_strain=baseline.chronic_strain,
            respiratory_rate=inputs.respiratory_rate,
            respiratory_baseline=baseline.respiratory_rate_baseline,
            config=cfg.recovery,
        )

    # Stress
    readings = compute_stress_readings(
        inputs.heart_rate,
        baseline.rhr_baseline if baseline else None,
        workouts=inputs.workouts,
        hrv=inputs.hrv,
        baseline_hrv=baseline.hrv_baseline if baseline else None,
        config=cfg.stress,
    )
    stress = summarize_stress(readings, cfg.stress)
    has_stress = stress.reading_count > 0

    ratio = compute_acwr(baseline.acute_strain, baseline.chronic_strain) if baseline else None

    return DailyRecord(
        date=day,
        strain=strain,
        workouts=workouts,
        recovery=components.overall if components else None,
        recovery_components=components,
        sleep_duration=sleep.total_sleep_hours if sleep else None,
        sleep_efficiency=sleep.efficiency if sleep else None,
        sleep_consistency=consistency,
        sleep_debt=debt,
        restorative_sleep_pct=sleep.restorative_pct if sleep else None,
        sleep_start=sleep.start if sleep else None,
        sleep_end=sleep.end if sleep else None,
        hrv_average=hrv_avg,
        resting_heart_rate=rhr,
        respiratory_rate=inputs.respiratory_rate,
        stress_average=stress.average,
        stress_max=stress.maximum,
        high_stress_minutes=stress.minutes_high if has_stress else None,
        dominant_stress_zone=stress.dominant_zone,
        longest_high_stress_minutes=stress.longest_high_minutes if has_stress else None,
        baseline_metrics=baseline,
        acwr=ratio,
        acwr_status=acwr_status(ratio, cfg.acwr),
    )


class DailyAggregator:
    """Fetch, score and store one day at a time.

    Args:
        source: Where raw samples come from.
        store: Where finished records go (and where history is read from).
        age: User age, for the 220 - age max HR estimate.
        max_hr: Measured max HR; takes precedence over *age*.
        config: Scoring configuration.
    """

    def __init__(
        self,
        source: "HealthDataSource",
        store: "MetricsStore",
        age: int | None = None,
        max_hr: float | None = None,
        config: ScoringConfig | None = None,
    ) -> None:
        self.source = source
        self.store = store
        self.age = age
        self.max_hr = max_hr
        self.config = config or DEFAULT_CONFIG

    async def _history(self, day: date) -> list[DailyRecord]:
        start = day - timedelta(days=self.config.baseline.chronic_days)
        return await self.store.get_range(start, day - timedelta(days=1))

    async def aggregate_day(self, day: date) -> DailyRecord:
        """Score *day* and write its record.

        Raises:
            AggregationError: ``FETCH_ERROR`` if the source failed or the
                store could not be read or written, ``NO_DATA`` if the
                source had nothing for the day.  No record is written in
                either case.
        """
        try:
            inputs, history = await _gather_or_cancel(
                fetch_day_inputs(self.source, day, self.config),
                self._history(day),
            )
        except Exception as exc:
            logger.error("Fetch failed for %s: %s", day, exc)
            raise AggregationError(day, FailureKind.FETCH_ERROR, f"fetch failed: {exc}") from exc

        if inputs.is_empty:
            raise AggregationError(day, FailureKind.NO_DATA, "no health data recorded")

        record = build_daily_record(day, inputs, history, self.age, self.max_hr, self.config)
        try:
            await self.store.put(record)
        except Exception as exc:
            logger.error("Store write failed for %s: %s", day, exc)
            raise AggregationError(day, FailureKind.FETCH_ERROR, f"store write failed: {exc}") from exc
        logger.info("Aggregated %r", record)
        return record

    async def aggregate_range(self, start: date, end: date) -> list[DailyRecord]:
        """Aggregate ``start..end`` inclusive, oldest first.

        Days run one after another so that each day's baseline sees the
        records written for the days before it.  Days without data are
        skipped; fetch errors propagate.
        """
        records = []
        day = start
        while day <= end:
            try:
                records.append(await self.aggregate_day(day))
            except AggregationError as exc:
                if exc.retryable:
                    raise
                logger.info("Skipping %s: %s", day, exc)
            day += timedelta(days=1)
        return records
