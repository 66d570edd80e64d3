"""Exception types raised by wellscore.

Insufficient history is not an error: baseline and recovery functions
return ``None`` for it.  Implausible sensor values are dropped by the
outlier filter and never raised.
"""

from __future__ import annotations

from datetime import date
from enum import Enum


class WellscoreError(Exception):
    """Base class for all wellscore errors."""


class ConfigError(WellscoreError, ValueError):
    """Invalid or unknown configuration value."""


class HealthDataSourceError(WellscoreError):
    """The health data source could not return samples for a window."""


class MetricsStoreError(WellscoreError):
    """A daily record could not be read from or written to the store."""


class FailureKind(str, Enum):
    """Why a day could not be aggregated."""

    NO_DATA = "no_data"  # benign: nothing recorded for the day yet
    FETCH_ERROR = "fetch_error"  # should be retried / reported


class AggregationError(WellscoreError):
    """A day's aggregation was aborted; nothing was written for it."""

    def __init__(self, day: date, kind: FailureKind, message: str) -> None:
        super().__init__(f"{day.isoformat()}: {message}")
        self.day = day
        self.kind = kind

    @property
    def retryable(self) -> bool:
        return self.kind is FailureKind.FETCH_ERROR
