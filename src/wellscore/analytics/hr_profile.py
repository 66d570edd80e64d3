"""Per-user heart rate model: max / resting HR, intensity and zones."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from wellscore.config import DEFAULT_CONFIG, HeartRateConfig

logger = logging.getLogger(__name__)

# Lower bound of zones 2..5 as a fraction of max HR
ZONE_THRESHOLDS = (0.60, 0.70, 0.80, 0.90)

# [lower, upper] fraction of max HR per zone 1..5
TARGET_RANGES = {
    1: (0.50, 0.60),
    2: (0.60, 0.70),
    3: (0.70, 0.80),
    4: (0.80, 0.90),
    5: (0.90, 1.00),
}

ZONE_NAMES = {
    1: "Recovery",
    2: "Aerobic Base",
    3: "Aerobic",
    4: "Threshold",
    5: "Maximum",
}


def _clamp01(x: float) -> float:
    if math.isnan(x):
        return 0.0
    return min(max(x, 0.0), 1.0)


@dataclass(frozen=True)
class HeartRateProfile:
    """Max and resting heart rate for one scoring run.

    ``max_heart_rate > resting_heart_rate > 0`` is expected.  When it does
    not hold, intensity functions return 0 instead of raising.
    """

    max_heart_rate: float
    resting_heart_rate: float
    age: int | None = None

    def __post_init__(self) -> None:
        if not self.is_valid:
            logger.warning(
                "Invalid heart rate profile (max=%s, resting=%s); intensities will be 0",
                self.max_heart_rate, self.resting_heart_rate,
            )

    @classmethod
    def resolve(
        cls,
        resting_heart_rate: float | None = None,
        max_heart_rate: float | None = None,
        age: int | None = None,
        config: HeartRateConfig | None = None,
    ) -> "HeartRateProfile":
        """Build a profile: explicit max HR, else 220 - age, else the fallback."""
        cfg = config or DEFAULT_CONFIG.heart_rate
        if max_heart_rate is not None:
            max_hr = float(max_heart_rate)
        elif age is not None:
            max_hr = 220.0 - age
        else:
            max_hr = cfg.default_max_hr
        resting = cfg.default_resting_hr if resting_heart_rate is None else float(resting_heart_rate)
        return cls(max_heart_rate=max_hr, resting_heart_rate=resting, age=age)

    @property
    def is_valid(self) -> bool:
        return self.max_heart_rate > self.resting_heart_rate > 0

    @property
    def heart_rate_reserve(self) -> float:
        return self.max_heart_rate - self.resting_heart_rate

    def intensity_from_heart_rate(self, hr: float) -> float:
        """HR as a fraction of max, clamped to [0, 1]."""
        if self.max_heart_rate <= 0:
            return 0.0
        return _clamp01(hr / self.max_heart_rate)

    def intensity_from_heart_rate_reserve(self, hr: float) -> float:
        """Karvonen intensity ``(hr - resting) / reserve``, clamped to [0, 1]."""
        if not self.is_valid:
            return 0.0
        return _clamp01((hr - self.resting_heart_rate) / self.heart_rate_reserve)

    def heart_rate_zone(self, hr: float) -> int:
        """Zone 1..5 by percentage of max HR (zone 5 is >= 90%)."""
        pct = self.intensity_from_heart_rate(hr)
        zone = 1
        for threshold in ZONE_THRESHOLDS:
            if pct >= threshold:
                zone += 1
        return zone

    def target_heart_rate(self, zone: int) -> tuple[float, float]:
        """Absolute [lower, upper] BPM band for *zone*.

        An unknown zone returns the full resting..max range.
        """
        if zone not in TARGET_RANGES:
            return (self.resting_heart_rate, self.max_heart_rate)
        lo, hi = TARGET_RANGES[zone]
        return (round(self.max_heart_rate * lo, 1), round(self.max_heart_rate * hi, 1))


def zone_name(zone: int) -> str:
    return ZONE_NAMES.get(zone, "Unknown")
