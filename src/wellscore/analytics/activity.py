"""Workout type and swim stroke mapping.

Health platforms identify workout types with their own, open-ended enum
spaces.  They are mapped onto a closed set here through an explicit table;
anything not listed becomes ``ActivityType.OTHER``.
"""

from __future__ import annotations

from enum import Enum


class ActivityType(str, Enum):
    RUNNING = "running"
    CYCLING = "cycling"
    SWIMMING = "swimming"
    WALKING = "walking"
    HIKING = "hiking"
    ROWING = "rowing"
    STRENGTH_TRAINING = "strength_training"
    HIIT = "hiit"
    YOGA = "yoga"
    ELLIPTICAL = "elliptical"
    STAIR_CLIMBING = "stair_climbing"
    CROSS_TRAINING = "cross_training"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES.get(self, "Workout")

    @property
    def calorie_multiplier(self) -> float:
        return CALORIE_MULTIPLIERS.get(self, 1.0)


_DISPLAY_NAMES = {
    ActivityType.RUNNING: "Running",
    ActivityType.CYCLING: "Cycling",
    ActivityType.SWIMMING: "Swimming",
    ActivityType.WALKING: "Walking",
    ActivityType.HIKING: "Hiking",
    ActivityType.ROWING: "Rowing",
    ActivityType.STRENGTH_TRAINING: "Strength Training",
    ActivityType.HIIT: "HIIT",
    ActivityType.YOGA: "Yoga",
    ActivityType.ELLIPTICAL: "Elliptical",
    ActivityType.STAIR_CLIMBING: "Stair Climbing",
    ActivityType.CROSS_TRAINING: "Cross Training",
}

# Normalised platform identifier -> activity type
_ACTIVITY_TABLE = {
    "running": ActivityType.RUNNING,
    "run": ActivityType.RUNNING,
    "cycling": ActivityType.CYCLING,
    "swimming": ActivityType.SWIMMING,
    "walking": ActivityType.WALKING,
    "hiking": ActivityType.HIKING,
    "rowing": ActivityType.ROWING,
    "strengthtraining": ActivityType.STRENGTH_TRAINING,
    "functionalstrengthtraining": ActivityType.STRENGTH_TRAINING,
    "traditionalstrengthtraining": ActivityType.STRENGTH_TRAINING,
    "coretraining": ActivityType.STRENGTH_TRAINING,
    "hiit": ActivityType.HIIT,
    "highintensityintervaltraining": ActivityType.HIIT,
    "yoga": ActivityType.YOGA,
    "elliptical": ActivityType.ELLIPTICAL,
    "stairclimbing": ActivityType.STAIR_CLIMBING,
    "stairs": ActivityType.STAIR_CLIMBING,
    "crosstraining": ActivityType.CROSS_TRAINING,
}

# Scales kcal/min intensity when a workout has no heart rate
CALORIE_MULTIPLIERS = {
    ActivityType.HIIT: 1.4,
    ActivityType.RUNNING: 1.1,
    ActivityType.CYCLING: 1.0,
    ActivityType.ROWING: 1.2,
    ActivityType.YOGA: 0.6,
    ActivityType.WALKING: 0.7,
    ActivityType.HIKING: 0.95,
    ActivityType.ELLIPTICAL: 0.95,
    ActivityType.STAIR_CLIMBING: 1.15,
}

# Strength sessions differ by format, which ActivityType does not keep
STRENGTH_MULTIPLIERS = {
    "functionalstrengthtraining": 1.15,  # circuit style
    "traditionalstrengthtraining": 1.0,
    "coretraining": 0.9,
}

_PLATFORM_PREFIXES = ("hkworkoutactivitytype", "hkswimmingstrokestyle")


def _normalise(identifier: str) -> str:
    key = identifier.strip().lower()
    for ch in ("_", "-", " ", "."):
        key = key.replace(ch, "")
    for prefix in _PLATFORM_PREFIXES:
        if key.startswith(prefix):
            key = key[len(prefix):]
    return key


def map_activity_type(external: str | None) -> ActivityType:
    """Map a platform workout identifier onto ActivityType (OTHER if unknown)."""
    if not external:
        return ActivityType.OTHER
    return _ACTIVITY_TABLE.get(_normalise(external), ActivityType.OTHER)


def strength_multiplier(external: str | None) -> float:
    """Strain multiplier for a strength session's platform identifier (1.0 if unlisted)."""
    if not external:
        return 1.0
    return STRENGTH_MULTIPLIERS.get(_normalise(external), 1.0)


# ---------------------------------------------------------------------------
# Swimming
# ---------------------------------------------------------------------------


class SwimStroke(str, Enum):
    FREESTYLE = "freestyle"
    BACKSTROKE = "backstroke"
    BREASTSTROKE = "breaststroke"
    BUTTERFLY = "butterfly"
    MIXED = "mixed"
    KICKBOARD = "kickboard"
    UNKNOWN = "unknown"

    @property
    def multiplier(self) -> float:
        return STROKE_MULTIPLIERS.get(self, 1.0)


# Relative energy cost per stroke; unlisted strokes count as freestyle
STROKE_MULTIPLIERS = {
    SwimStroke.FREESTYLE: 1.0,
    SwimStroke.BACKSTROKE: 1.1,
    SwimStroke.BREASTSTROKE: 1.2,
    SwimStroke.BUTTERFLY: 1.4,
    SwimStroke.MIXED: 1.2,  # individual medley
}


def map_swim_stroke(external: str | None) -> SwimStroke:
    if not external:
        return SwimStroke.UNKNOWN
    key = _normalise(external)
    for stroke in SwimStroke:
        if stroke.value == key:
            return stroke
    return SwimStroke.UNKNOWN
