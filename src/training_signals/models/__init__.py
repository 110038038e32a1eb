"""Data models for training signals."""

from .workouts import (
    METERS_PER_MILE,
    STEADY_STATE_WORKOUT_TYPES,
    ConfidenceTier,
    FitnessSignalRecord,
    HeartRateContext,
    LapSummary,
    LapType,
    MultiSignalEstimate,
    UserFitnessState,
    VdotHistoryEntry,
    VdotSource,
    WorkoutAssessment,
    WorkoutId,
    WorkoutRecord,
    to_camel,
)

__all__ = [
    "METERS_PER_MILE",
    "STEADY_STATE_WORKOUT_TYPES",
    "ConfidenceTier",
    "FitnessSignalRecord",
    "HeartRateContext",
    "LapSummary",
    "LapType",
    "MultiSignalEstimate",
    "UserFitnessState",
    "VdotHistoryEntry",
    "VdotSource",
    "WorkoutAssessment",
    "WorkoutId",
    "WorkoutRecord",
    "to_camel",
]
