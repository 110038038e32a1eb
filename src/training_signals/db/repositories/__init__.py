"""Repository interfaces and in-memory implementations."""

from .base import Repository
from .memory import (
    FitnessSignalRepository,
    FitnessStateRepository,
    InMemoryRepository,
    LapRepository,
    VdotHistoryRepository,
    WorkoutRepository,
)

__all__ = [
    "Repository",
    "InMemoryRepository",
    "WorkoutRepository",
    "FitnessSignalRepository",
    "FitnessStateRepository",
    "LapRepository",
    "VdotHistoryRepository",
]
