"""Persistence collaborators for training signals."""

from .repositories import (
    FitnessSignalRepository,
    FitnessStateRepository,
    InMemoryRepository,
    LapRepository,
    VdotHistoryRepository,
    Repository,
    WorkoutRepository,
)

__all__ = [
    "FitnessSignalRepository",
    "FitnessStateRepository",
    "InMemoryRepository",
    "LapRepository",
    "VdotHistoryRepository",
    "Repository",
    "WorkoutRepository",
]
