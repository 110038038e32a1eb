"""
Service layer for training signals.

Services bind the pure metric and analysis functions to repositories and
external collaborators, and run batch recomputations.
"""

from .base import BaseService, BatchSummary, utc_now
from .collaborators import (
    FormulaWeatherProvider,
    PredictionEngine,
    StaticPredictionEngine,
    WeatherProvider,
)
from .fitness_signals import FitnessSignalService
from .reprocess import FullReprocessResult, full_reprocess
from .training_load import TrainingLoadService
from .vdot_service import (
    ReclassifyResult,
    VDOTService,
    VdotSyncResult,
    fitness_state_from_zones,
)

__all__ = [
    # Base
    "BaseService",
    "BatchSummary",
    "utc_now",
    # Collaborators
    "FormulaWeatherProvider",
    "PredictionEngine",
    "StaticPredictionEngine",
    "WeatherProvider",
    # Services
    "FitnessSignalService",
    "TrainingLoadService",
    "VDOTService",
    "VdotSyncResult",
    "ReclassifyResult",
    "fitness_state_from_zones",
    "FullReprocessResult",
    "full_reprocess",
]
