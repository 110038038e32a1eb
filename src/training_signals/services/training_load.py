"""
Training Load Service

Reads workout history from the repository and runs the load, fitness
trend and fatigue analyses over trailing windows ending on a given day.
"""

import logging
from datetime import date, timedelta
from typing import Optional

from ..analysis.fatigue import FatigueIndicatorsResult, analyze_fatigue_indicators
from ..analysis.trends import FitnessTrendResult, analyze_fitness_trend
from ..config import Settings
from ..metrics.load import LoadWindow, compute_load_window
from ..db.repositories import WorkoutRepository
from .base import BaseService, Clock


class TrainingLoadService(BaseService):
    """
    Service for load and fatigue risk indicators.

    Window lengths and the default RPE come from Settings.
    """

    def __init__(
        self,
        workouts: WorkoutRepository,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(settings=settings, clock=clock, logger=logger)
        self._workouts = workouts

    def _as_of(self, as_of: Optional[date]) -> date:
        return as_of or self.now().date()

    def get_load_window(
        self,
        as_of: Optional[date] = None,
        profile_id: Optional[int] = None,
    ) -> LoadWindow:
        """Acute/chronic load and ACWR for the windows ending on `as_of`."""
        end = self._as_of(as_of)
        chronic_days = self.settings.chronic_window_days
        acute_days = self.settings.acute_window_days
        # previous acute window may reach further back than the chronic one
        start = end - timedelta(days=max(chronic_days, acute_days * 2))
        history = self._workouts.list_between(start, end, profile_id=profile_id)

        window = compute_load_window(
            history,
            end,
            acute_days=acute_days,
            chronic_days=chronic_days,
            default_rpe=self.settings.default_rpe,
        )
        self.logger.debug(
            "Load as of %s: acute=%.1f chronic=%.1f acwr=%.2f (%s)",
            end, window.acute_load, window.chronic_load, window.acwr, window.status.value,
        )
        return window

    def get_fitness_trend(
        self,
        as_of: Optional[date] = None,
        weeks: Optional[int] = None,
        workout_type: Optional[str] = None,
        profile_id: Optional[int] = None,
    ) -> FitnessTrendResult:
        end = self._as_of(as_of)
        weeks = weeks or self.settings.fitness_trend_weeks
        history = self._workouts.list_between(
            end - timedelta(days=weeks * 7), end, profile_id=profile_id
        )
        return analyze_fitness_trend(history, end, weeks=weeks, workout_type=workout_type)

    def get_fatigue_indicators(
        self,
        as_of: Optional[date] = None,
        days: Optional[int] = None,
        profile_id: Optional[int] = None,
    ) -> FatigueIndicatorsResult:
        end = self._as_of(as_of)
        days = days or self.settings.fatigue_window_days
        history = self._workouts.list_between(end - timedelta(days=days), end, profile_id=profile_id)
        return analyze_fatigue_indicators(history, end, days=days)
