"""
Fitness Signal Service

Computes and stores the per-workout FitnessSignalRecord, for one workout
or as a backfill over the whole workout history.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..config import Settings
from ..exceptions import TrainingSignalsError, ErrorCode
from ..metrics.signals import compute_fitness_signals
from ..models.workouts import (
    FitnessSignalRecord,
    HeartRateContext,
    WorkoutId,
    WorkoutRecord,
)
from ..db.repositories import FitnessSignalRepository, WorkoutRepository
from .base import BaseService, BatchSummary, Clock
from .collaborators import FormulaWeatherProvider, WeatherProvider


class FitnessSignalService(BaseService):
    """
    Service for per-workout physiological signals.

    This service provides:
    - Signal computation for a single workout
    - Upsert of the record by workout id
    - Backfill over many workouts with per-item failure isolation
    """

    def __init__(
        self,
        workouts: WorkoutRepository,
        signals: FitnessSignalRepository,
        weather: Optional[WeatherProvider] = None,
        hr_contexts: Optional[Dict[int, HeartRateContext]] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(settings=settings, clock=clock, logger=logger)
        self._workouts = workouts
        self._signals = signals
        self._weather = weather or FormulaWeatherProvider()
        self._hr_contexts = dict(hr_contexts or {})

    def set_hr_context(self, profile_id: int, context: HeartRateContext) -> None:
        self._hr_contexts[profile_id] = context

    def hr_context_for(self, profile_id: Optional[int]) -> Optional[HeartRateContext]:
        if profile_id is None:
            return None
        return self._hr_contexts.get(profile_id)

    def compute_signals(
        self,
        workout: WorkoutRecord,
        hr_pace_samples: Optional[Sequence[Tuple[float, float]]] = None,
    ) -> FitnessSignalRecord:
        """Compute (without storing) the signal record for a workout."""
        return compute_fitness_signals(
            workout,
            self.hr_context_for(workout.profile_id),
            computed_at=self.now(),
            weather_adjustment=self._weather.get_weather_pace_adjustment,
            hr_pace_samples=hr_pace_samples,
            settings=self.settings,
        )

    def compute_for_workout(
        self,
        workout_id: WorkoutId,
        hr_pace_samples: Optional[Sequence[Tuple[float, float]]] = None,
    ) -> FitnessSignalRecord:
        """
        Compute and upsert the signal record for a stored workout.

        Raises:
            TrainingSignalsError: If the workout does not exist
        """
        workout = self._workouts.get(workout_id)
        if workout is None:
            raise TrainingSignalsError(
                f"Workout {workout_id} not found",
                code=ErrorCode.NOT_FOUND,
                details={"workout_id": workout_id},
            )

        record = self.compute_signals(workout, hr_pace_samples)
        self._signals.save(record)

        if not record.has_signals:
            self.logger.info("Workout %s: not enough information for fitness signals", workout_id)
        return record

    def get_signals(self, workout_id: WorkoutId) -> Optional[FitnessSignalRecord]:
        return self._signals.get(workout_id)

    def backfill(
        self,
        workout_ids: Optional[Iterable[WorkoutId]] = None,
        force: bool = False,
    ) -> BatchSummary:
        """
        Compute signals for many workouts.

        Workouts without distance or duration, and (unless force) workouts
        that already have a record, are skipped. A failing workout is
        counted and the backfill continues.

        Args:
            workout_ids: Workouts to process; all stored workouts by default
            force: Recompute records that already exist
        """
        if workout_ids is None:
            targets: List[WorkoutRecord] = self._workouts.list_between()
        else:
            targets = []
            for workout_id in workout_ids:
                workout = self._workouts.get(workout_id)
                if workout is None:
                    self.logger.warning("Workout %s not found, ignoring", workout_id)
                    continue
                targets.append(workout)

        def process(workout: WorkoutRecord) -> bool:
            if not workout.distance_miles or not workout.duration_minutes:
                return False
            if not force and self._signals.exists(workout.id):
                return False
            self._signals.save(self.compute_signals(workout))
            return True

        return self.run_batch(targets, process, lambda w: w.id, label="workouts")
