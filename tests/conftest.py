"""Shared fixtures for training signal tests."""

from datetime import date, datetime, timedelta, timezone

import pytest

from training_signals.config import Settings
from training_signals.models.workouts import (
    METERS_PER_MILE,
    LapSummary,
    LapType,
    WorkoutAssessment,
    WorkoutRecord,
)


FIXED_NOW = datetime(2025, 3, 30, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings():
    """Default settings, independent of the environment and any .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def as_of() -> date:
    return FIXED_NOW.date()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def lap_factory():
    """Build a lap of one mile (by default) run at `pace` seconds per mile."""

    def make(index, pace, distance_m=METERS_PER_MILE, lap_type=LapType.STEADY, avg_hr=None):
        miles = distance_m / METERS_PER_MILE
        return LapSummary(
            lap_index=index,
            distance_meters=distance_m,
            moving_time_seconds=pace * miles,
            avg_heart_rate=avg_hr,
            lap_type=lap_type,
        )

    return make


@pytest.fixture
def laps_from_paces(lap_factory):
    """One-mile laps in order from a list of paces."""

    def make(paces):
        return [lap_factory(i, pace) for i, pace in enumerate(paces)]

    return make


@pytest.fixture
def workout_factory():
    """Build a WorkoutRecord; assessment fields are passed as keywords too."""
    counter = {"next_id": 1}

    def make(
        workout_date=FIXED_NOW.date(),
        distance_miles=6.0,
        duration_minutes=54.0,
        avg_pace_seconds=None,
        workout_type="easy",
        rpe=None,
        legs_feel=None,
        sleep_quality=None,
        stress=None,
        soreness=None,
        verdict=None,
        **fields,
    ):
        workout_id = fields.pop("id", counter["next_id"])
        counter["next_id"] += 1

        if avg_pace_seconds is None and distance_miles:
            avg_pace_seconds = duration_minutes * 60 / distance_miles

        assessment_values = dict(
            rpe=rpe,
            legs_feel=legs_feel,
            sleep_quality=sleep_quality,
            stress=stress,
            soreness=soreness,
            verdict=verdict,
        )
        assessment = None
        if any(v is not None for v in assessment_values.values()):
            assessment = WorkoutAssessment(**assessment_values)

        return WorkoutRecord(
            id=workout_id,
            date=workout_date,
            distance_miles=distance_miles,
            duration_minutes=duration_minutes,
            avg_pace_seconds=avg_pace_seconds,
            workout_type=workout_type,
            assessment=assessment,
            **fields,
        )

    return make


@pytest.fixture
def daily_workouts(workout_factory, as_of):
    """28 days of 5-mile runs at RPE 5 ending on as_of (35 miles a week)."""
    return [
        workout_factory(
            workout_date=as_of - timedelta(days=offset),
            distance_miles=5.0,
            duration_minutes=45.0,
            rpe=5,
        )
        for offset in range(28)
    ]
