"""Workout, lap and fitness-signal data models."""

import math
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


METERS_PER_MILE = 1609.34

WorkoutId = Union[int, str]


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    components = string.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


class LapType(str, Enum):
    """Semantic role of a lap within a workout."""
    WARMUP = "warmup"
    WORK = "work"
    RECOVERY = "recovery"
    COOLDOWN = "cooldown"
    STEADY = "steady"


class ConfidenceTier(str, Enum):
    """Confidence reported by the multi-signal prediction engine."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Workout types expected to be run at roughly constant effort
STEADY_STATE_WORKOUT_TYPES = frozenset({
    "easy",
    "steady",
    "long",
    "tempo",
    "threshold",
    "recovery",
    "marathon",
})


class LapSummary(BaseModel):
    """A single lap as delivered by the lap source, plus its classified role."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    lap_index: int = Field(..., description="Zero-based position in the workout")
    distance_meters: float = Field(..., ge=0)
    moving_time_seconds: float = Field(..., ge=0)
    avg_heart_rate: Optional[float] = None
    max_heart_rate: Optional[float] = None
    elevation_gain_meters: float = 0.0
    lap_type: LapType = LapType.STEADY

    @property
    def distance_miles(self) -> float:
        return self.distance_meters / METERS_PER_MILE

    @property
    def pace_seconds_per_mile(self) -> int:
        """Whole seconds per mile; 0 when the lap has no distance."""
        miles = self.distance_miles
        if miles <= 0:
            return 0
        return math.floor(self.moving_time_seconds / miles + 0.5)


class WorkoutAssessment(BaseModel):
    """Post-run subjective assessment (all scales 1-10)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    rpe: Optional[float] = Field(None, ge=1, le=10)
    legs_feel: Optional[float] = Field(None, ge=0, le=10, description="Higher = heavier legs")
    sleep_quality: Optional[float] = Field(None, ge=0, le=10)
    stress: Optional[float] = Field(None, ge=0, le=10)
    soreness: Optional[float] = Field(None, ge=0, le=10)
    verdict: Optional[str] = Field(None, description="great, good, fine, rough or awful")


class WorkoutRecord(BaseModel):
    """A completed workout summary. Owned by external persistence."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: WorkoutId
    date: date
    distance_miles: float = Field(0.0, ge=0)
    duration_minutes: float = Field(0.0, ge=0)
    avg_pace_seconds: Optional[float] = None
    avg_heart_rate: Optional[float] = None
    max_hr: Optional[float] = None
    weather_temp_f: Optional[float] = None
    weather_humidity_pct: Optional[float] = None
    elevation_gain_ft: Optional[float] = None
    workout_type: str = "easy"
    profile_id: Optional[int] = None
    assessment: Optional[WorkoutAssessment] = None

    @property
    def rpe(self) -> Optional[float]:
        return self.assessment.rpe if self.assessment else None

    @property
    def is_steady_state(self) -> bool:
        return self.workout_type in STEADY_STATE_WORKOUT_TYPES


class HeartRateContext(BaseModel):
    """Athlete heart-rate bounds used for HR-reserve calculations."""

    resting_hr: Optional[int] = None
    max_hr: Optional[int] = None
    age: Optional[int] = None


class FitnessSignalRecord(BaseModel):
    """Per-workout physiological signals. Upserted by workout id."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    workout_id: WorkoutId
    profile_id: Optional[int] = None
    effective_vo2max: Optional[float] = None
    efficiency_factor: Optional[float] = None
    aerobic_decoupling_pct: Optional[float] = None
    weather_adjusted_pace: Optional[float] = None
    elevation_adjusted_pace: Optional[float] = None
    hr_reserve_pct: Optional[float] = None
    is_steady_state: bool = False
    computed_at: datetime

    @property
    def has_signals(self) -> bool:
        """False when every signal is null ("not enough information yet")."""
        return any(
            value is not None
            for value in (
                self.effective_vo2max,
                self.efficiency_factor,
                self.aerobic_decoupling_pct,
                self.weather_adjusted_pace,
                self.elevation_adjusted_pace,
                self.hr_reserve_pct,
            )
        )


class UserFitnessState(BaseModel):
    """Stored VDOT and training paces for a profile."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    profile_id: int
    vdot: Optional[float] = None
    easy_pace_seconds: Optional[int] = None
    marathon_pace_seconds: Optional[int] = None
    half_marathon_pace_seconds: Optional[int] = None
    tempo_pace_seconds: Optional[int] = None
    threshold_pace_seconds: Optional[int] = None
    interval_pace_seconds: Optional[int] = None
    updated_at: Optional[datetime] = None


class MultiSignalEstimate(BaseModel):
    """Raw VDOT estimate produced by the multi-signal prediction engine."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    vdot: Optional[float] = None
    confidence: ConfidenceTier = ConfidenceTier.LOW
    signals_used: int = 0
    agreement_score: float = Field(0.0, ge=0, le=1)
    signal_names: List[str] = Field(default_factory=list)


class VdotSource(str, Enum):
    """Where a VDOT history point came from."""
    RACE = "race"
    ESTIMATE = "estimate"
    MANUAL = "manual"


class VdotHistoryEntry(BaseModel):
    """One monthly point on a profile's VDOT timeline."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    profile_id: int
    # First day of the month the value applies to
    date: date
    vdot: float = Field(..., ge=15, le=85)
    source: VdotSource = VdotSource.ESTIMATE
    confidence: ConfidenceTier = ConfidenceTier.MEDIUM
    raw_vdot: Optional[float] = None
    notes: Optional[str] = None
    recorded_at: Optional[datetime] = None
