"""
Fitness Signal Extractor

Derives per-workout physiological signals from a completed workout:

- HR reserve fraction: share of the resting-to-max range in use
- Effective VO2max: heart-rate-reserve regression, steady-state runs only
- Efficiency factor: velocity (m/min) per heartbeat
- Aerobic decoupling: Pa:HR drift between the two halves of a run
- Weather- and elevation-adjusted pace

Every signal is optional. A missing prerequisite produces a null field,
never an error, and the record is built with whatever could be computed.
"""

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence, Tuple

from ..config import Settings, get_settings
from ..exceptions import UpstreamFailureError
from ..models.workouts import (
    METERS_PER_MILE,
    FitnessSignalRecord,
    HeartRateContext,
    WorkoutRecord,
)
from .pace import round_half_up, velocity_m_per_min
from .vdot import VDOT_MAX, VDOT_MIN, oxygen_cost
from .weather import elevation_pace_correction, get_weather_pace_adjustment

logger = logging.getLogger(__name__)


# HR reserve band where the %VO2max regression is most accurate
HRR_LOWER = 0.50
HRR_UPPER = 0.92

# %VO2max = 1.4854 * HRR - 0.3702 (Swain & Leutholtz)
HRR_SLOPE = 1.4854
HRR_INTERCEPT = -0.3702

MIN_HR_RANGE = 20
MIN_DECOUPLING_SAMPLES = 10

WeatherAdjustment = Callable[[float, float], float]


def resolve_max_hr(
    workout: WorkoutRecord,
    hr_context: Optional[HeartRateContext],
    settings: Settings,
) -> int:
    """
    Athlete max HR: explicit value, else 220 - age, else the configured default.

    A higher max HR recorded during the workout itself always wins.
    """
    if hr_context and hr_context.max_hr:
        max_hr = hr_context.max_hr
    elif hr_context and hr_context.age:
        max_hr = 220 - hr_context.age
    else:
        max_hr = settings.default_max_hr
    return int(max(max_hr, workout.max_hr or 0))


def resolve_resting_hr(hr_context: Optional[HeartRateContext], settings: Settings) -> int:
    if hr_context and hr_context.resting_hr:
        return hr_context.resting_hr
    return settings.default_resting_hr


def hr_reserve_fraction(avg_hr: Optional[float], resting_hr: float, max_hr: float) -> Optional[float]:
    """
    Fraction of heart-rate reserve in use, clamped to [0, 1].

    None when avg HR is unknown or the reserve is 20 bpm or narrower.
    """
    if not avg_hr or avg_hr <= 0:
        return None
    hr_range = max_hr - resting_hr
    if hr_range <= MIN_HR_RANGE:
        return None
    return max(0.0, min(1.0, (avg_hr - resting_hr) / hr_range))


def effective_vo2max(velocity: float, hrr: Optional[float], is_steady_state: bool) -> Optional[float]:
    """
    VO2max implied by running at `velocity` (m/min) at HR reserve `hrr`.

    Only defined for steady-state workouts with HRR strictly inside
    (0.50, 0.92). Results whose %VO2max falls outside (0.2, 1.0] or whose
    VO2max falls outside [15, 85] are discarded.
    """
    if not is_steady_state or hrr is None or velocity <= 0:
        return None
    if not HRR_LOWER < hrr < HRR_UPPER:
        return None

    percent_vo2max = HRR_SLOPE * hrr + HRR_INTERCEPT
    if not 0.2 < percent_vo2max <= 1.0:
        return None

    vo2max = oxygen_cost(velocity) / percent_vo2max
    if not VDOT_MIN <= vo2max <= VDOT_MAX:
        return None
    return vo2max


def efficiency_factor(velocity: float, avg_hr: Optional[float]) -> Optional[float]:
    """Metres per minute per beat. Unnormalized; compare within one athlete."""
    if not avg_hr or avg_hr <= 0 or velocity <= 0:
        return None
    return velocity / avg_hr


def aerobic_decoupling(samples: Optional[Sequence[Tuple[float, float]]]) -> Optional[float]:
    """
    Pa:HR decoupling in percent from (pace sec/mi, heart rate) samples.

    Compares the speed-to-HR ratio of the first half with the second half.
    Positive values mean heart rate drifted up relative to pace. None when
    fewer than 10 usable samples are available.
    """
    if not samples:
        return None

    usable = [(pace, hr) for pace, hr in samples if pace and pace > 0 and hr and hr > 0]
    if len(usable) < MIN_DECOUPLING_SAMPLES:
        return None

    def ratio(chunk: Sequence[Tuple[float, float]]) -> float:
        speeds = [METERS_PER_MILE / (pace / 60) for pace, _ in chunk]
        heart_rates = [hr for _, hr in chunk]
        return (sum(speeds) / len(speeds)) / (sum(heart_rates) / len(heart_rates))

    midpoint = len(usable) // 2
    first = ratio(usable[:midpoint])
    second = ratio(usable[midpoint:])
    return round_half_up((first - second) / first * 100, 1)


def _weather_penalty(
    workout: WorkoutRecord,
    weather_adjustment: Optional[WeatherAdjustment],
) -> float:
    """Query the weather collaborator; 0 when it is unavailable."""
    lookup = weather_adjustment or get_weather_pace_adjustment
    try:
        return lookup(workout.weather_temp_f, workout.weather_humidity_pct)
    except UpstreamFailureError as e:
        logger.warning(
            "Weather adjustment unavailable for workout %s, continuing without it: %s",
            workout.id, e.message,
        )
        return 0


def compute_fitness_signals(
    workout: WorkoutRecord,
    hr_context: Optional[HeartRateContext] = None,
    *,
    computed_at: datetime,
    weather_adjustment: Optional[WeatherAdjustment] = None,
    hr_pace_samples: Optional[Sequence[Tuple[float, float]]] = None,
    settings: Optional[Settings] = None,
) -> FitnessSignalRecord:
    """
    Build the FitnessSignalRecord for one workout.

    Args:
        workout: Completed workout summary
        hr_context: Athlete resting/max HR and age, when known
        computed_at: Timestamp written to the record
        weather_adjustment: Callable (temp_f, humidity_pct) -> sec/mi penalty;
            defaults to the built-in heat/humidity formula. May raise
            UpstreamFailureError, in which case weather is ignored.
        hr_pace_samples: Optional (pace, HR) stream for aerobic decoupling
        settings: Defaults for resting/max HR

    Returns:
        The signal record. Identical inputs always give identical output.
    """
    settings = settings or get_settings()

    resting_hr = resolve_resting_hr(hr_context, settings)
    max_hr = resolve_max_hr(workout, hr_context, settings)
    hrr = hr_reserve_fraction(workout.avg_heart_rate, resting_hr, max_hr)

    velocity = velocity_m_per_min(workout.distance_miles, workout.duration_minutes)
    avg_pace = workout.avg_pace_seconds

    weather_adjusted_pace = None
    if (
        workout.weather_temp_f is not None
        and workout.weather_humidity_pct is not None
        and avg_pace
    ):
        penalty = _weather_penalty(workout, weather_adjustment)
        if penalty > 0:
            weather_adjusted_pace = avg_pace - penalty
            if weather_adjusted_pace > 0:
                velocity = METERS_PER_MILE / (weather_adjusted_pace / 60)

    elevation_adjusted_pace = None
    if workout.elevation_gain_ft and avg_pace and workout.distance_miles > 0:
        correction = elevation_pace_correction(workout.elevation_gain_ft, workout.distance_miles)
        if correction > 0:
            elevation_adjusted_pace = avg_pace - correction

    vo2max = effective_vo2max(velocity, hrr, workout.is_steady_state)
    ef = efficiency_factor(velocity, workout.avg_heart_rate)

    return FitnessSignalRecord(
        workout_id=workout.id,
        profile_id=workout.profile_id,
        effective_vo2max=round_half_up(vo2max, 1) if vo2max is not None else None,
        efficiency_factor=round_half_up(ef, 3) if ef is not None else None,
        aerobic_decoupling_pct=aerobic_decoupling(hr_pace_samples),
        weather_adjusted_pace=weather_adjusted_pace,
        elevation_adjusted_pace=elevation_adjusted_pace,
        hr_reserve_pct=round_half_up(hrr, 3) if hrr is not None else None,
        is_steady_state=workout.is_steady_state,
        computed_at=computed_at,
    )
