"""
VDOT Pace Zones Calculator (Daniels' Running Formula)

Implements Jack Daniels' VDOT system for calculating training pace zones
from race performance, and the asymmetric smoothing applied when a new
VDOT estimate replaces a stored one.

Key concepts:
- VDOT: A "pseudo-VO2max" value derived from race performance
- Each VDOT value corresponds to specific training pace zones
- Paces are in seconds per mile

References:
- Jack Daniels' Running Formula (3rd edition)
- Daniels, J.T. & Gilbert, J. (1979). Oxygen Power.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..exceptions import InvalidInputRangeError
from ..models.workouts import METERS_PER_MILE, ConfidenceTier
from .pace import (
    format_pace_per_mile,
    format_time,
    parse_race_time,
    round_half_up,
    velocity_to_pace,
)
from .weather import elevation_pace_correction, get_weather_pace_adjustment


VDOT_MIN = 15.0
VDOT_MAX = 85.0

# A condition-adjusted race time is never more than 15% faster than actual
MAX_CONDITION_CORRECTION = 0.15

# (upward fraction, downward fraction) of a VDOT change applied per tier.
# Upward moves are trusted more: a fast result is hard to fake, a slow one
# has many explanations (bad day, heat, effort level).
SMOOTHING_FACTORS: Dict[ConfidenceTier, Tuple[float, float]] = {
    ConfidenceTier.HIGH: (0.85, 0.40),
    ConfidenceTier.MEDIUM: (0.75, 0.30),
    ConfidenceTier.LOW: (0.60, 0.20),
}


class RaceDistance(Enum):
    """Common race distances with values in meters."""
    FIVE_K = 5000
    TEN_K = 10000
    FIFTEEN_K = 15000
    TEN_MILE = 16093.4
    HALF_MARATHON = 21097.5
    MARATHON = 42195

    @classmethod
    def from_string(cls, s: str) -> Optional["RaceDistance"]:
        """Parse race distance from string."""
        mapping = {
            "5k": cls.FIVE_K,
            "5km": cls.FIVE_K,
            "5000": cls.FIVE_K,
            "10k": cls.TEN_K,
            "10km": cls.TEN_K,
            "10000": cls.TEN_K,
            "15k": cls.FIFTEEN_K,
            "15km": cls.FIFTEEN_K,
            "10_mile": cls.TEN_MILE,
            "10mi": cls.TEN_MILE,
            "half": cls.HALF_MARATHON,
            "half_marathon": cls.HALF_MARATHON,
            "halfmarathon": cls.HALF_MARATHON,
            "21k": cls.HALF_MARATHON,
            "21.1k": cls.HALF_MARATHON,
            "marathon": cls.MARATHON,
            "full": cls.MARATHON,
            "42k": cls.MARATHON,
            "42.2k": cls.MARATHON,
        }
        return mapping.get(s.lower().replace("-", "_").replace(" ", "_"))

    @property
    def display_name(self) -> str:
        """Get human-readable name."""
        names = {
            RaceDistance.FIVE_K: "5K",
            RaceDistance.TEN_K: "10K",
            RaceDistance.FIFTEEN_K: "15K",
            RaceDistance.TEN_MILE: "10 Mile",
            RaceDistance.HALF_MARATHON: "Half Marathon",
            RaceDistance.MARATHON: "Marathon",
        }
        return names[self]

    @property
    def distance_miles(self) -> float:
        return self.value / METERS_PER_MILE


def oxygen_cost(velocity_m_per_min: float) -> float:
    """
    Oxygen cost (ml O2/kg/min) of running at a velocity, Daniels' equation.
    """
    return (
        -4.60
        + 0.182258 * velocity_m_per_min
        + 0.000104 * velocity_m_per_min ** 2
    )


def percent_vo2max_sustained(time_min: float) -> float:
    """Fraction of VO2max sustainable for a race of the given duration."""
    return (
        0.8
        + 0.1894393 * math.exp(-0.012778 * time_min)
        + 0.2989558 * math.exp(-0.1932605 * time_min)
    )


def _raw_vdot(distance_m: float, time_sec: float) -> float:
    velocity = distance_m / (time_sec / 60)
    return oxygen_cost(velocity) / percent_vo2max_sustained(time_sec / 60)


def is_valid_vdot(vdot: Optional[float]) -> bool:
    return vdot is not None and VDOT_MIN <= vdot <= VDOT_MAX


def calculate_vdot(race_distance_m: float, race_time_sec: float) -> float:
    """
    Calculate VDOT from a race result.

    Args:
        race_distance_m: Race distance in meters
        race_time_sec: Race finishing time in seconds

    Returns:
        VDOT clamped to [15, 85] and rounded to 1 decimal

    Raises:
        InvalidInputRangeError: If distance or time is not positive

    Example:
        >>> calculate_vdot(5000, 1200)  # 5K in 20:00
        49.8
    """
    if race_time_sec <= 0 or race_distance_m <= 0:
        raise InvalidInputRangeError(
            "Race time and distance must be positive",
            details={"distance_m": race_distance_m, "time_sec": race_time_sec},
        )

    vdot = _raw_vdot(race_distance_m, race_time_sec)
    vdot = max(VDOT_MIN, min(VDOT_MAX, vdot))
    return round_half_up(vdot, 1)


def calculate_adjusted_vdot(
    race_distance_m: float,
    race_time_sec: float,
    weather_temp_f: Optional[float] = None,
    weather_humidity_pct: Optional[float] = None,
    elevation_gain_ft: Optional[float] = None,
) -> float:
    """
    VDOT for the race as if it had been run flat in ideal weather.

    The per-mile weather and elevation penalties are removed from the
    finishing time across every mile before converting, capped so the
    corrected time is never below 85% of the actual time.
    """
    distance_miles = race_distance_m / METERS_PER_MILE
    penalty_per_mile = 0

    if weather_temp_f is not None and weather_humidity_pct is not None:
        penalty_per_mile += get_weather_pace_adjustment(weather_temp_f, weather_humidity_pct)
    if elevation_gain_ft is not None and elevation_gain_ft > 0 and distance_miles > 0:
        penalty_per_mile += elevation_pace_correction(elevation_gain_ft, distance_miles)

    if penalty_per_mile <= 0:
        return calculate_vdot(race_distance_m, race_time_sec)

    corrected_time = race_time_sec - penalty_per_mile * distance_miles
    safe_time = max(corrected_time, race_time_sec * (1 - MAX_CONDITION_CORRECTION))
    return calculate_vdot(race_distance_m, safe_time)


def velocity_from_vdot(vdot: float, intensity_pct: float) -> float:
    """
    Velocity (m/min) at which the oxygen cost equals vdot * intensity_pct.

    Solves 0.000104 v^2 + 0.182258 v + (-4.60 - VO2) = 0 for the
    positive root.
    """
    target_vo2 = vdot * intensity_pct
    a = 0.000104
    b = 0.182258
    c = -4.60 - target_vo2
    discriminant = b ** 2 - 4 * a * c
    return (-b + math.sqrt(discriminant)) / (2 * a)


# Fraction of VDOT at each training intensity
ZONE_INTENSITIES: Dict[str, float] = {
    "recovery": 0.55,
    "easy": 0.65,
    "general_aerobic": 0.70,
    "marathon": 0.78,
    "half_marathon": 0.83,
    "tempo": 0.85,
    "threshold": 0.88,
    "vo2max": 0.95,
    "interval": 0.97,
    "repetition": 1.05,
}

# Easy running spans 59-74% of VDOT
EASY_BAND = (0.59, 0.74)


@dataclass(frozen=True)
class PaceZoneSet:
    """
    Training paces in whole seconds per mile for one VDOT.

    Slower zones have larger values. easy_range is (fastest, slowest).
    """

    vdot: float
    recovery: int
    easy: int
    easy_range: Tuple[int, int]
    general_aerobic: int
    marathon: int
    half_marathon: int
    tempo: int
    threshold: int
    vo2max: int
    interval: int
    repetition: int

    def get(self, zone: str) -> Optional[int]:
        """Pace for a zone or workout-type name, None when unknown."""
        aliases = {
            "easy_long": "easy",
            "long": "easy",
            "steady": "general_aerobic",
        }
        key = aliases.get(zone.lower(), zone.lower())
        if key not in ZONE_INTENSITIES:
            return None
        return getattr(self, key)

    def to_dict(self) -> dict:
        return {
            "vdot": self.vdot,
            "recovery": self.recovery,
            "easy": self.easy,
            "easy_range": {"fast": self.easy_range[0], "slow": self.easy_range[1]},
            "general_aerobic": self.general_aerobic,
            "marathon": self.marathon,
            "half_marathon": self.half_marathon,
            "tempo": self.tempo,
            "threshold": self.threshold,
            "vo2max": self.vo2max,
            "interval": self.interval,
            "repetition": self.repetition,
        }


def _pace_at(vdot: float, intensity_pct: float) -> int:
    return velocity_to_pace(velocity_from_vdot(vdot, intensity_pct))


def calculate_pace_zones(vdot: float) -> PaceZoneSet:
    """
    Calculate training paces from VDOT using Daniels' intensities.

    Every zone is the pace whose oxygen cost equals a fixed fraction of
    VDOT, so for any valid VDOT the paces are strictly ordered
    easy > marathon > half marathon > tempo > threshold > interval > repetition.

    Raises:
        InvalidInputRangeError: If vdot is outside [15, 85]
    """
    if not is_valid_vdot(vdot):
        raise InvalidInputRangeError(
            f"VDOT must be between {VDOT_MIN:g} and {VDOT_MAX:g}, got {vdot}",
            field="vdot",
            value=vdot,
        )

    paces = {name: _pace_at(vdot, pct) for name, pct in ZONE_INTENSITIES.items()}
    easy_fast = _pace_at(vdot, EASY_BAND[1])
    easy_slow = _pace_at(vdot, EASY_BAND[0])

    return PaceZoneSet(vdot=vdot, easy_range=(easy_fast, easy_slow), **paces)


@dataclass(frozen=True)
class PaceZoneDescription:
    zone: str
    pace: str
    effort_description: str
    purpose: str

    def to_dict(self) -> dict:
        return {
            "zone": self.zone,
            "pace": self.pace,
            "effort_description": self.effort_description,
            "purpose": self.purpose,
        }


_ZONE_TEXT: List[Tuple[str, str, str, str]] = [
    ("recovery", "Recovery",
     "Very easy jog. Should feel almost too slow.",
     "Active recovery, blood flow without training stress."),
    ("easy", "Easy",
     "Conversational pace. Can speak in full sentences.",
     "Aerobic base building, daily training pace."),
    ("general_aerobic", "General Aerobic",
     "Comfortable but purposeful.",
     "Higher aerobic stimulus for medium-long runs."),
    ("marathon", "Marathon",
     "Comfortably hard. Short phrases only.",
     "Marathon race pace and long-run goal segments."),
    ("half_marathon", "Half Marathon",
     "Hard but sustainable. A few words at a time.",
     "Half marathon race pace, sustained tempo efforts."),
    ("tempo", "Tempo",
     "Comfortably hard, at the threshold of conversation.",
     "Lactate clearance, controlled discomfort."),
    ("threshold", "Threshold",
     "Hard. At the edge of sustainable.",
     "Lactate threshold improvement, roughly one-hour race pace."),
    ("vo2max", "VO2max",
     "Very hard. Only a few words possible.",
     "Maximum aerobic capacity development."),
    ("interval", "Interval",
     "Very hard, near maximum sustainable.",
     "5K race pace, VO2max intervals."),
    ("repetition", "Repetition",
     "Fast and relaxed, full recovery between reps.",
     "Speed development and running economy."),
]


def get_pace_zone_descriptions(zones: PaceZoneSet) -> List[PaceZoneDescription]:
    """Human-readable descriptions for every zone in the set."""
    return [
        PaceZoneDescription(
            zone=label,
            pace=format_pace_per_mile(getattr(zones, key)),
            effort_description=effort,
            purpose=purpose,
        )
        for key, label, effort, purpose in _ZONE_TEXT
    ]


# Share of the weather penalty applied per zone; short hard efforts suffer less
_WEATHER_SHARE = {
    "threshold": 0.8,
    "vo2max": 0.5,
    "interval": 0.5,
    "repetition": 0.3,
}


def adjust_pace_zones_for_weather(
    zones: PaceZoneSet,
    temp_f: float,
    humidity_pct: float,
    dew_point_f: Optional[float] = None,
) -> PaceZoneSet:
    """Slow every zone by the weather penalty (scaled down for hard zones)."""
    adjustment = get_weather_pace_adjustment(temp_f, humidity_pct, dew_point_f)
    if adjustment == 0:
        return zones

    adjusted = {
        name: getattr(zones, name) + int(round_half_up(adjustment * _WEATHER_SHARE.get(name, 1.0)))
        for name in ZONE_INTENSITIES
    }
    easy_range = (zones.easy_range[0] + adjustment, zones.easy_range[1] + adjustment)
    return PaceZoneSet(vdot=zones.vdot, easy_range=easy_range, **adjusted)


def estimate_vdot_from_easy_pace(easy_pace_sec_per_mile: float) -> Optional[float]:
    """
    Estimate VDOT from a comfortable easy pace (no race result available).

    Easy running is taken as 65% of VDOT. Returns None when the estimate
    falls outside [15, 85].
    """
    if easy_pace_sec_per_mile <= 0:
        return None
    velocity = METERS_PER_MILE / (easy_pace_sec_per_mile / 60)
    vdot = round_half_up(oxygen_cost(velocity) / ZONE_INTENSITIES["easy"], 1)
    return vdot if is_valid_vdot(vdot) else None


def predict_race_time(vdot: float, distance_m: float) -> int:
    """
    Predict a finishing time (seconds) for a distance at the given VDOT.

    Bisects on time: VDOT decreases monotonically as time increases.
    """
    if not is_valid_vdot(vdot):
        raise InvalidInputRangeError(
            f"VDOT must be between {VDOT_MIN:g} and {VDOT_MAX:g}, got {vdot}",
            field="vdot",
            value=vdot,
        )

    base_velocity = velocity_from_vdot(vdot, 0.80)
    initial_time = distance_m / base_velocity * 60
    low = initial_time * 0.5
    high = initial_time * 2.0

    for _ in range(60):
        mid = (low + high) / 2
        if _raw_vdot(distance_m, mid) > vdot:
            low = mid
        else:
            high = mid

    return int(round_half_up((low + high) / 2))


def get_equivalent_race_times(vdot: float) -> Dict[str, Dict[str, object]]:
    """Predicted times and paces for every standard race distance."""
    predictions: Dict[str, Dict[str, object]] = {}
    for distance in RaceDistance:
        time_sec = predict_race_time(vdot, distance.value)
        pace = int(round_half_up(time_sec / distance.distance_miles))
        predictions[distance.display_name] = {
            "distance_m": distance.value,
            "time_sec": time_sec,
            "time_formatted": format_time(time_sec),
            "pace_sec_per_mile": pace,
            "pace_formatted": format_pace_per_mile(pace),
        }
    return predictions


def smooth_vdot(
    previous: Optional[float],
    raw: float,
    confidence: ConfidenceTier,
) -> Optional[float]:
    """
    Blend a new raw VDOT estimate into the stored value.

    An increase is applied at 85/75/60% (high/medium/low confidence), a
    decrease at only 40/30/20%, so VDOT rises faster than it falls.

    Returns:
        The smoothed VDOT rounded to 1 decimal, the raw value itself when
        there is no valid previous VDOT, or None when the raw estimate is
        outside [15, 85] and must be rejected.

    Example:
        >>> smooth_vdot(45.0, 50.0, ConfidenceTier.HIGH)
        49.3
        >>> smooth_vdot(45.0, 40.0, ConfidenceTier.HIGH)
        43.0
    """
    if not is_valid_vdot(raw):
        return None
    if not is_valid_vdot(previous):
        return round_half_up(raw, 1)

    delta = raw - previous
    up_factor, down_factor = SMOOTHING_FACTORS[ConfidenceTier(confidence)]
    factor = up_factor if delta > 0 else down_factor
    return round_half_up(previous + delta * factor, 1)


@dataclass
class VDOTCalculation:
    """Complete VDOT calculation result with zones and predictions."""
    vdot: float
    race_distance: str
    race_time_sec: int
    race_time_formatted: str
    pace_zones: PaceZoneSet
    race_predictions: Dict[str, Dict[str, object]]

    def to_dict(self) -> dict:
        return {
            "vdot": self.vdot,
            "race_distance": self.race_distance,
            "race_time_sec": self.race_time_sec,
            "race_time_formatted": self.race_time_formatted,
            "pace_zones": self.pace_zones.to_dict(),
            "race_predictions": self.race_predictions,
        }


def calculate_vdot_from_race(
    distance: str,
    time_str: str,
    custom_distance_m: Optional[float] = None,
) -> VDOTCalculation:
    """
    Calculate VDOT from a race result with full zone and prediction details.

    Args:
        distance: Race distance ("5K", "10K", "half", "marathon", or "custom")
        time_str: Race time as string (e.g., "25:30" for 25min 30sec)
        custom_distance_m: Distance in meters if distance is "custom"

    Raises:
        InvalidInputRangeError: For unknown distances or unparseable times
    """
    if distance.lower() == "custom":
        if custom_distance_m is None or custom_distance_m <= 0:
            raise InvalidInputRangeError(
                "Custom distance must be provided and positive",
                field="custom_distance_m",
                value=custom_distance_m,
            )
        distance_m = custom_distance_m
        distance_name = f"{custom_distance_m / 1000:.2f}K"
    else:
        race_dist = RaceDistance.from_string(distance)
        if race_dist is None:
            raise InvalidInputRangeError(f"Unknown race distance: {distance}", field="distance", value=distance)
        distance_m = race_dist.value
        distance_name = race_dist.display_name

    time_sec = parse_race_time(time_str)
    vdot = calculate_vdot(distance_m, time_sec)

    return VDOTCalculation(
        vdot=vdot,
        race_distance=distance_name,
        race_time_sec=time_sec,
        race_time_formatted=format_time(time_sec),
        pace_zones=calculate_pace_zones(vdot),
        race_predictions=get_equivalent_race_times(vdot),
    )
