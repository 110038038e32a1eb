"""
Training metrics calculation module.

Provides:
- Pace parsing, formatting and unit conversion
- Lap classification
- Weather and elevation pace corrections
- Per-workout fitness signals
- VDOT, pace zones and VDOT smoothing
- Training load and ACWR
"""

from .pace import (
    calculate_pace,
    format_pace,
    format_pace_per_mile,
    format_time,
    parse_pace,
    parse_race_time,
    round_half_up,
)
from .laps import (
    LapStatistics,
    classify_laps,
    compute_lap_statistics,
    convert_raw_laps,
    get_fastest_work_pace,
)
from .weather import elevation_pace_correction, get_weather_pace_adjustment
from .signals import compute_fitness_signals
from .vdot import (
    PaceZoneSet,
    RaceDistance,
    VDOTCalculation,
    calculate_adjusted_vdot,
    calculate_pace_zones,
    calculate_vdot,
    calculate_vdot_from_race,
    predict_race_time,
    smooth_vdot,
)
from .load import LoadStatus, LoadWindow, acwr_ratio, calculate_acwr, compute_load_window

__all__ = [
    # Pace
    "calculate_pace",
    "format_pace",
    "format_pace_per_mile",
    "format_time",
    "parse_pace",
    "parse_race_time",
    "round_half_up",
    # Laps
    "LapStatistics",
    "classify_laps",
    "compute_lap_statistics",
    "convert_raw_laps",
    "get_fastest_work_pace",
    # Weather
    "elevation_pace_correction",
    "get_weather_pace_adjustment",
    # Signals
    "compute_fitness_signals",
    # VDOT
    "PaceZoneSet",
    "RaceDistance",
    "VDOTCalculation",
    "calculate_adjusted_vdot",
    "calculate_pace_zones",
    "calculate_vdot",
    "calculate_vdot_from_race",
    "predict_race_time",
    "smooth_vdot",
    # Load
    "LoadStatus",
    "LoadWindow",
    "acwr_ratio",
    "calculate_acwr",
    "compute_load_window",
]
