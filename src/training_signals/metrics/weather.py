"""
Weather and elevation pace corrections.

The weather penalty is conservative by construction: it understates
rather than overstates the effect of heat so that adjusted paces never
flatter the athlete.

References:
- Mantzios et al. (2022): 0.3-0.4% per 1 C outside optimal WBGT
- El Helou et al. (2012): optimal 43-50 F for recreational marathoners
- Ely et al. (2007): non-linear heat effect
- Periard et al. (2021): humidity negligible below ~65 F air temperature
"""

from typing import Optional

from .pace import round_half_up


OPTIMAL_TEMP_F = 45.0
MILD_CEILING_F = 70.0
WARM_CEILING_F = 85.0
COLD_THRESHOLD_F = 35.0

MILD_RATE = 0.4     # sec/mi per F, 45-70 F
WARM_RATE = 1.0     # sec/mi per F, 70-85 F
SEVERE_RATE = 1.5   # sec/mi per F, above 85 F
COLD_RATE = 0.2     # sec/mi per F below 35 F
DEW_POINT_THRESHOLD_F = 60.0
DEW_POINT_RATE = 0.3

# ~12 sec/mi per 100 ft/mi of climbing
ELEVATION_SECONDS_PER_100FT = 12


def get_weather_pace_adjustment(
    temp_f: float,
    humidity_pct: float,
    dew_point_f: Optional[float] = None,
) -> int:
    """
    Seconds per mile to add to a pace for the given conditions.

    Args:
        temp_f: Air temperature in Fahrenheit
        humidity_pct: Relative humidity (0-100)
        dew_point_f: Optional dew point in Fahrenheit

    Returns:
        Whole seconds per mile (0 means no adjustment)
    """
    adjustment = 0.0

    if temp_f > OPTIMAL_TEMP_F:
        if temp_f > WARM_CEILING_F:
            adjustment += (MILD_CEILING_F - OPTIMAL_TEMP_F) * MILD_RATE
            adjustment += (WARM_CEILING_F - MILD_CEILING_F) * WARM_RATE
            adjustment += (temp_f - WARM_CEILING_F) * SEVERE_RATE
        elif temp_f > MILD_CEILING_F:
            adjustment += (MILD_CEILING_F - OPTIMAL_TEMP_F) * MILD_RATE
            adjustment += (temp_f - MILD_CEILING_F) * WARM_RATE
        else:
            adjustment += (temp_f - OPTIMAL_TEMP_F) * MILD_RATE

        if temp_f > 65 and humidity_pct > 50:
            adjustment += (humidity_pct - 50) * 0.1
        elif temp_f > 55 and humidity_pct > 60:
            adjustment += (humidity_pct - 60) * 0.05
    elif temp_f < COLD_THRESHOLD_F:
        adjustment += (COLD_THRESHOLD_F - temp_f) * COLD_RATE

    if dew_point_f is not None and dew_point_f > DEW_POINT_THRESHOLD_F:
        adjustment += (dew_point_f - DEW_POINT_THRESHOLD_F) * DEW_POINT_RATE

    return int(round_half_up(adjustment))


def elevation_pace_correction(elevation_gain_ft: float, distance_miles: float) -> int:
    """Seconds per mile attributable to climbing; 0 for flat or invalid input."""
    if distance_miles <= 0 or elevation_gain_ft <= 0:
        return 0
    gain_per_mile = elevation_gain_ft / distance_miles
    return int(round_half_up((gain_per_mile / 100) * ELEVATION_SECONDS_PER_100FT))
