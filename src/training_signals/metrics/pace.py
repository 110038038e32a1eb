"""Pace parsing/formatting and unit conversions."""

import math
from typing import Optional

from ..exceptions import InvalidInputRangeError
from ..models.workouts import METERS_PER_MILE


KM_PER_MILE = 1.60934

# Paces at or above 30:00/mi are not meaningful running paces
MAX_DISPLAY_PACE_SECONDS = 1800


def round_half_up(value: float, digits: int = 0) -> float:
    """Round half up (2.5 -> 3, 49.25 -> 49.3) rather than to even."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def meters_to_miles(meters: float) -> float:
    return meters / METERS_PER_MILE


def miles_to_meters(miles: float) -> float:
    return miles * METERS_PER_MILE


def pace_km_to_mile(pace_sec_per_km: float) -> float:
    """Convert pace from sec/km to sec/mile."""
    return pace_sec_per_km * KM_PER_MILE


def pace_mile_to_km(pace_sec_per_mile: float) -> float:
    """Convert pace from sec/mile to sec/km."""
    return pace_sec_per_mile / KM_PER_MILE


def calculate_pace(distance_miles: float, duration_minutes: float) -> int:
    """Average pace in whole seconds per mile, 0 if either input is missing."""
    if not distance_miles or not duration_minutes or distance_miles <= 0:
        return 0
    return int(round_half_up((duration_minutes * 60) / distance_miles))


def velocity_m_per_min(distance_miles: float, duration_minutes: float) -> float:
    """Average velocity in metres per minute."""
    if duration_minutes <= 0:
        return 0.0
    return miles_to_meters(distance_miles) / duration_minutes


def pace_to_velocity(pace_sec_per_mile: float) -> float:
    """Convert sec/mile to metres per minute."""
    if pace_sec_per_mile <= 0:
        return 0.0
    return METERS_PER_MILE / (pace_sec_per_mile / 60)


def velocity_to_pace(velocity_m_per_min: float) -> int:
    """Convert metres per minute to whole seconds per mile."""
    if velocity_m_per_min <= 0:
        return 0
    return int(round_half_up(METERS_PER_MILE / velocity_m_per_min * 60))


def format_pace(total_seconds: Optional[float]) -> str:
    """
    Format a pace in seconds as M:SS.

    Returns '--:--' for missing pace and '-' for paces too slow to be
    meaningful (30:00 or slower).
    """
    if not total_seconds:
        return "--:--"
    if total_seconds >= MAX_DISPLAY_PACE_SECONDS:
        return "-"
    rounded = int(round_half_up(total_seconds))
    minutes = rounded // 60
    seconds = rounded % 60
    return f"{minutes}:{seconds:02d}"


def format_pace_per_mile(pace_sec_per_mile: Optional[float]) -> str:
    """Format pace as M:SS/mi."""
    formatted = format_pace(pace_sec_per_mile)
    if formatted in ("--:--", "-"):
        return formatted
    return f"{formatted}/mi"


def parse_pace(pace_str: str) -> int:
    """
    Parse a pace string to seconds.

    Accepts 'M:SS', optionally suffixed with '/mi' (e.g. '7:30/mi').

    Raises:
        InvalidInputRangeError: If the string is not a M:SS pace
    """
    cleaned = pace_str.strip().lower()
    for suffix in ("/mi", "/mile", "min/mi"):
        if cleaned.endswith(suffix):
            cleaned = cleaned[: -len(suffix)].strip()
            break

    parts = cleaned.split(":")
    if len(parts) != 2:
        raise InvalidInputRangeError(f"Invalid pace format: {pace_str}", field="pace", value=pace_str)

    try:
        minutes = int(parts[0])
        seconds = int(parts[1])
    except ValueError as e:
        raise InvalidInputRangeError(f"Invalid pace format: {pace_str}", field="pace", value=pace_str) from e

    if minutes < 0 or not 0 <= seconds < 60:
        raise InvalidInputRangeError(f"Invalid pace format: {pace_str}", field="pace", value=pace_str)

    return minutes * 60 + seconds


def parse_race_time(time_str: str) -> int:
    """
    Parse a race time string to seconds.

    Accepts formats: H:MM:SS, MM:SS, or just seconds

    Args:
        time_str: Time string (e.g., "1:45:00", "25:30", "1200")

    Returns:
        Time in seconds

    Raises:
        InvalidInputRangeError: If time format is invalid or not positive
    """
    time_str = time_str.strip()

    try:
        seconds = int(float(time_str))
    except ValueError:
        parts = time_str.split(":")
        try:
            if len(parts) == 3:
                hours, minutes, secs = parts
                seconds = int(hours) * 3600 + int(minutes) * 60 + int(float(secs))
            elif len(parts) == 2:
                minutes, secs = parts
                seconds = int(minutes) * 60 + int(float(secs))
            else:
                raise ValueError(time_str)
        except (ValueError, TypeError) as e:
            raise InvalidInputRangeError(
                f"Invalid time format: {time_str}", field="time", value=time_str
            ) from e

    if seconds <= 0:
        raise InvalidInputRangeError(
            f"Race time must be positive: {time_str}", field="time", value=time_str
        )
    return seconds


def format_time(seconds: int) -> str:
    """Format time in seconds to H:MM:SS or MM:SS string."""
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
