"""
Lap Classifier

Tags each lap of a workout as warmup, work, recovery, cooldown or steady
using adaptive thresholds derived from the workout's own pace
distribution.

The pace statistics are Winsorized (the fastest and slowest 10% of laps,
at least one per tail, are trimmed before averaging) so that a single
standing rest or a finishing surge does not drag the mean and standard
deviation around.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from ..models.workouts import LapSummary, LapType

logger = logging.getLogger(__name__)


# Laps outside (3:00, 15:00)/mi are stops, GPS glitches or standing rests
MIN_VALID_PACE = 180
MAX_VALID_PACE = 900

# Work laps slower than 10:00/mi are not used for fastest-work-pace queries
MAX_WORK_PACE = 600

MIN_LAPS = 2
WINSOR_FRACTION = 0.1

# Interval detection: pace spread and Winsorized std dev, seconds/mile
INTERVAL_RANGE_SECONDS = 45
INTERVAL_STD_DEV_SECONDS = 15

RECOVERY_MARGIN_SECONDS = 60
EDGE_LAP_MARGIN_SECONDS = 10
WORK_MARGIN_SECONDS = 10


@dataclass
class LapStatistics:
    """Pace statistics for one workout's laps (seconds per mile)."""

    mean_pace: float
    std_dev: float
    pace_range: float
    is_interval: bool
    fast_threshold: float
    slow_threshold: float
    sample_size: int

    def to_dict(self) -> dict:
        return {
            "mean_pace": round(self.mean_pace, 1),
            "std_dev": round(self.std_dev, 1),
            "pace_range": round(self.pace_range, 1),
            "is_interval": self.is_interval,
            "fast_threshold": round(self.fast_threshold, 1),
            "slow_threshold": round(self.slow_threshold, 1),
            "sample_size": self.sample_size,
        }


def is_valid_pace(pace: float) -> bool:
    return MIN_VALID_PACE < pace < MAX_VALID_PACE


def winsorized_stats(values: Sequence[float]) -> Tuple[float, float]:
    """
    Mean and population standard deviation after trimming both tails.

    Trims floor(10%) of the values, at least one, from each end of the
    sorted sequence. When that would leave nothing (two values or fewer),
    the untrimmed values are used.

    Raises:
        ValueError: If values is empty
    """
    if not values:
        raise ValueError("winsorized_stats requires at least one value")

    ordered = sorted(values)
    trim = max(1, math.floor(len(ordered) * WINSOR_FRACTION))
    trimmed = ordered[trim:len(ordered) - trim] or ordered

    mean = sum(trimmed) / len(trimmed)
    variance = sum((v - mean) ** 2 for v in trimmed) / len(trimmed)
    return mean, math.sqrt(variance)


def compute_lap_statistics(laps: Sequence[LapSummary]) -> Optional[LapStatistics]:
    """
    Build the statistics pool for a lap sequence.

    Returns None when fewer than two laps have a valid pace.
    """
    valid_paces = [
        lap.pace_seconds_per_mile
        for lap in laps
        if is_valid_pace(lap.pace_seconds_per_mile)
    ]
    if len(valid_paces) < MIN_LAPS:
        return None

    mean, std_dev = winsorized_stats(valid_paces)
    pace_range = max(valid_paces) - min(valid_paces)
    is_interval = pace_range > INTERVAL_RANGE_SECONDS and std_dev > INTERVAL_STD_DEV_SECONDS

    fast_threshold = mean - std_dev * (0.5 if is_interval else 0.3)
    slow_threshold = mean + std_dev * (0.7 if is_interval else 0.5)

    return LapStatistics(
        mean_pace=mean,
        std_dev=std_dev,
        pace_range=pace_range,
        is_interval=is_interval,
        fast_threshold=fast_threshold,
        slow_threshold=slow_threshold,
        sample_size=len(valid_paces),
    )


def _classify_lap(index: int, lap_count: int, pace: float, stats: LapStatistics) -> LapType:
    """Apply the classification rules in priority order."""
    if not is_valid_pace(pace):
        return LapType.RECOVERY

    if pace > stats.mean_pace + RECOVERY_MARGIN_SECONDS:
        return LapType.RECOVERY

    if index in (0, 1) and pace > stats.mean_pace + EDGE_LAP_MARGIN_SECONDS:
        return LapType.WARMUP

    if index in (lap_count - 1, lap_count - 2) and pace > stats.mean_pace + EDGE_LAP_MARGIN_SECONDS:
        return LapType.COOLDOWN

    if stats.is_interval:
        if pace <= stats.fast_threshold:
            return LapType.WORK
        if pace >= stats.slow_threshold:
            return LapType.RECOVERY

    if pace < stats.mean_pace - WORK_MARGIN_SECONDS:
        return LapType.WORK

    return LapType.STEADY


def classify_laps(laps: List[LapSummary]) -> List[LapSummary]:
    """
    Classify chronologically ordered laps by semantic role.

    Returns the input list unchanged when there are fewer than two laps or
    fewer than two laps with a valid pace. Otherwise returns new LapSummary
    copies tagged with their lap_type; the input laps are not mutated.
    """
    if len(laps) < MIN_LAPS:
        return laps

    stats = compute_lap_statistics(laps)
    if stats is None:
        return laps

    logger.debug(
        "Classifying %d laps (mean %.0fs/mi, std %.1fs, interval=%s)",
        len(laps), stats.mean_pace, stats.std_dev, stats.is_interval,
    )

    return [
        lap.model_copy(update={
            "lap_type": _classify_lap(index, len(laps), lap.pace_seconds_per_mile, stats)
        })
        for index, lap in enumerate(laps)
    ]


def get_fastest_work_pace(laps: List[LapSummary]) -> Optional[int]:
    """
    Fastest pace (seconds per mile) among work laps.

    Laps that have not been classified yet are classified first. If no lap
    is tagged work within (3:00, 10:00)/mi, falls back to the fastest lap
    in that band that is not warmup, cooldown or recovery. Returns None when
    nothing qualifies.
    """
    if not laps:
        return None

    if all(lap.lap_type == LapType.STEADY for lap in laps):
        laps = classify_laps(laps)

    def in_band(pace: int) -> bool:
        return MIN_VALID_PACE < pace < MAX_WORK_PACE

    work_paces = [
        lap.pace_seconds_per_mile
        for lap in laps
        if lap.lap_type == LapType.WORK and in_band(lap.pace_seconds_per_mile)
    ]
    if work_paces:
        return min(work_paces)

    excluded = {LapType.WARMUP, LapType.COOLDOWN, LapType.RECOVERY}
    fallback_paces = [
        lap.pace_seconds_per_mile
        for lap in laps
        if lap.lap_type not in excluded and in_band(lap.pace_seconds_per_mile)
    ]
    return min(fallback_paces) if fallback_paces else None


def convert_raw_lap(raw: Mapping[str, Any], position: Optional[int] = None) -> LapSummary:
    """
    Convert a raw lap-source record to a LapSummary.

    Expects the lap-source field names: distance (m), moving_time (s),
    average_heartrate, max_heartrate, total_elevation_gain (m), lap_index.
    """
    lap_index = raw.get("lap_index")
    if lap_index is None:
        lap_index = position if position is not None else 0

    return LapSummary(
        lap_index=int(lap_index),
        distance_meters=float(raw.get("distance") or 0.0),
        moving_time_seconds=float(raw.get("moving_time") or 0.0),
        avg_heart_rate=raw.get("average_heartrate"),
        max_heart_rate=raw.get("max_heartrate"),
        elevation_gain_meters=float(raw.get("total_elevation_gain") or 0.0),
    )


def convert_raw_laps(raws: Sequence[Mapping[str, Any]]) -> List[LapSummary]:
    """Convert and classify an ordered list of raw lap records."""
    return classify_laps([convert_raw_lap(raw, i) for i, raw in enumerate(raws)])
