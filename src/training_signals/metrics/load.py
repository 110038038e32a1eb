"""
Training load and Acute:Chronic Workload Ratio.

Load per workout is a simplified impulse: distance (miles) x RPE. The
acute load is the sum over the trailing week, the chronic load the
trailing four weeks expressed as a weekly average.

ACWR risk bands (Gabbett, 2016):
- < 0.8: Undertrained
- 0.8 - 1.3: Optimal
- 1.3 - 1.5: Caution
- > 1.5: High Risk
"""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, List, Optional

from ..models.workouts import WorkoutRecord
from .pace import round_half_up


DEFAULT_RPE = 5.0


class LoadStatus(str, Enum):
    UNDERTRAINED = "Undertrained"
    OPTIMAL = "Optimal"
    CAUTION = "Caution"
    HIGH_RISK = "High Risk"


RECOMMENDATIONS = {
    LoadStatus.UNDERTRAINED: (
        "Training load is lower than usual. Good for recovery, "
        "but consider ramping up if feeling fresh."
    ),
    LoadStatus.OPTIMAL: "Training load is in the sweet spot. Keep it steady.",
    LoadStatus.CAUTION: "Training load is elevated. Monitor fatigue and consider extra recovery.",
    LoadStatus.HIGH_RISK: "Training load spike detected. High injury risk. Recommend reducing volume.",
}


def workout_load(workout: WorkoutRecord, default_rpe: float = DEFAULT_RPE) -> float:
    """Distance in miles times RPE (default RPE when not assessed)."""
    rpe = workout.rpe if workout.rpe is not None else default_rpe
    return (workout.distance_miles or 0.0) * rpe


def acwr_ratio(acute_load: float, chronic_load: float) -> float:
    """Unrounded acute/chronic ratio; exactly 1.0 when there is no chronic load."""
    if chronic_load <= 0:
        return 1.0
    return acute_load / chronic_load


def calculate_acwr(acute_load: float, chronic_load: float) -> float:
    """Acute/chronic ratio rounded to 2 decimals."""
    return round_half_up(acwr_ratio(acute_load, chronic_load), 2)


def determine_load_status(acwr: float) -> LoadStatus:
    """Map an ACWR value to its risk band."""
    if acwr < 0.8:
        return LoadStatus.UNDERTRAINED
    elif acwr <= 1.3:
        return LoadStatus.OPTIMAL
    elif acwr <= 1.5:
        return LoadStatus.CAUTION
    else:
        return LoadStatus.HIGH_RISK


def _window_sum(
    workouts: Iterable[WorkoutRecord],
    end: date,
    days: int,
    default_rpe: float,
) -> float:
    """Sum of load for workouts in the `days` days ending on `end` (inclusive)."""
    start = end - timedelta(days=days)
    return sum(
        workout_load(w, default_rpe)
        for w in workouts
        if start < w.date <= end
    )


@dataclass
class LoadWindow:
    """Acute/chronic load snapshot as of one day."""
    as_of: date
    acute_load: float
    chronic_load: float
    acwr: float
    status: LoadStatus
    previous_acute_load: float
    workout_count: int

    @property
    def recommendation(self) -> str:
        return RECOMMENDATIONS[self.status]

    @property
    def week_over_week_change_pct(self) -> Optional[float]:
        if self.previous_acute_load <= 0:
            return None
        return round_half_up(
            (self.acute_load - self.previous_acute_load) / self.previous_acute_load * 100, 1
        )

    def to_dict(self) -> dict:
        return {
            "as_of": self.as_of.isoformat(),
            "acute_load": self.acute_load,
            "chronic_load": self.chronic_load,
            "acwr": self.acwr,
            "status": self.status.value,
            "recommendation": self.recommendation,
            "previous_acute_load": self.previous_acute_load,
            "week_over_week_change_pct": self.week_over_week_change_pct,
            "workout_count": self.workout_count,
        }


def compute_load_window(
    workouts: Iterable[WorkoutRecord],
    as_of: date,
    acute_days: int = 7,
    chronic_days: int = 28,
    default_rpe: float = DEFAULT_RPE,
) -> LoadWindow:
    """
    Compute acute load, chronic weekly-average load and ACWR.

    Args:
        workouts: Workout history (any order; outside the window is ignored)
        as_of: Last day included in both windows
        acute_days: Acute window length (7)
        chronic_days: Chronic window length (28); averaged per acute window

    Returns:
        LoadWindow with loads rounded to 1 decimal and ACWR to 2
    """
    history: List[WorkoutRecord] = list(workouts)

    acute = _window_sum(history, as_of, acute_days, default_rpe)
    chronic_total = _window_sum(history, as_of, chronic_days, default_rpe)
    chronic = chronic_total / (chronic_days / acute_days)
    previous = _window_sum(history, as_of - timedelta(days=acute_days), acute_days, default_rpe)

    # Bands apply to the unrounded ratio
    ratio = acwr_ratio(acute, chronic)
    chronic_start = as_of - timedelta(days=chronic_days)

    return LoadWindow(
        as_of=as_of,
        acute_load=round_half_up(acute, 1),
        chronic_load=round_half_up(chronic, 1),
        acwr=round_half_up(ratio, 2),
        status=determine_load_status(ratio),
        previous_acute_load=round_half_up(previous, 1),
        workout_count=sum(1 for w in history if chronic_start < w.date <= as_of),
    )
