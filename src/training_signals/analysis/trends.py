"""
Fitness Trend Analysis

Tracks whether the athlete is getting faster at the same perceived effort.
Works without heart rate: efficiency is pace (sec/mi) per RPE point, so a
falling value means more speed for the same effort.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional

from ..metrics.pace import format_pace, round_half_up
from ..models.workouts import WorkoutRecord


MIN_TREND_WORKOUTS = 4
MIN_DISTANCE_MILES = 2.0
DEFAULT_TREND_TYPES = ("easy", "recovery", "long")

# Improvement/decline threshold on the efficiency change, percent
TREND_THRESHOLD_PCT = 5.0

BASELINE_RPE = 5
RPE_TOLERANCE = 1
MIN_PACE_COMPARISON_WORKOUTS = 2

INTERPRETATIONS = {
    "Improving": "You're getting faster at the same effort level. Fitness is building.",
    "Declining": (
        "Running feels harder for the same pace. Could be fatigue accumulation, "
        "or external factors (heat, stress, sleep)."
    ),
    "Stable": "Fitness is holding steady. Consistent training is working.",
}


@dataclass
class EffortDataPoint:
    """One qualifying workout in the trend window."""

    date: date
    pace_seconds: float
    rpe: float

    @property
    def efficiency(self) -> float:
        return self.pace_seconds / self.rpe

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "pace": format_pace(self.pace_seconds),
            "rpe": self.rpe,
        }


@dataclass
class PaceAtEffort:
    """Average pace at RPE 4-6 in each half of the window."""

    early_avg_pace: int
    recent_avg_pace: int
    change_seconds: int
    at_rpe: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "early_avg_pace": format_pace(self.early_avg_pace),
            "recent_avg_pace": format_pace(self.recent_avg_pace),
            "change_seconds": self.change_seconds,
            "at_rpe": self.at_rpe,
        }


@dataclass
class FitnessTrendResult:
    """Outcome of the fitness trend analysis."""

    has_sufficient_data: bool
    workouts_analyzed: int
    weeks: int
    workout_type_filter: str
    message: Optional[str] = None
    early_efficiency: Optional[float] = None
    recent_efficiency: Optional[float] = None
    change_pct: Optional[float] = None
    trend: Optional[str] = None
    pace_at_similar_effort: Optional[PaceAtEffort] = None
    recent_data_points: List[EffortDataPoint] = field(default_factory=list)

    @property
    def interpretation(self) -> Optional[str]:
        return INTERPRETATIONS.get(self.trend) if self.trend else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        if not self.has_sufficient_data:
            return {
                "has_sufficient_data": False,
                "message": self.message,
                "tip": "Log RPE with your runs to enable fitness trend analysis.",
            }
        return {
            "has_sufficient_data": True,
            "workouts_analyzed": self.workouts_analyzed,
            "period": f"{self.weeks} weeks",
            "workout_type_filter": self.workout_type_filter,
            "efficiency_trend": {
                "early_period_efficiency": self.early_efficiency,
                "recent_period_efficiency": self.recent_efficiency,
                "change_percent": self.change_pct,
                "note": "Efficiency = pace (sec/mi) per RPE point. Lower is better.",
            },
            "pace_at_similar_effort": (
                self.pace_at_similar_effort.to_dict() if self.pace_at_similar_effort else None
            ),
            "trend": self.trend,
            "interpretation": self.interpretation,
            "recent_data_points": [p.to_dict() for p in self.recent_data_points],
        }


def _determine_trend(change_pct: float) -> str:
    """Falling efficiency (pace per RPE point) means improving fitness."""
    if change_pct <= -TREND_THRESHOLD_PCT:
        return "Improving"
    elif change_pct >= TREND_THRESHOLD_PCT:
        return "Declining"
    else:
        return "Stable"


def _qualifies(workout: WorkoutRecord, workout_type: Optional[str]) -> bool:
    if not workout.avg_pace_seconds or not workout.rpe:
        return False
    if not workout.distance_miles or workout.distance_miles < MIN_DISTANCE_MILES:
        return False
    if workout_type:
        return workout.workout_type == workout_type
    return workout.workout_type in DEFAULT_TREND_TYPES


def _pace_at_baseline_effort(
    early: List[EffortDataPoint],
    recent: List[EffortDataPoint],
) -> Optional[PaceAtEffort]:
    low, high = BASELINE_RPE - RPE_TOLERANCE, BASELINE_RPE + RPE_TOLERANCE
    early_paces = [p.pace_seconds for p in early if low <= p.rpe <= high]
    recent_paces = [p.pace_seconds for p in recent if low <= p.rpe <= high]

    if len(early_paces) < MIN_PACE_COMPARISON_WORKOUTS or len(recent_paces) < MIN_PACE_COMPARISON_WORKOUTS:
        return None

    early_avg = sum(early_paces) / len(early_paces)
    recent_avg = sum(recent_paces) / len(recent_paces)
    return PaceAtEffort(
        early_avg_pace=int(round_half_up(early_avg)),
        recent_avg_pace=int(round_half_up(recent_avg)),
        change_seconds=int(round_half_up(recent_avg - early_avg)),
        at_rpe=f"{low}-{high}",
    )


def analyze_fitness_trend(
    workouts: Iterable[WorkoutRecord],
    as_of: date,
    weeks: int = 8,
    workout_type: Optional[str] = None,
) -> FitnessTrendResult:
    """
    Compare pace-per-RPE efficiency between the two halves of a window.

    Args:
        workouts: Workout history with assessments
        as_of: Last day of the window
        weeks: Window length in weeks
        workout_type: Restrict to one workout type; by default only
            easy, recovery and long runs are used

    Returns:
        FitnessTrendResult; has_sufficient_data is False below 4 qualifying
        workouts
    """
    cutoff = as_of - timedelta(days=weeks * 7)
    relevant = sorted(
        (
            w for w in workouts
            if cutoff <= w.date <= as_of and _qualifies(w, workout_type)
        ),
        key=lambda w: w.date,
    )
    type_filter = workout_type or "easy/recovery/long runs"

    if len(relevant) < MIN_TREND_WORKOUTS:
        return FitnessTrendResult(
            has_sufficient_data=False,
            workouts_analyzed=len(relevant),
            weeks=weeks,
            workout_type_filter=type_filter,
            message=(
                "Not enough workouts with pace and RPE data "
                f"(found {len(relevant)}, need at least {MIN_TREND_WORKOUTS})."
            ),
        )

    points = [
        EffortDataPoint(date=w.date, pace_seconds=w.avg_pace_seconds, rpe=w.rpe)
        for w in relevant
    ]
    midpoint = len(points) // 2
    early, recent = points[:midpoint], points[midpoint:]

    early_eff = sum(p.efficiency for p in early) / len(early)
    recent_eff = sum(p.efficiency for p in recent) / len(recent)
    change_pct = (recent_eff - early_eff) / early_eff * 100

    return FitnessTrendResult(
        has_sufficient_data=True,
        workouts_analyzed=len(points),
        weeks=weeks,
        workout_type_filter=type_filter,
        early_efficiency=round_half_up(early_eff, 1),
        recent_efficiency=round_half_up(recent_eff, 1),
        change_pct=round_half_up(change_pct, 1),
        trend=_determine_trend(change_pct),
        pace_at_similar_effort=_pace_at_baseline_effort(early, recent),
        recent_data_points=points[-5:],
    )
