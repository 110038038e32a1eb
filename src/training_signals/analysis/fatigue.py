"""
Fatigue Indicators

Aggregates post-run assessments (RPE, legs feel, sleep, stress, soreness,
verdict) over a trailing window into per-indicator statuses and one
overall fatigue status.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..metrics.pace import round_half_up
from ..models.workouts import WorkoutRecord


MIN_ASSESSED_WORKOUTS = 3
MIN_METRIC_VALUES = 3
MIN_TREND_VALUES = 4
TREND_STABLE_DELTA = 0.5


class IndicatorStatus(str, Enum):
    OK = "OK"
    WATCH = "Watch"
    WARNING = "Warning"
    GOOD = "Good"


class FatigueStatus(str, Enum):
    FATIGUE_ACCUMULATION = "Fatigue Accumulation"
    ELEVATED_FATIGUE = "Elevated Fatigue"
    MONITOR = "Monitor"
    WELL_RECOVERED = "Well Recovered"


RECOMMENDATIONS = {
    FatigueStatus.FATIGUE_ACCUMULATION: (
        "Multiple warning signs. Strongly recommend a down week or extra rest days."
    ),
    FatigueStatus.ELEVATED_FATIGUE: (
        "Signs of fatigue building. Consider reducing intensity or adding recovery."
    ),
    FatigueStatus.MONITOR: "Some early warning signs. Keep tracking and be ready to back off.",
    FatigueStatus.WELL_RECOVERED: "Fatigue indicators look good. Continue as planned.",
}


@dataclass
class FatigueSignal:
    indicator: str
    status: IndicatorStatus
    details: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "indicator": self.indicator,
            "status": self.status.value,
            "details": self.details,
        }


@dataclass
class FatigueIndicatorsResult:
    """Outcome of the fatigue analysis over one window."""

    has_sufficient_data: bool
    days: int
    workouts_assessed: int
    message: Optional[str] = None
    signals: List[FatigueSignal] = field(default_factory=list)
    overall_status: Optional[FatigueStatus] = None
    raw_averages: Dict[str, Optional[float]] = field(default_factory=dict)

    @property
    def recommendation(self) -> Optional[str]:
        return RECOMMENDATIONS[self.overall_status] if self.overall_status else None

    def to_dict(self) -> Dict[str, Any]:
        if not self.has_sufficient_data:
            return {"has_sufficient_data": False, "message": self.message}
        return {
            "has_sufficient_data": True,
            "period": f"Last {self.days} days",
            "workouts_assessed": self.workouts_assessed,
            "signals": [s.to_dict() for s in self.signals],
            "overall_status": self.overall_status.value,
            "recommendation": self.recommendation,
            "raw_averages": self.raw_averages,
        }


def _avg(values: Sequence[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def metric_trend(values: Sequence[float]) -> str:
    """
    Half-over-half trend of chronologically ordered values.

    Returns "insufficient data" below 4 values, "stable" when the halves
    differ by less than 0.5, otherwise "increasing" or "decreasing".
    """
    if len(values) < MIN_TREND_VALUES:
        return "insufficient data"
    mid = len(values) // 2
    diff = _avg(values[mid:]) - _avg(values[:mid])
    if abs(diff) < TREND_STABLE_DELTA:
        return "stable"
    return "increasing" if diff > 0 else "decreasing"


def _rpe_signal(values: List[float]) -> FatigueSignal:
    avg = _avg(values)
    if avg > 7:
        return FatigueSignal("RPE", IndicatorStatus.WARNING,
                             f"High average RPE ({avg:.1f}). Workouts feeling hard.")
    if metric_trend(values) == "increasing":
        return FatigueSignal("RPE", IndicatorStatus.WATCH,
                             "RPE trending upward. Same effort feeling harder.")
    return FatigueSignal("RPE", IndicatorStatus.OK, f"Average RPE: {avg:.1f}")


def _legs_signal(values: List[float]) -> FatigueSignal:
    avg = _avg(values)
    if avg > 6:
        return FatigueSignal("Legs", IndicatorStatus.WARNING,
                             f"Heavy legs pattern (avg {avg:.1f}/10). May need extra recovery.")
    if metric_trend(values) == "increasing":
        return FatigueSignal("Legs", IndicatorStatus.WATCH, "Legs feeling progressively heavier.")
    return FatigueSignal("Legs", IndicatorStatus.OK, f"Average legs feel: {avg:.1f}/10")


def _sleep_signal(values: List[float]) -> FatigueSignal:
    avg = _avg(values)
    if avg < 5:
        return FatigueSignal("Sleep", IndicatorStatus.WARNING,
                             f"Poor sleep quality (avg {avg:.1f}/10). Recovery compromised.")
    if avg >= 7:
        return FatigueSignal("Sleep", IndicatorStatus.GOOD, f"Good sleep quality (avg {avg:.1f}/10)")
    return FatigueSignal("Sleep", IndicatorStatus.OK, f"Average sleep quality: {avg:.1f}/10")


def _verdict_signal(verdicts: List[str]) -> Optional[FatigueSignal]:
    rough = sum(1 for v in verdicts if v in ("rough", "awful"))
    great = sum(1 for v in verdicts if v in ("great", "good"))
    if rough >= len(verdicts) / 2:
        return FatigueSignal("Verdicts", IndicatorStatus.WARNING,
                             f"{rough}/{len(verdicts)} workouts rated rough/awful. Training not going well.")
    if great >= len(verdicts) * 0.6:
        return FatigueSignal("Verdicts", IndicatorStatus.GOOD,
                             f"{great}/{len(verdicts)} workouts rated good/great.")
    return None


def determine_fatigue_status(signals: Iterable[FatigueSignal]) -> FatigueStatus:
    """Aggregate indicator statuses by warning and watch counts."""
    statuses = [s.status for s in signals]
    warnings = statuses.count(IndicatorStatus.WARNING)
    watches = statuses.count(IndicatorStatus.WATCH)

    if warnings >= 3:
        return FatigueStatus.FATIGUE_ACCUMULATION
    elif warnings >= 2 or (warnings >= 1 and watches >= 2):
        return FatigueStatus.ELEVATED_FATIGUE
    elif watches >= 2:
        return FatigueStatus.MONITOR
    else:
        return FatigueStatus.WELL_RECOVERED


def analyze_fatigue_indicators(
    workouts: Iterable[WorkoutRecord],
    as_of: date,
    days: int = 14,
) -> FatigueIndicatorsResult:
    """
    Per-indicator fatigue statuses and an overall status for a window.

    Only assessed workouts dated within `days` of `as_of` count. Values are
    taken oldest first so that "increasing" means getting worse over time.
    """
    cutoff = as_of - timedelta(days=days)
    assessed = sorted(
        (w for w in workouts if w.assessment is not None and cutoff <= w.date <= as_of),
        key=lambda w: w.date,
    )

    if len(assessed) < MIN_ASSESSED_WORKOUTS:
        return FatigueIndicatorsResult(
            has_sufficient_data=False,
            days=days,
            workouts_assessed=len(assessed),
            message=f"Need at least {MIN_ASSESSED_WORKOUTS} assessed workouts for fatigue analysis.",
        )

    def collect(attr: str) -> List[float]:
        values = (getattr(w.assessment, attr) for w in assessed)
        return [v for v in values if v is not None]

    rpe = [v for v in collect("rpe") if v]
    legs = collect("legs_feel")
    sleep = collect("sleep_quality")
    stress = collect("stress")
    soreness = collect("soreness")
    verdicts = [w.assessment.verdict for w in assessed if w.assessment.verdict]

    signals: List[FatigueSignal] = []
    if len(rpe) >= MIN_METRIC_VALUES:
        signals.append(_rpe_signal(rpe))
    if len(legs) >= MIN_METRIC_VALUES:
        signals.append(_legs_signal(legs))
    if len(sleep) >= MIN_METRIC_VALUES:
        signals.append(_sleep_signal(sleep))
    if len(stress) >= MIN_METRIC_VALUES and _avg(stress) > 7:
        signals.append(FatigueSignal(
            "Stress", IndicatorStatus.WARNING,
            f"High stress (avg {_avg(stress):.1f}/10). Consider easier training.",
        ))
    if len(soreness) >= MIN_METRIC_VALUES and _avg(soreness) > 6:
        signals.append(FatigueSignal(
            "Soreness", IndicatorStatus.WARNING,
            f"High soreness (avg {_avg(soreness):.1f}/10). Muscles need recovery.",
        ))
    if len(verdicts) >= MIN_METRIC_VALUES:
        verdict_signal = _verdict_signal(verdicts)
        if verdict_signal:
            signals.append(verdict_signal)

    def rounded(values: List[float]) -> Optional[float]:
        avg = _avg(values)
        return round_half_up(avg, 1) if avg is not None else None

    return FatigueIndicatorsResult(
        has_sufficient_data=True,
        days=days,
        workouts_assessed=len(assessed),
        signals=signals,
        overall_status=determine_fatigue_status(signals),
        raw_averages={
            "rpe": rounded(rpe),
            "legs_feel": rounded(legs),
            "sleep_quality": rounded(sleep),
            "stress": rounded(stress),
            "soreness": rounded(soreness),
        },
    )
