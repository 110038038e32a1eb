"""
VDOT History

Monthly VDOT timeline helpers: the half-window trend over recent history
and the rebuild that turns scattered recordings into one point per month.
Months without a recording carry the previous value forward so timeline
charts draw flat segments.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from statistics import mean
from typing import Any, Dict, Iterable, List, Optional

from ..metrics.pace import round_half_up
from ..models.workouts import ConfidenceTier, VdotHistoryEntry, VdotSource


# Change in mean VDOT (points) needed to call a trend
VDOT_TREND_THRESHOLD = 0.5

CARRY_FORWARD_NOTE = "monthly carry-forward"
BASELINE_NOTE = "monthly baseline from stored VDOT"


class VdotTrendDirection(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"
    UNKNOWN = "unknown"


def month_start(day: date) -> date:
    return day.replace(day=1)


def next_month(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


@dataclass
class VdotTrend:
    """Mean VDOT in the recent half of the window against the older half."""

    trend: VdotTrendDirection
    current: Optional[float] = None
    previous: Optional[float] = None
    change: Optional[float] = None
    change_pct: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current": self.current,
            "previous": self.previous,
            "change": self.change,
            "change_percent": self.change_pct,
            "trend": self.trend.value,
        }


def vdot_trend(
    entries: Iterable[VdotHistoryEntry],
    as_of: date,
    days: int = 90,
) -> VdotTrend:
    """
    Compare mean VDOT across the two halves of the trailing window.

    The recent half holds entries dated on or after the midpoint; the older
    half holds entries from the window start through the midpoint. An empty
    half gives an unknown trend. A change of more than 0.5 points either
    way is improving or declining, anything smaller is stable.
    """
    start = as_of - timedelta(days=days)
    midpoint = as_of - timedelta(days=days / 2)
    entries = list(entries)

    recent = [e.vdot for e in entries if e.date >= midpoint]
    older = [e.vdot for e in entries if start <= e.date <= midpoint]

    current = mean(recent) if recent else None
    previous = mean(older) if older else None

    if current is None or previous is None:
        return VdotTrend(
            trend=VdotTrendDirection.UNKNOWN,
            current=round_half_up(current, 1) if current is not None else None,
            previous=round_half_up(previous, 1) if previous is not None else None,
        )

    change = current - previous
    if change > VDOT_TREND_THRESHOLD:
        trend = VdotTrendDirection.IMPROVING
    elif change < -VDOT_TREND_THRESHOLD:
        trend = VdotTrendDirection.DECLINING
    else:
        trend = VdotTrendDirection.STABLE

    return VdotTrend(
        trend=trend,
        current=round_half_up(current, 1),
        previous=round_half_up(previous, 1),
        change=round_half_up(change, 1),
        change_pct=round_half_up(change / previous * 100, 1),
    )


def rebuild_monthly_history(
    profile_id: int,
    entries: Iterable[VdotHistoryEntry],
    end: date,
    start: Optional[date] = None,
    baseline_vdot: Optional[float] = None,
    rebuilt_at: Optional[datetime] = None,
) -> List[VdotHistoryEntry]:
    """
    One entry per month from `start` through `end`.

    The last recording in a month wins. Months without one repeat the
    last known value. Before the first recording the latest earlier entry
    is carried; with no entries at all `baseline_vdot` (the profile's
    stored VDOT) seeds the timeline as a manual point.

    Args:
        profile_id: Profile the entries belong to
        entries: Existing history for the profile, any order
        end: Last month to emit (any day in it)
        start: First month to emit; defaults to the earliest entry's month,
            or the end month when there are no entries
        baseline_vdot: Stored VDOT used when there is no history
        rebuilt_at: Timestamp stamped on every rebuilt entry

    Returns:
        Rebuilt entries, oldest first
    """
    # Stable sort: among same-day entries the later one in input order wins
    ordered = sorted(entries, key=lambda e: e.date)
    end_month = month_start(end)
    if start is not None:
        start_month = month_start(start)
    elif ordered:
        start_month = month_start(ordered[0].date)
    else:
        start_month = end_month

    by_month: Dict[date, VdotHistoryEntry] = {}
    for entry in ordered:
        by_month[month_start(entry.date)] = entry

    carry: Optional[VdotHistoryEntry] = None
    earlier = [e for e in ordered if month_start(e.date) < start_month]
    if earlier:
        carry = earlier[-1]
    elif ordered:
        carry = ordered[0]
    elif baseline_vdot is not None and 15 <= baseline_vdot <= 85:
        carry = VdotHistoryEntry(
            profile_id=profile_id,
            date=start_month,
            vdot=baseline_vdot,
            source=VdotSource.MANUAL,
            confidence=ConfidenceTier.MEDIUM,
            notes=BASELINE_NOTE,
        )

    rebuilt: List[VdotHistoryEntry] = []
    cursor = start_month
    while cursor <= end_month:
        recorded = by_month.get(cursor)
        if recorded is not None:
            carry = recorded

        if carry is not None:
            rebuilt.append(carry.model_copy(update={
                "profile_id": profile_id,
                "date": cursor,
                "vdot": round_half_up(carry.vdot, 1),
                "notes": recorded.notes if recorded is not None else (carry.notes or CARRY_FORWARD_NOTE),
                "recorded_at": rebuilt_at,
            }))

        cursor = next_month(cursor)

    return rebuilt
