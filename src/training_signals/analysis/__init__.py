"""
Analysis module for training history.

Provides the pace-per-effort fitness trend and the multi-factor fatigue
indicators, plus monthly VDOT history helpers.
"""

from .trends import (
    EffortDataPoint,
    FitnessTrendResult,
    PaceAtEffort,
    analyze_fitness_trend,
)
from .fatigue import (
    FatigueIndicatorsResult,
    FatigueSignal,
    FatigueStatus,
    IndicatorStatus,
    analyze_fatigue_indicators,
    determine_fatigue_status,
    metric_trend,
)
from .vdot_history import (
    VdotTrend,
    VdotTrendDirection,
    rebuild_monthly_history,
    vdot_trend,
)

__all__ = [
    # Trends
    "EffortDataPoint",
    "FitnessTrendResult",
    "PaceAtEffort",
    "analyze_fitness_trend",
    # Fatigue
    "FatigueIndicatorsResult",
    "FatigueSignal",
    "FatigueStatus",
    "IndicatorStatus",
    "analyze_fatigue_indicators",
    "determine_fatigue_status",
    "metric_trend",
    # VDOT history
    "VdotTrend",
    "VdotTrendDirection",
    "rebuild_monthly_history",
    "vdot_trend",
]
