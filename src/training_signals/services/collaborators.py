"""
External collaborator contracts.

The weather provider and the multi-signal prediction engine live outside
this package. Adapters raise UpstreamFailureError when they cannot answer;
services then continue without the optional input.
"""

from typing import Dict, Optional, Protocol, runtime_checkable

from ..exceptions import UpstreamFailureError
from ..metrics.weather import get_weather_pace_adjustment
from ..models.workouts import MultiSignalEstimate


@runtime_checkable
class WeatherProvider(Protocol):
    """Seconds-per-mile pace penalty for conditions (<= 0 means none)."""

    def get_weather_pace_adjustment(self, temp_f: float, humidity_pct: float) -> float:
        ...


@runtime_checkable
class PredictionEngine(Protocol):
    """Blends several fitness signals into one raw VDOT estimate."""

    def estimate_vdot(self, profile_id: int) -> Optional[MultiSignalEstimate]:
        ...


class FormulaWeatherProvider:
    """Weather provider backed by the built-in heat/humidity formula."""

    def get_weather_pace_adjustment(self, temp_f: float, humidity_pct: float) -> float:
        return get_weather_pace_adjustment(temp_f, humidity_pct)


class StaticPredictionEngine:
    """
    Prediction engine answering from a fixed table of estimates.

    Used by the CLI, where estimates come from an input file, and by tests.
    Profiles without an entry raise UpstreamFailureError.
    """

    def __init__(self, estimates: Optional[Dict[int, MultiSignalEstimate]] = None):
        self._estimates = dict(estimates or {})

    def set_estimate(self, profile_id: int, estimate: MultiSignalEstimate) -> None:
        self._estimates[profile_id] = estimate

    def estimate_vdot(self, profile_id: int) -> Optional[MultiSignalEstimate]:
        if profile_id not in self._estimates:
            raise UpstreamFailureError(
                "prediction_engine",
                f"No estimate available for profile {profile_id}",
            )
        return self._estimates[profile_id]
