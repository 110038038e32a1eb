"""
VDOT Service - Fitness Index and Pace Zones

Service layer around the VDOT engine. Calculates VDOT from race results,
keeps each profile's stored VDOT and training paces current from the
multi-signal prediction engine (with asymmetric smoothing), and
re-classifies stored laps after an update. Every stored VDOT is also
recorded as the current month's point on the profile's VDOT history.

Based on Jack Daniels' Running Formula for calculating training paces.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from ..analysis.vdot_history import VdotTrend, month_start, rebuild_monthly_history, vdot_trend
from ..config import Settings
from ..exceptions import InvalidInputRangeError, UpstreamFailureError
from ..metrics.laps import classify_laps
from ..metrics.pace import format_pace_per_mile, round_half_up
from ..metrics.vdot import (
    PaceZoneSet,
    calculate_pace_zones,
    calculate_vdot_from_race,
    get_equivalent_race_times,
    get_pace_zone_descriptions,
    is_valid_vdot,
    smooth_vdot,
)
from ..models.workouts import (
    ConfidenceTier,
    MultiSignalEstimate,
    UserFitnessState,
    VdotHistoryEntry,
    VdotSource,
    WorkoutId,
)
from ..db.repositories import FitnessStateRepository, LapRepository, VdotHistoryRepository
from .base import BaseService, BatchSummary, Clock
from .collaborators import PredictionEngine


@dataclass
class VdotSyncResult:
    """Outcome of one VDOT sync against the prediction engine."""
    success: bool
    old_vdot: Optional[float]
    new_vdot: Optional[float]
    confidence: ConfidenceTier = ConfidenceTier.LOW
    signals_used: int = 0
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "old_vdot": self.old_vdot,
            "new_vdot": self.new_vdot,
            "confidence": self.confidence.value,
            "signals_used": self.signals_used,
            "reason": self.reason,
        }


@dataclass
class ReclassifyResult:
    """VDOT sync followed by lap re-classification."""
    vdot_result: VdotSyncResult
    reclassified: BatchSummary = field(default_factory=BatchSummary)

    @property
    def success(self) -> bool:
        return self.vdot_result.success

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "vdot_result": self.vdot_result.to_dict(),
            "workouts_processed": self.reclassified.processed,
            "errors": self.reclassified.error_count,
        }


def fitness_state_from_zones(
    profile_id: int,
    zones: PaceZoneSet,
    updated_at: Optional[datetime] = None,
) -> UserFitnessState:
    """Stored profile state for a VDOT: the value plus six training paces."""
    return UserFitnessState(
        profile_id=profile_id,
        vdot=zones.vdot,
        easy_pace_seconds=zones.easy,
        marathon_pace_seconds=zones.marathon,
        half_marathon_pace_seconds=zones.half_marathon,
        tempo_pace_seconds=zones.tempo,
        threshold_pace_seconds=zones.threshold,
        interval_pace_seconds=zones.interval,
        updated_at=updated_at,
    )


def estimate_notes(
    estimate: MultiSignalEstimate,
    old_vdot: Optional[float],
    new_vdot: float,
) -> str:
    """
    History note for an applied estimate, such as
    "multi-signal (3 signals) | agreement: 80% | prev: 45.0 -> 47.5 (raw: 50.0)".
    """
    parts = [
        f"multi-signal ({estimate.signals_used} signals)",
        f"agreement: {int(round_half_up(estimate.agreement_score * 100))}%",
    ]
    if estimate.signal_names:
        parts.append(", ".join(estimate.signal_names))
    if old_vdot is not None:
        parts.append(f"prev: {old_vdot} -> {new_vdot} (raw: {estimate.vdot})")
    return " | ".join(parts)


class VDOTService(BaseService):
    """
    Service for VDOT-based pace zone calculations.

    This service provides:
    - VDOT calculation from race results
    - Training pace zone generation
    - Race time predictions
    - Smoothed VDOT sync from the prediction engine
    - Lap re-classification after a VDOT change
    - Monthly VDOT history and its trend
    """

    def __init__(
        self,
        states: FitnessStateRepository,
        laps: Optional[LapRepository] = None,
        prediction_engine: Optional[PredictionEngine] = None,
        history: Optional[VdotHistoryRepository] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(settings=settings, clock=clock, logger=logger)
        self._states = states
        self._laps = laps or LapRepository()
        self._prediction_engine = prediction_engine
        self._history = history or VdotHistoryRepository()

    def calculate_vdot_from_race(
        self,
        distance: str,
        time_str: str,
        custom_distance_m: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Calculate VDOT from a race result.

        Args:
            distance: Race distance ('5K', '10K', 'half', 'marathon', or 'custom')
            time_str: Race time as string (e.g., '25:30' or '1:45:00')
            custom_distance_m: Custom distance in meters if distance is 'custom'

        Returns:
            Dictionary with VDOT value, pace zones, and race predictions

        Raises:
            InvalidInputRangeError: If distance or time format is invalid
        """
        try:
            result = calculate_vdot_from_race(
                distance=distance,
                time_str=time_str,
                custom_distance_m=custom_distance_m,
            )
        except InvalidInputRangeError as e:
            self.logger.warning("Invalid VDOT calculation input: %s", e.message)
            raise

        result_dict = result.to_dict()
        result_dict["pace_zones"] = self._format_pace_zones(result.pace_zones)
        return result_dict

    def get_pace_zones_for_vdot(self, vdot: float) -> Dict[str, Any]:
        """
        Get pace zones for a specific VDOT value.

        Raises:
            InvalidInputRangeError: If vdot is outside [15, 85]
        """
        return self._format_pace_zones(calculate_pace_zones(vdot))

    def get_race_predictions(self, vdot: float) -> Dict[str, Dict[str, Any]]:
        """Predicted times for standard distances at this VDOT."""
        return get_equivalent_race_times(vdot)

    def get_fitness_state(self, profile_id: int) -> Optional[UserFitnessState]:
        return self._states.get(profile_id)

    def save_race_vdot(self, profile_id: int, vdot: float) -> UserFitnessState:
        """
        Store a VDOT taken directly from a race, without smoothing.

        Raises:
            InvalidInputRangeError: If vdot is outside [15, 85]
        """
        state = fitness_state_from_zones(profile_id, calculate_pace_zones(vdot), self.now())
        self._states.save(state)
        self._record_history(
            profile_id, vdot, VdotSource.RACE,
            confidence=ConfidenceTier.HIGH,
            notes="race result",
        )
        self.logger.info("Profile %s: VDOT set to %.1f from race result", profile_id, vdot)
        return state

    def apply_estimate(
        self,
        profile_id: int,
        estimate: MultiSignalEstimate,
        skip_smoothing: bool = False,
    ) -> VdotSyncResult:
        """
        Apply a raw VDOT estimate to the stored profile state.

        Out-of-range estimates are rejected and nothing is stored. With
        skip_smoothing the raw value replaces the stored one; otherwise it
        is blended in asymmetrically by confidence tier.
        """
        confidence = ConfidenceTier(estimate.confidence)
        current = self._states.get(profile_id)
        old_vdot = current.vdot if current else None

        if estimate.vdot is None or not is_valid_vdot(estimate.vdot):
            self.logger.warning(
                "Profile %s: rejecting VDOT estimate %s (outside valid range)",
                profile_id, estimate.vdot,
            )
            return VdotSyncResult(
                success=False,
                old_vdot=old_vdot,
                new_vdot=None,
                confidence=confidence,
                signals_used=estimate.signals_used,
                reason="estimate out of range",
            )

        if skip_smoothing:
            new_vdot = round_half_up(estimate.vdot, 1)
        else:
            new_vdot = smooth_vdot(old_vdot, estimate.vdot, confidence)

        state = fitness_state_from_zones(profile_id, calculate_pace_zones(new_vdot), self.now())
        self._states.save(state)
        self._record_history(
            profile_id, new_vdot, VdotSource.ESTIMATE,
            confidence=confidence,
            raw_vdot=estimate.vdot,
            notes=estimate_notes(estimate, old_vdot, new_vdot),
        )

        self.logger.info(
            "Profile %s: VDOT %s -> %.1f (raw %.1f, %s confidence, %d signals)",
            profile_id, old_vdot, new_vdot, estimate.vdot,
            confidence.value, estimate.signals_used,
        )
        return VdotSyncResult(
            success=True,
            old_vdot=old_vdot,
            new_vdot=new_vdot,
            confidence=confidence,
            signals_used=estimate.signals_used,
        )

    def sync_from_prediction_engine(
        self,
        profile_id: int,
        skip_smoothing: bool = False,
    ) -> VdotSyncResult:
        """
        Fetch a raw estimate from the prediction engine and apply it.

        An unavailable engine or an empty estimate gives an unsuccessful
        result; the stored state is left untouched.
        """
        current = self._states.get(profile_id)
        old_vdot = current.vdot if current else None

        if self._prediction_engine is None:
            return VdotSyncResult(False, old_vdot, None, reason="no prediction engine configured")

        try:
            estimate = self._prediction_engine.estimate_vdot(profile_id)
        except UpstreamFailureError as e:
            self.logger.warning("Profile %s: prediction engine unavailable: %s", profile_id, e.message)
            return VdotSyncResult(False, old_vdot, None, reason=e.message)

        if estimate is None or estimate.vdot is None:
            return VdotSyncResult(False, old_vdot, None, reason="no estimate")

        return self.apply_estimate(profile_id, estimate, skip_smoothing=skip_smoothing)

    def reclassify_laps(self, workout_ids: Optional[Iterable[WorkoutId]] = None) -> BatchSummary:
        """Re-run lap classification for stored workouts and save the result."""
        targets: List[WorkoutId] = list(workout_ids) if workout_ids is not None else self._laps.workout_ids()

        def process(workout_id: WorkoutId) -> bool:
            laps = self._laps.get_laps(workout_id)
            if not laps:
                return False
            self._laps.save_laps(workout_id, classify_laps(laps))
            return True

        return self.run_batch(targets, process, lambda workout_id: workout_id, label="workouts")

    def sync_and_reclassify(
        self,
        profile_id: int,
        workout_ids: Optional[Iterable[WorkoutId]] = None,
    ) -> ReclassifyResult:
        """
        User-triggered recalculation: accept the raw estimate, then
        re-classify every workout's laps.
        """
        vdot_result = self.sync_from_prediction_engine(profile_id, skip_smoothing=True)
        if not vdot_result.success:
            return ReclassifyResult(vdot_result=vdot_result)
        return ReclassifyResult(vdot_result=vdot_result, reclassified=self.reclassify_laps(workout_ids))

    def get_vdot_history(
        self,
        profile_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[VdotHistoryEntry]:
        return self._history.list_for_profile(profile_id, start=start, end=end)

    def get_vdot_trend(
        self,
        profile_id: int,
        as_of: Optional[date] = None,
        days: int = 90,
    ) -> VdotTrend:
        """Half-window VDOT trend over the trailing `days` (defaults to today)."""
        as_of = as_of or self.now().date()
        return vdot_trend(self._history.list_for_profile(profile_id, end=as_of), as_of, days=days)

    def rebuild_history(self, profile_id: int, start: Optional[date] = None) -> int:
        """
        Rewrite the profile's history as one point per month through the
        current month, carrying values across months with no recording.

        Returns:
            Number of entries after the rebuild
        """
        existing = self._history.list_for_profile(profile_id)
        state = self._states.get(profile_id)
        now = self.now()

        rebuilt = rebuild_monthly_history(
            profile_id,
            existing,
            end=now.date(),
            start=start,
            baseline_vdot=state.vdot if state else None,
            rebuilt_at=now,
        )
        count = self._history.replace_for_profile(profile_id, rebuilt)
        self.logger.info(
            "Profile %s: rebuilt VDOT history (%d entries -> %d monthly)",
            profile_id, len(existing), count,
        )
        return count

    def _record_history(
        self,
        profile_id: int,
        vdot: float,
        source: VdotSource,
        confidence: ConfidenceTier,
        raw_vdot: Optional[float] = None,
        notes: Optional[str] = None,
    ) -> VdotHistoryEntry:
        """Store `vdot` as this month's history point, replacing any earlier one."""
        now = self.now()
        entry = VdotHistoryEntry(
            profile_id=profile_id,
            date=month_start(now.date()),
            vdot=round_half_up(vdot, 1),
            source=source,
            confidence=confidence,
            raw_vdot=raw_vdot,
            notes=notes,
            recorded_at=now,
        )
        return self._history.save(entry)

    def _format_pace_zones(self, zones: PaceZoneSet) -> Dict[str, Any]:
        """Zone paces plus formatted per-mile strings and descriptions."""
        formatted = zones.to_dict()
        formatted["formatted"] = {
            name: format_pace_per_mile(value)
            for name, value in formatted.items()
            if isinstance(value, int) and name != "vdot"
        }
        formatted["descriptions"] = [d.to_dict() for d in get_pace_zone_descriptions(zones)]
        return formatted
