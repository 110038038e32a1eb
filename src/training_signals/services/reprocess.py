"""Full reprocessing pipeline across the signal and VDOT services."""

import logging
from dataclasses import dataclass
from typing import Any, Dict

from .base import BatchSummary
from .fitness_signals import FitnessSignalService
from .vdot_service import VDOTService, VdotSyncResult

logger = logging.getLogger(__name__)


@dataclass
class FullReprocessResult:
    signals: BatchSummary
    vdot_result: VdotSyncResult
    reclassified: BatchSummary
    history_entries: int = 0

    @property
    def success(self) -> bool:
        return self.vdot_result.success

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "signals_recomputed": self.signals.processed,
            "signal_errors": self.signals.error_count,
            "vdot_result": self.vdot_result.to_dict(),
            "workouts_reclassified": self.reclassified.processed,
            "reclassify_errors": self.reclassified.error_count,
            "history_entries": self.history_entries,
        }


def full_reprocess(
    signal_service: FitnessSignalService,
    vdot_service: VDOTService,
    profile_id: int,
) -> FullReprocessResult:
    """
    Recompute every signal record, re-sync VDOT without smoothing, then
    re-classify all laps and rebuild the monthly VDOT history.

    Used after backfilling workouts or changing the weather formula. Lap
    re-classification runs even when the VDOT sync fails.
    """
    logger.info("Full reprocess for profile %s", profile_id)

    signals = signal_service.backfill(force=True)
    vdot_result = vdot_service.sync_from_prediction_engine(profile_id, skip_smoothing=True)
    reclassified = vdot_service.reclassify_laps()
    history_entries = vdot_service.rebuild_history(profile_id)

    return FullReprocessResult(
        signals=signals,
        vdot_result=vdot_result,
        reclassified=reclassified,
        history_entries=history_entries,
    )
