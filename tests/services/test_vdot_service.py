"""Tests for the VDOTService."""

from datetime import date

import pytest

from training_signals.db.repositories import FitnessStateRepository, LapRepository, VdotHistoryRepository
from training_signals.exceptions import InvalidInputRangeError
from training_signals.metrics.vdot import calculate_pace_zones
from training_signals.models.workouts import (
    ConfidenceTier,
    LapType,
    MultiSignalEstimate,
    VdotHistoryEntry,
    VdotSource,
)
from training_signals.services import (
    StaticPredictionEngine,
    VDOTService,
    fitness_state_from_zones,
)


PROFILE_ID = 1


@pytest.fixture
def states():
    return FitnessStateRepository([fitness_state_from_zones(PROFILE_ID, calculate_pace_zones(45.0))])


@pytest.fixture
def engine():
    return StaticPredictionEngine()


@pytest.fixture
def laps(laps_from_paces):
    return LapRepository({
        "intervals": laps_from_paces([570, 560, 400, 590, 400, 590, 400, 565, 575]),
        "empty": [],
    })


@pytest.fixture
def history():
    return VdotHistoryRepository()


@pytest.fixture
def service(states, laps, engine, history, settings, fixed_clock):
    return VDOTService(
        states, laps=laps, prediction_engine=engine, history=history,
        settings=settings, clock=fixed_clock,
    )


def estimate(vdot, confidence=ConfidenceTier.HIGH, signals_used=3):
    return MultiSignalEstimate(vdot=vdot, confidence=confidence, signals_used=signals_used)


class TestRaceCalculation:
    """Tests for race-result calculations."""

    def test_formatted_zones(self, service):
        result = service.calculate_vdot_from_race("5K", "20:00")

        assert result["vdot"] == 49.8
        zones = result["pace_zones"]
        assert zones["formatted"]["easy"].endswith("/mi")
        assert "vdot" not in zones["formatted"]
        assert len(zones["descriptions"]) == 10

    def test_invalid_input_propagates(self, service):
        with pytest.raises(InvalidInputRangeError):
            service.calculate_vdot_from_race("5K", "soon")

    def test_zones_for_vdot(self, service):
        assert service.get_pace_zones_for_vdot(50)["threshold"] == calculate_pace_zones(50).threshold

    def test_save_race_vdot(self, service, fixed_now):
        state = service.save_race_vdot(2, 52.0)

        assert state.vdot == 52.0
        assert state.updated_at == fixed_now
        assert service.get_fitness_state(2) == state


class TestApplyEstimate:
    """Tests for smoothing an estimate into the stored state."""

    def test_smoothed_upward(self, service, fixed_now):
        """45 -> 50 at high confidence is stored as 49.3 with its paces."""
        result = service.apply_estimate(PROFILE_ID, estimate(50.0))

        assert result.success
        assert result.old_vdot == 45.0
        assert result.new_vdot == 49.3

        state = service.get_fitness_state(PROFILE_ID)
        zones = calculate_pace_zones(49.3)
        assert state.vdot == 49.3
        assert state.easy_pace_seconds == zones.easy
        assert state.threshold_pace_seconds == zones.threshold
        assert state.interval_pace_seconds == zones.interval
        assert state.updated_at == fixed_now

    def test_smoothed_downward(self, service):
        result = service.apply_estimate(PROFILE_ID, estimate(40.0, ConfidenceTier.LOW))
        assert result.new_vdot == 44.0

    def test_out_of_range_rejected(self, service):
        """An implausible estimate leaves the stored state untouched."""
        result = service.apply_estimate(PROFILE_ID, estimate(90.0))

        assert result.success is False
        assert result.reason == "estimate out of range"
        assert service.get_fitness_state(PROFILE_ID).vdot == 45.0

    def test_skip_smoothing(self, service):
        result = service.apply_estimate(PROFILE_ID, estimate(50.04), skip_smoothing=True)
        assert result.new_vdot == 50.0

    def test_new_profile_takes_raw(self, service):
        """Without a stored VDOT the estimate is taken as is."""
        result = service.apply_estimate(7, estimate(48.26, ConfidenceTier.LOW))

        assert result.old_vdot is None
        assert result.new_vdot == 48.3
        assert service.get_fitness_state(7).vdot == 48.3


class TestSyncFromPredictionEngine:
    """Tests for the prediction engine sync."""

    def test_sync(self, service, engine):
        engine.set_estimate(PROFILE_ID, estimate(50.0))
        result = service.sync_from_prediction_engine(PROFILE_ID)

        assert result.success
        assert result.new_vdot == 49.3
        assert result.to_dict()["confidence"] == "high"

    def test_engine_unavailable(self, service):
        """No estimate for the profile: unsuccessful, state unchanged."""
        result = service.sync_from_prediction_engine(PROFILE_ID)

        assert result.success is False
        assert "No estimate available" in result.reason
        assert service.get_fitness_state(PROFILE_ID).vdot == 45.0

    def test_no_engine_configured(self, states, settings):
        service = VDOTService(states, settings=settings)
        result = service.sync_from_prediction_engine(PROFILE_ID)
        assert result.reason == "no prediction engine configured"

    def test_empty_estimate(self, service, engine):
        engine.set_estimate(PROFILE_ID, MultiSignalEstimate())
        assert service.sync_from_prediction_engine(PROFILE_ID).reason == "no estimate"


class TestReclassify:
    """Tests for lap re-classification."""

    def test_reclassify_laps(self, service, laps):
        summary = service.reclassify_laps()

        assert summary.processed == 1
        assert summary.skipped == 1
        assert laps.get_laps("intervals")[2].lap_type == LapType.WORK

    def test_sync_and_reclassify(self, service, engine, laps):
        """User-triggered recalculation takes the raw estimate."""
        engine.set_estimate(PROFILE_ID, estimate(50.0))
        result = service.sync_and_reclassify(PROFILE_ID)

        assert result.success
        assert result.vdot_result.new_vdot == 50.0
        assert result.to_dict()["workouts_processed"] == 1
        assert laps.get_laps("intervals")[0].lap_type == LapType.WARMUP

    def test_failed_sync_skips_reclassify(self, service, laps):
        result = service.sync_and_reclassify(PROFILE_ID)

        assert result.success is False
        assert result.reclassified.total == 0
        assert laps.get_laps("intervals")[0].lap_type == LapType.STEADY


class TestVdotHistory:
    """Tests for the monthly VDOT history kept by the service."""

    def test_race_vdot_recorded(self, service, history, fixed_now):
        service.save_race_vdot(2, 52.0)

        [entry] = history.list_for_profile(2)
        assert entry.date == date(2025, 3, 1)
        assert entry.vdot == 52.0
        assert entry.source == VdotSource.RACE
        assert entry.confidence == ConfidenceTier.HIGH
        assert entry.recorded_at == fixed_now

    def test_estimate_recorded_with_notes(self, service, history):
        """The note keeps the previous, smoothed and raw values."""
        service.apply_estimate(PROFILE_ID, MultiSignalEstimate(
            vdot=50.0,
            confidence="high",
            signals_used=3,
            agreement_score=0.8,
            signal_names=["Race VDOT", "Threshold Pace"],
        ))

        [entry] = history.list_for_profile(PROFILE_ID)
        assert entry.vdot == 49.3
        assert entry.raw_vdot == 50.0
        assert entry.source == VdotSource.ESTIMATE
        assert entry.notes == (
            "multi-signal (3 signals) | agreement: 80% | Race VDOT, Threshold Pace"
            " | prev: 45.0 -> 49.3 (raw: 50.0)"
        )

    def test_same_month_replaced(self, service, history):
        """A second update in the same month overwrites that month's point."""
        service.apply_estimate(PROFILE_ID, estimate(50.0))
        service.apply_estimate(PROFILE_ID, estimate(52.0), skip_smoothing=True)

        entries = history.list_for_profile(PROFILE_ID)
        assert len(entries) == 1
        assert entries[0].vdot == 52.0

    def test_rejected_estimate_not_recorded(self, service, history):
        service.apply_estimate(PROFILE_ID, estimate(90.0))
        assert history.list_for_profile(PROFILE_ID) == []

    def test_trend_defaults_to_today(self, service, history):
        for month, vdot in [(1, 45.0), (2, 46.0), (3, 48.0)]:
            history.save(VdotHistoryEntry(profile_id=PROFILE_ID, date=date(2025, month, 1), vdot=vdot))

        trend = service.get_vdot_trend(PROFILE_ID)

        assert trend.trend.value == "improving"
        assert trend.current == 48.0
        assert trend.previous == 45.5
        assert trend.change == 2.5
        assert trend.change_pct == 5.5

    def test_rebuild_fills_missing_months(self, service, history, fixed_now):
        """Dec and Feb recordings become four monthly points through March."""
        history.save(VdotHistoryEntry(
            profile_id=PROFILE_ID, date=date(2024, 12, 1), vdot=44.0, notes="race result",
        ))
        history.save(VdotHistoryEntry(profile_id=PROFILE_ID, date=date(2025, 2, 1), vdot=46.0))

        assert service.rebuild_history(PROFILE_ID) == 4

        entries = service.get_vdot_history(PROFILE_ID)
        assert [e.date.month for e in entries] == [12, 1, 2, 3]
        assert [e.vdot for e in entries] == [44.0, 44.0, 46.0, 46.0]
        assert entries[1].notes == "race result"
        assert entries[3].notes == "monthly carry-forward"
        assert all(e.recorded_at == fixed_now for e in entries)

    def test_rebuild_seeds_from_stored_vdot(self, service):
        """With no history the stored VDOT becomes this month's manual point."""
        assert service.rebuild_history(PROFILE_ID) == 1

        [entry] = service.get_vdot_history(PROFILE_ID)
        assert entry.date == date(2025, 3, 1)
        assert entry.vdot == 45.0
        assert entry.source == VdotSource.MANUAL

    def test_rebuild_unknown_profile(self, service):
        assert service.rebuild_history(99) == 0
