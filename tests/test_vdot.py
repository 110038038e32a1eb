"""Tests for the VDOT and pace-zone engine."""

import pytest

from training_signals.exceptions import InvalidInputRangeError
from training_signals.metrics.vdot import (
    RaceDistance,
    adjust_pace_zones_for_weather,
    calculate_adjusted_vdot,
    calculate_pace_zones,
    calculate_vdot,
    calculate_vdot_from_race,
    estimate_vdot_from_easy_pace,
    get_equivalent_race_times,
    get_pace_zone_descriptions,
    predict_race_time,
    smooth_vdot,
)
from training_signals.models.workouts import ConfidenceTier


class TestCalculateVDOT:
    """Tests for VDOT from race results."""

    def test_5k_in_20_minutes(self):
        """A 20:00 5K is VDOT 49.8."""
        assert calculate_vdot(5000, 1200) == 49.8

    def test_faster_race_higher_vdot(self):
        """Running the same distance faster gives a higher VDOT."""
        assert calculate_vdot(10000, 2400) > calculate_vdot(10000, 2700)

    def test_clamped_low(self):
        """Walking pace is clamped to the minimum of 15."""
        assert calculate_vdot(5000, 7200) == 15.0

    def test_clamped_high(self):
        """Implausibly fast results are clamped to 85."""
        assert calculate_vdot(5000, 600) == 85.0

    def test_non_positive_input_raises(self):
        with pytest.raises(InvalidInputRangeError):
            calculate_vdot(0, 1200)
        with pytest.raises(InvalidInputRangeError):
            calculate_vdot(5000, 0)


class TestCalculateVDOTFromRace:
    """Tests for the full race calculation."""

    def test_named_distance(self):
        result = calculate_vdot_from_race("5K", "20:00")

        assert result.vdot == 49.8
        assert result.race_distance == "5K"
        assert result.race_time_sec == 1200
        assert result.race_time_formatted == "20:00"
        assert "Marathon" in result.race_predictions

    def test_custom_distance(self):
        """Custom distances are given in meters."""
        result = calculate_vdot_from_race("custom", "20:00", custom_distance_m=5000)
        assert result.vdot == 49.8
        assert result.race_distance == "5.00K"

    def test_custom_distance_required(self):
        with pytest.raises(InvalidInputRangeError):
            calculate_vdot_from_race("custom", "20:00")

    def test_unknown_distance(self):
        with pytest.raises(InvalidInputRangeError):
            calculate_vdot_from_race("50 miler", "8:00:00")

    def test_to_dict(self):
        data = calculate_vdot_from_race("10k", "45:00").to_dict()
        assert data["race_distance"] == "10K"
        assert set(data["pace_zones"]) >= {"easy", "threshold", "repetition"}


class TestRaceDistance:
    """Tests for RaceDistance parsing."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("5K", RaceDistance.FIVE_K),
            ("10k", RaceDistance.TEN_K),
            ("15K", RaceDistance.FIFTEEN_K),
            ("10mi", RaceDistance.TEN_MILE),
            ("Half Marathon", RaceDistance.HALF_MARATHON),
            ("half-marathon", RaceDistance.HALF_MARATHON),
            ("marathon", RaceDistance.MARATHON),
        ],
    )
    def test_from_string(self, text, expected):
        assert RaceDistance.from_string(text) == expected

    def test_unknown(self):
        assert RaceDistance.from_string("ultra") is None


class TestPaceZones:
    """Tests for training paces."""

    @pytest.mark.parametrize("vdot", [15, 22.5, 30, 45, 49.8, 60, 72.3, 85])
    def test_zone_order(self, vdot):
        """Easier zones are always slower than harder zones."""
        z = calculate_pace_zones(vdot)
        assert (
            z.recovery
            > z.easy
            > z.marathon
            > z.half_marathon
            > z.tempo
            > z.threshold
            > z.interval
            > z.repetition
        )

    def test_easy_band_brackets_easy_pace(self):
        zones = calculate_pace_zones(50)
        fast, slow = zones.easy_range
        assert fast < zones.easy < slow

    def test_threshold_pace_matches_reference_table(self):
        """VDOT 50 threshold is about 6:51/mi."""
        assert 405 <= calculate_pace_zones(50).threshold <= 418

    def test_higher_vdot_faster_paces(self):
        assert calculate_pace_zones(55).marathon < calculate_pace_zones(45).marathon

    @pytest.mark.parametrize("vdot", [10, 14.9, 85.1, 90])
    def test_out_of_range(self, vdot):
        """VDOT outside 15-85 is rejected."""
        with pytest.raises(InvalidInputRangeError):
            calculate_pace_zones(vdot)

    def test_get_by_name(self):
        """Workout types map onto zones."""
        zones = calculate_pace_zones(50)
        assert zones.get("threshold") == zones.threshold
        assert zones.get("long") == zones.easy
        assert zones.get("fartlek") is None

    def test_to_dict(self):
        data = calculate_pace_zones(50).to_dict()
        assert data["vdot"] == 50
        assert data["easy_range"]["fast"] < data["easy_range"]["slow"]

    def test_descriptions_cover_all_zones(self):
        descriptions = get_pace_zone_descriptions(calculate_pace_zones(50))
        assert len(descriptions) == 10
        assert descriptions[0].zone == "Recovery"
        assert descriptions[0].pace.endswith("/mi")


class TestWeatherAdjustedZones:
    """Tests for adjust_pace_zones_for_weather."""

    def test_hard_zones_take_smaller_share(self):
        """75F/80% is an 18s penalty, scaled down for hard efforts."""
        zones = calculate_pace_zones(50)
        hot = adjust_pace_zones_for_weather(zones, 75, 80)

        assert hot.easy == zones.easy + 18
        assert hot.marathon == zones.marathon + 18
        assert hot.threshold == zones.threshold + 14
        assert hot.interval == zones.interval + 9
        assert hot.repetition == zones.repetition + 5

    def test_ideal_conditions_unchanged(self):
        zones = calculate_pace_zones(50)
        assert adjust_pace_zones_for_weather(zones, 45, 40) is zones


class TestAdjustedVDOT:
    """Tests for condition-adjusted VDOT."""

    def test_no_conditions(self):
        assert calculate_adjusted_vdot(10000, 2700) == calculate_vdot(10000, 2700)

    def test_heat_raises_vdot(self):
        """A hot race was worth more than its time suggests."""
        assert calculate_adjusted_vdot(10000, 2700, 85, 80) > calculate_vdot(10000, 2700)

    def test_hills_raise_vdot(self):
        assert calculate_adjusted_vdot(10000, 2700, elevation_gain_ft=500) > calculate_vdot(10000, 2700)

    def test_correction_capped(self):
        """The corrected time is never below 85% of the actual time."""
        adjusted = calculate_adjusted_vdot(5000, 1500, 110, 100, elevation_gain_ft=2000)
        assert adjusted <= calculate_vdot(5000, 1500 * 0.85)


class TestRacePrediction:
    """Tests for race time prediction."""

    def test_inverse_of_calculate_vdot(self):
        """Predicting at a race's VDOT gives back roughly the race time."""
        assert abs(predict_race_time(49.8, 5000) - 1200) <= 2

    def test_longer_races_take_longer(self):
        times = get_equivalent_race_times(50)
        ordered = [times[d.display_name]["time_sec"] for d in RaceDistance]
        assert ordered == sorted(ordered)

    def test_higher_vdot_faster(self):
        assert predict_race_time(55, 42195) < predict_race_time(45, 42195)

    def test_out_of_range(self):
        with pytest.raises(InvalidInputRangeError):
            predict_race_time(100, 5000)


class TestEasyPaceEstimate:
    """Tests for estimate_vdot_from_easy_pace."""

    def test_round_trip_with_zones(self):
        """The easy pace of a VDOT maps back to about that VDOT."""
        easy = calculate_pace_zones(50).easy
        assert estimate_vdot_from_easy_pace(easy) == pytest.approx(50, abs=0.3)

    def test_implausible_pace(self):
        """Very slow paces fall below VDOT 15."""
        assert estimate_vdot_from_easy_pace(2000) is None
        assert estimate_vdot_from_easy_pace(0) is None


class TestSmoothVDOT:
    """Tests for asymmetric VDOT smoothing."""

    def test_increase_high_confidence(self):
        """45 -> 50 at high confidence moves 85% of the way: 49.25 -> 49.3."""
        assert smooth_vdot(45.0, 50.0, ConfidenceTier.HIGH) == 49.3

    def test_decrease_high_confidence(self):
        """45 -> 40 at high confidence moves only 40%: 43.0."""
        assert smooth_vdot(45.0, 40.0, ConfidenceTier.HIGH) == 43.0

    @pytest.mark.parametrize(
        "confidence, up, down",
        [
            (ConfidenceTier.MEDIUM, 48.8, 43.5),
            (ConfidenceTier.LOW, 48.0, 44.0),
        ],
    )
    def test_other_tiers(self, confidence, up, down):
        assert smooth_vdot(45.0, 50.0, confidence) == up
        assert smooth_vdot(45.0, 40.0, confidence) == down

    @pytest.mark.parametrize("confidence", list(ConfidenceTier))
    def test_rises_faster_than_falls(self, confidence):
        """Equal and opposite deltas move VDOT up more than down."""
        up = smooth_vdot(50.0, 54.0, confidence) - 50.0
        down = 50.0 - smooth_vdot(50.0, 46.0, confidence)
        assert up > down > 0

    def test_string_confidence_accepted(self):
        assert smooth_vdot(45.0, 50.0, "high") == 49.3

    def test_no_change(self):
        assert smooth_vdot(45.0, 45.0, ConfidenceTier.LOW) == 45.0

    @pytest.mark.parametrize("previous", [None, 0, 10.0, 99.0])
    def test_no_valid_previous_uses_raw(self, previous):
        """Without a valid stored VDOT the raw estimate is taken as is."""
        assert smooth_vdot(previous, 47.26, ConfidenceTier.LOW) == 47.3

    @pytest.mark.parametrize("raw", [14.9, 85.5, 0])
    def test_out_of_range_rejected(self, raw):
        """Out-of-range estimates are rejected, not smoothed."""
        assert smooth_vdot(45.0, raw, ConfidenceTier.HIGH) is None
