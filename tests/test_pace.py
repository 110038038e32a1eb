"""Tests for pace parsing, formatting and conversions."""

import pytest

from training_signals.exceptions import InvalidInputRangeError
from training_signals.metrics.pace import (
    calculate_pace,
    format_pace,
    format_pace_per_mile,
    format_time,
    pace_km_to_mile,
    pace_mile_to_km,
    pace_to_velocity,
    parse_pace,
    parse_race_time,
    round_half_up,
    velocity_to_pace,
)


class TestRoundHalfUp:
    """Tests for round_half_up."""

    def test_halves_round_up(self):
        """2.5 rounds to 3, not to the even 2."""
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4

    def test_one_decimal(self):
        """49.25 rounds to 49.3."""
        assert round_half_up(49.25, 1) == 49.3

    def test_below_half_rounds_down(self):
        assert round_half_up(1.234, 2) == 1.23


class TestFormatPace:
    """Tests for pace formatting."""

    def test_basic(self):
        """Seconds format as M:SS."""
        assert format_pace(425) == "7:05"
        assert format_pace(480) == "8:00"

    def test_rounds_seconds(self):
        """Fractional seconds round half up."""
        assert format_pace(429.5) == "7:10"

    def test_missing_pace(self):
        """Zero or None is shown as a placeholder."""
        assert format_pace(0) == "--:--"
        assert format_pace(None) == "--:--"

    def test_too_slow(self):
        """30:00/mi or slower is not a running pace."""
        assert format_pace(1800) == "-"

    def test_per_mile_suffix(self):
        assert format_pace_per_mile(480) == "8:00/mi"
        assert format_pace_per_mile(None) == "--:--"


class TestParsePace:
    """Tests for parse_pace."""

    def test_plain(self):
        assert parse_pace("7:30") == 450

    def test_with_suffix(self):
        """A trailing /mi is accepted."""
        assert parse_pace("7:30/mi") == 450

    @pytest.mark.parametrize("value", ["abc", "7:75", "7", "1:2:3"])
    def test_invalid(self, value):
        """Malformed paces raise InvalidInputRangeError."""
        with pytest.raises(InvalidInputRangeError):
            parse_pace(value)


class TestParseRaceTime:
    """Tests for parse_race_time."""

    def test_hours_minutes_seconds(self):
        assert parse_race_time("1:45:00") == 6300

    def test_minutes_seconds(self):
        assert parse_race_time("25:30") == 1530

    def test_plain_seconds(self):
        assert parse_race_time("1200") == 1200

    def test_non_positive_raises(self):
        """A zero time cannot be a race result."""
        with pytest.raises(InvalidInputRangeError):
            parse_race_time("0")

    def test_garbage_raises(self):
        with pytest.raises(InvalidInputRangeError) as exc_info:
            parse_race_time("fast")
        assert exc_info.value.details["field"] == "time"


class TestConversions:
    """Tests for pace and unit conversions."""

    def test_calculate_pace(self):
        """Six miles in 54 minutes is 9:00/mi."""
        assert calculate_pace(6, 54) == 540

    def test_calculate_pace_without_distance(self):
        assert calculate_pace(0, 54) == 0

    def test_velocity_round_trip(self):
        """Pace to velocity and back is stable."""
        assert velocity_to_pace(pace_to_velocity(480)) == 480

    def test_km_mile_conversion(self):
        """5:00/km is about 8:03/mi."""
        assert pace_km_to_mile(300) == pytest.approx(482.8, abs=0.1)
        assert pace_mile_to_km(pace_km_to_mile(300)) == pytest.approx(300)

    def test_format_time(self):
        assert format_time(6300) == "1:45:00"
        assert format_time(1530) == "25:30"
