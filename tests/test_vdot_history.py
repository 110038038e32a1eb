"""Tests for the monthly VDOT history helpers."""

from datetime import date

from training_signals.analysis.vdot_history import (
    VdotTrendDirection,
    next_month,
    rebuild_monthly_history,
    vdot_trend,
)
from training_signals.models.workouts import VdotHistoryEntry, VdotSource


def entry(day, vdot, **kwargs):
    return VdotHistoryEntry(profile_id=1, date=day, vdot=vdot, **kwargs)


class TestVdotTrend:
    """Tests for the half-window VDOT trend."""

    AS_OF = date(2025, 3, 30)

    def test_unknown_without_older_half(self):
        trend = vdot_trend([entry(date(2025, 3, 1), 48.0)], self.AS_OF)

        assert trend.trend == VdotTrendDirection.UNKNOWN
        assert trend.current == 48.0
        assert trend.previous is None
        assert trend.change is None

    def test_no_entries(self):
        assert vdot_trend([], self.AS_OF).to_dict() == {
            "current": None,
            "previous": None,
            "change": None,
            "change_percent": None,
            "trend": "unknown",
        }

    def test_small_change_is_stable(self):
        """A 0.5 point rise is within the stable band."""
        trend = vdot_trend([entry(date(2025, 1, 1), 45.0), entry(date(2025, 3, 1), 45.5)], self.AS_OF)

        assert trend.trend == VdotTrendDirection.STABLE
        assert trend.change == 0.5

    def test_declining(self):
        trend = vdot_trend([entry(date(2025, 1, 1), 48.0), entry(date(2025, 3, 1), 46.0)], self.AS_OF)

        assert trend.trend == VdotTrendDirection.DECLINING
        assert trend.change == -2.0

    def test_entries_before_window_ignored(self):
        entries = [entry(date(2024, 10, 1), 40.0), entry(date(2025, 1, 1), 45.0), entry(date(2025, 3, 1), 45.0)]
        trend = vdot_trend(entries, self.AS_OF)

        assert trend.previous == 45.0
        assert trend.trend == VdotTrendDirection.STABLE

    def test_shorter_window(self):
        """With 30 days the January point falls outside the window."""
        trend = vdot_trend([entry(date(2025, 1, 1), 45.0), entry(date(2025, 3, 20), 47.0)], self.AS_OF, days=30)
        assert trend.trend == VdotTrendDirection.UNKNOWN


class TestRebuildMonthlyHistory:
    """Tests for rebuilding history into one point per month."""

    def test_next_month_wraps_year(self):
        assert next_month(date(2024, 12, 15)) == date(2025, 1, 1)
        assert next_month(date(2025, 1, 31)) == date(2025, 2, 1)

    def test_last_recording_in_month_wins(self):
        entries = [
            entry(date(2025, 1, 5), 45.0),
            entry(date(2025, 1, 20), 46.2),
        ]
        rebuilt = rebuild_monthly_history(1, entries, end=date(2025, 1, 31))

        assert len(rebuilt) == 1
        assert rebuilt[0].date == date(2025, 1, 1)
        assert rebuilt[0].vdot == 46.2

    def test_carries_across_year_boundary(self):
        rebuilt = rebuild_monthly_history(
            1,
            [entry(date(2024, 11, 1), 44.0, source=VdotSource.RACE)],
            end=date(2025, 2, 10),
        )

        assert [e.date for e in rebuilt] == [
            date(2024, 11, 1), date(2024, 12, 1), date(2025, 1, 1), date(2025, 2, 1),
        ]
        assert all(e.vdot == 44.0 and e.source == VdotSource.RACE for e in rebuilt)

    def test_explicit_start_before_first_recording(self):
        """Months before the first recording take its value."""
        rebuilt = rebuild_monthly_history(
            1, [entry(date(2025, 3, 1), 47.0)], end=date(2025, 3, 1), start=date(2025, 1, 1),
        )
        assert [e.vdot for e in rebuilt] == [47.0, 47.0, 47.0]

    def test_explicit_start_after_recordings(self):
        """The latest recording before the start seeds the timeline."""
        entries = [entry(date(2024, 10, 1), 43.0), entry(date(2024, 12, 1), 44.5)]
        rebuilt = rebuild_monthly_history(1, entries, end=date(2025, 2, 1), start=date(2025, 1, 1))

        assert [e.vdot for e in rebuilt] == [44.5, 44.5]

    def test_baseline_when_empty(self):
        rebuilt = rebuild_monthly_history(1, [], end=date(2025, 3, 30), baseline_vdot=45.0)

        assert len(rebuilt) == 1
        assert rebuilt[0].source == VdotSource.MANUAL
        assert rebuilt[0].notes == "monthly baseline from stored VDOT"

    def test_nothing_to_rebuild(self):
        assert rebuild_monthly_history(1, [], end=date(2025, 3, 30)) == []
