"""Tests for the command-line interface."""

import json
import sys
from datetime import date

import pytest

from training_signals import cli


class TestInputLoading:
    """Tests for JSON input helpers."""

    def test_load_workouts_camel_case(self, tmp_path):
        """Exported workouts may use camelCase keys and a wrapping object."""
        path = tmp_path / "workouts.json"
        path.write_text(json.dumps({
            "workouts": [
                {
                    "id": 1,
                    "date": "2025-03-29",
                    "distanceMiles": 6,
                    "durationMinutes": 54,
                    "avgHeartRate": 150,
                    "assessment": {"rpe": 5, "legsFeel": 3},
                }
            ]
        }))

        workouts = cli.load_workouts(str(path))

        assert len(workouts) == 1
        assert workouts[0].date == date(2025, 3, 29)
        assert workouts[0].avg_heart_rate == 150
        assert workouts[0].assessment.legs_feel == 3

    def test_parse_date_arg(self):
        assert cli.parse_date_arg("2025-03-30") == date(2025, 3, 30)
        assert cli.parse_date_arg(None) is None


class TestMain:
    """Tests for main()."""

    def test_vdot_command(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["training-signals", "vdot", "--distance", "5k", "--time", "20:00"])
        cli.main()

        out = capsys.readouterr().out
        assert "49.8" in out
        assert "Half Marathon" in out

    def test_invalid_vdot_exits(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["training-signals", "zones", "--vdot", "95"])

        with pytest.raises(SystemExit) as exc_info:
            cli.main()

        assert exc_info.value.code == 1
        assert "VDOT must be between" in capsys.readouterr().out

    def test_load_command(self, monkeypatch, capsys, tmp_path):
        path = tmp_path / "workouts.json"
        path.write_text(json.dumps([
            {"id": i, "date": f"2025-03-{day:02d}", "distance_miles": 5, "duration_minutes": 45,
             "assessment": {"rpe": 5}}
            for i, day in enumerate(range(20, 31))
        ]))
        monkeypatch.setattr(
            sys, "argv", ["training-signals", "load", str(path), "--as-of", "2025-03-30"]
        )
        cli.main()

        out = capsys.readouterr().out
        assert "Training Load as of 2025-03-30" in out
        assert "Overall: Well Recovered" in out
