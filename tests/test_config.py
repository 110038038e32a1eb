"""Tests for settings."""

from training_signals.config import Settings, get_settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, settings):
        assert settings.acute_window_days == 7
        assert settings.chronic_window_days == 28
        assert settings.default_rpe == 5.0
        assert settings.log_level == "INFO"

    def test_environment_override(self, monkeypatch):
        """Values are read from TRAINING_SIGNALS_* variables."""
        monkeypatch.setenv("TRAINING_SIGNALS_DEFAULT_MAX_HR", "192")
        monkeypatch.setenv("TRAINING_SIGNALS_LOG_LEVEL", "DEBUG")

        settings = Settings(_env_file=None)
        assert settings.default_max_hr == 192
        assert settings.log_level == "DEBUG"

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()
