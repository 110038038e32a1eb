"""Training signals: normalized fitness and load signals from workout telemetry."""

__version__ = "0.1.0"
