"""Tests for settings and engine configuration."""

import logging

from onestroke.config import Settings, configure_logging
from onestroke.engine.config import TracerConfig


def test_defaults():
    cfg = TracerConfig()
    assert cfg.tolerance == 16.0
    assert cfg.junction_reach == 32.0
    assert cfg.junction_escape == 48.0
    assert cfg.completion_threshold == 0.99
    assert cfg.reset_delay == 1.5


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("ONESTROKE_TOLERANCE", "24")
    monkeypatch.setenv("ONESTROKE_RESET_DELAY", "0.5")
    settings = Settings()
    assert settings.tolerance == 24.0

    cfg = TracerConfig.from_settings(settings)
    assert cfg.tolerance == 24.0
    assert cfg.reset_delay == 0.5
    assert cfg.junction_reach == 48.0
    # Untouched knobs keep their defaults
    assert cfg.merge_threshold == 15.0


def test_configure_logging(monkeypatch):
    calls = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))
    configure_logging("debug")
    assert calls["level"] == logging.DEBUG
    configure_logging("nonsense")
    assert calls["level"] == logging.INFO
