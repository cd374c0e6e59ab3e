"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from xoplay.config import Settings
from xoplay.game import Difficulty, Mode


def test_defaults_without_environment(monkeypatch):
    for name in ("XOPLAY_PORT", "XOPLAY_LOG_LEVEL", "XOPLAY_DEFAULT_MODE"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings.from_env()
    assert settings.port == 8000
    assert settings.log_level == "INFO"
    assert settings.default_mode == Mode.TWO_PLAYER


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("XOPLAY_PORT", "9001")
    monkeypatch.setenv("XOPLAY_LOG_LEVEL", "debug")
    monkeypatch.setenv("XOPLAY_AI_DELAY_MIN", "0")
    monkeypatch.setenv("XOPLAY_AI_DELAY_MAX", "0.1")
    monkeypatch.setenv("XOPLAY_DEFAULT_DIFFICULTY", "unbeatable")

    settings = Settings.from_env()

    assert settings.port == 9001
    assert settings.log_level == "DEBUG"
    assert settings.ai_delay == (0.0, 0.1)
    assert settings.default_difficulty == Difficulty.UNBEATABLE


def test_rejects_inverted_delay_range():
    with pytest.raises(ValidationError):
        Settings(ai_delay_min=1.0, ai_delay_max=0.5)


def test_rejects_unknown_log_level():
    with pytest.raises(ValidationError):
        Settings(log_level="loud")
