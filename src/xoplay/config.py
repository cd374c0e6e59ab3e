"""
Runtime settings read from ``XOPLAY_*`` environment variables.
"""
from __future__ import annotations

import logging
import os
from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from .game import Difficulty, Mode


class Settings(BaseModel):
    """Server, pacing and logging configuration."""

    host: str = Field(default="0.0.0.0", description="Interface uvicorn binds to")
    port: int = Field(default=8000, ge=1, le=65535, description="Port uvicorn listens on")
    log_level: str = Field(default="INFO", description="Root logging level")
    ai_delay_min: float = Field(default=0.4, ge=0, description="Shortest computer think delay (s)")
    ai_delay_max: float = Field(default=0.6, ge=0, description="Longest computer think delay (s)")
    default_mode: Mode = Field(default=Mode.TWO_PLAYER, description="Mode of a new session")
    default_difficulty: Difficulty = Field(
        default=Difficulty.EASY, description="Difficulty of a new session"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        level = str(v).upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level {v!r}")
        return level

    @model_validator(mode="after")
    def check_delay_range(self) -> "Settings":
        if self.ai_delay_min > self.ai_delay_max:
            raise ValueError("ai_delay_min must not exceed ai_delay_max")
        return self

    @property
    def ai_delay(self) -> Tuple[float, float]:
        return (self.ai_delay_min, self.ai_delay_max)

    @classmethod
    def from_env(cls) -> "Settings":
        env = {
            "host": os.environ.get("XOPLAY_HOST"),
            "port": os.environ.get("XOPLAY_PORT"),
            "log_level": os.environ.get("XOPLAY_LOG_LEVEL"),
            "ai_delay_min": os.environ.get("XOPLAY_AI_DELAY_MIN"),
            "ai_delay_max": os.environ.get("XOPLAY_AI_DELAY_MAX"),
            "default_mode": os.environ.get("XOPLAY_DEFAULT_MODE"),
            "default_difficulty": os.environ.get("XOPLAY_DEFAULT_DIFFICULTY"),
        }
        return cls(**{k: v for k, v in env.items() if v is not None})


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def setup_logging() -> None:
    """Configure root logging once, controlled by XOPLAY_LOG_LEVEL."""
    if getattr(setup_logging, "_configured", False):
        return
    level: int = getattr(logging, get_settings().log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    setup_logging._configured = True  # type: ignore[attr-defined]
