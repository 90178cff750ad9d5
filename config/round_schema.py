"""
GUESSWORK — Round Configuration Schema

Immutable configuration for one guessing round, plus the built-in
difficulty presets offered by the terminal menu.

Usage:
    from config.round_schema import RoundConfig, preset_config
    cfg = preset_config("medium")          # 1-100, 10 attempts
    cfg = RoundConfig(min_value=-50, max_value=50, attempt_cap=7)
    cfg.record_label                       # "Custom (-50-50)"
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ═══════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════

class Difficulty(str, Enum):
    EASY   = "easy"
    MEDIUM = "medium"
    HARD   = "hard"
    CUSTOM = "custom"


# ═══════════════════════════════════════════════════════════════
# Round Config
# ═══════════════════════════════════════════════════════════════

class RoundConfig(BaseModel):
    """Range and attempt limit for a single round. Frozen once built."""
    model_config = ConfigDict(frozen=True)

    min_value: int = 1
    max_value: int = 100
    attempt_cap: Optional[int] = Field(None, description="None = unlimited")
    difficulty_label: str = "Custom"

    @field_validator("attempt_cap", mode="before")
    @classmethod
    def normalise_cap(cls, v):
        # 0 has always meant "unlimited" in saved configs and menus
        if v is None or v == 0:
            return None
        if int(v) < 0:
            raise ValueError(f"attempt_cap must be positive, got {v}")
        return v

    @model_validator(mode="after")
    def check_range(self) -> "RoundConfig":
        if self.min_value >= self.max_value:
            raise ValueError(
                f"min_value ({self.min_value}) must be below max_value ({self.max_value})"
            )
        return self

    @property
    def range_size(self) -> int:
        return self.max_value - self.min_value + 1

    @property
    def unlimited(self) -> bool:
        return self.attempt_cap is None

    @property
    def record_label(self) -> str:
        """Difficulty text written to leaderboard records."""
        return f"{self.difficulty_label} ({self.min_value}-{self.max_value})"

    def describe(self) -> str:
        text = f"{self.difficulty_label} ({self.min_value} - {self.max_value})"
        if self.attempt_cap:
            text += f", max attempts = {self.attempt_cap}"
        return text


# ═══════════════════════════════════════════════════════════════
# Presets
# ═══════════════════════════════════════════════════════════════

DIFFICULTY_PRESETS = {
    Difficulty.EASY:   {"difficulty_label": "Easy",   "min_value": 1, "max_value": 20,   "attempt_cap": None},
    Difficulty.MEDIUM: {"difficulty_label": "Medium", "min_value": 1, "max_value": 100,  "attempt_cap": 10},
    Difficulty.HARD:   {"difficulty_label": "Hard",   "min_value": 1, "max_value": 1000, "attempt_cap": 12},
}


def preset_config(difficulty) -> RoundConfig:
    """Build the RoundConfig for a named preset ("easy", "medium", "hard")."""
    try:
        key = Difficulty(str(getattr(difficulty, "value", difficulty)).lower())
    except ValueError:
        raise ValueError(
            f"Unknown difficulty: {difficulty}. Available: {[d.value for d in DIFFICULTY_PRESETS]}"
        )
    if key not in DIFFICULTY_PRESETS:
        raise ValueError(f"'{key.value}' has no preset; use custom_config() instead")
    return RoundConfig(**DIFFICULTY_PRESETS[key])


def custom_config(min_value: int, max_value: int, attempt_cap: Optional[int] = None) -> RoundConfig:
    return RoundConfig(
        min_value=min_value,
        max_value=max_value,
        attempt_cap=attempt_cap,
        difficulty_label="Custom",
    )
