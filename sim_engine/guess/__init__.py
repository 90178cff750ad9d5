"""
GUESSWORK — Number Guessing Engine

Secret generation, the per-guess state machine and round scoring.
No terminal I/O lives here; tools/guess_cli.py drives it.

Usage:
    from sim_engine.guess import GameRound, SecretGenerator
    from config.round_schema import preset_config

    gen = SecretGenerator(seed=7)
    round_ = GameRound(preset_config("medium"), generator=gen)
    round_.evaluate(50)
"""

from sim_engine.guess.rng import SecretGenerator
from sim_engine.guess.scoring import compute_score
from sim_engine.guess.round import (
    ANONYMOUS,
    GIVE_UP,
    Feedback,
    GameRound,
    GuessworkError,
    LeaderboardRecord,
    Outcome,
    RoundInProgressError,
    RoundOverError,
    RoundState,
    Signal,
    current_timestamp,
    evaluate,
)

__all__ = [
    "ANONYMOUS", "GIVE_UP", "Feedback", "GameRound", "GuessworkError",
    "LeaderboardRecord", "Outcome", "RoundInProgressError", "RoundOverError",
    "RoundState", "SecretGenerator", "Signal", "compute_score",
    "current_timestamp", "evaluate",
]
