"""
GUESSWORK — Round State Machine

A round is a RoundState plus a pure transition function:

    evaluate(state, guess, config) -> (new_state, feedback)

GameRound wraps that function with the secret draw, the wall clock and the
hand-off to scoring and the leaderboard. The terminal loop that asks for
guesses lives in tools/guess_cli.py.

Usage:
    round_ = GameRound(preset_config("easy"))
    fb = round_.evaluate(10)            # Feedback(signal=Signal.TOO_HIGH, ...)
    ...
    if round_.is_over:
        record = round_.finish("alice", store=LeaderboardStore(path))
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from config.round_schema import RoundConfig
from sim_engine.guess.rng import SecretGenerator
from sim_engine.guess.scoring import compute_score

logger = logging.getLogger("guesswork.round")

ANONYMOUS = "Anonymous"
GIVE_UP = 0
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def current_timestamp() -> str:
    """Local wall-clock time in the leaderboard's fixed format."""
    return datetime.now().strftime(TIMESTAMP_FORMAT)


class GuessworkError(RuntimeError):
    """Core used out of order (a caller bug, not a game condition)."""


class RoundOverError(GuessworkError):
    pass


class RoundInProgressError(GuessworkError):
    pass


# ═══════════════════════════════════════════════════════════════
# Data Structures
# ═══════════════════════════════════════════════════════════════

class Outcome(str, Enum):
    IN_PROGRESS = "in_progress"
    WON         = "won"
    GAVE_UP     = "gave_up"
    EXHAUSTED   = "exhausted"


class Signal(str, Enum):
    TOO_HIGH  = "too high"
    TOO_LOW   = "too low"
    WIN       = "win"
    GAVE_UP   = "gave up"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class Feedback:
    """What the player is told after one evaluated guess."""
    signal: Signal
    direction: Optional[Signal] = None   # last hint when the cap ran out
    secret: Optional[int] = None         # revealed on give-up / exhaustion
    attempts: int = 0

    @property
    def terminal(self) -> bool:
        return self.signal in (Signal.WIN, Signal.GAVE_UP, Signal.EXHAUSTED)

    @property
    def message(self) -> str:
        if self.signal is Signal.TOO_HIGH:
            return "Too high."
        if self.signal is Signal.TOO_LOW:
            return "Too low."
        if self.signal is Signal.WIN:
            return f"Congratulations! You guessed correctly in {self.attempts} attempts."
        if self.signal is Signal.GAVE_UP:
            return f"You gave up. The number was {self.secret}."
        hint = f"{self.direction.value.capitalize()}. " if self.direction else ""
        return (f"{hint}Reached maximum attempts ({self.attempts}). "
                f"You lose. The number was {self.secret}.")


@dataclass(frozen=True)
class RoundState:
    """Secret, attempt count and the current hint bounds."""
    secret: int
    attempts_made: int
    low_bound: int
    high_bound: int
    outcome: Outcome = Outcome.IN_PROGRESS

    @classmethod
    def start(cls, secret: int, config: RoundConfig) -> "RoundState":
        return cls(
            secret=secret,
            attempts_made=0,
            low_bound=config.min_value,
            high_bound=config.max_value,
        )

    @property
    def is_over(self) -> bool:
        return self.outcome is not Outcome.IN_PROGRESS


@dataclass(frozen=True)
class LeaderboardRecord:
    """One finished round as stored on the leaderboard."""
    timestamp: str
    player_name: str
    difficulty: str
    attempts: int
    elapsed_seconds: float
    secret: int
    score: float
    # In-memory only; not part of the stored line
    outcome: Optional[Outcome] = field(default=None, compare=False)
    persisted: bool = field(default=False, compare=False)

    @property
    def anonymous(self) -> bool:
        return self.player_name == ANONYMOUS

    def to_dict(self) -> dict:
        d = asdict(self)
        d["elapsed_seconds"] = round(self.elapsed_seconds, 2)
        d["score"] = round(self.score, 2)
        d["outcome"] = self.outcome.value if self.outcome else None
        return d


# ═══════════════════════════════════════════════════════════════
# Transition Function
# ═══════════════════════════════════════════════════════════════

def evaluate(state: RoundState, guess: int, config: RoundConfig) -> tuple[RoundState, Feedback]:
    """Apply one guess. 0 gives up; any other integer is accepted as a guess.

    Bounds only ever move inward, and only on the side the comparison
    points to, so out-of-range guesses still give a correct hint.
    """
    if state.is_over:
        raise RoundOverError(f"Round already finished ({state.outcome.value})")

    if guess == GIVE_UP:
        return (
            replace(state, outcome=Outcome.GAVE_UP),
            Feedback(Signal.GAVE_UP, secret=state.secret, attempts=state.attempts_made),
        )

    attempts = state.attempts_made + 1
    if guess == state.secret:
        return (
            replace(state, attempts_made=attempts, outcome=Outcome.WON),
            Feedback(Signal.WIN, attempts=attempts),
        )

    low, high = state.low_bound, state.high_bound
    if guess > state.secret:
        signal = Signal.TOO_HIGH
        if guess - 1 < high:
            high = guess - 1
    else:
        signal = Signal.TOO_LOW
        if guess + 1 > low:
            low = guess + 1

    new_state = replace(state, attempts_made=attempts, low_bound=low, high_bound=high)

    if config.attempt_cap and attempts >= config.attempt_cap:
        return (
            replace(new_state, outcome=Outcome.EXHAUSTED),
            Feedback(Signal.EXHAUSTED, direction=signal, secret=state.secret, attempts=attempts),
        )
    return new_state, Feedback(signal, attempts=attempts)


# ═══════════════════════════════════════════════════════════════
# Orchestrator
# ═══════════════════════════════════════════════════════════════

class GameRound:
    """One play-through: secret draw, guesses, then score and record."""

    def __init__(self, config: RoundConfig,
                 generator: Optional[SecretGenerator] = None,
                 clock: Callable[[], float] = time.monotonic,
                 timestamp: Callable[[], str] = current_timestamp,
                 secret: Optional[int] = None):
        self.config = config
        self._clock = clock
        self._timestamp = timestamp
        if secret is None:
            secret = (generator or SecretGenerator()).generate(config.min_value, config.max_value)
        self.state = RoundState.start(secret, config)
        self._started_at = clock()
        self._elapsed: Optional[float] = None
        self.history: list[tuple[int, Signal]] = []

    # ── Read-only views ──

    @property
    def secret(self) -> int:
        return self.state.secret

    @property
    def attempts(self) -> int:
        return self.state.attempts_made

    @property
    def low_bound(self) -> int:
        return self.state.low_bound

    @property
    def high_bound(self) -> int:
        return self.state.high_bound

    @property
    def outcome(self) -> Outcome:
        return self.state.outcome

    @property
    def is_over(self) -> bool:
        return self.state.is_over

    @property
    def elapsed_seconds(self) -> float:
        if self._elapsed is not None:
            return self._elapsed
        return max(0.0, self._clock() - self._started_at)

    # ── Play ──

    def evaluate(self, guess: int) -> Feedback:
        self.state, feedback = evaluate(self.state, int(guess), self.config)
        self.history.append((int(guess), feedback.signal))
        if self.state.is_over:
            self._elapsed = max(0.0, self._clock() - self._started_at)
            logger.debug(f"Round over: {self.state.outcome.value} after "
                         f"{self.state.attempts_made} attempts, {self._elapsed:.2f}s")
        return feedback

    def give_up(self) -> Feedback:
        return self.evaluate(GIVE_UP)

    def score(self) -> float:
        return compute_score(max(1, self.attempts), self.elapsed_seconds, self.config)

    def finish(self, player_name: Optional[str] = None, store=None) -> LeaderboardRecord:
        """Score the round and build its record.

        The record is appended to ``store`` only for a named player; a
        failed append is reported by the store and leaves the record intact.
        """
        if not self.is_over:
            raise RoundInProgressError("Cannot finish a round that is still in progress")

        name = (player_name or "").strip() or ANONYMOUS
        record = LeaderboardRecord(
            timestamp=self._timestamp(),
            player_name=name,
            difficulty=self.config.record_label,
            attempts=self.attempts,
            elapsed_seconds=self.elapsed_seconds,
            secret=self.secret,
            score=self.score(),
            outcome=self.outcome,
        )

        if store is not None and name != ANONYMOUS:
            if store.append(record):
                record = replace(record, persisted=True)
        return record
