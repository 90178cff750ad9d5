"""
GUESSWORK — Runtime Settings

Environment-driven defaults for the terminal game. A `.env` file in the
working directory is honoured; CLI flags override everything here.

    GUESS_LEADERBOARD_FILE   path of the append-only leaderboard log
    GUESS_RECENT_LIMIT       rows shown by "view recent leaderboard"
    GUESS_LOG_LEVEL          logging level for the guesswork.* loggers
    GUESS_SEED               fixed seed for the secret generator (debugging)
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class GameSettings:

    LEADERBOARD_FILE = Path(os.getenv("GUESS_LEADERBOARD_FILE", "leaderboard.csv"))
    RECENT_LIMIT = _env_int("GUESS_RECENT_LIMIT", 10)
    LOG_LEVEL = os.getenv("GUESS_LOG_LEVEL", "WARNING").upper()
    SEED = _env_int("GUESS_SEED", None)

    # Bounds offered by the "Custom" difficulty prompts
    CUSTOM_MIN = -1_000_000
    CUSTOM_MAX = 1_000_000
    MAX_ATTEMPT_CAP = 1_000_000

