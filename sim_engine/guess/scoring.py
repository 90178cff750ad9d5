"""Round score — rewards small ranges solved quickly in few attempts."""
import math

from config.round_schema import RoundConfig

ATTEMPT_PENALTY = 20.0
SECONDS_PER_POINT = 2.0
BASE_POINTS = 1000.0


def compute_score(attempts: int, elapsed_seconds: float, config: RoundConfig) -> float:
    """Score a finished round. Never negative.

    base = 1000 / log2(range_size + 1), minus 20 per extra attempt and one
    point per two seconds. With an attempt cap, finishing in under half the
    cap multiplies the score by up to 1.5x; it never penalises.
    """
    attempts = max(1, int(attempts))
    elapsed_seconds = max(0.0, float(elapsed_seconds))

    base = BASE_POINTS / math.log2(config.range_size + 1)
    score = base - ATTEMPT_PENALTY * (attempts - 1) - elapsed_seconds / SECONDS_PER_POINT

    if config.attempt_cap:
        frac = attempts / config.attempt_cap
        score *= 1.0 + max(0.0, 0.5 - frac)

    return max(0.0, score)
