"""Secret generator: one uniform integer per round from an owned PRNG."""

import random
import time
from typing import Optional


class SecretGenerator:
    """Draws round secrets from an explicitly owned ``random.Random``.

    Without a seed the generator is seeded from the high-resolution
    performance counter, so separate runs differ. Pass ``seed`` (or a
    prepared ``rng``) for reproducible sequences.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        if rng is not None and seed is not None:
            raise ValueError("Pass either seed or rng, not both")
        if rng is None:
            if seed is None:
                seed = time.perf_counter_ns()
            rng = random.Random(seed)
        self._seed = seed
        self._rng = rng

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    def generate(self, min_value: int, max_value: int) -> int:
        """Return an integer uniformly distributed over [min_value, max_value]."""
        if min_value >= max_value:
            raise ValueError(f"Empty secret range: [{min_value}, {max_value}]")
        return self._rng.randint(min_value, max_value)
