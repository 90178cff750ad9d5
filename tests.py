#!/usr/bin/env python3
"""
GUESSWORK — Unit Test Suite

Run: python tests.py
     python tests.py -v              # verbose
     python tests.py TestEvaluate    # run specific class

Test categories:
  TestRoundConfig      — validation, presets, record label
  TestSecretGenerator  — range, seeding, spread
  TestEvaluate         — pure transition function and bound invariants
  TestScoring          — formula, cap bonus, non-negativity
  TestGameRound        — orchestrator scenarios, finish() and persistence hand-off
"""

import math
import random
import sys
import unittest
from collections import Counter
from pathlib import Path
from unittest.mock import MagicMock

# ── Ensure project root is on sys.path ──
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from pydantic import ValidationError

from config.round_schema import RoundConfig, custom_config, preset_config
from sim_engine.guess import (
    ANONYMOUS, GameRound, Outcome, RoundInProgressError, RoundOverError,
    RoundState, SecretGenerator, Signal, compute_score, evaluate,
)


def fake_clock(*ticks):
    """Clock returning the given instants in order, then repeating the last."""
    values = list(ticks)

    def _now():
        return values.pop(0) if len(values) > 1 else values[0]
    return _now


# ============================================================
# Config
# ============================================================

class TestRoundConfig(unittest.TestCase):

    def test_min_must_be_below_max(self):
        with self.assertRaises(ValidationError):
            RoundConfig(min_value=5, max_value=5)
        with self.assertRaises(ValidationError):
            RoundConfig(min_value=10, max_value=1)

    def test_zero_cap_means_unlimited(self):
        cfg = RoundConfig(min_value=1, max_value=20, attempt_cap=0)
        self.assertIsNone(cfg.attempt_cap)
        self.assertTrue(cfg.unlimited)

    def test_negative_cap_rejected(self):
        with self.assertRaises(ValidationError):
            RoundConfig(min_value=1, max_value=20, attempt_cap=-3)

    def test_frozen(self):
        cfg = preset_config("easy")
        with self.assertRaises(ValidationError):
            cfg.max_value = 50

    def test_presets(self):
        easy, medium, hard = preset_config("easy"), preset_config("Medium"), preset_config("hard")
        self.assertEqual((easy.min_value, easy.max_value, easy.attempt_cap), (1, 20, None))
        self.assertEqual((medium.min_value, medium.max_value, medium.attempt_cap), (1, 100, 10))
        self.assertEqual((hard.min_value, hard.max_value, hard.attempt_cap), (1, 1000, 12))

    def test_unknown_preset(self):
        with self.assertRaises(ValueError):
            preset_config("nightmare")
        with self.assertRaises(ValueError):
            preset_config("custom")

    def test_record_label(self):
        self.assertEqual(preset_config("medium").record_label, "Medium (1-100)")
        self.assertEqual(custom_config(-5, 5).record_label, "Custom (-5-5)")
        self.assertEqual(custom_config(-5, 5, 3).describe(), "Custom (-5 - 5), max attempts = 3")


# ============================================================
# Secret Generator
# ============================================================

class TestSecretGenerator(unittest.TestCase):

    def test_values_stay_in_range(self):
        gen = SecretGenerator(seed=1234)
        for lo, hi in [(1, 2), (1, 20), (-50, 50), (999, 1000), (-1_000_000, 1_000_000)]:
            for _ in range(500):
                v = gen.generate(lo, hi)
                self.assertGreaterEqual(v, lo)
                self.assertLessEqual(v, hi)

    def test_both_endpoints_reachable(self):
        gen = SecretGenerator(seed=99)
        seen = {gen.generate(1, 3) for _ in range(300)}
        self.assertEqual(seen, {1, 2, 3})

    def test_no_endpoint_bias(self):
        """Every face of a six-sided range lands near 1/6 of draws."""
        gen = SecretGenerator(seed=2024)
        n = 12_000
        counts = Counter(gen.generate(1, 6) for _ in range(n))
        for face in range(1, 7):
            self.assertAlmostEqual(counts[face] / n, 1 / 6, delta=0.02)

    def test_seed_is_reproducible(self):
        a, b = SecretGenerator(seed=7), SecretGenerator(seed=7)
        self.assertEqual([a.generate(1, 1000) for _ in range(20)],
                         [b.generate(1, 1000) for _ in range(20)])

    def test_default_seed_from_clock(self):
        gen = SecretGenerator()
        self.assertIsInstance(gen.seed, int)

    def test_injected_rng(self):
        gen = SecretGenerator(rng=random.Random(5))
        self.assertIsNone(gen.seed)
        self.assertEqual(gen.generate(1, 100), random.Random(5).randint(1, 100))

    def test_empty_range_is_an_error(self):
        gen = SecretGenerator(seed=1)
        with self.assertRaises(ValueError):
            gen.generate(5, 5)
        with self.assertRaises(ValueError):
            gen.generate(6, 5)


# ============================================================
# Transition Function
# ============================================================

class TestEvaluate(unittest.TestCase):

    def setUp(self):
        self.cfg = RoundConfig(min_value=1, max_value=100)
        self.start = RoundState.start(42, self.cfg)

    def test_initial_state(self):
        self.assertEqual((self.start.low_bound, self.start.high_bound), (1, 100))
        self.assertEqual(self.start.attempts_made, 0)
        self.assertIs(self.start.outcome, Outcome.IN_PROGRESS)

    def test_too_high_narrows_high_bound(self):
        state, fb = evaluate(self.start, 60, self.cfg)
        self.assertIs(fb.signal, Signal.TOO_HIGH)
        self.assertEqual((state.low_bound, state.high_bound), (1, 59))
        self.assertEqual(state.attempts_made, 1)

    def test_too_low_narrows_low_bound(self):
        state, fb = evaluate(self.start, 30, self.cfg)
        self.assertIs(fb.signal, Signal.TOO_LOW)
        self.assertEqual((state.low_bound, state.high_bound), (31, 100))

    def test_input_state_untouched(self):
        evaluate(self.start, 30, self.cfg)
        self.assertEqual(self.start.attempts_made, 0)
        self.assertEqual(self.start.low_bound, 1)

    def test_out_of_range_guess_still_hints(self):
        state, fb = evaluate(self.start, 5000, self.cfg)
        self.assertIs(fb.signal, Signal.TOO_HIGH)
        self.assertEqual(state.high_bound, 100)   # never widens
        state, fb = evaluate(state, -20, self.cfg)
        self.assertIs(fb.signal, Signal.TOO_LOW)
        self.assertEqual(state.low_bound, 1)
        self.assertEqual(state.attempts_made, 2)

    def test_guess_outside_hint_bounds_does_not_widen(self):
        state, _ = evaluate(self.start, 50, self.cfg)    # high -> 49
        state, _ = evaluate(state, 70, self.cfg)         # still too high
        self.assertEqual(state.high_bound, 49)

    def test_give_up_does_not_count(self):
        state, fb = evaluate(self.start, 0, self.cfg)
        self.assertIs(state.outcome, Outcome.GAVE_UP)
        self.assertIs(fb.signal, Signal.GAVE_UP)
        self.assertEqual(fb.secret, 42)
        self.assertEqual(state.attempts_made, 0)

    def test_win(self):
        state, fb = evaluate(self.start, 42, self.cfg)
        self.assertIs(state.outcome, Outcome.WON)
        self.assertTrue(fb.terminal)
        self.assertIsNone(fb.secret)

    def test_cap_exhaustion_keeps_direction(self):
        cfg = RoundConfig(min_value=1, max_value=100, attempt_cap=2)
        state = RoundState.start(42, cfg)
        state, fb = evaluate(state, 10, cfg)
        self.assertIs(fb.signal, Signal.TOO_LOW)
        state, fb = evaluate(state, 90, cfg)
        self.assertIs(state.outcome, Outcome.EXHAUSTED)
        self.assertIs(fb.signal, Signal.EXHAUSTED)
        self.assertIs(fb.direction, Signal.TOO_HIGH)
        self.assertEqual(fb.secret, 42)
        self.assertIn("The number was 42", fb.message)

    def test_win_on_last_allowed_attempt_is_a_win(self):
        cfg = RoundConfig(min_value=1, max_value=100, attempt_cap=1)
        state, fb = evaluate(RoundState.start(42, cfg), 42, cfg)
        self.assertIs(state.outcome, Outcome.WON)

    def test_terminal_state_rejects_more_guesses(self):
        state, _ = evaluate(self.start, 42, self.cfg)
        with self.assertRaises(RoundOverError):
            evaluate(state, 10, self.cfg)

    def test_bounds_invariant_over_random_play(self):
        """Bounds bracket the secret and only move inward, for any guesses."""
        rng = random.Random(31337)
        for _ in range(300):
            lo = rng.randint(-500, 500)
            hi = lo + rng.randint(1, 800)
            cap = rng.choice([None, rng.randint(1, 15)])
            cfg = RoundConfig(min_value=lo, max_value=hi, attempt_cap=cap)
            secret = rng.randint(lo, hi)
            state = RoundState.start(secret, cfg)
            attempts = 0
            while not state.is_over and attempts < 40:
                guess = rng.randint(lo - 50, hi + 50) or 1
                prev = state
                state, _ = evaluate(state, guess, cfg)
                attempts += 1
                self.assertLessEqual(state.low_bound, secret)
                self.assertGreaterEqual(state.high_bound, secret)
                self.assertGreaterEqual(state.low_bound, prev.low_bound)
                self.assertLessEqual(state.high_bound, prev.high_bound)
                self.assertEqual(state.attempts_made, prev.attempts_made + 1)


# ============================================================
# Scoring
# ============================================================

class TestScoring(unittest.TestCase):

    def test_formula_without_cap(self):
        cfg = RoundConfig(min_value=1, max_value=20)
        expected = 1000 / math.log2(21) - 40 - 3.0
        self.assertAlmostEqual(compute_score(3, 6.0, cfg), expected)

    def test_cap_bonus(self):
        cfg = RoundConfig(min_value=1, max_value=100, attempt_cap=10)
        base = 1000 / math.log2(101) - 20 - 1.0
        # 2/10 = 0.2 -> multiplier 1.3
        self.assertAlmostEqual(compute_score(2, 2.0, cfg), base * 1.3)

    def test_cap_bonus_never_penalises(self):
        capped = RoundConfig(min_value=1, max_value=100, attempt_cap=10)
        free = RoundConfig(min_value=1, max_value=100)
        self.assertAlmostEqual(compute_score(8, 1.0, capped), compute_score(8, 1.0, free))

    def test_zero_attempts_scores_as_one(self):
        cfg = preset_config("easy")
        self.assertEqual(compute_score(0, 5.0, cfg), compute_score(1, 5.0, cfg))

    def test_never_negative(self):
        for cfg in [preset_config("easy"), preset_config("medium"), preset_config("hard"),
                    custom_config(-1_000_000, 1_000_000, 3), custom_config(0, 1)]:
            for attempts in (1, 2, 5, 50, 10_000):
                for secs in (0.0, 0.5, 30.0, 1e6):
                    score = compute_score(attempts, secs, cfg)
                    self.assertGreaterEqual(score, 0.0, f"{cfg} a={attempts} s={secs}")

    def test_slow_play_floors_at_zero(self):
        self.assertEqual(compute_score(1, 10_000.0, preset_config("easy")), 0.0)

    def test_smallest_range(self):
        # range of two values: base = 1000 / log2(3)
        self.assertAlmostEqual(compute_score(1, 0.0, custom_config(0, 1)), 1000 / math.log2(3))


# ============================================================
# Game Round
# ============================================================

class TestGameRound(unittest.TestCase):

    def test_scenario_win_in_three(self):
        cfg = RoundConfig(min_value=1, max_value=20, attempt_cap=0)
        rnd = GameRound(cfg, secret=10, clock=fake_clock(100.0, 104.0),
                        timestamp=lambda: "2025-01-02 03:04:05")
        signals = [rnd.evaluate(g).signal.value for g in (15, 5, 10)]
        self.assertEqual(signals, ["too high", "too low", "win"])
        self.assertIs(rnd.outcome, Outcome.WON)
        self.assertEqual(rnd.attempts, 3)
        self.assertEqual(rnd.elapsed_seconds, 4.0)

        record = rnd.finish("alice")
        self.assertAlmostEqual(record.score, max(0.0, 1000 / math.log2(21) - 40 - 2.0))
        self.assertEqual(record.attempts, 3)
        self.assertEqual(record.secret, 10)
        self.assertEqual(record.difficulty, "Custom (1-20)")
        self.assertEqual(record.timestamp, "2025-01-02 03:04:05")

    def test_scenario_cap_exhausted(self):
        cfg = RoundConfig(min_value=1, max_value=100, attempt_cap=10)
        rnd = GameRound(cfg, secret=77, clock=fake_clock(0.0, 12.0))
        feedback = None
        for g in range(1, 11):
            feedback = rnd.evaluate(g)
        self.assertIs(rnd.outcome, Outcome.EXHAUSTED)
        self.assertEqual(rnd.attempts, 10)
        self.assertEqual(feedback.secret, 77)
        with self.assertRaises(RoundOverError):
            rnd.evaluate(77)

    def test_scenario_immediate_give_up(self):
        cfg = preset_config("medium")
        rnd = GameRound(cfg, secret=33, clock=fake_clock(5.0, 7.0))
        fb = rnd.give_up()
        self.assertIs(rnd.outcome, Outcome.GAVE_UP)
        self.assertEqual(rnd.attempts, 0)
        self.assertEqual(fb.secret, 33)
        record = rnd.finish()
        self.assertEqual(record.attempts, 0)
        self.assertAlmostEqual(record.score, compute_score(1, 2.0, cfg))

    def test_elapsed_frozen_at_end(self):
        rnd = GameRound(preset_config("easy"), secret=3, clock=fake_clock(0.0, 1.5, 99.0))
        rnd.evaluate(3)
        self.assertEqual(rnd.elapsed_seconds, 1.5)
        self.assertEqual(rnd.elapsed_seconds, 1.5)

    def test_secret_from_generator(self):
        gen = MagicMock()
        gen.generate.return_value = 17
        rnd = GameRound(preset_config("easy"), generator=gen)
        gen.generate.assert_called_once_with(1, 20)
        self.assertEqual(rnd.secret, 17)
        self.assertEqual((rnd.low_bound, rnd.high_bound), (1, 20))

    def test_finish_requires_terminal_state(self):
        rnd = GameRound(preset_config("easy"), secret=3)
        with self.assertRaises(RoundInProgressError):
            rnd.finish("bob")

    def test_anonymous_rounds_are_not_stored(self):
        store = MagicMock()
        for name in (None, "", "   ", ANONYMOUS):
            rnd = GameRound(preset_config("easy"), secret=3)
            rnd.evaluate(3)
            record = rnd.finish(name, store=store)
            self.assertEqual(record.player_name, ANONYMOUS)
            self.assertFalse(record.persisted)
        store.append.assert_not_called()

    def test_named_round_is_stored(self):
        store = MagicMock()
        store.append.return_value = True
        rnd = GameRound(preset_config("easy"), secret=3)
        rnd.evaluate(3)
        record = rnd.finish("  carol ", store=store)
        self.assertEqual(record.player_name, "carol")
        store.append.assert_called_once()
        self.assertTrue(record.persisted)
        self.assertIs(record.outcome, Outcome.WON)

    def test_failed_append_keeps_record(self):
        store = MagicMock()
        store.append.return_value = False
        rnd = GameRound(preset_config("easy"), secret=3)
        rnd.evaluate(3)
        record = rnd.finish("dave", store=store)
        self.assertFalse(record.persisted)
        self.assertEqual(record.player_name, "dave")
        self.assertGreater(record.score, 0)

    def test_record_to_dict(self):
        rnd = GameRound(preset_config("hard"), secret=500, clock=fake_clock(0.0, 3.456),
                        timestamp=lambda: "2025-06-07 08:09:10")
        rnd.evaluate(500)
        d = rnd.finish("ivy").to_dict()
        self.assertEqual(d["player_name"], "ivy")
        self.assertEqual(d["difficulty"], "Hard (1-1000)")
        self.assertEqual(d["elapsed_seconds"], 3.46)
        self.assertEqual(d["outcome"], "won")
        self.assertEqual(d["score"], round(d["score"], 2))

    def test_history(self):
        rnd = GameRound(preset_config("easy"), secret=8)
        rnd.evaluate(4)
        rnd.evaluate(8)
        self.assertEqual(rnd.history, [(4, Signal.TOO_LOW), (8, Signal.WIN)])


# ============================================================
# Main
# ============================================================

if __name__ == "__main__":
    import logging
    logging.disable(logging.WARNING)

    unittest.main(verbosity=2)
