#!/usr/bin/env python3
"""
GUESSWORK — Terminal Layer Tests

Drives tools/guess_cli.py with patched rich prompts and a captured console.
"""

import io
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from rich.console import Console

from config.round_schema import preset_config
from sim_engine.guess import ANONYMOUS, Outcome
from tools import guess_cli
from tools.leaderboard import LeaderboardStore


def _fixed_generator(secret):
    gen = MagicMock()
    gen.generate.return_value = secret
    return gen


class CliTestCase(unittest.TestCase):

    def setUp(self):
        self.out = io.StringIO()
        patcher = patch.object(guess_cli, "console", Console(file=self.out, width=120))
        patcher.start()
        self.addCleanup(patcher.stop)
        self.tmpdir = Path(tempfile.mkdtemp())
        self.store = LeaderboardStore(self.tmpdir / "leaderboard.csv")

    def output(self) -> str:
        return self.out.getvalue()


class TestInputHelpers(CliTestCase):

    def test_request_integer_reprompts_out_of_range(self):
        with patch.object(guess_cli.IntPrompt, "ask", side_effect=[0, 9, 3]) as ask:
            self.assertEqual(guess_cli.request_integer("Pick", 1, 4), 3)
        self.assertEqual(ask.call_count, 3)
        self.assertIn("Enter a number between 1 and 4", self.output())

    def test_request_integer_unbounded(self):
        with patch.object(guess_cli.IntPrompt, "ask", return_value=-123456):
            self.assertEqual(guess_cli.request_integer("Guess"), -123456)


class TestChooseDifficulty(CliTestCase):

    def test_preset(self):
        with patch.object(guess_cli.IntPrompt, "ask", return_value=2):
            cfg = guess_cli.choose_difficulty()
        self.assertEqual(cfg, preset_config("medium"))
        self.assertIn("Medium", self.output())

    def test_custom_with_cap(self):
        with patch.object(guess_cli.IntPrompt, "ask", side_effect=[4, -10, -20, 10, 5]), \
             patch.object(guess_cli.Confirm, "ask", return_value=True):
            cfg = guess_cli.choose_difficulty()
        # -20 is rejected because max must exceed min
        self.assertEqual((cfg.min_value, cfg.max_value, cfg.attempt_cap), (-10, 10, 5))
        self.assertEqual(cfg.difficulty_label, "Custom")

    def test_custom_unlimited(self):
        with patch.object(guess_cli.IntPrompt, "ask", side_effect=[4, 1, 50]), \
             patch.object(guess_cli.Confirm, "ask", return_value=False):
            cfg = guess_cli.choose_difficulty()
        self.assertIsNone(cfg.attempt_cap)


class TestPlayRound(CliTestCase):

    def test_win_is_saved_for_named_player(self):
        with patch.object(guess_cli.IntPrompt, "ask", side_effect=[15, 5, 10]), \
             patch.object(guess_cli.Prompt, "ask", return_value="alice"):
            record = guess_cli.play_round(preset_config("easy"), _fixed_generator(10), self.store)
        self.assertIs(record.outcome, Outcome.WON)
        self.assertEqual(record.attempts, 3)
        self.assertTrue(record.persisted)
        out = self.output()
        self.assertIn("Too high.", out)
        self.assertIn("Too low.", out)
        self.assertIn("Allowed range: [1 - 14]", out)
        saved = self.store.read_recent(10)
        self.assertEqual(len(saved), 1)
        self.assertEqual(saved[0].player_name, "alice")
        self.assertEqual(saved[0].difficulty, "Easy (1-20)")

    def test_blank_name_skips_leaderboard(self):
        with patch.object(guess_cli.IntPrompt, "ask", side_effect=[0]), \
             patch.object(guess_cli.Prompt, "ask", return_value=""):
            record = guess_cli.play_round(preset_config("easy"), _fixed_generator(7), self.store)
        self.assertEqual(record.player_name, ANONYMOUS)
        self.assertIs(record.outcome, Outcome.GAVE_UP)
        self.assertIn("The number was 7", self.output())
        self.assertEqual(self.store.read_recent(10), [])

    def test_exhaustion(self):
        guesses = list(range(1, 11))
        with patch.object(guess_cli.IntPrompt, "ask", side_effect=guesses), \
             patch.object(guess_cli.Prompt, "ask", return_value=""):
            record = guess_cli.play_round(preset_config("medium"), _fixed_generator(99), None)
        self.assertIs(record.outcome, Outcome.EXHAUSTED)
        self.assertEqual(record.attempts, 10)
        self.assertIn("Reached maximum attempts", self.output())

    def test_unwritable_leaderboard_warns(self):
        bad_store = LeaderboardStore(self.tmpdir)
        with patch.object(guess_cli.IntPrompt, "ask", side_effect=[10]), \
             patch.object(guess_cli.Prompt, "ask", return_value="erin"):
            record = guess_cli.play_round(preset_config("easy"), _fixed_generator(10), bad_store)
        self.assertFalse(record.persisted)
        self.assertIn("Could not save", self.output())


class TestMain(CliTestCase):

    def test_show_leaderboard_empty(self):
        rc = guess_cli.main(["--show-leaderboard", "--leaderboard", str(self.store.path)])
        self.assertEqual(rc, 0)
        self.assertIn("No leaderboard entries yet.", self.output())

    def test_show_leaderboard_table(self):
        with patch.object(guess_cli.IntPrompt, "ask", side_effect=[3]), \
             patch.object(guess_cli.Prompt, "ask", return_value="[bold]frank"):
            guess_cli.play_round(preset_config("easy"), _fixed_generator(3), self.store)
        rc = guess_cli.main(["--show-leaderboard", "--leaderboard", str(self.store.path)])
        self.assertEqual(rc, 0)
        out = self.output()
        self.assertIn("[bold]frank", out)
        self.assertIn("Easy (1-20)", out)

    def test_show_leaderboard_markup_in_stored_fields(self):
        """Text fields from the file are shown literally, never as markup."""
        self.store.path.write_text('"[/bold]","[red]n","[/]",1,1.00,5,1.00\n', encoding="utf-8")
        guess_cli.show_leaderboard(self.store, 10)
        out = self.output()
        self.assertIn("[/bold]", out)
        self.assertIn("[red]n", out)
        self.assertIn("[/]", out)

    def test_full_session(self):
        with patch.object(guess_cli.IntPrompt, "ask", side_effect=[1, 0]), \
             patch.object(guess_cli.Prompt, "ask", return_value="gina"), \
             patch.object(guess_cli.Confirm, "ask", side_effect=[True, False]):
            rc = guess_cli.main(["--leaderboard", str(self.store.path), "--seed", "5"])
        self.assertEqual(rc, 0)
        out = self.output()
        self.assertIn("Game summary", out)
        self.assertIn("Thanks for playing", out)
        self.assertEqual([r.player_name for r in self.store.read_recent(10)], ["gina"])

    def test_eof_exits_cleanly(self):
        with patch.object(guess_cli.IntPrompt, "ask", side_effect=EOFError):
            rc = guess_cli.main(["--leaderboard", str(self.store.path)])
        self.assertEqual(rc, 0)
        self.assertIn("Exiting", self.output())


if __name__ == "__main__":
    unittest.main(verbosity=2)
