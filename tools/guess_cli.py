#!/usr/bin/env python3
"""
GUESSWORK — Terminal Number Guessing Game

Usage:
    python -m tools.guess_cli
    python -m tools.guess_cli --seed 42
    python -m tools.guess_cli --leaderboard ~/.guesswork/leaderboard.csv
    python -m tools.guess_cli --show-leaderboard --recent 25
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

sys.path.insert(0, str(Path(__file__).parent.parent))

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from config.round_schema import RoundConfig, custom_config, preset_config
from config.settings import GameSettings
from sim_engine.guess import GameRound, LeaderboardRecord, SecretGenerator, Signal
from tools.leaderboard import LeaderboardStore

logger = logging.getLogger("guesswork.cli")
console = Console()

MENU = [
    ("easy",   "Easy   (1 - 20, unlimited attempts)"),
    ("medium", "Medium (1 - 100, 10 attempts)"),
    ("hard",   "Hard   (1 - 1000, 12 attempts)"),
    ("custom", "Custom"),
]


def configure_logging(level: str) -> None:
    root = logging.getLogger("guesswork")
    if not root.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s %(message)s", datefmt="%H:%M:%S"))
        root.addHandler(h)
    root.setLevel(getattr(logging, str(level).upper(), logging.WARNING))


# ═══════════════════════════════════════════════════════════════
# Input helpers
# ═══════════════════════════════════════════════════════════════

def request_integer(prompt: str, min_value: Optional[int] = None,
                    max_value: Optional[int] = None) -> int:
    """Ask until the player enters an integer inside [min_value, max_value]."""
    while True:
        value = IntPrompt.ask(prompt, console=console)
        if (min_value is not None and value < min_value) or \
           (max_value is not None and value > max_value):
            console.print(f"[yellow]Enter a number between {min_value} and {max_value}.[/yellow]")
            continue
        return value


def request_yes_no(prompt: str) -> bool:
    return Confirm.ask(prompt, console=console)


def request_line(prompt: str) -> str:
    return Prompt.ask(prompt, default="", show_default=False, console=console)


# ═══════════════════════════════════════════════════════════════
# Screens
# ═══════════════════════════════════════════════════════════════

def choose_difficulty() -> RoundConfig:
    console.print("[bold]Choose difficulty:[/bold]")
    for i, (_, label) in enumerate(MENU, start=1):
        console.print(f"  {i}) {label}")
    choice = request_integer("Enter choice [1-4]", 1, len(MENU))
    key = MENU[choice - 1][0]

    if key == "custom":
        lo = request_integer("Enter minimum value",
                             GameSettings.CUSTOM_MIN, GameSettings.CUSTOM_MAX - 1)
        hi = request_integer("Enter maximum value", lo + 1, GameSettings.CUSTOM_MAX)
        cap = None
        if request_yes_no("Would you like to set a maximum attempts limit?"):
            cap = request_integer("Enter maximum attempts (>=1)", 1, GameSettings.MAX_ATTEMPT_CAP)
        config = custom_config(lo, hi, cap)
    else:
        config = preset_config(key)

    console.print(f"You selected: [cyan]{config.describe()}[/cyan]")
    return config


def play_round(config: RoundConfig, generator: SecretGenerator,
               store: Optional[LeaderboardStore]) -> LeaderboardRecord:
    """Drive one round from the terminal and return its finished record."""
    round_ = GameRound(config, generator=generator)

    console.print(f"\nI have selected a number between {config.min_value} and {config.max_value}.")
    if config.attempt_cap:
        console.print(f"You have up to {config.attempt_cap} attempts.")
    console.print("Type your guess and press Enter.")

    while not round_.is_over:
        console.print(f"[dim]Allowed range: {escape(f'[{round_.low_bound} - {round_.high_bound}]')}[/dim]")
        guess = request_integer("Enter guess (or 0 to give up)")
        feedback = round_.evaluate(guess)
        if feedback.signal is Signal.WIN:
            console.print(f"[bold green]🎉 {feedback.message}[/bold green]")
        elif feedback.terminal:
            console.print(f"[red]{feedback.message}[/red]")
        else:
            console.print(f"[yellow]{feedback.message}[/yellow]")

    name = request_line("\nEnter your name for the leaderboard (leave blank to skip)")
    record = round_.finish(name, store=store)
    if store is not None and not record.anonymous and not record.persisted:
        console.print("[yellow]⚠️ Could not save to the leaderboard (result kept for this session).[/yellow]")
    return record


def show_summary(record: LeaderboardRecord) -> None:
    console.print(Panel(
        f"Player: {escape(record.player_name)}\n"
        f"Difficulty: {escape(record.difficulty)}\n"
        f"Attempts: {record.attempts}\n"
        f"Time: {record.elapsed_seconds:.1f} seconds\n"
        f"Score: [bold]{record.score:.2f}[/bold]",
        title="Game summary", border_style="cyan",
    ))


def show_leaderboard(store: LeaderboardStore, limit: int = 10) -> None:
    entries = store.read_recent(limit)
    if not entries:
        console.print("No leaderboard entries yet.")
        return
    table = Table(title=f"Top {len(entries)} recent games")
    for col in ("Time", "Player", "Diff", "Att", "Sec", "Score"):
        table.add_column(col, justify="right" if col in ("Att", "Sec", "Score") else "left")
    for e in entries:
        table.add_row(escape(e.timestamp), escape(e.player_name), escape(e.difficulty), str(e.attempts),
                      f"{e.elapsed_seconds:.1f}", f"{e.score:.2f}")
    console.print(table)


# ═══════════════════════════════════════════════════════════════
# Entrypoint
# ═══════════════════════════════════════════════════════════════

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Guess the hidden number")
    parser.add_argument("--leaderboard", type=str, default=None,
                        help=f"Leaderboard file (default: {GameSettings.LEADERBOARD_FILE})")
    parser.add_argument("--seed", type=int, default=None, help="Seed the secret generator")
    parser.add_argument("--recent", type=int, default=None, help="Rows to show from the leaderboard")
    parser.add_argument("--show-leaderboard", action="store_true",
                        help="Print the recent leaderboard and exit")
    parser.add_argument("--log-level", type=str, default=None)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level or GameSettings.LOG_LEVEL)

    store = LeaderboardStore(args.leaderboard or GameSettings.LEADERBOARD_FILE)
    recent = args.recent if args.recent is not None else GameSettings.RECENT_LIMIT

    if args.show_leaderboard:
        show_leaderboard(store, recent)
        return 0

    seed = args.seed if args.seed is not None else GameSettings.SEED
    generator = SecretGenerator(seed=seed)
    logger.info(f"Secret generator seed: {generator.seed}")

    console.print(Panel("[bold]Advanced Number Guessing Game[/bold]\n"
                        "(Ctrl+D or Ctrl+C to exit any time)", border_style="cyan"))
    try:
        while True:
            config = choose_difficulty()
            record = play_round(config, generator, store)
            show_summary(record)

            if request_yes_no("Would you like to view the recent leaderboard?"):
                show_leaderboard(store, recent)
            if not request_yes_no("Play again?"):
                break
            console.print()
    except (EOFError, KeyboardInterrupt):
        console.print("\nInput closed. Exiting.")
        return 0

    console.print("Thanks for playing! Goodbye.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
