"""
GUESSWORK — Leaderboard Store

Append-only log of finished rounds, one CSV-style line per record:

    "<timestamp>","<player>","<difficulty>",<attempts>,<seconds:.2f>,<secret>,<score:.2f>

String fields are double-quoted with embedded quotes doubled (standard CSV
escaping), so names containing commas or quotes survive a round trip.
Lines are only ever appended; nothing here rewrites existing content.

Usage:
    from tools.leaderboard import LeaderboardStore
    store = LeaderboardStore("leaderboard.csv")
    store.append(record)                 # False (and a warning) if unwritable
    for rec in store.read_recent(10):    # file order, oldest first
        print(rec.player_name, rec.score)
"""

import csv
import logging
import math
import re
from pathlib import Path

from sim_engine.guess.round import LeaderboardRecord

logger = logging.getLogger("guesswork.leaderboard")

FIELD_COUNT = 7
QUOTE = '"'

# Plain ASCII digits only; int() and float() would also take "1_0" or non-ASCII digits
INT_RE = re.compile(r"-?\d+", re.ASCII)
FLOAT_RE = re.compile(r"-?\d+(?:\.\d+)?", re.ASCII)


class LeaderboardParseError(ValueError):
    """A stored line does not hold a valid record."""


# ═══════════════════════════════════════════════
# Line Format
# ═══════════════════════════════════════════════

def _quote(text: str) -> str:
    # A record must stay on one physical line
    text = str(text).replace("\r", " ").replace("\n", " ")
    return QUOTE + text.replace(QUOTE, QUOTE * 2) + QUOTE


def format_line(record: LeaderboardRecord) -> str:
    """Serialize a record to one line (no trailing newline)."""
    return ",".join([
        _quote(record.timestamp),
        _quote(record.player_name),
        _quote(record.difficulty),
        str(int(record.attempts)),
        f"{record.elapsed_seconds:.2f}",
        str(int(record.secret)),
        f"{record.score:.2f}",
    ])


def _number(raw: str, kind, name: str):
    raw = raw.strip()
    pattern = INT_RE if kind is int else FLOAT_RE
    if not pattern.fullmatch(raw):
        raise LeaderboardParseError(f"{name} is not a number: {raw!r}")
    try:
        value = kind(raw)
    except ValueError:
        raise LeaderboardParseError(f"{name} is not a number: {raw!r}")
    if kind is float and not math.isfinite(value):
        raise LeaderboardParseError(f"{name} is not finite: {raw!r}")
    return value


def parse_line(line: str) -> LeaderboardRecord:
    """Parse one stored line. Raises LeaderboardParseError on bad input."""
    try:
        rows = list(csv.reader([line.rstrip("\r\n")], strict=True))
    except csv.Error as e:
        raise LeaderboardParseError(f"bad quoting: {e}")
    if len(rows) != 1 or len(rows[0]) != FIELD_COUNT:
        got = len(rows[0]) if rows else 0
        raise LeaderboardParseError(f"expected {FIELD_COUNT} fields, got {got}")

    timestamp, player, difficulty, attempts, seconds, secret, score = rows[0]
    return LeaderboardRecord(
        timestamp=timestamp,
        player_name=player,
        difficulty=difficulty,
        attempts=_number(attempts, int, "attempts"),
        elapsed_seconds=_number(seconds, float, "elapsed_seconds"),
        secret=_number(secret, int, "secret"),
        score=_number(score, float, "score"),
        persisted=True,
    )


# ═══════════════════════════════════════════════
# Store
# ═══════════════════════════════════════════════

class LeaderboardStore:
    """File-backed leaderboard. Safe to read while another process appends."""

    def __init__(self, path):
        self.path = Path(path)

    def append(self, record: LeaderboardRecord) -> bool:
        """Append one record as a single write. Returns False if it could not be saved."""
        data = (format_line(record) + "\n").encode("utf-8")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # Unbuffered: the whole line goes to the OS in one write call
            with open(self.path, "ab", buffering=0) as f:
                written = f.write(data)
        except OSError as e:
            logger.warning(f"Could not write leaderboard file {self.path}: {e}")
            return False
        if written != len(data):
            logger.warning(f"Short write to leaderboard file {self.path}: {written}/{len(data)} bytes")
            return False
        logger.debug(f"Leaderboard append: {record.player_name} score={record.score:.2f}")
        return True

    def read_recent(self, limit: int = 10) -> list[LeaderboardRecord]:
        """First ``limit`` valid records in file order. Malformed lines are skipped."""
        out: list[LeaderboardRecord] = []
        if limit <= 0 or not self.path.exists():
            return out

        try:
            with open(self.path, "r", encoding="utf-8", errors="replace", newline="") as f:
                for lineno, line in enumerate(f, start=1):
                    if not line.strip():
                        continue
                    try:
                        out.append(parse_line(line))
                    except LeaderboardParseError as e:
                        logger.warning(f"Skipping malformed leaderboard line {lineno}: {e}")
                        continue
                    if len(out) >= limit:
                        break
        except OSError as e:
            logger.warning(f"Could not read leaderboard file {self.path}: {e}")
        return out
