#!/usr/bin/env python3
"""
Tests for the leaderboard store

Validates:
1.  A written record reads back field-for-field (2dp time and score)
2.  N appends -> read_recent(N) returns them in order; read_recent(k) the first k
3.  Names with commas and quotes survive the round trip
4.  Newlines in names never split a record across lines
5.  Missing and empty files read as an empty leaderboard
6.  Malformed lines are skipped, later good lines still counted
7.  read_recent stops at the limit of successfully parsed records
8.  Unwritable store -> append returns False with a warning, nothing raised
9.  Appends never rewrite existing content
10. Lines in the legacy quoted format parse
11. Lines after the limit are never read
12. An unreadable store reads as empty with a warning
13. Number fields accept plain digits only
14. Very long names are still appended as one complete line
"""

import logging
import sys
import tempfile
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from sim_engine.guess import LeaderboardRecord
from tools.leaderboard import (
    LeaderboardParseError, LeaderboardStore, format_line, parse_line,
)


def _record(name="alice", attempts=3, seconds=12.34, secret=10, score=167.5,
            difficulty="Easy (1-20)", ts="2025-03-04 05:06:07"):
    return LeaderboardRecord(
        timestamp=ts, player_name=name, difficulty=difficulty, attempts=attempts,
        elapsed_seconds=seconds, secret=secret, score=score,
    )


def _store(filename="leaderboard.csv"):
    return LeaderboardStore(Path(tempfile.mkdtemp()) / filename)


# ============================================================
# Tests
# ============================================================

def test_line_format():
    """Strings quoted, numbers bare, time and score at two decimals."""
    line = format_line(_record(seconds=3.14159, score=99.999))
    assert line == '"2025-03-04 05:06:07","alice","Easy (1-20)",3,3.14,10,100.00', line
    print("✅ Line format matches the stored layout")


def test_round_trip():
    """Write then read yields the same record."""
    store = _store()
    rec = _record()
    assert store.append(rec)
    back = store.read_recent(10)
    assert back == [rec], back
    assert back[0].persisted
    print("✅ Record round-trips field-for-field")


def test_round_trip_rounds_to_two_decimals():
    store = _store()
    store.append(_record(seconds=7.016, score=123.456))
    back = store.read_recent(1)[0]
    assert back.elapsed_seconds == 7.02
    assert back.score == 123.46
    print("✅ Seconds and score stored at 2dp")


def test_append_order_and_limit():
    """N appends come back in order; a smaller limit returns the first k."""
    store = _store()
    records = [_record(name=f"player{i}", secret=i, score=float(i)) for i in range(6)]
    for r in records:
        assert store.append(r)
    assert store.read_recent(6) == records
    assert store.read_recent(3) == records[:3]
    assert store.read_recent(100) == records
    assert store.read_recent(0) == []
    print("✅ Append order preserved; limit honoured")


def test_awkward_names():
    """Commas and quotes in names do not corrupt the line."""
    store = _store()
    names = ['O"Brien, Jr.', 'a,b,c', '""', '"quoted"', "comma, then \"quote\","]
    for n in names:
        store.append(_record(name=n))
    back = [r.player_name for r in store.read_recent(10)]
    assert back == names, back
    print("✅ Names with separators and quotes round-trip")


def test_newline_in_name_stays_on_one_line():
    store = _store()
    store.append(_record(name="line1\nline2\r"))
    store.append(_record(name="next"))
    text = store.path.read_text(encoding="utf-8")
    assert text.count("\n") == 2
    back = store.read_recent(10)
    assert [r.player_name for r in back] == ["line1 line2 ", "next"]
    print("✅ Newlines in names replaced; one record per line")


def test_missing_and_empty_file():
    store = _store()
    assert not store.path.exists()
    assert store.read_recent(10) == []
    store.path.write_text("", encoding="utf-8")
    assert store.read_recent(10) == []
    store.path.write_text("\n\n   \n", encoding="utf-8")
    assert store.read_recent(10) == []
    print("✅ Missing/empty leaderboard reads as empty")


def test_malformed_lines_skipped():
    store = _store()
    good1, good2 = _record(name="first"), _record(name="second")
    store.path.write_text(
        format_line(good1) + "\n"
        + "garbage\n"
        + '"ts","x","Easy",three,1.00,5,10.00\n'
        + '"ts","x","Easy",3,1.00,5\n'
        + '"ts","x","Easy",3,nan,5,10.00\n'
        + '"unterminated,"x","Easy",3,1.00,5,10.00\n'
        + format_line(good2) + "\n",
        encoding="utf-8",
    )
    logger = logging.getLogger("guesswork.leaderboard")
    seen = []

    class _Capture(logging.Handler):
        def emit(self, record):
            seen.append(record.getMessage())

    h = _Capture(level=logging.WARNING)
    logger.addHandler(h)
    try:
        back = store.read_recent(10)
    finally:
        logger.removeHandler(h)
    assert back == [good1, good2], back
    assert len(seen) == 5, seen
    assert any("line 2" in m for m in seen)
    print("✅ Malformed lines skipped with warnings")


def test_limit_counts_parsed_records_only():
    store = _store()
    good = [_record(name=f"p{i}") for i in range(3)]
    store.path.write_text(
        "bad line\n" + "\n".join(format_line(r) for r in good) + "\n",
        encoding="utf-8",
    )
    assert store.read_recent(2) == good[:2]
    print("✅ Limit applies to successfully parsed records")


def test_unwritable_store_is_non_fatal():
    tmp = Path(tempfile.mkdtemp())
    store = LeaderboardStore(tmp)          # a directory cannot be opened for append
    logger = logging.getLogger("guesswork.leaderboard")
    seen = []

    class _Capture(logging.Handler):
        def emit(self, record):
            seen.append(record)

    h = _Capture(level=logging.WARNING)
    logger.addHandler(h)
    try:
        ok = store.append(_record())
    finally:
        logger.removeHandler(h)
    assert ok is False
    assert seen and seen[0].levelno == logging.WARNING
    print("✅ Unwritable leaderboard reported as a warning")


def test_append_creates_parent_dirs():
    store = LeaderboardStore(Path(tempfile.mkdtemp()) / "nested" / "dir" / "board.csv")
    assert store.append(_record())
    assert store.read_recent(5) == [_record()]
    print("✅ Parent directories created on first append")


def test_append_never_rewrites():
    store = _store()
    store.append(_record(name="one"))
    before = store.path.read_bytes()
    store.append(_record(name="two"))
    after = store.path.read_bytes()
    assert after.startswith(before)
    assert after.endswith(b"\n")
    print("✅ Existing content untouched by later appends")


def test_legacy_line_parses():
    rec = parse_line('"2024-12-31 23:59:59","Zed","Hard (1-1000)",12,95.20,731,0.00\n')
    assert rec.player_name == "Zed"
    assert rec.attempts == 12
    assert rec.elapsed_seconds == 95.2
    assert rec.secret == 731
    assert rec.score == 0.0
    print("✅ Existing leaderboard lines parse")


def test_parse_line_errors():
    for bad in ["", "a,b", '"a","b","c",1,2.0,3,x', '"a"junk,"b","c",1,2.0,3,4.0']:
        try:
            parse_line(bad)
        except LeaderboardParseError:
            continue
        raise AssertionError(f"parse_line accepted {bad!r}")
    print("✅ parse_line rejects malformed input")


def _read_with_warnings(store, limit):
    """read_recent(limit) plus the WARNING messages it logged."""
    logger = logging.getLogger("guesswork.leaderboard")
    seen = []

    class _Capture(logging.Handler):
        def emit(self, record):
            seen.append(record.getMessage())

    h = _Capture(level=logging.WARNING)
    logger.addHandler(h)
    try:
        back = store.read_recent(limit)
    finally:
        logger.removeHandler(h)
    return back, seen


def test_reading_stops_at_limit():
    """A malformed line after the limit-th record is never reached."""
    store = _store()
    good = [_record(name="a"), _record(name="b")]
    store.path.write_text(
        "\n".join(format_line(r) for r in good) + "\nnot,a,record\n",
        encoding="utf-8",
    )
    back, seen = _read_with_warnings(store, 2)
    assert back == good, back
    assert seen == [], seen
    # With a larger limit the same line is reached and reported
    back, seen = _read_with_warnings(store, 5)
    assert back == good
    assert len(seen) == 1 and "line 3" in seen[0], seen
    print("✅ Reading stops once the limit is reached")


def test_unreadable_store_reads_empty():
    store = _store()
    store.path.mkdir()                     # exists, but cannot be opened as a file
    back, seen = _read_with_warnings(store, 10)
    assert back == []
    assert len(seen) == 1 and "Could not read" in seen[0], seen
    print("✅ Unreadable leaderboard reported as a warning")


def test_number_fields_plain_digits_only():
    """Python literal extras (underscores, non-ASCII digits, exponents) are malformed."""
    for bad in [
        '"t","n","d",1_0,1.00,5,1_0.5',
        '"t","n","d",١٢,1.00,5,1.00',
        '"t","n","d",1,1e3,5,1.00',
        '"t","n","d",1,1.00,+5,1.00',
        '"t","n","d",1,1.00,5,inf',
        '"t","n","d",1,.5,5,1.00',
    ]:
        try:
            parse_line(bad)
        except LeaderboardParseError:
            continue
        raise AssertionError(f"parse_line accepted {bad!r}")
    rec = parse_line('"t","n","d",2, 3.5 ,-7,12')
    assert (rec.attempts, rec.elapsed_seconds, rec.secret, rec.score) == (2, 3.5, -7, 12.0)
    print("✅ Number fields accept plain digits only")


def test_long_name_appended_whole():
    store = _store()
    long_name = "x" * 100_000              # under csv's default field size limit
    assert store.append(_record(name=long_name))
    assert store.append(_record(name="after"))
    lines = store.path.read_text(encoding="utf-8").split("\n")
    assert len(lines) == 3 and lines[-1] == ""
    assert [r.player_name for r in store.read_recent(5)] == [long_name, "after"]
    print("✅ Long names appended as one complete line")


if __name__ == "__main__":
    tests = [v for k, v in sorted(globals().items()) if k.startswith("test_") and callable(v)]
    for t in tests:
        t()
    print(f"\n{len(tests)} leaderboard tests passed")
