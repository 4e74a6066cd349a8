"""Best survival times kept in a plain text file."""

from __future__ import annotations

from pathlib import Path

LEADERBOARD_FILE = "leaderboard.csv"
MAX_RECORDS = 100
KEPT_RECORDS = 10


def load_records(path: str | Path = LEADERBOARD_FILE) -> list[int]:
    """Read up to MAX_RECORDS leading integers from the file; a missing file is empty."""
    try:
        text = Path(path).read_text()
    except FileNotFoundError:
        return []
    records: list[int] = []
    for token in text.split():
        if len(records) >= MAX_RECORDS:
            break
        try:
            records.append(int(token))
        except ValueError:
            break
    return records


def read_best_record(path: str | Path = LEADERBOARD_FILE) -> int | None:
    """Return the top record, or None when there is none."""
    records = load_records(path)
    return records[0] if records else None


def update_leaderboard(path: str | Path, new_ms: int) -> list[int]:
    """Add a time, keep the ten longest in descending order, and return them."""
    records = load_records(path)
    records.append(new_ms)
    records.sort(reverse=True)
    kept = records[:KEPT_RECORDS]
    Path(path).write_text("".join(f"{value}\n" for value in kept))
    return kept