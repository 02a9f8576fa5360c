from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path


@dataclass(frozen=True)
class ScoreEntry:
    timestamp: str
    username: str
    start_week: str
    weeks: int
    score: int
    win: bool
    hard_mode: bool


class ScoreboardFile:
    """Append-only local scoreboard of best attempts in a simple TSV text file."""

    FIELDS = 7

    def __init__(self, path: Path) -> None:
        self.path = path

    def append(self, entry: ScoreEntry) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        line = "\t".join(
            [
                entry.timestamp,
                entry.username,
                entry.start_week,
                str(entry.weeks),
                str(entry.score),
                "win" if entry.win else "-",
                "hard" if entry.hard_mode else "-",
            ]
        )
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")

    def top_scores(self, limit: int = 10) -> list[ScoreEntry]:
        if not self.path.exists():
            return []

        entries: list[ScoreEntry] = []
        for line in self.path.read_text(encoding="utf-8").splitlines():
            parts = line.split("\t")
            if len(parts) != self.FIELDS:
                continue
            ts, user, start, weeks, sc, win, hard = parts
            try:
                entries.append(
                    ScoreEntry(ts, user, start, int(weeks), int(sc), win == "win", hard == "hard")
                )
            except ValueError:
                continue

        entries.sort(key=lambda e: e.score, reverse=True)
        return entries[:limit]


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")
