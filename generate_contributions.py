#!/usr/bin/env python3
"""
generate_contributions.py

Generates synthetic contribution calendars for offline play.

Writes a JSON file shaped like the contributions API payload:
    {"days": [{"date": "YYYY-MM-DD", "count": N}, ...]}

Key properties:
- Activity comes in bursts (busy stretches) separated by quiet days
- Weekends are quieter than weekdays
- --winnable retries until at least one attempt of a round crosses the grid
"""

from __future__ import annotations

import argparse
import json
import logging
import random
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

from contributions import (
    ContributionDay,
    build_range,
    build_raw_grid,
    format_iso_date,
    list_date_range,
    parse_iso_date,
)
from game_round import play_round

logger = logging.getLogger(__name__)

MAX_TRIES = 200


class ContributionGenerator:
    """Random walk between quiet and busy stretches."""

    def __init__(
        self,
        rng: random.Random,
        zero_chance: float = 0.35,
        max_count: int = 8,
    ) -> None:
        self.rng = rng
        self.zero_chance = max(0.0, min(1.0, zero_chance))
        self.max_count = max(1, max_count)

    def _count_for(self, day: date, busy: bool) -> int:
        weekend = day.weekday() >= 5
        chance = self.zero_chance * (1.6 if weekend else 1.0) * (0.5 if busy else 1.0)
        if self.rng.random() < chance:
            return 0
        hi = self.max_count if busy else max(1, self.max_count // 3)
        return self.rng.randint(1, hi)

    def generate(self, start: date, end: date) -> List[ContributionDay]:
        days: List[ContributionDay] = []
        busy = False
        for day in list_date_range(start, end):
            # flip between stretches now and then
            if self.rng.random() < 0.15:
                busy = not busy
            days.append(ContributionDay(format_iso_date(day), self._count_for(day, busy)))
        return days


def is_winnable(days: List[ContributionDay], start: date, weeks: int, today: date) -> bool:
    raw = build_raw_grid(days, start, weeks)
    result = play_round(raw, weeks, today=today)
    return any(r.win for r in result.results)


def generate_calendar(
    rng: random.Random,
    start: date,
    weeks: int,
    zero_chance: float,
    max_count: int,
    winnable: bool = False,
    today: Optional[date] = None,
) -> List[ContributionDay]:
    """Generate one calendar covering `weeks` whole weeks from start's Sunday.

    Raises:
        RuntimeError: If a winnable calendar was requested and none was found.
    """
    first, last = build_range(start, weeks)
    gen = ContributionGenerator(rng, zero_chance, max_count)
    ref = today if today is not None else last
    for attempt in range(MAX_TRIES):
        days = gen.generate(first, last)
        if not winnable or is_winnable(days, first, weeks, ref):
            logger.info("generated %d days after %d tries", len(days), attempt + 1)
            return days
    raise RuntimeError(f"Failed to generate a winnable calendar after {MAX_TRIES} tries.")


def write_calendar(path: Path, days: List[ContributionDay]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload: Dict[str, object] = {"days": [{"date": d.date, "count": d.count} for d in days]}
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


# ----------------------------
# CLI
# ----------------------------


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Generate a synthetic contribution calendar.")
    p.add_argument("out", type=str, help="Output JSON file.")
    p.add_argument("--start", type=str, required=True, help="First week (YYYY-MM-DD).")
    p.add_argument("--weeks", type=int, default=12, help="Number of weeks (1-52).")
    p.add_argument("--zero-chance", type=float, default=0.35, help="Chance of a day with no contributions.")
    p.add_argument("--max-count", type=int, default=8, help="Largest daily count.")
    p.add_argument("--winnable", action="store_true", help="Retry until some attempt can win.")
    p.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Optional RNG seed for reproducible generation.",
    )
    return p.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    try:
        start = parse_iso_date(args.start)
        days = generate_calendar(
            random.Random(args.seed),
            start,
            args.weeks,
            args.zero_chance,
            args.max_count,
            winnable=args.winnable,
        )
    except ValueError as e:
        raise SystemExit(str(e))
    write_calendar(Path(args.out), days)


if __name__ == "__main__":
    main()
