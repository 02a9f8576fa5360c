from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Watch an avatar try to cross your contribution calendar without touching lava."
    )
    ap.add_argument("config", nargs="?", default="config.json", help="Path to config.json")
    ap.add_argument("--hard-mode", action="store_true", help="Share decay across all attempts")
    ap.add_argument("--headless", action="store_true", help="Compute and score only, no window")
    ap.add_argument("--today", help="Override today's date (YYYY-MM-DD)")
    ap.add_argument("--weeks", type=int, help="Number of weeks (1-52)")
    ap.add_argument("--start-week", help="First week of the grid (YYYY-MM-DD)")
    ap.add_argument("--year", type=int, help="Play a whole calendar year")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """Translate command-line flags into a config patch."""
    patch: Dict[str, Any] = {}
    if args.hard_mode:
        patch["round"] = {"hard_mode": True}
    if args.today:
        patch["today"] = args.today
    if args.weeks is not None:
        patch["weeks"] = args.weeks
    if args.start_week:
        patch["start_week"] = args.start_week
    if args.year is not None:
        patch["year"] = args.year
        patch["start_week"] = None
    return patch


def main(argv: Optional[List[str]] = None) -> None:
    """Entrypoint for running the game from the command line."""
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    from game import Game

    Game(Path(args.config), overrides=overrides_from_args(args), headless=args.headless).run()


if __name__ == "__main__":
    main()
