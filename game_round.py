from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from grid_builder import build_game_grid, validate_raw_grid
from models import (
    GRID_ROWS,
    HARD_MODE_BONUS,
    AttemptScore,
    RawGrid,
    RunResult,
)
from scoring import apply_hard_mode_bonus, score_attempt, select_best_attempt
from simulator import simulate_run

logger = logging.getLogger(__name__)

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


@dataclass
class RoundResult:
    """All attempts of one round plus the selected best attempt."""

    results: List[RunResult]
    scores: List[AttemptScore]
    best: AttemptScore
    weeks: int
    hard_mode: bool

    @property
    def best_result(self) -> RunResult:
        return self.results[self.best.attempt]

    def summary_lines(self) -> List[str]:
        """Human readable score breakdown for the best attempt."""
        b = self.best.breakdown
        day = DAY_NAMES[self.best.start_row % len(DAY_NAMES)]
        lines = [
            f"Best attempt: #{self.best.attempt + 1} ({day})",
            f"Reached {self.best.reached_columns}/{self.weeks} columns"
            + (" - crossed!" if self.best.win else ""),
            f"Score: {self.best.total}",
            f"Base: {b.base}",
            f"Progress: {b.progress}",
            f"Win bonus: {b.win_bonus}",
            f"Death penalty: {b.death_penalty}",
            f"Jump bonus: {b.jump_bonus}",
        ]
        if b.hard_mode_bonus > 0:
            lines.append(f"Hard mode bonus: {b.hard_mode_bonus}")
        attempts = ", ".join("skip" if s.skipped else str(s.total) for s in self.scores)
        lines.append(f"Attempt scores: {attempts}")
        return lines


def play_round(
    raw_grid: RawGrid,
    weeks: int,
    attempts: int = GRID_ROWS,
    hard_mode: bool = False,
    hard_mode_bonus: int = HARD_MODE_BONUS,
    today: Optional[date] = None,
) -> RoundResult:
    """Run one attempt per start row and pick the best.

    In hard mode every attempt walks the same grid in order, so wear from
    earlier attempts carries into later ones and the best attempt earns
    hard_mode_bonus. Otherwise each attempt gets a freshly built grid.
    """
    validate_raw_grid(raw_grid)
    attempts = max(1, min(GRID_ROWS, attempts))
    shared = build_game_grid(raw_grid, today=today) if hard_mode else None

    results: List[RunResult] = []
    scores: List[AttemptScore] = []
    for row in range(attempts):
        if shared is not None:
            result = simulate_run(shared, row, mutate_in_place=True)
        else:
            result = simulate_run(build_game_grid(raw_grid, today=today), row)
        score = score_attempt(row, weeks, result)
        logger.debug(
            "attempt %d: skipped=%s win=%s death=%s reached=%d total=%d",
            row,
            result.skipped,
            result.win,
            result.death,
            result.reached_columns,
            score.total,
        )
        results.append(result)
        scores.append(score)

    best = select_best_attempt(scores)
    if hard_mode and not best.skipped:
        best = apply_hard_mode_bonus(best, hard_mode_bonus)
        scores[best.attempt] = best

    logger.info(
        "round finished: best attempt #%d scored %d (hard_mode=%s)",
        best.attempt + 1,
        best.total,
        hard_mode,
    )
    return RoundResult(
        results=results, scores=scores, best=best, weeks=weeks, hard_mode=hard_mode
    )
