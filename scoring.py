from __future__ import annotations

from dataclasses import replace
from typing import List, Sequence, Tuple

from models import AttemptScore, RunResult, ScoreBreakdown
from utils import round_half_up

BASE_PER_WEEK = 100
PROGRESS_SCALE = 1000
WIN_BONUS = 500
DEATH_PENALTY = -200
JUMP_BONUS = 5


def score_run(
    weeks: int, result: RunResult, hard_mode_bonus: int = 0
) -> Tuple[int, ScoreBreakdown]:
    """Score one attempt.

    Args:
        weeks: Grid width the attempt was played on (positive).
        result: The attempt's outcome.
        hard_mode_bonus: Externally supplied bonus, 0 unless the caller adds one.

    Returns:
        (total, breakdown) where total is the sum of the breakdown parts.
    """
    breakdown = ScoreBreakdown(
        base=weeks * BASE_PER_WEEK,
        progress=round_half_up(result.reached_columns / weeks * PROGRESS_SCALE),
        win_bonus=WIN_BONUS if result.win else 0,
        death_penalty=DEATH_PENALTY if result.death else 0,
        jump_bonus=JUMP_BONUS * max(0, len(result.path) - 1),
        hard_mode_bonus=hard_mode_bonus,
    )
    return breakdown.total, breakdown


def score_attempt(attempt: int, weeks: int, result: RunResult) -> AttemptScore:
    """Score an attempt for display; skipped attempts carry an all-zero breakdown."""
    if result.skipped:
        total, breakdown = 0, ScoreBreakdown()
    else:
        total, breakdown = score_run(weeks, result)
    return AttemptScore(
        attempt=attempt,
        start_row=attempt,
        total=total,
        breakdown=breakdown,
        win=result.win,
        death=result.death,
        reached_columns=result.reached_columns,
        skipped=result.skipped,
    )


def rank_attempts(scores: Sequence[AttemptScore]) -> List[AttemptScore]:
    """Best first: total desc, wins first, then furthest reach; ties keep attempt order."""
    return sorted(scores, key=lambda s: (-s.total, not s.win, -s.reached_columns))


def select_best_attempt(scores: Sequence[AttemptScore]) -> AttemptScore:
    """Pick the best non-skipped attempt, or the best of all when every attempt was skipped.

    Raises:
        ValueError: If no scores are given.
    """
    if not scores:
        raise ValueError("No attempts to select from.")
    playable = [s for s in scores if not s.skipped]
    return rank_attempts(playable or scores)[0]


def apply_hard_mode_bonus(score: AttemptScore, bonus: int) -> AttemptScore:
    """Return a copy of score with the hard mode bonus folded into breakdown and total."""
    breakdown = replace(score.breakdown, hard_mode_bonus=score.breakdown.hard_mode_bonus + bonus)
    return replace(score, breakdown=breakdown, total=score.total + bonus)
