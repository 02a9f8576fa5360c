import pytest

from conftest import TODAY, make_raw_grid
from game_round import play_round
from grid_builder import InvalidGrid
from models import HARD_MODE_BONUS, LAVA


def _wear_sensitive_counts(row, col):
    # attempt 0 crosses the shallow tile at (0, 1); attempt 1 wants it too
    return {(0, 0): 3, (1, 0): 3, (0, 1): 1}.get((row, col), 0)


def test_normal_round_gives_each_attempt_a_fresh_grid():
    raw = make_raw_grid(3, _wear_sensitive_counts)
    result = play_round(raw, 3, today=TODAY)

    assert len(result.results) == 7
    assert result.results[0].win is True
    assert result.results[1].win is True
    assert all(r.skipped for r in result.results[2:])
    assert result.results[0].grid is not result.results[1].grid

    assert result.best.attempt == 0
    assert result.best.total == 300 + 1000 + 500 + 10
    assert result.best.breakdown.hard_mode_bonus == 0
    assert result.best_result is result.results[0]


def test_hard_mode_shares_decay_between_attempts():
    raw = make_raw_grid(3, _wear_sensitive_counts)
    result = play_round(raw, 3, hard_mode=True, today=TODAY)

    first, second = result.results[0], result.results[1]
    assert first.win is True
    assert second.death is True
    assert second.reached_columns == 2
    assert second.grid is first.grid
    assert first.grid[0][1].type == LAVA


def test_hard_mode_bonus_goes_to_the_best_attempt_only():
    raw = make_raw_grid(3, _wear_sensitive_counts)
    result = play_round(raw, 3, hard_mode=True, today=TODAY)

    assert result.best.attempt == 0
    assert result.best.breakdown.hard_mode_bonus == HARD_MODE_BONUS
    assert result.best.total == 300 + 1000 + 500 + 10 + HARD_MODE_BONUS
    assert result.scores[0] is result.best
    assert all(s.breakdown.hard_mode_bonus == 0 for s in result.scores[1:])


def test_shared_grid_accumulates_every_step():
    raw = make_raw_grid(6, lambda r, c: (r + 2 * c) % 5)
    result = play_round(raw, 6, hard_mode=True, today=TODAY)

    grid = result.results[0].grid
    visits = sum(t.visits for row in grid for t in row)
    assert visits == sum(len(r.path) for r in result.results)


def test_attempt_count_is_configurable():
    raw = make_raw_grid(4, lambda _r, _c: 4)
    result = play_round(raw, 4, attempts=3, today=TODAY)
    assert len(result.scores) == 3
    assert [s.start_row for s in result.scores] == [0, 1, 2]


def test_summary_lines_describe_the_best_attempt():
    raw = make_raw_grid(3, _wear_sensitive_counts)
    lines = play_round(raw, 3, hard_mode=True, today=TODAY).summary_lines()

    assert lines[0] == "Best attempt: #1 (Sunday)"
    assert "Hard mode bonus: 200" in lines
    assert lines[-1].startswith("Attempt scores: 2010, ")
    assert "skip" in lines[-1]


def test_round_rejects_malformed_grids():
    raw = make_raw_grid(3, lambda _r, _c: 1)[:5]
    with pytest.raises(InvalidGrid):
        play_round(raw, 3, today=TODAY)


def test_hard_mode_gives_no_bonus_when_every_attempt_is_skipped():
    raw = make_raw_grid(3, lambda _r, _c: 0)
    result = play_round(raw, 3, hard_mode=True, today=TODAY)
    assert all(s.skipped for s in result.scores)
    assert result.best.total == 0
