import pytest

import simulator
from conftest import make_grid
from models import (
    LAVA,
    SHALLOW,
    SHALLOW_MAX_STEPS,
    SOLID,
    SOLID_TO_SHALLOW_STEPS,
    Step,
    Tile,
)
from simulator import TraversalSimulator, move_ceiling, simulate_run, step_on_tile

TYPE_RANK = {LAVA: 0, SHALLOW: 1, SOLID: 2}


def _assert_adjacent(path):
    for prev, nxt in zip(path, path[1:]):
        dr = abs(nxt.row - prev.row)
        dc = abs(nxt.col - prev.col)
        assert dr <= 1 and dc <= 1
        assert (dr, dc) != (0, 0)


# ----------------------------
# Wear
# ----------------------------


def test_shallow_tile_loses_a_step_per_visit_then_collapses():
    tile = Tile(0, 0, "2000-01-01", 1, SHALLOW, steps_left=SHALLOW_MAX_STEPS)
    assert step_on_tile(tile) is False
    assert tile.steps_left == 1
    assert tile.type == SHALLOW

    assert step_on_tile(tile) is True
    assert tile.type == LAVA
    assert tile.steps_left == 0
    assert tile.visits == 2


def test_solid_tile_turns_shallow_on_second_visit():
    tile = Tile(0, 0, "2000-01-01", 5, SOLID)
    assert step_on_tile(tile) is False
    assert tile.type == SOLID

    assert step_on_tile(tile) is False
    assert tile.visits == SOLID_TO_SHALLOW_STEPS
    assert tile.type == SHALLOW
    assert tile.steps_left == SHALLOW_MAX_STEPS - 1

    assert step_on_tile(tile) is True
    assert tile.type == LAVA


def test_move_ceiling():
    assert move_ceiling(1) == 30
    assert move_ceiling(4) == 30
    assert move_ceiling(52) == 510


# ----------------------------
# Runs
# ----------------------------


def test_only_moves_to_adjacent_tiles(solid_grid):
    result = simulate_run(solid_grid, 3)

    assert result.win is True
    assert result.death is False
    assert len(result.path) > 1
    _assert_adjacent(result.path)


def test_crosses_a_solid_grid_in_a_straight_line():
    grid = make_grid(52, lambda _r, _c: 4)
    result = simulate_run(grid, 0)
    assert result.win is True
    assert len(result.path) == 52
    assert result.reached_columns == 52
    assert [s.col for s in result.path] == list(range(52))


def test_single_column_grid_wins_on_placement():
    grid = make_grid(1, lambda _r, _c: 0)
    result = simulate_run(grid, 4)
    assert result.win is True
    assert result.path == [Step(4, 0)]
    assert result.reached_columns == 1


def test_prefers_routes_that_reach_the_goal():
    def counts(row, col):
        return {(3, 0): 3, (2, 1): 3, (4, 1): 1, (4, 2): 3, (4, 3): 3}.get((row, col), 0)

    result = simulate_run(make_grid(4, counts), 3)

    assert result.path[1] == Step(4, 1)
    assert result.win is True
    assert result.path[-1] == Step(4, 3)


def test_start_on_lava_is_skipped():
    grid = make_grid(3, lambda row, col: 0 if (row, col) == (2, 0) else 3)
    result = simulate_run(grid, 2)

    assert result.skipped is True
    assert result.path == []
    assert result.frames == []
    assert result.win is False
    assert result.death is False
    assert result.reached_columns == 0


def test_start_row_out_of_bounds_is_skipped(solid_grid):
    assert simulate_run(solid_grid, 7).skipped is True


def test_collapsing_start_tile_is_immediate_death():
    grid = make_grid(2, lambda _r, col: 1 if col == 0 else 3)
    grid[0][0].steps_left = 1

    result = simulate_run(grid, 0)

    assert result.death is True
    assert result.win is False
    assert result.path == [Step(0, 0)]
    assert result.reached_columns == 1
    assert result.death_index == 0
    assert len(result.frames) == 1


def test_backtracks_out_of_a_dead_end():
    grid = make_grid(4, lambda row, col: 3 if row == 0 and col <= 1 else 0)
    result = simulate_run(grid, 0)

    assert result.win is False
    assert result.death is True
    assert len(result.path) == 3
    assert result.path[0] == result.path[2]
    assert result.death_index == 2

    start = result.grid[0][0]
    assert start.visits == SOLID_TO_SHALLOW_STEPS
    assert start.type == SHALLOW
    assert start.steps_left == SHALLOW_MAX_STEPS - 1


def test_backtracking_stays_within_three_columns_of_furthest_reach():
    grid = make_grid(8, lambda row, col: 3 if row == 0 and col <= 5 else 0)
    result = simulate_run(grid, 0)

    cols = [s.col for s in result.path]
    furthest = max(cols)
    first_max = cols.index(furthest)
    assert min(cols[first_max:]) >= furthest - 3
    assert result.death is True
    assert cols == [0, 1, 2, 3, 4, 5, 4, 3, 2]


def test_move_ceiling_ends_the_run_in_death(monkeypatch):
    monkeypatch.setattr(simulator, "move_ceiling", lambda _w: 3)
    grid = make_grid(10, lambda _r, _c: 4)

    result = simulate_run(grid, 3)

    assert len(result.path) == 3
    assert result.death is True
    assert result.win is False
    assert result.reached_columns == 3
    assert result.death_index == 2


def test_frames_are_deep_snapshots_per_step(solid_grid):
    result = simulate_run(solid_grid, 0)

    assert len(result.frames) == len(result.path)
    first = result.frames[0]
    assert first[0][0].visits == 1
    assert first[0][1].visits == 0
    assert first[0][0] is not result.grid[0][0]
    last = result.frames[-1]
    assert sum(t.visits for row in last for t in row) == len(result.path)


def test_private_copy_leaves_caller_grid_untouched(solid_grid):
    simulate_run(solid_grid, 2)
    assert all(t.visits == 0 and t.type == SOLID for row in solid_grid for t in row)


def test_mutate_in_place_writes_wear_to_caller_grid(solid_grid):
    result = simulate_run(solid_grid, 2, mutate_in_place=True)
    assert result.grid is solid_grid
    assert solid_grid[2][0].visits == 1


def test_decay_carries_across_chained_attempts():
    grid = make_grid(2, lambda row, col: {(0, 0): 1, (0, 1): 3}.get((row, col), 0))

    first = simulate_run(grid, 0, mutate_in_place=True)
    assert first.death is False
    assert first.win is True
    assert grid[0][0].type == SHALLOW

    second = simulate_run(grid, 0, mutate_in_place=True)
    assert second.death is True
    assert second.reached_columns == 1
    assert grid[0][0].type == LAVA

    third = simulate_run(grid, 0, mutate_in_place=True)
    assert third.skipped is True


def test_runs_are_deterministic():
    def counts(row, col):
        return (row * 7 + col * 3) % 5

    a = simulate_run(make_grid(10, counts), 1)
    b = simulate_run(make_grid(10, counts), 1)
    assert a.path == b.path
    assert (a.win, a.death, a.reached_columns) == (b.win, b.death, b.reached_columns)


@pytest.mark.parametrize("start_row", range(7))
def test_run_invariants_on_a_mixed_grid(start_row):
    def counts(row, col):
        return (row * 5 + col * 3 + row * col) % 4

    initial = make_grid(12, counts)
    result = simulate_run(initial, start_row)
    if result.skipped:
        return

    _assert_adjacent(result.path)

    # tiles never upgrade
    for r, row in enumerate(result.grid):
        for c, tile in enumerate(row):
            assert TYPE_RANK[tile.type] <= TYPE_RANK[initial[r][c].type]

    # win iff the goal column was reached and the run did not end in death
    reached_goal = any(s.col == 11 for s in result.path)
    assert result.win == (reached_goal and not result.death)
    assert not (result.win and result.death)
    assert result.reached_columns == max(s.col for s in result.path) + 1


def test_estimate_reach_reports_unreachable_goal():
    grid = make_grid(4, lambda row, col: 3 if row == 0 and col <= 1 else 0)
    sim = TraversalSimulator(grid, 0)
    reach = sim.estimate_reach(sim.grid[0][1])
    assert reach.max_reach_col == 1
    assert reach.can_reach_goal is False


def test_estimate_reach_counts_steps_to_goal(solid_grid):
    sim = TraversalSimulator(solid_grid, 0)
    reach = sim.estimate_reach(sim.grid[3][0])
    assert reach.max_reach_col == 3
    assert reach.steps_to_goal == 3


def test_solid_tile_with_no_shallow_steps_collapses_on_second_visit(monkeypatch):
    monkeypatch.setattr(simulator, "SHALLOW_MAX_STEPS", 1)
    tile = Tile(0, 0, "2000-01-01", 5, SOLID)

    assert step_on_tile(tile) is False
    assert step_on_tile(tile) is True
    assert tile.type == LAVA
    assert tile.steps_left == 0
