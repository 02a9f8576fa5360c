from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from game_types import Cell
from grid_builder import clone_grid, grid_width
from models import (
    GRID_ROWS,
    LAVA,
    MAX_BACKTRACK,
    SHALLOW,
    SHALLOW_MAX_STEPS,
    SOLID,
    SOLID_TO_SHALLOW_STEPS,
    Grid,
    RunResult,
    Step,
    Tile,
)

logger = logging.getLogger(__name__)

TYPE_BONUS = {SOLID: 4, SHALLOW: 1, LAVA: -10}
MIN_MOVE_CEILING = 30

_NEIGHBOR_OFFSETS = [
    (dr, dc) for dr in (-1, 0, 1) for dc in (-1, 0, 1) if (dr, dc) != (0, 0)
]


def step_on_tile(tile: Tile) -> bool:
    """Apply wear for the avatar landing on a tile.

    Returns:
        True if the tile collapsed into lava under the avatar (death).
    """
    tile.visits += 1
    if tile.type == SHALLOW:
        tile.steps_left -= 1
        if tile.steps_left <= 0:
            tile.type = LAVA
            tile.steps_left = 0
            return True
    elif tile.type == SOLID and tile.visits >= SOLID_TO_SHALLOW_STEPS:
        tile.type = SHALLOW
        tile.steps_left = SHALLOW_MAX_STEPS - 1
        if tile.steps_left <= 0:
            tile.type = LAVA
            tile.steps_left = 0
            return True
    return tile.type == LAVA


def move_ceiling(width: int) -> int:
    """Hard cap on path length for a grid of the given width."""
    return max(MIN_MOVE_CEILING, 10 * (width - 1))


@dataclass(frozen=True)
class Reach:
    max_reach_col: int
    steps_to_goal: float  # math.inf when the goal column is unreachable

    @property
    def can_reach_goal(self) -> bool:
        return not math.isinf(self.steps_to_goal)


class TraversalSimulator:
    """Greedy forward search with lookahead, wear and bounded backtracking for one attempt."""

    def __init__(self, grid: Grid, start_row: int, mutate_in_place: bool = False) -> None:
        self.grid = grid if mutate_in_place else clone_grid(grid)
        self.start_row = start_row
        self.width = grid_width(self.grid)
        self.goal_col = self.width - 1
        self.max_moves = move_ceiling(self.width)

        self.path: List[Step] = []
        self.frames: List[Grid] = []
        self.stack: List[Tile] = []
        self.in_path: Set[Cell] = set()
        self.tried: Dict[Cell, Set[Cell]] = {}
        self.visited: Dict[Cell, int] = {}
        self.reached = 0

    # ----------------------------
    # Tile helpers
    # ----------------------------

    @staticmethod
    def _key(tile: Tile) -> Cell:
        return (tile.row, tile.col)

    def _tile_at(self, row: int, col: int) -> Optional[Tile]:
        if row < 0 or row >= GRID_ROWS:
            return None
        if col < 0 or col > self.goal_col:
            return None
        return self.grid[row][col]

    def _passable_neighbors(self, tile: Tile) -> List[Tile]:
        """Walkable king-move neighbors inside the backtrack window, off the active path."""
        out: List[Tile] = []
        for dr, dc in _NEIGHBOR_OFFSETS:
            nxt = self._tile_at(tile.row + dr, tile.col + dc)
            if nxt is None:
                continue
            if nxt.col < self.reached - MAX_BACKTRACK:
                continue
            if not nxt.walkable:
                continue
            if self._key(nxt) in self.in_path:
                continue
            out.append(nxt)
        return out

    def _was_tried(self, src: Tile, dst: Tile) -> bool:
        return self._key(dst) in self.tried.get(self._key(src), set())

    def _mark_tried(self, src: Tile, dst: Tile) -> None:
        self.tried.setdefault(self._key(src), set()).add(self._key(dst))

    def collect_candidates(self, current: Tile) -> List[Tile]:
        return [t for t in self._passable_neighbors(current) if not self._was_tried(current, t)]

    # ----------------------------
    # Ranking
    # ----------------------------

    def estimate_reach(self, origin: Tile) -> Reach:
        """Breadth-first flood from origin over walkable tiles off the active path."""
        queue = [(origin, 0)]
        seen: Set[Cell] = {self._key(origin)}
        max_reach_col = origin.col
        steps_to_goal: float = math.inf
        head = 0
        while head < len(queue):
            tile, steps = queue[head]
            head += 1
            if tile.col > max_reach_col:
                max_reach_col = tile.col
            if tile.col == self.goal_col and steps < steps_to_goal:
                steps_to_goal = steps
            for nxt in self._passable_neighbors(tile):
                key = self._key(nxt)
                if key in seen:
                    continue
                seen.add(key)
                queue.append((nxt, steps + 1))
        return Reach(max_reach_col=max_reach_col, steps_to_goal=steps_to_goal)

    @staticmethod
    def heuristic(tile: Tile, times_visited: int, col_delta: int, reach: Reach) -> float:
        reach_score = reach.max_reach_col * 12
        if reach.can_reach_goal:
            reach_score += 120 - reach.steps_to_goal
        return (
            tile.col * 10
            + TYPE_BONUS.get(tile.type, 0)
            + col_delta * 6
            - times_visited * 2
            + reach_score
        )

    def rank_candidates(self, current: Tile, candidates: List[Tile]) -> List[Tile]:
        """Order candidates best-first; ties keep neighbor enumeration order."""
        reaches = {self._key(t): self.estimate_reach(t) for t in candidates}

        def sort_key(tile: Tile):
            reach = reaches[self._key(tile)]
            score = self.heuristic(
                tile,
                self.visited.get(self._key(tile), 0),
                tile.col - current.col,
                reach,
            )
            return (not reach.can_reach_goal, -reach.max_reach_col, -score, -tile.count)

        return sorted(candidates, key=sort_key)

    # ----------------------------
    # Run state
    # ----------------------------

    def _enter(self, tile: Tile) -> bool:
        """Land on a tile: count the visit, apply wear, record the step and a frame."""
        key = self._key(tile)
        self.visited[key] = self.visited.get(key, 0) + 1
        died = step_on_tile(tile)
        self.path.append(Step(tile.row, tile.col))
        self.frames.append(clone_grid(self.grid))
        if tile.col > self.reached:
            self.reached = tile.col
        return died

    def _result(self, win: bool = False, death: bool = False) -> RunResult:
        return RunResult(
            path=self.path,
            win=win,
            death=death,
            reached_columns=self.reached + 1,
            grid=self.grid,
            frames=self.frames,
            death_index=len(self.path) - 1 if death else None,
        )

    def _skipped(self) -> RunResult:
        return RunResult(
            path=[],
            win=False,
            death=False,
            reached_columns=0,
            grid=self.grid,
            frames=[],
            skipped=True,
        )

    def run(self) -> RunResult:
        start = self._tile_at(self.start_row, 0)
        if start is None or start.type == LAVA:
            logger.debug("row %s starts on lava, attempt skipped", self.start_row)
            return self._skipped()

        current = start
        self.reached = current.col
        if self._enter(current):
            logger.debug("start tile (%s, 0) collapsed on entry", self.start_row)
            return self._result(death=True)
        self.stack.append(current)
        self.in_path.add(self._key(current))

        while len(self.path) < self.max_moves:
            if current.col == self.goal_col:
                logger.debug("row %s reached the goal in %d steps", self.start_row, len(self.path))
                return self._result(win=True)

            candidates = self.collect_candidates(current)
            if not candidates:
                if len(self.stack) == 1:
                    logger.debug("stuck at start (%s, %s)", current.row, current.col)
                    return self._result(death=True)
                target = self.stack[-2]
                if target.col < self.reached - MAX_BACKTRACK:
                    logger.debug("backtrack to column %s is out of reach", target.col)
                    return self._result(death=True)
                dead_end = self.stack.pop()
                self.in_path.discard(self._key(dead_end))
                current = target
                logger.debug("backtrack to (%s, %s)", current.row, current.col)
                if self._enter(current):
                    logger.debug("tile (%s, %s) collapsed on backtrack", current.row, current.col)
                    return self._result(death=True)
                continue

            nxt = self.rank_candidates(current, candidates)[0]
            self._mark_tried(current, nxt)
            current = nxt
            self.stack.append(current)
            self.in_path.add(self._key(current))
            if self._enter(current):
                logger.debug("tile (%s, %s) collapsed under the avatar", current.row, current.col)
                return self._result(death=True)

        logger.debug("row %s hit the move ceiling (%d)", self.start_row, self.max_moves)
        return self._result(death=True)


def simulate_run(grid: Grid, start_row: int, mutate_in_place: bool = False) -> RunResult:
    """Run one attempt from (start_row, 0).

    Args:
        grid: Game grid built by build_game_grid.
        start_row: Row 0..6 to start on.
        mutate_in_place: When True, wear persists on the caller's grid so that
            chained attempts observe earlier decay. Otherwise a private copy is used.

    Returns:
        The attempt's RunResult.
    """
    return TraversalSimulator(grid, start_row, mutate_in_place=mutate_in_place).run()
