from __future__ import annotations

from datetime import date
from typing import List, Optional

from contributions import parse_iso_date, today_utc
from models import (
    GRID_ROWS,
    LAVA,
    SHALLOW,
    SHALLOW_MAX_STEPS,
    SOLID,
    Grid,
    RawGrid,
    RawTile,
    Tile,
)


class InvalidGrid(ValueError):
    """Raised when a raw grid does not have 7 equally wide, non-empty rows."""


def validate_raw_grid(raw_grid: RawGrid) -> int:
    """Check the grid shape and return its width (number of columns).

    Raises:
        InvalidGrid: If the row count is not 7, a row is empty, or rows differ in width.
    """
    if len(raw_grid) != GRID_ROWS:
        raise InvalidGrid(f"Grid must have {GRID_ROWS} rows, got {len(raw_grid)}.")
    width = len(raw_grid[0])
    for idx, row in enumerate(raw_grid):
        if len(row) < 1:
            raise InvalidGrid(f"Grid row {idx} has no columns.")
        if len(row) != width:
            raise InvalidGrid(
                f"Grid row {idx} has {len(row)} columns, expected {width}."
            )
    return width


def tile_type_for(raw: RawTile, goal_col: int, today: date) -> str:
    """Classify one raw tile (future dates are lava, even in the goal column)."""
    if parse_iso_date(raw.date) > today:
        return LAVA
    if raw.col == goal_col:
        return SOLID
    if raw.count >= 3:
        return SOLID
    if raw.count >= 1:
        return SHALLOW
    return LAVA


def build_game_grid(raw_grid: RawGrid, today: Optional[date] = None) -> Grid:
    """Convert raw contribution tiles into a fresh grid of stateful tiles.

    Args:
        raw_grid: 7 rows of RawTile, one column per week.
        today: Reference UTC date for future masking (defaults to the current UTC date).

    Returns:
        A new grid; the input is left untouched.

    Raises:
        InvalidGrid: If the raw grid is malformed.
    """
    width = validate_raw_grid(raw_grid)
    ref = today if today is not None else today_utc()
    goal_col = width - 1

    grid: Grid = []
    for row in raw_grid:
        out: List[Tile] = []
        for raw in row:
            tile_type = tile_type_for(raw, goal_col, ref)
            out.append(
                Tile(
                    row=raw.row,
                    col=raw.col,
                    date=raw.date,
                    count=raw.count,
                    type=tile_type,
                    steps_left=SHALLOW_MAX_STEPS if tile_type == SHALLOW else 0,
                    visits=0,
                )
            )
        grid.append(out)
    return grid


def clone_grid(grid: Grid) -> Grid:
    """Deep copy a grid (tiles are copied, not shared)."""
    return [[tile.copy() for tile in row] for row in grid]


def grid_width(grid: Grid) -> int:
    return len(grid[0]) if grid else 0
