"""
Shared pytest fixtures and grid helpers.

Raw grids use consecutive dates starting 2000-01-01 so that every tile is in
the past relative to the fixed reference date TODAY.
"""

import os
import sys
from datetime import date, timedelta

import pytest

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _project_root)

from models import GRID_ROWS, RawTile  # noqa: E402
from grid_builder import build_game_grid  # noqa: E402

TODAY = date(2026, 1, 1)


def make_raw_grid(cols, count_for, start=date(2000, 1, 1)):
    """Build a 7 x cols raw grid; count_for(row, col) gives each count."""
    return [
        [
            RawTile(
                row=row,
                col=col,
                date=(start + timedelta(days=row * cols + col)).isoformat(),
                count=count_for(row, col),
            )
            for col in range(cols)
        ]
        for row in range(GRID_ROWS)
    ]


def make_grid(cols, count_for):
    return build_game_grid(make_raw_grid(cols, count_for), today=TODAY)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def solid_grid():
    """4 columns, every tile solid."""
    return make_grid(4, lambda _r, _c: 4)
