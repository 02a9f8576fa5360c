from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pygame

from models import GRID_ROWS


@dataclass(frozen=True)
class Padding:
    left: int = 0
    right: int = 0
    top: int = 0
    bottom: int = 0


@dataclass(frozen=True)
class GridLayout:
    tile_size: int
    gap: int
    offset_x: int
    offset_y: int
    cols: int


def _gap_for(tile_size: int) -> int:
    return max(1, int(tile_size * 0.15))


def grid_layout(
    window_w: int,
    window_h: int,
    cols: int,
    padding: Optional[Padding] = None,
    max_tile_size: int = 38,
) -> GridLayout:
    """Fit a 7 x cols tile grid (with gaps) into the padded window, centered."""
    pad = padding or Padding()
    cols = max(1, cols)
    avail_w = window_w - pad.left - pad.right
    avail_h = window_h - pad.top - pad.bottom

    tile_size = min(max_tile_size, int(min(avail_w / cols, avail_h / GRID_ROWS)))
    gap = _gap_for(tile_size)
    while tile_size > 2:
        total_w = cols * tile_size + (cols - 1) * gap
        total_h = GRID_ROWS * tile_size + (GRID_ROWS - 1) * gap
        if total_w <= avail_w and total_h <= avail_h:
            break
        tile_size -= 1
        gap = _gap_for(tile_size)
    tile_size = max(2, tile_size)

    total_w = cols * tile_size + (cols - 1) * gap
    total_h = GRID_ROWS * tile_size + (GRID_ROWS - 1) * gap
    offset_x = int(pad.left + max(0, avail_w - total_w) // 2)
    offset_y = int(pad.top + max(0, avail_h - total_h) // 2)
    return GridLayout(tile_size=tile_size, gap=gap, offset_x=offset_x, offset_y=offset_y, cols=cols)


def tile_rect(layout: GridLayout, row: int, col: int) -> pygame.Rect:
    """Screen rect of the tile at (row, col)."""
    step = layout.tile_size + layout.gap
    return pygame.Rect(
        layout.offset_x + col * step,
        layout.offset_y + row * step,
        layout.tile_size,
        layout.tile_size,
    )
