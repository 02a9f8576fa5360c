from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import pygame

from game_types import Color
from layout import GridLayout, Padding, grid_layout, tile_rect
from models import SHALLOW, Grid, PaletteConfig, Step, Tile
from utils import apply_color_mode

HUD_PAD = 44
SIDE_PAD = 24


def _vertical_gradient_surface(
    size: Tuple[int, int], top: Color, bottom: Color
) -> pygame.Surface:
    """Create a vertical gradient surface from top to bottom."""
    w, h = size
    grad = pygame.Surface((w, h), pygame.SRCALPHA)

    def lerp(a: int, b: int, t: float) -> int:
        return int(a + (b - a) * t)

    for y in range(h):
        t = y / max(1, h - 1)
        color = (
            lerp(top[0], bottom[0], t),
            lerp(top[1], bottom[1], t),
            lerp(top[2], bottom[2], t),
        )
        grad.fill(color, pygame.Rect(0, y, w, 1))
    return grad


def _shade(color: Color, factor: float) -> Color:
    def clamp(v: int) -> int:
        return max(0, min(255, v))

    return (
        clamp(int(color[0] * factor)),
        clamp(int(color[1] * factor)),
        clamp(int(color[2] * factor)),
    )


def tile_color(tile: Tile, palette: PaletteConfig, color_mode: str) -> Color:
    """Palette color for a tile's current state."""
    return apply_color_mode(palette.for_type(tile.type, tile.steps_left), color_mode)


def draw_tile(
    surf: pygame.Surface,
    tile: Tile,
    rect: pygame.Rect,
    palette: PaletteConfig,
    render_mode: str,
    color_mode: str,
) -> None:
    """Draw a single tile colored by its type and wear."""
    color = tile_color(tile, palette, color_mode)
    if render_mode == "gradient":
        grad = _vertical_gradient_surface((rect.w, rect.h), _shade(color, 1.05), _shade(color, 0.55))
        surf.blit(grad, rect.topleft)
    else:
        radius = max(1, rect.w // 6)
        pygame.draw.rect(surf, color, rect, border_radius=radius)

    if tile.type == SHALLOW and tile.steps_left == 1:
        # one step left: mark the crack
        inset = max(2, rect.w // 4)
        crack = _shade(color, 0.5)
        pygame.draw.line(
            surf, crack, (rect.left + inset, rect.top + inset), (rect.right - inset, rect.bottom - inset), 2
        )


def draw_grid_tiles(
    surf: pygame.Surface,
    grid: Grid,
    layout: GridLayout,
    palette: PaletteConfig,
    render_mode: str,
    color_mode: str,
    show_grid: bool,
    grid_color: Color,
) -> None:
    """Draw every tile of a grid snapshot."""
    for row in grid:
        for tile in row:
            rect = tile_rect(layout, tile.row, tile.col)
            draw_tile(surf, tile, rect, palette, render_mode, color_mode)
            if show_grid:
                pygame.draw.rect(surf, grid_color, rect, width=1)


def draw_path(
    surf: pygame.Surface,
    path: Sequence[Step],
    layout: GridLayout,
    palette: PaletteConfig,
    color_mode: str,
) -> None:
    """Draw the path walked so far and the avatar on its last step."""
    if not path:
        return
    color = apply_color_mode(palette.path, color_mode)
    points = [tile_rect(layout, s.row, s.col).center for s in path]
    if len(points) > 1:
        pygame.draw.lines(surf, color, False, points, max(1, layout.tile_size // 8))

    avatar = apply_color_mode(palette.avatar, color_mode)
    radius = max(2, int(layout.tile_size * 0.33))
    pygame.draw.circle(surf, avatar, points[-1], radius)
    pygame.draw.circle(surf, (0, 0, 0), points[-1], radius, width=1)


def draw_hud(surf: pygame.Surface, hud_font: pygame.font.Font, text: str, color: Color) -> None:
    """Draw the top HUD bar."""
    bar_height = hud_font.get_height() + 12
    bar = pygame.Surface((surf.get_width(), bar_height), pygame.SRCALPHA)
    bar.fill((0, 0, 0, 230))
    surf.blit(bar, (0, 0))
    surf.blit(hud_font.render(text, True, color), (12, 6))


def draw_summary_overlay(
    surf: pygame.Surface,
    lines: List[str],
    title_font: pygame.font.Font,
    body_font: pygame.font.Font,
) -> Optional[pygame.Rect]:
    """Draw a modal panel listing the round summary; returns the panel rect."""
    if not lines:
        return None
    window_w, window_h = surf.get_size()

    dim = pygame.Surface((window_w, window_h), pygame.SRCALPHA)
    dim.fill((0, 0, 0, 200))
    surf.blit(dim, (0, 0))

    padding = 18
    line_gap = 4
    title, body = lines[0], lines[1:]
    body_h = sum(body_font.get_height() + line_gap for _ in body)
    panel_h = min(window_h - 20, padding * 2 + title_font.get_height() + 10 + body_h)
    widths = [title_font.size(title)[0]] + [body_font.size(line)[0] for line in body]
    panel_w = min(window_w - 20, max(widths) + padding * 2)
    panel_rect = pygame.Rect(0, 0, panel_w, panel_h)
    panel_rect.center = (window_w // 2, window_h // 2)

    pygame.draw.rect(surf, (0, 0, 0), panel_rect)
    pygame.draw.rect(surf, (255, 255, 255), panel_rect, width=2)

    cursor_y = panel_rect.y + padding
    title_surface = title_font.render(title, True, (255, 255, 255))
    surf.blit(title_surface, title_surface.get_rect(centerx=panel_rect.centerx, top=cursor_y))
    cursor_y += title_surface.get_height() + 10

    for line in body:
        line_surface = body_font.render(line, True, (255, 255, 255))
        surf.blit(line_surface, (panel_rect.x + padding, cursor_y))
        cursor_y += line_surface.get_height() + line_gap
    return panel_rect


class GridRenderer:
    """Draws grid snapshots, the avatar's path, the HUD and the round summary."""

    def __init__(
        self,
        window_w: int,
        window_h: int,
        hud_font: pygame.font.Font,
        title_font: pygame.font.Font,
    ) -> None:
        self.window_w = window_w
        self.window_h = window_h
        self.hud_font = hud_font
        self.title_font = title_font

    def update_window_size(self, window_w: int, window_h: int) -> None:
        self.window_w = window_w
        self.window_h = window_h

    def layout_for(self, cols: int, max_tile_size: int) -> GridLayout:
        padding = Padding(left=SIDE_PAD, right=SIDE_PAD, top=HUD_PAD, bottom=SIDE_PAD)
        return grid_layout(self.window_w, self.window_h, cols, padding, max_tile_size)

    def draw_frame(
        self,
        screen: pygame.Surface,
        bg: Color,
        grid: Grid,
        path: Sequence[Step],
        palette: PaletteConfig,
        hud_text: str,
        render_mode: str = "flat",
        color_mode: str = "multicolor",
        show_grid: bool = False,
        max_tile_size: int = 38,
        summary: Optional[List[str]] = None,
    ) -> GridLayout:
        """Draw a full frame onto screen without presenting it."""
        mode = render_mode if render_mode in ("flat", "gradient") else "flat"
        screen.fill(apply_color_mode(bg, color_mode))
        cols = len(grid[0]) if grid else 1
        layout = self.layout_for(cols, max_tile_size)
        grid_color = apply_color_mode((126, 126, 126), color_mode)
        draw_grid_tiles(screen, grid, layout, palette, mode, color_mode, show_grid, grid_color)
        draw_path(screen, path, layout, palette, color_mode)
        draw_hud(screen, self.hud_font, hud_text, apply_color_mode(palette.text, color_mode))
        if summary:
            draw_summary_overlay(screen, summary, self.title_font, self.hud_font)
        return layout

    def render_frame(self, screen: pygame.Surface, **kwargs) -> GridLayout:
        """Draw and present a full frame."""
        layout = self.draw_frame(screen, **kwargs)
        pygame.display.flip()
        return layout
