import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import pygame  # noqa: E402
import pytest  # noqa: E402

from conftest import make_grid  # noqa: E402
from layout import GridLayout, Padding, grid_layout, tile_rect  # noqa: E402
from models import GRID_ROWS, PaletteConfig, Step  # noqa: E402
from rendering import GridRenderer, draw_summary_overlay, tile_color  # noqa: E402
from utils import apply_color_mode  # noqa: E402


@pytest.fixture(scope="module")
def font():
    pygame.font.init()
    yield pygame.font.Font(None, 18)
    pygame.font.quit()


@pytest.fixture
def palette():
    return PaletteConfig.from_dict({})


def test_layout_caps_tile_size():
    layout = grid_layout(2000, 2000, 4, max_tile_size=38)
    assert layout.tile_size == 38
    assert layout.gap == 5


@pytest.mark.parametrize("cols", [1, 12, 52])
def test_layout_fits_inside_the_padded_window(cols):
    pad = Padding(left=24, right=24, top=44, bottom=24)
    layout = grid_layout(1000, 420, cols, pad)

    first = tile_rect(layout, 0, 0)
    last = tile_rect(layout, GRID_ROWS - 1, cols - 1)
    assert first.left >= pad.left
    assert first.top >= pad.top
    assert last.right <= 1000 - pad.right
    assert last.bottom <= 420 - pad.bottom


def test_tile_rect_steps_by_tile_and_gap():
    layout = GridLayout(tile_size=10, gap=2, offset_x=5, offset_y=7, cols=3)
    assert tile_rect(layout, 1, 2) == pygame.Rect(5 + 24, 7 + 12, 10, 10)


def test_tile_color_follows_type_and_color_mode(palette):
    grid = make_grid(3, lambda _r, col: [0, 1, 3][col])
    assert tile_color(grid[0][0], palette, "multicolor") == palette.lava
    assert tile_color(grid[0][1], palette, "multicolor") == palette.shallow
    assert tile_color(grid[0][2], palette, "gray") == apply_color_mode(palette.solid, "gray")


def test_draw_frame_paints_tiles(font, palette):
    grid = make_grid(4, lambda _r, col: 0 if col == 1 else 4)
    screen = pygame.Surface((800, 400))
    renderer = GridRenderer(800, 400, font, font)

    layout = renderer.draw_frame(
        screen,
        bg=(0, 0, 0),
        grid=grid,
        path=[Step(6, 0)],
        palette=palette,
        hud_text="Attempt #1",
    )

    lava_center = tile_rect(layout, 5, 1).center
    assert tuple(screen.get_at(lava_center))[:3] == palette.lava
    avatar_center = tile_rect(layout, 6, 0).center
    assert tuple(screen.get_at(avatar_center))[:3] == palette.avatar


def test_draw_frame_in_gray(font, palette):
    grid = make_grid(2, lambda _r, _c: 4)
    screen = pygame.Surface((400, 300))
    layout = GridRenderer(400, 300, font, font).draw_frame(
        screen,
        bg=(0, 0, 0),
        grid=grid,
        path=[],
        palette=palette,
        hud_text="",
        color_mode="gray",
        render_mode="unknown",
    )
    r, g, b = tuple(screen.get_at(tile_rect(layout, 4, 1).center))[:3]
    assert r == g == b


def test_summary_overlay_is_centered(font):
    screen = pygame.Surface((600, 400))
    rect = draw_summary_overlay(screen, ["Best attempt: #1 (Sunday)", "Score: 2000"], font, font)
    assert rect is not None
    assert rect.center == (300, 200)
    assert draw_summary_overlay(screen, [], font, font) is None
