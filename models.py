from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, List, Optional

from game_types import Color
from utils import as_color, as_int, clamp_int

LAVA = "lava"
SHALLOW = "shallow"
SOLID = "solid"

GRID_ROWS = 7
SHALLOW_MAX_STEPS = 2
SOLID_TO_SHALLOW_STEPS = 2
MAX_BACKTRACK = 3
MAX_WEEKS = 52
HARD_MODE_BONUS = 200


@dataclass(frozen=True)
class RawTile:
    row: int
    col: int
    date: str  # ISO calendar date
    count: int


@dataclass
class Tile:
    row: int
    col: int
    date: str
    count: int
    type: str  # lava|shallow|solid
    steps_left: int = 0
    visits: int = 0

    @property
    def walkable(self) -> bool:
        if self.type == LAVA:
            return False
        if self.type == SHALLOW and self.steps_left <= 0:
            return False
        return True

    def copy(self) -> "Tile":
        return replace(self)


Grid = List[List[Tile]]
RawGrid = List[List[RawTile]]


@dataclass(frozen=True)
class Step:
    row: int
    col: int


@dataclass
class RunResult:
    """Outcome of one simulated attempt, owned by the caller once returned."""

    path: List[Step]
    win: bool
    death: bool
    reached_columns: int
    grid: Grid
    frames: List[Grid] = field(default_factory=list)
    death_index: Optional[int] = None
    skipped: bool = False


@dataclass
class ScoreBreakdown:
    base: int = 0
    progress: int = 0
    win_bonus: int = 0
    death_penalty: int = 0
    jump_bonus: int = 0
    hard_mode_bonus: int = 0

    @property
    def total(self) -> int:
        return (
            self.base
            + self.progress
            + self.win_bonus
            + self.death_penalty
            + self.jump_bonus
            + self.hard_mode_bonus
        )


@dataclass
class AttemptScore:
    attempt: int
    start_row: int
    total: int
    breakdown: ScoreBreakdown
    win: bool
    death: bool
    reached_columns: int
    skipped: bool = False


# ----------------------------
# Configuration
# ----------------------------


@dataclass(frozen=True)
class RoundConfig:
    attempts: int
    hard_mode: bool
    hard_mode_bonus: int

    @staticmethod
    def from_dict(raw: Any) -> "RoundConfig":
        if not isinstance(raw, dict):
            raw = {}
        return RoundConfig(
            attempts=clamp_int(as_int(raw.get("attempts"), GRID_ROWS), 1, GRID_ROWS),
            hard_mode=bool(raw.get("hard_mode", False)),
            hard_mode_bonus=max(0, as_int(raw.get("hard_mode_bonus"), HARD_MODE_BONUS)),
        )


@dataclass(frozen=True)
class PaletteConfig:
    lava: Color
    shallow: Color
    shallow_worn: Color
    solid: Color
    path: Color
    avatar: Color
    text: Color

    @staticmethod
    def from_dict(raw: Any) -> "PaletteConfig":
        if not isinstance(raw, dict):
            raw = {}
        return PaletteConfig(
            lava=as_color(raw.get("lava"), (214, 64, 36)),
            shallow=as_color(raw.get("shallow"), (64, 160, 96)),
            shallow_worn=as_color(raw.get("shallow_worn"), (150, 120, 60)),
            solid=as_color(raw.get("solid"), (32, 110, 58)),
            path=as_color(raw.get("path"), (250, 220, 90)),
            avatar=as_color(raw.get("avatar"), (235, 240, 255)),
            text=as_color(raw.get("text"), (230, 235, 240)),
        )

    def for_type(self, tile_type: str, steps_left: int = 0) -> Color:
        if tile_type == SOLID:
            return self.solid
        if tile_type == SHALLOW:
            return self.shallow if steps_left >= SHALLOW_MAX_STEPS else self.shallow_worn
        return self.lava


@dataclass(frozen=True)
class RenderConfig:
    enabled: bool
    step_ms: int
    mode: str  # flat|gradient
    color_mode: str  # multicolor|gray
    show_grid: bool
    max_tile_size: int

    @staticmethod
    def from_dict(raw: Any) -> "RenderConfig":
        if not isinstance(raw, dict):
            raw = {}
        mode = str(raw.get("mode", "flat")).lower()
        if mode not in ("flat", "gradient"):
            mode = "flat"
        color_mode = str(raw.get("color", "multicolor")).lower()
        if color_mode not in ("multicolor", "gray"):
            color_mode = "multicolor"
        return RenderConfig(
            enabled=bool(raw.get("enabled", True)),
            step_ms=clamp_int(as_int(raw.get("step_ms"), 260), 10, 5000),
            mode=mode,
            color_mode=color_mode,
            show_grid=bool(raw.get("show_grid", False)),
            max_tile_size=clamp_int(as_int(raw.get("max_tile_size"), 38), 4, 128),
        )


@dataclass(frozen=True)
class WindowConfig:
    width: int
    height: int
    title: str
    bg: Color
    fullscreen: bool

    @staticmethod
    def from_dict(raw: Any) -> "WindowConfig":
        if not isinstance(raw, dict):
            raw = {}
        return WindowConfig(
            width=clamp_int(as_int(raw.get("width"), 1000), 200, 8000),
            height=clamp_int(as_int(raw.get("height"), 420), 150, 8000),
            title=str(raw.get("title", "Zero Commits Are Lava")),
            bg=as_color(raw.get("bg"), (14, 17, 23)),
            fullscreen=bool(raw.get("fullscreen", False)),
        )


@dataclass(frozen=True)
class GameConfig:
    contributions_file: str
    username: str
    start_week: Optional[str]
    year: Optional[int]
    weeks: int
    today: Optional[str]
    scoreboard_file: str
    round: RoundConfig
    window: WindowConfig
    render: RenderConfig
    palette: PaletteConfig
