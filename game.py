from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

import pygame

from config_io import load_json_config
from config_parsing import parse_game_config, reference_today
from contributions import (
    build_raw_grid,
    format_iso_date,
    latest_range,
    load_contribution_days,
    max_weeks_for_start,
    parse_iso_date,
    today_utc,
    year_range,
)
from game_round import DAY_NAMES, RoundResult, play_round
from grid_builder import build_game_grid
from models import GameConfig, Grid, RawGrid, Step
from rendering import GridRenderer
from scoreboard import ScoreboardFile, ScoreEntry, now_iso
from utils import deep_merge

logger = logging.getLogger(__name__)


class PlaybackState:
    """Replay cursor over a round: one attempt at a time, one frame per step."""

    def __init__(self, round_result: RoundResult, step_ms: int) -> None:
        self.round = round_result
        self.step_ms = max(1, step_ms)
        self.restart()

    def restart(self) -> None:
        self.attempt = 0
        self.frame = 0
        self.elapsed_ms = 0
        self.paused = False
        self.finished = False

    @property
    def attempt_count(self) -> int:
        return len(self.round.results)

    def _frame_count(self, attempt: int) -> int:
        # skipped attempts show the untouched grid for one step
        return max(1, len(self.round.results[attempt].frames))

    def toggle_pause(self) -> None:
        self.paused = not self.paused

    def next_attempt(self) -> None:
        if self.attempt + 1 >= self.attempt_count:
            self.finished = True
            self.frame = self._frame_count(self.attempt) - 1
            return
        self.attempt += 1
        self.frame = 0
        self.elapsed_ms = 0

    def advance(self, dt_ms: int) -> None:
        """Move the cursor forward by dt_ms of playback time."""
        if self.paused or self.finished:
            return
        self.elapsed_ms += dt_ms
        while self.elapsed_ms >= self.step_ms and not self.finished:
            self.elapsed_ms -= self.step_ms
            if self.frame + 1 < self._frame_count(self.attempt):
                self.frame += 1
            else:
                self.next_attempt()

    def current_grid(self, fallback: Grid) -> Grid:
        frames = self.round.results[self.attempt].frames
        if frames:
            return frames[min(self.frame, len(frames) - 1)]
        if self.round.hard_mode:
            # the shared grid as the previous attempts left it
            for earlier in reversed(self.round.results[: self.attempt]):
                if earlier.frames:
                    return earlier.frames[-1]
        return fallback

    def current_path(self) -> List[Step]:
        result = self.round.results[self.attempt]
        return result.path[: self.frame + 1] if result.path else []

    def hud_text(self) -> str:
        score = self.round.scores[self.attempt]
        day = DAY_NAMES[self.attempt % len(DAY_NAMES)]
        label = f"Attempt #{self.attempt + 1} ({day})"
        if score.skipped:
            return f"{label} skipped (lava start)"
        status = ""
        if self.frame >= self._frame_count(self.attempt) - 1:
            status = " - crossed!" if score.win else " - fell in the lava" if score.death else ""
        pause = " [paused]" if self.paused else ""
        return f"{label} step {self.frame + 1}/{self._frame_count(self.attempt)}{status}{pause}"


class Game:
    """Top-level orchestration: load data, play a round, record and replay it."""

    def __init__(
        self,
        cfg_path: Path,
        overrides: Optional[Dict[str, Any]] = None,
        headless: bool = False,
    ) -> None:
        raw_cfg = load_json_config(cfg_path)
        if not isinstance(raw_cfg, dict):
            raw_cfg = {}
        self.base_dir = cfg_path.parent
        self.raw_cfg = deep_merge(raw_cfg, overrides or {})
        self.cfg: GameConfig = parse_game_config(self.raw_cfg)
        self.headless = headless or not self.cfg.render.enabled
        self.hard_mode = self.cfg.round.hard_mode
        self.color_mode = self.cfg.render.color_mode

        self.today: date = reference_today(self.cfg) or today_utc()
        self.start_week, self.weeks = self._resolve_range()
        days = load_contribution_days(self._resolve_path(self.cfg.contributions_file))
        self.raw_grid: RawGrid = build_raw_grid(days, self.start_week, self.weeks)
        self.scoreboard = ScoreboardFile(self._resolve_path(self.cfg.scoreboard_file))

        self.round: RoundResult = self.play()

    # ----------------------------
    # Setup
    # ----------------------------

    def _resolve_path(self, value: str) -> Path:
        p = Path(value)
        return p if p.is_absolute() else self.base_dir / p

    def _resolve_range(self) -> tuple[date, int]:
        """Pick (start_week, weeks) from explicit start, year, or the latest weeks."""
        if self.cfg.start_week:
            start = parse_iso_date(self.cfg.start_week)
            weeks = min(self.cfg.weeks, max_weeks_for_start(start, self.today))
            if weeks > 0:
                if weeks < self.cfg.weeks:
                    logger.info("only %d whole weeks from %s up to today", weeks, start)
                return start, weeks
            logger.warning("no whole week between %s and today; using the latest weeks", start)
            return latest_range(self.cfg.weeks, self.today), self.cfg.weeks
        if self.cfg.year is not None:
            return year_range(self.cfg.year, self.today)
        return latest_range(self.cfg.weeks, self.today), self.cfg.weeks

    # ----------------------------
    # Round
    # ----------------------------

    def play(self) -> RoundResult:
        """Compute every attempt of a round, then log and record the best one."""
        result = play_round(
            self.raw_grid,
            self.weeks,
            attempts=self.cfg.round.attempts,
            hard_mode=self.hard_mode,
            hard_mode_bonus=self.cfg.round.hard_mode_bonus,
            today=self.today,
        )
        for line in result.summary_lines():
            logger.info(line)
        self.scoreboard.append(
            ScoreEntry(
                timestamp=now_iso(),
                username=self.cfg.username,
                start_week=format_iso_date(self.start_week),
                weeks=self.weeks,
                score=result.best.total,
                win=result.best.win,
                hard_mode=self.hard_mode,
            )
        )
        return result

    def toggle_hard_mode(self) -> None:
        self.hard_mode = not self.hard_mode
        logger.info("hard mode %s", "on" if self.hard_mode else "off")
        self.round = self.play()
        self.playback = PlaybackState(self.round, self.cfg.render.step_ms)

    # ----------------------------
    # Window
    # ----------------------------

    def _init_pygame(self) -> None:
        pygame.init()
        self.window_w = self.cfg.window.width
        self.window_h = self.cfg.window.height
        self.windowed_size = (self.window_w, self.window_h)
        self.fullscreen = self.cfg.window.fullscreen
        self._apply_display_mode()
        self.clock = pygame.time.Clock()
        hud_font = pygame.font.SysFont("monospace", 18)
        title_font = pygame.font.SysFont("monospace", 24, bold=True)
        self.renderer = GridRenderer(self.window_w, self.window_h, hud_font, title_font)

    def _apply_display_mode(self) -> None:
        flags = pygame.FULLSCREEN if self.fullscreen else 0
        self.screen = pygame.display.set_mode((self.window_w, self.window_h), flags)
        self.window_w, self.window_h = self.screen.get_size()
        if hasattr(self, "renderer"):
            self.renderer.update_window_size(self.window_w, self.window_h)
        pygame.display.set_caption(self.cfg.window.title)

    def _toggle_fullscreen(self) -> None:
        self.fullscreen = not self.fullscreen
        if self.fullscreen:
            self.windowed_size = (self.window_w, self.window_h)
            info = pygame.display.Info()
            self.window_w = info.current_w
            self.window_h = info.current_h
        else:
            self.window_w, self.window_h = self.windowed_size
        self._apply_display_mode()

    def _handle_keydown(self, key: int) -> bool:
        """Handle KEYDOWN events.

        Returns:
            False if the replay should exit, True otherwise.
        """
        if key == pygame.K_ESCAPE:
            return False
        if key == pygame.K_SPACE:
            self.playback.toggle_pause()
        if key == pygame.K_n:
            self.playback.next_attempt()
        if key == pygame.K_r:
            self.playback.restart()
        if key == pygame.K_h:
            self.toggle_hard_mode()
        if key == pygame.K_c:
            self.color_mode = "gray" if self.color_mode == "multicolor" else "multicolor"
        if key in (pygame.K_F11, pygame.K_f):
            self._toggle_fullscreen()
        return True

    def _handle_events(self) -> bool:
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                return False
            if e.type == pygame.KEYDOWN and not self._handle_keydown(e.key):
                return False
        return True

    def _draw(self) -> None:
        summary = self.round.summary_lines() if self.playback.finished else None
        self.renderer.render_frame(
            self.screen,
            bg=self.cfg.window.bg,
            grid=self.playback.current_grid(self.fresh_grid),
            path=self.playback.current_path(),
            palette=self.cfg.palette,
            hud_text=self.playback.hud_text() + " | SPACE pause  N next  R replay  H hard  ESC quit",
            render_mode=self.cfg.render.mode,
            color_mode=self.color_mode,
            show_grid=self.cfg.render.show_grid,
            max_tile_size=self.cfg.render.max_tile_size,
            summary=summary,
        )

    def run(self) -> RoundResult:
        """Replay the computed round in a window (no-op when headless)."""
        if self.headless:
            return self.round
        self._init_pygame()
        self.fresh_grid = build_game_grid(self.raw_grid, today=self.today)
        self.playback = PlaybackState(self.round, self.cfg.render.step_ms)
        running = True
        while running:
            dt_ms = self.clock.tick(60)
            running = self._handle_events()
            self.playback.advance(dt_ms)
            self._draw()
        pygame.quit()
        return self.round
