from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from contributions import parse_iso_date
from models import (
    MAX_WEEKS,
    GameConfig,
    PaletteConfig,
    RenderConfig,
    RoundConfig,
    WindowConfig,
)
from utils import as_int, clamp_int


def _parse_optional_date(raw: Any) -> Optional[str]:
    """Return the ISO string if raw is a valid date, else None."""
    if not isinstance(raw, str):
        return None
    try:
        parse_iso_date(raw.strip())
    except ValueError:
        return None
    return raw.strip()


def _parse_optional_year(raw: Any) -> Optional[int]:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        year = int(raw)
    except (TypeError, ValueError):
        return None
    return year if 1970 <= year <= 9999 else None


def _parse_weeks(raw: Any) -> int:
    return clamp_int(as_int(raw, 12), 1, MAX_WEEKS)


def parse_game_config(raw: Dict[str, Any]) -> GameConfig:
    """Parse the top-level game settings from config data.

    Args:
        raw: Decoded config.json contents.

    Returns:
        GameConfig with defaults applied to missing or malformed values.
    """
    if not isinstance(raw, dict):
        raw = {}
    return GameConfig(
        contributions_file=str(raw.get("contributions_file", "contributions.json")),
        username=str(raw.get("username", "anonymous")).strip() or "anonymous",
        start_week=_parse_optional_date(raw.get("start_week")),
        year=_parse_optional_year(raw.get("year")),
        weeks=_parse_weeks(raw.get("weeks", 12)),
        today=_parse_optional_date(raw.get("today")),
        scoreboard_file=str(raw.get("scoreboard_file", "scoreboard.txt")),
        round=RoundConfig.from_dict(raw.get("round", {})),
        window=WindowConfig.from_dict(raw.get("window", {})),
        render=RenderConfig.from_dict(raw.get("render", {})),
        palette=PaletteConfig.from_dict(raw.get("palette", {})),
    )


def reference_today(cfg: GameConfig) -> Optional[date]:
    """The configured 'today' override as a date, or None for the real UTC date."""
    return parse_iso_date(cfg.today) if cfg.today else None
