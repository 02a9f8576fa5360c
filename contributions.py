from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from config_io import load_json_config
from models import GRID_ROWS, MAX_WEEKS, RawGrid, RawTile

logger = logging.getLogger(__name__)

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class ContributionDay:
    date: str
    count: int


def parse_iso_date(value: str) -> date:
    """Parse a YYYY-MM-DD string.

    Raises:
        ValueError: If the value is not a valid ISO calendar date.
    """
    if not isinstance(value, str) or not ISO_DATE_RE.match(value):
        raise ValueError(f"Not an ISO date (YYYY-MM-DD): {value!r}")
    return date.fromisoformat(value)


def format_iso_date(value: date) -> str:
    return value.isoformat()


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def week_start(value: date) -> date:
    """Return the Sunday that starts the week containing value."""
    # date.weekday(): Monday=0 .. Sunday=6
    return value - timedelta(days=(value.weekday() + 1) % DAYS_PER_WEEK)


def weekday_row(value: date) -> int:
    """Grid row for a date: Sunday=0 .. Saturday=6."""
    return (value.weekday() + 1) % DAYS_PER_WEEK


def validate_weeks(weeks: int) -> int:
    if not isinstance(weeks, int) or isinstance(weeks, bool):
        raise ValueError(f"weeks must be an integer, got {weeks!r}")
    if weeks < 1 or weeks > MAX_WEEKS:
        raise ValueError(f"weeks must be between 1 and {MAX_WEEKS}, got {weeks}")
    return weeks


def list_date_range(start: date, end: date) -> List[date]:
    """Every calendar date from start to end, inclusive."""
    out: List[date] = []
    cursor = start
    while cursor <= end:
        out.append(cursor)
        cursor += timedelta(days=1)
    return out


def build_range(start_week: date, weeks: int) -> Tuple[date, date]:
    """Return (from, to) covering `weeks` whole weeks from start_week's Sunday."""
    validate_weeks(weeks)
    start = week_start(start_week)
    return start, start + timedelta(days=weeks * DAYS_PER_WEEK - 1)


def max_weeks_for_start(start_week: date, today: Optional[date] = None) -> int:
    """Number of whole weeks available between start_week and today (capped at 52)."""
    ref = today if today is not None else today_utc()
    diff_days = (ref - week_start(start_week)).days + 1
    return max(0, min(MAX_WEEKS, diff_days // DAYS_PER_WEEK))


def year_range(year: int, today: Optional[date] = None) -> Tuple[date, int]:
    """Return (start_week, weeks) for a calendar year.

    The current year only counts whole weeks up to today; past years round up
    so the last days of December are included.
    """
    ref = today if today is not None else today_utc()
    start = week_start(date(year, 1, 1))
    end = ref if year == ref.year else date(year, 12, 31)
    days = (end - start).days + 1
    if year == ref.year:
        weeks = min(MAX_WEEKS, days // DAYS_PER_WEEK)
    else:
        weeks = min(MAX_WEEKS, -(-days // DAYS_PER_WEEK))
    return start, max(1, weeks)


def latest_range(weeks: int, today: Optional[date] = None) -> date:
    """Start week such that `weeks` weeks end with the week containing today."""
    validate_weeks(weeks)
    ref = today if today is not None else today_utc()
    return week_start(ref) - timedelta(days=(weeks - 1) * DAYS_PER_WEEK)


def _parse_day(raw: Any) -> Optional[ContributionDay]:
    if not isinstance(raw, dict):
        return None
    value = raw.get("date")
    try:
        parse_iso_date(value)
        count = int(raw.get("count", 0))
    except (TypeError, ValueError):
        return None
    if count < 0:
        return None
    return ContributionDay(date=value, count=count)


def parse_contribution_days(raw: Any) -> List[ContributionDay]:
    """Normalize a decoded JSON payload (list or {"days": [...]}) into days."""
    items: Iterable[Any]
    if isinstance(raw, dict):
        items = raw.get("days", [])
    elif isinstance(raw, list):
        items = raw
    else:
        items = []
    if not isinstance(items, list):
        items = []

    days: List[ContributionDay] = []
    for item in items:
        day = _parse_day(item)
        if day is None:
            logger.debug("skipping malformed contribution entry: %r", item)
            continue
        days.append(day)
    return days


def load_contribution_days(path: Path) -> List[ContributionDay]:
    """Load contribution days from a JSON file."""
    days = parse_contribution_days(load_json_config(path))
    logger.info("loaded %d contribution days from %s", len(days), path)
    return days


def build_raw_grid(days: Iterable[ContributionDay], start_week: date, weeks: int) -> RawGrid:
    """Lay contribution days out as 7 weekday rows by `weeks` columns.

    Days missing from the input count as 0; days outside the range are ignored.
    The start is snapped back to its Sunday.
    """
    counts: Dict[str, int] = {d.date: d.count for d in days}
    start, end = build_range(start_week, weeks)
    grid: List[List[RawTile]] = [[] for _ in range(GRID_ROWS)]
    for index, day in enumerate(list_date_range(start, end)):
        row = weekday_row(day)
        iso = format_iso_date(day)
        grid[row].append(
            RawTile(row=row, col=index // DAYS_PER_WEEK, date=iso, count=counts.get(iso, 0))
        )
    return grid
