from __future__ import annotations

import math
from datetime import date, datetime, time
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date (expected YYYY-MM-DD): {value!r}")


def parse_hhmm(value: str) -> time:
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid time (expected HH:MM): {value!r}")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def at(day: date, clock: time) -> datetime:
    return datetime.combine(day, clock)


def elapsed_minutes(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 60


def elapsed_hours(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600


def round_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, halves rounded up (90s -> 2, -90s -> -1)."""
    return int(math.floor(elapsed_minutes(start, end) + 0.5))


def isoformat_or_none(value: Optional[datetime | date]) -> Optional[str]:
    return value.isoformat() if value is not None else None
