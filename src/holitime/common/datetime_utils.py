from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta
from typing import Optional

from ..core.constants import ROUNDING_MINUTES
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    if not isinstance(value, str):
        raise ValidationError(f"Invalid date {value!r} (expected YYYY-MM-DD)")
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date {value!r} (expected YYYY-MM-DD)")


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    if value is None or not str(value).strip():
        return None
    return parse_iso_date(str(value))


def parse_hhmm(value: str) -> time:
    if not isinstance(value, str):
        raise ValidationError(f"Invalid time {value!r} (expected HH:MM)")
    v = value.strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"Invalid time {value!r} (expected HH:MM)")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def shift_window(work_date: date, start: time, end: time) -> tuple[datetime, datetime]:
    """Concrete start/end datetimes of a shift.

    An end time at or before the start time means the shift runs past midnight.
    """
    start_dt = datetime.combine(work_date, start)
    end_dt = datetime.combine(work_date, end)
    if end_dt <= start_dt:
        end_dt += timedelta(days=1)
    return start_dt, end_dt


def round_time(value: datetime, direction: str, *, step_minutes: int = ROUNDING_MINUTES) -> datetime:
    """Round to the previous ("down") or next ("up") ``step_minutes`` boundary."""
    base = value.replace(second=0, microsecond=0)
    minutes = base.hour * 60 + base.minute
    if direction == "down":
        rounded = (minutes // step_minutes) * step_minutes
    elif direction == "up":
        # seconds are dropped before rounding, 08:00:40 stays 08:00
        rounded = int(math.ceil(minutes / step_minutes)) * step_minutes
    else:
        raise ValueError(f"Unknown rounding direction: {direction!r}")
    return datetime.combine(base.date(), time(0, 0)) + timedelta(minutes=rounded)


def minutes_between(start: datetime, end: datetime) -> int:
    return max(int((end - start).total_seconds() // 60), 0)


def format_minutes(total_minutes: int) -> str:
    """Format minutes as HH:MM."""
    total_minutes = int(total_minutes)
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def format_time_12h(value: Optional[datetime]) -> str:
    """4:00 PM style, '--:--' when missing."""
    if value is None:
        return "--:--"
    hour = value.hour % 12 or 12
    suffix = "PM" if value.hour >= 12 else "AM"
    return f"{hour}:{value.minute:02d} {suffix}"
