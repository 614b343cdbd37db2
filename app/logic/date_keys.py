"""
============================================================================
Project Risk Replay v1.0.0
Date Keys - Day, Week and Month Grouping Keys
============================================================================

Reliability Level: L6 Critical
Input Constraints: datetime (aware, or naive meaning UTC) + IANA timezone name
Side Effects: None (pure functions)

Every key is computed in an explicitly supplied timezone. There is no
module-level timezone state.

Key formats:
- day:   YYYY-MM-DD
- month: YYYY-MM
- week:  day key of the Sunday that starts the week (Sunday..Saturday)

============================================================================
"""

from datetime import date, datetime, timedelta
from functools import lru_cache
from typing import Tuple

import pytz


DEFAULT_TIMEZONE = "America/Sao_Paulo"


@lru_cache(maxsize=32)
def get_timezone(name: str) -> pytz.BaseTzInfo:
    """Resolve an IANA timezone name (raises pytz.UnknownTimeZoneError)."""
    return pytz.timezone(name)


def local_date(moment: datetime, tz_name: str) -> date:
    """Calendar date of a moment as seen in the given timezone."""
    if moment.tzinfo is None:
        moment = pytz.UTC.localize(moment)
    return moment.astimezone(get_timezone(tz_name)).date()


def day_key(moment: datetime, tz_name: str) -> str:
    return local_date(moment, tz_name).isoformat()


def month_key(moment: datetime, tz_name: str) -> str:
    return day_key(moment, tz_name)[:7]


def week_bounds(moment: datetime, tz_name: str) -> Tuple[date, date]:
    """Sunday and Saturday of the week containing the moment."""
    local = local_date(moment, tz_name)
    # Monday=0 .. Sunday=6, so days since Sunday is (weekday + 1) % 7
    start = local - timedelta(days=(local.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def week_key(moment: datetime, tz_name: str) -> str:
    start, _ = week_bounds(moment, tz_name)
    return start.isoformat()


def week_label(moment: datetime, tz_name: str) -> str:
    """Human-readable week label such as 'Jan 4-10'."""
    start, end = week_bounds(moment, tz_name)
    return f"{start.strftime('%b')} {start.day}-{end.day}"
