"""Clock abstraction and calendar helpers.

The engine never reads the system time on its own. Callers hand it a
`Clock` (or a plain `now`), and every calendar boundary (today, this ISO
week, this quarter) is computed in the timezone `now` carries.
"""

from datetime import datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Protocol

from compass.exceptions import EngineContractError


class Clock(Protocol):
    """Anything that can tell the current time."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall-clock time in a fixed timezone."""

    def __init__(self, tz: tzinfo = timezone.utc):
        self.tz = tz

    def now(self) -> datetime:
        return datetime.now(self.tz)


class FixedClock:
    """A clock frozen at one instant (tests, replays, previews)."""

    def __init__(self, instant: datetime):
        self.instant = ensure_aware(instant)

    def now(self) -> datetime:
        return self.instant


def ensure_aware(value: datetime, default_tz: tzinfo = timezone.utc) -> datetime:
    """Attach `default_tz` to naive datetimes; aware values pass through."""
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=default_tz)
    return value


def require_aware(now: datetime) -> datetime:
    """`now` defines the user's calendar, so it must carry a timezone."""
    if now.tzinfo is None or now.tzinfo.utcoffset(now) is None:
        raise EngineContractError(
            "now must be timezone-aware",
            details={"now": now.isoformat()},
        )
    return now


def local(value: datetime, now: datetime) -> datetime:
    """Express `value` in the timezone of `now`."""
    return ensure_aware(value).astimezone(now.tzinfo)


def start_of_day(now: datetime) -> datetime:
    return datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)


def is_same_day(value: datetime, now: datetime) -> bool:
    return local(value, now).date() == now.date()


def start_of_iso_week(now: datetime) -> datetime:
    """Monday 00:00 of the ISO week containing `now`."""
    return start_of_day(now) - timedelta(days=now.weekday())


def iso_week_bounds(now: datetime, weeks_back: int = 0) -> tuple[datetime, datetime]:
    """[start, end) of the ISO week `weeks_back` weeks before the current one."""
    start = start_of_iso_week(now) - timedelta(weeks=weeks_back)
    return start, start + timedelta(days=7)


def is_in_iso_week(value: datetime, now: datetime, weeks_back: int = 0) -> bool:
    start, end = iso_week_bounds(now, weeks_back)
    return start <= local(value, now) < end


def start_of_quarter(now: datetime) -> datetime:
    """First instant of the calendar quarter (Jan/Apr/Jul/Oct) containing `now`."""
    first_month = 3 * ((now.month - 1) // 3) + 1
    return datetime(now.year, first_month, 1, tzinfo=now.tzinfo)


def whole_days_between(earlier: datetime, later: datetime) -> int:
    """Whole days elapsed from `earlier` to `later`, floored."""
    return (ensure_aware(later) - ensure_aware(earlier)).days


def days_since(value: Optional[datetime], now: datetime) -> Optional[int]:
    if value is None:
        return None
    return whole_days_between(value, now)
