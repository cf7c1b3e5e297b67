"""Civil time in a zone <-> absolute UTC instants."""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def resolve_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f'Unknown time zone: {name!r}') from exc


def to_utc(day: date, wall_time: time, tz: ZoneInfo) -> datetime:
    """Interpret ``day`` at ``wall_time`` in ``tz`` and return the UTC instant."""
    return datetime.combine(day, wall_time, tzinfo=tz).astimezone(timezone.utc)


def exists_locally(day: date, wall_time: time, tz: ZoneInfo) -> bool:
    """False for wall-clock times skipped by a forward clock change."""
    local = to_utc(day, wall_time, tz).astimezone(tz)
    return local.replace(tzinfo=None) == datetime.combine(day, wall_time)


def local_date(instant: datetime, tz: ZoneInfo) -> date:
    return instant.astimezone(tz).date()


def day_bounds_utc(start_date: date, end_date: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """UTC bounds of the local days ``start_date`` through ``end_date`` inclusive."""
    window_start = to_utc(start_date, time(0, 0), tz)
    window_end = to_utc(end_date + timedelta(days=1), time(0, 0), tz)
    return window_start, window_end
