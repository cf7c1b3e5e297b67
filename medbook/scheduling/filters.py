from datetime import date, datetime, timedelta
from typing import Iterable

from medbook.scheduling.intervals import conflicts_with, is_active
from medbook.scheduling.timezones import local_date, resolve_timezone
from medbook.scheduling.types import SchedulingSettings, TimeSlot


def _as_dates(entries: Iterable) -> set[date]:
    dates: set[date] = set()
    for entry in entries:
        dates.add(entry if isinstance(entry, date) else entry.date)
    return dates


def earliest_bookable_start(settings: SchedulingSettings, now: datetime) -> datetime:
    return now + timedelta(hours=settings.min_booking_notice_hours)


def filter_slots(
    candidates: Iterable[TimeSlot],
    blackout_dates: Iterable,
    holidays: Iterable,
    appointments: Iterable,
    settings: SchedulingSettings,
    now: datetime,
) -> list[TimeSlot]:
    """Drop candidates that cannot be booked, keeping the input order.

    A slot is removed when it starts before the minimum booking notice, falls
    on a blackout date or holiday (by its local date in the settings time
    zone), or overlaps an appointment that is not cancelled. The result is
    advisory; the booking transaction re-checks conflicts under lock.
    """
    if now.tzinfo is None:
        raise ValueError('now must be timezone-aware.')

    tz = resolve_timezone(settings.timezone)
    minimum_start = earliest_bookable_start(settings, now)
    closed_dates = _as_dates(blackout_dates) | _as_dates(holidays)
    active_appointments = [appointment for appointment in appointments if is_active(appointment.status)]

    available: list[TimeSlot] = []
    for slot in candidates:
        if slot.start_time < minimum_start:
            continue
        if local_date(slot.start_time, tz) in closed_dates:
            continue
        if conflicts_with(slot.start_time, slot.end_time, active_appointments) is not None:
            continue
        available.append(slot)

    return available
