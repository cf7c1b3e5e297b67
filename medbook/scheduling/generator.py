from datetime import date, datetime, timedelta
from typing import Iterable

from medbook.scheduling.timezones import exists_locally, resolve_timezone, to_utc
from medbook.scheduling.types import TimeSlot


def weekday_index(day: date) -> int:
    """Day of week with Sunday as 0 and Saturday as 6."""
    return day.isoweekday() % 7


def iterate_days(start_date: date, end_date: date):
    current_day = start_date
    while current_day <= end_date:
        yield current_day
        current_day += timedelta(days=1)


def rule_duration_minutes(rule, default_slot_duration: int) -> int:
    duration = rule.slot_duration_minutes
    if not duration:
        return default_slot_duration
    if duration < 0:
        raise ValueError(f'Rule slot duration must be positive, got {duration}.')
    return duration


def _validate_rule(rule) -> None:
    if not 0 <= rule.day_of_week <= 6:
        raise ValueError(f'day_of_week must be between 0 and 6, got {rule.day_of_week}.')
    if rule.start_time >= rule.end_time:
        raise ValueError('Availability rule must start before it ends.')


def generate_slots(
    rules: Iterable,
    start_date: date,
    end_date: date,
    default_slot_duration: int,
    timezone: str,
) -> list[TimeSlot]:
    """Expand weekly availability rules into candidate slots.

    Wall-clock times are read in ``timezone`` and every slot is returned in
    UTC. A trailing window shorter than the slot duration is dropped. Starts
    that fall in a daylight-saving gap do not exist locally and are skipped.
    Days without a matching rule contribute nothing.
    """
    if end_date < start_date:
        raise ValueError('end_date must not be before start_date.')
    if default_slot_duration <= 0:
        raise ValueError('Default slot duration must be positive.')

    tz = resolve_timezone(timezone)

    rules_by_weekday: dict[int, list] = {}
    for rule in rules:
        _validate_rule(rule)
        rules_by_weekday.setdefault(rule.day_of_week, []).append(rule)
    for day_rules in rules_by_weekday.values():
        day_rules.sort(key=lambda rule: (rule.start_time, rule.end_time))

    slots: list[TimeSlot] = []

    for current_day in iterate_days(start_date, end_date):
        for rule in rules_by_weekday.get(weekday_index(current_day), []):
            duration = timedelta(minutes=rule_duration_minutes(rule, default_slot_duration))
            window_end = datetime.combine(current_day, rule.end_time)
            slot_start = datetime.combine(current_day, rule.start_time)

            while slot_start + duration <= window_end:
                if exists_locally(current_day, slot_start.time(), tz):
                    start_utc = to_utc(current_day, slot_start.time(), tz)
                    slots.append(
                        TimeSlot(start_time=start_utc, end_time=start_utc + duration, available=True)
                    )
                slot_start += duration

    return slots
