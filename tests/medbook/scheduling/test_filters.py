from datetime import date, time, timedelta

import pytest

from conftest import MONDAY, utc
from medbook.models.appointment import Appointment
from medbook.models.availability import AvailabilityRule, BlackoutDate, Holiday
from medbook.scheduling.filters import filter_slots
from medbook.scheduling.generator import generate_slots
from medbook.scheduling.types import SchedulingSettings, TimeSlot

NOW = utc(2024, 7, 1, 9, 0)


def _settings(timezone_name: str = 'UTC', notice_hours: int = 24) -> SchedulingSettings:
    return SchedulingSettings(
        business_hours_start=time(9, 0),
        business_hours_end=time(17, 0),
        timezone=timezone_name,
        slot_duration_minutes=30,
        min_booking_notice_hours=notice_hours,
    )


def _monday_slots(timezone_name: str = 'UTC') -> list[TimeSlot]:
    rule = AvailabilityRule(day_of_week=MONDAY, start_time=time(9, 0), end_time=time(11, 0), slot_duration_minutes=30)
    return generate_slots([rule], date(2024, 7, 15), date(2024, 7, 22), 30, timezone_name)


def _slot(start, minutes: int = 30) -> TimeSlot:
    return TimeSlot(start_time=start, end_time=start + timedelta(minutes=minutes))


def test_filter_slots_keeps_slot_exactly_at_minimum_notice() -> None:
    boundary = NOW + timedelta(hours=24)
    candidates = [_slot(boundary - timedelta(seconds=1)), _slot(boundary)]

    result = filter_slots(candidates, [], [], [], _settings(), NOW)

    assert result == [candidates[1]]


def test_filter_slots_removes_blackout_date() -> None:
    blackout = BlackoutDate(date=date(2024, 7, 15), reason='Conference')

    result = filter_slots(_monday_slots(), [blackout], [], [], _settings(), NOW)

    assert utc(2024, 7, 15, 9, 0) not in [slot.start_time for slot in result]
    assert {slot.start_time.date() for slot in result} == {date(2024, 7, 22)}


def test_filter_slots_removes_holidays() -> None:
    result = filter_slots(_monday_slots(), [], [Holiday(date=date(2024, 7, 22))], [], _settings(), NOW)

    assert {slot.start_time.date() for slot in result} == {date(2024, 7, 15)}


def test_filter_slots_accepts_plain_dates() -> None:
    result = filter_slots(_monday_slots(), [date(2024, 7, 15)], [date(2024, 7, 22)], [], _settings(), NOW)

    assert result == []


def test_filter_slots_uses_local_date_for_closures() -> None:
    # 22:00 in New York on 2024-07-15 is already 2024-07-16 in UTC.
    late_slot = _slot(utc(2024, 7, 16, 2, 0))

    result = filter_slots([late_slot], [date(2024, 7, 15)], [], [], _settings('America/New_York'), NOW)

    assert result == []


def test_filter_slots_removes_overlapping_active_appointments() -> None:
    appointments = [
        Appointment(start_time=utc(2024, 7, 15, 9, 15), end_time=utc(2024, 7, 15, 9, 45), status='scheduled'),
        Appointment(start_time=utc(2024, 7, 15, 10, 0), end_time=utc(2024, 7, 15, 10, 30), status='cancelled'),
        Appointment(start_time=utc(2024, 7, 22, 8, 30), end_time=utc(2024, 7, 22, 9, 0), status='confirmed'),
    ]

    result = filter_slots(_monday_slots(), [], [], appointments, _settings(), NOW)
    starts = [slot.start_time for slot in result]

    assert utc(2024, 7, 15, 9, 0) not in starts
    assert utc(2024, 7, 15, 9, 30) not in starts
    assert utc(2024, 7, 15, 10, 0) in starts
    assert utc(2024, 7, 22, 9, 0) in starts


def test_filter_slots_preserves_order_and_is_idempotent() -> None:
    candidates = _monday_slots()
    appointments = [
        Appointment(start_time=utc(2024, 7, 15, 10, 0), end_time=utc(2024, 7, 15, 10, 30), status='scheduled'),
    ]
    settings = _settings()

    once = filter_slots(candidates, [date(2024, 7, 22)], [], appointments, settings, NOW)
    twice = filter_slots(once, [date(2024, 7, 22)], [], appointments, settings, NOW)

    assert once == twice
    assert all(slot in candidates for slot in once)
    assert once == sorted(once, key=lambda slot: slot.start_time)
    assert len(once) == 3


def test_filter_slots_removes_every_excluded_slot_once() -> None:
    candidates = _monday_slots()
    blackout = [date(2024, 7, 15)]
    holidays = [date(2024, 7, 15)]
    appointments = [
        Appointment(start_time=utc(2024, 7, 15, 9, 0), end_time=utc(2024, 7, 15, 11, 0), status='scheduled'),
    ]

    result = filter_slots(candidates, blackout, holidays, appointments, _settings(), NOW)

    assert len(result) == len(candidates) - 4


def test_filter_slots_requires_aware_now() -> None:
    with pytest.raises(ValueError):
        filter_slots([], [], [], [], _settings(), NOW.replace(tzinfo=None))
