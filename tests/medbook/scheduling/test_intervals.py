import pytest

from conftest import utc
from medbook.models.appointment import Appointment
from medbook.scheduling.intervals import conflicts_with, is_active, overlaps


@pytest.mark.parametrize(
    ('b_start', 'b_end', 'expected'),
    [
        (utc(2024, 7, 15, 9, 15), utc(2024, 7, 15, 9, 45), True),
        (utc(2024, 7, 15, 8, 0), utc(2024, 7, 15, 11, 0), True),
        (utc(2024, 7, 15, 9, 10), utc(2024, 7, 15, 9, 20), True),
        (utc(2024, 7, 15, 9, 30), utc(2024, 7, 15, 10, 0), False),
        (utc(2024, 7, 15, 8, 30), utc(2024, 7, 15, 9, 0), False),
    ],
)
def test_overlaps_uses_half_open_intervals(b_start, b_end, expected) -> None:
    assert overlaps(utc(2024, 7, 15, 9, 0), utc(2024, 7, 15, 9, 30), b_start, b_end) is expected
    assert overlaps(b_start, b_end, utc(2024, 7, 15, 9, 0), utc(2024, 7, 15, 9, 30)) is expected


def test_is_active_excludes_only_cancelled() -> None:
    assert is_active('scheduled')
    assert is_active('confirmed')
    assert is_active('completed')
    assert not is_active('cancelled')


def test_conflicts_with_ignores_cancelled_appointments() -> None:
    cancelled = Appointment(start_time=utc(2024, 7, 15, 9, 0), end_time=utc(2024, 7, 15, 9, 30), status='cancelled')
    active = Appointment(start_time=utc(2024, 7, 15, 9, 15), end_time=utc(2024, 7, 15, 9, 45), status='confirmed')

    assert conflicts_with(utc(2024, 7, 15, 9, 0), utc(2024, 7, 15, 9, 30), [cancelled]) is None
    assert conflicts_with(utc(2024, 7, 15, 9, 0), utc(2024, 7, 15, 9, 30), [cancelled, active]) is active
