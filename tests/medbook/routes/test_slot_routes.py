import uuid
from datetime import date, time, timedelta

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from conftest import add_rule, add_settings
from medbook.core.errors import SlotQueryError
from medbook.routes.slot_routes import TimeSlotResponse, list_slots, validate_date_range


@pytest.fixture(autouse=True)
def skip_schema_checks(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('medbook.routes.slot_routes.ensure_database_ready', lambda: None)


def test_validate_date_range_rejects_reversed_range() -> None:
    with pytest.raises(HTTPException) as exception_info:
        validate_date_range(date(2024, 7, 16), date(2024, 7, 15))

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'end_date must be on or after start_date.'


def test_validate_date_range_rejects_ranges_beyond_limit() -> None:
    with pytest.raises(HTTPException) as exception_info:
        validate_date_range(date(2024, 7, 1), date(2024, 7, 1) + timedelta(days=60))

    assert exception_info.value.status_code == 400


def test_validate_date_range_accepts_single_day() -> None:
    validate_date_range(date(2024, 7, 15), date(2024, 7, 15))


def test_list_slots_returns_available_windows(db, doctor_id) -> None:
    add_settings(db, notice_hours=0)
    for day_of_week in range(7):
        add_rule(db, doctor_id, day_of_week, time(9, 0), time(10, 0))
    target_day = date.today() + timedelta(days=7)

    slots = list_slots(doctor_id=doctor_id, start_date=target_day, end_date=target_day, db=db)

    assert len(slots) == 2
    assert all(isinstance(slot, TimeSlotResponse) for slot in slots)
    assert all(slot.available for slot in slots)
    assert slots[0].start_time < slots[1].start_time


def test_list_slots_maps_query_failures_to_internal_error(db, monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_query(*_args, **_kwargs):
        raise SlotQueryError()

    monkeypatch.setattr('medbook.routes.slot_routes.list_available_slots', failing_query)

    with pytest.raises(HTTPException) as exception_info:
        list_slots(doctor_id=uuid.uuid4(), start_date=date(2024, 7, 15), end_date=date(2024, 7, 15), db=db)

    assert exception_info.value.status_code == 500
    assert exception_info.value.detail == 'Failed to retrieve slots.'


@pytest.mark.parametrize(
    'query',
    [
        'doctor_id=not-a-uuid&start_date=2024-07-15&end_date=2024-07-16',
        f'doctor_id={uuid.UUID(int=1)}&start_date=15-07-2024&end_date=2024-07-16',
        f'doctor_id={uuid.UUID(int=1)}&start_date=2024-07-15',
    ],
)
def test_slots_endpoint_reports_malformed_parameters_as_bad_request(query: str) -> None:
    from medbook.main import app

    response = TestClient(app).get(f'/api/slots?{query}')

    assert response.status_code == 400
    assert response.json()['detail']
