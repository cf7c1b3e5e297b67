import logging
from datetime import date, datetime, timezone
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from medbook.core.errors import SlotQueryError
from medbook.scheduling.filters import filter_slots
from medbook.scheduling.generator import generate_slots
from medbook.scheduling.timezones import day_bounds_utc, resolve_timezone
from medbook.scheduling.types import TimeSlot
from medbook.services import availability_store

logger = logging.getLogger(__name__)


def list_available_slots(
    db: Session,
    doctor_id: UUID,
    start_date: date,
    end_date: date,
    now: datetime | None = None,
) -> list[TimeSlot]:
    """Bookable slots for one doctor between two local dates, inclusive.

    Reads without locking; a returned slot may be taken before the client
    books it, which the booking transaction detects.
    """
    now = now or datetime.now(timezone.utc)

    try:
        settings = availability_store.get_settings(db)
        window_start, window_end = day_bounds_utc(start_date, end_date, resolve_timezone(settings.timezone))

        rules = availability_store.get_rules(db, doctor_id)
        blackout_dates = availability_store.get_blackout_dates(db, doctor_id, start_date, end_date)
        holidays = availability_store.get_holidays(db, start_date, end_date)
        appointments = availability_store.get_active_appointments(db, doctor_id, window_start, window_end)
    except SQLAlchemyError as exc:
        logger.exception('Failed to load availability for doctor %s (%s to %s)', doctor_id, start_date, end_date)
        raise SlotQueryError() from exc

    candidates = generate_slots(
        rules,
        start_date,
        end_date,
        settings.slot_duration_minutes,
        settings.timezone,
    )
    return filter_slots(candidates, blackout_dates, holidays, appointments, settings, now)
