"""Queries and the locked write path over the scheduling tables."""

from contextlib import contextmanager
from datetime import date, datetime, time
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.orm import Session

from medbook.core import config
from medbook.database import BEGIN_IMMEDIATE_OPTION
from medbook.models.appointment import Appointment, AppointmentStatus
from medbook.models.availability import AvailabilityRule, BlackoutDate, Holiday
from medbook.models.doctor import Doctor
from medbook.models.settings import Settings
from medbook.scheduling.types import SchedulingSettings


def _parse_clock(value: str) -> time:
    return time.fromisoformat(value)


def default_settings() -> SchedulingSettings:
    return SchedulingSettings(
        business_hours_start=_parse_clock(config.DEFAULT_BUSINESS_HOURS_START),
        business_hours_end=_parse_clock(config.DEFAULT_BUSINESS_HOURS_END),
        timezone=config.DEFAULT_TIMEZONE,
        slot_duration_minutes=config.DEFAULT_SLOT_DURATION_MINUTES,
        min_booking_notice_hours=config.DEFAULT_MIN_BOOKING_NOTICE_HOURS,
    )


def get_settings(db: Session) -> SchedulingSettings:
    row = db.query(Settings).order_by(Settings.id.asc()).first()
    defaults = default_settings()
    if row is None:
        return defaults

    return SchedulingSettings(
        business_hours_start=row.business_hours_start or defaults.business_hours_start,
        business_hours_end=row.business_hours_end or defaults.business_hours_end,
        timezone=row.timezone or defaults.timezone,
        slot_duration_minutes=row.slot_duration or defaults.slot_duration_minutes,
        min_booking_notice_hours=(
            row.min_booking_notice if row.min_booking_notice is not None else defaults.min_booking_notice_hours
        ),
    )


def get_rules(db: Session, doctor_id: UUID) -> list[AvailabilityRule]:
    return db.query(AvailabilityRule).filter(
        AvailabilityRule.doctor_id == doctor_id,
    ).order_by(AvailabilityRule.day_of_week.asc(), AvailabilityRule.start_time.asc()).all()


def get_blackout_dates(db: Session, doctor_id: UUID, start_date: date, end_date: date) -> list[BlackoutDate]:
    return db.query(BlackoutDate).filter(
        BlackoutDate.doctor_id == doctor_id,
        BlackoutDate.date >= start_date,
        BlackoutDate.date <= end_date,
    ).order_by(BlackoutDate.date.asc()).all()


def get_holidays(db: Session, start_date: date, end_date: date) -> list[Holiday]:
    return db.query(Holiday).filter(
        Holiday.date >= start_date,
        Holiday.date <= end_date,
    ).order_by(Holiday.date.asc()).all()


def get_active_appointments(
    db: Session,
    doctor_id: UUID,
    window_start: datetime,
    window_end: datetime,
) -> list[Appointment]:
    """Appointments for the doctor that are not cancelled and touch the window."""
    return db.query(Appointment).filter(
        Appointment.doctor_id == doctor_id,
        Appointment.status != AppointmentStatus.CANCELLED.value,
        Appointment.start_time < window_end,
        Appointment.end_time > window_start,
    ).order_by(Appointment.start_time.asc()).all()


def get_appointment(db: Session, appointment_id: UUID) -> Appointment | None:
    return db.query(Appointment).filter(Appointment.id == appointment_id).first()


def lock_doctor(db: Session, doctor_id: UUID) -> UUID | None:
    """Take the per-doctor row lock for the rest of the current transaction."""
    row = db.query(Doctor.id).filter(Doctor.id == doctor_id).with_for_update().first()
    return row[0] if row else None


def insert_appointment(
    db: Session,
    doctor_id: UUID,
    patient_id: UUID,
    start_time: datetime,
    end_time: datetime,
    reason: str | None = None,
    notes: str | None = None,
) -> Appointment:
    appointment = Appointment(
        doctor_id=doctor_id,
        patient_id=patient_id,
        start_time=start_time,
        end_time=end_time,
        status=AppointmentStatus.SCHEDULED.value,
        reason=reason,
        notes=notes,
    )
    db.add(appointment)
    db.flush()
    return appointment


def _apply_transaction_timeout(db: Session, timeout_seconds: float) -> None:
    # SQLite bounds lock waits through the connection busy timeout instead.
    if db.get_bind().dialect.name != 'postgresql':
        return

    timeout_ms = max(1, int(timeout_seconds * 1000))
    db.execute(text(f"SET LOCAL lock_timeout = '{timeout_ms}ms'"))
    db.execute(text(f"SET LOCAL statement_timeout = '{timeout_ms}ms'"))


@contextmanager
def locked_transaction(db: Session, timeout_seconds: float | None = None):
    """Run the block in one fresh write transaction.

    Commits when the block finishes and rolls back on any exception, so a
    lock taken inside the block is always released. The session must not
    carry unflushed changes; a read-only transaction left open by earlier
    queries is rolled back first.
    """
    timeout_seconds = timeout_seconds or config.BOOKING_TRANSACTION_TIMEOUT_SECONDS

    if db.new or db.dirty or db.deleted:
        raise RuntimeError('locked_transaction requires a session without pending changes.')
    if db.in_transaction():
        db.rollback()

    with db.begin():
        db.connection(execution_options={BEGIN_IMMEDIATE_OPTION: True})
        _apply_transaction_timeout(db, timeout_seconds)
        yield db
