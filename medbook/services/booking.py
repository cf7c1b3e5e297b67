"""Conflict-safe booking creation and status changes.

Creating a booking locks the doctor row, re-checks the doctor's calendar
and inserts in the same transaction. Two requests for the same doctor
therefore run one after the other, and the second sees the first one's
appointment. Requests for different doctors never wait on each other.
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from medbook.core.errors import (
    AppointmentNotFound,
    BookingInternalError,
    BookingValidationError,
    DoctorNotFound,
    SlotConflict,
)
from medbook.models.appointment import Appointment, AppointmentStatus
from medbook.scheduling.filters import earliest_bookable_start
from medbook.scheduling.intervals import conflicts_with, is_active
from medbook.services import availability_store

logger = logging.getLogger(__name__)


def validate_booking_window(start_time: datetime, end_time: datetime) -> None:
    for field, value in (('start_time', start_time), ('end_time', end_time)):
        if value.tzinfo is None:
            raise BookingValidationError('Timestamps must include a time zone offset.', field=field)
    if end_time <= start_time:
        raise BookingValidationError('End time must be after start time.', field='end_time')


def book_appointment(
    db: Session,
    doctor_id: UUID,
    patient_id: UUID,
    start_time: datetime,
    end_time: datetime,
    reason: str | None = None,
    notes: str | None = None,
    now: datetime | None = None,
    timeout_seconds: float | None = None,
) -> Appointment:
    validate_booking_window(start_time, end_time)
    start_time = start_time.astimezone(timezone.utc)
    end_time = end_time.astimezone(timezone.utc)
    now = now or datetime.now(timezone.utc)

    try:
        with availability_store.locked_transaction(db, timeout_seconds):
            if availability_store.lock_doctor(db, doctor_id) is None:
                raise DoctorNotFound()

            settings = availability_store.get_settings(db)
            if start_time < earliest_bookable_start(settings, now):
                raise BookingValidationError(
                    f'Appointments must be booked at least {settings.min_booking_notice_hours} hours in advance.',
                    field='start_time',
                )

            existing = availability_store.get_active_appointments(db, doctor_id, start_time, end_time)
            conflict = conflicts_with(start_time, end_time, existing)
            if conflict is not None:
                logger.info(
                    'Booking conflict for doctor %s at %s-%s with appointment %s',
                    doctor_id,
                    start_time.isoformat(),
                    end_time.isoformat(),
                    conflict.id,
                )
                raise SlotConflict()

            appointment = availability_store.insert_appointment(
                db,
                doctor_id=doctor_id,
                patient_id=patient_id,
                start_time=start_time,
                end_time=end_time,
                reason=reason,
                notes=notes,
            )
    except SQLAlchemyError as exc:
        logger.exception(
            'Booking transaction failed for doctor %s at %s-%s',
            doctor_id,
            start_time.isoformat(),
            end_time.isoformat(),
        )
        raise BookingInternalError() from exc

    db.refresh(appointment)
    logger.info('Created appointment %s for doctor %s', appointment.id, doctor_id)
    return appointment


def get_appointment_or_raise(db: Session, appointment_id: UUID) -> Appointment:
    try:
        appointment = availability_store.get_appointment(db, appointment_id)
    except SQLAlchemyError as exc:
        logger.exception('Failed to load appointment %s', appointment_id)
        raise BookingInternalError('Failed to retrieve booking.') from exc

    if appointment is None:
        raise AppointmentNotFound()
    return appointment


def update_appointment_status(db: Session, appointment_id: UUID, new_status: AppointmentStatus) -> Appointment:
    """Change an appointment's status without re-checking overlaps.

    Cancelling frees the window. Reactivating a cancelled appointment is
    refused because it would need the same locked re-check as a new booking.
    """
    new_status = AppointmentStatus(new_status)
    appointment = get_appointment_or_raise(db, appointment_id)

    if not is_active(appointment.status) and is_active(new_status.value):
        raise BookingValidationError('Cancelled appointments cannot be reactivated.', field='status')

    try:
        appointment.status = new_status.value
        appointment.updated_at = datetime.now(timezone.utc)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to update status of appointment %s', appointment_id)
        raise BookingInternalError('Failed to update booking status.') from exc

    db.refresh(appointment)
    return appointment
