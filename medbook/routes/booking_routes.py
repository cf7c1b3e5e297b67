from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import AwareDatetime, BaseModel, field_validator, model_validator
from sqlalchemy.orm import Session

from medbook.auth.dependencies import can_act_for, ensure_can_access_appointment, get_current_user
from medbook.core import config
from medbook.core.errors import (
    AppointmentNotFound,
    BookingInternalError,
    BookingValidationError,
    DoctorNotFound,
    SlotConflict,
)
from medbook.database import get_db
from medbook.models.appointment import AppointmentStatus
from medbook.models.user import User
from medbook.routes.common import ensure_database_ready
from medbook.services.booking import book_appointment, get_appointment_or_raise, update_appointment_status

router = APIRouter(tags=['bookings'])


def _normalize_text(value: str | None, field_name: str) -> str | None:
    if value is None:
        return None

    normalized = value.strip()
    if not normalized:
        return None

    if len(normalized) > config.MAX_BOOKING_TEXT_LENGTH:
        raise ValueError(f'{field_name} must be {config.MAX_BOOKING_TEXT_LENGTH} characters or fewer.')

    return normalized


class CreateBookingRequest(BaseModel):
    doctor_id: UUID
    patient_id: UUID
    start_time: AwareDatetime
    end_time: AwareDatetime
    reason: str | None = None
    notes: str | None = None

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str | None) -> str | None:
        return _normalize_text(value, 'Reason')

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        return _normalize_text(value, 'Notes')

    @model_validator(mode='after')
    def validate_window(self) -> 'CreateBookingRequest':
        if self.end_time <= self.start_time:
            raise ValueError('End time must be after start time.')
        return self


class UpdateStatusRequest(BaseModel):
    status: AppointmentStatus


class AppointmentResponse(BaseModel):
    id: UUID
    doctor_id: UUID
    patient_id: UUID
    start_time: datetime
    end_time: datetime
    status: str
    reason: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


def raise_booking_http_error(exc: Exception) -> None:
    if isinstance(exc, BookingValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.to_detail()) from exc
    if isinstance(exc, (DoctorNotFound, AppointmentNotFound)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    if isinstance(exc, SlotConflict):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message) from exc
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=BookingInternalError.message,
    ) from exc


@router.post('/bookings', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: CreateBookingRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not can_act_for(current_user, data.doctor_id, data.patient_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='Not allowed to book for this patient.',
        )

    ensure_database_ready()

    try:
        appointment = book_appointment(
            db,
            doctor_id=data.doctor_id,
            patient_id=data.patient_id,
            start_time=data.start_time,
            end_time=data.end_time,
            reason=data.reason,
            notes=data.notes,
        )
    except (BookingValidationError, DoctorNotFound, SlotConflict, BookingInternalError) as exc:
        raise_booking_http_error(exc)

    return AppointmentResponse.model_validate(appointment)


@router.get('/bookings/{appointment_id}', response_model=AppointmentResponse)
def get_booking(
    appointment_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready()

    try:
        appointment = get_appointment_or_raise(db, appointment_id)
    except (AppointmentNotFound, BookingInternalError) as exc:
        raise_booking_http_error(exc)

    ensure_can_access_appointment(current_user, appointment)
    return AppointmentResponse.model_validate(appointment)


@router.patch('/bookings/{appointment_id}/status', response_model=AppointmentResponse)
def update_booking_status(
    appointment_id: UUID,
    data: UpdateStatusRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready()

    try:
        appointment = get_appointment_or_raise(db, appointment_id)
        ensure_can_access_appointment(current_user, appointment)
        appointment = update_appointment_status(db, appointment_id, data.status)
    except (AppointmentNotFound, BookingValidationError, BookingInternalError) as exc:
        raise_booking_http_error(exc)

    return AppointmentResponse.model_validate(appointment)
