"""Appointment model definitions."""

import enum
import uuid

from sqlalchemy import Column, ForeignKey, String, Uuid
from medbook.database import Base
from medbook.models.types import UTCDateTime, utc_now


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = 'scheduled'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'


class Appointment(Base):
    """Represents a booked appointment. Rows are never deleted."""
    __tablename__ = "appointments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    doctor_id = Column(Uuid, ForeignKey("doctors.id"), nullable=False)
    patient_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)
    status = Column(String, nullable=False, default=AppointmentStatus.SCHEDULED.value)
    reason = Column(String)
    notes = Column(String)
    created_at = Column(UTCDateTime, default=utc_now)
    updated_at = Column(UTCDateTime, default=utc_now, onupdate=utc_now)
