"""Interval predicates shared by the slot filter and the booking manager."""

from datetime import datetime
from typing import Iterable

from medbook.models.appointment import AppointmentStatus


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open intervals ``[a_start, a_end)`` and ``[b_start, b_end)`` overlap."""
    return a_start < b_end and b_start < a_end


def is_active(status: str | None) -> bool:
    return status != AppointmentStatus.CANCELLED.value


def conflicts_with(start: datetime, end: datetime, appointments: Iterable):
    """Return the first active appointment overlapping ``[start, end)``, if any."""
    for appointment in appointments:
        if not is_active(appointment.status):
            continue
        if overlaps(start, end, appointment.start_time, appointment.end_time):
            return appointment
    return None
