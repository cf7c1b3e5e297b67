"""Domain errors raised by the slot and booking services.

Routes translate these into HTTP responses; services never raise
``HTTPException`` themselves.
"""


class BookingError(Exception):
    """Base class for slot and booking failures."""

    message = 'Booking failed.'

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class BookingValidationError(BookingError):
    message = 'Invalid booking data.'

    def __init__(self, message: str | None = None, field: str | None = None):
        super().__init__(message)
        self.field = field

    def to_detail(self) -> dict:
        return {'field': self.field, 'message': self.message}


class DoctorNotFound(BookingError):
    message = 'Doctor not found.'


class AppointmentNotFound(BookingError):
    message = 'Appointment not found.'


class SlotConflict(BookingError):
    message = 'Time slot is no longer available.'


class BookingInternalError(BookingError):
    message = 'Failed to create booking.'


class SlotQueryError(BookingError):
    message = 'Failed to retrieve slots.'
