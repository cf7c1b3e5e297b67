"""Value objects passed between the store, generator and filter."""

from datetime import datetime, time

from pydantic import BaseModel, field_validator


class TimeSlot(BaseModel):
    """A bookable window. Derived on every query and never persisted."""

    start_time: datetime
    end_time: datetime
    available: bool = True

    class Config:
        frozen = True


class SchedulingSettings(BaseModel):
    """Immutable snapshot of the global scheduling settings."""

    business_hours_start: time
    business_hours_end: time
    timezone: str
    slot_duration_minutes: int
    min_booking_notice_hours: int

    class Config:
        frozen = True

    @field_validator('slot_duration_minutes')
    @classmethod
    def validate_slot_duration(cls, value: int) -> int:
        if value <= 0:
            raise ValueError('Slot duration must be positive.')
        return value

    @field_validator('min_booking_notice_hours')
    @classmethod
    def validate_notice(cls, value: int) -> int:
        if value < 0:
            raise ValueError('Minimum booking notice cannot be negative.')
        return value
