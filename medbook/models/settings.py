"""Global scheduling settings."""

from sqlalchemy import Column, Integer, String, Time
from medbook.database import Base
from medbook.models.types import UTCDateTime, utc_now


class Settings(Base):
    """Process-wide scheduling configuration; only the first row is read."""
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True)
    business_hours_start = Column(Time)
    business_hours_end = Column(Time)
    timezone = Column(String)
    slot_duration = Column(Integer)
    min_booking_notice = Column(Integer)  # hours
    updated_at = Column(UTCDateTime, default=utc_now, onupdate=utc_now)
