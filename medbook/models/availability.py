"""Availability model definitions."""

from sqlalchemy import Column, Date, ForeignKey, Integer, String, Time, Uuid
from medbook.database import Base


class AvailabilityRule(Base):
    """A recurring weekly opening window for a doctor.

    ``day_of_week`` counts from Sunday (0) to Saturday (6).
    """
    __tablename__ = "availability_rules"

    id = Column(Integer, primary_key=True)
    doctor_id = Column(Uuid, ForeignKey("doctors.id"), nullable=False)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    slot_duration_minutes = Column(Integer)


class BlackoutDate(Base):
    """A single day on which one doctor takes no appointments."""
    __tablename__ = "blackout_dates"

    id = Column(Integer, primary_key=True)
    doctor_id = Column(Uuid, ForeignKey("doctors.id"), nullable=False)
    date = Column(Date, nullable=False)
    reason = Column(String)


class Holiday(Base):
    """A day on which no doctor takes appointments."""
    __tablename__ = "holidays"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False, unique=True)
    description = Column(String)
