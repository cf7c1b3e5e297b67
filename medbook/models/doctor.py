"""Doctor model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String, Uuid
from medbook.database import Base
from medbook.models.types import UTCDateTime, utc_now


class Doctor(Base):
    """A doctor profile; shares its id with the owning user."""
    __tablename__ = "doctors"

    id = Column(Uuid, ForeignKey("users.id"), primary_key=True)
    specialty = Column(String)
    bio = Column(String)
    years_of_experience = Column(Integer)
    created_at = Column(UTCDateTime, default=utc_now)
    updated_at = Column(UTCDateTime, default=utc_now, onupdate=utc_now)
