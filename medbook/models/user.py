"""User model definitions."""

import uuid

from sqlalchemy import Column, String, Uuid
from medbook.database import Base


class User(Base):
    """Represents an application user."""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, index=True)
    first_name = Column(String)
    last_name = Column(String)
    role = Column(String)  # patient/doctor/admin
