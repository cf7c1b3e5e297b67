import os
import uuid
from datetime import date, datetime, time, timezone

import pytest
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from medbook.database import Base, create_store_engine  # noqa: E402
from medbook.models.appointment import Appointment  # noqa: E402
from medbook.models.availability import AvailabilityRule, BlackoutDate, Holiday  # noqa: E402
from medbook.models.doctor import Doctor  # noqa: E402
from medbook.models.settings import Settings  # noqa: E402
from medbook.models.user import User  # noqa: E402

MONDAY = 1


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def store_engine():
    engine = create_store_engine('sqlite:///:memory:')
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(store_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=store_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def add_user(db, role: str = 'patient') -> uuid.UUID:
    user_id = uuid.uuid4()
    db.add(User(id=user_id, email=f'{user_id}@example.com', first_name='Test', last_name=role.title(), role=role))
    db.commit()
    return user_id


def add_doctor(db) -> uuid.UUID:
    doctor_id = add_user(db, role='doctor')
    db.add(Doctor(id=doctor_id, specialty='General Practice'))
    db.commit()
    return doctor_id


def add_rule(db, doctor_id, day_of_week: int, start: time, end: time, duration: int | None = 30) -> None:
    db.add(
        AvailabilityRule(
            doctor_id=doctor_id,
            day_of_week=day_of_week,
            start_time=start,
            end_time=end,
            slot_duration_minutes=duration,
        )
    )
    db.commit()


def add_settings(db, timezone_name: str = 'UTC', notice_hours: int = 24, slot_duration: int = 30) -> None:
    db.add(
        Settings(
            id=1,
            business_hours_start=time(9, 0),
            business_hours_end=time(17, 0),
            timezone=timezone_name,
            slot_duration=slot_duration,
            min_booking_notice=notice_hours,
        )
    )
    db.commit()


def add_blackout(db, doctor_id, day: date, reason: str = 'Conference') -> None:
    db.add(BlackoutDate(doctor_id=doctor_id, date=day, reason=reason))
    db.commit()


def add_holiday(db, day: date, description: str = 'Public holiday') -> None:
    db.add(Holiday(date=day, description=description))
    db.commit()


def add_appointment(db, doctor_id, patient_id, start: datetime, end: datetime, status: str = 'scheduled') -> uuid.UUID:
    appointment_id = uuid.uuid4()
    db.add(
        Appointment(
            id=appointment_id,
            doctor_id=doctor_id,
            patient_id=patient_id,
            start_time=start,
            end_time=end,
            status=status,
        )
    )
    db.commit()
    return appointment_id


@pytest.fixture
def doctor_id(db):
    return add_doctor(db)


@pytest.fixture
def patient_id(db):
    return add_user(db, role='patient')
