import os
from dotenv import load_dotenv
from threading import Lock

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from medbook.core import config


load_dotenv()
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./medbook.db")


BEGIN_IMMEDIATE_OPTION = 'begin_immediate'


def create_store_engine(url: str, timeout_seconds: float | None = None) -> Engine:
    """Build an engine whose transactions can serialize bookings per doctor.

    PostgreSQL relies on ``SELECT ... FOR UPDATE``. SQLite ignores row locks,
    so a connection carrying the ``begin_immediate`` execution option starts
    its transaction with ``BEGIN IMMEDIATE`` instead, which admits one writer
    at a time and makes later writers wait up to the busy timeout. Every
    other transaction uses a plain deferred ``BEGIN``, and WAL journaling
    keeps open readers from blocking a writer's commit.
    """
    timeout = timeout_seconds or config.BOOKING_TRANSACTION_TIMEOUT_SECONDS

    if not url.startswith('sqlite'):
        return create_engine(url, pool_pre_ping=True, echo=config.SQL_ECHO)

    sqlite_engine = create_engine(
        url,
        echo=config.SQL_ECHO,
        connect_args={'check_same_thread': False, 'timeout': timeout},
    )

    @event.listens_for(sqlite_engine, 'connect')
    def _configure_connection(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute('PRAGMA journal_mode=WAL')
        finally:
            cursor.close()

    @event.listens_for(sqlite_engine, 'begin')
    def _begin(connection):
        if connection.get_execution_options().get(BEGIN_IMMEDIATE_OPTION):
            connection.exec_driver_sql('BEGIN IMMEDIATE')
        else:
            connection.exec_driver_sql('BEGIN')

    return sqlite_engine


engine = create_store_engine(DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_schema_checked: set[str] = set()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _ensure_table_schema(
    table_name: str,
    migration_steps: list[tuple[str, str]],
    index_statements: list[str],
    bind: Engine | None = None,
) -> None:
    bind = bind or engine

    if table_name in _schema_checked:
        return

    with _schema_lock:
        if table_name in _schema_checked:
            return

        inspector = inspect(bind)

        if table_name not in inspector.get_table_names():
            _schema_checked.add(table_name)
            return

        existing_columns = {column['name'] for column in inspector.get_columns(table_name)}

        with bind.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            for statement in index_statements:
                connection.execute(text(statement))

        _schema_checked.add(table_name)


def ensure_availability_schema(bind: Engine | None = None) -> None:
    _ensure_table_schema(
        'availability_rules',
        [
            ('slot_duration_minutes', 'ALTER TABLE availability_rules ADD COLUMN slot_duration_minutes INTEGER'),
        ],
        [
            'CREATE INDEX IF NOT EXISTS idx_availability_rules_doctor_day '
            'ON availability_rules(doctor_id, day_of_week)',
        ],
        bind,
    )
    _ensure_table_schema(
        'blackout_dates',
        [
            ('reason', 'ALTER TABLE blackout_dates ADD COLUMN reason VARCHAR'),
        ],
        [
            'CREATE INDEX IF NOT EXISTS idx_blackout_dates_doctor_date ON blackout_dates(doctor_id, date)',
        ],
        bind,
    )
    _ensure_table_schema(
        'holidays',
        [
            ('description', 'ALTER TABLE holidays ADD COLUMN description VARCHAR'),
        ],
        [
            'CREATE INDEX IF NOT EXISTS idx_holidays_date ON holidays(date)',
        ],
        bind,
    )


def ensure_appointment_schema(bind: Engine | None = None) -> None:
    _ensure_table_schema(
        'appointments',
        [
            ('reason', 'ALTER TABLE appointments ADD COLUMN reason VARCHAR'),
            ('notes', 'ALTER TABLE appointments ADD COLUMN notes VARCHAR'),
            ('created_at', 'ALTER TABLE appointments ADD COLUMN created_at TIMESTAMP'),
            ('updated_at', 'ALTER TABLE appointments ADD COLUMN updated_at TIMESTAMP'),
        ],
        [
            'CREATE INDEX IF NOT EXISTS idx_appointments_doctor_start ON appointments(doctor_id, start_time)',
            'CREATE INDEX IF NOT EXISTS idx_appointments_time_range ON appointments(start_time, end_time)',
        ],
        bind,
    )
