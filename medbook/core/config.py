import os



def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
SQL_ECHO = _get_bool(os.getenv("SQL_ECHO"), default=False)

CORS_ALLOW_ORIGINS = _get_list(os.getenv("CORS_ALLOW_ORIGINS"), ["http://localhost:3000"])

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "1440"))

# Upper bound for the booking transaction (lock wait + statements).
BOOKING_TRANSACTION_TIMEOUT_SECONDS = float(os.getenv("BOOKING_TRANSACTION_TIMEOUT_SECONDS", "10"))
MAX_SLOT_RANGE_DAYS = int(os.getenv("MAX_SLOT_RANGE_DAYS", "60"))
MAX_BOOKING_TEXT_LENGTH = int(os.getenv("MAX_BOOKING_TEXT_LENGTH", "600"))

# Used when the settings table has no row yet.
DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "UTC")
DEFAULT_SLOT_DURATION_MINUTES = int(os.getenv("DEFAULT_SLOT_DURATION_MINUTES", "30"))
DEFAULT_MIN_BOOKING_NOTICE_HOURS = int(os.getenv("DEFAULT_MIN_BOOKING_NOTICE_HOURS", "24"))
DEFAULT_BUSINESS_HOURS_START = os.getenv("DEFAULT_BUSINESS_HOURS_START", "09:00")
DEFAULT_BUSINESS_HOURS_END = os.getenv("DEFAULT_BUSINESS_HOURS_END", "17:00")

def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if BOOKING_TRANSACTION_TIMEOUT_SECONDS <= 0:
        raise RuntimeError("BOOKING_TRANSACTION_TIMEOUT_SECONDS must be positive.")
