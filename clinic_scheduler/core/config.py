import os
from dataclasses import dataclass

from dotenv import load_dotenv


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    return int(value)


@dataclass(frozen=True)
class Settings:
    app_env: str = "development"
    database_url: str = "sqlite:///./clinic.db"
    log_level: str = "INFO"

    jwt_secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60

    cancellation_notice_hours: int = 24

    reminders_enabled: bool = True
    reminder_interval_minutes: int = 10
    reminder_tolerance_minutes: int = 10
    reminder_1h_enabled: bool = True
    reset_reminders_on_reschedule: bool = True

    notification_workers: int = 4
    notification_queue_limit: int = 100


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        app_env=os.getenv("APP_ENV", "development"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./clinic.db"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        jwt_secret_key=os.getenv("JWT_SECRET_KEY", "change-me"),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        jwt_expires_minutes=_get_int(os.getenv("JWT_EXPIRES_MINUTES"), 60),
        cancellation_notice_hours=_get_int(os.getenv("CANCELLATION_NOTICE_HOURS"), 24),
        reminders_enabled=_get_bool(os.getenv("REMINDERS_ENABLED"), default=True),
        reminder_interval_minutes=_get_int(os.getenv("REMINDER_INTERVAL_MINUTES"), 10),
        reminder_tolerance_minutes=_get_int(os.getenv("REMINDER_TOLERANCE_MINUTES"), 10),
        reminder_1h_enabled=_get_bool(os.getenv("REMINDER_1H_ENABLED"), default=True),
        reset_reminders_on_reschedule=_get_bool(os.getenv("RESET_REMINDERS_ON_RESCHEDULE"), default=True),
        notification_workers=_get_int(os.getenv("NOTIFICATION_WORKERS"), 4),
        notification_queue_limit=_get_int(os.getenv("NOTIFICATION_QUEUE_LIMIT"), 100),
    )


def validate_runtime_config(settings: Settings) -> None:
    if settings.app_env.lower() == "production" and settings.jwt_secret_key == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if settings.reminder_interval_minutes <= 0:
        raise RuntimeError("REMINDER_INTERVAL_MINUTES must be greater than 0.")
    if settings.notification_workers <= 0:
        raise RuntimeError("NOTIFICATION_WORKERS must be greater than 0.")
