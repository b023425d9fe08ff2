"""
Application configuration read from environment variables.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _list_env(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    app_name: str = "POS Admin API"
    app_base_url: str = "http://localhost:5173"
    database_type: str = "sqlite"
    jwt_secret: str = "demo_secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 8
    password_reset_expire_minutes: int = 60
    max_failed_logins: int = 5
    lockout_minutes: int = 60
    currency: str = "IDR"
    low_stock_threshold: int = 5
    medium_stock_threshold: int = 20
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    log_format: str = "json"
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    mail_from: str = "no-reply@pos-admin.local"


@lru_cache
def get_settings() -> Settings:
    """Build settings once per process."""
    return Settings(
        app_name=os.getenv("APP_NAME", "POS Admin API"),
        app_base_url=os.getenv("APP_BASE_URL", "http://localhost:5173").rstrip("/"),
        database_type=os.getenv("DATABASE_TYPE", "sqlite"),
        jwt_secret=os.getenv("JWT_SECRET", "demo_secret"),
        jwt_expire_hours=_int_env("JWT_EXPIRE_HOURS", 8),
        password_reset_expire_minutes=_int_env("PASSWORD_RESET_EXPIRE_MINUTES", 60),
        max_failed_logins=_int_env("MAX_FAILED_LOGINS", 5),
        lockout_minutes=_int_env("LOCKOUT_MINUTES", 60),
        currency=os.getenv("CURRENCY", "IDR"),
        low_stock_threshold=_int_env("LOW_STOCK_THRESHOLD", 5),
        medium_stock_threshold=_int_env("MEDIUM_STOCK_THRESHOLD", 20),
        cors_origins=_list_env("CORS_ORIGINS", "*"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_format=os.getenv("LOG_FORMAT", "json").lower(),
        smtp_host=os.getenv("SMTP_HOST") or None,
        smtp_port=_int_env("SMTP_PORT", 587),
        smtp_user=os.getenv("SMTP_USER") or None,
        smtp_password=os.getenv("SMTP_PASSWORD") or None,
        mail_from=os.getenv("MAIL_FROM", "no-reply@pos-admin.local"),
    )


def get_engine_url(database_type: str | None = None) -> str:
    """Build the database URL from environment variables."""
    db_type = database_type or os.getenv("DATABASE_TYPE", "sqlite")

    if db_type == "sqlite":
        db_path = os.getenv("DATABASE_PATH", "./data/pos.db")
        return f"sqlite:///{db_path}"
    elif db_type == "postgresql":
        host = os.getenv("DB_HOST", "localhost")
        port = os.getenv("DB_PORT", "5432")
        dbname = os.getenv("DB_NAME", "pos")
        user = os.getenv("DB_USER", "postgres")
        password = os.getenv("DB_PASSWORD", "postgres")
        return f"postgresql://{user}:{password}@{host}:{port}/{dbname}"
    else:
        raise ValueError(f"Unsupported database type: {db_type}")
