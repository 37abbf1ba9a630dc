"""Application configuration using Pydantic Settings."""
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    app_name: str = "Class Attendance Tracker"
    debug: bool = False
    log_level: str = "INFO"

    # MongoDB
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "attendance_tracker"

    # JWT
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60
    jwt_refresh_token_expire_days: int = 30

    # Seeded admin account
    admin_email: str = "admin@attendance.local"
    admin_password: str = "change-me-admin"

    # Attendance lifecycle job
    attendance_timezone: str = "UTC"  # IANA name; day boundaries are computed in this zone
    attendance_schedule_mode: Literal["daily", "hourly"] = "hourly"
    attendance_catch_up_days: int = 7
    scheduler_enabled: bool = True

    # CORS (comma-separated origins)
    cors_origins: str = "http://localhost:5173"

    @model_validator(mode="after")
    def _validate_production_secrets(self):
        if not self.debug:
            if self.jwt_secret_key in ("change-me-in-production", ""):
                raise ValueError(
                    "JWT_SECRET_KEY must be set to a strong secret when DEBUG is not enabled. "
                    "Generate one with: python -c \"import secrets; print(secrets.token_hex(32))\""
                )
        if self.attendance_catch_up_days < 1:
            raise ValueError("ATTENDANCE_CATCH_UP_DAYS must be at least 1")
        try:
            ZoneInfo(self.attendance_timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"ATTENDANCE_TIMEZONE {self.attendance_timezone!r} is not a known IANA time zone")
        return self


settings = Settings()
