from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Literal, Optional


class Settings(BaseSettings):
    """
    Settings class to retrieve environment variables.
    """

    DATABASE_URL: str = "sqlite+aiosqlite:///./techfix.db"
    ADMIN_API_KEY: str = "change-me"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Coupon / booking behaviour
    COUPON_REDEMPTION_STRATEGY: Literal["atomic", "read_then_write"] = "atomic"
    BOOKING_ATOMIC_COMMIT: bool = True
    BOOKING_SOURCE: str = "booking_popup"
    DEFAULT_TIME_SLOTS: List[str] = ["09:00 AM", "12:00 PM", "02:00 PM", "05:00 PM"]
    DEFAULT_BLACKOUT_WEEKDAYS: List[int] = [6]  # Monday is 0

    # Mail configuration
    NOTIFY_ON_BOOKING: bool = False
    NOTIFY_ON_CONTACT: bool = False
    ADMIN_EMAIL: Optional[str] = None
    MAIL_USERNAME: str = ""
    MAIL_PASSWORD: str = ""
    MAIL_FROM: str = "notifications@example.com"
    MAIL_PORT: int = 587
    MAIL_SERVER: str = "localhost"
    MAIL_FROM_NAME: str = "TechFix Notifications"
    MAIL_STARTTLS: bool = True
    MAIL_SSL_TLS: bool = False
    USE_CREDENTIALS: bool = True
    VALIDATE_CERTS: bool = True

    model_config = SettingsConfigDict(
        env_file='.env',
        extra='ignore',
    )


Config = Settings()
