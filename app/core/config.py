"""
config.py

Application-wide configuration.

Loads .env values through Pydantic BaseSettings and exposes them to the rest
of the application as a single settings object.

Main settings:
- database connection
- JWT secret and access token lifetime
- SMTP (notification email) connection
- scheduler switches and billing thresholds
- CORS origins / public base URL for uploaded files

Design principles:
- every environment value is read through this file only
- local / test / production differ only by their .env
- settings are treated as immutable at runtime

Related files:
- app.main               : CORS, logging and scheduler start-up
- app.core.security      : JWT secret / expiry
- app.db.session         : DATABASE_URL
- app.services.*         : SMTP and billing thresholds

"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

# Settings loaded from .env
# extra="ignore": unknown environment values are ignored
class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DATABASE_URL: str
    TEST_DATABASE_URL: str | None = None

    SECRET_KEY: str
    ALGORITHM: str = "HS256"

    # 30 days, same lifetime the web front end expects
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30

    # one-time QR login tokens
    QR_TOKEN_TTL_SECONDS: int = 300

    LOG_LEVEL: str = "INFO"

    # CORS allowed origins (front end)
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # uploads
    PUBLIC_BASE_URL: str = "http://localhost:5000"
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    # SMTP
    # - EMAIL_ENABLED=False logs messages instead of sending them
    EMAIL_ENABLED: bool = False
    EMAIL_HOST: str = "smtp.gmail.com"
    EMAIL_PORT: int = 587
    EMAIL_USER: str | None = None
    EMAIL_PASS: str | None = None
    EMAIL_FROM: str | None = None
    EMAIL_USE_TLS: bool = True
    EMAIL_TIMEOUT_SECONDS: float = 10.0

    # scheduled billing jobs
    SCHEDULER_ENABLED: bool = True
    SCHEDULER_TIMEZONE: str = "UTC"

    OVERDUE_AFTER_MONTHS: int = 2
    REMINDER_LOOKAHEAD_DAYS: int = 7

# Settings instance imported across the application
# created once per process
settings = Settings()
