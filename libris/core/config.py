"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Required fields (SECRET_KEY, SMTP host when the SMTP
backend is selected) are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except those validated in
    validate_required (secret_key, email backend and SMTP host).
    """

    # App
    app_name: str = "libris-identity"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database: SQLite (aiosqlite) for local development, postgresql+asyncpg in production
    database_url: str = "sqlite+aiosqlite:///./libris.db"
    database_echo: bool = False
    db_pool_size: int | None = None
    db_max_overflow: int | None = None

    # Session tokens
    secret_key: SecretStr = SecretStr("")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    refresh_token_expire_days: int = 30

    # Emailed single-use tokens (verification and password reset)
    verify_email_token_expire_minutes: int = 60
    reset_password_token_expire_minutes: int = 60

    # Credentials
    bcrypt_rounds: int = 10
    max_login_attempts: int = 5
    lock_duration_hours: int = 1

    # Logout: when enabled, token ids are blocklisted in Redis until they expire
    session_revocation_enabled: bool = False

    # Outbound email: "smtp" or "log" (log-only, no delivery)
    email_backend: str = "log"
    email_from: str = "no-reply@libris.local"
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: SecretStr | None = None
    smtp_use_tls: bool = True
    smtp_timeout_seconds: int = 30

    # Base URL used to build verification and reset links in emails
    public_base_url: str = "http://localhost:8000"

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Request / middleware
    request_id_header: str = "X-Request-ID"
    rate_limit_enabled: bool = True

    # Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Validate required env and the email backend.

        - SECRET_KEY is always required (signs session tokens).
        - EMAIL_BACKEND must be 'smtp' or 'log'; 'smtp' requires SMTP_HOST.
        - Expiry horizons and attempt limits must be positive.
        """
        if not self.secret_key.get_secret_value():
            raise ValueError(
                "SECRET_KEY is required. Generate with: openssl rand -hex 32."
            )
        if self.email_backend == "smtp":
            if not self.smtp_host:
                raise ValueError(
                    "SMTP_HOST is required when email_backend is 'smtp'. "
                    "Set SMTP_HOST environment variable or update .env file."
                )
        elif self.email_backend != "log":
            raise ValueError(
                f"Invalid email_backend '{self.email_backend}'. "
                "Must be one of: 'smtp', 'log'"
            )
        for name in (
            "access_token_expire_minutes",
            "refresh_token_expire_days",
            "verify_email_token_expire_minutes",
            "reset_password_token_expire_minutes",
            "max_login_attempts",
            "lock_duration_hours",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name.upper()} must be a positive integer")
        if not 4 <= self.bcrypt_rounds <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
