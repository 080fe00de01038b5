from functools import lru_cache

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "TeamLedger"
    app_env: str = "development"  # development, testing, production
    debug: bool = False
    enable_openapi: bool = True

    # Security
    log_user_emails: bool = False  # Keep off in production (GDPR)

    # Database
    database_url: str
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Auth
    jwt_access_secret: str
    jwt_refresh_secret: str
    jwt_algorithm: str = "HS256"
    jwt_access_expiry: str = "15m"
    jwt_refresh_expiry: str = "7d"
    argon2_time_cost: int = 3
    argon2_memory_cost: int = 65536
    argon2_parallelism: int = 1

    # One-time codes
    otp_length: int = 6
    otp_expiry_minutes: int = 10

    # Invites
    invite_expire_days: int = 7

    # Membership cache
    membership_cache_ttl_seconds: int = 300

    @field_validator("jwt_access_secret", "jwt_refresh_secret")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        if v == "change-this-to-a-secure-random-string":
            raise ValueError(
                "JWT secrets must be changed from the default value. "
                "Generate a secure secret with: openssl rand -hex 32"
            )
        if len(v) < 32:
            raise ValueError("JWT secrets must be at least 32 characters")
        return v

    @field_validator("jwt_refresh_secret")
    @classmethod
    def validate_distinct_secrets(cls, v: str, info: ValidationInfo) -> str:
        """Access and refresh tokens must not share a signing key."""
        if v == info.data.get("jwt_access_secret"):
            raise ValueError("JWT_REFRESH_SECRET must differ from JWT_ACCESS_SECRET")
        return v

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: list[str]) -> list[str]:
        """Reject wildcards since credentials are allowed."""
        for origin in v:
            if origin == "*":
                raise ValueError(
                    "CORS wildcard '*' is not allowed when allow_credentials=True. "
                    "Specify explicit origins instead."
                )
        return v

    # Temporal
    temporal_host: str = "localhost:7233"
    temporal_namespace: str = "default"
    temporal_task_queue: str = "teamledger-queue"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Email (Resend)
    resend_api_key: str | None = None  # If not set, emails are logged but not sent
    email_from: str = "noreply@example.com"
    email_send_timeout_seconds: int = 10
    app_url: str = "http://localhost:3000"  # Frontend URL used in invite links

    # Cleanup (Temporal scheduled workflow)
    cleanup_schedule: str | None = None  # Cron syntax, e.g. "0 3 * * *"
    cleanup_retention_days: int = 30

    # Redis (optional - app works without it)
    redis_url: str | None = None  # e.g. "redis://localhost:6379/0"
    redis_pool_size: int = 10
    redis_socket_timeout: float = 1.0
    redis_connect_timeout: float = 1.0

    # Rate limiting (public auth endpoints)
    auth_rate_limit: str = "10/minute"
    login_rate_limit: str = "5/minute"


@lru_cache
def get_settings() -> Settings:
    return Settings()
