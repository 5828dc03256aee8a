import json
import os
import sys
from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _should_load_env_file() -> str | None:
    """Determine if .env should be loaded.

    For local development, load `.env` automatically so `JWT_SECRET` can be
    provided from a local file. **JWT_SECRET remains required** and must be
    set in production via environment variables.

    Do NOT auto-load `.env` when running under pytest or in CI (so tests
    that validate missing secrets continue to fail fast).
    """
    if any("pytest" in str(x) for x in sys.argv if x):
        return None
    if os.environ.get("CI") in ("1", "true", "True"):
        return None
    return ".env"


class Settings(BaseSettings):
    # Environment configuration
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: 'development', 'production', or 'test'",
    )
    PORT: int = Field(default=5000, description="Port used by the dev server")
    API_VERSION: str = "1.0.0"

    DATABASE_URL: str = "sqlite:///./data/forum.db"
    JWT_SECRET: str = Field(
        ...,  # Required, no default
        description="JWT signing secret - must be set via JWT_SECRET environment variable",
    )
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = Field(
        default=60 * 24 * 30,
        description="Access token lifetime in minutes (30 days)",
    )
    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins (comma-separated in env var)",
    )

    # Optional admin bootstrap used by init_db.py only
    ADMIN_EMAIL: str | None = Field(
        default=None,
        description="Email of the admin account created by init_db.py",
    )
    ADMIN_PASSWORD: str | None = Field(
        default=None,
        description="Password of the admin account created by init_db.py",
    )

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(
        default=5,
        description="Number of persistent connections in pool",
    )
    DB_MAX_OVERFLOW: int = Field(
        default=10,
        description="Extra connections when pool exhausted",
    )
    DB_POOL_TIMEOUT: int = Field(
        default=30,
        description="Seconds to wait for connection from pool",
    )
    DB_POOL_RECYCLE: int = Field(
        default=1800,
        description="Recycle connections after N seconds (30 min default)",
    )

    AUTO_CREATE_DB: bool = Field(
        default=False,
        description="When true (development only), call Base.metadata.create_all on startup",
    )

    SLOW_REQUEST_THRESHOLD: float = Field(
        default=1.0,
        description="Log warning for requests slower than this (seconds)",
    )

    # Account tokens
    VERIFICATION_TOKEN_EXPIRE_HOURS: int = 24
    PASSWORD_RESET_TOKEN_EXPIRE_MINUTES: int = 60

    # Email Provider Settings
    EMAIL_PROVIDER: str = Field(
        default="console",
        description="Email provider: 'smtp' or 'console'",
    )
    SMTP_HOST: str = Field(
        default="localhost",
        description="SMTP server hostname",
    )
    SMTP_PORT: int = Field(
        default=587,
        description="SMTP server port",
    )
    SMTP_USER: str = Field(
        default="",
        description="SMTP username",
    )
    SMTP_PASSWORD: str = Field(
        default="",
        description="SMTP password",
    )
    SMTP_FROM_EMAIL: str = Field(
        default="noreply@qaforum.local",
        description="From email address",
    )
    SMTP_FROM_NAME: str = Field(
        default="Q&A Forum",
        description="From display name",
    )
    SMTP_USE_TLS: bool = Field(
        default=True,
        description="Use STARTTLS for SMTP connection (port 587)",
    )
    SMTP_USE_SSL: bool = Field(
        default=False,
        description="Use implicit SSL for SMTP connection (port 465)",
    )
    APP_URL: str = Field(
        default="http://localhost:3000",
        description="Frontend URL used in password reset links",
    )
    API_URL: str = Field(
        default="http://localhost:5000",
        description="Public API URL used in verification links",
    )

    # Generative AI
    GEMINI_API_KEY: str = Field(
        default="",
        description="Gemini API key; AI endpoints answer 503 when empty",
    )
    GEMINI_MODEL: str = "gemini-1.5-flash"
    AI_REQUEST_TIMEOUT: float = Field(
        default=30.0,
        description="Seconds to wait for the AI provider",
    )

    # File uploads
    UPLOAD_BACKEND: str = Field(
        default="local",
        description="Upload storage: 'local' disk or 'remote' object store",
    )
    UPLOAD_DIR: str = "data/uploads"
    UPLOAD_MAX_BYTES: int = 5 * 1024 * 1024
    OBJECT_STORAGE_URL: str = Field(
        default="",
        description="Base URL files are PUT to when UPLOAD_BACKEND=remote",
    )
    OBJECT_STORAGE_TOKEN: str = ""
    OBJECT_STORAGE_PUBLIC_URL: str = Field(
        default="",
        description="Public base URL of stored objects (defaults to OBJECT_STORAGE_URL)",
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def ai_configured(self) -> bool:
        return bool(self.GEMINI_API_KEY)

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | List[str]) -> List[str]:
        """Parse CORS origins from a comma-separated string or a JSON list."""
        if isinstance(v, str) and v.strip().startswith("["):
            return json.loads(v)
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("UPLOAD_BACKEND")
    @classmethod
    def validate_upload_backend(cls, v: str) -> str:
        if v not in ("local", "remote"):
            raise ValueError("UPLOAD_BACKEND must be 'local' or 'remote'")
        return v

    model_config = SettingsConfigDict(
        env_file=_should_load_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",  # Allow extra env vars (e.g., SENTRY_DSN) without validation errors
    )


# Instantiating Settings() raises pydantic.ValidationError if JWT_SECRET isn't set.
settings = Settings()  # type: ignore[call-arg]


def get_settings() -> Settings:
    """Get the settings instance (for dependency injection)."""
    return settings
