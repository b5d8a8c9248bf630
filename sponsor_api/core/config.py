from __future__ import annotations

import re
from typing import Final, Literal

from pydantic import Field, PostgresDsn, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

JWT_SECRET_MIN_LENGTH: Final[int] = 32
# Character classes a JWT secret must contain at least once.
_JWT_SECRET_CLASSES: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"[a-z]"),
    re.compile(r"[A-Z]"),
    re.compile(r"\d"),
    re.compile(r"[^\w\s]"),
)


class MissingRequiredSettingsError(Exception):
    """Raised when required settings are missing."""

    def __init__(self, missing_fields: list[str]) -> None:
        self.missing_fields = missing_fields
        super().__init__(f"Missing required environment variables: {', '.join(missing_fields)}")


class InvalidSettingsError(Exception):
    """Raised when settings are present but hold invalid values."""

    def __init__(self, invalid_fields: list[tuple[str, str]]) -> None:
        self.invalid_fields = invalid_fields
        summary = ", ".join(f"{field}: {message}" for field, message in invalid_fields)
        super().__init__(f"Invalid environment variables: {summary}")


class Settings(BaseSettings):
    """Runtime configuration read from the environment and an optional ``.env`` file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage (required)
    postgres_user: str = Field(..., description="Postgres user (required)")
    postgres_password: str = Field(..., description="Postgres password (required)")
    postgres_host: str = Field(..., description="Postgres host (required)")
    postgres_port: int = Field(..., description="Postgres port (required)")
    postgres_db: str = Field(..., description="Postgres database name (required)")
    redis_host: str = Field(..., description="Redis host, backing the rate limiter (required)")
    redis_port: int = Field(..., description="Redis port (required)")
    redis_db: int = Field(..., description="Redis database number (required)")

    # Bearer tokens are issued elsewhere; this service only verifies them (required)
    jwt_secret_key: str = Field(..., description="Shared secret for token verification")

    # Derived from the components above unless given explicitly
    database_url: PostgresDsn | str | None = Field(default=None, description="SQLAlchemy URL")
    rate_limit_storage_url: str | None = Field(default=None, description="slowapi storage URI")

    # Optional
    app_name: str = "newsletter-sponsor-api"
    environment: str = "local"
    log_level: str = "INFO"
    log_format: Literal["text", "json"] = "text"
    database_echo: bool = Field(default=False, description="Log every SQL statement")
    jwt_algorithm: str = "HS256"
    schedule_max_issues: int = Field(
        default=500,
        gt=0,
        description="Upper bound on issues generated for a newsletter in one run",
    )

    @model_validator(mode="after")
    def finalize(self) -> Settings:
        """Fill in derived URLs and reject weak JWT secrets."""
        if self.database_url is None:
            self.database_url = PostgresDsn.build(
                scheme="postgresql+asyncpg",
                username=self.postgres_user,
                password=self.postgres_password,
                host=self.postgres_host,
                port=self.postgres_port,
                path=self.postgres_db,
            )
        if self.rate_limit_storage_url is None:
            self.rate_limit_storage_url = (
                f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"
            )
        if not is_strong_jwt_secret(self.jwt_secret_key):
            raise ValueError(
                f"JWT secret key must be at least {JWT_SECRET_MIN_LENGTH} characters and "
                "include upper, lower, number, and symbol characters."
            )
        return self


def is_strong_jwt_secret(secret: str) -> bool:
    if len(secret) < JWT_SECRET_MIN_LENGTH:
        return False
    return all(pattern.search(secret) for pattern in _JWT_SECRET_CLASSES)


def validate_settings() -> Settings:
    """Load settings, sorting validation failures into missing and invalid variables.

    Raises:
        MissingRequiredSettingsError: If any required environment variable is unset.
        InvalidSettingsError: If environment variables hold invalid values.
    """
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as e:
        missing_fields: list[str] = []
        invalid_fields: list[tuple[str, str]] = []
        for error in e.errors():
            loc = error.get("loc", ())
            if error["type"] == "missing":
                missing_fields.append(str(loc[0] if loc else "unknown").upper())
            else:
                field_path = ".".join(str(part) for part in loc) or "unknown"
                invalid_fields.append((field_path, error.get("msg", "Invalid value")))

        if missing_fields:
            raise MissingRequiredSettingsError(missing_fields) from e
        if invalid_fields:
            raise InvalidSettingsError(invalid_fields) from e
        raise


# Loaded at import; sponsor_api/main.py reports failures and exits.
settings = validate_settings()
