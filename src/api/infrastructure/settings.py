"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        FOLIO_DB_HOST: Database host (default: localhost)
        FOLIO_DB_PORT: Database port (default: 5432)
        FOLIO_DB_DATABASE: Database name (default: folio)
        FOLIO_DB_USERNAME: Database user (default: folio)
        FOLIO_DB_PASSWORD: Database password (required in production)
        FOLIO_DB_URL: Full SQLAlchemy URL overriding the fields above
            (e.g. sqlite+aiosqlite:///./folio.db for local runs)
        FOLIO_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
        FOLIO_DB_CREATE_SCHEMA: Create missing tables at startup (default: false)
    """

    model_config = SettingsConfigDict(
        env_prefix="FOLIO_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="folio", description="Database name")
    username: str = Field(default="folio", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    url: str | None = Field(
        default=None,
        description="Full SQLAlchemy URL, overrides host/port/database/credentials",
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )
    create_schema: bool = Field(
        default=False,
        description="Create missing tables on startup",
    )

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        if self.url is not None:
            return self.url.split("@")[-1]
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class AuthSettings(BaseSettings):
    """Bearer token settings.

    Environment variables:
        FOLIO_AUTH_JWT_SECRET: HMAC signing secret (required in production)
        FOLIO_AUTH_ISSUER: Token issuer (default: folio-api)
        FOLIO_AUTH_AUDIENCE: Token audience (default: folio-client)
        FOLIO_AUTH_EXPIRATION_MINUTES: Token lifetime (default: 1440)
    """

    model_config = SettingsConfigDict(
        env_prefix="FOLIO_AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    jwt_secret: SecretStr = Field(
        default=SecretStr("dev-only-secret-change-me-please-0123456789"),
        description="HMAC secret used to sign bearer tokens",
    )
    issuer: str = Field(default="folio-api", description="Token issuer")
    audience: str = Field(default="folio-client", description="Token audience")
    expiration_minutes: int = Field(
        default=1440,
        description="Token lifetime in minutes",
        ge=1,
    )

    @model_validator(mode="after")
    def validate_secret_length(self) -> "AuthSettings":
        """HS256 secrets shorter than 32 bytes are rejected."""
        if len(self.jwt_secret.get_secret_value()) < 32:
            raise ValueError("jwt_secret must be at least 32 characters long")
        return self

    @property
    def expiration(self) -> timedelta:
        return timedelta(minutes=self.expiration_minutes)


class IngestionSettings(BaseSettings):
    """Resume ingestion settings.

    Environment variables:
        FOLIO_INGESTION_UPLOAD_DIR: Directory for uploaded documents (default: uploads)
        FOLIO_INGESTION_WORKER_ENABLED: Run the worker inside the API process (default: false)
        FOLIO_INGESTION_POLL_INTERVAL_SECONDS: Poll interval for missed jobs (default: 5)
        FOLIO_INGESTION_BATCH_SIZE: Jobs claimed per poll (default: 10)
        FOLIO_INGESTION_CONCURRENCY: Jobs processed at once (default: 1)
        FOLIO_INGESTION_MAX_ATTEMPTS: Attempts before dead-lettering (default: 5)
        FOLIO_INGESTION_BACKOFF_BASE_SECONDS: First retry delay (default: 30)
        FOLIO_INGESTION_BACKOFF_MAX_SECONDS: Retry delay cap (default: 3600)
        FOLIO_INGESTION_LEASE_SECONDS: Time before a stuck job is reclaimed (default: 600)
        FOLIO_INGESTION_NOTIFY_CHANNEL: LISTEN/NOTIFY channel (default: ingestion_jobs)
        FOLIO_INGESTION_MAX_UPLOAD_BYTES: Largest accepted upload (default: 10 MiB)
    """

    model_config = SettingsConfigDict(
        env_prefix="FOLIO_INGESTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    upload_dir: str = Field(default="uploads", description="Upload directory")
    worker_enabled: bool = Field(
        default=False,
        description="Start the ingestion worker in the API lifespan",
    )
    poll_interval_seconds: int = Field(default=5, ge=1)
    batch_size: int = Field(default=10, ge=1, le=1000)
    concurrency: int = Field(default=1, ge=1, le=64)
    max_attempts: int = Field(default=5, ge=1)
    backoff_base_seconds: int = Field(default=30, ge=0)
    backoff_max_seconds: int = Field(default=3600, ge=0)
    lease_seconds: int = Field(default=600, ge=1)
    notify_channel: str = Field(default="ingestion_jobs")
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, ge=1)

    @model_validator(mode="after")
    def validate_backoff(self) -> "IngestionSettings":
        """Validate backoff max >= base."""
        if self.backoff_max_seconds < self.backoff_base_seconds:
            raise ValueError(
                f"backoff_max_seconds ({self.backoff_max_seconds}) must be >= "
                f"backoff_base_seconds ({self.backoff_base_seconds})"
            )
        return self


class AISettings(BaseSettings):
    """Settings for the chat-completions model that structures resumes.

    Environment variables:
        FOLIO_AI_BASE_URL: OpenAI-compatible API base URL
        FOLIO_AI_API_KEY: API key
        FOLIO_AI_MODEL: Model name
        FOLIO_AI_TIMEOUT_SECONDS: Request timeout (default: 60)
        FOLIO_AI_TEMPERATURE: Sampling temperature (default: 0.1)
    """

    model_config = SettingsConfigDict(
        env_prefix="FOLIO_AI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = Field(default="https://api.openai.com/v1")
    api_key: SecretStr = Field(default=SecretStr(""))
    model: str = Field(default="gpt-4o-mini")
    timeout_seconds: float = Field(default=60.0, gt=0)
    temperature: float = Field(default=0.1, ge=0, le=2)


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_prefix="FOLIO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Folio API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Minimum log level")

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()

    @property
    def auth(self) -> AuthSettings:
        """Get auth settings."""
        return get_auth_settings()

    @property
    def ingestion(self) -> IngestionSettings:
        """Get ingestion settings."""
        return get_ingestion_settings()

    @property
    def ai(self) -> AISettings:
        """Get AI settings."""
        return get_ai_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_auth_settings() -> AuthSettings:
    """Get cached auth settings."""
    return AuthSettings()


@lru_cache
def get_ingestion_settings() -> IngestionSettings:
    """Get cached ingestion settings."""
    return IngestionSettings()


@lru_cache
def get_ai_settings() -> AISettings:
    """Get cached AI settings."""
    return AISettings()
