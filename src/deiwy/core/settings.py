"""Application settings and configuration.

This module defines all configuration options for the Deiwy application.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Deiwy", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    client_url: str = Field(default="http://localhost:8000", alias="CLIENT_URL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")

    # Database configuration
    database_url: str = Field(default="sqlite:///./deiwy.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Redis holds verification codes when configured; empty means in-process storage.
    redis_url: str = Field(default="", alias="REDIS_URL")

    # Server-side sessions
    session_cookie_name: str = Field(default="deiwy.sid", alias="SESSION_COOKIE_NAME")
    session_ttl_seconds: int = Field(default=60 * 60 * 24, alias="SESSION_TTL_SECONDS")
    session_remember_ttl_seconds: int = Field(
        default=60 * 60 * 24 * 30,
        alias="SESSION_REMEMBER_TTL_SECONDS",
    )
    session_cookie_secure: bool = Field(default=False, alias="SESSION_COOKIE_SECURE")

    # Email verification and password reset
    verification_code_ttl_seconds: int = Field(
        default=60 * 15,
        alias="VERIFICATION_CODE_TTL_SECONDS",
    )
    password_reset_ttl_seconds: int = Field(
        default=60 * 15,
        alias="PASSWORD_RESET_TTL_SECONDS",
    )

    # Outgoing mail; when smtp_host is unset messages are logged instead of sent.
    smtp_host: str | None = Field(default=None, alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_username: str | None = Field(default=None, alias="SMTP_USERNAME")
    smtp_password: str | None = Field(default=None, alias="SMTP_PASSWORD")
    smtp_use_tls: bool = Field(default=True, alias="SMTP_USE_TLS")
    smtp_from_email: str = Field(default="no-reply@deiwy.local", alias="SMTP_FROM_EMAIL")
    smtp_timeout_seconds: float = Field(default=30.0, alias="SMTP_TIMEOUT_SECONDS")

    # Pagination
    messages_batch_size: int = Field(default=20, alias="MESSAGES_BATCH_SIZE")
    users_search_batch_size: int = Field(default=10, alias="USERS_SEARCH_BATCH_SIZE")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def smtp_configured(self) -> bool:
        """Return True when an SMTP relay has been configured."""
        return bool(self.smtp_host)


settings = Settings()  # type: ignore[call-arg]
