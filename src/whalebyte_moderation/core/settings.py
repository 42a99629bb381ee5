"""Application settings and configuration.

This module defines all configuration options for the WhaleByte moderation
service. Settings are loaded from environment variables with sensible defaults.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from whalebyte_moderation.services.moderation import ModerationPolicy
    from whalebyte_moderation.services.resolution import ModerationThresholds


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="WhaleByte Moderation", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(
        default="sqlite:///./whalebyte_moderation.db",
        alias="DATABASE_URL",
    )
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    create_tables_on_startup: bool = Field(default=False, alias="CREATE_TABLES_ON_STARTUP")

    # JWT authentication settings
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 30,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Resolution thresholds
    min_votes_required: int = Field(default=5, ge=1, alias="MIN_VOTES_REQUIRED")
    removal_threshold: float = Field(default=0.6, gt=0.0, le=1.0, alias="REMOVAL_THRESHOLD")
    ai_confidence_threshold: float = Field(
        default=0.8,
        gt=0.0,
        le=1.0,
        alias="AI_CONFIDENCE_THRESHOLD",
    )
    voting_period_seconds: int = Field(default=24 * 60 * 60, gt=0, alias="VOTING_PERIOD_SECONDS")

    # Feature flags
    enable_ai_moderation: bool = Field(default=True, alias="ENABLE_AI_MODERATION")
    enable_community_voting: bool = Field(default=True, alias="ENABLE_COMMUNITY_VOTING")

    # Reporting and voting policy
    block_self_reports: bool = Field(default=True, alias="BLOCK_SELF_REPORTS")
    block_author_votes: bool = Field(default=False, alias="BLOCK_AUTHOR_VOTES")
    block_reporter_votes: bool = Field(default=False, alias="BLOCK_REPORTER_VOTES")
    report_description_max_length: int = Field(
        default=500,
        ge=1,
        alias="REPORT_DESCRIPTION_MAX_LENGTH",
    )
    moderator_notes_max_length: int = Field(
        default=1000,
        ge=1,
        alias="MODERATOR_NOTES_MAX_LENGTH",
    )

    # Automated content check
    ai_check_timeout_seconds: float = Field(default=10.0, gt=0.0, alias="AI_CHECK_TIMEOUT_SECONDS")
    classifier_url: str | None = Field(default=None, alias="CLASSIFIER_URL")

    # Voting-period expiry sweep
    expiry_sweep_enabled: bool = Field(default=False, alias="EXPIRY_SWEEP_ENABLED")
    expiry_sweep_interval_seconds: float = Field(
        default=60.0,
        alias="EXPIRY_SWEEP_INTERVAL_SECONDS",
    )

    # CORS configuration for client access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling such as Alembic."""
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
    def moderation_thresholds(self) -> ModerationThresholds:
        """Return the configured resolution thresholds."""
        from whalebyte_moderation.services.resolution import ModerationThresholds

        return ModerationThresholds(
            min_votes_required=self.min_votes_required,
            removal_threshold=self.removal_threshold,
            ai_confidence_threshold=self.ai_confidence_threshold,
            voting_period=timedelta(seconds=self.voting_period_seconds),
        )

    @property
    def moderation_policy(self) -> ModerationPolicy:
        """Return the configured reporting and voting policy."""
        from whalebyte_moderation.services.moderation import ModerationPolicy

        return ModerationPolicy(
            block_self_reports=self.block_self_reports,
            block_author_votes=self.block_author_votes,
            block_reporter_votes=self.block_reporter_votes,
            description_max_length=self.report_description_max_length,
            notes_max_length=self.moderator_notes_max_length,
        )


settings = Settings()  # type: ignore[call-arg]
