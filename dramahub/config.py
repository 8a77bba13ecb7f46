from typing import Final, Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .application.credentials import CookieConfig
from .constants import DEFAULT_PORT, LOGIN_PATH, SESSION_MAX_AGE_SECONDS
from .domain.constants import MIN_PASSWORD_LENGTH


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env files."""

    # Server configuration
    debug: bool = Field(default=True, description="Enable debug mode")
    environment: Literal["development", "production"] = Field(
        default="development", description="Deployment environment"
    )
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="Server port")

    # Database configuration
    database_url: str = Field(
        default="sqlite:///./dramahub.db", description="Database connection URL"
    )

    # Application configuration
    app_name: str = Field(default="Drama Hub", description="Application name")
    version: str = Field(default="0.1.0", description="Application version")
    locale: Literal["ja", "en"] = Field(
        default="ja", description="Language of user-facing error messages"
    )

    # Admin session configuration
    session_max_age_seconds: int = Field(
        default=SESSION_MAX_AGE_SECONDS,
        ge=1,
        description="Lifetime of an admin session and its cookie",
    )
    login_path: str = Field(
        default=LOGIN_PATH, description="Where unauthenticated admins are sent"
    )
    min_password_length: int = Field(
        default=MIN_PASSWORD_LENGTH,
        ge=1,
        description="Minimum password length accepted at first-run setup",
    )

    # Logging configuration
    log_to_file: bool = Field(
        default=False, description="Force logging to file even in debug mode"
    )

    # Pydantic Settings configuration
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    def cookie_config(self) -> CookieConfig:
        """Build the session cookie configuration for this environment."""
        return CookieConfig.for_environment(
            production=self.is_production, max_age=self.session_max_age_seconds
        )


# Global settings instance
settings: Final = Settings()
