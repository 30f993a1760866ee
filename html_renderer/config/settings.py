"""
Application Settings
===================

Main application settings and environment configuration using Pydantic Settings.
Supports development, testing, and production environments.
"""

from typing import Optional
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="HTML to Image Renderer", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(
        default=3100,
        validation_alias=AliasChoices("PORT", "HTML_RENDER_PORT"),
        description="Server port",
    )
    max_body_bytes: int = Field(
        default=5 * 1024 * 1024, gt=0, description="Maximum accepted request body size"
    )

    # Browser Configuration
    browser_executable_path: Optional[str] = Field(
        default="/usr/bin/chromium",
        validation_alias=AliasChoices(
            "PUPPETEER_EXECUTABLE_PATH", "HTML_RENDER_BROWSER_EXECUTABLE_PATH"
        ),
        description="Path to the Chromium executable",
    )
    browser_headless: bool = Field(default=True, description="Run browser in headless mode")
    content_timeout_ms: int = Field(
        default=15000, gt=0, description="Network idle wait timeout in milliseconds"
    )

    # Rendering Configuration
    default_width: int = Field(default=760, description="Default render width")
    default_height: int = Field(default=507, description="Default render height")
    max_width: int = Field(default=4000, description="Maximum render width")
    max_height: int = Field(default=4000, description="Maximum render height")

    # Delivery Configuration
    delivery: str = Field(default="inline", description="Result delivery: inline or upload")
    upload_url: str = Field(
        default="https://tmpfiles.org/api/v1/upload", description="Temporary file host endpoint"
    )
    upload_timeout: int = Field(default=30, gt=0, description="Upload timeout in seconds")

    # Monitoring Configuration
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("delivery")
    @classmethod
    def validate_delivery(cls, v: str) -> str:
        """Validate delivery mode."""
        allowed = {"inline", "upload"}
        if v.lower() not in allowed:
            raise ValueError(f"Delivery must be one of: {allowed}")
        return v.lower()

    @field_validator("browser_executable_path")
    @classmethod
    def blank_executable_path(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty executable path as 'use the bundled browser'."""
        if v is not None and not v.strip():
            return None
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="HTML_RENDER_",
        populate_by_name=True,
        extra="ignore",
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
