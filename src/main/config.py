"""
Application Settings - Main Layer

Use Pydantic Settings for configuration management.
This module handles configuration settings provided using
environment variables, .env files and default values.

Every integration is optional: an absent host, token or key disables the
corresponding feature instead of preventing startup.
"""

from typing import Optional, Tuple

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.shared import CIRCLE_API_BASE_URL, EnumEnvironment, EnumLogLevel
from src.shared.env import load_secret_file_variables  # noqa: F401


class HomeAssistantSettings(BaseSettings):
    """Home-automation hub configuration settings."""

    host: Optional[str] = Field(
        default=None,
        description="Hub origin, e.g. https://home.example.org (ngrok tunnels welcome)",
        validation_alias=AliasChoices(
            "HOME_ASSISTANT_HOST", "VITE_HOME_ASSISTANT_HOST"
        ),
    )
    token: Optional[str] = Field(
        default=None,
        description="Long-lived access token",
        validation_alias=AliasChoices(
            "HOME_ASSISTANT_TOKEN", "VITE_HOME_ASSISTANT_TOKEN"
        ),
    )
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    refresh_interval: float = Field(
        default=5.0, description="Seconds between background polls"
    )
    throttle_interval: float = Field(
        default=0.3, description="Minimum seconds between two state reads"
    )
    follow_up_delays: Tuple[float, ...] = Field(
        default=(0.2, 0.6, 1.2),
        description="Seconds after a command at which follow-up polls run",
    )
    auto_refresh: bool = Field(
        default=True, description="Poll tracked entities in the background"
    )
    max_controllers: int = Field(
        default=64, description="Most entities tracked (and polled) at once"
    )
    controller_idle_timeout: Optional[float] = Field(
        default=300.0,
        description="Seconds without requests before an entity stops being tracked",
    )
    proxy_prefix: str = Field(
        default="/api/home-assistant",
        description="Path prefix of the development proxy",
    )

    model_config = SettingsConfigDict(
        env_prefix="HOME_ASSISTANT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


class CircleSettings(BaseSettings):
    """Payments provider configuration settings."""

    api_key: Optional[str] = Field(
        default=None,
        description="Operator API key",
        validation_alias=AliasChoices("CIRCLE_API_KEY", "VITE_CIRCLE_API_KEY"),
    )
    entity_secret_hex: Optional[str] = Field(
        default=None,
        description="32-byte entity secret as 64 hex characters",
        validation_alias=AliasChoices(
            "CIRCLE_ENTITY_SECRET_HEX", "VITE_CIRCLE_ENTITY_SECRET_HEX"
        ),
    )
    entity_secret: Optional[str] = Field(
        default=None,
        description="Legacy pre-registered static ciphertext",
        validation_alias=AliasChoices(
            "CIRCLE_ENTITY_SECRET", "VITE_CIRCLE_ENTITY_SECRET"
        ),
    )
    base_url: str = Field(
        default=CIRCLE_API_BASE_URL, description="Provider API origin"
    )
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    proxy_prefix: str = Field(
        default="/api/circle",
        description="Path prefix of the development proxy",
    )
    default_wallet_set_name: str = Field(
        default="Casa Color", description="Wallet-set name used when none is given"
    )

    model_config = SettingsConfigDict(
        env_prefix="CIRCLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def entity_secret_mode(self) -> str:
        if self.entity_secret_hex:
            return "hex"
        if self.entity_secret:
            return "legacy"
        return "none"


class AppInfoSettings(BaseSettings):
    """Service metadata and server settings."""

    title: str = Field(default="Casa Color", description="Service title")
    description: str = Field(
        default="Device control and payments proxy for Casa Color residents",
        description="Service description",
    )
    version: str = Field(default="1.0.0", description="Service version")
    git_commit: str = Field(
        default="unknown",
        description="Git commit hash",
        validation_alias=AliasChoices("APP_GIT_COMMIT", "GIT_COMMIT"),
    )
    build_time: str = Field(
        default="unknown",
        description="Build timestamp",
        validation_alias=AliasChoices("APP_BUILD_TIME", "BUILD_TIME"),
    )
    debug: bool = Field(default=False, description="Enable debug mode")
    host: str = Field(default="0.0.0.0", description="Interface to bind the server")
    port: int = Field(default=8080, description="Port to bind the server")
    reload: bool = Field(
        default=False, description="Enable auto-reload for development"
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    level: EnumLogLevel = Field(default=EnumLogLevel.INFO, description="Logging level")
    json_output: Optional[bool] = Field(
        default=None,
        description="Render JSON lines; defaults to on in production only",
        validation_alias=AliasChoices("LOG_JSON", "json_output"),
    )
    file_path: Optional[str] = Field(
        default=None, description="Log file path (if None, logs to console)"
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class AppSettings(BaseSettings):
    """Main application settings, aggregating all sub-settings."""

    environment: EnumEnvironment = Field(
        default=EnumEnvironment.DEVELOPMENT, description="Application environment"
    )

    app: AppInfoSettings = Field(default_factory=AppInfoSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    home_assistant: HomeAssistantSettings = Field(
        default_factory=HomeAssistantSettings
    )
    circle: CircleSettings = Field(default_factory=CircleSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )


def get_settings() -> AppSettings:
    """
    Get application settings instance Factory.

    Used to be mocked in tests, allowing different settings based on enviroment.
    """
    return AppSettings()


settings = get_settings()
