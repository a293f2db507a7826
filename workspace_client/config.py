"""Configuration management using pydantic-settings."""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Workspace client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="WORKSPACE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Remote service
    api_base_url: str = Field(default="http://localhost:3000", description="Base URL of the chat service")
    request_timeout: float = Field(default=60.0, gt=0, description="Transport timeout in seconds")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")
    log_file: Optional[str] = Field(default=None, description="Optional log file path")


# Global settings instance
settings = Settings()
