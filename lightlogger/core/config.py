"""
Application Configuration

This module provides centralized configuration management using Pydantic Settings.
Configuration can be loaded from environment variables or .env files.
"""

from typing import Optional, List
from pathlib import Path
from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Get project root directory
PROJECT_ROOT = Path(__file__).parent.parent.parent


class LocationSettings(BaseSettings):
    """Location provider configuration"""
    provider: str = Field(default="mock", description="Location provider: mock")
    auto_dispatch: bool = Field(
        default=True,
        description="Apply provider events on a background dispatcher thread"
    )
    mock_route: str = Field(default="taipei_101", description="Mock route name")
    mock_interval: float = Field(default=1.0, description="Mock fix interval (seconds)")
    mock_grant: str = Field(
        default="authorized_when_in_use",
        description="Authorization the mock provider grants when asked"
    )

    model_config = SettingsConfigDict(env_prefix="LOCATION_")


class ExportSettings(BaseSettings):
    """Export configuration"""
    filename_prefix: str = Field(default="light_gps", description="Export filename prefix")
    geojson_indent: Optional[int] = Field(default=2, description="GeoJSON pretty-print indent")

    model_config = SettingsConfigDict(env_prefix="EXPORT_")


class APISettings(BaseSettings):
    """API server configuration"""
    host: str = Field(default="127.0.0.1", description="API host")
    port: int = Field(default=8000, description="API port")
    reload: bool = Field(default=False, description="Auto-reload on changes")
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(env_prefix="API_")

    @field_validator('cors_origins', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',')]
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration"""
    level: str = Field(default="INFO", description="Log level")
    file: Optional[str] = Field(default=None, description="Log file path")
    rotation: str = Field(default="10 MB", description="Log file rotation threshold")

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    """Main application settings"""

    # Application info
    app_name: str = Field(default="Light Logger", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")

    # Sub-settings
    location: LocationSettings = Field(default_factory=LocationSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)
    api: APISettings = Field(default_factory=APISettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings instance (cached)
    """
    return Settings()


# Convenience access to settings
settings = get_settings()
