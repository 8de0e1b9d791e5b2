"""Configuration Management - Loader and Logging Settings.

Provides environment-aware configuration with validation. Values load from
environment variables (nested with ``__``, e.g. ``LOADER__NORMALIZE=false``)
and an optional ``.env`` file.
"""

from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoaderConfig(BaseSettings):
    """Series ingestion defaults.

    The normalize/convert flags are only defaults; callers can override them
    per load.
    """

    file_extension: str = Field(
        default=".dcm", description="Extension of slice files in a series folder"
    )
    normalize: bool = Field(
        default=True,
        description="Rescale samples to the full unsigned 8/16-bit range",
    )
    convert_to_float: bool = Field(
        default=True,
        description="Widen samples to float32 when not normalizing",
    )
    max_file_size_mb: int = Field(
        default=512, ge=1, description="Largest slice file the reader will open"
    )

    @field_validator("file_extension")
    @classmethod
    def ensure_leading_dot(cls, v: str) -> str:
        """Accept 'dcm' as well as '.dcm'."""
        if v and not v.startswith("."):
            return f".{v}"
        return v


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or console")

    @field_validator("log_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        v = v.lower()
        if v not in {"json", "console"}:
            raise ValueError(f"log_format must be 'json' or 'console', got {v!r}")
        return v


class Settings(BaseSettings):
    """Main application settings.

    Usage:
        from dicom_volume.core.config import get_settings
        settings = get_settings()
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="dicom-volume", description="Application name")
    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def max_file_size_bytes(self) -> int:
        return self.loader.max_file_size_mb * 1024 * 1024


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings(force_reload: bool = False) -> Settings:
    """Get application settings (singleton).

    Args:
        force_reload: Force reload settings from environment

    Returns:
        Settings instance

    """
    global _settings
    if _settings is None or force_reload:
        _settings = Settings()
    return _settings
