"""Configuration settings using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict, YamlConfigSettingsSource

from picmark.config.constants import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_LOG_DIR,
    DEFAULT_OUTPUT_SEPARATOR,
    DEFAULT_UPLOAD_ENDPOINT,
    DEFAULT_UPLOAD_TIMEOUT,
    DOCUMENT_EXTENSIONS,
)
from picmark.exceptions import ConfigurationError

ScanMode = Literal["line-start", "inline"]


class UploadConfig(BaseModel):
    """Image host upload configuration."""

    # Not validated as a URL here: a malformed address is reported per file
    endpoint: str = DEFAULT_UPLOAD_ENDPOINT
    timeout: float | None = Field(default=DEFAULT_UPLOAD_TIMEOUT, gt=0)  # None = no cap


class ScanConfig(BaseModel):
    """Reference scanning configuration."""

    mode: ScanMode = "line-start"
    extensions: list[str] = Field(default_factory=lambda: sorted(DOCUMENT_EXTENSIONS))


class OutputConfig(BaseModel):
    """Output configuration."""

    separator: str = DEFAULT_OUTPUT_SEPARATOR
    on_conflict: Literal["overwrite", "rename"] = "rename"


class PicmarkSettings(BaseSettings):
    """Main configuration class for picmark."""

    model_config = SettingsConfigDict(
        env_prefix="PICMARK_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        """Customize settings sources to include YAML file."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=DEFAULT_CONFIG_FILE),
            file_secret_settings,
        )

    upload: UploadConfig = Field(default_factory=UploadConfig)
    scan: ScanConfig = Field(default_factory=ScanConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_dir: str = DEFAULT_LOG_DIR


@lru_cache
def get_settings() -> PicmarkSettings:
    """Get cached settings instance.

    Raises:
        ConfigurationError: picmark.yaml or a PICMARK_ variable holds an invalid value
    """
    try:
        return PicmarkSettings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def reload_settings() -> PicmarkSettings:
    """Force reload settings (clear cache)."""
    get_settings.cache_clear()
    return get_settings()
