"""
tagextract Configuration.

Centralized configuration management using Pydantic Settings.
Loads configuration from TAGEXTRACT_-prefixed environment variables.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TAGEXTRACT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Tags
    metadata_key: str = "tag"  # dataclass metadata / json_schema_extra key
    omitempty_modifier: str = "omitempty"

    # Logging
    log_level: str = "INFO"
    log_format: str = "standard"  # standard or json


# Global settings instance
settings = Settings()
