"""
Application settings using Pydantic BaseSettings.

Every setting can be provided through a ``RECSAN_``-prefixed environment
variable or a ``.env`` file.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration settings."""

    # Logging configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["console", "json"] = Field(
        default="console", description="Log format: json or console"
    )
    log_file: Path | None = Field(
        default=None, description="Optional rotating log file"
    )

    # Sanitizer configuration
    json_encoder: str | None = Field(
        default=None,
        description=(
            "Import path ('module:attribute') of the encoder used for tuples "
            "that are not key/value pairs, e.g. 'recsan.core.encoders:json_encoder'"
        ),
    )
    strict_options: bool = Field(
        default=False,
        description="Reject option bundles that set both 'only' and 'except'",
    )

    model_config = {
        "env_prefix": "RECSAN_",
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()
