"""
Configuration management for the story engine
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine settings loaded from environment variables"""

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_file: Optional[str] = Field(
        default=None, description="Optional path of a log file for CLI runs"
    )

    # Playback
    random_seed: Optional[int] = Field(
        default=None,
        description="Seed for the default random source (unseeded when not set)",
    )

    # Connectivity validation
    text_preview_length: int = Field(default=50, gt=0)
    default_layer_name: str = Field(
        default="root",
        description="Name of the implicit layer holding top-level nodes",
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
