"""Engine configuration."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Engine settings loaded from environment variables (``TRIDCHESS_*``)."""

    model_config = SettingsConfigDict(
        env_prefix="TRIDCHESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"

    # World coordinates
    square_size: float = 1.0
    level_spacing: float = 1.0

    # Attack-board passengers
    default_arrival_choice: Literal["identity", "rot180"] = "identity"
    require_explicit_arrival: bool = True  # Rotating boards with a passenger need a choice


@lru_cache
def get_settings() -> EngineSettings:
    """Get cached settings instance."""
    return EngineSettings()
