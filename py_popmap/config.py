"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="POPMAP_",
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="console", description="Logging format (console or json)"
    )

    # Grid
    default_grid_width: int = Field(default=40, ge=1, description="Default grid width in cells")
    default_grid_height: int = Field(default=40, ge=1, description="Default grid height in cells")

    # Generation
    total_tiles: int = Field(default=1024, ge=0, description="Tile budget shared by all locations")
    buffer_size: int = Field(default=5, ge=0, description="Margin cells kept free of location centres")
    max_fallback_candidates: int = Field(
        default=50, ge=1, description="Candidates collected by the fallback spiral search"
    )


settings = Settings()
