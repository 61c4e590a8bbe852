"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.map_generator import (
    DEFAULT_MAP_HEIGHT, DEFAULT_MAP_WIDTH, DEFAULT_POLYGON_COUNT, DEFAULT_RELAXATION
)


class Settings(BaseSettings):
    """Application settings pulled from ``POLYMAP_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="POLYMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")

    # Map Generation Configuration
    default_polygon_count: int = Field(default=DEFAULT_POLYGON_COUNT, ge=3, description="Default number of polygons")
    default_map_width: float = Field(default=DEFAULT_MAP_WIDTH, gt=0, description="Default map width")
    default_map_height: float = Field(default=DEFAULT_MAP_HEIGHT, gt=0, description="Default map height")
    default_relaxation: int = Field(default=DEFAULT_RELAXATION, ge=0, description="Default Lloyd relaxation iterations")
    max_polygon_count: int = Field(default=20000, ge=3, description="Max polygons accepted by the API")
    max_stored_maps: int = Field(default=32, ge=1, description="Maps kept in the in-memory store")


settings = Settings()
