"""
EcoVision - Configuration Management
Centralized configuration using pydantic-settings.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Map projection (reference point: Cercado de Lima)
    map_center_lat: float = -12.0464
    map_center_lng: float = -77.0428
    map_origin_x: float = 0.0
    map_origin_y: float = 0.0
    map_scale: float = 2000.0

    # Viewport
    zoom_min: float = 0.5
    zoom_max: float = 3.0
    wheel_zoom_step: float = 0.1
    button_zoom_step: float = 0.2
    marker_hit_radius: float = 16.0

    # Classification
    classification_latency_seconds: float = 2.0
    classifier_seed: Optional[int] = None
    classification_retention_seconds: float = 300.0
    max_finished_classifications: int = 100

    # Demo data
    seed_sample_reports: bool = False

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
