"""
Application configuration using Pydantic settings.
"""
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Upstream data providers
    openweather_base_url: str = Field(
        default="https://api.openweathermap.org",
        description="Base URL for the OpenWeather API"
    )
    openweather_api_key: str = Field(
        default="",
        description="OpenWeather API key (weather data falls back when empty)"
    )
    sentinelhub_base_url: str = Field(
        default="https://services.sentinel-hub.com",
        description="Base URL for Sentinel Hub"
    )
    sentinelhub_client_id: str = Field(
        default="",
        description="Sentinel Hub OAuth client id"
    )
    sentinelhub_client_secret: str = Field(
        default="",
        description="Sentinel Hub OAuth client secret"
    )
    soilgrids_base_url: str = Field(
        default="https://rest.isric.org",
        description="Base URL for the ISRIC SoilGrids API"
    )
    gfw_base_url: str = Field(
        default="https://data-api.globalforestwatch.org",
        description="Base URL for the Global Forest Watch data API"
    )
    gfw_api_key: str = Field(
        default="",
        description="Global Forest Watch API key"
    )
    request_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for upstream HTTP requests"
    )

    # Retry Configuration
    max_retry_attempts: int = Field(
        default=3,
        description="Maximum number of retry attempts for API calls"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=1,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=10,
        description="Maximum wait time in seconds between retries"
    )

    # Monitoring Parameters
    satellite_radius_km: float = Field(
        default=5.0,
        description="Radius around the point used for NDVI/NDMI statistics"
    )
    deforestation_radius_km: float = Field(
        default=10.0,
        description="Radius around the point used for deforestation alerts"
    )
    synthetic_seed: Optional[int] = Field(
        default=None,
        description="Seed for synthetic display data (AQI estimate, history); random when unset"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Habitat Ecosystem Monitoring",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
