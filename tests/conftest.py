"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Sample environmental readings for the reference scenarios
- Sample upstream data (weather, satellite, soil, deforestation)
- Mock API client
- FastAPI test client
"""
import pytest
from typing import AsyncGenerator
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from habitat.main import app
from habitat.domain.models import (
    DeforestationData,
    EnvironmentalReading,
    SatelliteData,
    SoilData,
    WeatherData,
)
from habitat.infrastructure.external_api_client import ExternalAPIClient
from habitat.services.domain.synthetic_data import SeededSyntheticDataProvider


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def optimal_reading() -> EnvironmentalReading:
    """Near-optimal site: every indicator in its best band except forest cover."""
    return EnvironmentalReading(
        ndvi=0.65,
        moisture=50.0,
        temperature=25.0,
        aqi=40.0,
        forest_cover=40.0,
        soil_ph=6.8,
        humidity=60.0,
        rainfall=10.0,
    )


@pytest.fixture
def normal_reading() -> EnvironmentalReading:
    """All-normal site."""
    return EnvironmentalReading(
        ndvi=0.6,
        moisture=50.0,
        temperature=25.0,
        aqi=30.0,
        forest_cover=40.0,
        soil_ph=7.0,
        humidity=60.0,
        rainfall=10.0,
    )


@pytest.fixture
def normal_weather() -> WeatherData:
    return WeatherData(temperature=25.0, humidity=60.0, rainfall=10.0)


@pytest.fixture
def drought_weather() -> WeatherData:
    """Hot, dry and rainless."""
    return WeatherData(temperature=40.0, humidity=25.0, rainfall=1.0)


@pytest.fixture
def flood_weather() -> WeatherData:
    """Heavy rain with saturated air."""
    return WeatherData(temperature=28.0, humidity=90.0, rainfall=60.0)


@pytest.fixture
def sample_satellite() -> SatelliteData:
    return SatelliteData(ndvi_avg=0.62, ndmi_avg=0.48, suitability_score=53.6)


@pytest.fixture
def sample_soil() -> SoilData:
    return SoilData(ph=6.9, nitrogen=210.0, organic_matter=2.8)


@pytest.fixture
def quiet_deforestation() -> DeforestationData:
    return DeforestationData(total_alerts=3, recent_alerts=1)


@pytest.fixture
def synthetic() -> SeededSyntheticDataProvider:
    """Reproducible synthetic data."""
    return SeededSyntheticDataProvider(seed=42)


# ============================================================
# Mock API Client Fixtures
# ============================================================

@pytest.fixture
def mock_api_client(normal_weather, sample_satellite, sample_soil, quiet_deforestation):
    """Create a mock upstream data client where every provider succeeds."""
    mock_client = AsyncMock(spec=ExternalAPIClient)
    mock_client.fetch_weather.return_value = normal_weather
    mock_client.fetch_satellite.return_value = sample_satellite
    mock_client.fetch_soil.return_value = sample_soil
    mock_client.fetch_deforestation.return_value = quiet_deforestation
    return mock_client


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client() -> TestClient:
    """Create a synchronous test client for FastAPI."""
    return TestClient(app)


@pytest.fixture
async def async_test_client() -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client for FastAPI."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
