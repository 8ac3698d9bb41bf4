"""
API request and response models using Pydantic.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from habitat.domain.models import (
    Alert,
    CalamityScenario,
    HistoryPoint,
    RiskAdvisory,
    SpeciesSuitability,
)


class RiskAdvisoryRequest(BaseModel):
    """Conditions for a standalone risk advisory."""
    temperature: float = Field(description="Temperature in °C", examples=[40.0])
    humidity: float = Field(ge=0, le=100, description="Relative humidity in percent", examples=[25.0])
    rainfall: float = Field(ge=0, description="Recent rainfall in mm", examples=[1.0])
    ndvi: float = Field(ge=-1, le=1, description="Vegetation index", examples=[0.2])
    moisture: float = Field(ge=0, le=100, description="Moisture index in percent", examples=[20.0])


class MetricsResponse(BaseModel):
    """Raw readings and the overall health score."""
    health_score: float
    ndvi_current: float
    soil_ph: float
    moisture_index: float
    lst_temp: float
    aqi: float
    forest_cover: float
    carbon_sequestration: float


class BreakdownEntry(BaseModel):
    """Contribution of a single indicator to the health score."""
    value: float = Field(description="Raw reading")
    score: float = Field(description="Normalized score (0-100)")
    contribution: float = Field(description="Weighted contribution to the total")
    status: str


class HealthCalculation(BaseModel):
    """How the health score is computed, for display."""
    formula: str
    weights: Dict[str, float]
    description: str


class DataSourcesResponse(BaseModel):
    """Which upstream sources were live and which fell back."""
    weather: str
    satellite: str
    soil: str
    deforestation: str


class MonitoringResponse(BaseModel):
    """Response model for the monitoring endpoint."""
    metrics: MetricsResponse
    health_breakdown: Dict[str, BreakdownEntry]
    health_calculation: HealthCalculation
    risk_advisory: RiskAdvisory
    history: List[HistoryPoint]
    alerts: List[Alert]
    data_sources: DataSourcesResponse


class HealthScoreResponse(BaseModel):
    """Response model for the health score endpoint."""
    health_score: float = Field(ge=0, le=100)
    health_breakdown: Dict[str, BreakdownEntry]
    health_calculation: HealthCalculation

    class Config:
        json_schema_extra = {
            "example": {
                "health_score": 92.84,
                "health_breakdown": {
                    "vegetation": {"value": 0.65, "score": 100.0, "contribution": 25.0, "status": "good"},
                    "forest_cover": {"value": 40.0, "score": 64.2, "contribution": 12.84, "status": "moderate"},
                },
                "health_calculation": {
                    "formula": "Weighted average of 6 ecosystem indicators",
                    "weights": {"vegetation": 0.25},
                    "description": "Health Score = (NDVI×25%) + ...",
                },
            }
        }


class SpeciesRecommendRequest(BaseModel):
    """
    Site conditions for species ranking.

    Conditions left out are looked up for lat/lng: temperature and rainfall
    from the weather provider, soil pH from SoilGrids.
    """
    lat: Optional[float] = Field(default=None, ge=-90, le=90, examples=[12.97])
    lng: Optional[float] = Field(default=None, ge=-180, le=180, examples=[77.59])
    temperature: Optional[float] = Field(default=None, description="Temperature in °C", examples=[27.0])
    soil_ph: Optional[float] = Field(default=None, ge=0, le=14, description="Soil pH", examples=[6.5])
    rainfall: Optional[float] = Field(default=None, ge=0, description="Daily rainfall in mm", examples=[4.0])


class SpeciesRecommendResponse(BaseModel):
    """Catalog species ranked by suitability, best first."""
    species: List[SpeciesSuitability]
    data_sources: Dict[str, str] = Field(
        description="Where each site condition came from (request, live provider or fallback)"
    )


class SimulationRequest(BaseModel):
    """A calamity scenario and the species planted on the site."""
    scenario: CalamityScenario
    selected_species: List[str] = Field(min_length=1, examples=[["Neem", "Teak"]])

    class Config:
        json_schema_extra = {
            "example": {
                "scenario": {"type": "drought", "severity": 80, "affected_area": 60, "duration": 6},
                "selected_species": ["Neem", "Teak", "Bamboo"],
            }
        }
