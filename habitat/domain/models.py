"""
Domain models for ecosystem readings, scores and advisories.

These models represent the core domain entities and should be independent
of any infrastructure concerns (API clients, web framework, etc.).
All of them are value objects created per request.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class MetricName(str, Enum):
    """Ecosystem indicators that make up the health score."""
    VEGETATION = "vegetation"
    MOISTURE = "moisture"
    TEMPERATURE = "temperature"
    AIR_QUALITY = "air_quality"
    FOREST_COVER = "forest_cover"
    SOIL_HEALTH = "soil_health"


class HealthStatus(str, Enum):
    GOOD = "good"
    MODERATE = "moderate"
    POOR = "poor"


class RiskType(str, Enum):
    DROUGHT = "drought"
    FLOOD = "flood"
    HEAT_STRESS = "heat_stress"


class RiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class SolutionPriority(str, Enum):
    IMMEDIATE = "immediate"
    SHORT_TERM = "short-term"
    LONG_TERM = "long-term"


class SolutionCategory(str, Enum):
    IRRIGATION = "irrigation"
    SOIL = "soil"
    PLANTING = "planting"
    PROTECTION = "protection"


class AlertType(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


# ============================================================
# Scoring
# ============================================================

class EnvironmentalReading(BaseModel):
    """Raw environmental readings for one location."""
    ndvi: float = Field(description="Normalized Difference Vegetation Index (-1 to 1)")
    moisture: float = Field(description="Moisture index in percent (0-100)")
    temperature: float = Field(description="Surface/air temperature in °C")
    aqi: float = Field(ge=0, description="Air quality index (lower is better)")
    forest_cover: float = Field(description="Forest cover in percent (0-100)")
    soil_ph: float = Field(description="Soil pH")
    humidity: float = Field(ge=0, le=100, description="Relative humidity in percent")
    rainfall: float = Field(ge=0, description="Recent rainfall in mm")

    class Config:
        frozen = True


class SubScore(BaseModel):
    """Normalized score of a single indicator."""
    metric: MetricName
    raw_value: float
    score: float = Field(description="Normalized score (0-100)")
    weight: float
    weighted_contribution: float
    status: HealthStatus


class HealthScore(BaseModel):
    """Overall ecosystem health score with per-indicator breakdown."""
    total: float = Field(ge=0, le=100)
    breakdown: List[SubScore]

    def get(self, metric: MetricName) -> SubScore:
        for sub_score in self.breakdown:
            if sub_score.metric == metric:
                return sub_score
        raise KeyError(metric)


# ============================================================
# Risk advisory
# ============================================================

class RiskScore(BaseModel):
    """Unfiltered output of one hazard model."""
    probability: float = Field(ge=0, le=100)
    description: str


class RiskAssessment(BaseModel):
    """A hazard that crossed the reporting threshold."""
    type: RiskType
    level: RiskLevel
    probability: float = Field(
        ge=0, le=100,
        description="Heuristic severity index (0-100), not a calibrated probability"
    )
    description: str


class SpeciesRecommendation(BaseModel):
    name: str
    reason: str
    suitability_pct: int = Field(alias="suitability")

    class Config:
        populate_by_name = True


class Solution(BaseModel):
    title: str
    description: str
    priority: SolutionPriority
    category: SolutionCategory


class RiskAdvisory(BaseModel):
    risks: List[RiskAssessment]
    recommended_species: List[SpeciesRecommendation] = Field(alias="recommendedSpecies")
    solutions: List[Solution]

    class Config:
        populate_by_name = True


class Alert(BaseModel):
    id: str
    type: AlertType
    message: str
    timestamp: datetime


# ============================================================
# Upstream data
# ============================================================

class DailyForecast(BaseModel):
    date: str
    temp: float
    rain: float


class WeatherData(BaseModel):
    """Current weather at a location."""
    temperature: float = Field(description="Temperature in °C")
    humidity: float = Field(description="Relative humidity in percent")
    rainfall: float = Field(default=0.0, description="Rainfall over the last hour in mm")
    wind_speed: float = 0.0
    conditions: str = "Unknown"
    forecast: List[DailyForecast] = Field(default_factory=list)


class SatelliteData(BaseModel):
    """Vegetation and moisture indices averaged over an area."""
    ndvi_avg: float
    ndmi_avg: float
    suitability_score: float


class SoilData(BaseModel):
    ph: float
    nitrogen: Optional[float] = None
    phosphorus: Optional[float] = None
    potassium: Optional[float] = None
    organic_matter: Optional[float] = None
    texture: str = "Unknown"
    drainage: str = "Unknown"


class MonthlyAlertCount(BaseModel):
    month: str
    count: int


class Hotspot(BaseModel):
    lat: float
    lng: float
    severity: str
    date: str


class DeforestationData(BaseModel):
    total_alerts: int = 0
    recent_alerts: int = Field(default=0, description="Alerts in the last 30 days")
    alerts_by_month: List[MonthlyAlertCount] = Field(default_factory=list)
    hotspots: List[Hotspot] = Field(default_factory=list)


class HistoryPoint(BaseModel):
    month: str
    ndvi: float
    rainfall: float
    temperature: float
    moisture: float


# ============================================================
# Species suitability
# ============================================================

class SpeciesSuitability(BaseModel):
    """How well one catalog species matches the site climate and soil."""
    name: str
    scientific_name: str
    suitability: int = Field(ge=0, le=100)
    water_requirement: str
    carbon_capture: int
    growth_rate: str
    drought_tolerance: int
    mineral_sensitivity: int
    notes: str


# ============================================================
# Calamity simulation
# ============================================================

class CalamityType(str, Enum):
    DROUGHT = "drought"
    FLOOD = "flood"
    HEAT_WAVE = "heat_wave"
    FROST = "frost"
    PEST_OUTBREAK = "pest_outbreak"
    MINERAL_DEPLETION = "mineral_depletion"


class CalamityScenario(BaseModel):
    """A hypothetical calamity hitting a plantation."""
    type: CalamityType
    severity: float = Field(ge=0, le=100, description="Severity in percent")
    affected_area: float = Field(ge=0, le=100, description="Affected share of the area in percent")
    duration: float = Field(ge=0, description="Duration in months")

    class Config:
        frozen = True


class SpeciesImpact(BaseModel):
    species: str
    survival_rate: int = Field(description="Expected survival in percent (at least 5)")
    growth_impact: int = Field(description="Growth reduction in percent (at most 95)")
    recovery_time: int = Field(description="Months until recovery")
    drought_tolerance: int
    mineral_sensitivity: int


class MetricsImpact(BaseModel):
    """Expected change of site metrics, in percentage points."""
    ndvi: int
    moisture: int
    soil_health: int
    carbon_capture: int


class SimulationResult(BaseModel):
    scenario: CalamityScenario
    species_impact: List[SpeciesImpact]
    metrics_impact: MetricsImpact
    recommendations: List[str]
