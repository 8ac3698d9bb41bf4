"""
Application service: Orchestration layer for ecosystem monitoring.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional, TypeVar

from habitat.domain.models import (
    Alert,
    AlertType,
    CalamityScenario,
    DeforestationData,
    EnvironmentalReading,
    HealthScore,
    HistoryPoint,
    RiskAdvisory,
    SatelliteData,
    SimulationResult,
    SoilData,
    SpeciesSuitability,
    WeatherData,
)
from habitat.infrastructure.external_api_client import ExternalAPIClient
from habitat.services.domain.advisory_composer import assess_risk_advisory
from habitat.services.domain.alert_generator import AlertSequence, generate_alerts
from habitat.services.domain.calamity_simulator import run_simulation
from habitat.services.domain.health_score import calculate_health_score
from habitat.services.domain.species_suitability import rank_species
from habitat.services.domain.synthetic_data import SyntheticDataProvider, baseline_history
from habitat.utils.geo import validate_coordinates

logger = logging.getLogger(__name__)

T = TypeVar("T")


# Values substituted when an upstream provider fails
FALLBACK_WEATHER = WeatherData(
    temperature=28.0,
    humidity=65.0,
    rainfall=2.5,
    wind_speed=12.0,
    conditions="partly cloudy",
)
FALLBACK_SATELLITE = SatelliteData(ndvi_avg=0.55, ndmi_avg=0.4, suitability_score=65.0)
FALLBACK_SOIL = SoilData(
    ph=6.5,
    nitrogen=280.0,
    phosphorus=45.0,
    potassium=180.0,
    texture="Loamy",
)
FALLBACK_DEFORESTATION = DeforestationData()

# Readings used for the degraded report when aggregation itself fails
FALLBACK_READING = EnvironmentalReading(
    ndvi=0.55,
    moisture=50.0,
    temperature=28.0,
    aqi=70.0,
    forest_cover=40.0,
    soil_ph=6.5,
    humidity=65.0,
    rainfall=2.5,
)
FALLBACK_CARBON_SEQUESTRATION = 120.0
FALLBACK_LATITUDE = 20.5937
SIMULATED_DATA_MESSAGE = "Using simulated data - configure API keys for real-time monitoring"

# Data source labels: (live, fallback)
WEATHER_SOURCES = ("OpenWeather API", "Fallback estimates")
SATELLITE_SOURCES = ("Sentinel Hub", "Statistical model")
SOIL_SOURCES = ("SoilGrids API", "Regional averages")
DEFORESTATION_SOURCES = ("Global Forest Watch", "Historical data")
# Conditions supplied directly by the caller
REQUEST_SOURCE = "Request"

# Forest cover estimate bounds (percent)
MIN_FOREST_COVER = 15.0
MAX_FOREST_COVER = 70.0


def _round(value: float) -> float:
    return round(value, 2)


def estimate_forest_cover(ndvi: float, lat: float) -> float:
    """Estimate forest cover (%) from NDVI with a latitude-based offset."""
    offset = 10 if lat > 20 else 20
    return _round(min(MAX_FOREST_COVER, max(MIN_FOREST_COVER, ndvi * 80 + offset)))


def estimate_carbon_sequestration(forest_cover: float, ndvi: float) -> float:
    return _round(forest_cover * 2.5 + ndvi * 50)


@dataclass
class DataSources:
    weather: str
    satellite: str
    soil: str
    deforestation: str


@dataclass
class MonitoringReport:
    """Everything the monitoring endpoint reports for one location."""
    reading: EnvironmentalReading
    carbon_sequestration: float
    health: HealthScore
    risk_advisory: RiskAdvisory
    history: list[HistoryPoint]
    alerts: list[Alert]
    data_sources: DataSources
    degraded: bool = field(default=False)


@dataclass
class SpeciesRanking:
    """Ranked species and where each site condition came from."""
    species: list[SpeciesSuitability]
    data_sources: dict[str, str]


async def _not_requested() -> None:
    return None


class MonitoringService:
    """
    Application service for ecosystem monitoring.

    Orchestrates data fetching and scoring.
    Follows the application layer pattern - no business logic here,
    only coordination between infrastructure and domain layers.
    """

    def __init__(
        self,
        api_client: ExternalAPIClient,
        synthetic: SyntheticDataProvider,
        satellite_radius_km: float = 5.0,
        deforestation_radius_km: float = 10.0,
    ):
        """
        Initialize the service with dependencies.

        Args:
            api_client: Upstream data provider client
            synthetic: Source of synthetic display values (AQI estimate, history)
            satellite_radius_km: Search radius for vegetation indices
            deforestation_radius_km: Search radius for deforestation alerts
        """
        self.api_client = api_client
        self.synthetic = synthetic
        self.satellite_radius_km = satellite_radius_km
        self.deforestation_radius_km = deforestation_radius_km

    async def get_monitoring_report(
        self,
        lat: float,
        lng: float,
        today: Optional[date] = None,
    ) -> MonitoringReport:
        """
        Build the monitoring report for a location.

        This method orchestrates:
        1. Fetching weather, satellite, soil and deforestation data concurrently
        2. Substituting fallback values for any provider that failed
        3. Scoring ecosystem health
        4. Estimating risks and composing the advisory
        5. Generating alerts and the history series

        Args:
            lat: Latitude in degrees
            lng: Longitude in degrees
            today: Current date (defaults to today, UTC)

        Returns:
            MonitoringReport instance

        Raises:
            ValueError: If the coordinates are invalid
        """
        validate_coordinates(lat, lng)
        today = today or datetime.now(timezone.utc).date()

        weather_result, satellite_result, soil_result, deforestation_result = (
            await asyncio.gather(
                self.api_client.fetch_weather(lat, lng),
                self.api_client.fetch_satellite(lat, lng, self.satellite_radius_km),
                self.api_client.fetch_soil(lat, lng),
                self.api_client.fetch_deforestation(lat, lng, self.deforestation_radius_km),
                return_exceptions=True,
            )
        )

        weather, weather_source = self._resolve(
            "weather", weather_result, FALLBACK_WEATHER, WEATHER_SOURCES
        )
        satellite, satellite_source = self._resolve(
            "satellite", satellite_result, FALLBACK_SATELLITE, SATELLITE_SOURCES
        )
        soil, soil_source = self._resolve(
            "soil", soil_result, FALLBACK_SOIL, SOIL_SOURCES
        )
        deforestation, deforestation_source = self._resolve(
            "deforestation", deforestation_result, FALLBACK_DEFORESTATION, DEFORESTATION_SOURCES
        )
        data_sources = DataSources(
            weather=weather_source,
            satellite=satellite_source,
            soil=soil_source,
            deforestation=deforestation_source,
        )

        try:
            return self._build_report(
                lat, weather, satellite, soil, deforestation, data_sources, today
            )
        except Exception as e:
            logger.exception(f"Monitoring aggregation failed for ({lat}, {lng}): {e}")
            return self._degraded_report(today)

    def _resolve(
        self,
        name: str,
        result: object,
        fallback: T,
        sources: tuple[str, str],
    ) -> tuple[T, str]:
        """Return the provider result, or the fallback if the call raised."""
        live_source, fallback_source = sources
        if isinstance(result, BaseException):
            logger.warning(f"{name} provider failed, using fallback: {result}")
            return fallback, fallback_source
        return result, live_source

    def _build_report(
        self,
        lat: float,
        weather: WeatherData,
        satellite: SatelliteData,
        soil: SoilData,
        deforestation: DeforestationData,
        data_sources: DataSources,
        today: date,
    ) -> MonitoringReport:
        ndvi = _round(satellite.ndvi_avg)
        forest_cover = estimate_forest_cover(ndvi, lat)
        reading = EnvironmentalReading(
            ndvi=ndvi,
            moisture=_round(satellite.ndmi_avg * 100),
            temperature=_round(weather.temperature),
            aqi=_round(self.synthetic.estimate_aqi(weather)),
            forest_cover=forest_cover,
            soil_ph=_round(soil.ph),
            humidity=weather.humidity,
            rainfall=weather.rainfall,
        )

        health = calculate_health_score(reading)
        logger.info(
            f"Health score {health.total} (ndvi={reading.ndvi}, moisture={reading.moisture}, "
            f"temperature={reading.temperature})"
        )
        risk_advisory = assess_risk_advisory(weather, reading.ndvi, reading.moisture)
        logger.debug(f"Active risks: {[r.type.value for r in risk_advisory.risks]}")

        return MonitoringReport(
            reading=reading,
            carbon_sequestration=estimate_carbon_sequestration(forest_cover, ndvi),
            health=health,
            risk_advisory=risk_advisory,
            history=self.synthetic.history(lat, weather, today.month - 1),
            alerts=generate_alerts(deforestation, weather, health.breakdown),
            data_sources=data_sources,
        )

    def _degraded_report(self, today: date) -> MonitoringReport:
        """
        Structurally complete report built only from fixed fallback values.

        Nothing here calls the synthetic provider, which may be what failed.
        """
        weather = FALLBACK_WEATHER
        sequence = AlertSequence()
        return MonitoringReport(
            reading=FALLBACK_READING,
            carbon_sequestration=FALLBACK_CARBON_SEQUESTRATION,
            health=calculate_health_score(FALLBACK_READING),
            risk_advisory=assess_risk_advisory(
                weather, FALLBACK_READING.ndvi, FALLBACK_READING.moisture
            ),
            history=baseline_history(FALLBACK_LATITUDE, weather, today.month - 1),
            alerts=[Alert(
                id=sequence.next_id("info"),
                type=AlertType.INFO,
                message=SIMULATED_DATA_MESSAGE,
                timestamp=datetime.now(timezone.utc),
            )],
            data_sources=DataSources(
                weather="Fallback",
                satellite="Statistical model",
                soil="Regional averages",
                deforestation="Historical",
            ),
            degraded=True,
        )

    def score_reading(self, reading: EnvironmentalReading) -> HealthScore:
        """Score readings supplied directly by the caller."""
        return calculate_health_score(reading)

    def assess_risks(
        self,
        weather: WeatherData,
        ndvi: float,
        moisture: float,
    ) -> RiskAdvisory:
        """Risk advisory for conditions supplied directly by the caller."""
        return assess_risk_advisory(weather, ndvi, moisture)

    async def recommend_species_for_site(
        self,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        temperature: Optional[float] = None,
        soil_ph: Optional[float] = None,
        rainfall: Optional[float] = None,
    ) -> SpeciesRanking:
        """
        Rank catalog species for a site.

        Conditions supplied by the caller are used as is. Missing ones are
        fetched for lat/lng (weather for temperature and rainfall, soil for
        pH), with the usual fallbacks if a provider fails.

        Raises:
            ValueError: If a condition is missing and no valid coordinates were given
        """
        need_weather = temperature is None or rainfall is None
        need_soil = soil_ph is None
        if need_weather or need_soil:
            if lat is None or lng is None:
                raise ValueError(
                    "lat and lng are required unless temperature, rainfall and soil_ph are all given"
                )
            validate_coordinates(lat, lng)

        weather_result, soil_result = await asyncio.gather(
            self.api_client.fetch_weather(lat, lng) if need_weather else _not_requested(),
            self.api_client.fetch_soil(lat, lng) if need_soil else _not_requested(),
            return_exceptions=True,
        )

        data_sources = {
            "temperature": REQUEST_SOURCE,
            "rainfall": REQUEST_SOURCE,
            "soil_ph": REQUEST_SOURCE,
        }
        if need_weather:
            weather, weather_source = self._resolve(
                "weather", weather_result, FALLBACK_WEATHER, WEATHER_SOURCES
            )
            if temperature is None:
                temperature = weather.temperature
                data_sources["temperature"] = weather_source
            if rainfall is None:
                rainfall = weather.rainfall
                data_sources["rainfall"] = weather_source
        if need_soil:
            soil, soil_source = self._resolve("soil", soil_result, FALLBACK_SOIL, SOIL_SOURCES)
            soil_ph = soil.ph
            data_sources["soil_ph"] = soil_source

        logger.info(
            f"Ranking species for temperature={temperature}, soil_ph={soil_ph}, rainfall={rainfall}"
        )
        return SpeciesRanking(
            species=rank_species(temperature, soil_ph, rainfall),
            data_sources=data_sources,
        )

    def simulate(self, scenario: CalamityScenario, species: list[str]) -> SimulationResult:
        """Simulate a calamity over the species planted on a site."""
        result = run_simulation(scenario, species)
        logger.info(
            f"Simulated {scenario.type.value} (severity={scenario.severity}) over "
            f"{len(species)} species"
        )
        return result
