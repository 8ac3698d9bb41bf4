"""
API router for ecosystem monitoring endpoints.
"""
from fastapi import APIRouter, HTTPException, Query
from typing import Annotated, Dict

from habitat.api.dependencies import MonitoringServiceDep
from habitat.api.v1.models.responses import (
    BreakdownEntry,
    DataSourcesResponse,
    HealthCalculation,
    HealthScoreResponse,
    MetricsResponse,
    MonitoringResponse,
    RiskAdvisoryRequest,
    SimulationRequest,
    SpeciesRecommendRequest,
    SpeciesRecommendResponse,
)
from habitat.domain.models import (
    EnvironmentalReading,
    HealthScore,
    RiskAdvisory,
    SimulationResult,
    WeatherData,
)
from habitat.services.domain.health_score import HEALTH_CALCULATION


router = APIRouter(
    tags=["monitoring"],
)

COMMON_RESPONSES = {
    400: {"description": "Invalid request parameters"},
    422: {"description": "Missing or malformed parameters"},
    429: {"description": "Rate limit exceeded"},
    500: {"description": "Internal server error"},
}


def _health_breakdown(health: HealthScore) -> Dict[str, BreakdownEntry]:
    return {
        sub_score.metric.value: BreakdownEntry(
            value=round(sub_score.raw_value, 2),
            score=round(sub_score.score, 2),
            contribution=round(sub_score.weighted_contribution, 2),
            status=sub_score.status.value,
        )
        for sub_score in health.breakdown
    }


@router.get(
    "/monitoring",
    response_model=MonitoringResponse,
    summary="Get ecosystem monitoring report",
    description="""
    Build the ecosystem monitoring report for a location.

    This endpoint:
    1. Fetches weather, NDVI/NDMI, soil and deforestation data concurrently
    2. Substitutes fixed fallback values for any provider that fails
    3. Scores ecosystem health from six weighted indicators
    4. Estimates drought, flood and heat-stress risk and recommends species and actions
    5. Generates alerts

    `data_sources` reports which providers were live and which fell back.
    Risk "probability" values are heuristic severity indices (0-100), not
    calibrated probabilities.
    """,
    responses=COMMON_RESPONSES,
)
async def get_monitoring(
    lat: Annotated[float, Query(ge=-90, le=90, description="Latitude in degrees")],
    lng: Annotated[float, Query(ge=-180, le=180, description="Longitude in degrees")],
    monitoring_service: MonitoringServiceDep,
) -> MonitoringResponse:
    """
    Get the monitoring report for a location.

    Args:
        lat: Latitude in degrees
        lng: Longitude in degrees
        monitoring_service: Monitoring service (injected dependency)

    Returns:
        MonitoringResponse with metrics, health, risk advisory and alerts

    Raises:
        HTTPException: If the coordinates are invalid
    """
    try:
        # Delegate to service layer (no business logic here)
        report = await monitoring_service.get_monitoring_report(lat, lng)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    reading = report.reading
    sources = report.data_sources
    return MonitoringResponse(
        metrics=MetricsResponse(
            health_score=report.health.total,
            ndvi_current=reading.ndvi,
            soil_ph=reading.soil_ph,
            moisture_index=reading.moisture,
            lst_temp=reading.temperature,
            aqi=reading.aqi,
            forest_cover=reading.forest_cover,
            carbon_sequestration=report.carbon_sequestration,
        ),
        health_breakdown=_health_breakdown(report.health),
        health_calculation=HealthCalculation(**HEALTH_CALCULATION),
        risk_advisory=report.risk_advisory,
        history=report.history,
        alerts=report.alerts,
        data_sources=DataSourcesResponse(
            weather=sources.weather,
            satellite=sources.satellite,
            soil=sources.soil,
            deforestation=sources.deforestation,
        ),
    )


@router.post(
    "/health-score",
    response_model=HealthScoreResponse,
    summary="Score environmental readings",
    description="Compute the ecosystem health score and breakdown for supplied readings.",
    responses=COMMON_RESPONSES,
)
async def post_health_score(
    reading: EnvironmentalReading,
    monitoring_service: MonitoringServiceDep,
) -> HealthScoreResponse:
    health = monitoring_service.score_reading(reading)
    return HealthScoreResponse(
        health_score=health.total,
        health_breakdown=_health_breakdown(health),
        health_calculation=HealthCalculation(**HEALTH_CALCULATION),
    )


@router.post(
    "/risk-advisory",
    response_model=RiskAdvisory,
    summary="Assess risks for supplied conditions",
    description="""
    Estimate drought, flood and heat-stress risk for supplied conditions and
    recommend species and mitigation actions. Only risks with an index above 20
    are reported.
    """,
    responses=COMMON_RESPONSES,
)
async def post_risk_advisory(
    request: RiskAdvisoryRequest,
    monitoring_service: MonitoringServiceDep,
) -> RiskAdvisory:
    weather = WeatherData(
        temperature=request.temperature,
        humidity=request.humidity,
        rainfall=request.rainfall,
    )
    return monitoring_service.assess_risks(weather, request.ndvi, request.moisture)


@router.post(
    "/species/recommend",
    response_model=SpeciesRecommendResponse,
    summary="Rank species for a site",
    description="""
    Rank the planting catalog by suitability for the site's temperature, soil
    pH and rainfall, best match first.

    Conditions left out of the request are looked up for `lat`/`lng`; if a
    provider fails its fallback value is used and reported in `data_sources`.
    """,
    responses=COMMON_RESPONSES,
)
async def post_species_recommend(
    request: SpeciesRecommendRequest,
    monitoring_service: MonitoringServiceDep,
) -> SpeciesRecommendResponse:
    try:
        ranking = await monitoring_service.recommend_species_for_site(
            lat=request.lat,
            lng=request.lng,
            temperature=request.temperature,
            soil_ph=request.soil_ph,
            rainfall=request.rainfall,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SpeciesRecommendResponse(species=ranking.species, data_sources=ranking.data_sources)


@router.post(
    "/simulation",
    response_model=SimulationResult,
    summary="Simulate a calamity",
    description="""
    Project the impact of a drought, flood, heat wave, frost, pest outbreak or
    mineral depletion on the planted species and the site metrics.

    Survival rates never drop below 5% and growth impact is capped at 95%.
    Unknown species are simulated with default sensitivities.
    """,
    responses=COMMON_RESPONSES,
)
async def post_simulation(
    request: SimulationRequest,
    monitoring_service: MonitoringServiceDep,
) -> SimulationResult:
    return monitoring_service.simulate(request.scenario, request.selected_species)
