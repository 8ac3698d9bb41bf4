"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from habitat.config import settings
from habitat.middleware.error_handler import ErrorHandlerMiddleware
from habitat.api.v1.routers import monitoring

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# Rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_requests}/minute"],
)


def _configured_providers() -> list[str]:
    """Providers that will be queried live; SoilGrids needs no credentials."""
    providers = ["SoilGrids"]
    if settings.openweather_api_key:
        providers.append("OpenWeather")
    if settings.sentinelhub_client_id and settings.sentinelhub_client_secret:
        providers.append("Sentinel Hub")
    if settings.gfw_api_key:
        providers.append("Global Forest Watch")
    return providers


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events using the modern FastAPI pattern.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Live data providers: {', '.join(_configured_providers())}")
    logger.info(f"Search radii: satellite={settings.satellite_radius_km}km, "
                f"deforestation={settings.deforestation_radius_km}km")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")

    yield

    # Shutdown
    from habitat.infrastructure.external_api_client import get_api_client
    logger.info("Shutting down application...")
    client = get_api_client()
    await client.close()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Ecosystem Monitoring API for the Habitat dashboard

    This API scores ecosystem health at a geographic point and advises on
    climate risks using satellite, weather, soil and deforestation data.

    ## Features

    - **Health Score**: Six indicators (vegetation, moisture, temperature,
      air quality, forest cover, soil health) normalized to 0-100 and combined
      with fixed weights
    - **Risk Advisory**: Drought, flood and heat-stress indices with recommended
      species and mitigation actions
    - **Alerts**: Critical, warning and informational alerts
    - **Species Ranking**: Catalog species scored against site temperature,
      soil pH and rainfall
    - **Calamity Simulation**: Projected survival, growth and recovery of
      planted species under a hypothetical calamity
    - **Graceful Degradation**: Fixed fallback values for any upstream provider
      that fails, reported in `data_sources`
    - **Rate Limiting**: Protects the API from abuse

    ## Health Score

    Health Score = (NDVI×25%) + (Moisture×20%) + (Temperature×15%) +
    (AQI×10%) + (Forest Cover×20%) + (Soil Health×10%)

    Risk indices are heuristic severity scores (0-100), not calibrated
    statistical probabilities.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(monitoring.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """Service identity and where to find the API docs."""
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": app.docs_url,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Liveness check.

    Also lists the upstream providers with credentials configured; the
    others are always served from fallback values.

    Returns:
        Health status and live providers
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "live_providers": _configured_providers(),
    }
