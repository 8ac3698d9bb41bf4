"""
Infrastructure layer: Upstream data provider client with retry logic.

Wraps the four data providers used for monitoring:
- OpenWeather (current weather and 5-day forecast)
- Sentinel Hub Statistical API (NDVI/NDMI means over an area)
- ISRIC SoilGrids (topsoil pH, nitrogen, organic carbon)
- Global Forest Watch (integrated deforestation alerts)
"""
import logging
import math
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from habitat.config import Settings, settings
from habitat.domain.models import (
    DailyForecast,
    DeforestationData,
    Hotspot,
    MonthlyAlertCount,
    SatelliteData,
    SoilData,
    WeatherData,
)
from habitat.infrastructure.api_constants import (
    APIConstants,
    GlobalForestWatchEndpoints,
    OpenWeatherEndpoints,
    SentinelHubEndpoints,
    SoilGridsEndpoints,
)
from habitat.utils.geo import bounding_box, search_area, to_geojson

logger = logging.getLogger(__name__)


# Pydantic models for API responses
class ForestAlertRecord(BaseModel):
    """Single alert row from the GFW integrated alerts dataset."""
    latitude: float
    longitude: float
    alert_date: date = Field(alias=GlobalForestWatchEndpoints.DATE_FIELD)
    confidence: Optional[str] = Field(
        default=None, alias=GlobalForestWatchEndpoints.CONFIDENCE_FIELD
    )

    class Config:
        populate_by_name = True


class ForestAlertsResponse(BaseModel):
    """Response from the GFW query endpoint."""
    data: List[ForestAlertRecord] = Field(default_factory=list)
    status: Optional[str] = None


class ExternalAPIError(Exception):
    """Raised when an upstream data provider fails or is not configured."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ExternalAPIClient:
    """
    Client for the upstream ecosystem data providers.
    Implements retry logic with exponential backoff.
    """

    def __init__(self, config: Optional[Settings] = None):
        """
        Initialize the API client with configuration.

        Args:
            config: Settings to use (defaults to the global settings)
        """
        self.config = config or settings
        self.client = httpx.AsyncClient(
            headers={"accept": APIConstants.CONTENT_TYPE_JSON},
            timeout=self.config.request_timeout,
        )

    async def __aenter__(self) -> "ExternalAPIClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    @retry(
        stop=stop_after_attempt(settings.max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_backoff_multiplier,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.RequestError)),
        reraise=True,
    )
    async def _make_request(
        self,
        method: str,
        url: str,
        **kwargs
    ) -> Dict[str, Any]:
        """
        Make an HTTP request with retry logic.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Absolute request URL
            **kwargs: Additional arguments for the request

        Returns:
            Response data as dictionary

        Raises:
            ExternalAPIError: If the request fails with a client error
            httpx.HTTPStatusError: If server errors persist after retries
            httpx.RequestError: If transport errors persist after retries
        """
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            # Retry on server errors (5xx)
            if e.response.status_code >= 500:
                raise
            # Don't retry on client errors (4xx)
            raise ExternalAPIError(
                f"API request failed: {e.response.status_code} - {e.response.text}",
                status_code=e.response.status_code,
            )

    # ------------------------------------------------------------
    # Weather
    # ------------------------------------------------------------

    async def fetch_weather(self, lat: float, lng: float) -> WeatherData:
        """
        Fetch current weather and a daily forecast from OpenWeather.

        Args:
            lat: Latitude in degrees
            lng: Longitude in degrees

        Returns:
            WeatherData instance

        Raises:
            ExternalAPIError: If no API key is configured or the request fails
        """
        if not self.config.openweather_api_key:
            raise ExternalAPIError("OpenWeather API key not configured", status_code=503)

        params = {
            "lat": lat,
            "lon": lng,
            "appid": self.config.openweather_api_key,
            "units": "metric",
        }
        current = await self._make_request(
            "GET",
            f"{self.config.openweather_base_url}{OpenWeatherEndpoints.CURRENT_WEATHER}",
            params=params,
        )

        try:
            forecast_data = await self._make_request(
                "GET",
                f"{self.config.openweather_base_url}{OpenWeatherEndpoints.FORECAST}",
                params=params,
            )
            forecast = self._daily_forecast(forecast_data)
        except (ExternalAPIError, httpx.HTTPError) as e:
            logger.warning(f"Forecast unavailable, continuing without it: {e}")
            forecast = []

        conditions = current.get("weather") or [{}]
        return WeatherData(
            temperature=current["main"]["temp"],
            humidity=current["main"]["humidity"],
            rainfall=(current.get("rain") or {}).get("1h", 0.0),
            wind_speed=(current.get("wind") or {}).get("speed", 0.0),
            conditions=conditions[0].get("description", "Unknown"),
            forecast=forecast,
        )

    def _daily_forecast(self, data: Dict[str, Any]) -> List[DailyForecast]:
        """
        Collapse 3-hourly forecast entries into daily averages.

        Temperatures are averaged per day and 3h rain totals are summed.
        """
        temps: Dict[str, List[float]] = {}
        rain: Dict[str, float] = {}
        for item in data.get("list", []):
            day = item["dt_txt"].split(" ")[0]
            temps.setdefault(day, []).append(item["main"]["temp"])
            rain[day] = rain.get(day, 0.0) + (item.get("rain") or {}).get("3h", 0.0)

        days = list(temps)[:OpenWeatherEndpoints.FORECAST_DAYS]
        return [
            DailyForecast(
                date=day,
                temp=sum(temps[day]) / len(temps[day]),
                rain=rain[day],
            )
            for day in days
        ]

    # ------------------------------------------------------------
    # Satellite
    # ------------------------------------------------------------

    async def _get_sentinel_token(self) -> str:
        """Obtain an OAuth access token using client credentials."""
        if not (self.config.sentinelhub_client_id and self.config.sentinelhub_client_secret):
            raise ExternalAPIError("Sentinel Hub credentials not configured", status_code=503)

        data = await self._make_request(
            "POST",
            f"{self.config.sentinelhub_base_url}{SentinelHubEndpoints.OAUTH_TOKEN}",
            data={
                "grant_type": "client_credentials",
                "client_id": self.config.sentinelhub_client_id,
                "client_secret": self.config.sentinelhub_client_secret,
            },
            headers={"Content-Type": APIConstants.CONTENT_TYPE_FORM},
        )
        return data["access_token"]

    async def fetch_satellite(
        self,
        lat: float,
        lng: float,
        radius_km: float,
    ) -> SatelliteData:
        """
        Fetch mean NDVI and NDMI around a point from Sentinel Hub.

        Index statistics are computed by the Statistical API over
        Sentinel-2 L2A scenes of the last 90 days; the most recent interval
        with valid pixels is used.

        Args:
            lat: Latitude in degrees
            lng: Longitude in degrees
            radius_km: Radius of the search area in kilometres

        Returns:
            SatelliteData instance

        Raises:
            ExternalAPIError: If credentials are missing, the request fails,
                or no interval has usable imagery
        """
        token = await self._get_sentinel_token()

        now = datetime.now(timezone.utc)
        start = now - timedelta(days=SentinelHubEndpoints.LOOKBACK_DAYS)
        request_body = {
            "input": {
                "bounds": {
                    "bbox": list(bounding_box(lat, lng, radius_km)),
                    "properties": {"crs": SentinelHubEndpoints.CRS_WGS84},
                },
                "data": [{
                    "type": SentinelHubEndpoints.COLLECTION,
                    "dataFilter": {"maxCloudCoverage": SentinelHubEndpoints.MAX_CLOUD_COVERAGE},
                }],
            },
            "aggregation": {
                "timeRange": {
                    "from": start.strftime("%Y-%m-%dT%H:%M:%SZ"),
                    "to": now.strftime("%Y-%m-%dT%H:%M:%SZ"),
                },
                "aggregationInterval": {"of": SentinelHubEndpoints.AGGREGATION_INTERVAL},
                "width": SentinelHubEndpoints.RASTER_SIZE,
                "height": SentinelHubEndpoints.RASTER_SIZE,
                "evalscript": SentinelHubEndpoints.EVALSCRIPT,
            },
        }

        data = await self._make_request(
            "POST",
            f"{self.config.sentinelhub_base_url}{SentinelHubEndpoints.STATISTICS}",
            json=request_body,
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": APIConstants.CONTENT_TYPE_JSON,
            },
        )

        ndvi, ndmi = self._latest_index_means(data)
        return SatelliteData(
            ndvi_avg=ndvi,
            ndmi_avg=ndmi,
            suitability_score=(ndvi * 0.4 + ndmi * 0.6) * 100,
        )

    def _latest_index_means(self, data: Dict[str, Any]) -> tuple[float, float]:
        intervals = sorted(
            data.get("data", []),
            key=lambda entry: entry["interval"]["from"],
            reverse=True,
        )
        for entry in intervals:
            ndvi = self._band_mean(entry, "ndvi")
            ndmi = self._band_mean(entry, "ndmi")
            if ndvi is not None and ndmi is not None:
                return ndvi, ndmi
        raise ExternalAPIError("No cloud-free imagery available for the area", status_code=404)

    @staticmethod
    def _band_mean(entry: Dict[str, Any], output: str) -> Optional[float]:
        try:
            mean = float(entry["outputs"][output]["bands"]["B0"]["stats"]["mean"])
        except (KeyError, TypeError, ValueError):
            return None
        return mean if math.isfinite(mean) else None

    # ------------------------------------------------------------
    # Soil
    # ------------------------------------------------------------

    async def fetch_soil(self, lat: float, lng: float) -> SoilData:
        """
        Fetch topsoil properties from SoilGrids.

        Args:
            lat: Latitude in degrees
            lng: Longitude in degrees

        Returns:
            SoilData instance

        Raises:
            ExternalAPIError: If the request fails or the location has no pH value
        """
        data = await self._make_request(
            "GET",
            f"{self.config.soilgrids_base_url}{SoilGridsEndpoints.PROPERTIES_QUERY}",
            params={
                "lon": lng,
                "lat": lat,
                "property": SoilGridsEndpoints.PROPERTIES,
                "depth": SoilGridsEndpoints.DEPTH,
                "value": SoilGridsEndpoints.VALUE,
            },
        )

        layers = {
            layer.get("name"): layer
            for layer in (data.get("properties") or {}).get("layers", [])
        }
        ph = self._layer_mean(layers.get("phh2o"))
        if ph is None:
            raise ExternalAPIError(f"No soil data available at ({lat}, {lng})", status_code=404)

        soc = self._layer_mean(layers.get("soc"))
        return SoilData(
            ph=ph / SoilGridsEndpoints.PH_SCALE,
            nitrogen=self._layer_mean(layers.get("nitrogen")),
            organic_matter=soc / SoilGridsEndpoints.SOC_SCALE if soc is not None else None,
        )

    @staticmethod
    def _layer_mean(layer: Optional[Dict[str, Any]]) -> Optional[float]:
        if not layer:
            return None
        try:
            mean = layer["depths"][0]["values"]["mean"]
        except (KeyError, IndexError, TypeError):
            return None
        return float(mean) if mean is not None else None

    # ------------------------------------------------------------
    # Deforestation
    # ------------------------------------------------------------

    async def fetch_deforestation(
        self,
        lat: float,
        lng: float,
        radius_km: float,
    ) -> DeforestationData:
        """
        Fetch deforestation alerts of the last year around a point.

        Args:
            lat: Latitude in degrees
            lng: Longitude in degrees
            radius_km: Radius of the search area in kilometres

        Returns:
            DeforestationData with totals, 30-day count, monthly counts and hotspots

        Raises:
            ExternalAPIError: If no API key is configured or the request fails
        """
        if not self.config.gfw_api_key:
            raise ExternalAPIError("Global Forest Watch API key not configured", status_code=503)

        today = datetime.now(timezone.utc).date()
        since = today - timedelta(days=GlobalForestWatchEndpoints.LOOKBACK_DAYS)
        data = await self._make_request(
            "POST",
            f"{self.config.gfw_base_url}{GlobalForestWatchEndpoints.INTEGRATED_ALERTS_QUERY}",
            json={
                "geometry": to_geojson(search_area(lat, lng, radius_km)),
                "sql": GlobalForestWatchEndpoints.alerts_sql(since.isoformat()),
            },
            headers={"x-api-key": self.config.gfw_api_key},
        )
        response = ForestAlertsResponse(**data)
        return summarize_forest_alerts(response.data, today)


def summarize_forest_alerts(
    alerts: List[ForestAlertRecord],
    today: date,
) -> DeforestationData:
    """
    Summarize raw alert rows.

    Args:
        alerts: Alert rows in provider order
        today: Reference date for the 30-day recent window

    Returns:
        DeforestationData instance
    """
    recent_cutoff = today - timedelta(days=GlobalForestWatchEndpoints.RECENT_DAYS)
    by_month = Counter(alert.alert_date.strftime("%b") for alert in alerts)

    return DeforestationData(
        total_alerts=len(alerts),
        recent_alerts=sum(1 for alert in alerts if alert.alert_date > recent_cutoff),
        alerts_by_month=[
            MonthlyAlertCount(month=month, count=count)
            for month, count in by_month.items()
        ],
        hotspots=[
            Hotspot(
                lat=alert.latitude,
                lng=alert.longitude,
                severity=alert.confidence or "medium",
                date=alert.alert_date.isoformat(),
            )
            for alert in alerts[:GlobalForestWatchEndpoints.MAX_HOTSPOTS]
        ],
    )


# Singleton instance
_api_client: Optional[ExternalAPIClient] = None


def get_api_client() -> ExternalAPIClient:
    """
    Get or create the singleton API client instance.

    Returns:
        ExternalAPIClient instance
    """
    global _api_client
    if _api_client is None:
        _api_client = ExternalAPIClient()
    return _api_client
