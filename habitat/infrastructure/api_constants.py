"""
API endpoint constants and configuration.

This module contains all external API endpoint paths and related constants.
Centralizing these values makes it easy to swap out endpoints or update API versions.
"""


class OpenWeatherEndpoints:
    """OpenWeather API endpoint paths."""

    CURRENT_WEATHER = "/data/2.5/weather"
    FORECAST = "/data/2.5/forecast"

    # Days of forecast kept after daily aggregation
    FORECAST_DAYS = 5


class SentinelHubEndpoints:
    """Sentinel Hub endpoint paths and request defaults."""

    OAUTH_TOKEN = "/oauth/token"
    STATISTICS = "/api/v1/statistics"

    COLLECTION = "sentinel-2-l2a"
    CRS_WGS84 = "http://www.opengis.net/def/crs/EPSG/0/4326"
    MAX_CLOUD_COVERAGE = 30
    LOOKBACK_DAYS = 90
    AGGREGATION_INTERVAL = "P10D"
    RASTER_SIZE = 256

    # NDVI = (B08 - B04) / (B08 + B04), NDMI = (B08 - B11) / (B08 + B11)
    EVALSCRIPT = """
//VERSION=3
function setup() {
  return {
    input: [{ bands: ["B04", "B08", "B11", "dataMask"] }],
    output: [
      { id: "ndvi", bands: 1, sampleType: "FLOAT32" },
      { id: "ndmi", bands: 1, sampleType: "FLOAT32" },
      { id: "dataMask", bands: 1 }
    ]
  };
}

function evaluatePixel(sample) {
  return {
    ndvi: [index(sample.B08, sample.B04)],
    ndmi: [index(sample.B08, sample.B11)],
    dataMask: [sample.dataMask]
  };
}
"""


class SoilGridsEndpoints:
    """ISRIC SoilGrids endpoint paths."""

    PROPERTIES_QUERY = "/soilgrids/v2.0/properties/query"
    PROPERTIES = ["phh2o", "nitrogen", "soc"]
    DEPTH = "0-5cm"
    VALUE = "mean"

    # SoilGrids stores pH and SOC as integers scaled by 10
    PH_SCALE = 10.0
    SOC_SCALE = 10.0


class GlobalForestWatchEndpoints:
    """Global Forest Watch data API endpoint paths."""

    INTEGRATED_ALERTS_QUERY = "/dataset/gfw_integrated_alerts/latest/query"

    DATE_FIELD = "gfw_integrated_alerts__date"
    CONFIDENCE_FIELD = "gfw_integrated_alerts__confidence"

    LOOKBACK_DAYS = 365
    RECENT_DAYS = 30
    MAX_HOTSPOTS = 10

    @classmethod
    def alerts_sql(cls, since: str) -> str:
        """
        Build the alert query for alerts on or after a date.

        Args:
            since: ISO date (YYYY-MM-DD)

        Returns:
            SQL statement understood by the GFW data API
        """
        return (
            f"SELECT latitude, longitude, {cls.DATE_FIELD}, {cls.CONFIDENCE_FIELD} "
            f"FROM results WHERE {cls.DATE_FIELD} >= '{since}'"
        )


class APIConstants:
    """General API configuration constants."""

    CONTENT_TYPE_JSON = "application/json"
    CONTENT_TYPE_FORM = "application/x-www-form-urlencoded"
