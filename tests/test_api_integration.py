"""
Integration tests for API endpoints.

Tests the full HTTP request/response cycle with mocked upstream providers.
"""
import pytest
from unittest.mock import MagicMock

from habitat.main import app
from habitat.api.dependencies import get_monitoring_service
from habitat.infrastructure.external_api_client import ExternalAPIError
from habitat.services.application.monitoring_service import MonitoringService


@pytest.fixture
def live_service(mock_api_client, synthetic):
    """Route the monitoring endpoints to a service backed by the mock client."""
    service = MonitoringService(api_client=mock_api_client, synthetic=synthetic)
    app.dependency_overrides[get_monitoring_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


# ============================================================
# Health Check Tests
# ============================================================

class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_root_endpoint(self, test_client):
        """Root endpoint should return healthy status."""
        response = test_client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "service" in data
        assert "version" in data

    def test_health_endpoint(self, test_client):
        """Health endpoint should return healthy status."""
        response = test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "SoilGrids" in data["live_providers"]


# ============================================================
# Monitoring Endpoint Tests
# ============================================================

class TestMonitoringEndpoint:
    """Tests for GET /api/v1/monitoring."""

    def test_missing_coordinates(self, test_client):
        """Should return 422 when lat/lng are missing."""
        response = test_client.get("/api/v1/monitoring")

        assert response.status_code == 422

    @pytest.mark.parametrize("query", [
        "lat=abc&lng=77.59",
        "lat=95&lng=77.59",
        "lat=12.97&lng=181",
    ])
    def test_malformed_coordinates(self, test_client, query):
        response = test_client.get(f"/api/v1/monitoring?{query}")

        assert response.status_code == 422

    def test_service_rejects_coordinates(self, test_client):
        """A ValueError from the service becomes a 400."""
        mock_service = MagicMock(spec=MonitoringService)
        mock_service.get_monitoring_report.side_effect = ValueError("Coordinates must be finite numbers")
        app.dependency_overrides[get_monitoring_service] = lambda: mock_service

        try:
            response = test_client.get("/api/v1/monitoring?lat=12.97&lng=77.59")

            assert response.status_code == 400
            assert response.json()["detail"] == "Coordinates must be finite numbers"
        finally:
            app.dependency_overrides.clear()

    def test_response_structure(self, test_client, live_service):
        """Should return the complete report when every provider is live."""
        response = test_client.get("/api/v1/monitoring?lat=12.97&lng=77.59")

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {
            "metrics",
            "health_breakdown",
            "health_calculation",
            "risk_advisory",
            "history",
            "alerts",
            "data_sources",
        }

        metrics = data["metrics"]
        assert metrics["ndvi_current"] == 0.62
        assert metrics["moisture_index"] == 48.0
        assert metrics["soil_ph"] == 6.9
        assert metrics["forest_cover"] == 69.6
        assert metrics["carbon_sequestration"] == 205.0
        assert 0 <= metrics["health_score"] <= 100

        assert list(data["health_breakdown"]) == [
            "vegetation", "moisture", "temperature", "air_quality", "forest_cover", "soil_health",
        ]
        assert data["health_breakdown"]["vegetation"] == {
            "value": 0.62, "score": 100.0, "contribution": 25.0, "status": "good",
        }
        assert data["health_calculation"]["weights"]["vegetation"] == 0.25

        assert set(data["risk_advisory"]) == {"risks", "recommendedSpecies", "solutions"}
        assert "suitability" in data["risk_advisory"]["recommendedSpecies"][0]
        assert len(data["history"]) == 12
        assert data["alerts"][0]["type"] == "info"
        assert data["data_sources"] == {
            "weather": "OpenWeather API",
            "satellite": "Sentinel Hub",
            "soil": "SoilGrids API",
            "deforestation": "Global Forest Watch",
        }

    def test_provider_failures_are_reported(self, test_client, live_service, mock_api_client):
        """Failed providers fall back and are labelled in data_sources."""
        mock_api_client.fetch_weather.side_effect = ExternalAPIError("down", 503)
        mock_api_client.fetch_deforestation.side_effect = ExternalAPIError("down", 503)

        response = test_client.get("/api/v1/monitoring?lat=12.97&lng=77.59")

        assert response.status_code == 200
        data = response.json()
        assert data["data_sources"]["weather"] == "Fallback estimates"
        assert data["data_sources"]["deforestation"] == "Historical data"
        assert data["data_sources"]["satellite"] == "Sentinel Hub"
        assert data["metrics"]["lst_temp"] == 28.0


# ============================================================
# Scoring Endpoint Tests
# ============================================================

class TestScoringEndpoints:
    """Tests for the direct scoring endpoints."""

    def test_health_score(self, test_client, live_service):
        response = test_client.post("/api/v1/health-score", json={
            "ndvi": 0.65,
            "moisture": 50,
            "temperature": 25,
            "aqi": 40,
            "forest_cover": 40,
            "soil_ph": 6.8,
            "humidity": 60,
            "rainfall": 10,
        })

        assert response.status_code == 200
        data = response.json()
        assert data["health_score"] == pytest.approx(92.84)
        assert data["health_breakdown"]["forest_cover"]["status"] == "moderate"
        assert data["health_breakdown"]["forest_cover"]["contribution"] == pytest.approx(12.84)

    def test_health_score_missing_field(self, test_client, live_service):
        response = test_client.post("/api/v1/health-score", json={"ndvi": 0.65})

        assert response.status_code == 422

    def test_health_score_requires_weather_fields(self, test_client, live_service):
        response = test_client.post("/api/v1/health-score", json={
            "ndvi": 0.65,
            "moisture": 50,
            "temperature": 25,
            "aqi": 40,
            "forest_cover": 40,
            "soil_ph": 6.8,
        })

        assert response.status_code == 422
        missing = {tuple(error["loc"]) for error in response.json()["detail"]}
        assert missing == {("body", "humidity"), ("body", "rainfall")}

    def test_risk_advisory(self, test_client, live_service):
        response = test_client.post("/api/v1/risk-advisory", json={
            "temperature": 40,
            "humidity": 25,
            "rainfall": 1,
            "ndvi": 0.2,
            "moisture": 20,
        })

        assert response.status_code == 200
        data = response.json()
        assert data["risks"][0]["type"] == "drought"
        assert data["risks"][0]["level"] == "critical"
        assert data["recommendedSpecies"][0]["suitability"] == 95
        assert data["solutions"][0]["priority"] == "immediate"

    def test_risk_advisory_rejects_out_of_range(self, test_client, live_service):
        response = test_client.post("/api/v1/risk-advisory", json={
            "temperature": 30,
            "humidity": 140,
            "rainfall": 0,
            "ndvi": 0.5,
            "moisture": 50,
        })

        assert response.status_code == 422


# ============================================================
# Species And Simulation Endpoint Tests
# ============================================================

class TestSpeciesRecommendEndpoint:
    """Tests for POST /api/v1/species/recommend."""

    def test_ranks_supplied_conditions(self, test_client, live_service, mock_api_client):
        response = test_client.post("/api/v1/species/recommend", json={
            "temperature": 38,
            "soil_ph": 7.8,
            "rainfall": 1,
        })

        assert response.status_code == 200
        data = response.json()
        species = data["species"]
        assert [s["name"] for s in species[:2]] == ["Neem", "Indian Rosewood"]
        assert species[0]["suitability"] == 95
        assert species[0]["mineral_sensitivity"] == 15
        assert species[-1]["notes"] == "Consider alternatives for better results"
        assert set(data["data_sources"].values()) == {"Request"}
        mock_api_client.fetch_weather.assert_not_called()

    def test_looks_up_missing_conditions(self, test_client, live_service):
        response = test_client.post("/api/v1/species/recommend", json={"lat": 12.97, "lng": 77.59})

        assert response.status_code == 200
        assert response.json()["data_sources"] == {
            "temperature": "OpenWeather API",
            "rainfall": "OpenWeather API",
            "soil_ph": "SoilGrids API",
        }

    def test_missing_conditions_without_coordinates(self, test_client, live_service):
        response = test_client.post("/api/v1/species/recommend", json={"temperature": 27})

        assert response.status_code == 400
        assert "lat and lng are required" in response.json()["detail"]

    def test_rejects_out_of_range_ph(self, test_client, live_service):
        response = test_client.post("/api/v1/species/recommend", json={
            "temperature": 27, "soil_ph": 15, "rainfall": 4,
        })

        assert response.status_code == 422


class TestSimulationEndpoint:
    """Tests for POST /api/v1/simulation."""

    def test_simulation(self, test_client, live_service):
        response = test_client.post("/api/v1/simulation", json={
            "scenario": {"type": "drought", "severity": 80, "affected_area": 60, "duration": 6},
            "selected_species": ["Neem", "Teak"],
        })

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"scenario", "species_impact", "metrics_impact", "recommendations"}
        assert [s["species"] for s in data["species_impact"]] == ["Neem", "Teak"]
        assert data["metrics_impact"]["moisture"] == -40
        assert "Consider emergency irrigation from alternative water sources" in data["recommendations"]
        assert "Activate emergency response protocols" in data["recommendations"]

    def test_requires_species(self, test_client, live_service):
        response = test_client.post("/api/v1/simulation", json={
            "scenario": {"type": "flood", "severity": 50, "affected_area": 50, "duration": 2},
            "selected_species": [],
        })

        assert response.status_code == 422

    def test_rejects_unknown_calamity(self, test_client, live_service):
        response = test_client.post("/api/v1/simulation", json={
            "scenario": {"type": "earthquake", "severity": 50, "affected_area": 50, "duration": 2},
            "selected_species": ["Neem"],
        })

        assert response.status_code == 422


# ============================================================
# Error Handling Tests
# ============================================================

class TestErrorHandling:
    """Tests for the global error handling middleware."""

    READING = {
        "ndvi": 0.65, "moisture": 50, "temperature": 25,
        "aqi": 40, "forest_cover": 40, "soil_ph": 6.8,
        "humidity": 60, "rainfall": 10,
    }

    def _override(self, side_effect):
        mock_service = MagicMock(spec=MonitoringService)
        mock_service.score_reading.side_effect = side_effect
        app.dependency_overrides[get_monitoring_service] = lambda: mock_service

    def test_external_api_error_keeps_status(self, test_client):
        self._override(ExternalAPIError("Sentinel Hub credentials not configured", 503))
        try:
            response = test_client.post("/api/v1/health-score", json=self.READING)

            assert response.status_code == 503
            assert response.json() == {
                "error": "Upstream provider error",
                "detail": "Sentinel Hub credentials not configured",
            }
        finally:
            app.dependency_overrides.clear()

    def test_value_error_is_bad_request(self, test_client):
        self._override(ValueError("bad reading"))
        try:
            response = test_client.post("/api/v1/health-score", json=self.READING)

            assert response.status_code == 400
            assert response.json()["detail"] == "bad reading"
        finally:
            app.dependency_overrides.clear()

    def test_unexpected_error_is_generic(self, test_client):
        self._override(RuntimeError("secret internals"))
        try:
            response = test_client.post("/api/v1/health-score", json=self.READING)

            assert response.status_code == 500
            assert "secret internals" not in response.text
        finally:
            app.dependency_overrides.clear()


# ============================================================
# Response Format Tests
# ============================================================

class TestResponseFormats:
    """Tests for API response formats."""

    def test_openapi_schema_available(self, test_client):
        """OpenAPI schema should be available."""
        response = test_client.get("/openapi.json")

        assert response.status_code == 200
        data = response.json()
        assert "/api/v1/monitoring" in data["paths"]
        assert "/api/v1/health-score" in data["paths"]
        assert "/api/v1/risk-advisory" in data["paths"]
        assert "/api/v1/species/recommend" in data["paths"]
        assert "/api/v1/simulation" in data["paths"]

    def test_docs_endpoint_available(self, test_client):
        """Swagger docs should be available."""
        response = test_client.get("/docs")

        assert response.status_code == 200
        assert "swagger" in response.text.lower()

    def test_redoc_endpoint_available(self, test_client):
        response = test_client.get("/redoc")

        assert response.status_code == 200


# ============================================================
# CORS Tests
# ============================================================

class TestCORS:
    """Tests for CORS configuration."""

    def test_cors_preflight(self, test_client):
        response = test_client.options(
            "/api/v1/monitoring",
            headers={
                "Origin": "http://example.com",
                "Access-Control-Request-Method": "GET",
            },
        )

        assert response.status_code == 200
        assert "access-control-allow-origin" in response.headers


# ============================================================
# Rate Limiting Tests
# ============================================================

class TestRateLimiting:
    """Tests for rate limiting functionality."""

    def test_rate_limit_documented_in_openapi(self, test_client):
        """Rate limit should be documented in OpenAPI."""
        data = test_client.get("/openapi.json").json()

        assert "429" in data["paths"]["/api/v1/monitoring"]["get"]["responses"]
        assert "429" in data["paths"]["/api/v1/risk-advisory"]["post"]["responses"]


# ============================================================
# Async Client Tests
# ============================================================

class TestAsyncClient:
    """Tests using the async ASGI client."""

    async def test_monitoring_async(self, async_test_client, live_service):
        response = await async_test_client.get("/api/v1/monitoring?lat=28.61&lng=77.21")

        assert response.status_code == 200
        # Northern latitude uses the smaller forest cover offset: 0.62 * 80 + 10
        assert response.json()["metrics"]["forest_cover"] == 59.6
