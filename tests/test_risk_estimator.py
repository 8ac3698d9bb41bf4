"""
Unit tests for hazard risk estimation.

Tests cover:
- Drought, flood and heat-stress rule tables
- Level mapping
- Reporting threshold
- Monotonicity in each stressor
"""
import pytest

from habitat.domain.models import RiskLevel, RiskType, WeatherData
from habitat.services.domain.risk_estimator import (
    drought_risk,
    estimate_risks,
    flood_risk,
    heat_risk,
    risk_level,
)


def _weather(temperature=25.0, humidity=60.0, rainfall=10.0) -> WeatherData:
    return WeatherData(temperature=temperature, humidity=humidity, rainfall=rainfall)


# ============================================================
# Level Mapping Tests
# ============================================================

class TestRiskLevel:
    """Tests for risk_level()."""

    @pytest.mark.parametrize("probability,expected", [
        (0, RiskLevel.LOW),
        (30, RiskLevel.LOW),
        (31, RiskLevel.MODERATE),
        (50, RiskLevel.MODERATE),
        (51, RiskLevel.HIGH),
        (70, RiskLevel.HIGH),
        (71, RiskLevel.CRITICAL),
        (100, RiskLevel.CRITICAL),
    ])
    def test_thresholds(self, probability, expected):
        assert risk_level(probability) == expected


# ============================================================
# Drought Tests
# ============================================================

class TestDroughtRisk:
    """Tests for the drought rule table."""

    def test_normal_conditions(self):
        score = drought_risk(_weather(), ndvi=0.6, moisture=50)

        assert score.probability == 0
        assert score.description == "Normal conditions"

    def test_all_factors_capped_at_hundred(self, drought_weather):
        score = drought_risk(drought_weather, ndvi=0.2, moisture=20)

        assert score.probability == 100
        assert score.description == (
            "Drought conditions likely due to very low precipitation, extreme heat, "
            "very low humidity, soil moisture deficit, vegetation stress detected"
        )

    def test_moderate_factors(self):
        score = drought_risk(
            _weather(temperature=35, humidity=40, rainfall=3), ndvi=0.5, moisture=30
        )

        # low precipitation 20 + high temperatures 20 + low humidity 15 + mild deficit 10
        assert score.probability == 65
        assert "low precipitation" in score.description
        assert "high temperatures" in score.description
        assert "low humidity" in score.description

    def test_mild_moisture_deficit_not_named(self):
        score = drought_risk(_weather(), ndvi=0.6, moisture=30)

        assert score.probability == 10
        assert score.description == "Normal conditions"

    def test_boundaries(self):
        assert drought_risk(_weather(rainfall=2), 0.6, 50).probability == 20
        assert drought_risk(_weather(rainfall=5), 0.6, 50).probability == 0
        assert drought_risk(_weather(temperature=38), 0.6, 50).probability == 20
        assert drought_risk(_weather(temperature=33), 0.6, 50).probability == 0
        assert drought_risk(_weather(humidity=30), 0.6, 50).probability == 15
        assert drought_risk(_weather(humidity=45), 0.6, 50).probability == 0
        assert drought_risk(_weather(), 0.3, 50).probability == 0

    def test_monotonic_in_rainfall(self):
        probabilities = [
            drought_risk(_weather(rainfall=r), 0.6, 50).probability
            for r in [0, 1, 1.99, 2, 3, 4.99, 5, 10, 50]
        ]
        assert probabilities == sorted(probabilities, reverse=True)

    def test_rainfall_one_at_least_rainfall_three(self):
        assert (
            drought_risk(_weather(rainfall=1), 0.6, 50).probability
            >= drought_risk(_weather(rainfall=3), 0.6, 50).probability
        )

    # Backgrounds the single-input sweeps below run against: calm, and
    # already stressed so that the cap at 100 is reachable.
    BACKGROUNDS = [
        dict(temperature=25.0, humidity=60.0, rainfall=10.0, ndvi=0.6, moisture=50.0),
        dict(temperature=36.0, humidity=35.0, rainfall=1.0, ndvi=0.2, moisture=20.0),
    ]

    @pytest.mark.parametrize("background", BACKGROUNDS)
    def test_monotonic_in_humidity(self, background):
        """Drier air never lowers drought risk."""
        conditions = dict(background)
        ndvi, moisture = conditions.pop("ndvi"), conditions.pop("moisture")
        probabilities = [
            drought_risk(_weather(**{**conditions, "humidity": h}), ndvi, moisture).probability
            for h in [0, 15, 29.99, 30, 44.99, 45, 60, 100]
        ]
        assert probabilities == sorted(probabilities, reverse=True)

    @pytest.mark.parametrize("background", BACKGROUNDS)
    def test_monotonic_in_moisture(self, background):
        """Drier soil never lowers drought risk."""
        conditions = dict(background)
        ndvi = conditions.pop("ndvi")
        conditions.pop("moisture")
        probabilities = [
            drought_risk(_weather(**conditions), ndvi, m).probability
            for m in [0, 10, 24.99, 25, 39.99, 40, 70, 100]
        ]
        assert probabilities == sorted(probabilities, reverse=True)

    @pytest.mark.parametrize("background", BACKGROUNDS)
    def test_monotonic_in_temperature(self, background):
        """Hotter weather never lowers drought risk."""
        conditions = dict(background)
        ndvi, moisture = conditions.pop("ndvi"), conditions.pop("moisture")
        probabilities = [
            drought_risk(_weather(**{**conditions, "temperature": t}), ndvi, moisture).probability
            for t in [-10, 20, 33, 33.01, 38, 38.01, 45, 60]
        ]
        assert probabilities == sorted(probabilities)

    @pytest.mark.parametrize("background", BACKGROUNDS)
    def test_monotonic_in_ndvi(self, background):
        """Sparser vegetation never lowers drought risk."""
        conditions = dict(background)
        conditions.pop("ndvi")
        moisture = conditions.pop("moisture")
        probabilities = [
            drought_risk(_weather(**conditions), n, moisture).probability
            for n in [-1, 0, 0.29, 0.3, 0.6, 1]
        ]
        assert probabilities == sorted(probabilities, reverse=True)


# ============================================================
# Flood Tests
# ============================================================

class TestFloodRisk:
    """Tests for the flood rule table."""

    def test_normal_conditions(self):
        score = flood_risk(_weather(), moisture=50)

        assert score.probability == 0
        assert score.description == "Normal conditions"

    def test_flood_stressed_site(self, flood_weather):
        score = flood_risk(flood_weather, moisture=85)

        assert score.probability == 90
        assert score.description == (
            "Flood risk elevated due to heavy rainfall, saturated conditions, waterlogged soil"
        )

    def test_saturation_requires_rain(self):
        assert flood_risk(_weather(humidity=95, rainfall=10), 50).probability == 0
        assert flood_risk(_weather(humidity=95, rainfall=11), 50).probability == 20

    def test_moderate_rainfall_and_wet_soil(self):
        score = flood_risk(_weather(rainfall=30), moisture=70)

        assert score.probability == 35
        assert score.description == "Flood risk elevated due to moderate to heavy rainfall"

    def test_monotonic_in_rainfall(self):
        probabilities = [
            flood_risk(_weather(humidity=90, rainfall=r), 50).probability
            for r in [0, 10, 11, 25, 26, 50, 51, 200]
        ]
        assert probabilities == sorted(probabilities)

    @pytest.mark.parametrize("humidity,rainfall", [(60.0, 0.0), (90.0, 30.0), (95.0, 80.0)])
    def test_monotonic_in_moisture(self, humidity, rainfall):
        """Wetter soil never lowers flood risk."""
        weather = _weather(humidity=humidity, rainfall=rainfall)
        probabilities = [
            flood_risk(weather, m).probability
            for m in [0, 40, 65, 65.01, 80, 80.01, 95, 100]
        ]
        assert probabilities == sorted(probabilities)

    @pytest.mark.parametrize("rainfall", [11.0, 30.0, 60.0])
    def test_monotonic_in_humidity_when_raining(self, rainfall):
        """With rain falling, more humid air never lowers flood risk."""
        probabilities = [
            flood_risk(_weather(humidity=h, rainfall=rainfall), 70).probability
            for h in [0, 50, 85, 85.01, 95, 100]
        ]
        assert probabilities == sorted(probabilities)


# ============================================================
# Heat Tests
# ============================================================

class TestHeatRisk:
    """Tests for the heat-stress rule table."""

    def test_safe_range(self):
        score = heat_risk(_weather())

        assert score.probability == 0
        assert score.description == "Temperature within safe range"

    @pytest.mark.parametrize("temperature,expected", [
        (35, 0), (36, 25), (38, 25), (39, 40), (42, 40), (43, 60),
    ])
    def test_temperature_bands_humid(self, temperature, expected):
        assert heat_risk(_weather(temperature=temperature, humidity=60)).probability == expected

    def test_dry_heat_adds(self):
        score = heat_risk(_weather(temperature=43, humidity=20))

        assert score.probability == 80
        assert score.description == "Heat stress likely: extreme heat wave conditions, dry heat stress"

    def test_dry_heat_alone(self):
        score = heat_risk(_weather(temperature=33, humidity=30))

        assert score.probability == 20
        assert score.description == "Heat stress likely: dry heat stress"

    def test_monotonic_in_temperature(self):
        probabilities = [
            heat_risk(_weather(temperature=t, humidity=30)).probability
            for t in range(20, 50)
        ]
        assert probabilities == sorted(probabilities)


# ============================================================
# estimate_risks Tests
# ============================================================

class TestEstimateRisks:
    """Tests for the reporting filter."""

    def test_no_risks_under_normal_conditions(self):
        assert estimate_risks(_weather(), ndvi=0.6, moisture=50) == []

    def test_threshold_is_exclusive(self):
        """An index of exactly 20 is not reported."""
        risks = estimate_risks(_weather(rainfall=3), ndvi=0.6, moisture=50)

        assert risks == []

    def test_drought_stressed_site(self, drought_weather):
        risks = estimate_risks(drought_weather, ndvi=0.2, moisture=20)
        by_type = {r.type: r for r in risks}

        assert by_type[RiskType.DROUGHT].probability >= 90
        assert by_type[RiskType.DROUGHT].level == RiskLevel.CRITICAL
        assert by_type[RiskType.HEAT_STRESS].probability == 60
        assert by_type[RiskType.HEAT_STRESS].level == RiskLevel.HIGH
        assert RiskType.FLOOD not in by_type

    def test_flood_stressed_site(self, flood_weather):
        risks = estimate_risks(flood_weather, ndvi=0.5, moisture=85)

        assert [r.type for r in risks] == [RiskType.FLOOD]
        assert risks[0].probability >= 70
        assert risks[0].level == RiskLevel.CRITICAL

    def test_order_is_drought_flood_heat(self):
        weather = _weather(temperature=40, humidity=90, rainfall=60)
        risks = estimate_risks(weather, ndvi=0.1, moisture=85)

        assert [r.type for r in risks] == [
            RiskType.DROUGHT, RiskType.FLOOD, RiskType.HEAT_STRESS,
        ]
