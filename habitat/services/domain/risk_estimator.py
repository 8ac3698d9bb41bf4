"""
Domain service: Hazard risk estimation from weather, moisture and NDVI.

Three hazards are scored with additive rule tables:
- Drought: precipitation, heat, humidity, soil moisture and vegetation stress
- Flood: rainfall intensity, saturation and waterlogged soil
- Heat stress: temperature bands and dry heat

Caveat: the resulting "probability" is a bounded heuristic severity index
in [0, 100] built from fixed rule weights. It is not a calibrated statistical
probability and not a meteorological model; the field name is kept for
compatibility with existing consumers.
"""
from habitat.domain.models import (
    RiskAssessment,
    RiskLevel,
    RiskScore,
    RiskType,
    WeatherData,
)


# Hazards at or below this index are not reported
REPORTING_THRESHOLD = 20.0


def _cap(risk: float) -> float:
    return min(100.0, max(0.0, risk))


def risk_level(probability: float) -> RiskLevel:
    """Map a risk index onto its severity level."""
    if probability > 70:
        return RiskLevel.CRITICAL
    if probability > 50:
        return RiskLevel.HIGH
    if probability > 30:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def drought_risk(weather: WeatherData, ndvi: float, moisture: float) -> RiskScore:
    """
    Score drought risk.

    Args:
        weather: Current weather (rainfall in mm, temperature in °C, humidity in %)
        ndvi: Vegetation index of the area
        moisture: Moisture index in percent

    Returns:
        RiskScore with the capped index and the contributing factors
    """
    risk = 0.0
    factors = []

    if weather.rainfall < 2:
        risk += 35
        factors.append("very low precipitation")
    elif weather.rainfall < 5:
        risk += 20
        factors.append("low precipitation")

    if weather.temperature > 38:
        risk += 30
        factors.append("extreme heat")
    elif weather.temperature > 33:
        risk += 20
        factors.append("high temperatures")

    if weather.humidity < 30:
        risk += 25
        factors.append("very low humidity")
    elif weather.humidity < 45:
        risk += 15
        factors.append("low humidity")

    if moisture < 25:
        risk += 20
        factors.append("soil moisture deficit")
    elif moisture < 40:
        # Mild deficit adds weight without being named
        risk += 10

    if ndvi < 0.3:
        risk += 15
        factors.append("vegetation stress detected")

    description = (
        f"Drought conditions likely due to {', '.join(factors)}"
        if factors else "Normal conditions"
    )
    return RiskScore(probability=_cap(risk), description=description)


def flood_risk(weather: WeatherData, moisture: float) -> RiskScore:
    """Score flood risk from rainfall, humidity and soil moisture."""
    risk = 0.0
    factors = []

    if weather.rainfall > 50:
        risk += 45
        factors.append("heavy rainfall")
    elif weather.rainfall > 25:
        risk += 25
        factors.append("moderate to heavy rainfall")

    if weather.humidity > 85 and weather.rainfall > 10:
        risk += 20
        factors.append("saturated conditions")

    if moisture > 80:
        risk += 25
        factors.append("waterlogged soil")
    elif moisture > 65:
        risk += 10

    description = (
        f"Flood risk elevated due to {', '.join(factors)}"
        if factors else "Normal conditions"
    )
    return RiskScore(probability=_cap(risk), description=description)


def heat_risk(weather: WeatherData) -> RiskScore:
    """Score heat stress from temperature and humidity."""
    risk = 0.0
    factors = []

    if weather.temperature > 42:
        risk += 60
        factors.append("extreme heat wave conditions")
    elif weather.temperature > 38:
        risk += 40
        factors.append("severe heat")
    elif weather.temperature > 35:
        risk += 25
        factors.append("high temperatures")

    if weather.temperature > 32 and weather.humidity < 40:
        risk += 20
        factors.append("dry heat stress")

    description = (
        f"Heat stress likely: {', '.join(factors)}"
        if factors else "Temperature within safe range"
    )
    return RiskScore(probability=_cap(risk), description=description)


def _assessment(risk_type: RiskType, score: RiskScore) -> RiskAssessment:
    return RiskAssessment(
        type=risk_type,
        level=risk_level(score.probability),
        probability=score.probability,
        description=score.description,
    )


def estimate_risks(
    weather: WeatherData,
    ndvi: float,
    moisture: float,
) -> list[RiskAssessment]:
    """
    Estimate drought, flood and heat-stress risk.

    Only hazards whose index exceeds REPORTING_THRESHOLD are returned,
    in the order drought, flood, heat stress.
    """
    scores = [
        (RiskType.DROUGHT, drought_risk(weather, ndvi, moisture)),
        (RiskType.FLOOD, flood_risk(weather, moisture)),
        (RiskType.HEAT_STRESS, heat_risk(weather)),
    ]
    return [
        _assessment(risk_type, score)
        for risk_type, score in scores
        if score.probability > REPORTING_THRESHOLD
    ]
