"""
Domain service: Normalization of raw environmental readings.

Each indicator is mapped independently onto a 0-100 scale using fixed
piecewise-linear or banded threshold rules. Out-of-range values are not
rejected; they fall into the lowest band of their rule, and sub-scores are
clamped to [0, 100].
"""
from typing import Callable

from habitat.domain.models import (
    EnvironmentalReading,
    HealthStatus,
    MetricName,
    SubScore,
)


# National forest cover target for India (percent of land area)
FOREST_COVER_TARGET = 33.0


def vegetation_score(ndvi: float) -> float:
    """Score NDVI, saturating at 0.6 (dense healthy vegetation)."""
    if ndvi >= 0.6:
        return 100.0
    if ndvi >= 0.4:
        return 70.0 + (ndvi - 0.4) * 150.0
    return ndvi * 175.0


def moisture_score(moisture: float) -> float:
    """Score moisture percentage, optimal band 40-60%."""
    if 40 <= moisture <= 60:
        return 100.0
    if 25 <= moisture <= 75:
        return 75.0
    if 15 <= moisture <= 85:
        return 50.0
    return 25.0


def temperature_score(temperature: float) -> float:
    """Score temperature in °C, optimal band 20-30 for most vegetation."""
    if 20 <= temperature <= 30:
        return 100.0
    if 15 <= temperature <= 35:
        return 75.0
    if 10 <= temperature <= 40:
        return 50.0
    return 25.0


def air_quality_score(aqi: float) -> float:
    """Score AQI; lower is better."""
    if aqi <= 50:
        return 100.0
    if aqi <= 100:
        return 80.0
    if aqi <= 150:
        return 50.0
    return 25.0


def forest_cover_score(forest_cover: float) -> float:
    if forest_cover >= FOREST_COVER_TARGET:
        return 60.0 + (forest_cover - FOREST_COVER_TARGET) * 0.6
    return forest_cover * 1.8


def soil_health_score(soil_ph: float) -> float:
    """Score soil pH, optimal band 6.0-7.5."""
    if 6.0 <= soil_ph <= 7.5:
        return 100.0
    if 5.5 <= soil_ph <= 8.0:
        return 70.0
    return 40.0


def status_for(score: float) -> HealthStatus:
    if score >= 70:
        return HealthStatus.GOOD
    if score >= 40:
        return HealthStatus.MODERATE
    return HealthStatus.POOR


# Indicator -> (reading field, scoring rule), in breakdown order
SCORING_RULES: dict[MetricName, tuple[str, Callable[[float], float]]] = {
    MetricName.VEGETATION: ("ndvi", vegetation_score),
    MetricName.MOISTURE: ("moisture", moisture_score),
    MetricName.TEMPERATURE: ("temperature", temperature_score),
    MetricName.AIR_QUALITY: ("aqi", air_quality_score),
    MetricName.FOREST_COVER: ("forest_cover", forest_cover_score),
    MetricName.SOIL_HEALTH: ("soil_ph", soil_health_score),
}

# Fixed indicator weights; must sum to 1.0
HEALTH_WEIGHTS: dict[MetricName, float] = {
    MetricName.VEGETATION: 0.25,
    MetricName.MOISTURE: 0.20,
    MetricName.TEMPERATURE: 0.15,
    MetricName.AIR_QUALITY: 0.10,
    MetricName.FOREST_COVER: 0.20,
    MetricName.SOIL_HEALTH: 0.10,
}


def normalize(reading: EnvironmentalReading) -> list[SubScore]:
    """
    Convert a reading into six weighted sub-scores.

    Args:
        reading: Raw environmental readings

    Returns:
        One SubScore per indicator, in SCORING_RULES order
    """
    sub_scores = []
    for metric, (field_name, rule) in SCORING_RULES.items():
        raw_value = getattr(reading, field_name)
        # Negative NDVI and near-total forest cover fall outside 0-100
        score = min(100.0, max(0.0, rule(raw_value)))
        weight = HEALTH_WEIGHTS[metric]
        sub_scores.append(SubScore(
            metric=metric,
            raw_value=raw_value,
            score=score,
            weight=weight,
            weighted_contribution=score * weight,
            status=status_for(score),
        ))
    return sub_scores
