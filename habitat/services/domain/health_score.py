"""
Domain service: Aggregation of normalized sub-scores into one health score.
"""
from habitat.domain.models import EnvironmentalReading, HealthScore, SubScore
from habitat.services.domain.metric_normalizer import HEALTH_WEIGHTS, normalize


HEALTH_CALCULATION = {
    "formula": "Weighted average of 6 ecosystem indicators",
    "weights": {metric.value: weight for metric, weight in HEALTH_WEIGHTS.items()},
    "description": (
        "Health Score = (NDVI×25%) + (Moisture×20%) + (Temperature×15%) + "
        "(AQI×10%) + (Forest Cover×20%) + (Soil Health×10%)"
    ),
}


def aggregate(sub_scores: list[SubScore]) -> HealthScore:
    """
    Combine weighted sub-scores into the overall health score.

    The total is the sum of the weighted contributions, clamped to
    [0, 100] and rounded to 2 decimals.
    """
    weighted_sum = sum(s.weighted_contribution for s in sub_scores)
    total = round(min(100.0, max(0.0, weighted_sum)), 2)
    return HealthScore(total=total, breakdown=sub_scores)


def calculate_health_score(reading: EnvironmentalReading) -> HealthScore:
    return aggregate(normalize(reading))
