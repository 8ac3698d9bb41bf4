"""
Domain service: User-facing alerts derived from raw data and the health breakdown.
"""
from datetime import datetime, timezone
from typing import Optional

from habitat.domain.models import (
    Alert,
    AlertType,
    DeforestationData,
    HealthStatus,
    SubScore,
    WeatherData,
)


# Recent (30-day) deforestation alerts above which a critical alert is raised
DEFORESTATION_ALERT_THRESHOLD = 5
EXTREME_HEAT_TEMPERATURE = 38.0
HIGH_TEMPERATURE = 35.0
LOW_HUMIDITY = 30.0

ALL_NORMAL_MESSAGE = "All ecosystem indicators within normal range"


class AlertSequence:
    """
    Issues alert IDs for a single response.

    IDs have the form "<category>-<n>" where n increases monotonically,
    so they are unique within one sequence.
    """

    def __init__(self) -> None:
        self._counter = 0

    def next_id(self, category: str) -> str:
        self._counter += 1
        return f"{category}-{self._counter}"


def _metric_label(metric: str) -> str:
    return metric.replace("_", " ", 1).upper()


def generate_alerts(
    deforestation: DeforestationData,
    weather: WeatherData,
    breakdown: list[SubScore],
    now: Optional[datetime] = None,
) -> list[Alert]:
    """
    Build the alert list for one monitoring report.

    Every rule is evaluated independently. When nothing triggers, a single
    informational "all normal" alert is returned, so the list is never empty.

    Args:
        deforestation: Deforestation alert summary
        weather: Current weather
        breakdown: Health score breakdown
        now: Timestamp to stamp on every alert (defaults to current UTC time)

    Returns:
        List of alerts in rule order
    """
    timestamp = now or datetime.now(timezone.utc)
    sequence = AlertSequence()
    alerts: list[Alert] = []

    def add(category: str, alert_type: AlertType, message: str) -> None:
        alerts.append(Alert(
            id=sequence.next_id(category),
            type=alert_type,
            message=message,
            timestamp=timestamp,
        ))

    if deforestation.recent_alerts > DEFORESTATION_ALERT_THRESHOLD:
        add(
            "deforestation",
            AlertType.CRITICAL,
            f"{deforestation.recent_alerts} deforestation alerts detected in last 30 days",
        )

    if weather.temperature > EXTREME_HEAT_TEMPERATURE:
        add(
            "temp-critical",
            AlertType.CRITICAL,
            f"Extreme heat: {weather.temperature:.1f}°C - High stress on vegetation",
        )
    elif weather.temperature > HIGH_TEMPERATURE:
        add(
            "temp",
            AlertType.WARNING,
            f"High temperature: {weather.temperature:.1f}°C - Monitor for heat stress",
        )

    if weather.humidity < LOW_HUMIDITY:
        add(
            "humidity",
            AlertType.WARNING,
            f"Low humidity: {weather.humidity:g}% - Increased fire risk",
        )

    for sub_score in breakdown:
        if sub_score.status == HealthStatus.POOR:
            add(
                f"health-{sub_score.metric.value}",
                AlertType.WARNING,
                f"{_metric_label(sub_score.metric.value)} is in poor condition",
            )

    if not alerts:
        add("info", AlertType.INFO, ALL_NORMAL_MESSAGE)

    return alerts
