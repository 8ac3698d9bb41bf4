"""
Domain service: Synthetic display data.

Some values shown alongside the health score have no live source: the air
quality estimate and the 12-month history series. They are generated here,
behind the SyntheticDataProvider protocol, so that the scoring core stays
deterministic and tests can inject a seeded generator.
"""
import math
from typing import Callable, Optional, Protocol

import numpy as np

from habitat.domain.models import HistoryPoint, WeatherData


MONTHS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

# Month indices (0-based) of the Indian summer monsoon, June-September
MONSOON_MONTHS = {5, 6, 7, 8}
# Post-monsoon months that keep a green canopy
POST_MONSOON_MONTHS = {9, 10}


def _round(value: float) -> float:
    return round(float(value), 2)


def _is_winter(month_index: int) -> bool:
    return month_index >= 10 or month_index <= 2


def _seasonal_rainfall_base(month_index: int) -> float:
    if month_index in MONSOON_MONTHS:
        return 180
    if _is_winter(month_index):
        return 15
    return 40


def _build_history(
    lat: float,
    weather: WeatherData,
    current_month: int,
    jitter: Callable[[float], float],
) -> list[HistoryPoint]:
    """
    12-month climate history for a latitude.

    Args:
        lat: Latitude in degrees (selects the regional temperature profile)
        weather: Current weather, used verbatim for the current month
        current_month: 0-based index of the current month
        jitter: Noise source; called with a spread, returns a value within +/- spread/2

    Returns:
        One HistoryPoint per calendar month, January first
    """
    is_south = lat < 15
    is_north = lat > 25
    base_temp = 28 if is_south else 22 if is_north else 25
    temp_variation = 4 if is_south else 15 if is_north else 10

    def seasonal_rainfall(month_index: int) -> float:
        base = _seasonal_rainfall_base(month_index)
        return base + jitter(base * 0.4)

    points = []
    for i, month in enumerate(MONTHS):
        if i == current_month:
            points.append(HistoryPoint(
                month=month,
                ndvi=_round(0.4 + (weather.humidity / 100) * 0.3),
                rainfall=_round(weather.rainfall or seasonal_rainfall(i)),
                temperature=_round(weather.temperature),
                moisture=_round(weather.humidity * 0.7),
            ))
            continue

        temp_pattern = math.cos((i - 5) / 6 * math.pi)
        is_monsoon = i in MONSOON_MONTHS
        ndvi_base = 0.55 if is_monsoon or i in POST_MONSOON_MONTHS else 0.35
        moisture_base = 60 if is_monsoon else 35 if _is_winter(i) else 45

        points.append(HistoryPoint(
            month=month,
            ndvi=_round(ndvi_base + jitter(0.15)),
            rainfall=_round(seasonal_rainfall(i)),
            temperature=_round(base_temp + temp_pattern * temp_variation * 0.5),
            moisture=_round(moisture_base + jitter(15)),
        ))

    return points


def baseline_history(
    lat: float,
    weather: WeatherData,
    current_month: int,
) -> list[HistoryPoint]:
    """Noise-free history: every past month sits on its seasonal baseline."""
    return _build_history(lat, weather, current_month, lambda spread: 0.0)


class SyntheticDataProvider(Protocol):
    """Source of synthetic, display-only values."""

    def estimate_aqi(self, weather: WeatherData) -> float:
        ...

    def history(
        self,
        lat: float,
        weather: WeatherData,
        current_month: int,
    ) -> list[HistoryPoint]:
        ...


class SeededSyntheticDataProvider:
    """
    SyntheticDataProvider backed by a numpy random Generator.

    With a fixed seed the output is fully reproducible.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def _jitter(self, spread: float) -> float:
        """Uniform noise in [-spread/2, spread/2)."""
        return (self.rng.random() - 0.5) * spread

    def estimate_aqi(self, weather: WeatherData) -> float:
        """
        Estimate AQI from weather when no air-quality source is available.

        Humid air is assumed cleaner, hot air dustier; otherwise a moderate
        value between 50 and 80 is drawn.
        """
        if weather.humidity > 70:
            return 60.0
        if weather.temperature > 35:
            return 90.0
        return _round(50 + self.rng.random() * 30)

    def history(
        self,
        lat: float,
        weather: WeatherData,
        current_month: int,
    ) -> list[HistoryPoint]:
        """12-month history with seasonal baselines plus seeded noise."""
        return _build_history(lat, weather, current_month, self._jitter)
