"""
Geospatial utilities for coordinate validation and search areas.
"""
import math
from typing import Any, Tuple

from pyproj import Geod
from shapely.geometry import Polygon, box, mapping


# WGS84 ellipsoid for geodesic offsets
_GEOD = Geod(ellps="WGS84")


def validate_coordinates(lat: float, lng: float) -> None:
    """
    Check that a point is a valid WGS84 latitude/longitude pair.

    Args:
        lat: Latitude in degrees
        lng: Longitude in degrees

    Raises:
        ValueError: If either value is non-finite or out of range
    """
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise ValueError("Coordinates must be finite numbers")
    if not -90 <= lat <= 90:
        raise ValueError(f"Latitude {lat} out of range [-90, 90]")
    if not -180 <= lng <= 180:
        raise ValueError(f"Longitude {lng} out of range [-180, 180]")


def bounding_box(
    lat: float,
    lng: float,
    radius_km: float,
) -> Tuple[float, float, float, float]:
    """
    Compute the bounding box of a circle around a point.

    Offsets are geodesic distances on the WGS84 ellipsoid along the four
    cardinal azimuths. The box is clipped to valid coordinate ranges and
    does not wrap across the antimeridian.

    Args:
        lat: Latitude of the center in degrees
        lng: Longitude of the center in degrees
        radius_km: Radius in kilometres

    Returns:
        (min_lon, min_lat, max_lon, max_lat)
    """
    radius_m = radius_km * 1000.0
    lons = [lng] * 4
    lats = [lat] * 4
    end_lons, end_lats, _ = _GEOD.fwd(lons, lats, [0, 90, 180, 270], [radius_m] * 4)

    north = lat + abs(end_lats[0] - lat)
    south = lat - abs(lat - end_lats[2])
    # Longitudinal offsets are symmetric; unwrap in case of antimeridian crossing
    lon_offset = abs((end_lons[1] - lng + 180) % 360 - 180)

    return (
        max(-180.0, lng - lon_offset),
        max(-90.0, south),
        min(180.0, lng + lon_offset),
        min(90.0, north),
    )


def search_area(lat: float, lng: float, radius_km: float) -> Polygon:
    """Rectangular search polygon around a point."""
    return box(*bounding_box(lat, lng, radius_km))


def to_geojson(polygon: Polygon) -> dict[str, Any]:
    """Convert a polygon to a GeoJSON geometry with list coordinates."""
    geometry = mapping(polygon)
    return {
        "type": geometry["type"],
        "coordinates": [
            [list(coord) for coord in ring]
            for ring in geometry["coordinates"]
        ],
    }
