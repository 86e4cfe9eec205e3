"""Geospatial helper functions."""

from __future__ import annotations

import math

from ..models.domain import Coordinate, MissingCoordinateError

EARTH_RADIUS_KM = 6371.0
EARTH_RADIUS_MILES = 3958.8


def _validate(lat: float, lon: float) -> None:
    for value in (lat, lon):
        if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value):
            raise MissingCoordinateError(f"Invalid coordinate ({lat}, {lon}) in distance computation.")


def _central_angle(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    _validate(lat1, lon1)
    _validate(lat2, lon2)

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    return EARTH_RADIUS_KM * _central_angle(lat1, lon1, lat2, lon2)


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in statute miles."""

    return EARTH_RADIUS_MILES * _central_angle(lat1, lon1, lat2, lon2)


def distance_miles(a: Coordinate, b: Coordinate) -> float:
    """Distance in miles between two ``(lat, lng)`` pairs."""

    if a is None or b is None:
        raise MissingCoordinateError("Cannot compute distance from a missing coordinate.")
    return haversine_miles(a[0], a[1], b[0], b[1])
