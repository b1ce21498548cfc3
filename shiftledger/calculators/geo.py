"""Geolocation helpers for geofence checks on clock entries."""

import math

EARTH_RADIUS_METERS = 6371e3
FEET_PER_METER = 3.28084


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two coordinates in meters.

    Example:
        >>> round(haversine_distance(0.0, 0.0, 0.0, 1.0))
        111195
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def distance_feet(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    return haversine_distance(lat1, lng1, lat2, lng2) * FEET_PER_METER
