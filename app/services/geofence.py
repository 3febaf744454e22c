"""
Geofence check — is a coordinate inside the circle around the site office?
"""

from __future__ import annotations

import math

from app.services.config_store import RuntimeConfig

EARTH_RADIUS_KM = 6371


def haversine_distance_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two WGS84 points, in meters."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c * 1000


def is_within_geofence(lat: float, lng: float, config: RuntimeConfig) -> bool:
    """True when (lat, lng) lies within ``geofence_radius`` meters of the office.

    NaN coordinates yield a NaN distance, which never compares as inside.
    """
    distance = haversine_distance_m(lat, lng, config.office_lat, config.office_lng)
    return distance <= config.geofence_radius
