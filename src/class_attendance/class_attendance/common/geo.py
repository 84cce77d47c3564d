import math

from ..core.constants import EARTH_RADIUS_KM


def haversine(lat1, lon1, lat2, lon2):
    """Great-circle distance in meters."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = (
        math.sin(dphi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a)) * 1000


def within_radius(lat, lon, center_lat, center_lon, radius_m):
    distance = haversine(lat, lon, center_lat, center_lon)
    return distance <= radius_m, distance
