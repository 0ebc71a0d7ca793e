"""Great-circle distance and the classroom admission radius"""
import math
from typing import Tuple

# Mean equatorial radius, as used by most web geolocation libraries
EARTH_RADIUS_METERS = 6378137.0
DEFAULT_RADIUS_METERS = 50.0

Coordinates = Tuple[float, float]


def distance_meters(a: Coordinates, b: Coordinates) -> int:
    """Haversine distance between two (lat, lon) pairs, rounded to whole metres"""
    lat1, lon1 = (math.radians(float(v)) for v in a)
    lat2, lon2 = (math.radians(float(v)) for v in b)

    delta_lat = lat2 - lat1
    delta_lon = lon2 - lon1

    h = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return round(EARTH_RADIUS_METERS * c)


def check_radius(
    a: Coordinates, b: Coordinates, radius_meters: float = DEFAULT_RADIUS_METERS
) -> Tuple[int, bool]:
    """(distance in whole metres, whether b is within radius_meters of a)"""
    distance = distance_meters(a, b)
    return distance, distance <= radius_meters
