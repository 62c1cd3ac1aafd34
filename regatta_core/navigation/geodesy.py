"""
Spherical-earth geodesy and unit conversions for VMG.

All angles in degrees, distances in kilometres unless the name says
otherwise. Earth is a sphere of radius 6371 km; over course lengths of a few
nautical miles the error against WGS84 is negligible for VMG.
"""

import math
from typing import Optional, Tuple

from regatta_core.proto import KM_TO_NM

EARTH_RADIUS_KM = 6371.0
MPS_TO_KNOTS = 1.94384
MPS_TO_KMH = 3.6
NM_TO_KM = 1.852

COMPASS_POINTS = [
    'N', 'NNE', 'NE', 'ENE', 'E', 'ESE', 'SE', 'SSE',
    'S', 'SSW', 'SW', 'WSW', 'W', 'WNW', 'NW', 'NNW',
]


def haversine_distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two points.
    
    Args:
        lat1, lon1: First point (decimal degrees)
        lat2, lon2: Second point (decimal degrees)
    
    Returns:
        Distance in kilometres
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)
    
    a = (math.sin(delta_phi / 2) ** 2 +
         math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    
    return EARTH_RADIUS_KM * c


def bearing_degrees(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Initial bearing from point 1 to point 2.
    
    Returns:
        Bearing in [0, 360)
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_lambda = math.radians(lon2 - lon1)
    
    y = math.sin(delta_lambda) * math.cos(phi2)
    x = (math.cos(phi1) * math.sin(phi2) -
         math.sin(phi1) * math.cos(phi2) * math.cos(delta_lambda))
    
    bearing = math.degrees(math.atan2(y, x)) % 360.0
    # Tiny negative angles wrap to exactly 360.0 in float arithmetic
    return 0.0 if bearing >= 360.0 else bearing


def angular_difference(heading: float, bearing: float) -> float:
    """Smallest angle between two directions, in [0, 180] degrees."""
    diff = abs(heading - bearing) % 360.0
    return min(diff, 360.0 - diff)


def vmg(speed_knots: float, heading_degrees: float, target_bearing_degrees: float) -> float:
    """
    Velocity made good towards a target bearing.
    
    Returns:
        Component of speed towards the target (knots). Negative when
        sailing away from it.
    """
    angle = angular_difference(heading_degrees, target_bearing_degrees)
    return speed_knots * math.cos(math.radians(angle))


def destination_point(
    lat: float,
    lon: float,
    bearing: float,
    distance_km: float,
) -> Tuple[float, float]:
    """
    Project a point along a great circle.
    
    Args:
        lat, lon: Start point (decimal degrees)
        bearing: Initial bearing (degrees)
        distance_km: Distance to travel (km)
    
    Returns:
        (lat, lon) of the destination, longitude normalized to [-180, 180)
    """
    phi1 = math.radians(lat)
    lambda1 = math.radians(lon)
    theta = math.radians(bearing)
    delta = distance_km / EARTH_RADIUS_KM
    
    phi2 = math.asin(
        math.sin(phi1) * math.cos(delta) +
        math.cos(phi1) * math.sin(delta) * math.cos(theta)
    )
    lambda2 = lambda1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2)
    )
    
    lon2 = (math.degrees(lambda2) + 540.0) % 360.0 - 180.0
    return math.degrees(phi2), lon2


def meters_per_second_to_knots(speed_mps: float) -> float:
    return speed_mps * MPS_TO_KNOTS


def meters_per_second_to_kmh(speed_mps: float) -> float:
    return speed_mps * MPS_TO_KMH


def nautical_miles_to_km(nm: float) -> float:
    return nm * NM_TO_KM


def km_to_nautical_miles(km: float) -> float:
    return km * KM_TO_NM


def compass_direction(heading: Optional[float]) -> str:
    """16-point compass label for a heading, 'N/A' when unknown."""
    if heading is None:
        return 'N/A'
    index = int(math.floor(heading / 22.5 + 0.5)) % 16
    return COMPASS_POINTS[index]
