"""
Navigation Module: Geodesy, VMG and GPS intake.

Key classes:
- VMGCalculator: Leeward/windward mark model and VMG recomputation
- GPSFeed: Latest-sample holder wired to a GPS collaborator
- SimulatedGPSSource: Virtual boat for bench use
"""

from .geodesy import (
    haversine_distance_km,
    bearing_degrees,
    angular_difference,
    vmg,
    destination_point,
    meters_per_second_to_knots,
    meters_per_second_to_kmh,
    nautical_miles_to_km,
    km_to_nautical_miles,
    compass_direction,
    COMPASS_POINTS,
    EARTH_RADIUS_KM,
)
from .vmg_calculator import (
    VMGCalculator,
    VMGConfig,
)
from .gps_feed import (
    GPSSource,
    GPSFeed,
    GPSDisplay,
    SimulatedGPSSource,
)

__all__ = [
    # Geodesy
    'haversine_distance_km',
    'bearing_degrees',
    'angular_difference',
    'vmg',
    'destination_point',
    'meters_per_second_to_knots',
    'meters_per_second_to_kmh',
    'nautical_miles_to_km',
    'km_to_nautical_miles',
    'compass_direction',
    'COMPASS_POINTS',
    'EARTH_RADIUS_KM',
    # VMG
    'VMGCalculator',
    'VMGConfig',
    # GPS
    'GPSSource',
    'GPSFeed',
    'GPSDisplay',
    'SimulatedGPSSource',
]
