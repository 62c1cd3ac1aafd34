"""
Course mark schema.
"""

import time
from dataclasses import dataclass, field
from enum import Enum


class MarkKind(Enum):
    """Which course mark a waypoint represents."""
    LEEWARD = 'leeward'
    WINDWARD = 'windward'


@dataclass(frozen=True)
class Waypoint:
    """
    User-defined course mark.
    
    Attributes:
        latitude: WGS84 latitude (degrees)
        longitude: WGS84 longitude (degrees)
        kind: Leeward or windward mark
        timestamp: Creation time (seconds since epoch)
    """
    
    latitude: float
    longitude: float
    kind: MarkKind
    timestamp: float = field(default_factory=time.time)
    
    @property
    def name(self) -> str:
        return f"{self.kind.value.capitalize()} Mark"
    
    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'kind': self.kind.value,
            'timestamp': self.timestamp,
        }
