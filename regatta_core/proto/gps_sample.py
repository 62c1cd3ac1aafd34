"""
GPS Sample Schema.

Position fixes delivered by a GPS collaborator, and the error type it reports
when no fix can be produced. Speed and heading are optional: many receivers
report them as null while stationary or before a course can be derived.
"""

import math
import time
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Optional


class GPSErrorCode(IntEnum):
    """Reason a GPS collaborator could not deliver a fix."""
    UNSUPPORTED = 0           # No location subsystem on this device
    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3
    UNKNOWN = 99


ERROR_MESSAGES = {
    GPSErrorCode.UNSUPPORTED: 'Geolocation is not supported by this device',
    GPSErrorCode.PERMISSION_DENIED: 'Location access denied. Please enable location services.',
    GPSErrorCode.POSITION_UNAVAILABLE: 'Location information unavailable.',
    GPSErrorCode.TIMEOUT: 'Location request timed out.',
    GPSErrorCode.UNKNOWN: 'Unknown error occurred',
}


@dataclass(frozen=True)
class GPSError:
    """Display-only GPS error state."""
    
    code: GPSErrorCode
    message: str = ''
    
    @classmethod
    def from_code(cls, code: int) -> 'GPSError':
        """Build an error with the standard message for a numeric code."""
        try:
            error_code = GPSErrorCode(code)
        except ValueError:
            error_code = GPSErrorCode.UNKNOWN
        return cls(code=error_code, message=ERROR_MESSAGES[error_code])
    
    def to_dict(self) -> dict:
        return {'code': self.code.name, 'message': self.message}


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    result = float(value)
    if not math.isfinite(result):
        return None
    return result


@dataclass(frozen=True)
class GPSSample:
    """
    Single GPS fix.
    
    Attributes:
        latitude: WGS84 latitude (degrees)
        longitude: WGS84 longitude (degrees)
        accuracy: Horizontal accuracy radius (m)
        speed: Speed over ground (m/s), None if not reported
        heading: Course over ground (degrees 0-360), None if not reported
        timestamp: Time of fix (seconds since epoch)
    """
    
    latitude: float
    longitude: float
    accuracy: float = 0.0
    speed: Optional[float] = None
    heading: Optional[float] = None
    timestamp: float = field(default_factory=time.time)
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GPSSample':
        """
        Parse a sample from a decoded JSON message.
        
        Raises:
            KeyError: latitude/longitude missing
            ValueError, TypeError: non-numeric or out-of-range fields
        """
        latitude = float(data['latitude'])
        longitude = float(data['longitude'])
        if not (-90.0 <= latitude <= 90.0) or not (-180.0 <= longitude <= 180.0):
            raise ValueError(f"Coordinates out of range: {latitude}, {longitude}")
        
        timestamp = data.get('timestamp')
        return cls(
            latitude=latitude,
            longitude=longitude,
            accuracy=float(data.get('accuracy') or 0.0),
            speed=_optional_float(data.get('speed')),
            heading=_optional_float(data.get('heading')),
            timestamp=float(timestamp) if timestamp is not None else time.time(),
        )
    
    def to_dict(self) -> dict:
        return {
            'latitude': self.latitude,
            'longitude': self.longitude,
            'accuracy': self.accuracy,
            'speed': self.speed,
            'heading': self.heading,
            'timestamp': self.timestamp,
        }
