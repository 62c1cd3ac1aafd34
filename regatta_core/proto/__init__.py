"""
Protocol Module: Value types exchanged between the engines and their readers.

All types are immutable snapshots with to_dict() for display/serialization.
"""

from .timer_state import (
    TimerState,
    TimerMode,
)
from .gps_sample import (
    GPSSample,
    GPSError,
    GPSErrorCode,
    ERROR_MESSAGES,
)
from .waypoint import (
    Waypoint,
    MarkKind,
)
from .vmg_result import (
    VMGResult,
    Leg,
    KM_TO_NM,
    create_no_vmg_result,
)

__all__ = [
    # Timer
    'TimerState',
    'TimerMode',
    # GPS
    'GPSSample',
    'GPSError',
    'GPSErrorCode',
    'ERROR_MESSAGES',
    # Marks
    'Waypoint',
    'MarkKind',
    # VMG
    'VMGResult',
    'Leg',
    'KM_TO_NM',
    'create_no_vmg_result',
]
