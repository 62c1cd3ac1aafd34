"""
VMG Result Schema.

Derived output of the VMG calculator, recomputed whenever the GPS sample or
a course mark changes. Never persisted.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

KM_TO_NM = 0.539957


class Leg(Enum):
    """Leg of the course the boat is sailing."""
    WINDWARD = 'windward'
    LEEWARD = 'leeward'


@dataclass(frozen=True)
class VMGResult:
    """
    Velocity made good towards the course marks.
    
    Attributes:
        vmg_to_windward: VMG towards windward mark (knots, negative = moving away)
        vmg_to_leeward: VMG towards leeward mark (knots, negative = moving away)
        current_leg: Leg in progress, None when no mark is set
        current_speed_knots: Effective boat speed used (GPS or fallback)
        current_heading_degrees: Effective heading used (GPS, device or fallback)
        distance_to_windward_km: 0.0 when the windward mark is unset
        distance_to_leeward_km: 0.0 when the leeward mark is unset
        bearing_to_windward: Initial bearing to windward mark, None when unset
        bearing_to_leeward: Initial bearing to leeward mark, None when unset
    """
    
    vmg_to_windward: float
    vmg_to_leeward: float
    current_leg: Optional[Leg]
    current_speed_knots: float
    current_heading_degrees: float
    distance_to_windward_km: float = 0.0
    distance_to_leeward_km: float = 0.0
    bearing_to_windward: Optional[float] = None
    bearing_to_leeward: Optional[float] = None
    
    @property
    def active_vmg(self) -> float:
        """VMG for the current leg (0.0 when no leg)."""
        if self.current_leg is Leg.WINDWARD:
            return self.vmg_to_windward
        if self.current_leg is Leg.LEEWARD:
            return self.vmg_to_leeward
        return 0.0
    
    @property
    def distance_to_windward_nm(self) -> float:
        return self.distance_to_windward_km * KM_TO_NM
    
    @property
    def distance_to_leeward_nm(self) -> float:
        return self.distance_to_leeward_km * KM_TO_NM
    
    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'vmg_to_windward': self.vmg_to_windward,
            'vmg_to_leeward': self.vmg_to_leeward,
            'current_leg': self.current_leg.value if self.current_leg else None,
            'current_speed_knots': self.current_speed_knots,
            'current_heading_degrees': self.current_heading_degrees,
            'distance_to_windward_km': self.distance_to_windward_km,
            'distance_to_leeward_km': self.distance_to_leeward_km,
            'bearing_to_windward': self.bearing_to_windward,
            'bearing_to_leeward': self.bearing_to_leeward,
        }


def create_no_vmg_result() -> VMGResult:
    """
    Create placeholder VMG result when nothing can be computed.
    
    Returns:
        VMGResult with zero values and no current leg
    """
    return VMGResult(
        vmg_to_windward=0.0,
        vmg_to_leeward=0.0,
        current_leg=None,
        current_speed_knots=0.0,
        current_heading_degrees=0.0,
    )
