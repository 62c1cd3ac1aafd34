"""
VMG Calculator.

Holds the current GPS sample and up to two course marks (leeward, windward)
and recomputes velocity made good towards each mark whenever any of them
changes. There is no scheduling here: every mutation ends with an explicit
recompute() and listeners receive the new result.

Effective inputs:
- speed: GPS speed converted to knots, else the fallback speed (5 kn)
- heading: GPS heading, else the device heading when enabled, else the
  fallback heading (45 deg)
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from regatta_core.proto import (
    GPSSample,
    Waypoint,
    MarkKind,
    VMGResult,
    Leg,
    create_no_vmg_result,
)
from regatta_core.metrics import get_metrics
from .geodesy import (
    haversine_distance_km,
    bearing_degrees,
    vmg,
    destination_point,
    meters_per_second_to_knots,
    nautical_miles_to_km,
)

logger = logging.getLogger(__name__)

Listener = Callable[[Optional[VMGResult]], None]


@dataclass
class VMGConfig:
    """
    Configuration for the VMG calculator.

    Attributes:
        fallback_speed_knots: Speed used when the GPS reports none
        fallback_heading_degrees: Heading used when neither GPS nor device has one
        default_windward_distance_nm: Suggested windward leg length for the UI
        default_windward_heading_degrees: Suggested windward bearing for the UI
    """

    fallback_speed_knots: float = 5.0
    fallback_heading_degrees: float = 45.0
    default_windward_distance_nm: float = 1.0
    default_windward_heading_degrees: float = 0.0


def _parse_number(value: Any) -> Optional[float]:
    """float(value) for finite numbers and numeric strings, else None."""
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


class VMGCalculator:
    """
    Velocity-made-good engine with a leeward/windward mark model.

    Usage:
        calc = VMGCalculator()
        calc.update_position(sample)           # from the GPS feed
        calc.set_leeward_mark()                # mark at current fix
        calc.set_windward_mark(1.0, 0)         # 1 nm due north of leeward
        print(calc.vmg_data.active_vmg)
    """

    def __init__(self, config: Optional[VMGConfig] = None, clock: Callable[[], float] = time.time):
        """
        Initialize VMG calculator.

        Args:
            config: Calculator configuration (uses defaults if None)
            clock: Time source for mark timestamps
        """
        self.config = config or VMGConfig()
        self.clock = clock
        self.metrics = get_metrics()

        self._lock = threading.RLock()
        self._sample: Optional[GPSSample] = None
        self._leeward: Optional[Waypoint] = None
        self._windward: Optional[Waypoint] = None
        self._result: Optional[VMGResult] = None
        self._device_heading: Optional[float] = None
        self._use_device_heading = False
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Read-only projection
    # ------------------------------------------------------------------

    @property
    def current_sample(self) -> Optional[GPSSample]:
        with self._lock:
            return self._sample

    @property
    def leeward_mark(self) -> Optional[Waypoint]:
        with self._lock:
            return self._leeward

    @property
    def windward_mark(self) -> Optional[Waypoint]:
        with self._lock:
            return self._windward

    @property
    def result(self) -> Optional[VMGResult]:
        """Latest result, None when there is no fix or no mark."""
        with self._lock:
            return self._result

    @property
    def vmg_data(self) -> VMGResult:
        """Latest result, or the zero placeholder with no current leg."""
        result = self.result
        return result if result is not None else create_no_vmg_result()

    @property
    def device_heading(self) -> Optional[float]:
        with self._lock:
            return self._device_heading

    @property
    def use_device_heading(self) -> bool:
        with self._lock:
            return self._use_device_heading

    @use_device_heading.setter
    def use_device_heading(self, enabled: bool):
        with self._lock:
            self._use_device_heading = bool(enabled)
            self.recompute()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with every recomputed result.

        Returns:
            Function that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def update_position(self, sample: Optional[GPSSample]) -> Optional[VMGResult]:
        """Replace the current GPS sample and recompute."""
        with self._lock:
            self._sample = sample
            return self.recompute()

    def set_device_heading(self, heading: Optional[float]) -> Optional[VMGResult]:
        """Update the compass heading reported by the device itself."""
        with self._lock:
            self._device_heading = _parse_number(heading)
            return self.recompute()

    # ------------------------------------------------------------------
    # Marks
    # ------------------------------------------------------------------

    def set_leeward_mark(self) -> Optional[Waypoint]:
        """
        Drop the leeward mark at the current GPS fix.

        Returns:
            The new mark, or None when there is no fix
        """
        with self._lock:
            if self._sample is None:
                logger.info("No current position available for leeward mark")
                self.metrics.increment_drop('no_gps_fix')
                return None

            mark = Waypoint(
                latitude=self._sample.latitude,
                longitude=self._sample.longitude,
                kind=MarkKind.LEEWARD,
                timestamp=self.clock(),
            )
            self._leeward = mark
            self.metrics.increment('marks_set')
            logger.info(f"Leeward mark set: {mark.latitude:.6f}, {mark.longitude:.6f}")
            self.recompute()
            return mark

    def set_windward_mark(self, distance_nm: Any, heading_degrees: Any) -> Optional[Waypoint]:
        """
        Place the windward mark relative to the leeward mark.

        Args:
            distance_nm: Leg length in nautical miles (number or numeric string)
            heading_degrees: Bearing from leeward to windward (number or numeric
                string). Replaced by the device heading when that is enabled.

        Returns:
            The new mark, or None when there is no leeward mark or the input
            is not numeric
        """
        with self._lock:
            if self._leeward is None:
                logger.info("Windward mark needs a leeward mark first")
                self.metrics.increment_drop('no_leeward_mark')
                return None

            distance = _parse_number(distance_nm)
            if self._use_device_heading and self._device_heading is not None:
                heading = self._device_heading
            else:
                heading = _parse_number(heading_degrees)

            if distance is None or heading is None:
                logger.info(f"Invalid windward input: distance={distance_nm!r}, "
                            f"heading={heading_degrees!r}")
                self.metrics.increment_drop('invalid_mark_input')
                return None

            lat, lon = destination_point(
                self._leeward.latitude,
                self._leeward.longitude,
                heading,
                nautical_miles_to_km(distance),
            )
            mark = Waypoint(latitude=lat, longitude=lon, kind=MarkKind.WINDWARD,
                            timestamp=self.clock())
            self._windward = mark
            self.metrics.increment('marks_set')
            logger.info(f"Windward mark set {distance:.1f} nm at {heading:.0f} deg "
                        f"from leeward: {lat:.6f}, {lon:.6f}")
            self.recompute()
            return mark

    def reset_leeward_mark(self):
        with self._lock:
            self._leeward = None
            logger.info("Leeward mark reset")
            self.recompute()

    def reset_windward_mark(self):
        with self._lock:
            self._windward = None
            logger.info("Windward mark reset")
            self.recompute()

    def reset_marks(self):
        """Clear both marks and the derived result."""
        with self._lock:
            self._leeward = None
            self._windward = None
            logger.info("All marks reset")
            self.recompute()

    # ------------------------------------------------------------------
    # Computation
    # ------------------------------------------------------------------

    def effective_speed_knots(self) -> float:
        with self._lock:
            if self._sample is not None and self._sample.speed is not None:
                return meters_per_second_to_knots(self._sample.speed)
            return self.config.fallback_speed_knots

    def effective_heading(self) -> float:
        with self._lock:
            if self._sample is not None and self._sample.heading is not None:
                return self._sample.heading
            if self._use_device_heading and self._device_heading is not None:
                return self._device_heading
            return self.config.fallback_heading_degrees

    def recompute(self) -> Optional[VMGResult]:
        """
        Recompute VMG from the current sample and marks and notify listeners.

        Returns:
            New result, or None when there is no fix or no mark
        """
        with self._lock:
            self._result = self._compute()
            self.metrics.increment('vmg_recomputes')
            result = self._result

            for listener in list(self._listeners):
                try:
                    listener(result)
                except Exception:
                    logger.exception("VMG listener raised")
                    self.metrics.increment_drop('listener_failed')

            return result

    def _compute(self) -> Optional[VMGResult]:
        sample = self._sample
        if sample is None or (self._leeward is None and self._windward is None):
            return None

        speed = self.effective_speed_knots()
        heading = self.effective_heading()

        vmg_to_windward = 0.0
        vmg_to_leeward = 0.0
        distance_to_windward = 0.0
        distance_to_leeward = 0.0
        bearing_to_windward = None
        bearing_to_leeward = None

        if self._windward is not None:
            bearing_to_windward = bearing_degrees(
                sample.latitude, sample.longitude,
                self._windward.latitude, self._windward.longitude,
            )
            vmg_to_windward = vmg(speed, heading, bearing_to_windward)
            distance_to_windward = haversine_distance_km(
                sample.latitude, sample.longitude,
                self._windward.latitude, self._windward.longitude,
            )

        if self._leeward is not None:
            bearing_to_leeward = bearing_degrees(
                sample.latitude, sample.longitude,
                self._leeward.latitude, self._leeward.longitude,
            )
            vmg_to_leeward = vmg(speed, heading, bearing_to_leeward)
            distance_to_leeward = haversine_distance_km(
                sample.latitude, sample.longitude,
                self._leeward.latitude, self._leeward.longitude,
            )

        # Closer mark is the one being sailed to; ties go leeward
        if self._windward is not None and self._leeward is not None:
            current_leg = Leg.WINDWARD if distance_to_windward < distance_to_leeward else Leg.LEEWARD
        elif self._windward is not None:
            current_leg = Leg.WINDWARD
        else:
            current_leg = Leg.LEEWARD

        return VMGResult(
            vmg_to_windward=vmg_to_windward,
            vmg_to_leeward=vmg_to_leeward,
            current_leg=current_leg,
            current_speed_knots=speed,
            current_heading_degrees=heading,
            distance_to_windward_km=distance_to_windward,
            distance_to_leeward_km=distance_to_leeward,
            bearing_to_windward=bearing_to_windward,
            bearing_to_leeward=bearing_to_leeward,
        )
