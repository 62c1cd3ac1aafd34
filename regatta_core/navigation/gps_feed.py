"""
GPS feed: the core's single point of contact with a GPS collaborator.

A collaborator (phone geolocation bridge, network receiver, simulator)
implements GPSSource: subscribe(callback, error_callback) / unsubscribe().
GPSFeed keeps only the most recent sample and the most recent error, and
forwards every sample to the VMG calculator. No history is retained.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional

from regatta_core.proto import GPSSample, GPSError, GPSErrorCode
from regatta_core.metrics import get_metrics
from regatta_core.timing.scheduler import Scheduler, CancelHandle
from .geodesy import (
    destination_point,
    meters_per_second_to_knots,
    meters_per_second_to_kmh,
    compass_direction,
)
from .vmg_calculator import VMGCalculator

logger = logging.getLogger(__name__)

SampleCallback = Callable[[GPSSample], None]
ErrorCallback = Callable[[GPSError], None]


class GPSSource(ABC):
    """GPS collaborator interface."""

    @abstractmethod
    def subscribe(self, callback: SampleCallback, error_callback: Optional[ErrorCallback] = None):
        """Start delivering samples (and errors) at the source's own cadence."""

    @abstractmethod
    def unsubscribe(self):
        """Stop delivering. Safe to call when not subscribed."""


@dataclass(frozen=True)
class GPSDisplay:
    """
    Display projection of the GPS feed.

    Attributes:
        has_fix: A sample has been received
        latitude, longitude: Position of the latest fix
        speed_knots, speed_kmh: None when speed is not reported
        heading: None when heading is not reported
        compass: 16-point label, 'N/A' without heading
        accuracy: Horizontal accuracy (m)
        error_message: Latest error text, None after a good sample
    """

    has_fix: bool
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    speed_knots: Optional[float] = None
    speed_kmh: Optional[float] = None
    heading: Optional[float] = None
    compass: str = 'N/A'
    accuracy: Optional[float] = None
    error_message: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'has_fix': self.has_fix,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'speed_knots': self.speed_knots,
            'speed_kmh': self.speed_kmh,
            'heading': self.heading,
            'compass': self.compass,
            'accuracy': self.accuracy,
            'error_message': self.error_message,
        }


class GPSFeed:
    """
    Latest-sample holder between a GPS collaborator and the VMG calculator.

    Usage:
        feed = GPSFeed(source, calculator)
        feed.start()
        ...
        print(feed.display().speed_knots)
        feed.stop()
    """

    def __init__(self, source: GPSSource, calculator: Optional[VMGCalculator] = None):
        self.source = source
        self.calculator = calculator
        self.metrics = get_metrics()

        self._lock = threading.Lock()
        self._sample: Optional[GPSSample] = None
        self._error: Optional[GPSError] = None
        self._listeners: List[Callable[['GPSFeed'], None]] = []
        self._subscribed = False

    def start(self):
        """Subscribe to the collaborator."""
        if self._subscribed:
            return
        self.source.subscribe(self.handle_sample, self.handle_error)
        self._subscribed = True
        logger.info(f"GPS feed started ({type(self.source).__name__})")

    def stop(self):
        """Unsubscribe from the collaborator."""
        if not self._subscribed:
            return
        self.source.unsubscribe()
        self._subscribed = False
        logger.info("GPS feed stopped")

    @property
    def latest_sample(self) -> Optional[GPSSample]:
        with self._lock:
            return self._sample

    @property
    def error(self) -> Optional[GPSError]:
        with self._lock:
            return self._error

    def subscribe(self, listener: Callable[['GPSFeed'], None]) -> Callable[[], None]:
        """Register a listener called after every sample or error."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def handle_sample(self, sample: GPSSample):
        """Collaborator callback: new fix."""
        with self._lock:
            self._sample = sample
            self._error = None

        self.metrics.increment('gps_samples')
        self.metrics.record_histogram('gps_accuracy_m', sample.accuracy)

        if self.calculator is not None:
            self.calculator.update_position(sample)
        self._notify()

    def handle_error(self, error: GPSError):
        """Collaborator callback: no fix available. The last sample is kept."""
        with self._lock:
            self._error = error

        self.metrics.increment('gps_errors')
        logger.warning(f"GPS error {error.code.name}: {error.message}")
        self._notify()

    def display(self) -> GPSDisplay:
        """Snapshot for the speed/heading screen."""
        with self._lock:
            sample = self._sample
            error = self._error

        error_message = error.message if error is not None else None
        if sample is None:
            return GPSDisplay(has_fix=False, error_message=error_message)

        speed_knots = None
        speed_kmh = None
        if sample.speed is not None:
            speed_knots = meters_per_second_to_knots(sample.speed)
            speed_kmh = meters_per_second_to_kmh(sample.speed)

        return GPSDisplay(
            has_fix=True,
            latitude=sample.latitude,
            longitude=sample.longitude,
            speed_knots=speed_knots,
            speed_kmh=speed_kmh,
            heading=sample.heading,
            compass=compass_direction(sample.heading),
            accuracy=sample.accuracy,
            error_message=error_message,
        )

    def _notify(self):
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(self)
            except Exception:
                logger.exception("GPS feed listener raised")
                self.metrics.increment_drop('listener_failed')


class SimulatedGPSSource(GPSSource):
    """
    Virtual boat sailing a straight course from a base position.

    Used on the bench and in tests when no receiver is attached. Speed and
    heading can be withheld to exercise the fallback path.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        base_lat: float,
        base_lon: float,
        speed_mps: float = 2.5,
        heading: float = 45.0,
        accuracy: float = 5.0,
        period_ms: int = 1000,
        report_speed: bool = True,
        report_heading: bool = True,
    ):
        self.scheduler = scheduler
        self.latitude = base_lat
        self.longitude = base_lon
        self.speed_mps = speed_mps
        self.heading = heading
        self.accuracy = accuracy
        self.period_ms = period_ms
        self.report_speed = report_speed
        self.report_heading = report_heading

        self._handle: Optional[CancelHandle] = None
        self._callback: Optional[SampleCallback] = None
        self._error_callback: Optional[ErrorCallback] = None

    def subscribe(self, callback: SampleCallback, error_callback: Optional[ErrorCallback] = None):
        self.unsubscribe()
        self._callback = callback
        self._error_callback = error_callback
        self._handle = self.scheduler.schedule_repeating(self.period_ms, self._step)
        logger.info(f"Simulated GPS at {self.latitude:.5f}, {self.longitude:.5f}, "
                    f"{meters_per_second_to_knots(self.speed_mps):.1f} kn @ {self.heading:.0f} deg")

    def unsubscribe(self):
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._callback = None
        self._error_callback = None

    def fail(self, code: GPSErrorCode):
        """Report an error to the subscriber (permission revoked, signal lost...)."""
        if self._error_callback is not None:
            self._error_callback(GPSError.from_code(code))

    def _step(self):
        distance_km = self.speed_mps * self.period_ms / 1000.0 / 1000.0
        self.latitude, self.longitude = destination_point(
            self.latitude, self.longitude, self.heading, distance_km
        )

        callback = self._callback
        if callback is None:
            return
        callback(GPSSample(
            latitude=self.latitude,
            longitude=self.longitude,
            accuracy=self.accuracy,
            speed=self.speed_mps if self.report_speed else None,
            heading=self.heading if self.report_heading else None,
        ))
