"""
Unit tests for the GPS feed and the simulated GPS source.

Tests cover:
- Display projection with and without speed/heading
- Error reporting keeps the last fix
- Forwarding samples to the VMG calculator
- SimulatedGPSSource motion and error injection
"""

import pytest

from regatta_core.proto import GPSSample, GPSError, GPSErrorCode, ERROR_MESSAGES, Leg
from regatta_core.navigation import (
    GPSFeed,
    GPSSource,
    GPSDisplay,
    SimulatedGPSSource,
    haversine_distance_km,
    bearing_degrees,
)


class StubSource(GPSSource):
    """Collaborator that records subscriptions."""

    def __init__(self):
        self.callback = None
        self.error_callback = None
        self.subscribe_calls = 0
        self.unsubscribe_calls = 0

    def subscribe(self, callback, error_callback=None):
        self.callback = callback
        self.error_callback = error_callback
        self.subscribe_calls += 1

    def unsubscribe(self):
        self.callback = None
        self.error_callback = None
        self.unsubscribe_calls += 1


@pytest.fixture
def source():
    return StubSource()


@pytest.fixture
def feed(source, calculator):
    feed = GPSFeed(source, calculator)
    feed.start()
    return feed


# =============================================================================
# Test Lifecycle
# =============================================================================


class TestLifecycle:

    def test_start_and_stop_idempotent(self, source):
        feed = GPSFeed(source)

        feed.start()
        feed.start()
        assert source.subscribe_calls == 1

        feed.stop()
        feed.stop()
        assert source.unsubscribe_calls == 1

    def test_stop_before_start(self, source):
        GPSFeed(source).stop()
        assert source.unsubscribe_calls == 0


# =============================================================================
# Test Display
# =============================================================================


class TestDisplay:

    def test_no_fix(self, feed):
        display = feed.display()

        assert display == GPSDisplay(has_fix=False)
        assert display.compass == 'N/A'
        assert display.error_message is None

    def test_full_fix(self, feed, source, harbour_sample):
        source.callback(harbour_sample)

        display = feed.display()

        assert display.has_fix
        assert display.latitude == 22.29
        assert display.longitude == 114.17
        assert display.speed_knots == pytest.approx(2.5 * 1.94384)
        assert display.speed_kmh == pytest.approx(9.0)
        assert display.heading == 30.0
        assert display.compass == 'NNE'
        assert display.accuracy == 4.0

    def test_fix_without_speed_or_heading(self, feed, source, origin_sample):
        source.callback(origin_sample)

        display = feed.display()

        assert display.has_fix
        assert display.speed_knots is None
        assert display.speed_kmh is None
        assert display.heading is None
        assert display.compass == 'N/A'

    def test_to_dict(self, feed, source, harbour_sample):
        source.callback(harbour_sample)

        data = feed.display().to_dict()

        assert data['has_fix'] is True
        assert data['compass'] == 'NNE'
        assert data['error_message'] is None


# =============================================================================
# Test Errors
# =============================================================================


class TestErrors:

    def test_error_before_fix(self, feed, source, fresh_metrics):
        source.error_callback(GPSError.from_code(GPSErrorCode.PERMISSION_DENIED))

        display = feed.display()

        assert not display.has_fix
        assert display.error_message == ERROR_MESSAGES[GPSErrorCode.PERMISSION_DENIED]
        assert feed.error.code == GPSErrorCode.PERMISSION_DENIED
        assert fresh_metrics.get_counter('gps_errors') == 1

    def test_error_keeps_last_fix(self, feed, source, harbour_sample):
        source.callback(harbour_sample)
        source.error_callback(GPSError.from_code(GPSErrorCode.TIMEOUT))

        display = feed.display()

        assert display.has_fix
        assert display.latitude == 22.29
        assert display.error_message == 'Location request timed out.'
        assert feed.latest_sample == harbour_sample

    def test_new_fix_clears_error(self, feed, source, harbour_sample):
        source.error_callback(GPSError.from_code(GPSErrorCode.POSITION_UNAVAILABLE))
        source.callback(harbour_sample)

        assert feed.error is None
        assert feed.display().error_message is None

    def test_unknown_code(self):
        error = GPSError.from_code(42)

        assert error.code == GPSErrorCode.UNKNOWN
        assert error.message == 'Unknown error occurred'


# =============================================================================
# Test Forwarding
# =============================================================================


class TestForwarding:

    def test_samples_reach_calculator(self, feed, source, calculator, harbour_sample):
        source.callback(harbour_sample)

        assert calculator.current_sample == harbour_sample

    def test_leg_follows_boat(self, feed, source, calculator):
        source.callback(GPSSample(latitude=0.0, longitude=0.0, speed=3.0, heading=0.0))
        calculator.set_leeward_mark()
        calculator.set_windward_mark(1.0, 0)
        assert calculator.result.current_leg == Leg.LEEWARD

        source.callback(GPSSample(latitude=0.015, longitude=0.0, speed=3.0, heading=0.0))

        assert calculator.result.current_leg == Leg.WINDWARD

    def test_only_latest_sample_kept(self, feed, source, origin_sample, harbour_sample):
        source.callback(origin_sample)
        source.callback(harbour_sample)

        assert feed.latest_sample == harbour_sample

    def test_metrics(self, feed, source, origin_sample, harbour_sample, fresh_metrics):
        source.callback(origin_sample)
        source.callback(harbour_sample)

        assert fresh_metrics.get_counter('gps_samples') == 2
        stats = fresh_metrics.get_histogram_stats('gps_accuracy_m')
        assert stats['count'] == 2
        assert stats['max'] == 4.0

    def test_listeners(self, feed, source, harbour_sample, fresh_metrics):
        seen = []
        unsubscribe = feed.subscribe(lambda f: seen.append(f.display().has_fix))

        source.error_callback(GPSError.from_code(GPSErrorCode.TIMEOUT))
        source.callback(harbour_sample)
        unsubscribe()
        source.callback(harbour_sample)

        assert seen == [False, True]

    def test_raising_listener_counted(self, feed, source, harbour_sample, fresh_metrics):
        def broken(_):
            raise RuntimeError("render failed")

        feed.subscribe(broken)
        source.callback(harbour_sample)

        assert feed.latest_sample == harbour_sample
        assert fresh_metrics.get_drop_count('listener_failed') == 1


# =============================================================================
# Test Simulated Source
# =============================================================================


class TestSimulatedGPSSource:

    def test_sails_straight_course(self, scheduler, calculator):
        simulator = SimulatedGPSSource(scheduler, 22.29, 114.17, speed_mps=5.0,
                                       heading=45.0, period_ms=1000)
        feed = GPSFeed(simulator, calculator)
        feed.start()

        scheduler.advance_seconds(10)

        sample = feed.latest_sample
        assert sample.speed == 5.0
        assert sample.heading == 45.0
        assert haversine_distance_km(22.29, 114.17, sample.latitude, sample.longitude) == \
            pytest.approx(0.05, rel=1e-4)
        assert bearing_degrees(22.29, 114.17, sample.latitude, sample.longitude) == \
            pytest.approx(45.0, abs=0.01)

    def test_withheld_speed_and_heading(self, scheduler):
        simulator = SimulatedGPSSource(scheduler, 0.0, 0.0, report_speed=False,
                                       report_heading=False)
        feed = GPSFeed(simulator)
        feed.start()

        scheduler.advance_seconds(1)

        display = feed.display()
        assert display.has_fix
        assert display.speed_knots is None
        assert display.compass == 'N/A'

    def test_fail_reports_error(self, scheduler):
        simulator = SimulatedGPSSource(scheduler, 0.0, 0.0)
        feed = GPSFeed(simulator)
        feed.start()

        simulator.fail(GPSErrorCode.POSITION_UNAVAILABLE)

        assert feed.display().error_message == 'Location information unavailable.'

    def test_stop_cancels_ticks(self, scheduler):
        simulator = SimulatedGPSSource(scheduler, 0.0, 0.0)
        feed = GPSFeed(simulator)
        feed.start()
        scheduler.advance_seconds(2)
        last = feed.latest_sample

        feed.stop()
        scheduler.advance_seconds(5)

        assert feed.latest_sample == last
        assert scheduler.active_jobs == 0
