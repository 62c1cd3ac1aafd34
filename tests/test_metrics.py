"""
Unit tests for metrics module.

Tests cover:
- Counter increment (single-threaded and multi-threaded)
- Drop reason tracking
- Histogram recording and statistics
- Snapshot and reset functionality
- Global singleton
"""

import logging
import threading
import time

import pytest

from regatta_core.metrics import MetricsCollector, get_metrics, reset_metrics
from regatta_core.metrics.counters import CounterSnapshot


class TestMetricsCollectorBasic:
    """Tests for basic metrics collector functionality."""

    def test_initialization(self):
        """Test that metrics collector initializes correctly."""
        collector = MetricsCollector()

        # Standard counters should be initialized to 0
        assert collector.get_counter('countdown_ticks') == 0
        assert collector.get_counter('gps_samples') == 0

        # Unknown counter should return 0
        assert collector.get_counter('unknown_counter') == 0

    def test_increment_counter(self):
        """Test incrementing a counter."""
        collector = MetricsCollector()

        collector.increment('announcements')
        assert collector.get_counter('announcements') == 1

        collector.increment('announcements', 5)
        assert collector.get_counter('announcements') == 6

    def test_increment_drop_with_valid_reason(self):
        """Test incrementing drop counter with valid reason."""
        collector = MetricsCollector()

        collector.increment_drop('speech_failed')
        assert collector.get_counter('events_dropped') == 1
        assert collector.get_drop_count('speech_failed') == 1

        snapshot = collector.snapshot()
        assert snapshot.drop_reasons['speech_failed'] == 1

    def test_increment_drop_unknown_reason(self, caplog):
        """Test incrementing drop counter with unknown reason logs warning."""
        collector = MetricsCollector()

        with caplog.at_level(logging.WARNING):
            collector.increment_drop('unknown_reason')

        assert 'unknown_reason' in caplog.text

        # Should still be counted
        assert collector.get_counter('events_dropped') == 1
        assert collector.get_drop_count('unknown_reason') == 1

    def test_multiple_drop_reasons(self):
        """Test tracking multiple drop reasons."""
        collector = MetricsCollector()

        collector.increment_drop('malformed_sample', 3)
        collector.increment_drop('tone_failed', 5)
        collector.increment_drop('no_gps_fix', 2)

        snapshot = collector.snapshot()

        assert snapshot.drop_reasons['malformed_sample'] == 3
        assert snapshot.drop_reasons['tone_failed'] == 5
        assert snapshot.drop_reasons['no_gps_fix'] == 2
        assert snapshot.total_dropped() == 10


class TestHistograms:
    """Tests for histogram functionality."""

    def test_record_histogram(self):
        """Test recording values in histogram."""
        collector = MetricsCollector()

        collector.record_histogram('gps_accuracy_m', 1.23)
        collector.record_histogram('gps_accuracy_m', 2.45)
        collector.record_histogram('gps_accuracy_m', 1.80)

        stats = collector.get_histogram_stats('gps_accuracy_m')

        assert stats is not None
        assert stats['count'] == 3
        assert abs(stats['mean'] - 1.826) < 0.01
        assert stats['min'] == 1.23
        assert stats['max'] == 2.45

    def test_histogram_empty(self):
        """Test getting stats for empty histogram."""
        collector = MetricsCollector()

        assert collector.get_histogram_stats('nonexistent') is None

    def test_histogram_percentiles(self):
        """Test histogram percentile calculations."""
        collector = MetricsCollector()

        for i in range(100):
            collector.record_histogram('test', float(i))

        stats = collector.get_histogram_stats('test')

        assert stats['count'] == 100
        assert stats['min'] == 0.0
        assert stats['max'] == 99.0
        assert 49 < stats['median'] < 51
        assert 94 < stats['p95'] < 96

    def test_histogram_max_samples_bounded(self):
        """Test that histograms are bounded to prevent memory growth."""
        collector = MetricsCollector()

        for i in range(15000):
            collector.record_histogram('test', float(i), max_samples=1000)

        snapshot = collector.snapshot()

        assert len(snapshot.histograms['test']) <= 1000


class TestSnapshot:
    """Tests for snapshot functionality."""

    def test_snapshot_creates_copy(self):
        """Test that snapshot creates independent copy."""
        collector = MetricsCollector()

        collector.increment('gps_samples', 10)
        snapshot1 = collector.snapshot()

        collector.increment('gps_samples', 5)
        snapshot2 = collector.snapshot()

        assert isinstance(snapshot1, CounterSnapshot)
        assert snapshot1.counters['gps_samples'] == 10
        assert snapshot2.counters['gps_samples'] == 15

    def test_snapshot_timestamp(self):
        """Test snapshot includes timestamp."""
        collector = MetricsCollector()

        before = time.time()
        snapshot = collector.snapshot()
        after = time.time()

        assert before <= snapshot.timestamp <= after

    def test_snapshot_total_dropped(self):
        """Test snapshot sums drops across reasons."""
        collector = MetricsCollector()

        collector.increment_drop('malformed_sample', 5)
        collector.increment_drop('no_gps_fix', 3)

        assert collector.snapshot().total_dropped() == 8


class TestReset:
    """Tests for reset functionality."""

    def test_reset_clears_counters(self):
        """Test that reset clears all counters."""
        collector = MetricsCollector()

        collector.increment('gps_samples', 100)
        collector.increment_drop('speech_failed', 5)
        collector.record_histogram('gps_accuracy_m', 1.23)

        collector.reset()

        assert collector.get_counter('gps_samples') == 0
        assert collector.get_counter('events_dropped') == 0

        snapshot = collector.snapshot()
        assert snapshot.total_dropped() == 0
        assert not snapshot.histograms

    def test_reset_reinitializes_standard_counters(self):
        """Test that reset reinitializes standard counters to 0."""
        collector = MetricsCollector()

        collector.increment('countdown_ticks', 100)
        collector.reset()

        snapshot = collector.snapshot()
        assert snapshot.counters['countdown_ticks'] == 0
        assert snapshot.drop_reasons['speech_failed'] == 0


class TestThreadSafety:
    """Tests for thread-safe operations."""

    def test_concurrent_increment(self):
        """Test that concurrent increments are thread-safe."""
        collector = MetricsCollector()
        num_threads = 10
        increments_per_thread = 1000

        def worker():
            for _ in range(increments_per_thread):
                collector.increment('gps_samples')

        threads = [threading.Thread(target=worker) for _ in range(num_threads)]

        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert collector.get_counter('gps_samples') == num_threads * increments_per_thread

    def test_concurrent_drop_reasons(self):
        """Test that concurrent drop reason increments are thread-safe."""
        collector = MetricsCollector()
        num_threads = 5
        increments_per_thread = 200

        def worker(reason: str):
            for _ in range(increments_per_thread):
                collector.increment_drop(reason)

        threads = [
            threading.Thread(target=worker, args=(reason,))
            for reason in ['speech_failed', 'tone_failed', 'malformed_sample']
            for _ in range(num_threads)
        ]

        for t in threads:
            t.start()
        for t in threads:
            t.join()

        expected = num_threads * increments_per_thread
        snapshot = collector.snapshot()
        assert snapshot.drop_reasons['speech_failed'] == expected
        assert snapshot.drop_reasons['tone_failed'] == expected
        assert snapshot.drop_reasons['malformed_sample'] == expected


class TestGlobalSingleton:
    """Tests for global metrics singleton."""

    def test_get_metrics_returns_same_instance(self):
        """Test that get_metrics() returns the same instance."""
        assert get_metrics() is get_metrics()

    def test_reset_metrics_creates_new_instance(self):
        """Test that reset_metrics() creates fresh instance."""
        metrics1 = get_metrics()
        metrics1.increment('test_counter', 100)

        reset_metrics()

        metrics2 = get_metrics()
        assert metrics2 is not metrics1
        assert metrics2.get_counter('test_counter') == 0


class TestDropReasonCodes:
    """Tests for standard drop reason codes."""

    def test_all_standard_drop_reasons_defined(self):
        """Test that all standard drop reasons are defined."""
        expected_reasons = [
            'speech_failed',
            'tone_failed',
            'no_gps_fix',
            'no_leeward_mark',
            'invalid_mark_input',
            'malformed_sample',
        ]

        for reason in expected_reasons:
            assert reason in MetricsCollector.DROP_REASONS

    def test_drop_reasons_initialized_to_zero(self):
        """Test that all drop reasons are initialized to 0."""
        collector = MetricsCollector()
        snapshot = collector.snapshot()

        for reason in collector.DROP_REASONS:
            assert snapshot.drop_reasons[reason] == 0


class TestUptime:
    """Tests for uptime tracking."""

    def test_uptime_increases(self):
        """Test that uptime increases over time."""
        collector = MetricsCollector()

        uptime1 = collector.get_uptime()
        time.sleep(0.05)
        uptime2 = collector.get_uptime()

        assert uptime2 > uptime1


class TestPrintSummary:
    """Tests for print_summary functionality."""

    def test_print_summary_no_crash(self, capsys):
        """Test that print_summary prints counters, drops and histograms."""
        collector = MetricsCollector()

        collector.increment('countdown_ticks', 100)
        collector.increment_drop('tone_failed', 5)
        collector.record_histogram('gps_accuracy_m', 1.23)

        collector.print_summary()

        captured = capsys.readouterr()
        assert 'METRICS SUMMARY' in captured.out
        assert 'countdown_ticks' in captured.out
        assert 'tone_failed' in captured.out
        assert 'gps_accuracy_m' in captured.out
