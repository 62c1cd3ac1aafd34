"""
Metrics Module: Diagnostics, counters, histograms.

Every dropped input or failed side effect is counted with a reason code so
that nothing fails silently:
- Counters: countdown_ticks, announcements, gps_samples, etc.
- Drop reasons: speech_failed, tone_failed, no_gps_fix, ...
- Histograms: gps_accuracy_m

Usage:
    from regatta_core.metrics import get_metrics

    metrics = get_metrics()
    metrics.increment('countdown_ticks')
    metrics.increment_drop('speech_failed')
    metrics.record_histogram('gps_accuracy_m', 4.2)
"""

from .counters import MetricsCollector

# Global singleton for easy access
_global_metrics = None


def get_metrics() -> MetricsCollector:
    """
    Get the global metrics collector singleton.
    
    Returns:
        MetricsCollector instance
    """
    global _global_metrics
    if _global_metrics is None:
        _global_metrics = MetricsCollector()
    return _global_metrics


def reset_metrics():
    """Reset global metrics (for testing)."""
    global _global_metrics
    _global_metrics = MetricsCollector()


__all__ = ['MetricsCollector', 'get_metrics', 'reset_metrics']
