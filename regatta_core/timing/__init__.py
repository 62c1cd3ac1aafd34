"""
Timing Module: Race start countdown, stopwatch and cueing.

Key classes:
- RaceTimer: Countdown/stopwatch state machine with speech and tone cues
- Scheduler: Repeating-callback interface with cancellation handles
- ThreadingScheduler / ManualScheduler: wall-clock and virtual-clock schedulers
"""

from .scheduler import (
    Scheduler,
    CancelHandle,
    ThreadingScheduler,
    ManualScheduler,
)
from .announcements import (
    announcement_for,
    speech_rate_for,
    FINAL_ANNOUNCEMENT,
)
from .cues import (
    ToneCue,
    Tone,
    TONE_CUES,
)
from .formatting import (
    format_countdown,
    format_stopwatch,
    display_time,
)
from .race_timer import (
    RaceTimer,
    TimerConfig,
)

__all__ = [
    # Scheduling
    'Scheduler',
    'CancelHandle',
    'ThreadingScheduler',
    'ManualScheduler',
    # Announcements and cues
    'announcement_for',
    'speech_rate_for',
    'FINAL_ANNOUNCEMENT',
    'ToneCue',
    'Tone',
    'TONE_CUES',
    # Formatting
    'format_countdown',
    'format_stopwatch',
    'display_time',
    # Engine
    'RaceTimer',
    'TimerConfig',
]
