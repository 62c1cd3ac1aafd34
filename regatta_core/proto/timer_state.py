"""
Timer State Schema.

Immutable snapshot of the race timer published to every reader. The engine
owns the only mutable copy; readers receive a fresh TimerState after each
mutation.
"""

from dataclasses import dataclass
from enum import IntEnum


class TimerMode(IntEnum):
    """Which clock currently drives the timer."""
    IDLE = 0            # Neither clock running (fresh or paused)
    COUNTING_DOWN = 1   # Countdown to the start gun
    ELAPSED = 2         # Start passed, stopwatch counting up


@dataclass(frozen=True)
class TimerState:
    """
    Race timer state.
    
    Attributes:
        time_left: Countdown seconds remaining [0, max]
        is_running: Countdown active
        stopwatch_time: Seconds since the start (counts up once countdown hits 0)
        is_stopwatch_running: Stopwatch active
        
    Notes:
        - is_running and is_stopwatch_running are never both True
        - Displayed seconds come from the countdown while time_left > 0,
          from the stopwatch otherwise
    """
    
    time_left: int = 300
    is_running: bool = False
    stopwatch_time: int = 0
    is_stopwatch_running: bool = False
    
    @property
    def mode(self) -> TimerMode:
        """Current mode derived from the running flags."""
        if self.is_running:
            return TimerMode.COUNTING_DOWN
        if self.is_stopwatch_running:
            return TimerMode.ELAPSED
        return TimerMode.IDLE
    
    @property
    def is_active(self) -> bool:
        """True if either clock is running."""
        return self.is_running or self.is_stopwatch_running
    
    @property
    def display_seconds(self) -> int:
        """Seconds shown on the main display."""
        return self.time_left if self.time_left > 0 else self.stopwatch_time
    
    @property
    def is_final_countdown(self) -> bool:
        """True during the last ten seconds of a running countdown."""
        return self.is_running and 0 < self.time_left <= 10
    
    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'time_left': self.time_left,
            'is_running': self.is_running,
            'stopwatch_time': self.stopwatch_time,
            'is_stopwatch_running': self.is_stopwatch_running,
            'mode': self.mode.name,
        }
