"""
Clock display formatting.
"""

from regatta_core.proto import TimerState


def format_countdown(seconds: int) -> str:
    """Format countdown as M:SS (minutes unpadded)."""
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"


def format_stopwatch(seconds: int) -> str:
    """Format elapsed time as H:MM:SS, or M:SS under an hour."""
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def display_time(state: TimerState) -> str:
    """Main display text: countdown while time is left, stopwatch after the start."""
    if state.time_left > 0:
        return format_countdown(state.time_left)
    return format_stopwatch(state.stopwatch_time)
