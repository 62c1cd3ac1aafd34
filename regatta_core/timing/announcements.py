"""
Voice announcement policy for the start countdown.

Precedence, evaluated top to bottom, first match wins:
    1. 0            -> final call ("SAIL FAST")
    2. 1..15        -> the number
    3. last minute  -> 20, 25, ..., 55
    4. whole minute -> "<m> minutes"
    5. quarter      -> "<m> <s>" when s in {15, 30, 45}

30 and 45 match both the last-minute and quarter rules; the last-minute rule
wins because it is checked first.
"""

from typing import Optional

FINAL_ANNOUNCEMENT = "SAIL FAST"
FAST_SPEECH_THRESHOLD = 15
NORMAL_SPEECH_RATE = 1.0
FAST_SPEECH_RATE = 1.8

LAST_MINUTE_MARKS = frozenset({20, 25, 30, 35, 40, 45, 50, 55})
QUARTER_MARKS = frozenset({15, 30, 45})


def announcement_for(seconds_left: int, final_text: str = FINAL_ANNOUNCEMENT) -> Optional[str]:
    """
    Text to speak after the countdown ticks down to seconds_left.
    
    Returns:
        Announcement text, or None if this second is silent
    """
    if seconds_left == 0:
        return final_text
    if 1 <= seconds_left <= 15:
        return str(seconds_left)
    if seconds_left < 60 and seconds_left in LAST_MINUTE_MARKS:
        return str(seconds_left)
    
    minutes, seconds = divmod(seconds_left, 60)
    if seconds == 0 and seconds_left > 0:
        return f"{minutes} minutes"
    if seconds in QUARTER_MARKS:
        return f"{minutes} {seconds}"
    return None


def speech_rate_for(
    seconds_left: int,
    threshold: int = FAST_SPEECH_THRESHOLD,
    normal_rate: float = NORMAL_SPEECH_RATE,
    fast_rate: float = FAST_SPEECH_RATE,
) -> float:
    """Speech rate for an announcement; faster near the gun so calls do not overlap."""
    return fast_rate if seconds_left <= threshold else normal_rate
