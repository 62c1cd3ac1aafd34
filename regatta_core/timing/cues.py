"""
Tone cue table: one short, distinguishable tone per timer operation.
"""

from dataclasses import dataclass
from enum import Enum


class ToneCue(Enum):
    START = 'start'
    STOP = 'stop'
    RESET = 'reset'
    ADD = 'add'
    SUBTRACT = 'subtract'
    SYNC = 'sync'


@dataclass(frozen=True)
class Tone:
    frequency_hz: float
    duration_ms: int


TONE_CUES = {
    ToneCue.START: Tone(1000, 150),
    ToneCue.STOP: Tone(600, 150),
    ToneCue.RESET: Tone(400, 200),
    ToneCue.ADD: Tone(1200, 100),
    ToneCue.SUBTRACT: Tone(800, 100),
    ToneCue.SYNC: Tone(1000, 120),
}
