"""
Pytest configuration and shared fixtures for race start timer tests.

Provides a virtual-clock scheduler, recording speech/tone fakes and
standard GPS positions so timer and VMG behavior can be tested without
wall-clock waits or audio hardware.
"""

import sys
from pathlib import Path
from typing import List, Tuple

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from regatta_core.metrics import reset_metrics, get_metrics
from regatta_core.io.audio import SpeechOutput, ToneOutput
from regatta_core.proto import GPSSample
from regatta_core.timing import ManualScheduler, RaceTimer, TimerConfig
from regatta_core.navigation import VMGCalculator


# =============================================================================
# Audio Fakes
# =============================================================================


class RecordingSpeech(SpeechOutput):
    """Speech output that records (text, rate) calls."""

    def __init__(self):
        self.calls: List[Tuple[str, float]] = []

    def speak(self, text: str, rate: float):
        self.calls.append((text, rate))

    @property
    def texts(self) -> List[str]:
        return [text for text, _ in self.calls]


class RecordingTones(ToneOutput):
    """Tone output that records (frequency, duration) calls."""

    def __init__(self):
        self.calls: List[Tuple[float, int]] = []

    def play_tone(self, frequency_hz: float, duration_ms: int):
        self.calls.append((frequency_hz, duration_ms))

    @property
    def frequencies(self) -> List[float]:
        return [freq for freq, _ in self.calls]


class FailingSpeech(SpeechOutput):
    """Speech output whose device is gone."""

    def speak(self, text: str, rate: float):
        raise OSError("audio device unavailable")


class FailingTones(ToneOutput):
    """Tone output whose device is gone."""

    def play_tone(self, frequency_hz: float, duration_ms: int):
        raise RuntimeError("no audio sink")


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_metrics():
    """Give every test its own global metrics collector."""
    reset_metrics()
    yield get_metrics()


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Virtual-clock scheduler starting at t=0."""
    return ManualScheduler()


@pytest.fixture
def speech() -> RecordingSpeech:
    return RecordingSpeech()


@pytest.fixture
def tones() -> RecordingTones:
    return RecordingTones()


@pytest.fixture
def timer(scheduler, speech, tones) -> RaceTimer:
    """RaceTimer with default config on a virtual clock."""
    return RaceTimer(scheduler, speech=speech, tones=tones)


@pytest.fixture
def make_timer(scheduler, speech, tones):
    """Factory for a RaceTimer with a custom initial countdown."""

    def _make(initial_seconds: int = 300, **kwargs) -> RaceTimer:
        config = TimerConfig(initial_seconds=initial_seconds, **kwargs)
        return RaceTimer(scheduler, speech=speech, tones=tones, config=config)

    return _make


@pytest.fixture
def origin_sample() -> GPSSample:
    """Stationary fix at (0, 0) with no speed or heading."""
    return GPSSample(latitude=0.0, longitude=0.0, accuracy=3.0, timestamp=1000.0)


@pytest.fixture
def harbour_sample() -> GPSSample:
    """Moving fix near Hong Kong: 2.5 m/s heading 30 deg."""
    return GPSSample(
        latitude=22.2900,
        longitude=114.1700,
        accuracy=4.0,
        speed=2.5,
        heading=30.0,
        timestamp=1000.0,
    )


@pytest.fixture
def calculator() -> VMGCalculator:
    """VMGCalculator with a fixed clock."""
    return VMGCalculator(clock=lambda: 1234.5)


@pytest.fixture
def failing_speech() -> FailingSpeech:
    return FailingSpeech()


@pytest.fixture
def failing_tones() -> FailingTones:
    return FailingTones()
