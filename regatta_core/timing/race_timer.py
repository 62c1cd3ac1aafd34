"""
Race Start Timer Engine.

Countdown to the start gun with voice announcements and tone cues, followed
by a stopwatch once the countdown reaches zero.

States:
    IDLE           not running (fresh, paused, or reset)
    COUNTING_DOWN  is_running, one tick per second decrements time_left
    ELAPSED        is_stopwatch_running, one tick per second increments stopwatch_time

The engine owns the single mutable TimerState. Readers get immutable
snapshots through `state` or a subscribed listener; the only mutation paths
are start/stop/toggle, reset, add_minute, subtract_minute and sync.
"""

import functools
import logging
import threading
from dataclasses import dataclass, replace
from typing import Callable, List, Optional

from regatta_core.proto import TimerState
from regatta_core.metrics import get_metrics
from regatta_core.io.audio import SpeechOutput, ToneOutput, LoggingSpeech, LoggingTonePlayer
from .scheduler import Scheduler, CancelHandle
from .announcements import (
    announcement_for,
    speech_rate_for,
    FINAL_ANNOUNCEMENT,
    FAST_SPEECH_THRESHOLD,
    NORMAL_SPEECH_RATE,
    FAST_SPEECH_RATE,
)
from .cues import ToneCue, TONE_CUES

logger = logging.getLogger(__name__)

Listener = Callable[[TimerState], None]


@dataclass
class TimerConfig:
    """
    Configuration for the race timer.

    Attributes:
        initial_seconds: Countdown value at startup and after reset
        max_seconds: Upper bound for add_minute and sync
        minute_step: Seconds added/removed per adjustment
        tick_period_ms: Tick cadence for both clocks
        fast_speech_threshold: At or below this many seconds speech runs fast
        normal_speech_rate: Speech rate above the threshold
        fast_speech_rate: Speech rate at or below the threshold
        final_announcement: Spoken when the countdown reaches zero
    """

    initial_seconds: int = 300
    max_seconds: int = 900
    minute_step: int = 60
    tick_period_ms: int = 1000
    fast_speech_threshold: int = FAST_SPEECH_THRESHOLD
    normal_speech_rate: float = NORMAL_SPEECH_RATE
    fast_speech_rate: float = FAST_SPEECH_RATE
    final_announcement: str = FINAL_ANNOUNCEMENT

    def __post_init__(self):
        if self.tick_period_ms <= 0:
            raise ValueError(f"tick_period_ms must be positive, got {self.tick_period_ms}")
        if self.minute_step <= 0:
            raise ValueError(f"minute_step must be positive, got {self.minute_step}")
        if not (0 <= self.initial_seconds <= self.max_seconds):
            raise ValueError(
                f"initial_seconds must be within [0, {self.max_seconds}], "
                f"got {self.initial_seconds}"
            )


class RaceTimer:
    """
    Countdown/stopwatch state machine driving speech and tone cues.

    Usage:
        timer = RaceTimer(ThreadingScheduler(), speech=CommandLineSpeech())
        timer.subscribe(lambda state: print(display_time(state)))

        timer.start()          # start cue, countdown ticking
        timer.sync()           # round up to the next whole minute
        ...
        timer.shutdown()       # cancel all pending ticks

    Speech and tone failures are logged and counted but never interrupt a
    state transition.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        speech: Optional[SpeechOutput] = None,
        tones: Optional[ToneOutput] = None,
        config: Optional[TimerConfig] = None,
    ):
        """
        Initialize race timer.

        Args:
            scheduler: Source of the 1 s repeating ticks
            speech: Speech collaborator (logs only if None)
            tones: Tone collaborator (logs only if None)
            config: Timer configuration (uses defaults if None)
        """
        self.config = config or TimerConfig()
        self.scheduler = scheduler
        self.speech = speech or LoggingSpeech()
        self.tones = tones or LoggingTonePlayer()
        self.metrics = get_metrics()

        self._lock = threading.RLock()
        self._state = TimerState(time_left=self.config.initial_seconds)
        self._listeners: List[Listener] = []

        # Each scheduled job carries the generation it was created for;
        # a tick from an older generation is ignored.
        self._countdown_handle: Optional[CancelHandle] = None
        self._countdown_generation = 0
        self._stopwatch_handle: Optional[CancelHandle] = None
        self._stopwatch_generation = 0

    # ------------------------------------------------------------------
    # Read-only projection
    # ------------------------------------------------------------------

    @property
    def state(self) -> TimerState:
        with self._lock:
            return self._state

    @property
    def time_left(self) -> int:
        return self.state.time_left

    @property
    def is_running(self) -> bool:
        return self.state.is_running

    @property
    def stopwatch_time(self) -> int:
        return self.state.stopwatch_time

    @property
    def is_stopwatch_running(self) -> bool:
        return self.state.is_stopwatch_running

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with the new TimerState after every change.

        Returns:
            Function that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """
        Start (or resume) the countdown.

        Returns:
            True if the countdown started, False if already running or at zero
        """
        with self._lock:
            state = self._state
            if state.is_running or state.time_left <= 0:
                return False

            self._play_cue(ToneCue.START)

            if state.is_stopwatch_running:
                # Time was added after the gun: this is a new start sequence
                self._cancel_stopwatch()
                state = replace(state, stopwatch_time=0, is_stopwatch_running=False)
                logger.info("Stopwatch cleared for new countdown")

            self._state = replace(state, is_running=True)
            self._schedule_countdown()
            logger.info(f"Countdown started at {self._state.time_left}s")
            self._notify()
            return True

    def stop(self) -> bool:
        """
        Pause the countdown, keeping time_left.

        Returns:
            True if a running countdown was stopped
        """
        with self._lock:
            if not self._state.is_running:
                return False

            self._play_cue(ToneCue.STOP)
            self._cancel_countdown()
            self._state = replace(self._state, is_running=False)
            logger.info(f"Countdown paused at {self._state.time_left}s")
            self._notify()
            return True

    def toggle(self) -> bool:
        """Start/stop button: stop when counting down, start otherwise."""
        with self._lock:
            if self._state.is_running:
                return self.stop()
            return self.start()

    def reset(self):
        """Stop both clocks and restore the initial countdown."""
        with self._lock:
            self._play_cue(ToneCue.RESET)
            self._cancel_countdown()
            self._cancel_stopwatch()
            self._state = TimerState(time_left=self.config.initial_seconds)
            logger.info("Timer reset")
            self._notify()

    def add_minute(self):
        """Add one minute to the countdown, capped at max_seconds."""
        with self._lock:
            self._play_cue(ToneCue.ADD)
            time_left = min(self._state.time_left + self.config.minute_step,
                            self.config.max_seconds)
            self._state = replace(self._state, time_left=time_left)
            logger.debug(f"Minute added: {time_left}s")
            self._notify()

    def subtract_minute(self) -> bool:
        """
        Remove one minute from the countdown.

        Returns:
            False (silently, no cue) when time_left is already at or below one
            minute
        """
        with self._lock:
            if self._state.time_left <= self.config.minute_step:
                return False

            self._play_cue(ToneCue.SUBTRACT)
            time_left = self._state.time_left - self.config.minute_step
            self._state = replace(self._state, time_left=time_left)
            logger.debug(f"Minute subtracted: {time_left}s")
            self._notify()
            return True

    def sync(self):
        """Round the countdown up to the next whole minute, capped at max_seconds."""
        with self._lock:
            self._play_cue(ToneCue.SYNC)
            step = self.config.minute_step
            rounded = -(-self._state.time_left // step) * step
            time_left = min(rounded, self.config.max_seconds)
            self._state = replace(self._state, time_left=time_left)
            logger.debug(f"Synced to {time_left}s")
            self._notify()

    def shutdown(self):
        """Cancel every pending tick (teardown). No cue is played."""
        with self._lock:
            self._cancel_countdown()
            self._cancel_stopwatch()
            if self._state.is_active:
                self._state = replace(self._state, is_running=False, is_stopwatch_running=False)
                self._notify()
            logger.info("Timer shut down")

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------

    def _tick_countdown(self, generation: int):
        with self._lock:
            state = self._state
            if generation != self._countdown_generation or not state.is_running:
                return
            if state.time_left <= 0:
                return

            time_left = state.time_left - 1
            self.metrics.increment('countdown_ticks')

            if time_left == 0:
                self._announce(0)
                self._cancel_countdown()
                self._state = replace(
                    state, time_left=0, is_running=False, is_stopwatch_running=True
                )
                self._schedule_stopwatch()
                logger.info("Countdown elapsed, stopwatch running")
            else:
                self._state = replace(state, time_left=time_left)
                self._announce(time_left)

            self._notify()

    def _tick_stopwatch(self, generation: int):
        with self._lock:
            if generation != self._stopwatch_generation or not self._state.is_stopwatch_running:
                return

            self.metrics.increment('stopwatch_ticks')
            self._state = replace(self._state, stopwatch_time=self._state.stopwatch_time + 1)
            self._notify()

    def _schedule_countdown(self):
        self._cancel_countdown()
        self._countdown_handle = self.scheduler.schedule_repeating(
            self.config.tick_period_ms,
            functools.partial(self._tick_countdown, self._countdown_generation),
        )

    def _schedule_stopwatch(self):
        self._cancel_stopwatch()
        self._stopwatch_handle = self.scheduler.schedule_repeating(
            self.config.tick_period_ms,
            functools.partial(self._tick_stopwatch, self._stopwatch_generation),
        )

    def _cancel_countdown(self):
        self._countdown_generation += 1
        if self._countdown_handle is not None:
            self._countdown_handle.cancel()
            self._countdown_handle = None

    def _cancel_stopwatch(self):
        self._stopwatch_generation += 1
        if self._stopwatch_handle is not None:
            self._stopwatch_handle.cancel()
            self._stopwatch_handle = None

    # ------------------------------------------------------------------
    # Side effects
    # ------------------------------------------------------------------

    def _announce(self, seconds_left: int):
        text = announcement_for(seconds_left, self.config.final_announcement)
        if text is None:
            return

        rate = speech_rate_for(
            seconds_left,
            self.config.fast_speech_threshold,
            self.config.normal_speech_rate,
            self.config.fast_speech_rate,
        )
        try:
            self.speech.speak(text, rate)
            self.metrics.increment('announcements')
            logger.debug(f"Announced '{text}' at rate {rate}")
        except Exception as e:
            logger.warning(f"Speech failed for '{text}': {e}")
            self.metrics.increment_drop('speech_failed')

    def _play_cue(self, cue: ToneCue):
        tone = TONE_CUES[cue]
        try:
            self.tones.play_tone(tone.frequency_hz, tone.duration_ms)
            self.metrics.increment('tones_played')
        except Exception as e:
            logger.warning(f"Tone failed for {cue.value} cue: {e}")
            self.metrics.increment_drop('tone_failed')

    def _notify(self):
        state = self._state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Timer listener raised")
                self.metrics.increment_drop('listener_failed')
