"""
Periodic callback scheduling.

The timer engine never sleeps or spawns threads itself; it asks a Scheduler
for repeating callbacks and keeps the returned CancelHandle. Every handle is
cancelled on every exit path (stop, elapsed, reset, shutdown).

Two implementations:
- ThreadingScheduler: one daemon thread per job, wall-clock periods. Callbacks
  from all jobs are serialized, so only one executes at a time.
- ManualScheduler: virtual clock advanced explicitly (tests, replays).
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class CancelHandle:
    """Cancellation handle paired with one repeating callback."""
    
    def __init__(self):
        self._cancelled = threading.Event()
    
    def cancel(self):
        """Stop further invocations. Safe to call more than once."""
        self._cancelled.set()
    
    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()
    
    def wait(self, timeout: float) -> bool:
        """Block up to timeout seconds; True if cancelled meanwhile."""
        return self._cancelled.wait(timeout)


class Scheduler(ABC):
    """Source of repeating callbacks."""
    
    @abstractmethod
    def schedule_repeating(self, period_ms: int, callback: Callback) -> CancelHandle:
        """
        Invoke callback every period_ms until the handle is cancelled.
        
        The first invocation happens one period after scheduling.
        """
    
    def shutdown(self):
        """Cancel every job still scheduled."""


class ThreadingScheduler(Scheduler):
    """
    Wall-clock scheduler backed by daemon threads.
    
    Usage:
        scheduler = ThreadingScheduler()
        handle = scheduler.schedule_repeating(1000, engine_tick)
        ...
        handle.cancel()
        scheduler.shutdown()
    """
    
    def __init__(self):
        self._dispatch_lock = threading.Lock()
        self._jobs_lock = threading.Lock()
        self._jobs: List[tuple] = []  # (handle, thread)
    
    def schedule_repeating(self, period_ms: int, callback: Callback) -> CancelHandle:
        if period_ms <= 0:
            raise ValueError(f"period_ms must be positive, got {period_ms}")
        
        handle = CancelHandle()
        thread = threading.Thread(
            target=self._run_job,
            args=(period_ms / 1000.0, callback, handle),
            name=f"repeat-{getattr(callback, '__name__', 'job')}",
            daemon=True,
        )
        with self._jobs_lock:
            # Drop jobs whose threads have exited
            self._jobs = [(h, t) for h, t in self._jobs if t.is_alive()]
            self._jobs.append((handle, thread))
        thread.start()
        return handle
    
    def _run_job(self, period_s: float, callback: Callback, handle: CancelHandle):
        # Deadlines on the monotonic clock so periods do not drift
        next_deadline = time.monotonic() + period_s
        
        while not handle.wait(max(0.0, next_deadline - time.monotonic())):
            with self._dispatch_lock:
                if handle.cancelled:
                    break
                try:
                    callback()
                except Exception:
                    logger.exception("Scheduled callback raised")
            next_deadline += period_s
    
    def shutdown(self, timeout: float = 2.0):
        """Cancel all jobs and wait for their threads to exit."""
        with self._jobs_lock:
            jobs = list(self._jobs)
            self._jobs.clear()
        
        for handle, _ in jobs:
            handle.cancel()
        
        current = threading.current_thread()
        for _, thread in jobs:
            if thread is not current and thread.is_alive():
                thread.join(timeout)
        
        logger.debug(f"Scheduler shut down ({len(jobs)} jobs cancelled)")


@dataclass(order=True)
class _ManualJob:
    next_fire_ms: int
    seq: int
    period_ms: int = field(compare=False)
    callback: Callback = field(compare=False)
    handle: CancelHandle = field(compare=False)


class ManualScheduler(Scheduler):
    """
    Deterministic scheduler driven by an explicit virtual clock.
    
    Usage:
        scheduler = ManualScheduler()
        timer = RaceTimer(scheduler)
        timer.start()
        scheduler.advance_seconds(10)   # ten countdown ticks
    """
    
    def __init__(self):
        self.now_ms = 0
        self._seq = 0
        self._jobs: List[_ManualJob] = []
    
    def schedule_repeating(self, period_ms: int, callback: Callback) -> CancelHandle:
        if period_ms <= 0:
            raise ValueError(f"period_ms must be positive, got {period_ms}")
        
        handle = CancelHandle()
        self._seq += 1
        self._jobs.append(_ManualJob(
            next_fire_ms=self.now_ms + period_ms,
            seq=self._seq,
            period_ms=period_ms,
            callback=callback,
            handle=handle,
        ))
        return handle
    
    def _next_due(self, until_ms: int) -> Optional[_ManualJob]:
        due = [j for j in self._jobs if not j.handle.cancelled and j.next_fire_ms <= until_ms]
        return min(due) if due else None
    
    def advance(self, ms: int):
        """Advance the virtual clock, firing every callback that falls due in order."""
        target = self.now_ms + ms
        
        job = self._next_due(target)
        while job is not None:
            self.now_ms = job.next_fire_ms
            job.next_fire_ms += job.period_ms
            job.callback()
            job = self._next_due(target)
        
        self.now_ms = target
        self._jobs = [j for j in self._jobs if not j.handle.cancelled]
    
    def advance_seconds(self, seconds: int):
        self.advance(seconds * 1000)
    
    @property
    def active_jobs(self) -> int:
        """Number of jobs not yet cancelled."""
        return sum(1 for j in self._jobs if not j.handle.cancelled)
    
    def shutdown(self):
        for job in self._jobs:
            job.handle.cancel()
        self._jobs.clear()
