"""
Regatta Core Package.

Race-start countdown timer with voice/tone cueing and a velocity-made-good
(VMG) calculator for sailing boats.

Package structure:
- proto: Value types (timer state, GPS samples, waypoints, VMG results)
- timing: Scheduler, countdown/stopwatch engine, announcement policy
- navigation: Geodesy, VMG calculator, GPS feed and simulated source
- io: Speech/tone outputs, network GPS receiver
- metrics: Diagnostics, counters, histograms
"""

__version__ = "0.1.0"
__author__ = "Regatta Start Timer Team"

from .timing import RaceTimer, TimerConfig, ThreadingScheduler, ManualScheduler
from .navigation import VMGCalculator, VMGConfig, GPSFeed
