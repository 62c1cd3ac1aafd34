"""
Race start timer console.

Runs the countdown engine with voice/tone cues and a live VMG readout from a
simulated boat or a network GPS feed. Commands are read from stdin, one per
line:

    s           start/stop countdown
    r           reset to 5:00
    + / -       add / subtract a minute
    y           sync to the next whole minute
    l           set leeward mark at current position
    w NM DEG    set windward mark NM nautical miles at DEG from leeward
    x           reset all marks
    m           print metrics summary
    q           quit
"""

import sys
import signal
import logging
import argparse
from typing import List, Optional

import config
from regatta_core.timing import (
    RaceTimer,
    TimerConfig,
    ThreadingScheduler,
    CancelHandle,
    display_time,
)
from regatta_core.navigation import (
    VMGCalculator,
    VMGConfig,
    GPSFeed,
    GPSSource,
    SimulatedGPSSource,
)
from regatta_core.io import (
    CommandLineSpeech,
    CommandLineTonePlayer,
    LoggingSpeech,
    LoggingTonePlayer,
)
from regatta_core.io.gps_receiver import GPSStreamReceiver
from regatta_core.metrics import get_metrics

logging.basicConfig(
    level=getattr(logging, config.LOGGING_CONFIG["level"]),
    format=config.LOGGING_CONFIG["format"]
)
logger = logging.getLogger(__name__)


class RaceStartConsole:
    """Wires scheduler, timer, GPS feed, VMG calculator and audio together."""

    def __init__(self):
        """Build all components from config."""
        self.running = False
        self.scheduler = ThreadingScheduler()
        self.metrics = get_metrics()

        self.speech = self._build_speech()
        self.tones = self._build_tones()

        self.timer = RaceTimer(
            self.scheduler,
            speech=self.speech,
            tones=self.tones,
            config=TimerConfig(**config.TIMER_CONFIG),
        )
        self.vmg = VMGCalculator(VMGConfig(**config.VMG_CONFIG))
        self.gps_source = self._build_gps_source()
        self.gps_feed = GPSFeed(self.gps_source, self.vmg)

        self._status_handle: Optional[CancelHandle] = None

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        logger.info("Race start console initialized")

    def _signal_handler(self, signum, frame):
        logger.info(f"Received signal {signum}, stopping...")
        self.running = False
        raise SystemExit(0)

    def _build_speech(self):
        if config.AUDIO_CONFIG["enable_speech"]:
            speech = CommandLineSpeech(
                voice=config.AUDIO_CONFIG["voice"],
                base_wpm=config.AUDIO_CONFIG["base_wpm"],
            )
            if speech.available:
                return speech
        return LoggingSpeech()

    def _build_tones(self):
        if config.AUDIO_CONFIG["enable_tones"]:
            tones = CommandLineTonePlayer()
            if tones.available:
                return tones
            tones.close()
        return LoggingTonePlayer()

    def _build_gps_source(self) -> GPSSource:
        if config.GPS_CONFIG["source"] == "network":
            return GPSStreamReceiver(config.GPS_CONFIG["host"], config.GPS_CONFIG["port"])
        return SimulatedGPSSource(self.scheduler, **config.VIRTUAL_GPS_CONFIG)

    def handle_command(self, line: str) -> bool:
        """
        Execute one console command.

        Returns:
            False when the console should exit
        """
        parts: List[str] = line.strip().split()
        if not parts:
            return True
        command, args = parts[0].lower(), parts[1:]

        if command == "q":
            return False
        elif command == "s":
            self.timer.toggle()
        elif command == "r":
            self.timer.reset()
        elif command == "+":
            self.timer.add_minute()
        elif command == "-":
            self.timer.subtract_minute()
        elif command == "y":
            self.timer.sync()
        elif command == "l":
            if self.vmg.set_leeward_mark() is None:
                print("No GPS fix yet")
        elif command == "w":
            distance = args[0] if len(args) > 0 else config.VMG_CONFIG["default_windward_distance_nm"]
            heading = args[1] if len(args) > 1 else config.VMG_CONFIG["default_windward_heading_degrees"]
            if self.vmg.set_windward_mark(distance, heading) is None:
                print("Windward mark needs a leeward mark and numeric distance/heading")
        elif command == "x":
            self.vmg.reset_marks()
        elif command == "m":
            self.metrics.print_summary()
        else:
            print(f"Unknown command '{command}'")
            return True

        self._print_status()
        return True

    def _print_status(self):
        state = self.timer.state
        gps = self.gps_feed.display()
        vmg = self.vmg.result

        line = f"[{state.mode.name:13s}] {display_time(state):>8s}"
        if gps.error_message:
            line += f" | GPS: {gps.error_message}"
        elif gps.has_fix:
            speed = f"{gps.speed_knots:.1f} kn" if gps.speed_knots is not None else "-- kn"
            heading = f"{gps.heading:.0f}" if gps.heading is not None else "--"
            line += f" | {speed} {heading} deg {gps.compass}"
        else:
            line += " | GPS: waiting for fix"

        if vmg is not None:
            line += f" | VMG {vmg.active_vmg:+.1f} kn to {vmg.current_leg.value}"
        print(line)

    def _periodic_status(self):
        if config.OUTPUT_CONFIG["enable_console_print"]:
            self._print_status()

    def start(self):
        """Start GPS and status output, then run the command loop."""
        logger.info("Race start console starting...")
        self.gps_feed.start()
        self._status_handle = self.scheduler.schedule_repeating(
            config.OUTPUT_CONFIG["print_interval"] * 1000, self._periodic_status
        )
        self.running = True
        print(__doc__)

        try:
            self._run_loop()
        finally:
            self.stop()

    def _run_loop(self):
        while self.running:
            try:
                line = input()
            except EOFError:
                break
            if not self.handle_command(line):
                break

    def stop(self):
        """Cancel every scheduled callback and release audio/GPS resources."""
        logger.info("Stopping race start console...")
        self.running = False

        if self._status_handle is not None:
            self._status_handle.cancel()
            self._status_handle = None
        self.timer.shutdown()
        self.gps_feed.stop()
        self.scheduler.shutdown()
        if isinstance(self.tones, CommandLineTonePlayer):
            self.tones.close()

        logger.info("Race start console stopped")


def main():
    parser = argparse.ArgumentParser(description='Race start timer with VMG')
    parser.add_argument('--source', choices=['simulated', 'network'], default=None,
                        help='GPS source')
    parser.add_argument('--host', '-H', type=str, default=None,
                        help='Network GPS listen address')
    parser.add_argument('--port', '-p', type=int, default=None,
                        help='Network GPS listen port')
    parser.add_argument('--quiet', '-q', action='store_true',
                        help='Log speech and tones instead of playing them')
    parser.add_argument('--debug', '-d', action='store_true',
                        help='Enable debug logging')

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.source:
        config.GPS_CONFIG["source"] = args.source
    if args.host:
        config.GPS_CONFIG["host"] = args.host
    if args.port:
        config.GPS_CONFIG["port"] = args.port
    if args.quiet:
        config.AUDIO_CONFIG["enable_speech"] = False
        config.AUDIO_CONFIG["enable_tones"] = False

    console = RaceStartConsole()
    console.start()


if __name__ == "__main__":
    sys.exit(main())
