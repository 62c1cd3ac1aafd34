"""
Speech and tone outputs.

Both are fire-and-forget: the caller never waits for audio to finish. The
command-line implementations shell out to whatever the platform offers
(espeak-ng/espeak or macOS `say` for speech, aplay/afplay for WAV playback)
and return as soon as the player process is launched.

Tones are synthesized with numpy: a sine at the cue frequency under an
exponential decay envelope, written as 16-bit mono WAV.
"""

import logging
import os
import platform
import shutil
import subprocess
import tempfile
import wave
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

SAMPLE_RATE = 22050
TONE_VOLUME = 0.1
TONE_END_GAIN = 0.01

# espeak words-per-minute at rate 1.0
BASE_WORDS_PER_MINUTE = 175


class SpeechOutput(ABC):
    """Text-to-speech collaborator."""

    @abstractmethod
    def speak(self, text: str, rate: float):
        """Speak text at a relative rate (1.0 = normal). Must not block."""


class ToneOutput(ABC):
    """Tone generator collaborator."""

    @abstractmethod
    def play_tone(self, frequency_hz: float, duration_ms: int):
        """Play a short tone. Must not block."""


class LoggingSpeech(SpeechOutput):
    """Headless speech output: logs what would be said."""

    def speak(self, text: str, rate: float):
        logger.info(f"[speech x{rate:.1f}] {text}")


class LoggingTonePlayer(ToneOutput):
    """Headless tone output: logs the cue."""

    def play_tone(self, frequency_hz: float, duration_ms: int):
        logger.debug(f"[tone] {frequency_hz:.0f} Hz / {duration_ms} ms")


def detect_audio_tools() -> Dict[str, bool]:
    """Report which external audio tools are on PATH."""
    return {
        'espeak-ng': shutil.which('espeak-ng') is not None,
        'espeak': shutil.which('espeak') is not None,
        'say': shutil.which('say') is not None,
        'aplay': shutil.which('aplay') is not None,
        'afplay': shutil.which('afplay') is not None,
    }


class CommandLineSpeech(SpeechOutput):
    """
    Speech through espeak-ng/espeak (Linux) or `say` (macOS).

    A new announcement interrupts the previous one, so a slow voice never
    lags behind the clock.
    """

    def __init__(self, voice: str = "en-gb", base_wpm: int = BASE_WORDS_PER_MINUTE):
        self.voice = voice
        self.base_wpm = base_wpm
        self._platform = platform.system()
        self._process: Optional[subprocess.Popen] = None
        self._command = self._find_command()

        if self._command is None:
            logger.warning("No TTS engine found (espeak-ng, espeak, say); speech disabled")

    def _find_command(self) -> Optional[str]:
        if self._platform == "Darwin" and shutil.which("say"):
            return "say"
        for cmd in ("espeak-ng", "espeak"):
            if shutil.which(cmd):
                return cmd
        return None

    @property
    def available(self) -> bool:
        return self._command is not None

    def words_per_minute(self, rate: float) -> int:
        return max(80, int(round(self.base_wpm * rate)))

    def build_command(self, text: str, rate: float) -> list:
        wpm = str(self.words_per_minute(rate))
        if self._command == "say":
            return ["say", "-r", wpm, text]
        return [self._command, "-v", self.voice, "-s", wpm, text]

    def speak(self, text: str, rate: float):
        if self._command is None:
            return

        # Cancel any ongoing speech
        if self._process is not None and self._process.poll() is None:
            self._process.terminate()

        self._process = subprocess.Popen(
            self.build_command(text, rate),
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )


def synthesize_tone(
    frequency_hz: float,
    duration_ms: int,
    sample_rate: int = SAMPLE_RATE,
    volume: float = TONE_VOLUME,
    end_gain: float = TONE_END_GAIN,
) -> np.ndarray:
    """
    Synthesize a decaying sine tone.

    Args:
        frequency_hz: Tone frequency
        duration_ms: Tone length
        sample_rate: Samples per second
        volume: Initial gain (0-1)
        end_gain: Gain reached at the end of the tone (exponential ramp)

    Returns:
        int16 PCM samples
    """
    n_samples = max(1, int(sample_rate * duration_ms / 1000))
    t = np.arange(n_samples) / sample_rate

    # Exponential ramp from volume down to end_gain over the tone
    envelope = volume * (end_gain / volume) ** (np.arange(n_samples) / n_samples)
    signal = envelope * np.sin(2.0 * np.pi * frequency_hz * t)

    return np.clip(signal * 32767.0, -32768, 32767).astype(np.int16)


def write_wav(path: str, samples: np.ndarray, sample_rate: int = SAMPLE_RATE):
    """Write int16 mono samples to a WAV file."""
    with wave.open(path, 'wb') as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(samples.tobytes())


class CommandLineTonePlayer(ToneOutput):
    """
    Tones rendered to WAV and played with aplay (Linux) or afplay (macOS).

    Rendered files are cached per (frequency, duration) in a temp directory,
    so each cue is synthesized once.
    """

    def __init__(self, sample_rate: int = SAMPLE_RATE):
        self.sample_rate = sample_rate
        self._platform = platform.system()
        self._temp_dir = tempfile.mkdtemp(prefix="regatta_tones_")
        self._cache: Dict[Tuple[float, int], str] = {}
        self._player = self._find_player()

        if self._player is None:
            logger.warning("No WAV player found (aplay, afplay); tones disabled")

    def _find_player(self) -> Optional[list]:
        if self._platform == "Darwin" and shutil.which("afplay"):
            return ["afplay"]
        if shutil.which("aplay"):
            return ["aplay", "-q"]
        return None

    @property
    def available(self) -> bool:
        return self._player is not None

    def render(self, frequency_hz: float, duration_ms: int) -> str:
        """Path of the WAV file for this tone, synthesizing it on first use."""
        key = (float(frequency_hz), int(duration_ms))
        path = self._cache.get(key)
        if path is None:
            path = os.path.join(self._temp_dir, f"tone_{key[0]:.0f}_{key[1]}.wav")
            write_wav(path, synthesize_tone(frequency_hz, duration_ms, self.sample_rate),
                      self.sample_rate)
            self._cache[key] = path
        return path

    def play_tone(self, frequency_hz: float, duration_ms: int):
        if self._player is None:
            return

        subprocess.Popen(
            self._player + [self.render(frequency_hz, duration_ms)],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )

    def close(self):
        """Remove rendered tone files."""
        try:
            for path in self._cache.values():
                os.remove(path)
            os.rmdir(self._temp_dir)
        except OSError:
            logger.debug(f"Could not clean up {self._temp_dir}")
        self._cache.clear()
