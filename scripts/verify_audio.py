#!/usr/bin/env python3
"""
Audio verification and diagnostic script.

Checks:
- TTS engine availability (espeak-ng, espeak, say)
- WAV player availability (aplay, afplay)
- Tone synthesis
- Plays every timer cue and a sample announcement

Run this on the target device before heading out to the start line.
"""

import sys
import os
import time
import platform

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from regatta_core.io import (
    CommandLineSpeech,
    CommandLineTonePlayer,
    detect_audio_tools,
    synthesize_tone,
)
from regatta_core.timing import TONE_CUES, announcement_for, speech_rate_for


def print_header(title: str):
    """Print formatted section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def print_status(check: str, passed: bool, details: str = ""):
    """Print check status with formatting."""
    status = "✓ PASS" if passed else "✗ FAIL"
    color = "\033[92m" if passed else "\033[91m"
    reset = "\033[0m"

    print(f"{color}{status}{reset} {check}")
    if details:
        print(f"       {details}")


def verify_tools() -> dict:
    """Report external audio tools on PATH."""
    print_header("Audio Tools")

    tools = detect_audio_tools()
    for name, found in tools.items():
        print(f"{name:10s}: {'found' if found else 'missing'}")

    has_tts = tools['espeak-ng'] or tools['espeak'] or tools['say']
    has_player = tools['aplay'] or tools['afplay']
    print_status("TTS engine", has_tts)
    print_status("WAV player", has_player)

    return {'tts': has_tts, 'player': has_player}


def verify_synthesis() -> bool:
    """Synthesize every cue and check sample count and level."""
    print_header("Tone Synthesis")

    passed = True
    for cue, tone in TONE_CUES.items():
        samples = synthesize_tone(tone.frequency_hz, tone.duration_ms)
        peak = int(abs(samples).max())
        ok = len(samples) > 0 and 0 < peak <= 32767
        passed = passed and ok
        print(f"{cue.value:9s}: {tone.frequency_hz:6.0f} Hz {tone.duration_ms:4d} ms "
              f"-> {len(samples)} samples, peak {peak}")

    print_status("Tone synthesis", passed)
    return passed


def play_cues(tones: CommandLineTonePlayer) -> bool:
    """Play each cue with a short gap."""
    print_header("Tone Playback")

    if not tones.available:
        print_status("Tone playback", False, "No WAV player available")
        return False

    for cue, tone in TONE_CUES.items():
        print(f"Playing {cue.value} cue")
        tones.play_tone(tone.frequency_hz, tone.duration_ms)
        time.sleep(0.6)

    print_status("Tone playback", True, "Listen for six distinct tones")
    return True


def play_announcements(speech: CommandLineSpeech) -> bool:
    """Speak a minute call, a last-minute call and the final call."""
    print_header("Speech Playback")

    if not speech.available:
        print_status("Speech playback", False, "No TTS engine available")
        return False

    for seconds_left in (60, 30, 5, 0):
        text = announcement_for(seconds_left)
        rate = speech_rate_for(seconds_left)
        print(f"{seconds_left:3d}s -> '{text}' (rate {rate})")
        speech.speak(text, rate)
        time.sleep(1.5)

    print_status("Speech playback", True)
    return True


def main():
    """Run all verification checks."""
    print("\n" + "=" * 70)
    print("  Race Start Timer Audio Verification")
    print("=" * 70)

    print(f"\nPython version: {sys.version}")
    print(f"Platform: {platform.platform()}")

    tools = verify_tools()
    tone_player = CommandLineTonePlayer()
    try:
        results = {
            'synthesis': verify_synthesis(),
            'tones': play_cues(tone_player),
            'speech': play_announcements(CommandLineSpeech()),
        }
    finally:
        time.sleep(0.5)
        tone_player.close()

    print_header("Verification Summary")

    total = len(results)
    passed = sum(results.values())

    for check, result in results.items():
        print_status(check.title(), result)

    print(f"\nResult: {passed}/{total} checks passed")

    if passed == total:
        print("\n✓ Audio ready")
        return 0
    elif results['synthesis'] and not (tools['tts'] and tools['player']):
        print("\n⚠ Timer will run with logged cues only")
        print("  Install espeak-ng and alsa-utils for audible cues")
        return 1
    else:
        print("\n✗ Critical failures detected")
        return 2


if __name__ == "__main__":
    sys.exit(main())
