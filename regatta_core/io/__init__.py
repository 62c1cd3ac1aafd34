"""
IO Module: Audio outputs and network GPS input.

Key classes:
- CommandLineSpeech / CommandLineTonePlayer: espeak/say and aplay/afplay backends
- LoggingSpeech / LoggingTonePlayer: headless fallbacks
- GPSStreamReceiver: TCP receiver for newline-delimited JSON GPS samples
"""

from .audio import (
    SpeechOutput,
    ToneOutput,
    LoggingSpeech,
    LoggingTonePlayer,
    CommandLineSpeech,
    CommandLineTonePlayer,
    synthesize_tone,
    write_wav,
    detect_audio_tools,
)

__all__ = [
    'SpeechOutput',
    'ToneOutput',
    'LoggingSpeech',
    'LoggingTonePlayer',
    'CommandLineSpeech',
    'CommandLineTonePlayer',
    'synthesize_tone',
    'write_wav',
    'detect_audio_tools',
]
