"""
Race start timer configuration.
"""

# Countdown configuration
TIMER_CONFIG = {
    "initial_seconds": 300,        # 5:00 start sequence
    "max_seconds": 900,            # add/sync never exceed 15:00
    "tick_period_ms": 1000,
    "fast_speech_threshold": 15,   # last 15 s spoken faster
    "normal_speech_rate": 1.0,
    "fast_speech_rate": 1.8,
}

# Audio output configuration
AUDIO_CONFIG = {
    "enable_speech": True,         # False: log announcements only
    "enable_tones": True,          # False: log cues only
    "voice": "en-gb",              # espeak voice
    "base_wpm": 175,               # espeak words per minute at rate 1.0
}

# GPS source configuration
GPS_CONFIG = {
    "source": "simulated",         # "simulated" or "network"
    "host": "0.0.0.0",             # network receiver listen address
    "port": 8765,                  # network receiver listen port
}

# VMG configuration
VMG_CONFIG = {
    "fallback_speed_knots": 5.0,
    "fallback_heading_degrees": 45.0,
    "default_windward_distance_nm": 1.0,
    "default_windward_heading_degrees": 0.0,
}

# Virtual boat for bench testing
VIRTUAL_GPS_CONFIG = {
    "base_lat": 22.2900,
    "base_lon": 114.1700,
    "speed_mps": 2.5,              # ~4.9 kn
    "heading": 30.0,
    "accuracy": 5.0,
    "period_ms": 1000,
}

# Console output configuration
OUTPUT_CONFIG = {
    "enable_console_print": True,
    "print_interval": 5,           # status line every 5 s
}

# Logging configuration
LOGGING_CONFIG = {
    "level": "INFO",
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}
