"""
Unit tests for the announcement policy and speech rate.
"""

import pytest

from regatta_core.timing import announcement_for, speech_rate_for, FINAL_ANNOUNCEMENT


class TestAnnouncementFor:
    """Tests for announcement text precedence."""

    def test_zero_is_final_call(self):
        assert announcement_for(0) == "SAIL FAST"
        assert announcement_for(0) == FINAL_ANNOUNCEMENT

    def test_custom_final_text(self):
        assert announcement_for(0, final_text="GO GO GO") == "GO GO GO"

    @pytest.mark.parametrize("seconds", range(1, 16))
    def test_final_fifteen_seconds(self, seconds):
        """Every second from 15 down is spoken as the number."""
        assert announcement_for(seconds) == str(seconds)

    @pytest.mark.parametrize("seconds", [20, 25, 30, 35, 40, 45, 50, 55])
    def test_last_minute_fives(self, seconds):
        """Multiples of five in the last minute are spoken as the number."""
        assert announcement_for(seconds) == str(seconds)

    @pytest.mark.parametrize("seconds", [16, 19, 21, 29, 44, 56, 59])
    def test_last_minute_silent(self, seconds):
        assert announcement_for(seconds) is None

    @pytest.mark.parametrize("seconds,text", [
        (60, "1 minutes"),
        (120, "2 minutes"),
        (300, "5 minutes"),
        (900, "15 minutes"),
    ])
    def test_whole_minutes(self, seconds, text):
        """Whole minutes use the plural form, including one minute."""
        assert announcement_for(seconds) == text

    @pytest.mark.parametrize("seconds,text", [
        (75, "1 15"),
        (90, "1 30"),
        (105, "1 45"),
        (135, "2 15"),
        (285, "4 45"),
    ])
    def test_quarter_minutes(self, seconds, text):
        assert announcement_for(seconds) == text

    @pytest.mark.parametrize("seconds", [61, 70, 80, 100, 119, 299])
    def test_silent_above_one_minute(self, seconds):
        assert announcement_for(seconds) is None

    def test_last_minute_rule_wins_over_quarter(self):
        """30 and 45 s are spoken as the number, not as '0 30'."""
        assert announcement_for(30) == "30"
        assert announcement_for(45) == "45"


class TestSpeechRate:
    """Tests for speech rate selection."""

    @pytest.mark.parametrize("seconds", [0, 1, 10, 15])
    def test_fast_near_the_gun(self, seconds):
        assert speech_rate_for(seconds) == 1.8

    @pytest.mark.parametrize("seconds", [16, 20, 60, 300])
    def test_normal_otherwise(self, seconds):
        assert speech_rate_for(seconds) == 1.0

    def test_custom_threshold_and_rates(self):
        assert speech_rate_for(30, threshold=30, normal_rate=0.9, fast_rate=2.0) == 2.0
        assert speech_rate_for(31, threshold=30, normal_rate=0.9, fast_rate=2.0) == 0.9
