"""Tests for utils/timezone.py - UTC-everywhere time handling."""

from datetime import timezone

from utils.timezone import now_utc


class TestNowUtc:
    """Tests for now_utc()."""

    def test_returns_timezone_aware(self):
        """Result must have tzinfo set (not naive)."""
        assert now_utc().tzinfo is not None

    def test_is_utc(self):
        """Result timezone must be specifically UTC."""
        assert now_utc().tzinfo == timezone.utc

    def test_monotonic_enough(self):
        first = now_utc()
        assert now_utc() >= first
