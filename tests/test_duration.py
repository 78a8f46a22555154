"""Tests for duration parsing"""
from datetime import timedelta

import pytest

from grove.exceptions import InvalidDurationError
from grove.utils.duration import normalize_duration, parse_duration


class TestNormalizeDuration:
    @pytest.mark.parametrize("value,expected", [
        ("30d", "P30D"),
        ("2w", "P2W"),
        ("6M", "P6M"),
        ("1y", "P1Y"),
        ("12h", "PT12H"),
        ("30m", "PT30M"),
        ("P30D", "P30D"),
        ("not-a-duration", "not-a-duration"),
    ])
    def test_normalize(self, value, expected):
        assert normalize_duration(value) == expected


class TestParseDuration:
    @pytest.mark.parametrize("value,expected", [
        ("30d", timedelta(days=30)),
        ("2w", timedelta(weeks=2)),
        ("6M", timedelta(days=180)),
        ("1y", timedelta(days=365)),
        ("12h", timedelta(hours=12)),
        ("30m", timedelta(minutes=30)),
        ("P1Y2M", timedelta(days=425)),
        ("PT1H30M", timedelta(hours=1, minutes=30)),
        ("p2w", timedelta(weeks=2)),
    ])
    def test_valid(self, value, expected):
        assert parse_duration(value) == expected

    def test_months_and_minutes_differ_by_case(self):
        assert parse_duration("1M") > parse_duration("1m")

    @pytest.mark.parametrize("value", ["", "   ", "soon", "30x", "P", "PT", "0d", "-5d"])
    def test_invalid(self, value):
        with pytest.raises(InvalidDurationError):
            parse_duration(value)

    def test_error_names_input(self):
        with pytest.raises(InvalidDurationError) as exc_info:
            parse_duration("fortnight")
        assert "fortnight" in str(exc_info.value)
