"""Tests for partition keys and number segments."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from core.models import Scope
from core.scope import key_for_date, scope_segment


class TestKeyForDate:
    """Tests for key_for_date()."""

    @pytest.mark.parametrize("scope, expected", [
        (Scope.YEAR, "2025"),
        (Scope.MONTH, "2025-03"),
        (Scope.DAY, "2025-03-05"),
    ])
    def test_key_shapes(self, scope, expected):
        assert key_for_date(date(2025, 3, 5), scope) == expected

    def test_default_scope_is_month(self):
        assert key_for_date(date(2025, 3, 5)) == "2025-03"

    def test_accepts_scope_string(self):
        assert key_for_date(date(2025, 3, 5), "day") == "2025-03-05"

    def test_unknown_scope_raises(self):
        with pytest.raises(ValueError):
            key_for_date(date(2025, 3, 5), "week")

    def test_same_period_same_key(self):
        """Every day of a month shares the month key; every day of a year the year key."""
        start = date(2024, 1, 1)
        days = [start + timedelta(days=i) for i in range(366)]
        for d in days:
            assert key_for_date(d, Scope.YEAR) == "2024"
            assert key_for_date(d, Scope.MONTH) == key_for_date(date(2024, d.month, 1), Scope.MONTH)

    def test_different_periods_differ(self):
        assert key_for_date(date(2025, 1, 31), Scope.MONTH) != key_for_date(date(2025, 2, 1), Scope.MONTH)
        assert key_for_date(date(2024, 12, 31), Scope.YEAR) != key_for_date(date(2025, 1, 1), Scope.YEAR)
        assert key_for_date(date(2025, 3, 5), Scope.DAY) != key_for_date(date(2025, 3, 6), Scope.DAY)
        # Same day-of-month in different months must not collide
        assert key_for_date(date(2025, 3, 5), Scope.DAY) != key_for_date(date(2025, 4, 5), Scope.DAY)

    def test_uses_datetime_local_fields(self):
        """An aware datetime is keyed by its own calendar fields, not converted to UTC."""
        berlin = datetime(2025, 2, 1, 0, 30, tzinfo=ZoneInfo("Europe/Berlin"))
        assert key_for_date(berlin, Scope.MONTH) == "2025-02"
        assert key_for_date(berlin.astimezone(timezone.utc), Scope.MONTH) == "2025-01"


class TestScopeSegment:
    """Tests for scope_segment()."""

    def test_matches_key(self):
        d = date(2025, 3, 15)
        for scope in Scope:
            assert scope_segment(d, scope) == key_for_date(d, scope)

    def test_zero_pads_year(self):
        assert scope_segment(date(987, 1, 2), Scope.YEAR) == "0987"
