"""Tests for caution_feed.core.types module."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from caution_feed.core.types import ensure_utc, utc_now


@pytest.mark.unit
def test_utc_now_is_aware():
    """Default clock returns aware UTC datetimes."""
    assert utc_now().tzinfo is UTC


@pytest.mark.unit
def test_ensure_utc_naive_assumed_utc():
    """Naive datetimes are treated as UTC."""
    naive = datetime(2026, 1, 1, 12, 0)
    assert ensure_utc(naive) == datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


@pytest.mark.unit
def test_ensure_utc_converts_offsets():
    """Aware datetimes are converted to UTC."""
    kst = timezone(timedelta(hours=9))
    value = datetime(2026, 1, 1, 21, 0, tzinfo=kst)

    result = ensure_utc(value)

    assert result.tzinfo is UTC
    assert result.hour == 12
