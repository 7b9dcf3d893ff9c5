"""Tests for feed source configuration models."""

import pytest
from pydantic import ValidationError

from caution_feed.config.sources import FeedSourceCatalog, FeedSourceConfig
from caution_feed.models.source import DEFAULT_POLL_INTERVAL_MS, CautionCategory


def source_kwargs(**overrides) -> dict:
    data = {
        "name": "FTC",
        "url": "https://consumer.ftc.gov/blog/feed",
        "category": "scams",
        "personas": ["senior"],
        "source_label": "FTC",
    }
    data.update(overrides)
    return data


class TestFeedSourceConfig:
    """Tests for FeedSourceConfig."""

    @pytest.mark.unit
    def test_defaults(self):
        """Interval and active flag have defaults."""
        config = FeedSourceConfig(**source_kwargs())

        assert config.category == CautionCategory.SCAMS
        assert config.poll_interval_ms == DEFAULT_POLL_INTERVAL_MS
        assert config.active is True

    @pytest.mark.unit
    def test_personas_deduplicated_in_order(self):
        """Repeated personas are dropped, first occurrence wins."""
        config = FeedSourceConfig(**source_kwargs(personas=["senior", "general", "senior"]))
        assert config.personas == ["senior", "general"]

    @pytest.mark.unit
    def test_personas_required(self):
        """A source must target at least one persona."""
        with pytest.raises(ValidationError):
            FeedSourceConfig(**source_kwargs(personas=[]))

    @pytest.mark.unit
    def test_poll_interval_minimum(self):
        """Intervals below five minutes are rejected."""
        with pytest.raises(ValidationError):
            FeedSourceConfig(**source_kwargs(poll_interval_ms=299_999))

        assert FeedSourceConfig(**source_kwargs(poll_interval_ms=300_000)).poll_interval_ms == (
            300_000
        )

    @pytest.mark.unit
    def test_invalid_url(self):
        """Non-URL values are rejected."""
        with pytest.raises(ValidationError):
            FeedSourceConfig(**source_kwargs(url="not a url"))

    @pytest.mark.unit
    def test_unknown_category(self):
        """Categories are a closed enumeration."""
        with pytest.raises(ValidationError):
            FeedSourceConfig(**source_kwargs(category="weather"))


class TestFeedSourceCatalog:
    """Tests for FeedSourceCatalog."""

    @pytest.mark.unit
    def test_empty_catalog(self):
        """A catalog without sources is valid."""
        assert FeedSourceCatalog().sources == []

    @pytest.mark.unit
    def test_duplicate_urls(self):
        """The same URL cannot appear twice."""
        with pytest.raises(ValidationError, match="duplicate feed url"):
            FeedSourceCatalog(sources=[source_kwargs(), source_kwargs(name="FTC again")])
