"""Unit tests for feed sweep Celery tasks."""

import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from caution_feed.core.config import get_config
from caution_feed.core.exceptions import RetentionSweepError
from caution_feed.services.feeds.base import SourceRunResult, SourceRunStatus, SweepReport
from caution_feed.workers.celery_app import celery_app
from caution_feed.workers.feeds import (
    _poll_feed_sources_async,
    _purge_stale_cautions_async,
    poll_feed_sources,
    purge_stale_cautions,
)

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


def _scope(scheduler: MagicMock | None = None, sweeper: MagicMock | None = None) -> MagicMock:
    scope = MagicMock()
    scope.__enter__.return_value = scope
    scope.feed_scheduler.return_value = scheduler or MagicMock()
    scope.services.retention_sweeper.return_value = sweeper or MagicMock()
    scope.http_client.return_value.close = AsyncMock()
    return scope


class TestPollFeedSourcesAsync:
    """Tests for the poll sweep helper."""

    @pytest.mark.asyncio
    async def test_runs_sweep_and_releases_resources(self):
        """Test the sweep runs and the client and engine are closed."""
        scheduler = MagicMock()
        report = SweepReport(started_at=NOW, completed_at=NOW)
        scheduler.run_poll_sweep = AsyncMock(return_value=report)
        scope = _scope(scheduler=scheduler)

        with (
            patch("caution_feed.workers.feeds.TaskScope", return_value=scope),
            patch("caution_feed.workers.feeds.close_db", new_callable=AsyncMock) as close_db,
        ):
            result = await _poll_feed_sources_async(ignore_interval=True)

        assert result is report
        scheduler.run_poll_sweep.assert_awaited_once_with(ignore_interval=True)
        scope.http_client.return_value.close.assert_awaited_once()
        close_db.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_releases_resources_on_error(self):
        """Test resources are released when the sweep raises."""
        scheduler = MagicMock()
        scheduler.run_poll_sweep = AsyncMock(side_effect=RuntimeError("boom"))
        scope = _scope(scheduler=scheduler)

        with (
            patch("caution_feed.workers.feeds.TaskScope", return_value=scope),
            patch("caution_feed.workers.feeds.close_db", new_callable=AsyncMock) as close_db,
            pytest.raises(RuntimeError),
        ):
            await _poll_feed_sources_async(ignore_interval=False)

        close_db.assert_awaited_once()


class TestPurgeStaleCautionsAsync:
    """Tests for the retention sweep helper."""

    @pytest.mark.asyncio
    async def test_purges_with_override(self):
        """Test the horizon override reaches the sweeper."""
        sweeper = MagicMock()
        sweeper.purge_older_than = AsyncMock(return_value=12)
        scope = _scope(sweeper=sweeper)

        with (
            patch("caution_feed.workers.feeds.TaskScope", return_value=scope),
            patch("caution_feed.workers.feeds.close_db", new_callable=AsyncMock),
        ):
            deleted = await _purge_stale_cautions_async(30)

        assert deleted == 12
        sweeper.purge_older_than.assert_awaited_once_with(30)


class TestTasks:
    """Tests for the Celery task wrappers."""

    def test_poll_returns_report_dict(self):
        """Test the task returns the report as JSON-safe data."""
        report = SweepReport(
            started_at=NOW,
            completed_at=NOW,
            results=[
                SourceRunResult(
                    source_id=uuid.uuid4(),
                    source_name="FTC",
                    status=SourceRunStatus.INGESTED,
                    new_count=2,
                )
            ],
        )
        with patch(
            "caution_feed.workers.feeds._poll_feed_sources_async",
            new=AsyncMock(return_value=report),
        ):
            result = poll_feed_sources.run()

        assert result["results"][0]["status"] == "ingested"
        assert result["results"][0]["new_count"] == 2
        assert result["skipped"] is False

    def test_poll_skipped_is_retried(self):
        """Test a skipped sweep triggers a retry.

        Called directly, Celery re-raises the retry exception instead of
        scheduling a new attempt.
        """
        report = SweepReport(started_at=NOW, skipped=True, error="database is down")
        with (
            patch(
                "caution_feed.workers.feeds._poll_feed_sources_async",
                new=AsyncMock(return_value=report),
            ),
            pytest.raises(RuntimeError, match="database is down"),
        ):
            poll_feed_sources.run()

    def test_purge_returns_count(self):
        """Test the retention task returns the deleted count."""
        with patch(
            "caution_feed.workers.feeds._purge_stale_cautions_async",
            new=AsyncMock(return_value=7),
        ):
            assert purge_stale_cautions.run(days=30) == {"deleted": 7}

    def test_purge_failure_is_retried(self):
        """Test a failed retention sweep triggers a retry."""
        error = RetentionSweepError("locked", retention_days=90)
        with (
            patch(
                "caution_feed.workers.feeds._purge_stale_cautions_async",
                new=AsyncMock(side_effect=error),
            ),
            pytest.raises(RetentionSweepError),
        ):
            purge_stale_cautions.run()


class TestBeatSchedule:
    """Tests for the Celery beat configuration."""

    def test_schedule_entries(self):
        """Test both sweeps are scheduled."""
        schedule = celery_app.conf.beat_schedule

        assert schedule["poll-feed-sources"]["task"] == (
            "caution_feed.workers.feeds.poll_feed_sources"
        )
        assert schedule["purge-stale-cautions"]["task"] == (
            "caution_feed.workers.feeds.purge_stale_cautions"
        )

    def test_schedule_intervals_follow_settings(self):
        """Test sweep cadences come from the feed settings."""
        config = get_config()
        schedule = celery_app.conf.beat_schedule

        assert schedule["poll-feed-sources"]["schedule"] == timedelta(
            seconds=config.feed_poll_sweep_seconds
        )
        assert schedule["poll-feed-sources"]["options"]["expires"] == (
            config.feed_poll_sweep_seconds
        )
        assert schedule["purge-stale-cautions"]["schedule"] == timedelta(
            hours=config.feed_retention_sweep_hours
        )
