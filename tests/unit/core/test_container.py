"""Unit tests for Dependency Injection Container.

Tests cover:
- Container initialization and sub-container composition
- Provider lifecycles (Singleton, Factory)
- Testing utilities (overrides)
"""

from unittest.mock import MagicMock

import pytest

from caution_feed.config.scheduling import RetentionConfig, SchedulerConfig
from caution_feed.core.container import (
    TaskScope,
    container,
    create_container,
    get_container,
    override_http_client,
    override_session_factory,
)
from caution_feed.services.feeds.fetcher import FeedFetcher
from caution_feed.services.feeds.ingester import DeduplicatingIngester
from caution_feed.services.feeds.read_store import FeedReadStore
from caution_feed.services.feeds.registry import SourceRegistry
from caution_feed.services.feeds.scheduler import FeedScheduler


class TestContainerCreation:
    """Tests for container creation and configuration."""

    @pytest.mark.unit
    def test_create_container_returns_container_with_providers(self) -> None:
        """Test that create_container returns a container with expected providers."""
        new_container = create_container()
        assert hasattr(new_container, "config")
        assert hasattr(new_container, "infrastructure")
        assert hasattr(new_container, "configs")
        assert hasattr(new_container, "services")

    @pytest.mark.unit
    def test_get_container_returns_global(self) -> None:
        """Test that get_container returns the global container."""
        assert get_container() is container


class TestConfigContainer:
    """Tests for ConfigContainer."""

    @pytest.mark.unit
    def test_typed_configs_built_from_settings(self) -> None:
        """Scheduler and retention configs mirror the settings."""
        new_container = create_container()
        settings = new_container.config()

        scheduler_config = new_container.configs.scheduler_config()
        retention_config = new_container.configs.retention_config()

        assert isinstance(scheduler_config, SchedulerConfig)
        assert scheduler_config.poll_sweep_seconds == settings.feed_poll_sweep_seconds
        assert isinstance(retention_config, RetentionConfig)
        assert retention_config.retention_days == settings.feed_retention_days


class TestServiceContainer:
    """Tests for ServiceContainer wiring."""

    @pytest.mark.unit
    def test_services_resolve_with_overridden_infrastructure(self, session_factory) -> None:
        """Services resolve against overridden session factory and HTTP client."""
        new_container = create_container()
        http_client = MagicMock()

        with (
            new_container.infrastructure.db_session_factory.override(session_factory),
            new_container.infrastructure.http_client.override(http_client),
        ):
            registry = new_container.services.source_registry()
            fetcher = new_container.services.feed_fetcher()
            ingester = new_container.services.caution_ingester()
            store = new_container.services.feed_read_store()

        assert isinstance(registry, SourceRegistry)
        assert registry.db_session_factory is session_factory
        assert isinstance(fetcher, FeedFetcher)
        assert fetcher.http_client is http_client
        assert isinstance(ingester, DeduplicatingIngester)
        assert "senior" in ingester.known_personas
        assert isinstance(store, FeedReadStore)

    @pytest.mark.unit
    def test_scheduler_is_singleton(self, session_factory) -> None:
        """The scheduler owns in-flight state, so one instance is shared."""
        new_container = create_container()

        with (
            new_container.infrastructure.db_session_factory.override(session_factory),
            new_container.infrastructure.http_client.override(MagicMock()),
        ):
            first = new_container.feed_scheduler()
            second = new_container.feed_scheduler()

        assert isinstance(first, FeedScheduler)
        assert first is second


class TestTestingUtilities:
    """Tests for override helpers and TaskScope."""

    @pytest.mark.unit
    def test_override_session_factory(self, session_factory) -> None:
        """override_session_factory swaps the global factory."""
        with override_session_factory(session_factory):
            assert container.infrastructure.db_session_factory() is session_factory

    @pytest.mark.unit
    def test_override_http_client(self) -> None:
        """override_http_client swaps the global HTTP client."""
        mock_client = MagicMock()
        with override_http_client(mock_client):
            assert container.infrastructure.http_client() is mock_client

    @pytest.mark.unit
    def test_task_scope_returns_global_container(self) -> None:
        """TaskScope yields the global container."""
        with TaskScope() as scope:
            assert scope is container
