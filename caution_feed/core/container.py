"""Dependency Injection Container.

This module provides a centralized DI container using dependency-injector.
Lifecycles:
- Singleton: One instance for the entire application (engine, HTTP client,
  scheduler)
- Factory: New instance every time (stateless services)

Usage:
    # In FastAPI
    from caution_feed.core.container import container

    @router.get("/")
    async def endpoint(store: FeedReadStore = Depends(get_read_store)):
        ...

    # In Celery
    from caution_feed.core.container import TaskScope

    with TaskScope() as scope:
        scheduler = scope.feed_scheduler()
        ...

    # In tests
    with container.services.feed_read_store.override(mock_store):
        ...
"""

from dependency_injector import containers, providers

from caution_feed.config.scheduling import RetentionConfig, SchedulerConfig
from caution_feed.core.config import Config, get_config
from caution_feed.core.database import create_engine, create_session_factory


class InfrastructureContainer(containers.DeclarativeContainer):
    """Infrastructure layer dependencies (database, HTTP client)."""

    global_config = providers.Dependency(instance_of=Config)

    # ============================================
    # Database
    # ============================================

    db_engine = providers.Singleton(
        create_engine,
        config=global_config,
    )

    db_session_factory = providers.Singleton(
        create_session_factory,
        engine=db_engine,
    )

    # ============================================
    # HTTP Client
    # ============================================

    http_client = providers.Singleton(
        "caution_feed.infrastructure.http_client.HTTPClient",
        timeout=global_config.provided.feed_fetch_timeout,
        user_agent=global_config.provided.feed_user_agent,
    )


class ConfigContainer(containers.DeclarativeContainer):
    """Configuration models container.

    Provides typed Pydantic config models for services, built once from
    the environment settings.
    """

    global_config = providers.Dependency(instance_of=Config)

    scheduler_config = providers.Singleton(
        SchedulerConfig.from_settings,
        config=global_config,
    )

    retention_config = providers.Singleton(
        RetentionConfig.from_settings,
        config=global_config,
    )


class ServiceContainer(containers.DeclarativeContainer):
    """Service layer dependencies.

    Services receive infrastructure dependencies via injection. The
    scheduler is a Singleton because it owns the in-flight set.
    """

    global_config = providers.Dependency(instance_of=Config)
    infrastructure = providers.DependenciesContainer()
    configs = providers.DependenciesContainer()

    # ============================================
    # Feed Pipeline
    # ============================================

    source_registry = providers.Factory(
        "caution_feed.services.feeds.registry.SourceRegistry",
        db_session_factory=infrastructure.db_session_factory,
    )

    feed_fetcher = providers.Factory(
        "caution_feed.services.feeds.fetcher.FeedFetcher",
        http_client=infrastructure.http_client,
        timeout=global_config.provided.feed_fetch_timeout,
    )

    caution_ingester = providers.Factory(
        "caution_feed.services.feeds.ingester.DeduplicatingIngester",
        db_session_factory=infrastructure.db_session_factory,
        known_personas=global_config.provided.known_personas,
    )

    retention_sweeper = providers.Factory(
        "caution_feed.services.feeds.retention.RetentionSweeper",
        db_session_factory=infrastructure.db_session_factory,
        config=configs.retention_config,
    )

    feed_scheduler = providers.Singleton(
        "caution_feed.services.feeds.scheduler.FeedScheduler",
        registry=source_registry,
        fetcher=feed_fetcher,
        ingester=caution_ingester,
        sweeper=retention_sweeper,
        config=configs.scheduler_config,
    )

    # ============================================
    # Read Path
    # ============================================

    feed_read_store = providers.Factory(
        "caution_feed.services.feeds.read_store.FeedReadStore",
        db_session_factory=infrastructure.db_session_factory,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Root application container.

    Composes all sub-containers and provides the main entry point.
    """

    # Uses get_config() to ensure same instance across the app
    config = providers.Singleton(get_config)

    infrastructure = providers.Container(
        InfrastructureContainer,
        global_config=config,
    )

    configs = providers.Container(
        ConfigContainer,
        global_config=config,
    )

    services = providers.Container(
        ServiceContainer,
        global_config=config,
        infrastructure=infrastructure,
        configs=configs,
    )

    # ============================================
    # Convenience accessors (shortcuts)
    # ============================================

    http_client = providers.Singleton(
        lambda client: client,
        client=infrastructure.http_client,
    )

    feed_scheduler = providers.Singleton(
        lambda svc: svc,
        svc=services.feed_scheduler,
    )

    read_store = providers.Factory(
        lambda svc: svc,
        svc=services.feed_read_store,
    )


def create_container() -> ApplicationContainer:
    """Create and configure the application container.

    Returns:
        Configured ApplicationContainer instance
    """
    return ApplicationContainer()


# Global container instance
container = create_container()


def get_container() -> ApplicationContainer:
    """Get the global container (for FastAPI Depends)."""
    return container


# ============================================
# Celery Integration
# ============================================


class TaskScope:
    """Context manager for Celery task scope.

    Each Celery task runs its own event loop via asyncio.run(), so the
    engine and HTTP client singletons, which are bound to a loop, are
    reset when the scope exits.

    Usage:
        @shared_task
        def my_task():
            with TaskScope() as scope:
                scheduler = scope.feed_scheduler()
                ...
    """

    def __init__(self) -> None:
        self._container: ApplicationContainer | None = None

    def __enter__(self) -> ApplicationContainer:
        self._container = container
        return self._container

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        container.reset_singletons()
        self._container = None
        return None


# ============================================
# Testing Utilities
# ============================================


def override_session_factory(session_factory):
    """Context manager to override the DB session factory for testing.

    Usage:
        with override_session_factory(test_factory):
            # All services built from the container use test_factory
            ...
    """
    return container.infrastructure.db_session_factory.override(session_factory)


def override_http_client(mock_client):
    """Context manager to override the feed HTTP client for testing."""
    return container.infrastructure.http_client.override(mock_client)


__all__ = [
    "ApplicationContainer",
    "ConfigContainer",
    "InfrastructureContainer",
    "ServiceContainer",
    "TaskScope",
    "container",
    "create_container",
    "get_config",
    "get_container",
    "override_http_client",
    "override_session_factory",
]
