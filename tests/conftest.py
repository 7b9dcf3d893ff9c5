"""Pytest configuration and fixtures.

This module provides common fixtures used across all tests. Database
tests run against a throwaway SQLite file per test.
"""

import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
import structlog
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from caution_feed.core.config import Config
from caution_feed.core.database import create_engine, create_session_factory, init_db
from caution_feed.core.logging import setup_logging
from caution_feed.infrastructure.http_client import HTTPClient
from caution_feed.models.caution_item import CautionItem, Severity
from caution_feed.models.source import CautionCategory, FeedSource
from caution_feed.services.feeds.base import FeedSourceInfo

# Setup logging for tests
setup_logging()


@pytest.fixture(autouse=True)
def _uncached_loggers() -> None:
    """Keep structlog loggers uncached so capture_logs sees every logger.

    Cached module-level loggers keep the processor chain from the first
    configuration, which breaks capture_logs after setup_logging re-runs.
    """
    structlog.configure(cache_logger_on_first_use=False)


class FakeClock:
    """Manually advanced clock for deterministic scheduling tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 15, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock starting at a fixed instant."""
    return FakeClock()


@pytest_asyncio.fixture
async def db_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a SQLite engine with all tables.

    Yields:
        Async engine bound to a temporary database file
    """
    config = Config(database_url=f"sqlite+aiosqlite:///{tmp_path / 'caution_feed.db'}")
    engine = create_engine(config)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to the test engine."""
    return create_session_factory(db_engine)


@pytest.fixture
def make_source(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[FeedSourceInfo]]:
    """Factory fixture that stores a FeedSource and returns its snapshot."""

    async def _make_source(
        name: str = "Test Feed",
        url: str | None = None,
        category: CautionCategory = CautionCategory.GENERAL_SECURITY,
        personas: list[str] | None = None,
        poll_interval_ms: int = 3_600_000,
        is_active: bool = True,
        last_fetched_at: datetime | None = None,
        source_label: str | None = None,
    ) -> FeedSourceInfo:
        source = FeedSource(
            name=name,
            url=url or f"https://feeds.example.com/{uuid.uuid4().hex}.xml",
            category=category,
            personas=personas if personas is not None else ["general"],
            poll_interval_ms=poll_interval_ms,
            is_active=is_active,
            last_fetched_at=last_fetched_at,
            source_label=source_label or name,
        )
        async with session_factory() as session:
            session.add(source)
            await session.commit()
            return FeedSourceInfo.model_validate(source)

    return _make_source


@pytest.fixture
def mock_http_client() -> HTTPClient:
    """Create a mock HTTP client."""
    client = MagicMock(spec=HTTPClient)
    client.get = AsyncMock()
    client.close = AsyncMock()
    return client


@pytest.fixture
def anyio_backend() -> str:
    """Specify backend for anyio.

    Returns:
        Backend name
    """
    return "asyncio"


@pytest.fixture
def make_feed_response() -> Callable[..., MagicMock]:
    """Factory fixture for mock HTTP responses carrying a feed body."""

    def _make_feed_response(body: str | bytes = b"", status_code: int = 200) -> MagicMock:
        response = MagicMock()
        response.status_code = status_code
        response.raise_for_status = MagicMock()
        response.content = body.encode() if isinstance(body, str) else body
        return response

    return _make_feed_response


@pytest.fixture
def broken_session_factory() -> MagicMock:
    """Session factory whose every session fails as if the database were down."""
    return MagicMock(
        side_effect=OperationalError("SELECT 1", {}, ConnectionRefusedError("database is down"))
    )


@pytest.fixture
def make_item(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[uuid.UUID]]:
    """Factory fixture that stores a CautionItem for a source and returns its id."""

    async def _make_item(
        source: FeedSourceInfo,
        published_date: datetime,
        link: str | None = None,
        title: str = "Test caution",
        severity: Severity = Severity.MEDIUM,
        category: CautionCategory | None = None,
        personas: list[str] | None = None,
        is_active: bool = True,
    ) -> uuid.UUID:
        item = CautionItem(
            source_id=source.id,
            title=title,
            description="",
            category=category or source.category,
            severity=severity,
            published_date=published_date,
            link=link or f"https://example.com/items/{uuid.uuid4().hex}",
            source_name=source.source_label,
            source_url=source.url,
            tags=[],
            is_active=is_active,
        )
        item.set_personas(personas if personas is not None else list(source.personas))
        async with session_factory() as session:
            session.add(item)
            await session.commit()
            return item.id

    return _make_item
