"""Unit tests for the retention sweeper."""

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from caution_feed.config.scheduling import RetentionConfig
from caution_feed.core.exceptions import RetentionSweepError
from caution_feed.models.caution_item import CautionItem, CautionItemPersona
from caution_feed.services.feeds.retention import RetentionSweeper


@pytest.fixture
def sweeper(session_factory, clock) -> RetentionSweeper:
    """Create a sweeper with a 90-day horizon."""
    return RetentionSweeper(
        db_session_factory=session_factory,
        config=RetentionConfig(retention_days=90),
        clock=clock,
    )


async def count_rows(session_factory, model) -> int:
    async with session_factory() as session:
        return await session.scalar(select(func.count()).select_from(model))


@pytest.mark.asyncio
async def test_purge_respects_horizon(sweeper, session_factory, make_source, make_item, clock):
    """Test only items older than the horizon are deleted."""
    source = await make_source(personas=["senior", "general"])
    now = clock()
    await make_item(source, now - timedelta(days=91))
    await make_item(source, now - timedelta(days=90, hours=1))
    kept_inside = await make_item(source, now - timedelta(days=89, hours=23))
    kept_recent = await make_item(source, now - timedelta(days=1))

    deleted = await sweeper.purge_older_than()

    assert deleted == 2
    async with session_factory() as session:
        remaining = set((await session.execute(select(CautionItem.id))).scalars().all())
    assert remaining == {kept_inside, kept_recent}
    assert await count_rows(session_factory, CautionItemPersona) == 4


@pytest.mark.asyncio
async def test_purge_explicit_days(sweeper, session_factory, make_source, make_item, clock):
    """Test an explicit horizon overrides the configured one."""
    source = await make_source()
    await make_item(source, clock() - timedelta(days=8))
    await make_item(source, clock() - timedelta(days=6))

    assert await sweeper.purge_older_than(7) == 1
    assert await count_rows(session_factory, CautionItem) == 1


@pytest.mark.asyncio
async def test_purge_nothing_stale(sweeper, make_source, make_item, clock):
    """Test a sweep with nothing to delete returns zero."""
    source = await make_source()
    await make_item(source, clock())

    assert await sweeper.purge_older_than() == 0


@pytest.mark.asyncio
async def test_purge_store_failure(broken_session_factory):
    """Test store failures are raised as RetentionSweepError."""
    sweeper = RetentionSweeper(db_session_factory=broken_session_factory)

    with pytest.raises(RetentionSweepError) as exc_info:
        await sweeper.purge_older_than(30)

    assert exc_info.value.retention_days == 30
