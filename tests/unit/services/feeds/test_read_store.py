"""Unit tests for the feed read store."""

import uuid
from datetime import timedelta

import pytest

from caution_feed.core.exceptions import RecordNotFoundError, StoreUnavailableError
from caution_feed.models.caution_item import Severity
from caution_feed.models.source import CautionCategory
from caution_feed.services.feeds.read_store import FeedReadStore


@pytest.fixture
def store(session_factory, clock) -> FeedReadStore:
    """Create a read store with a fixed clock."""
    return FeedReadStore(db_session_factory=session_factory, clock=clock)


class TestQuery:
    """Tests for FeedReadStore.query()."""

    @pytest.mark.asyncio
    async def test_persona_isolation(self, store, make_source, make_item, clock):
        """Test items are only visible to personas they carry."""
        seniors = await make_source(name="Seniors", personas=["senior"])
        parents = await make_source(name="Parents", personas=["parent", "general"])
        senior_item = await make_item(seniors, clock())
        parent_item = await make_item(parents, clock())

        senior_page = await store.query("senior", limit=10)
        general_page = await store.query("general", limit=10)
        teen_page = await store.query("teen", limit=10)

        assert [i.id for i in senior_page.items] == [senior_item]
        assert [i.id for i in general_page.items] == [parent_item]
        assert general_page.items[0].personas == ["parent", "general"]
        assert teen_page.total == 0
        assert teen_page.items == []

    @pytest.mark.asyncio
    async def test_newest_first_and_inactive_hidden(self, store, make_source, make_item, clock):
        """Test ordering by published date and that inactive items are excluded."""
        source = await make_source()
        old = await make_item(source, clock() - timedelta(days=3))
        new = await make_item(source, clock() - timedelta(hours=1))
        await make_item(source, clock(), is_active=False)

        page = await store.query("general", limit=10)

        assert [i.id for i in page.items] == [new, old]
        assert page.total == 2

    @pytest.mark.asyncio
    async def test_pagination_covers_every_item_once(self, store, make_source, make_item, clock):
        """Test paging with identical timestamps neither skips nor repeats items."""
        source = await make_source()
        same_instant = clock() - timedelta(hours=2)
        expected = {await make_item(source, same_instant) for _ in range(7)}

        seen: list[uuid.UUID] = []
        for offset in range(0, 9, 3):
            page = await store.query("general", limit=3, offset=offset)
            assert page.total == 7
            seen.extend(i.id for i in page.items)

        assert len(seen) == 7
        assert set(seen) == expected

    @pytest.mark.asyncio
    async def test_offset_past_end(self, store, make_source, make_item, clock):
        """Test an offset past the end returns an empty page with the full total."""
        source = await make_source()
        await make_item(source, clock())

        page = await store.query("general", limit=5, offset=10)

        assert page.items == []
        assert page.total == 1

    @pytest.mark.asyncio
    async def test_filters(self, store, make_source, make_item, clock):
        """Test category, severity and date filters narrow the result."""
        source = await make_source(category=CautionCategory.PHISHING)
        match = await make_item(
            source, clock() - timedelta(days=1), severity=Severity.CRITICAL
        )
        await make_item(source, clock() - timedelta(days=1), severity=Severity.LOW)
        await make_item(source, clock() - timedelta(days=30), severity=Severity.CRITICAL)
        await make_item(
            source,
            clock() - timedelta(days=1),
            severity=Severity.CRITICAL,
            category=CautionCategory.SCAMS,
        )

        page = await store.query(
            "general",
            limit=10,
            category=CautionCategory.PHISHING,
            severity=Severity.CRITICAL,
            published_after=clock() - timedelta(days=7),
        )

        assert [i.id for i in page.items] == [match]
        assert page.total == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("limit", "offset"), [(0, 0), (10, -1)])
    async def test_invalid_paging(self, store, limit, offset):
        """Test out-of-range limit and offset are rejected."""
        with pytest.raises(ValueError):
            await store.query("general", limit=limit, offset=offset)

    @pytest.mark.asyncio
    async def test_store_unavailable(self, broken_session_factory):
        """Test store failures are raised as StoreUnavailableError."""
        store = FeedReadStore(db_session_factory=broken_session_factory)

        with pytest.raises(StoreUnavailableError):
            await store.query("general", limit=10)


class TestStats:
    """Tests for persona statistics."""

    @pytest.mark.asyncio
    async def test_stats_by_persona(self, store, make_source, make_item, clock):
        """Test breakdowns and counts cover only the persona's active items."""
        phishing = await make_source(
            name="Phish", category=CautionCategory.PHISHING, personas=["senior"]
        )
        scams = await make_source(name="Scams", category=CautionCategory.SCAMS, personas=["senior"])
        other = await make_source(name="Teens", personas=["teen"])

        await make_item(phishing, clock() - timedelta(days=1), severity=Severity.CRITICAL)
        await make_item(phishing, clock() - timedelta(days=10), severity=Severity.HIGH)
        await make_item(scams, clock() - timedelta(days=2), severity=Severity.CRITICAL)
        await make_item(scams, clock(), severity=Severity.LOW, is_active=False)
        await make_item(other, clock(), severity=Severity.MEDIUM)

        stats = await store.stats_by_persona("senior")

        assert stats.by_severity == {"critical": 2, "high": 1}
        assert stats.by_category == {"phishing": 2, "scams": 1}
        assert stats.recent_count == 2
        assert stats.total_active == 3

    @pytest.mark.asyncio
    async def test_stats_empty(self, store):
        """Test an unknown persona has empty statistics."""
        stats = await store.stats_by_persona("nobody")

        assert stats.by_severity == {}
        assert stats.total_active == 0


class TestItems:
    """Tests for item lookups and updates."""

    @pytest.mark.asyncio
    async def test_view_count(self, store, make_source, make_item, clock):
        """Test each detail view increments the counter."""
        source = await make_source()
        item_id = await make_item(source, clock())

        await store.increment_view_count(item_id)
        await store.increment_view_count(item_id)
        view = await store.get_item(item_id)

        assert view.view_count == 2
        assert view.source.name == source.source_label

    @pytest.mark.asyncio
    async def test_missing_item(self, store):
        """Test unknown ids raise RecordNotFoundError."""
        missing = uuid.uuid4()

        with pytest.raises(RecordNotFoundError):
            await store.increment_view_count(missing)
        with pytest.raises(RecordNotFoundError):
            await store.get_item(missing)
        with pytest.raises(RecordNotFoundError):
            await store.set_item_active(missing, False)

    @pytest.mark.asyncio
    async def test_deactivated_item_still_readable(self, store, make_source, make_item, clock):
        """Test deactivation hides an item from the feed but not from direct lookup."""
        source = await make_source()
        item_id = await make_item(source, clock())

        await store.set_item_active(item_id, False)

        assert (await store.query("general", limit=10)).total == 0
        assert (await store.get_item(item_id)).id == item_id

    @pytest.mark.asyncio
    async def test_list_categories(self, store, make_source, make_item, clock):
        """Test only categories of active items are listed, sorted by value."""
        scams = await make_source(name="Scams", category=CautionCategory.SCAMS)
        breach = await make_source(name="Breach", category=CautionCategory.DATA_BREACH)
        privacy = await make_source(name="Privacy", category=CautionCategory.PRIVACY_LAWS)
        await make_item(scams, clock())
        await make_item(scams, clock())
        await make_item(breach, clock())
        await make_item(privacy, clock(), is_active=False)

        assert await store.list_categories() == [
            CautionCategory.DATA_BREACH,
            CautionCategory.SCAMS,
        ]
